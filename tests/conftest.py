"""Shared test fixtures for entityforge."""

from collections.abc import Generator
from pathlib import Path

import pytest
from sqlalchemy import (
    BigInteger,
    Column as SAColumn,
    ForeignKey as SAForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table as SATable,
    create_engine,
)

from entityforge.core.types import SqlType
from entityforge.metadata.builder import MetadataBuilder
from entityforge.metadata.models import EntityField, EntityMetadata
from entityforge.schema.models import Column, ForeignKey, RawTable, Table, resolve_foreign_keys


def _id_column() -> Column:
    return Column(name="id", sql_type=SqlType.BIGINT, nullable=False, auto_increment=True)


@pytest.fixture
def users_table() -> Table:
    """users(id PK, name VARCHAR NOT NULL, email VARCHAR UNIQUE NOT NULL)."""
    raw = RawTable(
        name="users",
        columns=(
            _id_column(),
            Column(name="name", sql_type=SqlType.VARCHAR, size=100, nullable=False),
            Column(name="email", sql_type=SqlType.VARCHAR, size=255, nullable=False),
        ),
        primary_key_columns=("id",),
    )
    return raw.with_foreign_keys(())


@pytest.fixture
def library_tables() -> list[Table]:
    """authors + books, where books.author_id references authors.id."""
    authors = RawTable(
        name="authors",
        columns=(
            _id_column(),
            Column(name="full_name", sql_type=SqlType.VARCHAR, size=200, nullable=False),
        ),
        primary_key_columns=("id",),
    )
    books = RawTable(
        name="books",
        columns=(
            _id_column(),
            Column(name="title", sql_type=SqlType.VARCHAR, size=150, nullable=False),
            Column(name="price", sql_type=SqlType.DECIMAL, size=10, decimal_digits=2),
            Column(name="author_id", sql_type=SqlType.BIGINT, nullable=False),
        ),
        primary_key_columns=("id",),
    )
    return resolve_foreign_keys(
        [authors, books],
        {"books": [ForeignKey(column_name="author_id", referenced_table="authors")]},
    )


@pytest.fixture
def books_table(library_tables: list[Table]) -> Table:
    return library_tables[1]


@pytest.fixture
def builder() -> MetadataBuilder:
    return MetadataBuilder("com.example.library")


@pytest.fixture
def user_metadata(users_table: Table) -> EntityMetadata:
    return MetadataBuilder("com.example.shop").build_from_schema(users_table, [users_table])


@pytest.fixture
def book_metadata(builder: MetadataBuilder, library_tables: list[Table]) -> EntityMetadata:
    return builder.build_all(library_tables)[1]


@pytest.fixture
def order_v1() -> EntityMetadata:
    """Order snapshot with a String status column."""
    return EntityMetadata(
        class_name="Order",
        package_name="com.example.shop.entity",
        table_name="orders",
        id_type="Long",
        base_package="com.example.shop",
        fields=(
            EntityField(name="id", type="Long", nullable=False, is_id=True),
            EntityField(name="total", type="java.math.BigDecimal", nullable=False),
            EntityField(name="status", type="String"),
        ),
    )


@pytest.fixture
def order_v2(order_v1: EntityMetadata) -> EntityMetadata:
    """Order snapshot where status was replaced by a non-null Int state."""
    fields = [f for f in order_v1.fields if f.name != "status"]
    fields.append(EntityField(name="state", type="Int", nullable=False))
    return order_v1.model_copy(update={"fields": tuple(fields)})


@pytest.fixture
def sqlite_url(tmp_path: Path) -> Generator[str, None, None]:
    """SQLite database file with authors, books and users tables."""
    db_path = tmp_path / "library.db"
    url = f"sqlite:///{db_path}"

    metadata = MetaData()
    SATable(
        "authors",
        metadata,
        SAColumn("id", Integer, primary_key=True),
        SAColumn("full_name", String(200), nullable=False),
    )
    SATable(
        "books",
        metadata,
        SAColumn("id", Integer, primary_key=True),
        SAColumn("title", String(150), nullable=False),
        SAColumn("price", Numeric(10, 2)),
        SAColumn("author_id", Integer, SAForeignKey("authors.id"), nullable=False),
    )
    SATable(
        "users",
        metadata,
        SAColumn("id", BigInteger, primary_key=True),
        SAColumn("name", String(100), nullable=False),
        SAColumn("email", String(255), nullable=False, unique=True),
    )

    engine = create_engine(url)
    metadata.create_all(engine)
    engine.dispose()

    yield url

    if db_path.exists():
        db_path.unlink()
