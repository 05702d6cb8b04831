"""Tests for schema diffing and migration rendering."""

from datetime import UTC, datetime

import pytest

from entityforge.core.types import MigrationDialect, RelationshipKind
from entityforge.evolution.delta import (
    AddColumn,
    AddForeignKey,
    AlterColumn,
    DropColumn,
    DropForeignKey,
    RenameTable,
    SchemaDelta,
    diff,
)
from entityforge.evolution.detection import detect_dialect
from entityforge.evolution.dialects import (
    MigrationScript,
    VersionClock,
    generate_version,
    get_renderer,
    render,
    render_create_table,
    supported_dialects,
)
from entityforge.exceptions import InvalidMetadataError, UnsupportedDialectError
from entityforge.metadata.models import EntityField

FIXED = datetime(2026, 3, 14, 9, 26, 53, tzinfo=UTC)


def _with_fields(metadata, *fields):
    return metadata.model_copy(update={"fields": tuple(fields)})


class TestDiff:
    """Tests for diff()."""

    def test_identical_snapshots(self, order_v1):
        """A snapshot diffed against itself has no changes."""
        assert diff(order_v1, order_v1) is None

    def test_status_replaced_by_state(self, order_v1, order_v2):
        """Removing status and adding state gives drop then add."""
        delta = diff(order_v1, order_v2)

        assert delta is not None
        assert delta.table_name == "orders"
        assert list(delta.operations) == [
            DropColumn("status"),
            AddColumn("state", "INT", nullable=False),
        ]
        assert delta.is_destructive

    def test_deterministic(self, order_v1, order_v2):
        """Equal inputs give equal deltas."""
        assert diff(order_v1, order_v2) == diff(order_v1, order_v2)

    def test_add_only_is_not_destructive(self, order_v1):
        """Adding a nullable column is a safe change."""
        new = _with_fields(order_v1, *order_v1.fields, EntityField(name="note", type="String", length=500))
        delta = diff(order_v1, new)

        assert delta.operations == (AddColumn("note", "VARCHAR(500)", nullable=True),)
        assert not delta.is_destructive

    def test_alter_type_and_nullability(self, order_v1):
        """Type or nullability changes become one AlterColumn."""
        fields = [
            f.model_copy(update={"nullable": True}) if f.name == "total" else f
            for f in order_v1.fields
        ]
        delta = diff(order_v1, _with_fields(order_v1, *fields))

        (op,) = delta.operations
        assert isinstance(op, AlterColumn)
        assert op.name == "total"
        assert op.new_nullable is True
        assert op.old_nullable is False
        assert op.nullability_changed
        assert not op.type_changed

    def test_column_rename_is_drop_and_add(self, order_v1):
        """Column renames are never inferred."""
        fields = [
            f.model_copy(update={"name": "orderStatus"}) if f.name == "status" else f
            for f in order_v1.fields
        ]
        delta = diff(order_v1, _with_fields(order_v1, *fields))

        assert [op.kind for op in delta.operations] == ["drop_column", "add_column"]
        assert delta.operations[1].name == "order_status"

    def test_table_rename_first(self, order_v1, order_v2):
        """A table rename precedes column changes and later ops use the new name."""
        renamed = order_v2.model_copy(update={"table_name": "purchase_orders"})
        delta = diff(order_v1, renamed)

        assert delta.operations[0] == RenameTable("orders", "purchase_orders")
        assert delta.table_name == "purchase_orders"
        assert delta.old_table_name == "orders"

    def test_foreign_key_added(self, order_v1):
        """A new owning relationship adds its column and then its constraint."""
        customer = EntityField(
            name="customer",
            type="Customer",
            target_entity="Customer",
            relationship=RelationshipKind.MANY_TO_ONE,
            nullable=False,
        )
        delta = diff(order_v1, _with_fields(order_v1, *order_v1.fields, customer))

        assert list(delta.operations) == [
            AddColumn("customer_id", "BIGINT", nullable=False),
            AddForeignKey("customer_id", "customer", "id", "fk_orders_customer_id"),
        ]

    def test_foreign_key_removed(self, order_v1):
        """Dropping an owning relationship drops the constraint before the column."""
        customer = EntityField(
            name="customer",
            type="Customer",
            target_entity="Customer",
            relationship=RelationshipKind.MANY_TO_ONE,
        )
        old = _with_fields(order_v1, *order_v1.fields, customer)
        delta = diff(old, order_v1)

        assert list(delta.operations) == [
            DropForeignKey("customer_id", "fk_orders_customer_id"),
            DropColumn("customer_id"),
        ]

    def test_collection_fields_ignored(self, order_v1):
        """Inverse collections have no column of their own."""
        lines = EntityField(
            name="lines",
            type="OrderLine",
            target_entity="OrderLine",
            relationship=RelationshipKind.ONE_TO_MANY,
        )
        assert diff(order_v1, _with_fields(order_v1, *order_v1.fields, lines)) is None

    def test_language_type_change(self, order_v1):
        """Changing a field to a binary type alters the column."""
        fields = [
            f.model_copy(update={"type": "java.sql.Blob"}) if f.name == "status" else f
            for f in order_v1.fields
        ]
        delta = diff(order_v1, _with_fields(order_v1, *fields))

        assert delta.operations == (
            AlterColumn("status", "BLOB", True, old_type="VARCHAR(255)", old_nullable=True),
        )

    def test_same_ddl_different_language_type(self, order_v1):
        """Types that share a DDL type still count as a change."""
        created = EntityField(name="createdAt", type="java.time.LocalDateTime")
        instant = created.model_copy(update={"type": "java.time.Instant"})
        old = _with_fields(order_v1, *order_v1.fields, created)
        delta = diff(old, _with_fields(order_v1, *order_v1.fields, instant))

        (op,) = delta.operations
        assert op.name == "created_at"
        assert op.new_type == op.old_type == "TIMESTAMP"
        content = render(delta, "liquibase", "1").content
        assert '<modifyDataType tableName="orders" columnName="created_at" newDataType="TIMESTAMP"/>' in content

    def test_java_and_kotlin_names_are_equal(self, order_v1):
        """Integer and Int describe the same column."""
        java = EntityField(name="quantity", type="Integer")
        kotlin = java.model_copy(update={"type": "Int"})
        old = _with_fields(order_v1, *order_v1.fields, java)
        assert diff(old, _with_fields(order_v1, *order_v1.fields, kotlin)) is None

    def test_text_column_definition(self, order_v1):
        """A TEXT column is added as TEXT, not VARCHAR."""
        notes = EntityField(name="notes", type="String", column_definition="TEXT")
        delta = diff(order_v1, _with_fields(order_v1, *order_v1.fields, notes))
        assert delta.operations == (AddColumn("notes", "TEXT", nullable=True),)

    def test_foreign_key_retargeted(self, order_v1):
        """Pointing a relationship at another table drops then re-adds its constraint."""
        customer = EntityField(
            name="customer",
            type="Customer",
            target_entity="Customer",
            relationship=RelationshipKind.MANY_TO_ONE,
            referenced_table="customers",
        )
        account = customer.model_copy(update={"referenced_table": "accounts", "referenced_column": "uid"})
        old = _with_fields(order_v1, *order_v1.fields, customer)
        delta = diff(old, _with_fields(order_v1, *order_v1.fields, account))

        assert list(delta.operations) == [
            DropForeignKey("customer_id", "fk_orders_customer_id"),
            AddForeignKey("customer_id", "accounts", "uid", "fk_orders_customer_id"),
        ]
        assert delta.is_destructive

        content = render(delta, "flyway", "V1").content
        drop = content.index("ALTER TABLE orders DROP CONSTRAINT fk_orders_customer_id;")
        add = content.index("REFERENCES accounts (uid);")
        assert drop < add

    @pytest.mark.parametrize("side", ["old", "new"])
    def test_missing_table_name(self, order_v1, order_v2, side):
        """Snapshots without a table name are rejected before diffing."""
        snapshots = {"old": order_v1, "new": order_v2}
        snapshots[side] = snapshots[side].model_copy(update={"table_name": ""})
        with pytest.raises(InvalidMetadataError) as exc_info:
            diff(snapshots["old"], snapshots["new"])
        assert exc_info.value.attribute == "table_name"

    def test_to_dict(self, order_v1, order_v2):
        """Deltas serialize with the operation kind inline."""
        data = diff(order_v1, order_v2).to_dict()
        assert data["destructive"] is True
        assert data["operations"][0] == {"op": "drop_column", "name": "status"}
        assert data["operations"][1]["op"] == "add_column"


class TestFlyway:
    """Tests for the Flyway dialect."""

    def test_scenario_script(self, order_v1, order_v2):
        """The script drops status before adding the non-null state column."""
        script = render(diff(order_v1, order_v2), MigrationDialect.FLYWAY, "V20260314092653")

        content = script.content
        drop = content.index("ALTER TABLE orders DROP COLUMN status;")
        add = content.index("ALTER TABLE orders ADD COLUMN state INT NOT NULL;")
        assert drop < add
        assert content.startswith("-- V20260314092653: update orders")
        assert script.destructive

    def test_file_name_and_path(self, order_v1, order_v2):
        """Flyway files are V{version}__{slug}.sql under db/migration."""
        script = render(diff(order_v1, order_v2), "flyway", "V20260314092653")
        assert script.file_name == "V20260314092653__update_orders.sql"
        assert script.path == "src/main/resources/db/migration/V20260314092653__update_orders.sql"

    def test_empty_delta(self):
        """An empty delta renders a valid no-op script."""
        script = render(SchemaDelta("orders"), "flyway", "V1")
        assert "-- No schema changes" in script.content
        assert "ALTER" not in script.content
        assert not script.destructive

    def test_rename_and_foreign_key(self):
        """Rename and constraint statements use the expected syntax."""
        delta = SchemaDelta(
            "purchase_orders",
            (
                RenameTable("orders", "purchase_orders"),
                AddForeignKey("customer_id", "customers", "id", "fk_purchase_orders_customer_id"),
            ),
        )
        content = render(delta, "flyway", "V1", "rename orders").content
        assert "ALTER TABLE orders RENAME TO purchase_orders;" in content
        assert (
            "ALTER TABLE purchase_orders ADD CONSTRAINT fk_purchase_orders_customer_id "
            "FOREIGN KEY (customer_id) REFERENCES customers (id);"
        ) in content

    def test_create_table(self, book_metadata):
        """The initial migration creates the table with its FK and index."""
        script = render_create_table(book_metadata, "flyway", "V20260314092653")

        assert script.file_name == "V20260314092653__create_books_table.sql"
        content = script.content
        assert "CREATE TABLE books (" in content
        assert "    id BIGINT PRIMARY KEY AUTO_INCREMENT" in content
        assert "    title VARCHAR(150) NOT NULL" in content
        assert "    author_id BIGINT NOT NULL" in content
        assert "FOREIGN KEY (author_id) REFERENCES authors (id)" in content
        assert "CREATE INDEX idx_books_author ON books (author_id);" in content

    def test_create_table_requires_identifier(self, order_v1):
        """Create-table scripts need an identifier field."""
        metadata = _with_fields(order_v1, EntityField(name="total", type="Long"))
        with pytest.raises(InvalidMetadataError):
            render_create_table(metadata, "flyway", "V1")


class TestLiquibase:
    """Tests for the Liquibase dialect."""

    def test_scenario_changelog(self, order_v1, order_v2):
        """The changelog drops status, then adds state with a not-null constraint."""
        script = render(diff(order_v1, order_v2), MigrationDialect.LIQUIBASE, "20260314-092653")

        content = script.content
        assert content.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert '<changeSet id="20260314-092653" author="entityforge">' in content
        drop = content.index('<dropColumn tableName="orders" columnName="status"/>')
        add = content.index('<column name="state" type="INT">')
        assert drop < add
        assert '<constraints nullable="false"/>' in content
        assert content.rstrip().endswith("</databaseChangeLog>")

    def test_file_name(self, order_v1, order_v2):
        """Liquibase files are {version}_{table}_migration.xml under db/changelog."""
        script = render(diff(order_v1, order_v2), "liquibase", "20260314-092653")
        assert script.path == "src/main/resources/db/changelog/20260314-092653_orders_migration.xml"

    def test_alter_nullability(self, order_v1):
        """Making a column nullable drops its not-null constraint."""
        delta = SchemaDelta(
            "orders",
            (AlterColumn("total", "DECIMAL(19,2)", True, old_type="DECIMAL(19,2)", old_nullable=False),),
        )
        content = render(delta, "liquibase", "1").content
        assert "<dropNotNullConstraint" in content
        assert "<modifyDataType" not in content

    def test_create_table(self, book_metadata):
        """createTable carries the primary key and the foreign key reference."""
        content = render_create_table(book_metadata, "liquibase", "20260314-092653").content
        assert '<createTable tableName="books">' in content
        assert '<column name="id" type="BIGINT" autoIncrement="true">' in content
        assert 'primaryKey="true" nullable="false"' in content
        assert 'references="authors(id)"' in content
        assert '<createIndex indexName="idx_books_author" tableName="books">' in content

    def test_description_is_escaped(self):
        """XML special characters in descriptions are escaped."""
        content = render(SchemaDelta("orders"), "liquibase", "1", "a < b & c").content
        assert "<comment>a &lt; b &amp; c</comment>" in content


class TestDialects:
    """Tests for dialect lookup and versioning."""

    def test_supported(self):
        """Both dialects are registered, flyway first."""
        assert supported_dialects() == ["flyway", "liquibase"]

    def test_unsupported(self, order_v1, order_v2):
        """Unknown dialect names are rejected with the supported list."""
        with pytest.raises(UnsupportedDialectError) as exc_info:
            render(diff(order_v1, order_v2), "alembic", "1")
        assert exc_info.value.dialect == "alembic"
        assert exc_info.value.supported == ["flyway", "liquibase"]

    def test_lookup_is_case_insensitive(self):
        """Dialect names are matched regardless of case."""
        assert get_renderer("Flyway").name == MigrationDialect.FLYWAY

    @pytest.mark.parametrize(
        ("dialect", "expected"),
        [("flyway", "V20260314092653"), ("liquibase", "20260314-092653")],
    )
    def test_generate_version(self, dialect, expected):
        """Version tokens follow each dialect's format."""
        assert generate_version(dialect, FIXED) == expected

    def test_version_clock_strictly_increasing(self):
        """Requests within the same second still get distinct, ordered versions."""
        clock = VersionClock("flyway", clock=lambda: FIXED)
        versions = [clock.next_version() for _ in range(3)]

        assert versions == ["V20260314092653", "V20260314092654", "V20260314092655"]
        assert versions == sorted(versions)

    @pytest.mark.parametrize("dialect", ["flyway", "liquibase"])
    def test_render_is_reproducible(self, order_v1, order_v2, dialect):
        """Rendering one delta twice with the same version gives identical bytes."""
        delta = diff(order_v1, order_v2)
        version = generate_version(dialect, FIXED)
        first = render(delta, dialect, version)
        second = render(delta, dialect, version)

        assert first.content.encode() == second.content.encode()
        assert first.path == second.path

    @pytest.mark.parametrize("dialect", ["flyway", "liquibase"])
    def test_render_requires_table_name(self, dialect):
        """A delta without a table cannot be rendered."""
        with pytest.raises(InvalidMetadataError) as exc_info:
            render(SchemaDelta("", (DropColumn("status"),)), dialect, "1")
        assert exc_info.value.attribute == "table_name"

    def test_script_to_dict(self):
        """Scripts serialize with their target path."""
        script = MigrationScript(MigrationDialect.FLYWAY, "V1", "add column", "SELECT 1;\n", "orders")
        data = script.to_dict()
        assert data["dialect"] == "flyway"
        assert data["path"] == "src/main/resources/db/migration/V1__add_column.sql"


class TestDetection:
    """Tests for detect_dialect()."""

    def test_default_is_flyway(self, tmp_path):
        """An empty project defaults to flyway."""
        assert detect_dialect(tmp_path) == MigrationDialect.FLYWAY

    def test_changelog_directory(self, tmp_path):
        """An existing changelog directory means liquibase."""
        (tmp_path / "src/main/resources/db/changelog").mkdir(parents=True)
        assert detect_dialect(tmp_path) == MigrationDialect.LIQUIBASE

    def test_build_file(self, tmp_path):
        """A build file mentioning liquibase means liquibase."""
        (tmp_path / "build.gradle.kts").write_text(
            'implementation("org.liquibase:liquibase-core")\n', encoding="utf-8"
        )
        assert detect_dialect(tmp_path) == MigrationDialect.LIQUIBASE

    def test_migration_directory(self, tmp_path):
        """An existing Flyway directory means flyway even if the build file disagrees."""
        (tmp_path / "src/main/resources/db/migration").mkdir(parents=True)
        (tmp_path / "pom.xml").write_text("<artifactId>liquibase-core</artifactId>", encoding="utf-8")
        assert detect_dialect(tmp_path) == MigrationDialect.FLYWAY
