"""Template registry: which templates each feature renders, per language."""

from __future__ import annotations

from dataclasses import dataclass

from entityforge.core.types import Feature, Layer, SourceLanguage


@dataclass(frozen=True)
class TemplateSpec:
    """One template and where its output lands.

    Attributes:
        name: Template base name, e.g. "Controller"
        layer: Layer whose package receives the file (None for resources)
        suffix: Appended to the entity class name to form the file's class name
        per_entity: False for project-wide files (configs) named by suffix alone
        subpackage: Extra package segment under the layer package (e.g. "impl")
        test: Output goes under the test source root
        resource: Output is a resource file, not a class
    """

    name: str
    layer: Layer | None
    suffix: str
    per_entity: bool = True
    subpackage: str = ""
    test: bool = False
    resource: bool = False

    def template_id(self, language: SourceLanguage) -> str:
        """Template identity: the template's path relative to the template root."""
        if self.resource:
            return f"resources/{self.name}.j2"
        return f"{language.value}/{self.name}.{language.extension}.j2"


# Rendered on request for introspected tables, not switched by a Feature
ENTITY = TemplateSpec("Entity", Layer.ENTITY, "")

CONTROLLER = TemplateSpec("Controller", Layer.CONTROLLER, "Controller")
SERVICE = TemplateSpec("Service", Layer.SERVICE, "Service")
SERVICE_IMPL = TemplateSpec("ServiceImpl", Layer.SERVICE, "ServiceImpl", subpackage="impl")
REPOSITORY = TemplateSpec("Repository", Layer.REPOSITORY, "Repository")
QUERY_REPOSITORY = TemplateSpec("QueryRepository", Layer.REPOSITORY, "QueryRepository")
DTO = TemplateSpec("DTO", Layer.DTO, "DTO")
MAPPER = TemplateSpec("Mapper", Layer.MAPPER, "Mapper")
SERVICE_TEST = TemplateSpec("Test", Layer.SERVICE, "ServiceTest", test=True)
SWAGGER_CONFIG = TemplateSpec("SwaggerConfig", Layer.CONFIG, "SwaggerConfig", per_entity=False)
OPENAPI_CONFIG = TemplateSpec("OpenApiConfig", Layer.CONFIG, "OpenApiConfig", per_entity=False)
SECURITY_CONFIG = TemplateSpec("SecurityConfig", Layer.CONFIG, "SecurityConfig", per_entity=False)
GRAPHQL_CONTROLLER = TemplateSpec("GraphQLController", Layer.CONTROLLER, "GraphQLController")
GRAPHQL_SCHEMA = TemplateSpec("schema.graphqls", None, ".graphqls", resource=True)

TEMPLATES: dict[Feature, dict[SourceLanguage, tuple[TemplateSpec, ...]]] = {
    Feature.CONTROLLER: {
        SourceLanguage.JAVA: (CONTROLLER,),
        SourceLanguage.KOTLIN: (CONTROLLER,),
    },
    Feature.SERVICE: {
        SourceLanguage.JAVA: (SERVICE, SERVICE_IMPL),
        SourceLanguage.KOTLIN: (SERVICE,),
    },
    Feature.REPOSITORY: {
        SourceLanguage.JAVA: (REPOSITORY,),
        SourceLanguage.KOTLIN: (REPOSITORY,),
    },
    Feature.DTO: {
        SourceLanguage.JAVA: (DTO,),
        SourceLanguage.KOTLIN: (DTO,),
    },
    Feature.MAPPER: {
        SourceLanguage.JAVA: (MAPPER,),
        SourceLanguage.KOTLIN: (MAPPER,),
    },
    Feature.TESTS: {
        SourceLanguage.JAVA: (SERVICE_TEST,),
        SourceLanguage.KOTLIN: (SERVICE_TEST,),
    },
    Feature.SWAGGER: {
        SourceLanguage.JAVA: (SWAGGER_CONFIG,),
        SourceLanguage.KOTLIN: (SWAGGER_CONFIG,),
    },
    Feature.OPENAPI: {
        SourceLanguage.JAVA: (OPENAPI_CONFIG,),
    },
    Feature.SECURITY: {
        SourceLanguage.JAVA: (SECURITY_CONFIG,),
    },
    Feature.GRAPHQL: {
        SourceLanguage.JAVA: (GRAPHQL_CONTROLLER, GRAPHQL_SCHEMA),
        SourceLanguage.KOTLIN: (GRAPHQL_CONTROLLER, GRAPHQL_SCHEMA),
    },
    Feature.CUSTOM_QUERY_METHODS: {
        SourceLanguage.JAVA: (QUERY_REPOSITORY,),
        SourceLanguage.KOTLIN: (QUERY_REPOSITORY,),
    },
}

# Build dependencies each feature needs in the generated project
FEATURE_DEPENDENCIES: dict[Feature, tuple[str, ...]] = {
    Feature.CONTROLLER: ("org.springframework.boot:spring-boot-starter-web",),
    Feature.SERVICE: (),
    Feature.REPOSITORY: ("org.springframework.boot:spring-boot-starter-data-jpa",),
    Feature.DTO: ("org.springframework.boot:spring-boot-starter-validation",),
    Feature.MAPPER: ("org.mapstruct:mapstruct:1.6.3",),
    Feature.TESTS: ("org.springframework.boot:spring-boot-starter-test",),
    Feature.SWAGGER: ("org.springdoc:springdoc-openapi-starter-webmvc-ui",),
    Feature.OPENAPI: ("org.springdoc:springdoc-openapi-starter-webmvc-ui",),
    Feature.SECURITY: ("org.springframework.boot:spring-boot-starter-security",),
    Feature.GRAPHQL: ("org.springframework.boot:spring-boot-starter-graphql",),
    Feature.CUSTOM_QUERY_METHODS: ("org.springframework.boot:spring-boot-starter-data-jpa",),
}


def templates_for(feature: Feature, language: SourceLanguage) -> tuple[TemplateSpec, ...] | None:
    """Templates registered for a feature/language pair, or None."""
    return TEMPLATES.get(feature, {}).get(language)
