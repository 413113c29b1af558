"""Code generation targets published for every model."""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from .models import GeneratorSpec

CODE_GENERATORS: Tuple[GeneratorSpec, ...] = (
    GeneratorSpec(visitor="PlantUMLVisitor", ext="puml", name="PlantUML"),
    GeneratorSpec(visitor="XmlSchemaVisitor", ext="xsd", name="XML Schema"),
    GeneratorSpec(visitor="TypescriptVisitor", ext="ts", name="Typescript"),
    GeneratorSpec(visitor="CSharpVisitor", ext="cs", name="C#"),
    GeneratorSpec(visitor="ODataVisitor", ext="csdl", name="OData"),
    GeneratorSpec(visitor="JSONSchemaVisitor", ext="json", name="JSON Schema"),
    GeneratorSpec(visitor="GraphQLVisitor", ext="gql", name="GraphQL"),
    GeneratorSpec(visitor="JavaVisitor", ext="java", name="Java"),
    GeneratorSpec(visitor="GoLangVisitor", ext="go", name="Go"),
    GeneratorSpec(visitor="AvroVisitor", ext="avdl", name="Avro"),
    GeneratorSpec(visitor="MarkdownVisitor", ext="md", name="Markdown"),
    GeneratorSpec(visitor="OpenAPIVisitor", ext="openapi", name="OpenAPI"),
    GeneratorSpec(visitor="ProtobufVisitor", ext="proto", name="Protobuf"),
    GeneratorSpec(visitor="MermaidVisitor", ext="mmd", name="Mermaid"),
)


def select_generators(
    enabled: Sequence[str] | None = None,
    generators: Iterable[GeneratorSpec] = CODE_GENERATORS,
) -> Tuple[GeneratorSpec, ...]:
    """Return generators in their static order, honoring optional enabled names.

    Names match either the visitor key or the archive extension, case-insensitively.
    """
    available = tuple(generators)
    if not enabled:
        return available

    wanted = {name.lower() for name in enabled}
    known = {spec.visitor.lower() for spec in available} | {spec.ext.lower() for spec in available}
    missing = sorted(wanted - known)
    if missing:
        raise ValueError(f"Unknown generators requested: {', '.join(missing)}")
    return tuple(
        spec
        for spec in available
        if spec.visitor.lower() in wanted or spec.ext.lower() in wanted
    )


__all__ = ["CODE_GENERATORS", "select_generators"]
