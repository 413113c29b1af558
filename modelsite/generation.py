"""Per-model artifact generation: code generator archives, PlantUML diagram and JSON AST."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from plantuml import deflate_and_encode

from .archive import ArchiveSink
from .config import DEFAULT_PLANTUML_SERVER
from .logging import get_logger, log_exception
from .models import GeneratorSpec
from .toolchains import ModelFile, ModelManager, ToolchainBinding

logger = get_logger("generation")


def archive_path_for(dest_path: Path, base_name: str, spec: GeneratorSpec) -> Path:
    return dest_path / f"{base_name}.{spec.ext}.zip"


def invoke_generator(
    binding: ToolchainBinding,
    spec: GeneratorSpec,
    *,
    dest_path: Path,
    base_name: str,
    model_manager: ModelManager,
) -> Optional[Path]:
    """Run one code generator over ``model_manager`` and zip everything it emits.

    Returns the archive path when at least one file was archived. A generator the
    binding does not ship is skipped; a failing generator is logged and never
    raises, so the remaining generators still run.
    """
    factory = binding.generator(spec.visitor)
    if factory is None:
        logger.debug("%s is not available in Concerto v%s", spec.visitor, binding.version)
        return None

    sink = ArchiveSink(
        archive_path_for(dest_path, base_name, spec),
        comment=f"Generated by {spec.visitor}",
    )
    try:
        visitor = factory()
        model_manager.accept(visitor, {"file_writer": sink})
    except Exception as exc:
        log_exception(logger, f"Generating {spec.visitor} for {dest_path}/{base_name}", exc)
    return sink.archive_path if len(sink.archive) else None


def generate_diagram(
    binding: ToolchainBinding,
    *,
    output_root: Path,
    dest_path: Path,
    base_name: str,
    model_file: ModelFile,
    plantuml_server: str = DEFAULT_PLANTUML_SERVER,
) -> str:
    """Write ``<base_name>.puml`` for the model file and return its rendered SVG URL.

    Returns an empty string when the diagram cannot be produced.
    """
    generated = dest_path / f"{base_name}.puml"
    try:
        factory = binding.generator("PlantUMLVisitor")
        if factory is None:
            raise LookupError(f"PlantUMLVisitor is not available in Concerto v{binding.version}")
        visitor = factory()
        writer = binding.create_file_writer(output_root)
        writer.open_file(str(generated))
        writer.write_line(0, "@startuml")
        parameters = {
            "file_writer": writer,
            "show_composition_relationships": True,
            "hide_base_model": True,
        }
        model_file.accept(visitor, parameters)
        writer.write_line(0, "@enduml")
        writer.close_file()
        diagram = generated.read_text(encoding="utf-8")
    except Exception as exc:
        log_exception(logger, f"Generating PlantUML for {dest_path}/{base_name}", exc)
        return ""
    return f"{plantuml_server.rstrip('/')}/svg/{encode_plantuml(diagram)}"


def generate_ast_dump(
    binding: ToolchainBinding,
    *,
    dest_path: Path,
    base_name: str,
    model_file: ModelFile,
) -> Optional[Path]:
    """Write the model's metamodel AST as ``<base_name>.ast.json``."""
    generated = dest_path / f"{base_name}.ast.json"
    try:
        toolchain = binding.toolchain
        text = model_file.definitions
        to_metamodel = getattr(toolchain, "to_metamodel", None)
        if to_metamodel is not None:
            ast = to_metamodel(model_file.model_manager, text, True)
        else:
            ast = toolchain.parse(text)
        generated.write_text(json.dumps(ast), encoding="utf-8")
    except Exception as exc:
        log_exception(logger, f"Generating JSON Syntax Tree for {dest_path}/{base_name}", exc)
        return None
    return generated


def encode_plantuml(text: str) -> str:
    """Encode diagram source the way PlantUML servers expect in their URLs."""
    return deflate_and_encode(text)


__all__ = [
    "archive_path_for",
    "encode_plantuml",
    "generate_ast_dump",
    "generate_diagram",
    "invoke_generator",
]
