"""Compile and register model files against a resolved toolchain."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import semantic_version

from .models import SourceFile
from .toolchains import ModelFile, ModelManager, ToolchainBinding

DEFAULT_MODEL_VERSION = "0.1.0"
BOOTSTRAP_MODEL_NAME = "base.cto"

_VERSION_SEGMENT = re.compile(r"v\d+(\.\d+){0,2}")


class CompilationError(RuntimeError):
    """Raised when a model file fails to parse, validate or register."""

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = Path(path)
        self.message = message


@dataclass
class CompiledModel:
    """A validated model file together with the manager that owns it."""

    binding: ToolchainBinding
    model_manager: ModelManager
    model_file: ModelFile
    source: SourceFile

    @property
    def namespace(self) -> str:
        return self.model_file.namespace

    @property
    def name(self) -> str:
        return self.model_file.name


def create_model_manager(binding: ToolchainBinding, bootstrap_text: str | None = None) -> ModelManager:
    """Create a manager in the mode the binding's line requires, preloading the system model."""
    manager = binding.toolchain.create_model_manager(strict=binding.line.requires_strict_mode)
    if binding.line.requires_bootstrap_schema:
        if bootstrap_text is None:
            raise CompilationError(
                BOOTSTRAP_MODEL_NAME,
                f"system model is required by Concerto v{binding.version} but was not found",
            )
        # text, file name, disable validation, system model
        manager.add_model_file(bootstrap_text, BOOTSTRAP_MODEL_NAME, False, True)
    return manager


def compile_model(
    binding: ToolchainBinding,
    source: SourceFile,
    *,
    bootstrap_text: str | None = None,
) -> CompiledModel:
    """Parse ``source`` into a model file using AST or legacy text parsing."""
    manager = create_model_manager(binding, bootstrap_text)
    toolchain = binding.toolchain
    file_name = str(source.path)
    try:
        if binding.line.supports_ast_parsing:
            ast = toolchain.parse(source.text, file_name)
            model_file = toolchain.create_model_file(manager, ast, source.text, file_name)
        else:
            model_file = toolchain.create_model_file(manager, source.text, file_name)
    except CompilationError:
        raise
    except Exception as exc:
        raise CompilationError(source.path, str(exc)) from exc
    return CompiledModel(binding=binding, model_manager=manager, model_file=model_file, source=source)


def register_model(compiled: CompiledModel) -> Any:
    """Add the compiled model to its manager under its registered name, with validation."""
    manager = compiled.model_manager
    model_file = compiled.model_file
    try:
        if compiled.binding.line.legacy_registration:
            return manager.add_model_file(model_file, model_file.name, True)
        return manager.add_model_file(model_file, compiled.source.text, model_file.name, True)
    except Exception as exc:
        raise CompilationError(compiled.source.path, str(exc)) from exc


def derive_model_version(registered_name: str) -> str:
    """Return the semantic version embedded in ``name@1.2.3.cto``, else ``0.1.0``."""
    suffix = registered_name.rsplit("@", 1)[-1]
    candidate, _ = os.path.splitext(suffix)
    if semantic_version.validate(candidate):
        return candidate
    return DEFAULT_MODEL_VERSION


def is_legacy_version_scheme(relative_dir: str) -> bool:
    """True when exactly one directory segment looks like ``v1``, ``v1.2`` or ``v1.2.3``."""
    segments = re.split(r"[\\/]", relative_dir)
    versioned = [segment for segment in segments if _VERSION_SEGMENT.fullmatch(segment)]
    return len(versioned) == 1


__all__ = [
    "BOOTSTRAP_MODEL_NAME",
    "CompilationError",
    "CompiledModel",
    "DEFAULT_MODEL_VERSION",
    "compile_model",
    "create_model_manager",
    "derive_model_version",
    "is_legacy_version_scheme",
    "register_model",
]
