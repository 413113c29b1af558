"""Contracts for model-compiler toolchain plugins."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, runtime_checkable

import semantic_version


class FileWriter(Protocol):
    """Write-sink handed to generator visitors as the ``file_writer`` parameter."""

    def open_file(self, file_name: str, relative_dir: str | None = None) -> None:
        ...

    def write_line(self, indent: int, text: str) -> None:
        ...

    def close_file(self) -> None:
        ...


class Visitor(Protocol):
    def visit(self, thing: Any, parameters: Dict[str, Any]) -> Any:
        ...


class ModelManager(Protocol):
    """Container of model files; drives visitors over every registered namespace."""

    def add_model_file(self, model_file: Any, *args: Any) -> Any:
        ...

    def update_external_models(self) -> Any:
        ...

    def accept(self, visitor: Visitor, parameters: Dict[str, Any]) -> Any:
        ...


class ModelFile(Protocol):
    """Compiled declarations of a single namespace."""

    @property
    def namespace(self) -> str:
        ...

    @property
    def name(self) -> str:
        ...

    @property
    def definitions(self) -> str:
        ...

    @property
    def model_manager(self) -> ModelManager:
        ...

    def accept(self, visitor: Visitor, parameters: Dict[str, Any]) -> Any:
        ...


@runtime_checkable
class Toolchain(Protocol):
    """API surface one version of the model compiler exposes to the build.

    ``create_model_file`` takes ``(manager, text, path)`` on the legacy line and
    ``(manager, ast, text, path)`` elsewhere. Toolchains may additionally expose
    ``to_metamodel(manager, text, resolve)`` for resolved AST dumps.
    """

    version: str
    code_generators: Mapping[str, Callable[[], Visitor]]

    def create_model_manager(self, *, strict: bool = False) -> ModelManager:
        ...

    def create_model_file(self, model_manager: ModelManager, *args: Any) -> ModelFile:
        ...

    def parse(self, text: str, file_name: str | None = None) -> Dict[str, Any]:
        ...

    def create_file_writer(self, output_dir: Path) -> FileWriter:
        ...


@dataclass(frozen=True)
class LineThresholds:
    """Version cutoffs that decide which toolchain line a version belongs to."""

    bootstrap_range: str = "0.82.x"
    strict_max: str = "3.0.0"


class ToolchainLine(Enum):
    """Supported toolchain lines and the build behaviour each one needs."""

    LEGACY = ("legacy", False, True, True)
    STRICT = ("strict", True, False, True)
    CURRENT = ("current", True, False, False)

    def __init__(
        self,
        label: str,
        supports_ast_parsing: bool,
        requires_bootstrap_schema: bool,
        requires_strict_mode: bool,
    ) -> None:
        self.label = label
        self.supports_ast_parsing = supports_ast_parsing
        self.requires_bootstrap_schema = requires_bootstrap_schema
        self.requires_strict_mode = requires_strict_mode

    @property
    def legacy_registration(self) -> bool:
        """Legacy managers register with ``(model_file, name, validate)``."""
        return self is ToolchainLine.LEGACY

    @classmethod
    def for_version(
        cls, version: str, thresholds: LineThresholds | None = None
    ) -> "ToolchainLine":
        thresholds = thresholds or LineThresholds()
        parsed = semantic_version.Version(version)
        if semantic_version.NpmSpec(thresholds.bootstrap_range).match(parsed):
            return cls.LEGACY
        if parsed <= semantic_version.Version(thresholds.strict_max):
            return cls.STRICT
        return cls.CURRENT


@dataclass(frozen=True)
class ToolchainBinding:
    """One loaded toolchain version tagged with its line."""

    version: str
    toolchain: Toolchain
    line: ToolchainLine

    def generator(self, visitor_key: str) -> Optional[Callable[[], Visitor]]:
        """Return the visitor factory for ``visitor_key``, or None when this version lacks it."""
        return self.toolchain.code_generators.get(visitor_key)

    def create_file_writer(self, output_dir: Path) -> FileWriter:
        return self.toolchain.create_file_writer(output_dir)


__all__ = [
    "FileWriter",
    "LineThresholds",
    "ModelFile",
    "ModelManager",
    "Toolchain",
    "ToolchainBinding",
    "ToolchainLine",
    "Visitor",
]
