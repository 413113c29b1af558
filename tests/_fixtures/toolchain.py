"""In-memory toolchain doubles that follow the modelsite toolchain contracts."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from modelsite.toolchains import LineThresholds, ToolchainRegistry

_NAMESPACE_PATTERN = re.compile(r"^namespace\s+(\S+)", re.MULTILINE)


def _namespace_of(text: str) -> str:
    match = _NAMESPACE_PATTERN.search(text)
    if match is None:
        raise ValueError("Expected namespace declaration")
    return match.group(1)


class RecordingFileWriter:
    """File writer that writes closed files below ``output_dir``."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)
        self.file_name: Optional[str] = None
        self.relative_dir: Optional[str] = None
        self.lines: List[str] = []

    def open_file(self, file_name: str, relative_dir: str | None = None) -> None:
        self.file_name = file_name
        self.relative_dir = relative_dir
        self.lines = []

    def write_line(self, indent: int, text: str) -> None:
        self.lines.append("  " * indent + text)

    def close_file(self) -> None:
        if not self.file_name:
            raise RuntimeError("No file open")
        target = self.output_dir / (self.relative_dir or "") / self.file_name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("\n".join(self.lines) + "\n", encoding="utf-8")
        self.file_name = None


class FakeModelFile:
    def __init__(self, model_manager: "FakeModelManager", text: str, file_name: str, *, ast: Any = None) -> None:
        self.model_manager = model_manager
        self.definitions = text
        self.name = file_name
        self.namespace = _namespace_of(text)
        self.ast = ast

    def accept(self, visitor: Any, parameters: Dict[str, Any]) -> Any:
        return visitor.visit(self, parameters)


class FakeModelManager:
    def __init__(self, *, strict: bool = False, external_error: Exception | None = None) -> None:
        self.strict = strict
        self.calls: List[tuple] = []
        self.model_files: List[Any] = []
        self.external_updates = 0
        self._external_error = external_error

    def add_model_file(self, model_file: Any, *args: Any) -> Any:
        self.calls.append((model_file, *args))
        self.model_files.append(model_file)
        return model_file

    def update_external_models(self) -> None:
        self.external_updates += 1
        if self._external_error is not None:
            raise self._external_error

    def accept(self, visitor: Any, parameters: Dict[str, Any]) -> Any:
        return visitor.visit(self, parameters)


class NamespaceVisitor:
    """Emits one file per registered model file named after its namespace."""

    def __init__(self, ext: str) -> None:
        self.ext = ext

    def visit(self, thing: Any, parameters: Dict[str, Any]) -> None:
        writer = parameters["file_writer"]
        if isinstance(thing, FakeModelManager):
            for model_file in thing.model_files:
                if isinstance(model_file, FakeModelFile):
                    writer.open_file(f"{model_file.namespace}.{self.ext}")
                    writer.write_line(0, f"// {model_file.namespace}")
                    writer.close_file()
        else:
            writer.write_line(1, f"class {thing.namespace}")


class CountingVisitor:
    """Emits ``count`` files, raising before closing file number ``fail_at``."""

    def __init__(self, count: int, fail_at: int | None = None) -> None:
        self.count = count
        self.fail_at = fail_at

    def visit(self, thing: Any, parameters: Dict[str, Any]) -> None:
        writer = parameters["file_writer"]
        for number in range(1, self.count + 1):
            writer.open_file(f"unit{number}.txt", "out")
            writer.write_line(0, f"unit {number}")
            if number == self.fail_at:
                raise RuntimeError(f"unit {number} failed")
            writer.close_file()


class ExplodingVisitor:
    def visit(self, thing: Any, parameters: Dict[str, Any]) -> None:
        raise RuntimeError("generator exploded")


def default_generators() -> Dict[str, Callable[[], Any]]:
    return {
        "PlantUMLVisitor": lambda: NamespaceVisitor("puml"),
        "TypescriptVisitor": lambda: NamespaceVisitor("ts"),
        "JavaVisitor": lambda: NamespaceVisitor("java"),
    }


class FakeToolchain:
    """Toolchain double that records how the build drives it."""

    def __init__(
        self,
        version: str,
        *,
        code_generators: Mapping[str, Callable[[], Any]] | None = None,
        with_metamodel: bool = False,
        external_error: Exception | None = None,
    ) -> None:
        self.version = version
        self.code_generators = dict(default_generators() if code_generators is None else code_generators)
        self.managers: List[FakeModelManager] = []
        self.model_file_calls: List[tuple] = []
        self.parse_calls: List[tuple] = []
        self._external_error = external_error
        if with_metamodel:
            self.to_metamodel = self._to_metamodel

    def create_model_manager(self, *, strict: bool = False) -> FakeModelManager:
        manager = FakeModelManager(strict=strict, external_error=self._external_error)
        self.managers.append(manager)
        return manager

    def create_model_file(self, model_manager: FakeModelManager, *args: Any) -> FakeModelFile:
        self.model_file_calls.append(args)
        if len(args) == 2:
            text, file_name = args
            return FakeModelFile(model_manager, text, file_name)
        ast, text, file_name = args
        return FakeModelFile(model_manager, text, file_name, ast=ast)

    def parse(self, text: str, file_name: str | None = None) -> Dict[str, Any]:
        self.parse_calls.append((text, file_name))
        return {"$class": "concerto.metamodel.Model", "namespace": _namespace_of(text)}

    def create_file_writer(self, output_dir: Path) -> RecordingFileWriter:
        return RecordingFileWriter(output_dir)

    def _to_metamodel(self, model_manager: Any, text: str, resolve: bool) -> Dict[str, Any]:
        return {"$class": "concerto.metamodel.Model", "namespace": _namespace_of(text), "resolved": resolve}


def make_registry(
    toolchains: Mapping[str, Any],
    default: str | None = None,
    thresholds: LineThresholds | None = None,
) -> ToolchainRegistry:
    return ToolchainRegistry.from_toolchains(toolchains, default, thresholds=thresholds)


legacy_toolchain = FakeToolchain("0.82.11")


def current_toolchain() -> FakeToolchain:
    return FakeToolchain("3.1.0")


__all__ = [
    "CountingVisitor",
    "ExplodingVisitor",
    "FakeModelFile",
    "FakeModelManager",
    "FakeToolchain",
    "NamespaceVisitor",
    "RecordingFileWriter",
    "current_toolchain",
    "legacy_toolchain",
    "make_registry",
]
