"""Core data models shared across modelsite components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional


@dataclass(frozen=True)
class SourceFile:
    """A model source file read from the source tree."""

    path: Path
    text: str
    relative_dir: str
    base_name: str


@dataclass(frozen=True)
class GeneratorSpec:
    """One code generation target: visitor key, archive extension and display name."""

    visitor: str
    ext: str
    name: str


@dataclass
class ArchiveUnit:
    """A named output file pending aggregation into an archive."""

    name: str
    data: bytes


@dataclass
class IndexEntry:
    """Site index row for a successfully processed model file."""

    html_file: str
    model_file: Any
    model_version: str

    @property
    def namespace(self) -> str:
        return str(self.model_file.namespace)


class FileStatus(str, Enum):
    """Terminal states of per-file processing."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class FileOutcome:
    """Result of processing a single source file."""

    path: Path
    status: FileStatus
    namespace: Optional[str] = None
    model_version: Optional[str] = None
    error: Optional[str] = None


@dataclass
class BuildResult:
    """Outcome of a full site build."""

    outcomes: List[FileOutcome] = field(default_factory=list)
    index: List[IndexEntry] = field(default_factory=list)
    index_page: Optional[Path] = None

    def by_status(self, status: FileStatus) -> List[FileOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status is status]
