"""Aggregate multi-file generator output into a single zip archive."""

from __future__ import annotations

import posixpath
import zipfile
from pathlib import Path
from typing import Dict, List, Optional

from .models import ArchiveUnit


class SinkError(RuntimeError):
    """Raised when the sink is used out of order."""


class ModelArchive:
    """Growable zip archive; entries keep insertion order and same-name entries replace."""

    def __init__(self) -> None:
        self._units: Dict[str, ArchiveUnit] = {}
        self._comments: Dict[str, str] = {}

    def add(self, name: str, data: bytes, comment: str | None = None) -> None:
        self._units[name] = ArchiveUnit(name=name, data=data)
        if comment:
            self._comments[name] = comment
        else:
            self._comments.pop(name, None)

    @property
    def names(self) -> List[str]:
        return list(self._units)

    def __len__(self) -> int:
        return len(self._units)

    def write(self, path: Path) -> Path:
        """Persist every entry to ``path``, replacing any previous archive."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            for unit in self._units.values():
                info = zipfile.ZipInfo(unit.name)
                info.compress_type = zipfile.ZIP_DEFLATED
                comment = self._comments.get(unit.name)
                if comment:
                    info.comment = comment.encode("utf-8")
                zf.writestr(info, unit.data)
        return path


class ArchiveSink:
    """File writer that redirects every closed file into one archive on disk.

    Generators open, write and close many files through the sink. Each close
    adds the file to the archive and rewrites ``archive_path``, so whatever was
    emitted before a generator failure is still a valid archive. Nothing is
    written outside the archive; entry names are the opened file name under its
    ``relative_dir``.
    """

    INDENT = "    "

    def __init__(
        self,
        archive_path: Path,
        *,
        comment: str | None = None,
        archive: ModelArchive | None = None,
    ) -> None:
        self.archive_path = archive_path
        self.archive = archive if archive is not None else ModelArchive()
        self._comment = comment
        self.file_name: Optional[str] = None
        self.relative_dir: Optional[str] = None
        self._buffer: List[str] = []

    def open_file(self, file_name: str, relative_dir: str | None = None) -> None:
        self.file_name = file_name
        self.relative_dir = relative_dir
        self.clear_buffer()

    def write(self, text: str) -> None:
        self._buffer.append(text)

    def write_line(self, indent: int, text: str) -> None:
        self._buffer.append(f"{self.INDENT * indent}{text}\n")

    def get_buffer(self) -> str:
        return "".join(self._buffer)

    def clear_buffer(self) -> None:
        self._buffer = []

    def close_file(self) -> None:
        if not self.file_name:
            raise SinkError("No file open")

        name = self.file_name
        if self.relative_dir:
            name = posixpath.join(self.relative_dir.replace("\\", "/").strip("/"), name)
        self.archive.add(name, self.get_buffer().encode("utf-8"), self._comment)
        self.archive.write(self.archive_path)

        self.file_name = None
        self.relative_dir = None
        self.clear_buffer()


__all__ = ["ArchiveSink", "ModelArchive", "SinkError"]
