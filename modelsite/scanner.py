"""Source tree discovery for model files."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import List, Optional, Pattern, Sequence

from .models import SourceFile

MODEL_SUFFIXES = (".cto",)

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
}


def list_source_files(root: Path, suffixes: Sequence[str] = MODEL_SUFFIXES) -> List[Path]:
    """Return every model file under ``root`` in a stable, sorted order."""
    files: List[Path] = []
    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        for filename in sorted(filenames):
            if filename.endswith(tuple(suffixes)):
                files.append(Path(current) / filename)
    return files


def compile_filter(pattern: str | None) -> Optional[Pattern[str]]:
    """Compile a path filter; patterns that are not valid regexes match literally."""
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error:
        return re.compile(re.escape(pattern))


def matches_filter(path: Path, path_filter: Optional[Pattern[str]]) -> bool:
    if path_filter is None:
        return True
    return path_filter.search(str(path)) is not None


def read_source(path: Path, source_root: Path) -> SourceFile:
    """Read a model file and record where it sits relative to the source root."""
    text = path.read_text(encoding="utf-8")
    relative_parent = path.parent.relative_to(source_root).as_posix()
    relative_dir = "" if relative_parent == "." else f"/{relative_parent}"
    return SourceFile(path=path, text=text, relative_dir=relative_dir, base_name=path.stem)


__all__ = ["MODEL_SUFFIXES", "compile_filter", "list_source_files", "matches_filter", "read_source"]
