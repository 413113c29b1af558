"""Model page rendering and site index assembly."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, List, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined
from pyuca import Collator

from .logging import get_logger
from .models import GeneratorSpec, IndexEntry

MODEL_TEMPLATE = "model.html.j2"
INDEX_TEMPLATE = "index.html.j2"

logger = get_logger("site")


class SiteRenderer:
    """Renders model and index pages from user views, falling back to packaged templates."""

    def __init__(self, views_dir: Path | None = None) -> None:
        self.views_dir = views_dir
        self._env = self._create_env(views_dir)

    def render_model_page(
        self,
        *,
        server_root: str,
        model_file: Any,
        model_version: str,
        file_path: str,
        uml_url: str,
        toolchain: Any,
        code_generators: Sequence[GeneratorSpec],
    ) -> str:
        template = self._env.get_template(MODEL_TEMPLATE)
        return template.render(
            server_root=server_root,
            model_file=model_file,
            model_version=model_version,
            file_path=file_path,
            uml_url=uml_url,
            toolchain=toolchain,
            code_generators=list(code_generators),
        )

    def render_index(self, *, server_root: str, model_file_index: Sequence[IndexEntry]) -> str:
        template = self._env.get_template(INDEX_TEMPLATE)
        return template.render(server_root=server_root, model_file_index=list(model_file_index))

    @staticmethod
    def _create_env(views_dir: Path | None) -> Environment:
        directories = []
        if views_dir is not None and views_dir.is_dir():
            directories.append(str(views_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        loader = FileSystemLoader(directories)
        return Environment(
            loader=loader,
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )


@lru_cache(maxsize=1)
def _collator() -> Collator:
    return Collator()


def sort_index(index: Iterable[IndexEntry]) -> List[IndexEntry]:
    """Stable sort of index entries by namespace using Unicode collation.

    Letters compare before case, so ``org.alpha`` sorts ahead of ``org.Zeta``
    whatever locale the process runs under.
    """
    collator = _collator()
    return sorted(index, key=lambda entry: collator.sort_key(entry.namespace))


def assemble_site(
    index: Iterable[IndexEntry],
    *,
    renderer: SiteRenderer,
    build_dir: Path,
    server_root: str,
) -> Path:
    """Render the top-level listing of every processed model and write it once."""
    entries = sort_index(index)
    content = renderer.render_index(server_root=server_root, model_file_index=entries)
    index_path = build_dir / "index.html"
    index_path.parent.mkdir(parents=True, exist_ok=True)
    index_path.write_text(content, encoding="utf-8")
    logger.info("Site index lists %d models", len(entries))
    return index_path


__all__ = ["INDEX_TEMPLATE", "MODEL_TEMPLATE", "SiteRenderer", "assemble_site", "sort_index"]
