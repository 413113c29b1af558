"""Build orchestration: per-file processing and full site builds."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from .compilation import (
    compile_model,
    derive_model_version,
    is_legacy_version_scheme,
    register_model,
)
from .config import ConfigError, SiteConfig
from .generation import generate_ast_dump, generate_diagram, invoke_generator
from .generators import select_generators
from .logging import get_logger, log_exception
from .models import BuildResult, FileOutcome, FileStatus, GeneratorSpec, IndexEntry
from .resolver import find_compatible_version
from .scanner import compile_filter, list_source_files, matches_filter, read_source
from .site import SiteRenderer, assemble_site
from .toolchains import ToolchainBinding, ToolchainRegistry, load_registry


class ExternalModelError(RuntimeError):
    """Raised when models imported from external URLs cannot be fetched."""


class Orchestrator:
    """Builds the model site from the configured source tree."""

    def __init__(
        self,
        config: SiteConfig,
        *,
        registry: ToolchainRegistry | None = None,
        renderer: SiteRenderer | None = None,
        generators: Optional[Sequence[GeneratorSpec]] = None,
    ) -> None:
        self.config = config
        self.registry = registry if registry is not None else load_registry(config)
        self.renderer = renderer or SiteRenderer(config.views_dir)
        if generators is not None:
            self.generators = tuple(generators)
        else:
            self.generators = select_generators(config.generators.enabled or None)
        self.logger = get_logger("orchestrator")
        self._bootstrap_text: Optional[str] = None
        self._bootstrap_loaded = False

    def run(self, path_filter: str | None = None) -> BuildResult:
        """Process every matching source file in order, then write the site index."""
        build_dir = self.config.build_dir
        self.logger.info("Building %s into %s", self.config.source_dir, build_dir)
        self._reset_build_dir()
        self._copy_static_assets()

        compiled_filter = compile_filter(path_filter)
        index: List[IndexEntry] = []
        result = BuildResult(index=index)
        for path in list_source_files(self.config.source_dir):
            if not matches_filter(path.resolve(), compiled_filter):
                continue
            result.outcomes.append(self.process_file(path, index))

        result.index_page = assemble_site(
            index,
            renderer=self.renderer,
            build_dir=build_dir,
            server_root=self.config.server_root,
        )
        self.logger.info(
            "Build finished: %d processed, %d copied without indexing, %d failed",
            len(result.by_status(FileStatus.SUCCESS)),
            len(result.by_status(FileStatus.SKIPPED)),
            len(result.by_status(FileStatus.FAILED)),
        )
        return result

    def process_file(self, path: Path, index: List[IndexEntry]) -> FileOutcome:
        """Validate, generate and publish one model file, appending to ``index`` on success.

        Failures abort only this file; they are logged and reported as FAILED.
        """
        try:
            return self._process_file(path, index)
        except Exception as exc:
            log_exception(self.logger, f"Error handling {path}", exc)
            return FileOutcome(path=path, status=FileStatus.FAILED, error=str(exc))

    def _process_file(self, path: Path, index: List[IndexEntry]) -> FileOutcome:
        source = read_source(path, self.config.source_dir)
        binding = find_compatible_version(self.registry, source.text)
        compiled = compile_model(binding, source, bootstrap_text=self._load_bootstrap(binding))
        namespace = compiled.namespace
        self.logger.info("Processing %s using Concerto v%s", namespace, binding.version)

        dest = self.config.build_dir / path.relative_to(self.config.source_dir)
        dest_path = dest.parent
        dest_path.mkdir(parents=True, exist_ok=True)

        if is_legacy_version_scheme(source.relative_dir):
            # directory-versioned models are published as-is, never generated or indexed
            shutil.copyfile(path, dest)
            self.logger.debug("Copied %s without indexing (directory versioning)", path)
            return FileOutcome(path=path, status=FileStatus.SKIPPED, namespace=namespace)

        model_version = derive_model_version(compiled.name)
        register_model(compiled)

        if not self.config.force_publish:
            try:
                compiled.model_manager.update_external_models()
            except Exception as exc:
                raise ExternalModelError(
                    f"Failed to resolve external models for {namespace}: {exc}"
                ) from exc

        uml_url = generate_diagram(
            binding,
            output_root=self.config.build_dir,
            dest_path=dest_path,
            base_name=source.base_name,
            model_file=compiled.model_file,
            plantuml_server=self.config.plantuml_server,
        )
        generate_ast_dump(
            binding,
            dest_path=dest_path,
            base_name=source.base_name,
            model_file=compiled.model_file,
        )
        for spec in self.generators:
            invoke_generator(
                binding,
                spec,
                dest_path=dest_path,
                base_name=source.base_name,
                model_manager=compiled.model_manager,
            )

        shutil.copyfile(path, dest)

        file_path = f"{source.relative_dir}/{source.base_name}"
        html_file = f"{file_path}.html"
        page = self.renderer.render_model_page(
            server_root=self.config.server_root,
            model_file=compiled.model_file,
            model_version=model_version,
            file_path=file_path,
            uml_url=uml_url,
            toolchain=binding,
            code_generators=self.generators,
        )
        (self.config.build_dir / html_file.lstrip("/")).write_text(page, encoding="utf-8")

        index.append(
            IndexEntry(html_file=html_file, model_file=compiled.model_file, model_version=model_version)
        )
        self.logger.info("Processed %s version %s", namespace, model_version)
        return FileOutcome(
            path=path,
            status=FileStatus.SUCCESS,
            namespace=namespace,
            model_version=model_version,
        )

    def _load_bootstrap(self, binding: ToolchainBinding) -> Optional[str]:
        if not binding.line.requires_bootstrap_schema:
            return None
        if not self._bootstrap_loaded:
            bootstrap = self.config.bootstrap_model
            if bootstrap is not None and bootstrap.is_file():
                self._bootstrap_text = bootstrap.read_text(encoding="utf-8")
            self._bootstrap_loaded = True
        return self._bootstrap_text

    def _reset_build_dir(self) -> None:
        build_dir = self.config.build_dir.resolve()
        protected = {self.config.root.resolve(), self.config.source_dir.resolve()}
        if build_dir in protected or build_dir in self.config.source_dir.resolve().parents:
            raise ConfigError(f"Refusing to clear build directory {build_dir}: it holds sources")
        if build_dir.exists():
            shutil.rmtree(build_dir)
        build_dir.mkdir(parents=True)

    def _copy_static_assets(self) -> None:
        for name in self.config.static_assets:
            source = self.config.root / name
            target = self.config.build_dir / name
            if source.is_dir():
                shutil.copytree(source, target, dirs_exist_ok=True)
            elif source.is_file():
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(source, target)
            else:
                self.logger.debug("Static asset %s not found; skipping", source)


__all__ = ["ExternalModelError", "Orchestrator"]
