"""Pipeline orchestrator — runs patch steps in dependency order."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from pydantic import ValidationError

import swfpatcher.engine.steps  # noqa: F401  (registers the steps)
from swfpatcher.archive import SourceResolver
from swfpatcher.codec import DocumentCodec, JsonDocumentCodec
from swfpatcher.engine.config import PipelineConfig
from swfpatcher.engine.context import PatchContext
from swfpatcher.engine.registry import StepRegistry, get_registry
from swfpatcher.engine.scripts import ScriptCompiler
from swfpatcher.exceptions import ConfigError, PatchIOError
from swfpatcher.models.document import Document
from swfpatcher.models.patch_config import PatchConfig

logger = logging.getLogger(__name__)


class PatchPipeline:
    """Runs every registered step once, in order. The first failure aborts the run."""

    def __init__(self, registry: StepRegistry | None = None) -> None:
        self.registry = registry or get_registry()

    def run(self, ctx: PatchContext) -> PatchContext:
        start = time.perf_counter()
        ordered = self.registry.resolve_order()
        logger.debug("Pipeline: %d steps queued", len(ordered))

        for spec in ordered:
            t0 = time.perf_counter()
            try:
                spec.fn(ctx)
            except Exception as e:
                logger.error("  %s FAILED: %s", spec.id, e)
                raise
            ctx.completed_steps.append(spec.id)
            elapsed = (time.perf_counter() - t0) * 1000
            logger.debug("  %s completed in %.1fms", spec.id, elapsed)

        total = (time.perf_counter() - start) * 1000
        logger.info("Patch applied: %d steps in %.0fms", len(ctx.completed_steps), total)
        return ctx


def load_patch_config(path: Path | str) -> PatchConfig:
    src = Path(path)
    try:
        raw = src.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise PatchIOError(str(src), f"Failed to read patch config ({e.strerror or e})") from e
    try:
        return PatchConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid patch config {src}: {e}") from e


def apply_patch(
    document: Document,
    config: PatchConfig,
    *,
    base_dir: Path | str = ".",
    codec: DocumentCodec | None = None,
    compiler: ScriptCompiler | None = None,
    resolver: SourceResolver | None = None,
    pipeline_config: PipelineConfig | None = None,
) -> PatchContext:
    """Apply ``config`` to ``document`` in place.

    On failure the document is left partially modified and must be discarded.
    """
    ctx = PatchContext(
        document=document,
        config=config,
        base_dir=Path(base_dir),
        codec=codec or JsonDocumentCodec(),
        compiler=compiler,
        resolver=resolver,
        pipeline_config=pipeline_config or PipelineConfig(),
    )
    return PatchPipeline().run(ctx)


def apply_patch_file(
    document: Document,
    config_path: Path | str,
    *,
    codec: DocumentCodec | None = None,
    compiler: ScriptCompiler | None = None,
    resolver: SourceResolver | None = None,
) -> PatchContext:
    """Load a patch config and apply it; relative sources resolve next to the config file."""
    config_path = Path(config_path)
    return apply_patch(
        document,
        load_patch_config(config_path),
        base_dir=config_path.parent,
        codec=codec,
        compiler=compiler,
        resolver=resolver,
    )
