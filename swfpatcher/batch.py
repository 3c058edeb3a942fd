"""Batch driver: decode, patch and encode across many files.

A batch config lists mods. An archive mod (``ba2: true``) names internal
paths inside a caller-supplied archive, each with its own patch config; any
other mod applies one patch config to a caller-supplied target file.
Relative config paths resolve against the batch config's directory.
"""

from __future__ import annotations

import concurrent.futures
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from pydantic import Field, ValidationError

from swfpatcher.archive import LOCATOR_SEPARATOR, SourceResolver
from swfpatcher.codec import DocumentCodec
from swfpatcher.config import get_settings
from swfpatcher.engine.pipeline import apply_patch_file
from swfpatcher.engine.scripts import ScriptCompiler
from swfpatcher.exceptions import ConfigError, PatchIOError
from swfpatcher.models.patch_config import ConfigModel

logger = logging.getLogger(__name__)


class BatchFileEntry(ConfigModel):
    path: str
    config: str


class ModEntry(ConfigModel):
    name: str
    ba2: bool = False
    config: str | None = None
    files: list[BatchFileEntry] = Field(default_factory=list)


class BatchConfig(ConfigModel):
    mods: list[ModEntry] = Field(default_factory=list)


def load_batch_config(path: Path | str) -> BatchConfig:
    src = Path(path)
    try:
        raw = src.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise PatchIOError(str(src), f"Failed to read batch config ({e.strerror or e})") from e
    try:
        return BatchConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid batch config {src}: {e}") from e


@dataclass(frozen=True)
class BatchJob:
    mod_name: str
    # Plain path or archive locator
    source: str
    config_path: Path
    output_path: Path


@dataclass
class BatchResult:
    job: BatchJob
    success: bool
    error: str | None = None
    elapsed_ms: float = 0.0
    added_ids: dict[str, list[int]] = field(default_factory=dict)


def plan_batch(
    batch: BatchConfig,
    batch_dir: Path | str,
    output_dir: Path | str,
    archive_path: Path | str | None = None,
    targets: dict[str, Path | str] | None = None,
) -> list[BatchJob]:
    """Expand the batch config into jobs.

    ``targets`` maps the name of each non-archive mod to the file it patches.
    Raises ConfigError when a mod has nothing to patch or two jobs would
    write the same output file.
    """
    batch_dir, output_dir = Path(batch_dir), Path(output_dir)
    targets = targets or {}
    jobs: list[BatchJob] = []

    for mod in batch.mods:
        if mod.ba2:
            if archive_path is None:
                raise ConfigError(f"Mod {mod.name!r} patches an archive but no archive was given")
            if not mod.files:
                logger.warning("Archive mod %r lists no files", mod.name)
            for entry in mod.files:
                internal = entry.path.replace("\\", "/").lstrip("/")
                jobs.append(
                    BatchJob(
                        mod_name=mod.name,
                        source=f"{archive_path}{LOCATOR_SEPARATOR}{internal}",
                        config_path=batch_dir / entry.config,
                        output_path=output_dir.joinpath(*PurePosixPath(internal).parts),
                    )
                )
        else:
            if mod.config is None:
                raise ConfigError(f"Mod {mod.name!r} has no config")
            target = targets.get(mod.name)
            if target is None:
                raise ConfigError(f"No target file given for mod {mod.name!r}")
            target = Path(target)
            jobs.append(
                BatchJob(
                    mod_name=mod.name,
                    source=str(target),
                    config_path=batch_dir / mod.config,
                    output_path=output_dir / target.name,
                )
            )

    claimed: dict[Path, BatchJob] = {}
    for job in jobs:
        first = claimed.setdefault(job.output_path, job)
        if first is not job:
            raise ConfigError(f"Mods {first.mod_name!r} and {job.mod_name!r} both write {job.output_path}")
    return jobs


def process_job(
    job: BatchJob,
    codec: DocumentCodec,
    compiler: ScriptCompiler | None = None,
    compression: str | None = None,
) -> BatchResult:
    """Run one file pipeline. Errors propagate to the caller."""
    t0 = time.perf_counter()
    data = SourceResolver().read_bytes(job.source)
    document = codec.decode(data)
    ctx = apply_patch_file(document, job.config_path, codec=codec, compiler=compiler)
    encoded = codec.encode(document, compression)

    try:
        job.output_path.parent.mkdir(parents=True, exist_ok=True)
        job.output_path.write_bytes(encoded)
    except OSError as e:
        raise PatchIOError(str(job.output_path), f"Failed to write output ({e.strerror or e})") from e

    elapsed = (time.perf_counter() - t0) * 1000
    logger.info("[%s] %s -> %s in %.0fms", job.mod_name, job.source, job.output_path, elapsed)
    return BatchResult(job=job, success=True, elapsed_ms=elapsed, added_ids=ctx.added_ids)


def run_batch(
    jobs: list[BatchJob],
    codec: DocumentCodec,
    compiler: ScriptCompiler | None = None,
    max_workers: int | None = None,
    continue_on_error: bool = False,
    compression: str | None = None,
) -> list[BatchResult]:
    """Process jobs with bounded parallelism. Results come back in job order.

    Without ``continue_on_error`` the first failure cancels pending jobs and
    is re-raised.
    """
    settings = get_settings()
    workers = max(1, max_workers or settings.batch_jobs)
    compression = compression or settings.output_compression
    results: dict[BatchJob, BatchResult] = {}

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_job = {
            executor.submit(process_job, job, codec, compiler, compression): job for job in jobs
        }
        for future in concurrent.futures.as_completed(future_to_job):
            job = future_to_job[future]
            try:
                results[job] = future.result()
            except Exception as e:
                logger.error("[%s] %s failed: %s", job.mod_name, job.source, e)
                if not continue_on_error:
                    for pending in future_to_job:
                        pending.cancel()
                    raise
                results[job] = BatchResult(job=job, success=False, error=str(e))

    failed = sum(not r.success for r in results.values())
    logger.info("Batch complete: %d succeeded, %d failed", len(results) - failed, failed)
    return [results[job] for job in jobs if job in results]
