"""PatchContext: the single mutable state object flowing through all patch steps.

The Document is owned by the context for the duration of one application;
the PatchConfig is read-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from swfpatcher.archive import SourceResolver
from swfpatcher.codec import DocumentCodec, JsonDocumentCodec
from swfpatcher.engine.config import PipelineConfig
from swfpatcher.engine.scripts import ScriptCompiler
from swfpatcher.models.document import Document
from swfpatcher.models.patch_config import PatchConfig


@dataclass
class PatchContext:
    """Shared state for one patch application."""

    document: Document
    config: PatchConfig
    # Directory that relative source paths resolve against
    base_dir: Path = field(default_factory=Path)
    codec: DocumentCodec = field(default_factory=JsonDocumentCodec)
    # None = ExternalScriptCompiler built from settings
    compiler: ScriptCompiler | None = None
    resolver: SourceResolver | None = None
    pipeline_config: PipelineConfig = field(default_factory=PipelineConfig)

    # Filled in by the pipeline
    completed_steps: list[str] = field(default_factory=list)
    # Character IDs assigned by new-element injection, per kind
    added_ids: dict[str, list[int]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.base_dir = Path(self.base_dir)
        if self.resolver is None:
            self.resolver = SourceResolver(self.base_dir)
