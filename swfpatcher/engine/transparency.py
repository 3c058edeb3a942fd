"""Force shapes onto the alpha-capable tag variant."""

from __future__ import annotations

import logging

from swfpatcher.engine.config import PipelineConfig
from swfpatcher.models.document import DefineShape, Document, SolidFill, StraightSRgba8

logger = logging.getLogger(__name__)


def _transparent_fills() -> list[SolidFill]:
    return [SolidFill(color=StraightSRgba8(r=0, g=0, b=0, a=0)) for _ in range(2)]


def raise_version(document: Document, minimum: int) -> None:
    """Raise the format version to ``minimum``; never lowers it."""
    if document.header.swf_version < minimum:
        logger.debug("Raising format version %d -> %d", document.header.swf_version, minimum)
        document.header.swf_version = minimum


def make_transparent(document: Document, shape_ids: list[int], config: PipelineConfig | None = None) -> int:
    """Replace the fill table of each listed DefineShape with two zero-alpha fills.

    Records, line styles, bounds and flags are kept. Unknown IDs are skipped.
    Returns the number of shapes converted.
    """
    config = config or PipelineConfig()
    converted = 0
    for shape_id in shape_ids:
        raise_version(document, config.alpha_min_version)
        tag = next(
            (t for t in document.tags if isinstance(t, DefineShape) and t.id == shape_id),
            None,
        )
        if tag is None:
            logger.debug("No DefineShape id=%d; transparency skipped", shape_id)
            continue
        tag.shape.initial_styles.fill = _transparent_fills()
        converted += 1
    return converted
