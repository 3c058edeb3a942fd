"""The patch steps, chained in application order:

transparency → shape replacement → scripts → tag modifications → stage bounds
→ new elements → element removal.
"""

from __future__ import annotations

import logging

from swfpatcher.engine.context import PatchContext
from swfpatcher.engine.elements import add_elements, first_shape, remove_elements, replace_shape
from swfpatcher.engine.registry import Phase, patch_step
from swfpatcher.engine.scripts import apply_script_patches
from swfpatcher.engine.tag_patcher import apply_tag_modifications
from swfpatcher.engine.transparency import make_transparent

logger = logging.getLogger(__name__)


@patch_step(id="P0.01", phase=Phase.GEOMETRY, description="Zero-alpha fills for listed shapes")
def transparency(ctx: PatchContext) -> None:
    if ctx.config.transparent:
        count = make_transparent(ctx.document, ctx.config.transparent, ctx.pipeline_config)
        logger.info("Made %d shapes transparent", count)


@patch_step(
    id="P0.02",
    phase=Phase.GEOMETRY,
    dependencies=["P0.01"],
    description="Replace shapes from SVG sources",
)
def shape_replacement(ctx: PatchContext) -> None:
    for source in ctx.config.file:
        shape = first_shape(ctx.resolver.read_text(source.source), source.source, ctx.pipeline_config)
        for shape_id in source.shapes:
            replace_shape(ctx.document, shape_id, shape, ctx.pipeline_config)
        logger.info("Replaced %d shapes from %s", len(source.shapes), source.source)


@patch_step(id="P1.01", phase=Phase.SCRIPTS, dependencies=["P0.02"], description="Compile and splice scripts")
def scripts(ctx: PatchContext) -> None:
    apply_script_patches(ctx.document, ctx.config.actionscript, ctx.resolver, ctx.codec, ctx.compiler)


@patch_step(id="P2.01", phase=Phase.TAGS, dependencies=["P1.01"], description="Field-level tag overrides")
def tag_modifications(ctx: PatchContext) -> None:
    modifications = ctx.config.swf.modifications
    if modifications:
        patched = apply_tag_modifications(ctx.document, modifications)
        logger.info("Tag modifications: %d of %d entries matched", patched, len(modifications))


@patch_step(id="P2.02", phase=Phase.TAGS, dependencies=["P2.01"], description="Stage bounds override")
def stage_bounds(ctx: PatchContext) -> None:
    bounds = ctx.config.swf.bounds
    if bounds is not None:
        ctx.document.header.frame_size = bounds.to_rect()


@patch_step(id="P3.01", phase=Phase.ELEMENTS, dependencies=["P2.02"], description="Inject new elements")
def new_elements(ctx: PatchContext) -> None:
    for new in ctx.config.all_new_elements():
        added = add_elements(ctx.document, new, ctx.resolver, ctx.pipeline_config)
        for kind, ids in added.items():
            ctx.added_ids.setdefault(kind, []).extend(ids)


@patch_step(id="P3.02", phase=Phase.ELEMENTS, dependencies=["P3.01"], description="Remove elements")
def element_removal(ctx: PatchContext) -> None:
    for remove in ctx.config.all_remove_elements():
        remove_elements(ctx.document, remove)
