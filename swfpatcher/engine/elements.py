"""Element lifecycle — character ID allocation, new-element injection and removal.

IDs are unique per definition scope (the top-level list, or one sprite's
nested list). Allocation only looks at the top-level scope and rescans on
every call, so IDs handed out earlier in the same pass are never reused.
"""

from __future__ import annotations

import io
import logging
from collections import defaultdict

from PIL import Image, ImageColor, UnidentifiedImageError

from swfpatcher.archive import SourceResolver
from swfpatcher.engine.bounds import calculate_shape_bounds
from swfpatcher.engine.config import PipelineConfig
from swfpatcher.engine.symbols import merge_symbol_bindings
from swfpatcher.exceptions import ElementConflictError, SourceError, TagNotFoundError
from swfpatcher.models.document import (
    DefineBitmap,
    DefineButton,
    DefineButtonColorTransform,
    DefineButtonSound,
    DefineDynamicText,
    DefineMorphShape,
    DefineSceneAndFrameLabelData,
    DefineShape,
    DefineSprite,
    DefineText,
    Document,
    ExportAssets,
    FileAttributes,
    FrameLabel,
    Label,
    Metadata,
    NamedId,
    PlaceObject,
    RemoveObject,
    Scene,
    SetBackgroundColor,
    Shape,
    ShowFrame,
    StraightSRgba8,
    SymbolClass,
    TagModel,
    character_id,
)
from swfpatcher.models.patch_config import (
    NewBitmap,
    NewButton,
    NewElements,
    NewShape,
    NewSprite,
    NewText,
    RemoveElements,
)
from swfpatcher.svg.compiler import compile_svg
from swfpatcher.utils.math_helpers import to_twips

logger = logging.getLogger(__name__)

# Tags that lead the top-level list; generated scene data goes right after them
_LEADING_TAGS = (FileAttributes, Metadata, SetBackgroundColor)

# Removal kind -> definition tag types it may delete
_REMOVABLE: dict[str, tuple[type[TagModel], ...]] = {
    "shapes": (DefineShape, DefineMorphShape),
    "sprites": (DefineSprite,),
    "texts": (DefineText, DefineDynamicText),
    "buttons": (DefineButton,),
    "bitmaps": (DefineBitmap,),
}


# ---------------------------------------------------------------------------
# ID allocation
# ---------------------------------------------------------------------------


def used_character_ids(tags: list[TagModel]) -> set[int]:
    return {cid for cid in map(character_id, tags) if cid is not None}


def next_character_id(tags: list[TagModel]) -> int:
    """Highest top-level character ID + 1, or 1 for a document without definitions."""
    return max(used_character_ids(tags), default=0) + 1


def _claim_id(document: Document, requested: int | None, kind: str) -> int:
    if requested is None:
        return next_character_id(document.tags)
    if document.find_definition(requested) is not None:
        raise ElementConflictError(f"Cannot add {kind} with id {requested}: ID already in use")
    return requested


# ---------------------------------------------------------------------------
# Shapes from SVG sources
# ---------------------------------------------------------------------------


def first_shape(svg_text: str, source: str, config: PipelineConfig) -> Shape:
    """Compile an SVG source and keep its first Shape."""
    shapes = compile_svg(svg_text, config)
    if not shapes:
        raise SourceError(f"No drawable elements in {source}")
    if len(shapes) > 1:
        logger.info("%s produced %d shapes; using the first", source, len(shapes))
    return shapes[0]


def replace_shape(document: Document, shape_id: int, shape: Shape, config: PipelineConfig) -> DefineShape:
    """Swap the Shape of DefineShape ``shape_id`` and recompute its bounds."""
    tag = document.find_definition(shape_id)
    if not isinstance(tag, DefineShape):
        raise TagNotFoundError(f"Shape with ID {shape_id} not found")
    tag.shape = shape.model_copy(deep=True)
    tag.bounds = calculate_shape_bounds(tag.shape, config.bounds_padding)
    return tag


# ---------------------------------------------------------------------------
# Addition
# ---------------------------------------------------------------------------


def _insert_definition(tags: list[TagModel], tag: TagModel) -> None:
    """Insert before the first ShowFrame so the definition exists in frame 1."""
    for i, existing in enumerate(tags):
        if isinstance(existing, ShowFrame):
            tags.insert(i, tag)
            return
    tags.append(tag)


def _build_shape(
    document: Document, spec: NewShape, resolver: SourceResolver, config: PipelineConfig
) -> DefineShape:
    shape = first_shape(resolver.read_text(spec.source), spec.source, config)
    if spec.bounds is not None:
        bounds = spec.bounds.to_rect()
    else:
        bounds = calculate_shape_bounds(shape, config.bounds_padding)
    return DefineShape(id=_claim_id(document, spec.id, "shape"), bounds=bounds, shape=shape)


def _build_sprite(document: Document, spec: NewSprite) -> DefineSprite:
    return DefineSprite(
        id=_claim_id(document, spec.id, "sprite"),
        frame_count=spec.frame_count,
        tags=[t.model_copy(deep=True) for t in spec.tags],
    )


def _parse_text_color(value: str) -> StraightSRgba8:
    try:
        rgb = ImageColor.getrgb(value)
    except ValueError as e:
        raise SourceError(f"Invalid text color {value!r}") from e
    alpha = rgb[3] if len(rgb) == 4 else 255
    return StraightSRgba8(r=rgb[0], g=rgb[1], b=rgb[2], a=alpha)


def _build_text(document: Document, spec: NewText, config: PipelineConfig) -> DefineDynamicText:
    return DefineDynamicText(
        id=_claim_id(document, spec.id, "text"),
        bounds=spec.bounds.to_rect(),
        word_wrap=spec.word_wrap,
        multiline=spec.multiline,
        readonly=spec.readonly,
        no_select=spec.no_select,
        border=spec.border,
        html=spec.html,
        use_glyph_font=spec.use_glyph_font,
        font_id=spec.font_id,
        font_class=spec.font_class,
        font_size=to_twips(spec.font_size, config.twips_per_pixel),
        color=_parse_text_color(spec.color),
        max_length=spec.max_length,
        align=spec.align,
        variable_name=spec.variable_name,
        text=spec.text,
    )


def _build_bitmap(document: Document, spec: NewBitmap, resolver: SourceResolver) -> DefineBitmap:
    data = resolver.read_bytes(spec.source)
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            media_type = Image.MIME.get(img.format or "", "application/octet-stream")
    except UnidentifiedImageError as e:
        raise SourceError(f"Unsupported image format: {spec.source}") from e
    return DefineBitmap(
        id=_claim_id(document, spec.id, "bitmap"),
        width=width,
        height=height,
        media_type=media_type,
        data=data,
    )


def _build_button(document: Document, spec: NewButton) -> DefineButton:
    return DefineButton(
        id=_claim_id(document, spec.id, "button"),
        track_as_menu=spec.track_as_menu,
        records=[r.model_copy(deep=True) for r in spec.records],
    )


def _scene_data_tag(document: Document) -> DefineSceneAndFrameLabelData:
    for tag in document.tags:
        if isinstance(tag, DefineSceneAndFrameLabelData):
            return tag
    tag = DefineSceneAndFrameLabelData()
    index = 0
    while index < len(document.tags) and isinstance(document.tags[index], _LEADING_TAGS):
        index += 1
    document.tags.insert(index, tag)
    logger.debug("Created DefineSceneAndFrameLabelData at index %d", index)
    return tag


def _merge_named(existing: list, additions: list) -> None:
    """Append entries, replacing any existing entry with the same name."""
    for entry in additions:
        copy = entry.model_copy()
        for i, old in enumerate(existing):
            if old.name == entry.name:
                existing[i] = copy
                break
        else:
            existing.append(copy)


def add_scenes(document: Document, scenes: list[Scene], labels: list[Label]) -> None:
    if not scenes and not labels:
        return
    tag = _scene_data_tag(document)
    _merge_named(tag.scenes, scenes)
    _merge_named(tag.labels, labels)
    tag.scenes.sort(key=lambda s: s.offset)


def add_elements(
    document: Document,
    new: NewElements,
    resolver: SourceResolver,
    config: PipelineConfig | None = None,
) -> dict[str, list[int]]:
    """Inject the described elements. Returns the character IDs assigned, per kind.

    Raises ElementConflictError when an explicit ID is already taken.
    """
    config = config or PipelineConfig()
    added: dict[str, list[int]] = defaultdict(list)
    bindings: list[NamedId] = []

    def register(kind: str, tag: TagModel, class_name: str | None) -> None:
        _insert_definition(document.tags, tag)
        added[kind].append(tag.id)
        if class_name:
            bindings.append(NamedId(id=tag.id, name=class_name))
        logger.debug("Added %s id=%d", type(tag).__name__, tag.id)

    for spec in new.shapes:
        register("shapes", _build_shape(document, spec, resolver, config), spec.class_name)
    for spec in new.sprites:
        register("sprites", _build_sprite(document, spec), spec.class_name)
    for spec in new.texts:
        register("texts", _build_text(document, spec, config), spec.class_name)
    for spec in new.bitmaps:
        register("bitmaps", _build_bitmap(document, spec, resolver), spec.class_name)
    for spec in new.buttons:
        register("buttons", _build_button(document, spec), spec.class_name)

    add_scenes(document, new.scenes, new.labels)
    merge_symbol_bindings(document, bindings)
    return dict(added)


# ---------------------------------------------------------------------------
# Removal
# ---------------------------------------------------------------------------


def _references_removed(tag: TagModel, ids: set[int], names: set[str], button_ids: set[int]) -> bool:
    if isinstance(tag, (PlaceObject, RemoveObject)):
        return tag.character_id is not None and tag.character_id in ids
    if isinstance(tag, FrameLabel):
        return tag.name in names
    if isinstance(tag, (DefineButtonColorTransform, DefineButtonSound)):
        return tag.button_id in button_ids
    return False


def _purge_references(tags: list[TagModel], ids: set[int], names: set[str], button_ids: set[int]) -> int:
    """Strip references in place, descending into sprite timelines. Returns tags dropped."""
    kept: list[TagModel] = []
    dropped = 0
    for tag in tags:
        if _references_removed(tag, ids, names, button_ids):
            dropped += 1
            continue
        if isinstance(tag, (SymbolClass, ExportAssets)):
            entries = tag.symbols if isinstance(tag, SymbolClass) else tag.assets
            entries[:] = [e for e in entries if e.id not in ids]
        elif isinstance(tag, DefineSprite):
            dropped += _purge_references(tag.tags, ids, names, button_ids)
        kept.append(tag)
    tags[:] = kept
    return dropped


def _is_removed_definition(tag: TagModel, remove: RemoveElements) -> bool:
    for kind, types in _REMOVABLE.items():
        if isinstance(tag, types) and tag.id in getattr(remove, kind):
            return True
    return False


def remove_elements(document: Document, remove: RemoveElements) -> int:
    """Remove elements and every reference to them. Returns the number of tags dropped.

    IDs or names that are not present are ignored, so the operation is
    idempotent.
    """
    if remove.is_empty():
        return 0

    ids, names, button_ids = remove.character_ids, remove.names, set(remove.buttons)

    dropped = _purge_references(document.tags, ids, names, button_ids)

    kept: list[TagModel] = []
    for tag in document.tags:
        if _is_removed_definition(tag, remove):
            logger.debug("Removed %s id=%d", type(tag).__name__, tag.id)
            dropped += 1
            continue
        if isinstance(tag, DefineSceneAndFrameLabelData) and names:
            tag.scenes = [s for s in tag.scenes if s.name not in names]
            tag.labels = [lb for lb in tag.labels if lb.name not in names]
            if not tag.scenes and not tag.labels:
                dropped += 1
                continue
        kept.append(tag)
    document.tags[:] = kept

    logger.info("Element removal dropped %d tags", dropped)
    return dropped
