"""Tag patch engine — field-level overrides on existing tags.

Config entries carry a kind string, an optional character ID and a loose
property mapping. ``compile_modification`` turns each entry into a typed
``TagUpdate`` (every value validated against the target attribute through a
pydantic TypeAdapter) before anything touches the document, so loosely typed
values never reach the mutation code.

Definition kinds match the first top-level tag with the same ID; control kinds
(no natural ID) match the first tag of their kind. Misses are not errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable

from pydantic import BaseModel, TypeAdapter, ValidationError

from swfpatcher.exceptions import TagPatchError
from swfpatcher.models.document import (
    DefineBinaryData,
    DefineBitmap,
    DefineButton,
    DefineButtonColorTransform,
    DefineButtonSound,
    DefineDynamicText,
    DefineFont,
    DefineMorphShape,
    DefineSceneAndFrameLabelData,
    DefineShape,
    DefineSprite,
    DefineText,
    Document,
    DoAbc,
    DoAction,
    FileAttributes,
    FrameLabel,
    PlaceObject,
    Rect,
    RemoveObject,
    SetBackgroundColor,
    SRgb8,
    StartSound,
    StraightSRgba8,
    SymbolClass,
    TagModel,
)
from swfpatcher.models.patch_config import TagModification

logger = logging.getLogger(__name__)

AttrPath = tuple[str, ...]


@dataclass(frozen=True)
class FieldUpdate:
    """One decoded override: attribute path from the tag, and its typed value."""

    path: AttrPath
    value: Any


@dataclass(frozen=True)
class TagUpdate:
    kind: str
    tag_type: type[TagModel]
    id_attr: str | None
    id: int | None
    fields: tuple[FieldUpdate, ...] = ()


@dataclass(frozen=True)
class _Target:
    tag_type: type[TagModel]
    # Attribute compared against the entry's id; None for control kinds
    id_attr: str | None
    # wire property name -> attribute path
    properties: dict[str, AttrPath] = field(default_factory=dict)
    # wire property name -> custom decoder for values that change shape
    decoders: dict[str, Callable[[Any], Any]] = field(default_factory=dict)


def _decode_background_color(value: Any) -> SRgb8:
    rgba = StraightSRgba8.model_validate(value)
    return SRgb8(r=rgba.r, g=rgba.g, b=rgba.b)


_TARGETS: dict[str, _Target] = {
    # Definition kinds
    "DefineBinaryDataTag": _Target(DefineBinaryData, "id", {"data": ("data",)}),
    "DefineBitmapTag": _Target(DefineBitmap, "id", {"data": ("data",)}),
    "DefineButtonTag": _Target(DefineButton, "id", {"records": ("records",)}),
    "DefineButtonColorTransformTag": _Target(
        DefineButtonColorTransform, "button_id", {"transform": ("transform",)}
    ),
    "DefineButtonSoundTag": _Target(
        DefineButtonSound,
        "button_id",
        {
            "overUpToIdle": ("over_up_to_idle",),
            "idleToOverUp": ("idle_to_over_up",),
            "overUpToOverDown": ("over_up_to_over_down",),
            "overDownToOverUp": ("over_down_to_over_up",),
        },
    ),
    "DefineDynamicTextTag": _Target(DefineDynamicText, "id", {"text": ("text",)}),
    "DefineFontTag": _Target(DefineFont, "id", {"glyphs": ("glyphs",)}),
    "DefineMorphShapeTag": _Target(DefineMorphShape, "id", {"shape": ("shape",)}),
    "DefineShapeTag": _Target(
        DefineShape,
        "id",
        {
            "shape": ("shape",),
            "bounds": ("bounds",),
            "records": ("shape", "records"),
            "styles": ("shape", "initial_styles"),
            "fillStyles": ("shape", "initial_styles", "fill"),
            "lineStyles": ("shape", "initial_styles", "line"),
        },
    ),
    "DefineSpriteTag": _Target(DefineSprite, "id", {"tags": ("tags",)}),
    "DefineTextTag": _Target(DefineText, "id", {"records": ("records",)}),
    # Control kinds
    "DoAbcTag": _Target(DoAbc, None, {"data": ("data",)}),
    "DoActionTag": _Target(DoAction, None, {"actions": ("actions",)}),
    "FileAttributesTag": _Target(
        FileAttributes,
        None,
        {
            "actionScript3": ("use_as3",),
            "hasMetadata": ("has_metadata",),
            "useNetwork": ("use_network",),
            "useGPU": ("use_gpu",),
            "useDirectBlit": ("use_direct_blit",),
            "useRelativeUrls": ("use_relative_urls",),
            "noCrossDomainCaching": ("no_cross_domain_caching",),
        },
    ),
    "FrameLabelTag": _Target(FrameLabel, None, {"name": ("name",)}),
    "PlaceObjectTag": _Target(
        PlaceObject, None, {"matrix": ("matrix",), "colorTransform": ("color_transform",)}
    ),
    "RemoveObjectTag": _Target(RemoveObject, None, {"depth": ("depth",)}),
    "SetBackgroundColorTag": _Target(
        SetBackgroundColor,
        None,
        {"backgroundColor": ("color",)},
        {"backgroundColor": _decode_background_color},
    ),
    "StartSoundTag": _Target(StartSound, None, {"soundInfo": ("sound_info",)}),
    "SymbolClassTag": _Target(SymbolClass, None, {"symbols": ("symbols",)}),
    "DefineSceneAndFrameLabelDataTag": _Target(
        DefineSceneAndFrameLabelData, None, {"scenes": ("scenes",), "labels": ("labels",)}
    ),
}

# Whole-shape replacement supersedes every other DefineShape property, and the
# whole style table supersedes the per-list properties.
_SUPERSEDED_BY: dict[str, set[str]] = {
    "shape": {"bounds", "records", "styles", "fillStyles", "lineStyles"},
    "styles": {"fillStyles", "lineStyles"},
}


def supported_kinds() -> list[str]:
    return sorted(_TARGETS)


@lru_cache(maxsize=None)
def _adapter_for(tag_type: type[BaseModel], path: AttrPath) -> TypeAdapter:
    """TypeAdapter for the annotation found at ``path`` below ``tag_type``."""
    model: Any = tag_type
    info = None
    for attr in path:
        info = model.model_fields[attr]
        model = info.annotation
    return TypeAdapter(info.rebuild_annotation())


def _decode_value(kind: str, target: _Target, name: str, value: Any) -> Any:
    path = target.properties[name]
    try:
        decoder = target.decoders.get(name)
        if decoder is not None:
            decoded = decoder(value)
        else:
            decoded = _adapter_for(target.tag_type, path).validate_python(value)
    except ValidationError as e:
        raise TagPatchError(kind, name, str(e)) from e

    if isinstance(decoded, Rect) and not decoded.is_normalized:
        raise TagPatchError(
            kind,
            name,
            f"inverted rect (x {decoded.x_min}..{decoded.x_max}, y {decoded.y_min}..{decoded.y_max})",
        )
    return decoded


def compile_modification(modification: TagModification) -> TagUpdate | None:
    """Decode one config entry. Returns None for kinds this engine does not know."""
    kind = modification.tag
    target = _TARGETS.get(kind)
    if target is None:
        logger.warning(
            "Ignoring modification for unknown tag kind %r (known: %s)", kind, ", ".join(supported_kinds())
        )
        return None

    props = dict(modification.properties)
    for winner, losers in _SUPERSEDED_BY.items():
        if winner in props and target.tag_type is DefineShape:
            for name in losers & props.keys():
                logger.debug(
                    "%s id=%s: '%s' ignored because '%s' is set", kind, modification.id, name, winner
                )
                del props[name]

    fields: list[FieldUpdate] = []
    for name, value in props.items():
        if name not in target.properties:
            logger.warning("Ignoring unknown property %r for %s", name, kind)
            continue
        fields.append(FieldUpdate(target.properties[name], _decode_value(kind, target, name, value)))

    return TagUpdate(
        kind=kind,
        tag_type=target.tag_type,
        id_attr=target.id_attr,
        id=modification.id,
        fields=tuple(fields),
    )


def _find_target(tags: list[TagModel], update: TagUpdate) -> TagModel | None:
    for tag in tags:
        if not isinstance(tag, update.tag_type):
            continue
        if update.id_attr is None or getattr(tag, update.id_attr) == update.id:
            return tag
    return None


def apply_tag_update(document: Document, update: TagUpdate) -> bool:
    """Apply one decoded update. Returns False when no tag matched."""
    if update.id_attr is not None and update.id is None:
        logger.warning("%s modification has no id; skipped", update.kind)
        return False

    tag = _find_target(document.tags, update)
    if tag is None:
        logger.debug("No %s with id=%s; modification skipped", update.kind, update.id)
        return False

    for fu in update.fields:
        obj: Any = tag
        for attr in fu.path[:-1]:
            obj = getattr(obj, attr)
        setattr(obj, fu.path[-1], fu.value)
    logger.debug("Patched %s id=%s (%d fields)", update.kind, update.id, len(update.fields))
    return True


def apply_tag_modifications(document: Document, modifications: list[TagModification]) -> int:
    """Decode every entry first, then apply them in order. Returns the number of tags patched.

    Raises TagPatchError before any mutation if one value fails to decode.
    """
    updates = [u for u in map(compile_modification, modifications) if u is not None]
    return sum(apply_tag_update(document, u) for u in updates)
