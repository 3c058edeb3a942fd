"""Decoded movie document: header plus an ordered list of typed tags.

Every variant set (tags, shape records, fill styles) is a discriminated union
keyed by ``type``. Attributes are snake_case; the JSON wire form uses camelCase
aliases and either spelling is accepted on input.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


def _coerce_bytes(value: Any) -> Any:
    """Accept bytes, a list of ints or a hex string."""
    if isinstance(value, str):
        try:
            return bytes.fromhex(value)
        except ValueError as e:
            raise ValueError(f"invalid hex payload: {e}") from e
    if isinstance(value, list):
        try:
            return bytes(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"invalid byte list: {e}") from e
    return value


Payload = Annotated[
    bytes,
    BeforeValidator(_coerce_bytes),
    PlainSerializer(lambda b: b.hex(), return_type=str, when_used="json"),
]

CompressionMethod = Literal["None", "Deflate", "Lzma"]
CapStyle = Literal["None", "Round", "Square"]
JoinStyle = Literal["Bevel", "Miter", "Round"]
TextAlign = Literal["Left", "Right", "Center", "Justify"]


class SwfModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TagModel(SwfModel):
    # Decoders may attach fields this model does not interpret; keep them.
    model_config = ConfigDict(extra="allow")


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


class Rect(SwfModel):
    """Axis-aligned box in twips."""

    x_min: int = 0
    x_max: int = 0
    y_min: int = 0
    y_max: int = 0

    @property
    def is_normalized(self) -> bool:
        return self.x_min <= self.x_max and self.y_min <= self.y_max


class Vector2D(SwfModel):
    x: int = 0
    y: int = 0


class SRgb8(SwfModel):
    r: int = Field(0, ge=0, le=255)
    g: int = Field(0, ge=0, le=255)
    b: int = Field(0, ge=0, le=255)


class StraightSRgba8(SwfModel):
    r: int = Field(0, ge=0, le=255)
    g: int = Field(0, ge=0, le=255)
    b: int = Field(0, ge=0, le=255)
    a: int = Field(255, ge=0, le=255)


class Matrix(SwfModel):
    scale_x: float = 1.0
    scale_y: float = 1.0
    rotate_skew0: float = 0.0
    rotate_skew1: float = 0.0
    translate_x: int = 0
    translate_y: int = 0


class ColorTransform(SwfModel):
    red_mult: float = 1.0
    green_mult: float = 1.0
    blue_mult: float = 1.0
    red_add: int = 0
    green_add: int = 0
    blue_add: int = 0


class ColorTransformWithAlpha(ColorTransform):
    alpha_mult: float = 1.0
    alpha_add: int = 0


class NamedId(SwfModel):
    id: int
    name: str


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------


class SolidFill(SwfModel):
    type: Literal["Solid"] = "Solid"
    color: StraightSRgba8


class LinearGradientFill(SwfModel):
    type: Literal["LinearGradient"] = "LinearGradient"
    matrix: Matrix = Field(default_factory=Matrix)
    gradient: dict[str, Any] = Field(default_factory=dict)


class RadialGradientFill(SwfModel):
    type: Literal["RadialGradient"] = "RadialGradient"
    matrix: Matrix = Field(default_factory=Matrix)
    gradient: dict[str, Any] = Field(default_factory=dict)


class FocalGradientFill(SwfModel):
    type: Literal["FocalGradient"] = "FocalGradient"
    matrix: Matrix = Field(default_factory=Matrix)
    gradient: dict[str, Any] = Field(default_factory=dict)


class BitmapFill(SwfModel):
    type: Literal["Bitmap"] = "Bitmap"
    bitmap_id: int
    matrix: Matrix = Field(default_factory=Matrix)
    repeating: bool = True
    smoothed: bool = True


FillStyle = Annotated[
    Union[SolidFill, LinearGradientFill, RadialGradientFill, FocalGradientFill, BitmapFill],
    Field(discriminator="type"),
]


class LineStyle(SwfModel):
    width: int
    start_cap: CapStyle = "Round"
    end_cap: CapStyle = "Round"
    join: JoinStyle = "Round"
    miter_limit: float | None = None
    no_h_scale: bool = False
    no_v_scale: bool = False
    no_close: bool = False
    pixel_hinting: bool = False
    fill: FillStyle


class ShapeStyles(SwfModel):
    fill: list[FillStyle] = Field(default_factory=list)
    line: list[LineStyle] = Field(default_factory=list)


class StyleChange(SwfModel):
    type: Literal["StyleChange"] = "StyleChange"
    move_to: Vector2D | None = None
    left_fill: int | None = None
    right_fill: int | None = None
    line_style: int | None = None
    new_styles: ShapeStyles | None = None


class Edge(SwfModel):
    """Straight edge, or quadratic curve when ``control_delta`` is set.

    ``delta`` runs from the pen to the anchor, ``control_delta`` from the pen
    to the control point.
    """

    type: Literal["Edge"] = "Edge"
    delta: Vector2D
    control_delta: Vector2D | None = None


ShapeRecord = Annotated[Union[StyleChange, Edge], Field(discriminator="type")]


class Shape(SwfModel):
    initial_styles: ShapeStyles = Field(default_factory=ShapeStyles)
    records: list[ShapeRecord] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Tag payload helpers
# ---------------------------------------------------------------------------


class ButtonRecord(SwfModel):
    state_up: bool = False
    state_over: bool = False
    state_down: bool = False
    state_hit_test: bool = False
    character_id: int
    depth: int
    matrix: Matrix = Field(default_factory=Matrix)
    color_transform: ColorTransformWithAlpha | None = None
    filters: list[Any] = Field(default_factory=list)
    blend_mode: str = "Normal"


class ButtonSound(SwfModel):
    sound_id: int
    sound_info: dict[str, Any] = Field(default_factory=dict)


class GlyphEntry(SwfModel):
    index: int
    advance: int


class TextRecord(SwfModel):
    font_id: int | None = None
    color: StraightSRgba8 | None = None
    offset_x: int = 0
    offset_y: int = 0
    font_size: int | None = None
    entries: list[GlyphEntry] = Field(default_factory=list)


class Scene(SwfModel):
    offset: int
    name: str


class Label(SwfModel):
    frame: int
    name: str


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


class DefineShape(TagModel):
    type: Literal["DefineShape"] = "DefineShape"
    id: int
    bounds: Rect = Field(default_factory=Rect)
    edge_bounds: Rect | None = None
    has_fill_winding: bool = False
    has_non_scaling_strokes: bool = False
    has_scaling_strokes: bool = False
    shape: Shape = Field(default_factory=Shape)


class DefineMorphShape(TagModel):
    type: Literal["DefineMorphShape"] = "DefineMorphShape"
    id: int
    bounds: Rect = Field(default_factory=Rect)
    morph_bounds: Rect = Field(default_factory=Rect)
    edge_bounds: Rect | None = None
    morph_edge_bounds: Rect | None = None
    has_non_scaling_strokes: bool = False
    has_scaling_strokes: bool = False
    shape: dict[str, Any] = Field(default_factory=dict)


class DefineSprite(TagModel):
    type: Literal["DefineSprite"] = "DefineSprite"
    id: int
    frame_count: int = 1
    tags: list[Tag] = Field(default_factory=list)


class DefineBitmap(TagModel):
    type: Literal["DefineBitmap"] = "DefineBitmap"
    id: int
    width: int = 0
    height: int = 0
    media_type: str = "image/png"
    data: Payload = b""


class DefineButton(TagModel):
    type: Literal["DefineButton"] = "DefineButton"
    id: int
    track_as_menu: bool = False
    records: list[ButtonRecord] = Field(default_factory=list)
    actions: list[dict[str, Any]] = Field(default_factory=list)


class DefineButtonColorTransform(TagModel):
    type: Literal["DefineButtonColorTransform"] = "DefineButtonColorTransform"
    button_id: int
    transform: ColorTransform = Field(default_factory=ColorTransform)


class DefineButtonSound(TagModel):
    type: Literal["DefineButtonSound"] = "DefineButtonSound"
    button_id: int
    over_up_to_idle: ButtonSound | None = None
    idle_to_over_up: ButtonSound | None = None
    over_up_to_over_down: ButtonSound | None = None
    over_down_to_over_up: ButtonSound | None = None


class DefineText(TagModel):
    type: Literal["DefineText"] = "DefineText"
    id: int
    bounds: Rect = Field(default_factory=Rect)
    matrix: Matrix = Field(default_factory=Matrix)
    records: list[TextRecord] = Field(default_factory=list)


class DefineDynamicText(TagModel):
    type: Literal["DefineDynamicText"] = "DefineDynamicText"
    id: int
    bounds: Rect = Field(default_factory=Rect)
    word_wrap: bool = False
    multiline: bool = False
    password: bool = False
    readonly: bool = False
    auto_size: bool = False
    no_select: bool = False
    border: bool = False
    was_static: bool = False
    html: bool = False
    use_glyph_font: bool = False
    font_id: int | None = None
    font_class: str | None = None
    font_size: int | None = None
    color: StraightSRgba8 | None = None
    max_length: int | None = None
    align: TextAlign | None = None
    margin_left: int = 0
    margin_right: int = 0
    indent: int = 0
    leading: int = 0
    variable_name: str | None = None
    text: str | None = None


class DefineBinaryData(TagModel):
    type: Literal["DefineBinaryData"] = "DefineBinaryData"
    id: int
    data: Payload = b""


class DefineFont(TagModel):
    type: Literal["DefineFont"] = "DefineFont"
    id: int
    font_name: str = ""
    is_bold: bool = False
    is_italic: bool = False
    glyphs: list[Any] | None = None


class DoAbc(TagModel):
    type: Literal["DoAbc"] = "DoAbc"
    flags: int = 0
    name: str = ""
    data: Payload = b""


class DoAction(TagModel):
    type: Literal["DoAction"] = "DoAction"
    actions: Payload = b""


class PlaceObject(TagModel):
    type: Literal["PlaceObject"] = "PlaceObject"
    is_update: bool = False
    depth: int
    character_id: int | None = None
    matrix: Matrix | None = None
    color_transform: ColorTransformWithAlpha | None = None
    ratio: int | None = None
    name: str | None = None
    class_name: str | None = None
    clip_depth: int | None = None
    filters: list[Any] | None = None
    blend_mode: str | None = None
    bitmap_cache: bool | None = None
    visible: bool | None = None
    background_color: StraightSRgba8 | None = None
    clip_actions: list[Any] | None = None


class RemoveObject(TagModel):
    type: Literal["RemoveObject"] = "RemoveObject"
    depth: int
    character_id: int | None = None


class FrameLabel(TagModel):
    type: Literal["FrameLabel"] = "FrameLabel"
    name: str
    is_anchor: bool = False


class SymbolClass(TagModel):
    type: Literal["SymbolClass"] = "SymbolClass"
    symbols: list[NamedId] = Field(default_factory=list)


class ExportAssets(TagModel):
    type: Literal["ExportAssets"] = "ExportAssets"
    assets: list[NamedId] = Field(default_factory=list)


class SetBackgroundColor(TagModel):
    type: Literal["SetBackgroundColor"] = "SetBackgroundColor"
    color: SRgb8 = Field(default_factory=SRgb8)


class FileAttributes(TagModel):
    type: Literal["FileAttributes"] = "FileAttributes"
    use_direct_blit: bool = False
    use_gpu: bool = False
    has_metadata: bool = False
    use_as3: bool = False
    no_cross_domain_caching: bool = False
    use_relative_urls: bool = False
    use_network: bool = False


class DefineSceneAndFrameLabelData(TagModel):
    type: Literal["DefineSceneAndFrameLabelData"] = "DefineSceneAndFrameLabelData"
    scenes: list[Scene] = Field(default_factory=list)
    labels: list[Label] = Field(default_factory=list)


class StartSound(TagModel):
    type: Literal["StartSound"] = "StartSound"
    sound_id: int
    sound_info: dict[str, Any] = Field(default_factory=dict)


class ShowFrame(TagModel):
    type: Literal["ShowFrame"] = "ShowFrame"


class Metadata(TagModel):
    type: Literal["Metadata"] = "Metadata"
    metadata: str = ""


class RawTag(TagModel):
    """A tag kind the model does not interpret, kept as opaque bytes."""

    type: Literal["Raw"] = "Raw"
    code: int
    data: Payload = b""


Tag = Annotated[
    Union[
        DefineShape,
        DefineMorphShape,
        DefineSprite,
        DefineBitmap,
        DefineButton,
        DefineButtonColorTransform,
        DefineButtonSound,
        DefineText,
        DefineDynamicText,
        DefineBinaryData,
        DefineFont,
        DoAbc,
        DoAction,
        PlaceObject,
        RemoveObject,
        FrameLabel,
        SymbolClass,
        ExportAssets,
        SetBackgroundColor,
        FileAttributes,
        DefineSceneAndFrameLabelData,
        StartSound,
        ShowFrame,
        Metadata,
        RawTag,
    ],
    Field(discriminator="type"),
]

# Tags that define a character and carry its ID in ``id``.
DEFINITION_TAGS: tuple[type[TagModel], ...] = (
    DefineShape,
    DefineMorphShape,
    DefineSprite,
    DefineBitmap,
    DefineButton,
    DefineText,
    DefineDynamicText,
    DefineBinaryData,
    DefineFont,
)

# Tag codes of definitions whose body starts with the u16 character ID. Kept
# as Raw when the model does not interpret them (sounds, video, old fonts).
RAW_DEFINITION_CODES: frozenset[int] = frozenset(
    {
        2,  # DefineShape
        6,  # DefineBits
        7,  # DefineButton
        10,  # DefineFont
        11,  # DefineText
        14,  # DefineSound
        20,  # DefineBitsLossless
        21,  # DefineBitsJPEG2
        22,  # DefineShape2
        32,  # DefineShape3
        33,  # DefineText2
        34,  # DefineButton2
        35,  # DefineBitsJPEG3
        36,  # DefineBitsLossless2
        37,  # DefineEditText
        39,  # DefineSprite
        46,  # DefineMorphShape
        48,  # DefineFont2
        60,  # DefineVideoStream
        75,  # DefineFont3
        83,  # DefineShape4
        84,  # DefineMorphShape2
        87,  # DefineBinaryData
        90,  # DefineBitsJPEG4
        91,  # DefineFont4
    }
)


def character_id(tag: TagModel) -> int | None:
    """Character ID of a definition tag, None for every other kind."""
    if isinstance(tag, DEFINITION_TAGS):
        return tag.id
    if isinstance(tag, RawTag) and tag.code in RAW_DEFINITION_CODES and len(tag.data) >= 2:
        return int.from_bytes(tag.data[:2], "little")
    return None


class Header(SwfModel):
    swf_version: int = 10
    compression: CompressionMethod = "None"
    frame_size: Rect = Field(default_factory=Rect)
    frame_rate: float = 30.0
    frame_count: int = 1


class Document(SwfModel):
    """A decoded movie. Owns its tags; sprites own their nested tags."""

    header: Header = Field(default_factory=Header)
    tags: list[Tag] = Field(default_factory=list)

    def find_definition(self, char_id: int) -> TagModel | None:
        """First top-level definition of ``char_id``, of any kind."""
        for tag in self.tags:
            if character_id(tag) == char_id:
                return tag
        return None


DefineSprite.model_rebuild()
Document.model_rebuild()
