"""Patch configuration models: the declarative description of one patch application.

The wire format stays loose (unknown keys are ignored, snake_case and camelCase
are both accepted) but every value is validated into these models as soon as
the file is read.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from swfpatcher.models.document import ButtonRecord, Label, NamedId, Rect, Scene, Tag, TextAlign


class ConfigModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BoundRange(ConfigModel):
    min: int
    max: int

    @model_validator(mode="after")
    def _check_order(self) -> BoundRange:
        if self.min > self.max:
            raise ValueError(f"inverted range: min {self.min} > max {self.max}")
        return self


class Bounds(ConfigModel):
    """User-supplied box in twips, ``{"x": {"min", "max"}, "y": {"min", "max"}}``."""

    x: BoundRange
    y: BoundRange

    def to_rect(self) -> Rect:
        return Rect(x_min=self.x.min, x_max=self.x.max, y_min=self.y.min, y_max=self.y.max)


class ShapeSource(ConfigModel):
    """SVG file whose first shape replaces the listed DefineShape IDs."""

    source: str
    shapes: list[int] = Field(default_factory=list)


class TagModification(ConfigModel):
    tag: str
    id: int | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


class ScriptPatch(ConfigModel):
    source: str
    mode: Literal["add", "replace"] = "replace"
    package: str | None = None
    class_name: str | None = None
    symbols: list[NamedId] = Field(default_factory=list)


class NewShape(ConfigModel):
    source: str
    id: int | None = None
    bounds: Bounds | None = None
    class_name: str | None = None


class NewSprite(ConfigModel):
    id: int | None = None
    frame_count: int = 1
    tags: list[Tag] = Field(default_factory=list)
    class_name: str | None = None


class NewText(ConfigModel):
    id: int | None = None
    bounds: Bounds
    text: str = ""
    variable_name: str | None = None
    font_id: int | None = None
    font_class: str | None = None
    font_size: float = 12.0  # pixels
    color: str = "#000000"
    align: TextAlign = "Left"
    multiline: bool = False
    word_wrap: bool = False
    html: bool = False
    readonly: bool = True
    no_select: bool = False
    border: bool = False
    use_glyph_font: bool = False
    max_length: int | None = None
    class_name: str | None = None


class NewBitmap(ConfigModel):
    source: str
    id: int | None = None
    class_name: str | None = None


class NewButton(ConfigModel):
    id: int | None = None
    track_as_menu: bool = False
    records: list[ButtonRecord] = Field(default_factory=list)
    class_name: str | None = None


class NewElements(ConfigModel):
    shapes: list[NewShape] = Field(default_factory=list)
    sprites: list[NewSprite] = Field(default_factory=list)
    texts: list[NewText] = Field(default_factory=list)
    bitmaps: list[NewBitmap] = Field(default_factory=list)
    buttons: list[NewButton] = Field(default_factory=list)
    scenes: list[Scene] = Field(default_factory=list)
    labels: list[Label] = Field(default_factory=list)


class RemoveElements(ConfigModel):
    shapes: list[int] = Field(default_factory=list)
    sprites: list[int] = Field(default_factory=list)
    texts: list[int] = Field(default_factory=list)
    buttons: list[int] = Field(default_factory=list)
    bitmaps: list[int] = Field(default_factory=list)
    frame_labels: list[str] = Field(default_factory=list)
    scenes: list[str] = Field(default_factory=list)

    @property
    def character_ids(self) -> set[int]:
        return {*self.shapes, *self.sprites, *self.texts, *self.buttons, *self.bitmaps}

    @property
    def names(self) -> set[str]:
        return {*self.frame_labels, *self.scenes}

    def is_empty(self) -> bool:
        return not self.character_ids and not self.names


class SwfModification(ConfigModel):
    bounds: Bounds | None = None
    modifications: list[TagModification] = Field(default_factory=list)
    new_elements: NewElements | None = None
    remove_elements: RemoveElements | None = None


class PatchConfig(ConfigModel):
    """One patch application, read once and never mutated."""

    file: list[ShapeSource] = Field(default_factory=list)
    transparent: list[int] = Field(default_factory=list)
    actionscript: list[ScriptPatch] = Field(default_factory=list)
    swf: SwfModification = Field(default_factory=SwfModification)
    new_elements: NewElements | None = None
    remove_elements: RemoveElements | None = None

    def all_new_elements(self) -> list[NewElements]:
        return [n for n in (self.swf.new_elements, self.new_elements) if n is not None]

    def all_remove_elements(self) -> list[RemoveElements]:
        return [r for r in (self.swf.remove_elements, self.remove_elements) if r is not None]
