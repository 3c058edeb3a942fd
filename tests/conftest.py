"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from swfpatcher.codec import JsonDocumentCodec
from swfpatcher.models.document import (
    DefineShape,
    DefineSprite,
    Document,
    DoAbc,
    Edge,
    FileAttributes,
    Header,
    PlaceObject,
    Rect,
    SetBackgroundColor,
    Shape,
    ShapeStyles,
    ShowFrame,
    SolidFill,
    SRgb8,
    StraightSRgba8,
    StyleChange,
    SymbolClass,
    NamedId,
    Vector2D,
)


# Sample SVGs

RED_RECT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100" viewBox="0 0 100 100">
  <path d="M10 10 L90 10 L90 60 L10 60 Z" fill="#FF0000" fill-opacity="1.0"/>
</svg>'''

STROKED_TRIANGLE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">
  <path d="M2 2 L22 2 L12 20 Z" fill="none" stroke="#00ff00" stroke-width="2" stroke-opacity="0.5"/>
</svg>'''

CUBIC_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">
  <path d="M0 0 C 0 10 10 10 10 0 S 20 -10 20 0" fill="#000"/>
</svg>'''

ARC_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24">
  <path d="M0 10 A10 10 0 0 1 20 10" stroke="black"/>
</svg>'''

GROUP_TRANSFORM_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <g transform="translate(10, 20)" fill="blue" opacity="0.5">
    <path d="M0 0 L10 0 L10 10 Z" transform="scale(2)"/>
  </g>
</svg>'''

MULTI_SHAPE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <rect x="10" y="10" width="30" height="20" fill="#4ECDC4"/>
  <circle cx="50" cy="50" r="20" fill="#FF6B6B"/>
  <defs><path d="M0 0 L5 5"/></defs>
</svg>'''

BAD_PATH_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10">
  <path d="M0 0 L5 5" fill="red"/>
  <path d="M0 0 L5 x" fill="red"/>
</svg>'''


# Document builders


def square_shape(x: int = 0, y: int = 0, size: int = 200) -> Shape:
    return Shape(
        initial_styles=ShapeStyles(fill=[SolidFill(color=StraightSRgba8(r=255, g=0, b=0))]),
        records=[
            StyleChange(move_to=Vector2D(x=x, y=y), left_fill=1),
            Edge(delta=Vector2D(x=size, y=0)),
            Edge(delta=Vector2D(x=0, y=size)),
            Edge(delta=Vector2D(x=-size, y=0)),
            Edge(delta=Vector2D(x=0, y=-size)),
        ],
    )


def define_shape(shape_id: int, **kwargs) -> DefineShape:
    return DefineShape(
        id=shape_id,
        bounds=Rect(x_min=-10, x_max=210, y_min=-10, y_max=210),
        shape=square_shape(),
        **kwargs,
    )


def build_document(version: int = 10) -> Document:
    """Header tags, two shapes, a sprite placing shape 7, one script, two frames."""
    return Document(
        header=Header(swf_version=version, frame_size=Rect(x_max=11000, y_max=8000)),
        tags=[
            FileAttributes(use_as3=True),
            SetBackgroundColor(color=SRgb8(r=255, g=255, b=255)),
            define_shape(3),
            define_shape(7),
            DefineSprite(
                id=8,
                tags=[PlaceObject(depth=1, character_id=7), ShowFrame()],
            ),
            DoAbc(flags=1, name="Main", data=b"\x10\x00\x2e\x00Main\x00"),
            SymbolClass(symbols=[NamedId(id=0, name="Main"), NamedId(id=8, name="Widget")]),
            PlaceObject(depth=1, character_id=7),
            PlaceObject(depth=2, character_id=3),
            ShowFrame(),
            ShowFrame(),
        ],
    )


def walk_tags(tags):
    """Yield every tag, descending into sprite timelines depth-first."""
    for tag in tags:
        yield tag
        if isinstance(tag, DefineSprite):
            yield from walk_tags(tag.tags)


@pytest.fixture
def document() -> Document:
    return build_document()


@pytest.fixture
def codec() -> JsonDocumentCodec:
    return JsonDocumentCodec()


@pytest.fixture
def red_rect_svg() -> str:
    return RED_RECT_SVG


@pytest.fixture
def svg_file(tmp_path: Path) -> Path:
    path = tmp_path / "rect.svg"
    path.write_text(RED_RECT_SVG, encoding="utf-8")
    return path
