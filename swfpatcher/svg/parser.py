"""SVG parser — element tree → drawable paths with resolved transform and paint.

Walks the document in order, composing ancestor transforms and inheriting
presentation attributes from containers. Basic shapes are converted to path
data here so the compiler only ever sees ``d`` strings.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from PIL import ImageColor

from swfpatcher.exceptions import SVGParseError
from swfpatcher.svg.primitives import SHAPE_CONVERTERS
from swfpatcher.svg.transform import parse_transform
from swfpatcher.utils import geometry
from swfpatcher.utils.geometry import Affine

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]

CONTAINER_TAGS = {"svg", "g", "a", "switch"}

# Subtrees that are never drawn directly
SKIP_TAGS = {
    "defs", "clipPath", "mask", "symbol", "pattern", "marker",
    "style", "title", "desc", "metadata",
}

_PAINT_PROPS = ("fill", "stroke", "stroke-width", "fill-opacity", "stroke-opacity", "opacity")

_NUMBER_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*(%|px)?\s*$")


@dataclass
class SvgPath:
    """One drawable element: path data in local coordinates plus resolved style."""

    d: str
    matrix: Affine = field(default_factory=geometry.identity)
    fill: RGB | None = None
    fill_opacity: float = 1.0
    stroke: RGB | None = None
    stroke_opacity: float = 1.0
    stroke_width: float = 1.0
    tag: str = "path"


def _strip_ns(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _parse_style_attr(style: str) -> dict[str, str]:
    decls: dict[str, str] = {}
    for part in style.split(";"):
        if ":" not in part:
            continue
        key, value = part.split(":", 1)
        decls[key.strip()] = value.strip()
    return decls


def _own_presentation(elem: ET.Element) -> dict[str, str]:
    props = {k: elem.attrib[k].strip() for k in _PAINT_PROPS if k in elem.attrib}
    style = elem.attrib.get("style")
    if style:
        props.update({k: v for k, v in _parse_style_attr(style).items() if k in _PAINT_PROPS})
    return props


def _number(raw: str | None, default: float) -> float:
    if raw is None:
        return default
    m = _NUMBER_RE.match(raw)
    if not m:
        logger.warning("Ignoring invalid numeric value %r", raw)
        return default
    value = float(m.group(1))
    return value / 100.0 if m.group(2) == "%" else value


def parse_color(value: str | None) -> RGB | None:
    """Resolve a paint to RGB. ``none``, paint servers and unknown colors are undefined."""
    if value is None or value in ("none", "transparent"):
        return None
    try:
        rgb = ImageColor.getrgb(value)
    except ValueError:
        logger.debug("Unsupported paint %r treated as undefined", value)
        return None
    return (rgb[0], rgb[1], rgb[2])


def parse_svg(svg_text: str) -> list[SvgPath]:
    """Parse SVG text into drawable paths in document order."""
    try:
        root = ET.fromstring(svg_text)
    except ET.ParseError as e:
        raise SVGParseError(f"Malformed SVG document: {e}") from e

    if _strip_ns(root.tag) != "svg":
        raise SVGParseError(f"Root element is <{_strip_ns(root.tag)}>, expected <svg>")

    paths: list[SvgPath] = []
    _walk(root, geometry.identity(), {}, 1.0, paths)
    logger.debug("Parsed %d drawable elements", len(paths))
    return paths


def _walk(
    elem: ET.Element,
    parent_matrix: Affine,
    inherited: dict[str, str],
    group_opacity: float,
    out: list[SvgPath],
) -> None:
    tag = _strip_ns(elem.tag)
    if tag in SKIP_TAGS:
        return

    matrix = parent_matrix @ parse_transform(elem.attrib.get("transform"))
    own = _own_presentation(elem)
    opacity = group_opacity * _number(own.pop("opacity", None), 1.0)
    props = {**inherited, **own}

    if tag in CONTAINER_TAGS:
        for child in elem:
            _walk(child, matrix, props, opacity, out)
        return

    if tag == "path":
        d = elem.attrib.get("d", "").strip()
    elif tag in SHAPE_CONVERTERS:
        d = SHAPE_CONVERTERS[tag](dict(elem.attrib)) or ""
    else:
        logger.debug("Skipping unsupported element <%s>", tag)
        return

    if not d:
        logger.debug("Skipping <%s> with no geometry", tag)
        return

    out.append(
        SvgPath(
            d=d,
            matrix=matrix,
            fill=parse_color(props.get("fill")),
            fill_opacity=_number(props.get("fill-opacity"), 1.0) * opacity,
            stroke=parse_color(props.get("stroke")),
            stroke_opacity=_number(props.get("stroke-opacity"), 1.0) * opacity,
            stroke_width=_number(props.get("stroke-width"), 1.0),
            tag=tag,
        )
    )
