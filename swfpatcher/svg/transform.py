"""SVG ``transform`` attribute parsing.

Malformed input never raises: the whole attribute degrades to identity and a
warning is logged, so one bad transform does not abort a conversion.
"""

from __future__ import annotations

import logging
import re

from swfpatcher.utils import geometry
from swfpatcher.utils.geometry import Affine

logger = logging.getLogger(__name__)

_FUNC_RE = re.compile(r"\s*([A-Za-z]+)\s*\(([^()]*)\)\s*,?")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_SEPARATOR_RE = re.compile(r"[\s,]*")

# name -> accepted argument counts
_ARITY: dict[str, tuple[int, ...]] = {
    "matrix": (6,),
    "translate": (1, 2),
    "scale": (1, 2),
    "rotate": (1, 3),
    "skewX": (1,),
    "skewY": (1,),
}


def parse_transform(text: str | None) -> Affine:
    """Parse a transform list into a 3x3 matrix (identity when absent or malformed)."""
    if not text or not text.strip():
        return geometry.identity()
    try:
        return _parse_transform_list(text)
    except ValueError as e:
        logger.warning("Ignoring malformed transform %r: %s", text, e)
        return geometry.identity()


def _parse_transform_list(text: str) -> Affine:
    result = geometry.identity()
    pos = 0
    text = text.strip()
    while pos < len(text):
        m = _FUNC_RE.match(text, pos)
        if not m:
            raise ValueError(f"unexpected input at offset {pos}")
        name, args = m.group(1), _parse_numbers(m.group(2))
        # Later functions in the list apply to coordinates first
        result = result @ _build(name, args)
        pos = m.end()
    return result


def _parse_numbers(text: str) -> list[float]:
    values: list[float] = []
    pos = _SEPARATOR_RE.match(text, 0).end()
    while pos < len(text):
        m = _NUMBER_RE.match(text, pos)
        if not m:
            raise ValueError(f"bad number in {text!r}")
        values.append(float(m.group(0)))
        pos = _SEPARATOR_RE.match(text, m.end()).end()
    return values


def _build(name: str, args: list[float]) -> Affine:
    arity = _ARITY.get(name)
    if arity is None:
        raise ValueError(f"unknown transform function {name!r}")
    if len(args) not in arity:
        raise ValueError(f"{name} takes {' or '.join(map(str, arity))} arguments, got {len(args)}")

    if name == "matrix":
        return geometry.from_svg_matrix(*args)
    if name == "translate":
        return geometry.translation(*args)
    if name == "scale":
        return geometry.scaling(*args)
    if name == "rotate":
        return geometry.rotation(*args)
    if name == "skewX":
        return geometry.skew_x(args[0])
    return geometry.skew_y(args[0])
