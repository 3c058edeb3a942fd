"""Basic SVG shapes (rect, circle, ellipse, line, polyline, polygon) as path data.

Each converter returns an equivalent ``d`` string, or None when the element
is not rendered (zero or negative size).
"""

from __future__ import annotations

import re
from typing import Callable

from swfpatcher.exceptions import SVGParseError

_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*(px)?\s*$")
_POINTS_SPLIT_RE = re.compile(r"[\s,]+")


def _length(attrs: dict[str, str], name: str, default: float = 0.0) -> float:
    raw = attrs.get(name)
    if raw is None or raw.strip() in ("", "auto"):
        return default
    m = _LENGTH_RE.match(raw)
    if not m:
        raise SVGParseError(f"Invalid length for '{name}': {raw!r}")
    return float(m.group(1))


def _f(value: float) -> str:
    return repr(float(value))


def rect_to_path(attrs: dict[str, str]) -> str | None:
    x, y = _length(attrs, "x"), _length(attrs, "y")
    w, h = _length(attrs, "width"), _length(attrs, "height")
    if w <= 0 or h <= 0:
        return None

    # Missing rx/ry take the other's value; both clamp to half the side.
    rx_raw, ry_raw = attrs.get("rx"), attrs.get("ry")
    rx = _length(attrs, "rx") if rx_raw is not None else None
    ry = _length(attrs, "ry") if ry_raw is not None else None
    if rx is None:
        rx = ry or 0.0
    if ry is None:
        ry = rx
    rx, ry = min(max(rx, 0.0), w / 2), min(max(ry, 0.0), h / 2)

    if rx == 0 or ry == 0:
        return f"M{_f(x)},{_f(y)} H{_f(x + w)} V{_f(y + h)} H{_f(x)} Z"

    arc = f"A{_f(rx)},{_f(ry)} 0 0 1"
    return (
        f"M{_f(x + rx)},{_f(y)} H{_f(x + w - rx)} "
        f"{arc} {_f(x + w)},{_f(y + ry)} V{_f(y + h - ry)} "
        f"{arc} {_f(x + w - rx)},{_f(y + h)} H{_f(x + rx)} "
        f"{arc} {_f(x)},{_f(y + h - ry)} V{_f(y + ry)} "
        f"{arc} {_f(x + rx)},{_f(y)} Z"
    )


def ellipse_to_path(attrs: dict[str, str]) -> str | None:
    cx, cy = _length(attrs, "cx"), _length(attrs, "cy")
    rx, ry = _length(attrs, "rx"), _length(attrs, "ry")
    if rx <= 0 or ry <= 0:
        return None
    return (
        f"M{_f(cx - rx)},{_f(cy)} "
        f"A{_f(rx)},{_f(ry)} 0 1 0 {_f(cx + rx)},{_f(cy)} "
        f"A{_f(rx)},{_f(ry)} 0 1 0 {_f(cx - rx)},{_f(cy)} Z"
    )


def circle_to_path(attrs: dict[str, str]) -> str | None:
    r = attrs.get("r", "0")
    return ellipse_to_path({"cx": attrs.get("cx", "0"), "cy": attrs.get("cy", "0"), "rx": r, "ry": r})


def line_to_path(attrs: dict[str, str]) -> str | None:
    x1, y1 = _length(attrs, "x1"), _length(attrs, "y1")
    x2, y2 = _length(attrs, "x2"), _length(attrs, "y2")
    return f"M{_f(x1)},{_f(y1)} L{_f(x2)},{_f(y2)}"


def _points(attrs: dict[str, str]) -> list[tuple[float, float]]:
    raw = attrs.get("points", "").strip()
    if not raw:
        return []
    try:
        values = [float(v) for v in _POINTS_SPLIT_RE.split(raw)]
    except ValueError as e:
        raise SVGParseError(f"Invalid points list {raw!r}: {e}") from e
    if len(values) % 2:
        raise SVGParseError(f"Odd number of coordinates in points list {raw!r}")
    return list(zip(values[0::2], values[1::2]))


def _poly(attrs: dict[str, str], closed: bool) -> str | None:
    pts = _points(attrs)
    if len(pts) < 2:
        return None
    (x0, y0), rest = pts[0], pts[1:]
    d = f"M{_f(x0)},{_f(y0)} " + " ".join(f"L{_f(x)},{_f(y)}" for x, y in rest)
    return d + " Z" if closed else d


def polyline_to_path(attrs: dict[str, str]) -> str | None:
    return _poly(attrs, closed=False)


def polygon_to_path(attrs: dict[str, str]) -> str | None:
    return _poly(attrs, closed=True)


SHAPE_CONVERTERS: dict[str, Callable[[dict[str, str]], str | None]] = {
    "rect": rect_to_path,
    "circle": circle_to_path,
    "ellipse": ellipse_to_path,
    "line": line_to_path,
    "polyline": polyline_to_path,
    "polygon": polygon_to_path,
}
