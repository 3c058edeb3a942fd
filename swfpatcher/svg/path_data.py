"""SVG path data (``d`` attribute) parser.

Produces absolute, untransformed commands: MoveTo / ClosePath markers plus
svgpathtools segments (Line, QuadraticBezier, CubicBezier, Arc). Shorthand
commands are expanded here: H/V become lines, S/T get their reflected control
point, zero-radius arcs become lines.

Unlike svgpathtools.parse_path, any malformed input is fatal and reported
with its offset.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from svgpathtools import Arc, CubicBezier, Line, QuadraticBezier

from swfpatcher.exceptions import SVGParseError

_COMMANDS = frozenset("MmZzLlHhVvCcSsQqTtAa")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_WSP_RE = re.compile(r"\s*")
_SEP_RE = re.compile(r"\s*,?\s*")
_NUMBER_START = frozenset("0123456789+-.")


@dataclass(frozen=True)
class MoveTo:
    point: complex


@dataclass(frozen=True)
class ClosePath:
    pass


PathCommand = Union[MoveTo, ClosePath, Line, QuadraticBezier, CubicBezier, Arc]


class _Scanner:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def error(self, message: str) -> SVGParseError:
        snippet = self.text[self.pos:self.pos + 12]
        return SVGParseError(f"Invalid path data at offset {self.pos} ({snippet!r}): {message}")

    def skip_whitespace(self) -> None:
        self.pos = _WSP_RE.match(self.text, self.pos).end()

    def skip_separator(self) -> None:
        self.pos = _SEP_RE.match(self.text, self.pos).end()

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def next_command(self) -> str | None:
        """Consume a command letter; None when a number follows (implicit repeat)."""
        self.skip_whitespace()
        ch = self.text[self.pos]
        if ch in _COMMANDS:
            self.pos += 1
            return ch
        if ch in _NUMBER_START:
            return None
        raise self.error(f"unexpected character {ch!r}")

    def number(self) -> float:
        self.skip_separator()
        m = _NUMBER_RE.match(self.text, self.pos)
        if not m:
            raise self.error("expected a number")
        self.pos = m.end()
        return float(m.group(0))

    def point(self) -> complex:
        x = self.number()
        y = self.number()
        return complex(x, y)

    def flag(self) -> bool:
        self.skip_separator()
        ch = self.text[self.pos:self.pos + 1]
        if ch not in ("0", "1"):
            raise self.error("expected an arc flag (0 or 1)")
        self.pos += 1
        return ch == "1"

    def number_follows(self) -> bool:
        self.skip_separator()
        return not self.at_end() and self.text[self.pos] in _NUMBER_START


def parse_path_data(d: str) -> list[PathCommand]:
    """Parse path data into absolute commands. Raises SVGParseError on bad syntax."""
    sc = _Scanner(d)
    commands: list[PathCommand] = []

    current = 0j
    subpath_start = 0j
    command: str | None = None
    prev: str | None = None  # upper-case letter of the previous segment command
    last_control: complex | None = None

    sc.skip_whitespace()
    while not sc.at_end():
        letter = sc.next_command()
        if letter is None:
            if command is None or command in "Zz":
                raise sc.error("number without a command")
            letter = command
        elif command is None and letter not in "Mm":
            raise sc.error("path data must begin with a move-to")

        rel = letter.islower()
        kind = letter.upper()
        if kind == "Z":
            commands.append(ClosePath())
            current = subpath_start
            prev, last_control = kind, None
            command = letter
            sc.skip_whitespace()
            if not sc.at_end() and sc.text[sc.pos] not in _COMMANDS:
                raise sc.error("close-path takes no arguments")
            continue

        while True:
            origin = current if rel else 0j
            if kind == "M":
                current = subpath_start = sc.point() + origin
                commands.append(MoveTo(current))
                # Extra coordinate pairs after a move-to are line-tos
                letter = "l" if rel else "L"
                kind = "L"
                prev, last_control = "M", None
            elif kind == "L":
                end = sc.point() + origin
                commands.append(Line(current, end))
                current, prev, last_control = end, kind, None
            elif kind == "H":
                x = sc.number() + origin.real
                end = complex(x, current.imag)
                commands.append(Line(current, end))
                current, prev, last_control = end, kind, None
            elif kind == "V":
                y = sc.number() + origin.imag
                end = complex(current.real, y)
                commands.append(Line(current, end))
                current, prev, last_control = end, kind, None
            elif kind in ("C", "S"):
                if kind == "C":
                    c1 = sc.point() + origin
                elif prev in ("C", "S") and last_control is not None:
                    c1 = 2 * current - last_control
                else:
                    c1 = current
                c2 = sc.point() + origin
                end = sc.point() + origin
                commands.append(CubicBezier(current, c1, c2, end))
                current, prev, last_control = end, kind, c2
            elif kind in ("Q", "T"):
                if kind == "Q":
                    ctrl = sc.point() + origin
                elif prev in ("Q", "T") and last_control is not None:
                    ctrl = 2 * current - last_control
                else:
                    ctrl = current
                end = sc.point() + origin
                commands.append(QuadraticBezier(current, ctrl, end))
                current, prev, last_control = end, kind, ctrl
            else:  # "A"
                rx = abs(sc.number())
                ry = abs(sc.number())
                rotation = sc.number()
                large_arc = sc.flag()
                sweep = sc.flag()
                end = sc.point() + origin
                if end != current:
                    if rx == 0 or ry == 0:
                        commands.append(Line(current, end))
                    else:
                        commands.append(
                            Arc(current, complex(rx, ry), rotation, large_arc, sweep, end)
                        )
                current, prev, last_control = end, kind, None

            if not sc.number_follows():
                break

        command = letter
        sc.skip_whitespace()

    return commands
