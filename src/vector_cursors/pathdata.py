"""Parse SVG path data into a small set of absolute drawing commands.

Every path is simplified to move, line, quadratic, cubic and close commands.
Relative coordinates are resolved, horizontal and vertical lines become plain
lines, smooth curves get their reflected control point and elliptical arcs
are approximated with cubic Béziers. The geometry is resolved by svgpathtools.

For more info see [SVG spec](https://www.w3.org/TR/SVG11/paths.html)
"""

import math
import re
from dataclasses import astuple, dataclass, replace
from typing import List, Tuple, Union

from svgpathtools import Arc, CubicBezier, Line, QuadraticBezier, parse_path

from .errors import PathSyntaxError


@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float


@dataclass(frozen=True)
class QuadTo:
    x1: float
    y1: float
    x: float
    y: float


@dataclass(frozen=True)
class CubicTo:
    x1: float
    y1: float
    x2: float
    y2: float
    x: float
    y: float


@dataclass(frozen=True)
class ClosePath:
    pass


DrawCommand = Union[MoveTo, LineTo, QuadTo, CubicTo, ClosePath]

# number of arguments consumed by one repetition of each command
ARITY = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}

SEPARATORS = set(" \t\r\n\f,")
NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class _Scanner:
    """Splits path data into commands with explicit, validated arguments.

    svgpathtools skips characters it does not recognise, so malformed input
    is caught here, where the offset of the offending text is still known.
    """

    def __init__(self, data):
        self.data = data
        self.pos = 0

    def skip_separators(self):
        """Skip whitespace and commas and return the number of commas seen."""
        commas = 0
        while self.pos < len(self.data) and self.data[self.pos] in SEPARATORS:
            if self.data[self.pos] == ",":
                commas += 1
            self.pos += 1
        return commas

    def at_end(self):
        return self.pos >= len(self.data)

    def peek(self):
        return self.data[self.pos]

    def fragment(self, start):
        end = min(len(self.data), self.pos + 1)
        return self.data[start:end].strip()

    def number(self, cmd, start):
        if self.skip_separators() > 1:
            raise PathSyntaxError(f"repeated comma in '{cmd}' command", self.fragment(start), self.pos)
        if self.at_end() or self.peek().upper() in ARITY:
            raise PathSyntaxError(
                f"unterminated '{cmd}' command, expected {ARITY[cmd.upper()]} arguments",
                self.fragment(start), start)
        match = NUMBER_RE.match(self.data, self.pos)
        if match is None:
            raise PathSyntaxError(f"invalid number in '{cmd}' command", self.fragment(start), self.pos)
        value = float(match.group())
        if not math.isfinite(value):
            raise PathSyntaxError(f"number out of range in '{cmd}' command", self.fragment(start), self.pos)
        self.pos = match.end()
        return value

    def flag(self, cmd, start):
        self.skip_separators()
        if self.at_end() or self.peek() not in "01":
            raise PathSyntaxError(f"invalid arc flag in '{cmd}' command", self.fragment(start), self.pos)
        value = self.peek() == "1"
        self.pos += 1
        return value

    def arguments(self, cmd, start):
        if cmd.upper() == "A":
            rx = self.number(cmd, start)
            ry = self.number(cmd, start)
            rotation = self.number(cmd, start)
            large_arc = self.flag(cmd, start)
            sweep = self.flag(cmd, start)
            return [rx, ry, rotation, large_arc, sweep, self.number(cmd, start), self.number(cmd, start)]
        return [self.number(cmd, start) for _ in range(ARITY[cmd.upper()])]


def _tokenize(path_data):
    """Yield (command, arguments, offset), one per repetition of a command.

    Implicit repetitions are yielded with their command letter; the extra
    coordinate pairs of a move-to come out as line-tos.
    """
    scanner = _Scanner(path_data)
    cmd = None

    while True:
        separator = scanner.pos
        commas = scanner.skip_separators()
        if commas > 1 or (commas and (scanner.at_end() or scanner.peek().upper() in ARITY)):
            raise PathSyntaxError("misplaced comma", scanner.fragment(separator), separator)
        if scanner.at_end():
            break
        start = scanner.pos
        char = scanner.peek()
        if char.upper() in ARITY:
            scanner.pos += 1
            if cmd is None and char not in "Mm":
                raise PathSyntaxError("path data must begin with a move-to", scanner.fragment(start), start)
            cmd = char
            if cmd in "Zz":
                yield cmd, [], start
                continue
        elif char.isalpha():
            raise PathSyntaxError(f"unknown command '{char}'", scanner.fragment(start), start)
        elif cmd is None:
            raise PathSyntaxError("path data must begin with a move-to", scanner.fragment(start), start)
        elif cmd in "Zz":
            raise PathSyntaxError("unexpected argument after close-path", scanner.fragment(start), start)

        yield cmd, scanner.arguments(cmd, start), start
        if cmd == "M":
            cmd = "L"
        elif cmd == "m":
            cmd = "l"


class _Builder:
    """Collects subpaths and lets svgpathtools resolve their segments.

    Move-tos and close-paths are handled here. Runs of other commands are
    handed to `svgpathtools.parse_path`, which makes coordinates absolute,
    turns H/V into lines and reflects the control points of S/T. Arcs go
    through `svgpathtools.Arc` and come back as cubics.
    """

    def __init__(self):
        self.commands: List[DrawCommand] = []
        self.pos = 0j
        self.start = 0j
        self.closed = False
        self.pending = []

    def _emit(self, command):
        # a drawing command straight after a close starts a new subpath at the old start
        if self.closed and not isinstance(command, (MoveTo, ClosePath)):
            self.commands.append(MoveTo(self.start.real, self.start.imag))
        self.closed = False
        self.commands.append(command)

    def apply(self, cmd, args, offset):
        kind = cmd.upper()
        if kind == "M":
            self.flush()
            self.pos = self.start = complex(*args) + (self.pos if cmd == "m" else 0)
            self.closed = False
            self.commands.append(MoveTo(self.pos.real, self.pos.imag))
        elif kind == "Z":
            self.flush()
            if self.commands and not self.closed:
                self.commands.append(ClosePath())
            self.pos = self.start
            self.closed = True
        elif kind == "A":
            self.flush()
            self._arc(cmd == "a", *args)
        else:
            self.pending.append((cmd, args, offset))

    def flush(self):
        if not self.pending:
            return
        pending, self.pending = self.pending, []
        # each run starts with a move-to the current point
        data = " ".join(
            [_format_command("M", (self.pos.real, self.pos.imag))]
            + [_format_command(cmd, args) for cmd, args, _ in pending]
        )
        try:
            segments = parse_path(data)
        except (ValueError, IndexError) as e:
            raise PathSyntaxError(f"invalid path segment ({e})", data, pending[0][2]) from e
        for segment in segments:
            self._emit(_segment_command(segment))
        if len(segments):
            self.pos = segments[-1].end

    def _arc(self, relative, rx, ry, rotation, large_arc, sweep, x, y):
        end = complex(x, y) + (self.pos if relative else 0)
        if end == self.pos:
            return
        if rx == 0 or ry == 0:
            self._emit(LineTo(end.real, end.imag))
        else:
            arc = Arc(self.pos, complex(abs(rx), abs(ry)), rotation, large_arc, sweep, end)
            for command in arc_to_cubics(arc):
                self._emit(command)
        self.pos = end


def _segment_command(segment) -> DrawCommand:
    end = segment.end
    if isinstance(segment, Line):
        return LineTo(end.real, end.imag)
    if isinstance(segment, QuadraticBezier):
        return QuadTo(segment.control.real, segment.control.imag, end.real, end.imag)
    if isinstance(segment, CubicBezier):
        c1, c2 = segment.control1, segment.control2
        return CubicTo(c1.real, c1.imag, c2.real, c2.imag, end.real, end.imag)
    raise PathSyntaxError(f"unexpected {type(segment).__name__} segment")


def arc_to_cubics(arc: Arc) -> List[DrawCommand]:
    """Approximate an svgpathtools `Arc` with cubics of at most a quarter turn each."""
    count = max(1, math.ceil(abs(arc.delta) / 90 - 1e-9))
    commands = [_segment_command(curve) for curve in arc.as_cubic_curves(count)]
    # the last piece ends exactly on the arc's end point
    commands[-1] = replace(commands[-1], x=arc.end.real, y=arc.end.imag)
    return commands


def parse(path_data: str) -> List[DrawCommand]:
    """Parse SVG path data.

    Raises PathSyntaxError on malformed input. Empty input is an empty path.
    """
    builder = _Builder()
    for cmd, args, offset in _tokenize(path_data):
        builder.apply(cmd, args, offset)
    builder.flush()
    return builder.commands


def _format_number(value: float) -> str:
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def _format_command(letter, values) -> str:
    return letter + " ".join(_format_number(float(v)) for v in values)


def to_path_data(commands: List[DrawCommand]) -> str:
    """Serialize commands back to canonical absolute path data."""
    parts = []
    for command in commands:
        if isinstance(command, ClosePath):
            parts.append("Z")
            continue
        letter = {MoveTo: "M", LineTo: "L", QuadTo: "Q", CubicTo: "C"}[type(command)]
        values: Tuple[float, ...] = astuple(command)
        parts.append(_format_command(letter, values))
    return " ".join(parts)
