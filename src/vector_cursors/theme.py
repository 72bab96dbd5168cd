"""In-memory model of a cursor theme document."""

import json
import math
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

import toml

from .errors import DocumentEvaluationError, DocumentIoError


def _channel_to_byte(value: float) -> int:
    # truncate toward zero, saturating at the byte range
    if math.isnan(value):
        return 0
    return max(0, min(255, int(value)))


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Color:
    r: float
    g: float
    b: float
    a: float

    def to_rgba8(self):
        """Channels as bytes. Fractional parts are dropped, never rounded."""
        return tuple(_channel_to_byte(c) for c in (self.r, self.g, self.b, self.a))


@dataclass(frozen=True)
class Cursor:
    paths: List[str]
    hot: Point
    rotation_degrees: float = 0.0


@dataclass(frozen=True)
class Style:
    sizes: List[int]
    fill_color: Color
    stroke_width: float
    stroke_color: Color


@dataclass(frozen=True)
class CursorTheme:
    name: str
    cursors: Dict[str, Cursor]
    style: Style
    links: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: str = "<theme>") -> "CursorTheme":
        """Create a CursorTheme from an evaluated theme document."""
        reader = _Reader(source)
        return cls(
            name=reader.string(data, "name"),
            cursors={
                name: reader.cursor(cursor, f"cursors.{name}")
                for name, cursor in reader.table(data, "cursors").items()
            },
            style=reader.style(reader.table(data, "style"), "style"),
            links={
                alias: reader.string({alias: target}, alias, f"links.{alias}")
                for alias, target in reader.table(data, "links", required=False).items()
            },
        )


class _Reader:
    """Pulls typed values out of a document, reporting the key path on failure."""

    def __init__(self, source):
        self.source = source

    def fail(self, key, expected):
        raise DocumentEvaluationError(self.source, f"'{key}' must be {expected}")

    def get(self, data, key, where):
        if not isinstance(data, Mapping):
            raise DocumentEvaluationError(self.source, f"cannot look up '{where}' in a non-table value")
        try:
            return data[key]
        except KeyError:
            raise DocumentEvaluationError(self.source, f"missing key '{where}'") from None

    def table(self, data, key, where=None, required=True):
        where = where or key
        if not required and key not in data:
            return {}
        value = self.get(data, key, where)
        if not isinstance(value, Mapping):
            self.fail(where, "a table")
        return value

    def string(self, data, key, where=None):
        where = where or key
        value = self.get(data, key, where)
        if not isinstance(value, str):
            self.fail(where, "a string")
        return value

    def number(self, data, key, where, default=None):
        if default is not None and key not in data:
            return default
        value = self.get(data, key, where)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            self.fail(where, "a number")
        return float(value)

    def point(self, data, where):
        return Point(x=self.number(data, "x", f"{where}.x"), y=self.number(data, "y", f"{where}.y"))

    def color(self, data, where):
        return Color(*(self.number(data, c, f"{where}.{c}") for c in "rgba"))

    def cursor(self, data, where):
        paths = self.get(data, "paths", f"{where}.paths")
        if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
            self.fail(f"{where}.paths", "a list of strings")
        return Cursor(
            paths=list(paths),
            hot=self.point(self.table(data, "hot", f"{where}.hot"), f"{where}.hot"),
            rotation_degrees=self.number(data, "rotation_degrees", f"{where}.rotation_degrees", 0.0),
        )

    def style(self, data, where):
        sizes = self.get(data, "sizes", f"{where}.sizes")
        if (not isinstance(sizes, list) or not sizes
                or not all(isinstance(s, int) and not isinstance(s, bool) and s > 0 for s in sizes)):
            self.fail(f"{where}.sizes", "a non-empty list of positive integers")
        if len(set(sizes)) != len(sizes):
            self.fail(f"{where}.sizes", "a list of distinct sizes")
        return Style(
            sizes=list(sizes),
            fill_color=self.color(self.table(data, "fill_color", f"{where}.fill_color"), f"{where}.fill_color"),
            stroke_width=self.number(data, "stroke_width", f"{where}.stroke_width"),
            stroke_color=self.color(self.table(data, "stroke_color", f"{where}.stroke_color"), f"{where}.stroke_color"),
        )


def load_theme(path) -> CursorTheme:
    """Read a theme document from a .toml or .json file."""
    suffix = os.path.splitext(str(path))[1].lower()
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise DocumentIoError(path, e) from e

    try:
        if suffix == ".json":
            data = json.loads(content)
        else:
            data = toml.loads(content)
    except (json.JSONDecodeError, toml.TomlDecodeError) as e:
        raise DocumentEvaluationError(str(path), str(e)) from e

    if not isinstance(data, Mapping):
        raise DocumentEvaluationError(str(path), "theme document must be a table")
    return CursorTheme.from_dict(data, source=str(path))
