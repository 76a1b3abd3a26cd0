"""
Geometry Contracts

Responsibility:
Renderable output of the layout projector. Every coordinate is absolute.
The same tree feeds the interactive renderer and the static exporter,
so neither performs layout of its own.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple, Union


class TextClass(Enum):
    """Text roles. Values double as SVG/CSS class names."""
    HEADER = "header"
    PRIMARY_NAME = "primary-name"
    PRIMARY_DESC = "primary-desc"
    ITEM_NAME = "item-name"
    ITEM_MINOR = "item-minor"
    PARENT_LABEL = "parent-label"


class Anchor(Enum):
    START = "start"
    MIDDLE = "middle"


class Column(Enum):
    CURRENT = "current"
    TARGET = "target"
    SINGLE = "single"   # unrelated section without lifecycle data


class BandKind(Enum):
    PLAIN = "plain"              # primary item without rollup
    ROLLUP_DETAIL = "rollup"     # group header + its secondary items
    ROLLUP_SUMMARY = "summary"   # one box per group (only-related)
    UNGROUPED = "ungrouped"      # show-secondary bucket
    UNGROUPED_COUNT = "count"    # only-related "+N other" boxes


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str
    stroke: str
    stroke_width: float = 1
    rx: float = 0


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    stroke_width: float = 1


@dataclass(frozen=True)
class TextRun:
    x: float
    y: float
    text: str
    css_class: TextClass
    anchor: Anchor = Anchor.START


Primitive = Union[Rect, Line, TextRun]


@dataclass(frozen=True)
class ItemBox:
    """One box: rectangle, wrapped name lines, optional minor lines."""
    rect: Rect
    column: Column
    label: str
    name_lines: Tuple[TextRun, ...] = field(default_factory=tuple)
    minor_lines: Tuple[TextRun, ...] = field(default_factory=tuple)
    item_id: Optional[int] = None      # None for attribute buckets

    def primitives(self) -> Iterator[Primitive]:
        yield self.rect
        yield from self.name_lines
        yield from self.minor_lines


@dataclass(frozen=True)
class RowBand:
    """A horizontal band of boxes inside a primary row."""
    kind: BandKind
    y: float
    height: float
    header: Optional[TextRun] = None
    boxes: Tuple[ItemBox, ...] = field(default_factory=tuple)

    def primitives(self) -> Iterator[Primitive]:
        if self.header is not None:
            yield self.header
        for box in self.boxes:
            yield from box.primitives()


@dataclass(frozen=True)
class PrimaryRow:
    primary_item_id: int
    y: float
    height: float
    separator: Optional[Line] = None
    texts: Tuple[TextRun, ...] = field(default_factory=tuple)
    bands: Tuple[RowBand, ...] = field(default_factory=tuple)

    def primitives(self) -> Iterator[Primitive]:
        if self.separator is not None:
            yield self.separator
        yield from self.texts
        for band in self.bands:
            yield from band.primitives()


@dataclass(frozen=True)
class ParentSection:
    """Primary items sharing the same `parent` label."""
    parent: Optional[str]
    label: Optional[TextRun]
    container: Rect
    rows: Tuple[PrimaryRow, ...] = field(default_factory=tuple)

    def primitives(self) -> Iterator[Primitive]:
        if self.label is not None:
            yield self.label
        yield self.container
        for row in self.rows:
            yield from row.primitives()


@dataclass(frozen=True)
class UnrelatedBlock:
    separator: Line
    texts: Tuple[TextRun, ...]
    boxes: Tuple[ItemBox, ...]
    y: float
    height: float

    def primitives(self) -> Iterator[Primitive]:
        yield self.separator
        yield from self.texts
        for box in self.boxes:
            yield from box.primitives()


@dataclass(frozen=True)
class Geometry:
    """
    Fully calculated Target View.

    DETERMINISTIC:
    Same results + same options = identical geometry.
    """
    width: float
    height: float
    background: Rect
    header_line: Optional[Line]
    headers: Tuple[TextRun, ...]
    sections: Tuple[ParentSection, ...] = field(default_factory=tuple)
    unrelated: Optional[UnrelatedBlock] = None

    def primitives(self) -> Iterator[Primitive]:
        """All drawing primitives in paint order."""
        yield self.background
        if self.header_line is not None:
            yield self.header_line
        yield from self.headers
        for section in self.sections:
            yield from section.primitives()
        if self.unrelated is not None:
            yield from self.unrelated.primitives()

    def boxes(self) -> Iterator[ItemBox]:
        for section in self.sections:
            for row in section.rows:
                for band in row.bands:
                    yield from band.boxes
        if self.unrelated is not None:
            yield from self.unrelated.boxes
