"""
Layout Projector

Responsibility:
Deterministic transformation of classified/aggregated results into
absolute 2D geometry.
Input: ClassificationResult[] + DisplayOptions -> Output: Geometry

DETERMINISTIC:
==============
Row heights are computed once and used both for placement and for the
canvas size, bottom-up, so interactive rendering and static export
agree exactly. Inputs are never mutated.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from math import ceil
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..contracts.base import Item, LifecycleStatus, lifecycle_label
from ..contracts.results import (
    NO_PARENT_BUCKET, PARENT_ROLLUP_LABEL,
    ClassificationResult, RollupFilterMode, RollupGroup, RollupMode,
)
from ..core.unrelated import UnrelatedSection, has_any_lifecycle_status
from .geometry import (
    Anchor, BandKind, Column, Geometry, ItemBox, Line, ParentSection,
    PrimaryRow, Rect, RowBand, TextClass, TextRun, UnrelatedBlock,
)
from .text import wrap_text
from .theme import DEFAULT_THEME, FILL_ALPHA, Theme


# =============================================================================
# OPTIONS & CONFIG
# =============================================================================

class MinorTextOption(Enum):
    NONE = "none"
    LIFECYCLE = "lifecycle"
    DESCRIPTION = "description"


class ColumnViewMode(Enum):
    BOTH = "both"
    CURRENT = "current"
    TARGET = "target"

    @property
    def shows_current(self) -> bool:
        return self in (ColumnViewMode.BOTH, ColumnViewMode.CURRENT)

    @property
    def shows_target(self) -> bool:
        return self in (ColumnViewMode.BOTH, ColumnViewMode.TARGET)


@dataclass(frozen=True)
class DisplayOptions:
    """
    Caller display choices.

    rollup_mode overrides the filter mode carried by aggregated
    results; None defers to each result's rollup spec.
    """
    minor_text: MinorTextOption = MinorTextOption.LIFECYCLE
    column_view_mode: ColumnViewMode = ColumnViewMode.BOTH
    rollup_mode: Optional[RollupFilterMode] = None
    show_unrelated: bool = False


@dataclass
class LayoutConfig:
    """Fixed geometry constants (pixels)."""
    padding: float = 20
    min_row_height: float = 60
    header_height: float = 40
    primary_col_width: float = 200
    current_col_width: float = 400
    target_col_width: float = 400
    col_gap: float = 20
    row_gap: float = 10
    box_width: float = 120
    box_height: float = 40
    boxes_per_row: int = 3
    box_gap: float = 4
    parent_header_height: float = 20
    rollup_header_height: float = 20
    name_font_size: float = 10
    minor_font_size: float = 8
    primary_desc_font_size: float = 10
    text_inset: float = 8

    def __post_init__(self):
        if self.boxes_per_row < 1:
            raise ValueError("boxes_per_row must be at least 1")
        for name in ("box_width", "box_height", "min_row_height",
                     "current_col_width", "target_col_width", "primary_col_width"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    def rows_for(self, count: int) -> int:
        return ceil(count / self.boxes_per_row) if count > 0 else 0

    def stack_height(self, count: int) -> float:
        """max(box_h * rows + gap * (rows - 1), min_row_h)."""
        rows = self.rows_for(count)
        return max(self.box_height * rows + self.box_gap * (rows - 1), self.min_row_height)


@dataclass(frozen=True)
class ColumnFrame:
    """Horizontal frame derived from the column view mode."""
    show_current: bool
    show_target: bool
    current_x: float
    target_x: float
    current_width: float
    target_width: float
    total_width: float


@dataclass(frozen=True)
class PrimaryGroup:
    """Primary results sharing a `parent` label (None = no parent)."""
    parent: Optional[str]
    results: Tuple[ClassificationResult, ...] = field(default_factory=tuple)


def group_by_parent(results: Sequence[ClassificationResult]) -> Tuple[PrimaryGroup, ...]:
    """No-parent group first, then parents alphabetically; members by name."""
    grouped: Dict[Optional[str], List[ClassificationResult]] = {}
    for result in results:
        grouped.setdefault(result.primary_item.parent or None, []).append(result)

    ordered = sorted(grouped, key=lambda p: (p is not None, p or ""))
    return tuple(
        PrimaryGroup(
            parent=parent,
            results=tuple(sorted(grouped[parent], key=lambda r: r.primary_item.sort_key))
        )
        for parent in ordered
    )


# =============================================================================
# PROJECTOR
# =============================================================================

class LayoutProjector:
    """Pure projection of results into Geometry."""

    def __init__(self, config: Optional[LayoutConfig] = None, theme: Optional[Theme] = None):
        self._config = config or LayoutConfig()
        self._theme = theme or DEFAULT_THEME

    @property
    def config(self) -> LayoutConfig:
        return self._config

    def column_frame(self, mode: ColumnViewMode) -> ColumnFrame:
        cfg = self._config
        show_current, show_target = mode.shows_current, mode.shows_target
        folded = cfg.current_col_width + cfg.target_col_width + cfg.col_gap

        current_width = cfg.current_col_width if show_target else folded
        target_width = cfg.target_col_width if show_current else folded
        current_x = cfg.padding + cfg.primary_col_width + cfg.col_gap
        target_x = current_x + cfg.current_col_width + cfg.col_gap if show_current else current_x

        total = cfg.padding + cfg.primary_col_width + cfg.col_gap + folded + cfg.padding
        return ColumnFrame(
            show_current=show_current,
            show_target=show_target,
            current_x=current_x,
            target_x=target_x,
            current_width=current_width if show_current else 0,
            target_width=target_width if show_target else 0,
            total_width=total
        )

    def project(
        self,
        results: Sequence[ClassificationResult],
        options: Optional[DisplayOptions] = None,
        *,
        lens_labels: Optional[Mapping[str, str]] = None,
        unrelated: Optional[UnrelatedSection] = None,
        primary_lens: Optional[str] = None,
        secondary_lens: Optional[str] = None
    ) -> Geometry:
        options = options or DisplayOptions()
        labels = dict(lens_labels or {})
        cfg = self._config
        colors = self._theme.colors
        frame = self.column_frame(options.column_view_mode)

        if results:
            primary_lens = primary_lens or results[0].primary_lens
            secondary_lens = secondary_lens or results[0].secondary_lens
        primary_label = labels.get(primary_lens or "", primary_lens or "")
        secondary_label = labels.get(secondary_lens or "", secondary_lens or "")

        # Column headers
        header_y = cfg.padding + cfg.header_height
        header_line = Line(cfg.padding, header_y, frame.total_width - cfg.padding, header_y,
                           stroke=colors.border, stroke_width=2)
        headers = [TextRun(cfg.padding + cfg.primary_col_width / 2, header_y - 10,
                           primary_label, TextClass.HEADER, Anchor.MIDDLE)]
        headers.extend(self._column_headers(frame, header_y - 10))

        y = header_y + cfg.padding + cfg.row_gap
        sections = []
        for group in group_by_parent(results):
            section, y = self._section(group, y, frame, options, labels, secondary_label)
            sections.append(section)

        unrelated_block = None
        if options.show_unrelated and unrelated is not None and unrelated.items:
            unrelated_block, y = self._unrelated(
                unrelated, y, frame, options, secondary_label,
                has_any_lifecycle_status(results)
            )

        height = y + cfg.padding
        return Geometry(
            width=frame.total_width,
            height=height,
            background=Rect(0, 0, frame.total_width, height,
                            fill=colors.background, stroke="none", stroke_width=0),
            header_line=header_line,
            headers=tuple(headers),
            sections=tuple(sections),
            unrelated=unrelated_block
        )

    # =========================================================================
    # SECTIONS AND ROWS
    # =========================================================================

    def _column_headers(self, frame: ColumnFrame, y: float) -> List[TextRun]:
        runs = []
        if frame.show_current:
            runs.append(TextRun(frame.current_x + frame.current_width / 2, y,
                                "Current", TextClass.HEADER, Anchor.MIDDLE))
        if frame.show_target:
            runs.append(TextRun(frame.target_x + frame.target_width / 2, y,
                                "Target", TextClass.HEADER, Anchor.MIDDLE))
        return runs

    def _section(
        self,
        group: PrimaryGroup,
        y: float,
        frame: ColumnFrame,
        options: DisplayOptions,
        labels: Mapping[str, str],
        secondary_label: str
    ) -> Tuple[ParentSection, float]:
        cfg = self._config
        colors = self._theme.colors

        label = None
        if group.parent:
            label = TextRun(cfg.padding, y, group.parent, TextClass.PARENT_LABEL)
            y += cfg.parent_header_height

        rows = []
        offset = 0.0
        for idx, result in enumerate(group.results):
            row_y = y + offset
            row = self._primary_row(result, row_y, idx > 0, frame, options, labels, secondary_label)
            rows.append(row)
            offset += row.height + cfg.row_gap

        group_height = offset - cfg.row_gap if rows else 0.0
        container = Rect(cfg.padding, y, frame.total_width - cfg.padding * 2, group_height,
                         fill=colors.surface, stroke=colors.border, stroke_width=1, rx=4)
        section = ParentSection(parent=group.parent, label=label, container=container, rows=tuple(rows))
        return section, y + group_height + cfg.row_gap

    def _primary_row(
        self,
        result: ClassificationResult,
        row_y: float,
        separated: bool,
        frame: ColumnFrame,
        options: DisplayOptions,
        labels: Mapping[str, str],
        secondary_label: str
    ) -> PrimaryRow:
        cfg = self._config
        bands = self._bands(result, row_y, frame, options, labels, secondary_label)
        height = sum(b.height for b in bands) + cfg.row_gap * (len(bands) - 1)

        separator = None
        if separated:
            separator = Line(cfg.padding, row_y, frame.total_width - cfg.padding, row_y,
                             stroke=self._theme.colors.border, stroke_width=1)

        primary = result.primary_item
        texts = [TextRun(cfg.padding + 10, row_y + 20, primary.name, TextClass.PRIMARY_NAME)]
        if options.minor_text != MinorTextOption.NONE and primary.description:
            lines = wrap_text(primary.description, cfg.primary_col_width - 20, cfg.primary_desc_font_size)
            for idx, line in enumerate(lines):
                texts.append(TextRun(cfg.padding + 10, row_y + 35 + idx * 12, line, TextClass.PRIMARY_DESC))

        return PrimaryRow(
            primary_item_id=primary.id,
            y=row_y,
            height=height,
            separator=separator,
            texts=tuple(texts),
            bands=tuple(bands)
        )

    def _bands(
        self,
        result: ClassificationResult,
        row_y: float,
        frame: ColumnFrame,
        options: DisplayOptions,
        labels: Mapping[str, str],
        secondary_label: str
    ) -> List[RowBand]:
        cfg = self._config

        if not result.has_rollup:
            height = cfg.stack_height(self._visible_count(result.current_items, result.target_items, frame))
            boxes = self._column_boxes(result.current_items, result.target_items, row_y, frame, options)
            return [RowBand(BandKind.PLAIN, row_y, height, boxes=boxes)]

        spec = result.rollup_spec
        filter_mode = options.rollup_mode or (spec.filter_mode if spec else RollupFilterMode.ONLY_RELATED)
        if spec is not None and spec.mode == RollupMode.RELATION:
            rollup_label = labels.get(spec.lens or "", spec.lens or "")
        else:
            rollup_label = PARENT_ROLLUP_LABEL

        bands: List[RowBand] = []
        y = row_y
        for group in result.rollup_groups or ():
            if filter_mode == RollupFilterMode.ONLY_RELATED:
                band = self._summary_band(group, y, frame, options)
            else:
                band = self._detail_band(
                    BandKind.ROLLUP_DETAIL, f"{rollup_label}: {group.label}",
                    group.current_items, group.target_items, y, frame, options
                )
            bands.append(band)
            y += band.height + cfg.row_gap

        if filter_mode == RollupFilterMode.ONLY_RELATED:
            count_band = self._count_band(result, y, frame, secondary_label)
            if count_band is not None:
                bands.append(count_band)

        if filter_mode == RollupFilterMode.SHOW_SECONDARY and result.ungrouped_items:
            current_ids = {i.id for i in result.current_items}
            target_ids = {i.id for i in result.target_items}
            if spec is not None and spec.mode == RollupMode.ATTRIBUTE:
                title = NO_PARENT_BUCKET
            else:
                title = f"{secondary_label} (Not related)"
            bands.append(self._detail_band(
                BandKind.UNGROUPED, title,
                tuple(i for i in result.ungrouped_items if i.id in current_ids),
                tuple(i for i in result.ungrouped_items if i.id in target_ids),
                y, frame, options
            ))

        if not bands:
            bands.append(RowBand(BandKind.PLAIN, row_y, cfg.min_row_height))
        return bands

    def _summary_band(
        self,
        group: RollupGroup,
        y: float,
        frame: ColumnFrame,
        options: DisplayOptions
    ) -> RowBand:
        cfg = self._config
        source = group.rollup_item
        status = source.lifecycle_status if source else None
        description = source.description if source else None
        box_y = y + cfg.rollup_header_height

        boxes = []
        if frame.show_current and group.current_items:
            boxes.append(self._box(group.label, status, description, frame.current_x, box_y,
                                   Column.CURRENT, group.key.item_id, options))
        if frame.show_target and group.target_items:
            boxes.append(self._box(group.label, status, description, frame.target_x, box_y,
                                   Column.TARGET, group.key.item_id, options))
        return RowBand(BandKind.ROLLUP_SUMMARY, y, cfg.min_row_height, boxes=tuple(boxes))

    def _count_band(
        self,
        result: ClassificationResult,
        y: float,
        frame: ColumnFrame,
        secondary_label: str
    ) -> Optional[RowBand]:
        """One "+N other <lens>" box per enabled column with hidden items."""
        counts = []
        if frame.show_current:
            counts.append((result.ungrouped_current_count, frame.current_x, Column.CURRENT))
        if frame.show_target:
            counts.append((result.ungrouped_target_count, frame.target_x, Column.TARGET))

        boxes = tuple(
            self._count_box(f"+{count} other {secondary_label}", x, y, column)
            for count, x, column in counts if count > 0
        )
        if not boxes:
            return None
        return RowBand(BandKind.UNGROUPED_COUNT, y, self._config.stack_height(1), boxes=boxes)

    def _count_box(self, label: str, x: float, y: float, column: Column) -> ItemBox:
        cfg = self._config
        colors = self._theme.colors
        center = x + cfg.box_width / 2
        rect = Rect(x, y, cfg.box_width, cfg.box_height,
                    fill=colors.secondary + FILL_ALPHA, stroke=colors.secondary,
                    stroke_width=1, rx=4)
        name_lines = tuple(
            TextRun(center, y + 12 + idx * 11, line, TextClass.ITEM_NAME, Anchor.MIDDLE)
            for idx, line in enumerate(wrap_text(label, cfg.box_width - cfg.text_inset, cfg.name_font_size))
        )
        return ItemBox(rect=rect, column=column, label=label, name_lines=name_lines)

    def _detail_band(
        self,
        kind: BandKind,
        title: str,
        current: Sequence[Item],
        target: Sequence[Item],
        y: float,
        frame: ColumnFrame,
        options: DisplayOptions
    ) -> RowBand:
        cfg = self._config
        height = cfg.stack_height(self._visible_count(current, target, frame)) + cfg.rollup_header_height
        header = TextRun(frame.current_x, y + 14, title, TextClass.PARENT_LABEL)
        boxes = self._column_boxes(current, target, y + cfg.rollup_header_height, frame, options)
        return RowBand(kind, y, height, header=header, boxes=boxes)

    # =========================================================================
    # BOXES
    # =========================================================================

    @staticmethod
    def _visible_count(current: Sequence[Item], target: Sequence[Item], frame: ColumnFrame) -> int:
        return max(len(current) if frame.show_current else 0,
                   len(target) if frame.show_target else 0)

    def _column_boxes(
        self,
        current: Sequence[Item],
        target: Sequence[Item],
        top: float,
        frame: ColumnFrame,
        options: DisplayOptions
    ) -> Tuple[ItemBox, ...]:
        boxes: List[ItemBox] = []
        if frame.show_current:
            boxes.extend(self._grid(current, frame.current_x, top, Column.CURRENT, options))
        if frame.show_target:
            boxes.extend(self._grid(target, frame.target_x, top, Column.TARGET, options))
        return tuple(boxes)

    def _grid(
        self,
        items: Sequence[Item],
        start_x: float,
        top: float,
        column: Column,
        options: DisplayOptions
    ) -> List[ItemBox]:
        cfg = self._config
        boxes = []
        for idx, item in enumerate(items):
            col = idx % cfg.boxes_per_row
            row = idx // cfg.boxes_per_row
            x = start_x + col * (cfg.box_width + cfg.box_gap)
            y = top + row * (cfg.box_height + cfg.box_gap)
            boxes.append(self._box(item.name, item.lifecycle_status, item.description,
                                   x, y, column, item.id, options))
        return boxes

    def _box(
        self,
        label: str,
        status: Optional[LifecycleStatus],
        description: Optional[str],
        x: float,
        y: float,
        column: Column,
        item_id: Optional[int],
        options: DisplayOptions
    ) -> ItemBox:
        cfg = self._config
        center = x + cfg.box_width / 2
        usable = cfg.box_width - cfg.text_inset

        rect = Rect(x, y, cfg.box_width, cfg.box_height,
                    fill=self._theme.box_fill(status), stroke=self._theme.box_stroke(status),
                    stroke_width=1, rx=4)

        name_lines = tuple(
            TextRun(center, y + 12 + idx * 11, line, TextClass.ITEM_NAME, Anchor.MIDDLE)
            for idx, line in enumerate(wrap_text(label, usable, cfg.name_font_size))
        )
        minor_y = y + 12 + len(name_lines) * 11 + 4

        minor_lines: Tuple[TextRun, ...] = ()
        if options.minor_text == MinorTextOption.LIFECYCLE:
            minor_lines = (TextRun(center, minor_y, lifecycle_label(status),
                                   TextClass.ITEM_MINOR, Anchor.MIDDLE),)
        elif options.minor_text == MinorTextOption.DESCRIPTION and description:
            minor_lines = tuple(
                TextRun(center, minor_y + idx * 9, line, TextClass.ITEM_MINOR, Anchor.MIDDLE)
                for idx, line in enumerate(wrap_text(description, usable, cfg.minor_font_size))
            )

        return ItemBox(rect=rect, column=column, label=label,
                       name_lines=name_lines, minor_lines=minor_lines, item_id=item_id)

    # =========================================================================
    # UNRELATED SECTION
    # =========================================================================

    def _unrelated(
        self,
        section: UnrelatedSection,
        y: float,
        frame: ColumnFrame,
        options: DisplayOptions,
        secondary_label: str,
        lifecycle_aware: bool
    ) -> Tuple[UnrelatedBlock, float]:
        cfg = self._config
        start = y
        separator_y = y + cfg.row_gap
        separator = Line(cfg.padding, separator_y, frame.total_width - cfg.padding, separator_y,
                         stroke=self._theme.colors.border, stroke_width=2)

        y = separator_y + cfg.row_gap * 2
        texts = [TextRun(cfg.padding + 10, y, f"{secondary_label} (Not Related)", TextClass.PARENT_LABEL)]
        y += 20

        boxes: List[ItemBox] = []
        if lifecycle_aware:
            texts.extend(self._column_headers(frame, y))
            y += cfg.header_height
            boxes.extend(self._column_boxes(section.current_items, section.target_items, y, frame, options))
            y += cfg.stack_height(self._visible_count(section.current_items, section.target_items, frame))
        else:
            single_x = frame.current_x
            texts.append(TextRun(single_x + (frame.total_width - cfg.padding - single_x) / 2, y,
                                 secondary_label, TextClass.HEADER, Anchor.MIDDLE))
            y += cfg.header_height
            boxes.extend(self._grid(section.items, single_x, y, Column.SINGLE, options))
            y += cfg.stack_height(len(section.items))

        y += cfg.row_gap
        block = UnrelatedBlock(separator=separator, texts=tuple(texts), boxes=tuple(boxes),
                               y=start, height=y - start)
        return block, y


def project(
    results: Sequence[ClassificationResult],
    options: Optional[DisplayOptions] = None,
    config: Optional[LayoutConfig] = None,
    **kwargs
) -> Geometry:
    """Functional entry point."""
    return LayoutProjector(config).project(results, options, **kwargs)
