"""
Layout Projector Tests
======================

Row heights, box placement, column folding and determinism.
"""

import pytest

from targetview.contracts.base import RelationshipLifecycleStatus
from targetview.contracts.results import RollupFilterMode, RollupSpec
from targetview.core.classifier import classify
from targetview.core.rollup import aggregate
from targetview.core.unrelated import unrelated_secondary_items
from targetview.visualization.geometry import BandKind, Column, TextClass
from targetview.visualization.layout import (
    ColumnViewMode, DisplayOptions, LayoutConfig, LayoutProjector, MinorTextOption,
    group_by_parent, project,
)
from targetview.visualization.text import wrap_text
from targetview.visualization.theme import DEFAULT_THEME

from fixtures import (
    APPS, CAPS, PLATFORMS, SnapshotBuilder, capability_snapshot, core_banking_snapshot,
    item, scenario_snapshot, wide_snapshot,
)

LABELS = {APPS: "Applications", PLATFORMS: "Platforms", CAPS: "Capabilities"}


def _results(builder, spec=None):
    index = builder.index()
    return aggregate(index, classify(index, APPS, PLATFORMS), spec)


def _texts(geometry, css_class=None):
    return [p.text for p in geometry.primitives()
            if hasattr(p, "css_class") and (css_class is None or p.css_class == css_class)]


class TestRowHeights:

    def test_seven_items_three_per_row(self):
        geometry = project(_results(wide_snapshot(7)))
        row = geometry.sections[0].rows[0]

        assert LayoutConfig().rows_for(7) == 3
        assert row.height == max(40 * 3 + 4 * 2, 60) == 128

    def test_min_row_height_applies(self):
        geometry = project(_results(wide_snapshot(1)))
        assert geometry.sections[0].rows[0].height == 60

    def test_projection_is_deterministic(self):
        results = _results(wide_snapshot(7))
        assert project(results) == project(results)

    def test_canvas_size(self):
        geometry = project(_results(wide_snapshot(7)))

        assert geometry.width == 20 + 200 + 20 + 400 + 20 + 400 + 20
        # header bottom (60) + padding + row gap, one 128 row, row gap, padding
        assert geometry.height == 90 + 128 + 10 + 20

    def test_hidden_column_does_not_drive_height(self):
        builder = SnapshotBuilder().add(item(1, APPS, "A"))
        # four target-only items
        for n in range(4):
            builder.add(item(10 + n, PLATFORMS, f"T{n}"))
            builder.relate(1, 10 + n, RelationshipLifecycleStatus.PLANNED_TO_ADD)
        results = _results(builder)

        both = project(results)
        current_only = project(results, DisplayOptions(column_view_mode=ColumnViewMode.CURRENT))

        assert both.sections[0].rows[0].height == 84
        assert current_only.sections[0].rows[0].height == 60


class TestBoxPlacement:

    def test_grid_positions(self):
        geometry = project(_results(wide_snapshot(7)))
        current = [b for b in geometry.boxes() if b.column == Column.CURRENT]
        target = [b for b in geometry.boxes() if b.column == Column.TARGET]

        assert len(current) == 7
        assert len(target) == 7
        assert (current[0].rect.x, current[0].rect.y) == (240, 90)
        assert (current[1].rect.x, current[1].rect.y) == (364, 90)
        assert (current[6].rect.x, current[6].rect.y) == (240, 178)
        assert target[0].rect.x == 660

    def test_box_follows_item_order(self):
        geometry = project(_results(wide_snapshot(4)))
        current = [b.label for b in geometry.boxes() if b.column == Column.CURRENT]
        assert current == ["P0", "P1", "P2", "P3"]

    def test_single_column_folds_width(self):
        projector = LayoutProjector()
        frame = projector.column_frame(ColumnViewMode.TARGET)

        assert not frame.show_current
        assert frame.target_x == 240
        assert frame.target_width == 820
        assert frame.total_width == 1080

        geometry = projector.project(_results(wide_snapshot(2)),
                                     DisplayOptions(column_view_mode=ColumnViewMode.TARGET))
        assert {b.column for b in geometry.boxes()} == {Column.TARGET}
        assert "Current" not in _texts(geometry, TextClass.HEADER)


class TestText:

    def test_wrap_breaks_on_words(self):
        assert wrap_text("alpha beta gamma", 60, 10) == ["alpha beta", "gamma"]

    def test_long_word_never_split(self):
        assert wrap_text("supercalifragilistic", 30, 10) == ["supercalifragilistic"]

    def test_empty_text(self):
        assert wrap_text("", 100) == []
        assert wrap_text(None, 100) == []

    def test_minor_text_options(self):
        results = _results(scenario_snapshot())

        lifecycle = project(results, DisplayOptions(minor_text=MinorTextOption.LIFECYCLE))
        none = project(results, DisplayOptions(minor_text=MinorTextOption.NONE))

        assert "Divest" in _texts(lifecycle, TextClass.ITEM_MINOR)
        assert "No Status" in _texts(lifecycle, TextClass.ITEM_MINOR)
        assert _texts(none, TextClass.ITEM_MINOR) == []
        assert "Web checkout flow" in _texts(lifecycle, TextClass.PRIMARY_DESC)
        assert _texts(none, TextClass.PRIMARY_DESC) == []


class TestParentSections:

    def test_no_parent_group_first_then_alphabetical(self):
        builder = SnapshotBuilder().add(
            item(1, APPS, "A", parent="Retail"),
            item(2, APPS, "B"),
            item(3, APPS, "C", parent="Banking"),
        )
        groups = group_by_parent(classify(builder.index(), APPS, PLATFORMS))
        assert [g.parent for g in groups] == [None, "Banking", "Retail"]

    def test_parent_label_drawn(self):
        builder = SnapshotBuilder().add(item(1, APPS, "A", parent="Retail"))
        geometry = project(classify(builder.index(), APPS, PLATFORMS))

        section = geometry.sections[0]
        assert section.label.text == "Retail"
        assert section.container.y == section.label.y + 20


class TestRollupLayout:

    def test_only_related_draws_one_box_per_group(self):
        results = _results(core_banking_snapshot(), RollupSpec.attribute(RollupFilterMode.ONLY_RELATED))
        row = project(results).sections[0].rows[0]

        assert [b.kind for b in row.bands] == [BandKind.ROLLUP_SUMMARY, BandKind.UNGROUPED_COUNT]
        assert row.height == 60 + 10 + 60
        assert [b.label for b in row.bands[0].boxes] == ["Core Banking", "Core Banking"]
        assert all(b.item_id is None for b in row.bands[0].boxes)

    def test_only_related_counts_hidden_items_per_column(self):
        builder = capability_snapshot().add(item(33, PLATFORMS, "Cache")).relate(
            1, 33, RelationshipLifecycleStatus.PLANNED_TO_ADD
        )
        results = _results(builder, RollupSpec.relation(CAPS))
        row = project(results, lens_labels=LABELS).sections[0].rows[0]

        count_band = row.bands[-1]
        assert count_band.kind == BandKind.UNGROUPED_COUNT
        assert count_band.y == row.bands[-2].y + 60 + 10
        labels = {b.column: b.label for b in count_band.boxes}
        assert labels == {Column.CURRENT: "+1 other Platforms", Column.TARGET: "+2 other Platforms"}
        assert all(b.rect.stroke == DEFAULT_THEME.colors.secondary for b in count_band.boxes)
        assert all(b.minor_lines == () for b in count_band.boxes)

    def test_count_band_skips_empty_and_hidden_columns(self):
        builder = capability_snapshot().add(item(33, PLATFORMS, "Cache")).relate(
            1, 33, RelationshipLifecycleStatus.PLANNED_TO_REMOVE
        )
        results = _results(builder, RollupSpec.relation(CAPS))
        options = DisplayOptions(column_view_mode=ColumnViewMode.TARGET)
        row = project(results, options, lens_labels=LABELS).sections[0].rows[0]

        assert [b.label for b in row.bands[-1].boxes] == ["+1 other Platforms"]
        assert row.bands[-1].boxes[0].column == Column.TARGET

    def test_no_count_band_when_everything_grouped(self):
        builder = (
            SnapshotBuilder()
            .add(item(1, APPS, "A"), item(2, PLATFORMS, "P", parent="Core"))
            .relate(1, 2)
        )
        row = project(_results(builder, RollupSpec.attribute())).sections[0].rows[0]
        assert [b.kind for b in row.bands] == [BandKind.ROLLUP_SUMMARY]

    def test_show_secondary_adds_ungrouped_band(self):
        results = _results(core_banking_snapshot(), RollupSpec.attribute(RollupFilterMode.SHOW_SECONDARY))
        row = project(results).sections[0].rows[0]

        assert [b.kind for b in row.bands] == [BandKind.ROLLUP_DETAIL, BandKind.UNGROUPED]
        assert row.bands[0].header.text == "Parent: Core Banking"
        assert row.bands[1].header.text == "(No Parent)"
        assert row.height == 80 + 10 + 80

    def test_relation_summary_uses_rollup_item(self):
        results = _results(capability_snapshot(), RollupSpec.relation(CAPS))
        row = project(results, lens_labels=LABELS).sections[0].rows[0]

        hosting = row.bands[0].boxes[0]
        assert hosting.label == "Hosting"
        assert hosting.item_id == 40
        assert [m.text for m in hosting.minor_lines] == ["Stable"]

    def test_relation_detail_headers_use_lens_label(self):
        results = _results(capability_snapshot(), RollupSpec.relation(CAPS, RollupFilterMode.SHOW_SECONDARY))
        row = project(results, lens_labels=LABELS).sections[0].rows[0]

        headers = [b.header.text for b in row.bands]
        assert headers == ["Capabilities: Hosting", "Capabilities: Resilience", "Platforms (Not related)"]

    def test_display_option_overrides_filter_mode(self):
        results = _results(capability_snapshot(), RollupSpec.relation(CAPS, RollupFilterMode.SHOW_SECONDARY))
        options = DisplayOptions(rollup_mode=RollupFilterMode.ONLY_RELATED)
        row = project(results, options).sections[0].rows[0]

        assert {b.kind for b in row.bands} == {BandKind.ROLLUP_SUMMARY, BandKind.UNGROUPED_COUNT}


class TestUnrelatedBlock:

    def test_unrelated_section_appended(self):
        builder = scenario_snapshot().add(item(50, PLATFORMS, "Orphan"))
        index = builder.index()
        results = classify(index, APPS, PLATFORMS)
        unrelated = unrelated_secondary_items(index, results, PLATFORMS)

        without = project(results, lens_labels=LABELS)
        geometry = project(results, DisplayOptions(show_unrelated=True),
                           lens_labels=LABELS, unrelated=unrelated)

        assert geometry.unrelated is not None
        assert "Platforms (Not Related)" in _texts(geometry)
        assert [b.label for b in geometry.unrelated.boxes] == ["Orphan", "Orphan"]
        assert geometry.height == without.height + geometry.unrelated.height

    def test_single_column_without_lifecycle_data(self):
        builder = (
            SnapshotBuilder()
            .add(item(1, APPS, "A"), item(10, PLATFORMS, "P"), item(11, PLATFORMS, "Q"))
            .relate(1, 10)
        )
        index = builder.index()
        results = classify(index, APPS, PLATFORMS)
        geometry = project(results, DisplayOptions(show_unrelated=True), lens_labels=LABELS,
                           unrelated=unrelated_secondary_items(index, results, PLATFORMS))

        assert [b.column for b in geometry.unrelated.boxes] == [Column.SINGLE]


class TestLayoutConfig:

    def test_rejects_zero_boxes_per_row(self):
        with pytest.raises(ValueError):
            LayoutConfig(boxes_per_row=0)

    def test_rejects_non_positive_box(self):
        with pytest.raises(ValueError):
            LayoutConfig(box_width=0)

    def test_custom_boxes_per_row(self):
        projector = LayoutProjector(LayoutConfig(boxes_per_row=7))
        geometry = projector.project(_results(wide_snapshot(7)))
        assert geometry.sections[0].rows[0].height == 60


def test_empty_results_project_headers_only():
    geometry = project(())
    assert geometry.sections == ()
    assert geometry.unrelated is None
    assert geometry.width == 1080
