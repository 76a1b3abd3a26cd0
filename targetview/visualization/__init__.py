"""
Visualization Layer

RESPONSIBILITY: Deterministic projection of classification results into
absolute geometry, plus static SVG export of that geometry.
ALLOWED INPUTS: ClassificationResult, DisplayOptions
OUTPUTS: Geometry, SVG text

WHAT THIS LAYER MUST NOT DO:
============================
- Classify or aggregate (see core/)
- Compute positions inside the renderers
- Depend on the rendering host (DOM, canvas, browser)
"""

from .geometry import (
    Anchor, BandKind, Column, Geometry, ItemBox, Line, ParentSection,
    PrimaryRow, Rect, RowBand, TextClass, TextRun, UnrelatedBlock,
)
from .layout import (
    ColumnViewMode, DisplayOptions, LayoutConfig, LayoutProjector,
    MinorTextOption, PrimaryGroup, group_by_parent, project,
)
from .svg import export_svg, build_stylesheet
from .text import wrap_text, estimate_width
from .theme import Theme, ThemeColors, ThemeFonts, DEFAULT_THEME

__all__ = [
    'Anchor', 'BandKind', 'Column', 'Geometry', 'ItemBox', 'Line', 'ParentSection',
    'PrimaryRow', 'Rect', 'RowBand', 'TextClass', 'TextRun', 'UnrelatedBlock',
    'ColumnViewMode', 'DisplayOptions', 'LayoutConfig', 'LayoutProjector',
    'MinorTextOption', 'PrimaryGroup', 'group_by_parent', 'project',
    'export_svg', 'build_stylesheet',
    'wrap_text', 'estimate_width',
    'Theme', 'ThemeColors', 'ThemeFonts', 'DEFAULT_THEME',
]
