"""
Theme tokens for lifecycle styling.

Colour groups: (error, Divest), (success, Invest), (info, Plan),
(warning, Emerging), (primary, Stable and no status). Box fills use
the stroke colour with a 0x1a alpha suffix.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from ..contracts.base import LifecycleStatus

FILL_ALPHA = "1a"


@dataclass(frozen=True)
class ThemeColors:
    primary: str = "#3b82f6"
    secondary: str = "#64748b"
    accent: str = "#8b5cf6"
    background: str = "#f8fafc"
    surface: str = "#ffffff"
    text: str = "#1e293b"
    text_secondary: str = "#64748b"
    border: str = "#cbd5e1"
    success: str = "#10b981"
    warning: str = "#f59e0b"
    error: str = "#ef4444"
    info: str = "#3b82f6"


@dataclass(frozen=True)
class ThemeFonts:
    heading: str = "system-ui, -apple-system, sans-serif"
    body: str = "system-ui, -apple-system, sans-serif"
    mono: str = 'ui-monospace, SFMono-Regular, "SF Mono", Menlo, Consolas, "Liberation Mono", monospace'


@dataclass(frozen=True)
class Theme:
    name: str = "Default"
    colors: ThemeColors = field(default_factory=ThemeColors)
    fonts: ThemeFonts = field(default_factory=ThemeFonts)

    def box_stroke(self, status: Optional[LifecycleStatus]) -> str:
        if status == LifecycleStatus.DIVEST:
            return self.colors.error
        if status == LifecycleStatus.INVEST:
            return self.colors.success
        if status == LifecycleStatus.PLAN:
            return self.colors.info
        if status == LifecycleStatus.EMERGING:
            return self.colors.warning
        return self.colors.primary

    def box_fill(self, status: Optional[LifecycleStatus]) -> str:
        return self.box_stroke(status) + FILL_ALPHA


DEFAULT_THEME = Theme()
