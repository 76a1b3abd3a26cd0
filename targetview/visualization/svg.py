"""
Static SVG export.

Serializes an already-projected Geometry. No layout happens here, so an
export is pixel-identical to what the interactive renderer draws from
the same tree.
"""

from __future__ import annotations
import xml.etree.ElementTree as ET
from typing import Optional

from .geometry import Anchor, Geometry, Line, Primitive, Rect, TextClass, TextRun
from .theme import DEFAULT_THEME, Theme

SVG_NS = "http://www.w3.org/2000/svg"


def _num(value: float) -> str:
    """Integral floats print without a trailing .0."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def build_stylesheet(theme: Theme) -> str:
    colors, fonts = theme.colors, theme.fonts
    rules = {
        TextClass.HEADER: f"font-family: {fonts.heading}; font-size: 12px; font-weight: 600; fill: {colors.text};",
        TextClass.PRIMARY_NAME: f"font-family: {fonts.heading}; font-size: 12px; font-weight: bold; fill: {colors.text};",
        TextClass.PRIMARY_DESC: f"font-family: {fonts.body}; font-size: 10px; fill: {colors.text_secondary};",
        TextClass.ITEM_NAME: f"font-family: {fonts.body}; font-size: 10px; fill: {colors.text};",
        TextClass.ITEM_MINOR: f"font-family: {fonts.body}; font-size: 8px; fill: {colors.text_secondary};",
        TextClass.PARENT_LABEL: f"font-family: {fonts.body}; font-size: 10px; font-weight: 500; fill: {colors.text_secondary};",
    }
    return "\n".join(f".{cls.value} {{ {body} }}" for cls, body in rules.items())


def _element(primitive: Primitive) -> ET.Element:
    if isinstance(primitive, Rect):
        attrs = {
            "x": _num(primitive.x), "y": _num(primitive.y),
            "width": _num(primitive.width), "height": _num(primitive.height),
            "fill": primitive.fill, "stroke": primitive.stroke,
            "stroke-width": _num(primitive.stroke_width),
        }
        if primitive.rx:
            attrs["rx"] = _num(primitive.rx)
        return ET.Element("rect", attrs)

    if isinstance(primitive, Line):
        return ET.Element("line", {
            "x1": _num(primitive.x1), "y1": _num(primitive.y1),
            "x2": _num(primitive.x2), "y2": _num(primitive.y2),
            "stroke": primitive.stroke, "stroke-width": _num(primitive.stroke_width),
        })

    if isinstance(primitive, TextRun):
        attrs = {
            "x": _num(primitive.x), "y": _num(primitive.y),
            "class": primitive.css_class.value,
        }
        if primitive.anchor != Anchor.START:
            attrs["text-anchor"] = primitive.anchor.value
        element = ET.Element("text", attrs)
        element.text = primitive.text
        return element

    raise TypeError(f"Unsupported primitive: {type(primitive).__name__}")


def export_svg(geometry: Geometry, theme: Optional[Theme] = None) -> str:
    """Render geometry into a standalone SVG document."""
    theme = theme or DEFAULT_THEME
    root = ET.Element("svg", {
        "xmlns": SVG_NS,
        "width": _num(geometry.width),
        "height": _num(geometry.height),
        "viewBox": f"0 0 {_num(geometry.width)} {_num(geometry.height)}",
    })
    style = ET.SubElement(root, "style")
    style.text = build_stylesheet(theme)

    for primitive in geometry.primitives():
        root.append(_element(primitive))

    return ET.tostring(root, encoding="unicode")
