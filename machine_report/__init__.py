"""Terminal machine status report."""

from machine_report.config import LayoutConfig
from machine_report.layout import Field, FieldKind, draw_bar, normalize_label, resolve_width
from machine_report.render import render_bordered, render_plain, render_report
from machine_report.width import display_width

__version__ = "0.1.0"

__all__ = [
    "Field",
    "FieldKind",
    "LayoutConfig",
    "display_width",
    "draw_bar",
    "normalize_label",
    "render_bordered",
    "render_plain",
    "render_report",
    "resolve_width",
]
