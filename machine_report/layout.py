"""Column layout: fields, shared width, label and value formatting, bars."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from machine_report.config import ELLIPSIS
from machine_report.width import RESET, blank_controls, measure, pad_to_width, truncate_to_width

# ── Bar glyphs and colour tiers ──────────────────────────────────────
BAR_FILLED = "█"
BAR_EMPTY = "░"

C_OK = "\x1b[32m"
C_WARN = "\x1b[33m"
C_CRIT = "\x1b[31m"

WARN_PERCENT = 50
CRIT_PERCENT = 75


class FieldKind(Enum):
    PLAIN_TEXT = "text"
    BAR_GRAPH = "bar"


@dataclass(frozen=True)
class Field:
    label: str
    value: str = ""
    kind: FieldKind = FieldKind.PLAIN_TEXT
    percent: Optional[float] = None

    @classmethod
    def text(cls, label, value):
        return cls(label=label, value=value, kind=FieldKind.PLAIN_TEXT)

    @classmethod
    def bar(cls, label, percent):
        return cls(label=label, kind=FieldKind.BAR_GRAPH, percent=percent)

    @property
    def is_bar(self):
        return self.kind is FieldKind.BAR_GRAPH


def resolve_width(values, min_width, max_width, unicode_width=False):
    """Widest value clamped to [min_width, max_width]."""
    widest = max((measure(v, unicode_width) for v in values), default=min_width)
    return max(min_width, min(widest, max_width))


def fit_with_ellipsis(text, width, unicode_width=False):
    """Cut *text* to ``width - 3`` columns and end it with an ellipsis.

    The cut part is padded so the result is always exactly *width* columns,
    even when a wide glyph does not fit at the cut.
    """
    room = max(width - len(ELLIPSIS), 0)
    head = truncate_to_width(text, room, unicode_width)
    return pad_to_width(head, room, unicode_width) + ELLIPSIS


def normalize_label(label, max_label_len, unicode_width=False):
    """Fixed-width label: ellipsis-truncated when long, space-padded when short."""
    label = blank_controls(label)
    if measure(label, unicode_width) > max_label_len:
        return fit_with_ellipsis(label, max_label_len, unicode_width)
    return pad_to_width(label, max_label_len, unicode_width)


def bar_color(percent):
    if percent < WARN_PERCENT:
        return C_OK
    if percent < CRIT_PERCENT:
        return C_WARN
    return C_CRIT


def draw_bar(percent, width, color=False):
    """Bar of *width* glyphs, filled in proportion to *percent*.

    Percentages above 100 (multi-core load averages) fill the bar; negative
    and non-finite ones leave it empty.
    """
    width = max(int(width), 0)
    try:
        percent = float(percent)
    except (TypeError, ValueError):
        percent = 0.0
    if not math.isfinite(percent):
        percent = 0.0
    filled = math.floor(percent / 100.0 * width)
    filled = max(0, min(filled, width))
    glyphs = BAR_FILLED * filled + BAR_EMPTY * (width - filled)
    if color:
        return f"{bar_color(percent)}{glyphs}{RESET}"
    return glyphs


def graph_width(width, config):
    return min(width, config.graph_width_cap)


def truncate_value(value, config):
    """Ellipsis-truncate plain values that would reach max_data_len."""
    value = blank_controls(value)
    if measure(value, config.unicode_width) >= config.max_data_len:
        return fit_with_ellipsis(value, config.max_data_len - 1, config.unicode_width)
    return value


def format_value(field, width, config, pad=True):
    """Right-hand cell for *field*.

    Bordered reports pad every value to *width*; the label-style report
    passes ``pad=False`` and gets the bare value.
    """
    if field.is_bar:
        value = draw_bar(field.percent, graph_width(width, config), color=config.color)
    else:
        value = truncate_value(field.value, config)
    if pad:
        return pad_to_width(value, width, config.unicode_width)
    return value


def field_values(sections):
    """Plain values that take part in width resolution."""
    return [blank_controls(f.value) for section in sections for f in section if not f.is_bar]
