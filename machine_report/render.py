"""Bordered and label-style report rendering.

Both renderers resolve one data width for the whole batch before emitting
anything, so every row lines up. Output is a list of lines; nothing here
writes to the terminal.
"""

from machine_report.config import BORDERS_AND_PADDING
from machine_report.layout import (
    field_values,
    fit_with_ellipsis,
    format_value,
    normalize_label,
    resolve_width,
)
from machine_report.width import blank_controls, measure

# ── Box-drawing glyphs ───────────────────────────────────────────────
H_LINE = "─"
V_LINE = "│"

DIVIDERS = {
    "top": ("├", "┬", "┤"),
    "middle": ("├", "┼", "┤"),
    "bottom": ("└", "┴", "┘"),
}


def report_width(sections, config):
    """Shared data-column width for a batch of sections."""
    values = [config.title] + field_values(sections)
    return resolve_width(values, config.min_data_len, config.max_data_len, config.unicode_width)


def frame_length(width, config):
    return width + config.max_label_len + BORDERS_AND_PADDING


def center_text(text, total, unicode_width=False):
    """Pad *text* on both sides to *total* columns; overlong text is cut."""
    text = blank_controls(text)
    if measure(text, unicode_width) > total:
        text = fit_with_ellipsis(text, total, unicode_width)
    gap = max(total - measure(text, unicode_width), 0)
    left = gap // 2
    return " " * left + text + " " * (gap - left)


def header_lines(width, config):
    n = frame_length(width, config)
    return [
        "┌" + "┬" * (n - 2) + "┐",
        "├" + "┴" * (n - 2) + "┤",
    ]


def title_line(text, width, config):
    inner = frame_length(width, config) - 2
    return V_LINE + center_text(text, inner, config.unicode_width) + V_LINE


def divider(width, config, side="middle"):
    """Horizontal rule with a junction above/below the label column edge."""
    left, junction, right = DIVIDERS.get(side, DIVIDERS["middle"])
    run = frame_length(width, config) - 3
    split = min(config.max_label_len + 2, run)
    return left + H_LINE * split + junction + H_LINE * (run - split) + right


def row_line(field, width, config):
    label = normalize_label(field.label, config.max_label_len, config.unicode_width)
    value = format_value(field, width, config, pad=True)
    return f"{V_LINE} {label} {V_LINE} {value} {V_LINE}"


def _titles(config):
    return [t for t in (config.title, config.subtitle) if t]


def render_bordered(sections, config):
    """Box-drawn table: header, title block, one row per field, dividers."""
    sections = [s for s in sections if s]
    width = report_width(sections, config)

    lines = header_lines(width, config)
    lines.extend(title_line(t, width, config) for t in _titles(config))
    lines.append(divider(width, config, "top"))
    for i, section in enumerate(sections):
        if i:
            lines.append(divider(width, config, "middle"))
        lines.extend(row_line(f, width, config) for f in section)
    lines.append(divider(width, config, "bottom"))
    return lines


def render_plain(sections, config):
    """Label-style report: ``label: value`` rows separated by rules."""
    sections = [s for s in sections if s]
    width = report_width(sections, config)
    labels = [f.label for s in sections for f in s]
    label_len = resolve_width(labels, config.min_label_len, config.max_label_len, config.unicode_width)
    rule = H_LINE * (label_len + 2 + width)

    lines = [center_text(t, len(rule), config.unicode_width).rstrip() for t in _titles(config)]
    lines.append(rule)
    for i, section in enumerate(sections):
        if i:
            lines.append(rule)
        for f in section:
            label = normalize_label(f.label, label_len, config.unicode_width)
            lines.append(f"{label}: {format_value(f, width, config, pad=False)}")
    lines.append("")
    return lines


def render_report(sections, config, borders=True):
    """Whole report as one string, newline-terminated."""
    lines = render_bordered(sections, config) if borders else render_plain(sections, config)
    return "\n".join(lines) + "\n"
