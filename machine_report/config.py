"""Layout constants and the per-run layout configuration."""

from dataclasses import dataclass

# ── Layout bounds ────────────────────────────────────────────────────
MIN_NAME_LEN = 5
MAX_NAME_LEN = 13
MIN_DATA_LEN = 20
MAX_DATA_LEN = 32
# "│ " + label + " │ " + value + " │"
BORDERS_AND_PADDING = 7

REPORT_TITLE = "SYSTEM STATUS REPORT"
REPORT_SUBTITLE = "TR-1000 MACHINE REPORT"

ELLIPSIS = "..."

# ── Sentinels ────────────────────────────────────────────────────────
UNKNOWN = "unknown"
NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class LayoutConfig:
    min_label_len: int = MIN_NAME_LEN
    max_label_len: int = MAX_NAME_LEN
    min_data_len: int = MIN_DATA_LEN
    max_data_len: int = MAX_DATA_LEN
    title: str = REPORT_TITLE
    subtitle: str = REPORT_SUBTITLE
    color: bool = True
    unicode_width: bool = False

    def __post_init__(self):
        if self.min_label_len < 1 or self.min_data_len < 1:
            raise ValueError("label and data widths must be positive")
        if self.min_label_len > self.max_label_len:
            raise ValueError(
                f"min_label_len ({self.min_label_len}) exceeds max_label_len ({self.max_label_len})"
            )
        if self.min_data_len > self.max_data_len:
            raise ValueError(
                f"min_data_len ({self.min_data_len}) exceeds max_data_len ({self.max_data_len})"
            )
        # Room for at least one visible column in front of the ellipsis.
        if self.max_label_len <= len(ELLIPSIS) or self.max_data_len <= len(ELLIPSIS) + 1:
            raise ValueError("maximum widths are too small to hold an ellipsis")

    @property
    def graph_width_cap(self):
        return self.max_data_len - 3
