"""Display-width accounting for report values.

Measures how many terminal columns a string occupies. Escape sequences
(SGR colors, cursor movement, OSC titles and the like) are zero-width and
skipped together with their parameter and terminator characters. Printable
characters are classified by the length of their UTF-8 encoding:

    1 byte   1 column
    2 bytes  1 column (combining marks and C1 controls: 0)
    3 bytes  1 column
    4 bytes  2 columns

This is the classification the report layout is tuned for. It is not the
Unicode East Asian Width table; pass ``unicode_width=True`` to the helpers
below to measure with rich's cell widths instead.

Every function here is total: malformed input is measured best-effort and
never raises.
"""

import re

from rich.cells import cell_len, get_character_cell_size

RESET = "\x1b[0m"

_ESCAPE_RE = re.compile(
    r"""
    \x1b
    (?:
        \[ [\x30-\x3f]* [\x20-\x2f]* [\x40-\x7e]?     # CSI
      | \] [^\x07\x1b]* (?:\x07|\x1b\\)?               # OSC
      | [PX^_] [^\x1b]* (?:\x1b\\)?                    # DCS, SOS, PM, APC
      | [\x20-\x2f]* [\x30-\x7e]?                      # short escapes
    )
    """,
    re.VERBOSE,
)

_CONTROL_RE = re.compile(r"[\x00-\x1a\x1c-\x1f\x7f]")


def _coerce(text):
    if text is None:
        return ""
    if isinstance(text, (bytes, bytearray)):
        # Undecodable bytes become lone surrogates, one column each.
        return bytes(text).decode("utf-8", errors="surrogateescape")
    return str(text)


def _segments(text):
    """Yield (chunk, is_escape) pairs covering the whole string."""
    pos = 0
    for m in _ESCAPE_RE.finditer(text):
        if m.start() > pos:
            yield text[pos:m.start()], False
        yield m.group(), True
        pos = m.end()
    if pos < len(text):
        yield text[pos:], False


def char_width(ch):
    """Columns for a single printable character by UTF-8 length class."""
    cp = ord(ch)
    if cp < 0x80:
        return 1
    if cp < 0x800:
        if cp <= 0x9F or 0x300 <= cp <= 0x36F:
            return 0
        return 1
    if cp < 0x10000:
        return 1
    return 2


def _char_measure(unicode_width):
    return get_character_cell_size if unicode_width else char_width


def strip_ansi(text):
    """Visible text of *text* with every escape sequence removed."""
    return "".join(chunk for chunk, is_escape in _segments(_coerce(text)) if not is_escape)


def blank_controls(text):
    """Replace C0 control characters outside escape sequences with spaces.

    Terminals expand tabs and act on other controls, so they would not
    occupy the single column they are measured at.
    """
    return "".join(
        chunk if is_escape else _CONTROL_RE.sub(" ", chunk)
        for chunk, is_escape in _segments(_coerce(text))
    )


def display_width(text):
    """Terminal columns occupied by *text* (str or bytes)."""
    total = 0
    for chunk, is_escape in _segments(_coerce(text)):
        if not is_escape:
            total += sum(char_width(ch) for ch in chunk)
    return total


def cell_width(text):
    """Terminal columns of *text* using rich's Unicode cell table."""
    return cell_len(strip_ansi(text))


def measure(text, unicode_width=False):
    if unicode_width:
        return cell_width(text)
    return display_width(text)


def truncate_to_width(text, width, unicode_width=False):
    """Longest prefix of *text* that fits in *width* columns.

    Escape sequences inside the kept prefix are preserved; if any were kept
    a reset is appended so color does not bleed past the cut.
    """
    text = _coerce(text)
    width_of = _char_measure(unicode_width)
    kept = []
    used = 0
    styled = False
    for chunk, is_escape in _segments(text):
        if is_escape:
            kept.append(chunk)
            styled = True
            continue
        for ch in chunk:
            w = width_of(ch)
            if used + w > width:
                if styled:
                    kept.append(RESET)
                return "".join(kept)
            kept.append(ch)
            used += w
    return text


def pad_to_width(text, width, unicode_width=False):
    """Right-pad *text* with spaces to *width* columns."""
    text = _coerce(text)
    current = measure(text, unicode_width)
    if current >= width:
        return text
    return text + " " * (width - current)
