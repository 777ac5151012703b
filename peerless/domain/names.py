import sys
import unicodedata

LTR_MARK = "\u200e"
RTL_MARK = "\u200f"
LRE = "\u202a"
RLE = "\u202b"
PDF = "\u202c"
LRO = "\u202d"
RLO = "\u202e"

BIDI_MARKS = frozenset({LTR_MARK, RTL_MARK, LRE, RLE, PDF, LRO, RLO})
KEPT_CONTROLS = frozenset({"\n", "\t", "\r"})


def _is_control(ch: str) -> bool:
    return unicodedata.category(ch) == "Cc"


def _is_removed(ch: str) -> bool:
    if ch in BIDI_MARKS:
        return True
    return _is_control(ch) and ch not in KEPT_CONTROLS


def sanitize(text: str) -> str:
    """Strips control characters (except newline, tab and carriage return) and
    bidirectional formatting marks. Names echoed by Transmission go through
    this before they are displayed, compared or written to disk."""
    return "".join(ch for ch in text if not _is_removed(ch))


def is_case_sensitive() -> bool:
    # windows filesystems are case-insensitive by default
    return not sys.platform.startswith("win")


CASE_SENSITIVE = is_case_sensitive()


def normalize_name(name: str) -> str:
    if CASE_SENSITIVE:
        return name
    return name.lower()
