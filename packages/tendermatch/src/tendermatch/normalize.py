"""Text normalization for tender line items."""

from __future__ import annotations

import re

from tendermatch.abbreviations import expand_abbreviations, is_stopword
from tendermatch.types import NormalizedText

_WHITESPACE_RE = re.compile(r"\s+")
_MILLIMETRES_RE = re.compile(r"(\d+(?:\.\d+)?)\s*mm\b")
_NUMBER_UNIT_RE = re.compile(r"(\d+(?:\.\d+)?)([a-z]+)\b")
_PUNCTUATION_RE = re.compile(r"[^\w\s.]")
_LOOSE_DOT_RE = re.compile(r"\.(?![0-9])")
_SINGLE_CHAR_RE = re.compile(r"^(?:[0-9]|[a-z]\.?)$")
_CODE_STRIP_RE = re.compile(r"[^\w.]")

_EMPTY = NormalizedText()


def normalize(text: str, remove_stopwords: bool = True) -> NormalizedText:
    """Normalize an item description (or unit, or section) for comparison.

    Expands abbreviations, converts millimetres to metres, strips punctuation
    except dots inside numbers/codes, and drops stopwords. ``key`` is the
    sorted token list joined by spaces; two descriptions with the same key
    are treated as the same description.
    """
    if not text or not isinstance(text, str):
        return _EMPTY

    s = _WHITESPACE_RE.sub(" ", text.lower().strip())

    # Expand abbreviations before punctuation removal so "excav." is seen whole
    s = expand_abbreviations(s)

    s = _standardize_quantities(s)

    s = _PUNCTUATION_RE.sub(" ", s)
    s = _LOOSE_DOT_RE.sub(" ", s)

    tokens = [t for t in s.split() if t]
    if remove_stopwords:
        tokens = [t for t in tokens if not is_stopword(t)]

    # Single letters survive as section letters, other 1-char tokens go
    tokens = [t for t in tokens if len(t) > 1 or _SINGLE_CHAR_RE.match(t)]

    sorted_tokens = sorted(tokens)

    return NormalizedText(
        original=text,
        normalized=" ".join(tokens),
        tokens=tuple(tokens),
        sorted_tokens=tuple(sorted_tokens),
        key=" ".join(sorted_tokens),
    )


def normalize_item_code(code: str | None) -> str:
    """Normalize an item code: lowercase, only word characters and dots."""
    if not code or not isinstance(code, str):
        return ""
    return _CODE_STRIP_RE.sub("", code.lower().strip())


def are_units_equivalent(unit1: str | None, unit2: str | None) -> bool:
    """Soft unit comparison; stopwords are kept since most units are stopwords."""
    if not unit1 or not unit2:
        return False
    return normalize(unit1, remove_stopwords=False).key == normalize(unit2, remove_stopwords=False).key


def _standardize_quantities(text: str) -> str:
    """Convert "300mm" to "0.3 m" and split "1.5m" into "1.5 m"."""
    text = _MILLIMETRES_RE.sub(
        lambda m: f"{_format_number(float(m.group(1)) / 1000)} m", text
    )
    return _NUMBER_UNIT_RE.sub(r"\1 \2", text)


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)
