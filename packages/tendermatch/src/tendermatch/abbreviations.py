"""Construction abbreviations and stopwords used by the text normalizer."""

from __future__ import annotations

import re

ABBREVIATIONS: dict[str, str] = {
    # General terms
    "excav.": "excavate",
    "excav": "excavate",
    "conc.": "concrete",
    "conc": "concrete",
    "galv.": "galvanised",
    "galv": "galvanised",
    "reinf.": "reinforced",
    "reinf": "reinforced",
    "struct.": "structural",
    "struct": "structural",
    "temp.": "temporary",
    "temp": "temporary",
    "perm.": "permanent",
    "perm": "permanent",
    "maint.": "maintenance",
    "maint": "maintenance",
    "incl.": "including",
    "incl": "including",
    "excl.": "excluding",
    "excl": "excluding",
    "approx.": "approximately",
    "approx": "approximately",
    "max.": "maximum",
    "max": "maximum",
    "min.": "minimum",
    "min": "minimum",
    "avg.": "average",
    "avg": "average",
    # Measurements
    "diam.": "diameter",
    "diam": "diameter",
    "dia.": "diameter",
    "dia": "diameter",
    "thk.": "thick",
    "thk": "thick",
    "w/": "with",
    "w": "with",
    "o/": "over",
    "u/": "under",
    # Methods
    "install": "installation",
    "instl.": "installation",
    "instl": "installation",
    "demo.": "demolition",
    "demo": "demolition",
    "fab.": "fabrication",
    "fab": "fabrication",
    "weld.": "welding",
    "weld": "welding",
    # Materials
    "alum.": "aluminium",
    "alum": "aluminium",
    "ss": "stainless steel",
    "ms": "mild steel",
    "hdpe": "high density polyethylene",
    "pvc": "polyvinyl chloride",
    "frp": "fiberglass reinforced plastic",
}

# Units, articles and prepositions that carry no matching signal
STOPWORDS: frozenset[str] = frozenset({
    "mm", "m", "ea", "each", "item", "items", "no", "nr", "sum", "lump",
    "the", "a", "an", "and", "or", "of", "in", "on", "at", "to", "for",
    "with", "by", "from", "up", "about", "into", "through", "during",
    "before", "after", "above", "below", "between", "among", "per",
})


def _boundary(abbrev: str) -> str:
    # Forms ending in "." or "/" are complete on their own ("w/pipe")
    pattern = r"(?<!\w)" + re.escape(abbrev)
    if abbrev[-1].isalnum():
        pattern += r"(?!\w)"
    return pattern


# Longest first so "excav." wins over "excav" inside the alternation
_ABBREVIATION_RE = re.compile(
    "|".join(_boundary(a) for a in sorted(ABBREVIATIONS, key=len, reverse=True)),
    re.IGNORECASE,
)


def expand_abbreviations(text: str) -> str:
    """Replace every whole-word abbreviation with its expansion in one pass."""
    return _ABBREVIATION_RE.sub(
        lambda m: f" {ABBREVIATIONS[m.group(0).lower()]} ", text
    )


def is_stopword(token: str) -> bool:
    return token in STOPWORDS
