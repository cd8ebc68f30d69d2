"""
English pluralisation heuristics used to derive extra aliases for terms.

Pure string transforms, no I/O. The rules cover the common cases met in
glossaries; they are deliberately not a full inflection engine.
"""

import re
from collections.abc import Iterable

UNCOUNTABLE = frozenset(
    {
        "advice", "aircraft", "data", "deer", "equipment", "evidence", "feedback",
        "fish", "furniture", "hardware", "information", "knowledge", "metadata",
        "money", "news", "research", "rice", "series", "sheep", "software",
        "species", "traffic", "water",
    }
)  # fmt: skip

IRREGULAR = {
    "analysis": "analyses",
    "appendix": "appendices",
    "axis": "axes",
    "cactus": "cacti",
    "child": "children",
    "criterion": "criteria",
    "focus": "foci",
    "foot": "feet",
    "goose": "geese",
    "index": "indices",
    "louse": "lice",
    "man": "men",
    "matrix": "matrices",
    "medium": "media",
    "mouse": "mice",
    "nucleus": "nuclei",
    "ox": "oxen",
    "person": "people",
    "phenomenon": "phenomena",
    "radius": "radii",
    "stimulus": "stimuli",
    "syllabus": "syllabi",
    "tooth": "teeth",
    "vertex": "vertices",
    "woman": "women",
}

# -f / -fe words that take -ves; everything else just adds -s (roof, chief, safe)
F_TO_VES = frozenset(
    {"calf", "elf", "half", "knife", "leaf", "life", "loaf", "scarf", "self",
     "sheaf", "shelf", "thief", "wife", "wolf"}
)  # fmt: skip

O_TO_OES = frozenset(
    {"echo", "embargo", "hero", "potato", "tomato", "torpedo", "veto"}
)  # fmt: skip

_VOWELS = "aeiou"
_ASCII_LETTER = re.compile(r"[A-Za-z]")
_LAST_WORD = re.compile(r"^(.*?)([A-Za-z][A-Za-z'-]*)$")


def _match_case(source: str, plural: str) -> str:
    if source.isupper() and len(source) > 1:
        return plural.upper()
    if source[:1].isupper():
        return plural[:1].upper() + plural[1:]
    return plural


def _pluralize_word(word: str) -> str | None:
    lower = word.lower()

    if lower in UNCOUNTABLE:
        return None

    # Acronyms: API -> APIs
    if word.isupper() and len(word) > 1:
        return word + "s"

    if lower in IRREGULAR:
        return _match_case(word, IRREGULAR[lower])

    if lower.endswith("sis"):
        return word[:-2] + "es"
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if lower in F_TO_VES:
        if lower.endswith("fe"):
            return word[:-2] + "ves"
        return word[:-1] + "ves"
    if lower in O_TO_OES:
        return word + "es"
    return word + "s"


def pluralize(term: str) -> str | None:
    """Return the plural of ``term``, or None when no plural applies.

    Multi-word phrases pluralize their last word ("binary tree" ->
    "binary trees"). Terms without ASCII letters (e.g. CJK) have no plural.
    """
    term = term.strip()
    if not term or not _ASCII_LETTER.search(term):
        return None

    m = _LAST_WORD.match(term)
    if not m:
        return None
    prefix, last = m.groups()

    plural = _pluralize_word(last)
    if plural is None or plural.lower() == last.lower():
        return None
    return prefix + plural


def calculate_plurals(words: Iterable[str]) -> list[str]:
    """Plural forms of ``words`` in order, without duplicates or inputs."""
    words = list(words)
    seen = {w.strip().lower() for w in words}
    out: list[str] = []
    for w in words:
        plural = pluralize(w)
        if plural is None or plural.lower() in seen:
            continue
        seen.add(plural.lower())
        out.append(plural)
    return out
