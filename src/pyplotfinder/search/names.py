"""Tolerant name matching for human-entered names.

Names are compared after :func:`normalize_name`, which folds case and
diacritics and drops everything that is not a letter or whitespace, so
``"José  Dela-Cruz"`` and ``"jose delacruz"`` only differ by a space.

A record's full name is reduced to its first token (given name) and
its last token (family name); middle names are ignored.
"""

from __future__ import annotations

import re
import unicodedata

from pyplotfinder._constants import CLOSE_AVERAGE_THRESHOLD, CLOSE_SINGLE_THRESHOLD
from pyplotfinder.models.record import MatchClassification, NameQuery

_NON_LETTER_RE = re.compile(r"[^a-z\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_name(value: str | None) -> str:
    """Lower-case, strip diacritics, keep ``[a-z\\s]``, collapse whitespace."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFKD", str(value).lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    letters = _NON_LETTER_RE.sub("", stripped)
    return _WHITESPACE_RE.sub(" ", letters).strip()


def levenshtein(a: str, b: str) -> int:
    """Single-character insert/delete/substitute edit distance."""
    a = a or ""
    b = b or ""
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            )
        previous = current
    return previous[-1]


def similarity(a: str | None, b: str | None) -> float:
    """``1 - levenshtein / max(len)`` over normalized names.

    Two empty names are identical (1.0); an empty name against a
    non-empty one scores 0.0.
    """
    left = normalize_name(a)
    right = normalize_name(b)
    if not left and not right:
        return 1.0
    return 1.0 - levenshtein(left, right) / max(len(left), len(right))


def split_full_name(full_name: str | None) -> tuple[str, str]:
    """Return ``(given, family)`` from a record's full name.

    Family is the last token; a single-token name has no family name.
    """
    tokens = normalize_name(full_name).split(" ")
    given = tokens[0]
    family = tokens[-1] if len(tokens) > 1 else ""
    return given, family


def classify(query: NameQuery, full_name: str | None) -> MatchClassification:
    """Classify a record's full name against a (possibly partial) query."""
    # Which halves were supplied is decided on the raw input, so "123"
    # still counts as a (non-matching) first name.
    has_first = bool(query.first_name)
    has_last = bool(query.last_name)
    first = normalize_name(query.first_name)
    last = normalize_name(query.last_name)
    given, family = split_full_name(full_name)

    if has_first and has_last:
        if first == given and last == family:
            return MatchClassification.EXACT
        sf = similarity(first, given)
        sl = similarity(last, family)
        if (sf + sl) / 2 >= CLOSE_AVERAGE_THRESHOLD or sf >= CLOSE_SINGLE_THRESHOLD or sl >= CLOSE_SINGLE_THRESHOLD:
            return MatchClassification.CLOSE
        return MatchClassification.NONE

    if has_first:
        return MatchClassification.CLOSE if similarity(first, given) >= CLOSE_SINGLE_THRESHOLD else MatchClassification.NONE
    if has_last:
        return MatchClassification.CLOSE if similarity(last, family) >= CLOSE_SINGLE_THRESHOLD else MatchClassification.NONE

    # Name does not constrain the search; the date prefilter already matched.
    return MatchClassification.EXACT
