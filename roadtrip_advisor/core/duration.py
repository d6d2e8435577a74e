"""Extract a requested trip length (in days) from free text."""
from __future__ import annotations

import re
from typing import Any, Optional

_NUMBER_RE = re.compile(r"\d+")

# Checked in this order for each candidate number.
UNIT_MULTIPLIERS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"\b(?:mois|months?)\b"), 30),
    # "week-end" is not a week.
    (re.compile(r"\b(?:semaines?|weeks?)\b(?!-?ends?\b)"), 7),
    (re.compile(r"\b(?:jours?|journées?|days?)\b"), 1),
)


def extract_duration_days(query: Any) -> Optional[int]:
    """Return the duration in days mentioned in ``query`` or ``None``.

    Units are looked up anywhere in the text rather than next to the number,
    so the first positive number wins whenever any unit keyword is present:
    ``"3 hôtels pour 10 jours"`` yields 3.
    """

    if not isinstance(query, str):
        return None
    text = query.lower()

    for match in _NUMBER_RE.finditer(text):
        number = int(match.group())
        if number <= 0:
            continue
        for unit_re, multiplier in UNIT_MULTIPLIERS:
            if unit_re.search(text):
                return number * multiplier
    return None
