# /formify-backend/app/services/group_helpers/roll_numbers.py

"""
Roll-number normalisation.

Matching, uniqueness and lookups all compare roll numbers, so every read and
write goes through `normalize_roll`. A roll number that skips it will silently
fail to match its own group.
"""

from typing import Iterable, List, Optional


def normalize_roll(value: Optional[object]) -> str:
    """Trims and upper-cases a roll number. `None` becomes an empty string."""
    return str(value if value is not None else "").strip().upper()


def unique_rolls(values: Iterable[Optional[object]]) -> List[str]:
    """Normalises, drops blanks and de-duplicates while keeping first-seen order."""
    seen = []
    for value in values:
        roll = normalize_roll(value)
        if roll and roll not in seen:
            seen.append(roll)
    return seen
