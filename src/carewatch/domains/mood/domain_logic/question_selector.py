"""Deterministic daily question selection.

The same date string always yields the same questions in the same order, so
a user sees one stable set all day regardless of restarts. The arithmetic
mirrors 32-bit signed integer wrap-around exactly: the hash and the LCG must
stay bit-compatible with question sets already handed out.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")

DAILY_QUESTION_COUNT = 5

_LCG_MULTIPLIER = 1664525
_LCG_INCREMENT = 1013904223


class NoQuestionsAvailable(Exception):
    """The question bank has no active questions."""


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def hash_date_seed(date_str: str) -> int:
    """Fold ``date_str`` into a non-negative seed (``h = h*31 + code``, int32)."""
    h = 0
    for char in date_str:
        h = _to_int32(h * 31 + ord(char))
    return abs(h)


def seeded_shuffle(items: Sequence[T], seed: int) -> list[T]:
    """Fisher–Yates shuffle driven by a 32-bit linear congruential generator."""
    shuffled = list(items)
    current = seed
    for i in range(len(shuffled) - 1, 0, -1):
        current = _to_int32(current * _LCG_MULTIPLIER + _LCG_INCREMENT)
        j = abs(current) % (i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def select_daily_questions(
    bank: Sequence[T],
    date_str: str,
    count: int = DAILY_QUESTION_COUNT,
) -> list[T]:
    """Pick ``min(count, len(bank))`` questions for the day named by ``date_str``.

    Raises:
        NoQuestionsAvailable: If ``bank`` is empty.
    """
    if not bank:
        raise NoQuestionsAvailable("No questions available")
    return seeded_shuffle(bank, hash_date_seed(date_str))[:count]
