"""Discrete time domain and closed time intervals."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Union


Time = Union[int, float]

# Finite time values are always ints; INFINITY only ever appears as a sentinel.
INFINITY: float = math.inf
EPSILON: int = 1


def is_infinity(t: Time) -> bool:
    return t == INFINITY


@dataclass(frozen=True, slots=True)
class Interval:
    """Closed interval ``[lo, hi]`` over the discrete time domain."""

    lo: Time
    hi: Time

    def __post_init__(self) -> None:
        if self.lo > self.hi:
            raise ValueError(f"invalid interval [{self.lo}, {self.hi}]")

    def lower(self) -> Time:
        return self.lo

    def upper(self) -> Time:
        return self.hi

    def contains(self, t: Time) -> bool:
        return self.lo <= t <= self.hi

    def overlaps(self, other: Interval) -> bool:
        return self.lo <= other.hi and other.lo <= self.hi

    def touches(self, other: Interval) -> bool:
        """Overlapping or adjacent, i.e. the hull adds no new time point."""
        return self.lo <= other.hi + EPSILON and other.lo <= self.hi + EPSILON

    def merge(self, other: Interval) -> Interval:
        return Interval(min(self.lo, other.lo), max(self.hi, other.hi))

    def intersect(self, other: Interval) -> Interval | None:
        lo = max(self.lo, other.lo)
        hi = min(self.hi, other.hi)
        if lo > hi:
            return None
        return Interval(lo, hi)

    def __or__(self, other: Interval) -> Interval:
        return self.merge(other)

    def __add__(self, other: Interval) -> Interval:
        return Interval(self.lo + other.lo, self.hi + other.hi)

    def __str__(self) -> str:
        return f"[{self.lo}, {self.hi}]"


def merge(a: Interval, b: Interval) -> Interval:
    return a.merge(b)


def overlaps(a: Interval, b: Interval) -> bool:
    return a.overlaps(b)
