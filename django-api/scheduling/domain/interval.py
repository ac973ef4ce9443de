"""Closed day ranges and gap detection over a timeline."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Self

from scheduling.domain.calendar import add_days, to_day


@dataclass(frozen=True)
class Interval:
    """Closed range ``[start, end]`` of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError("Interval start must not be after its end")

    @classmethod
    def of(cls, start: date | datetime, end: date | datetime) -> Self:
        return cls(start=to_day(start), end=to_day(end))

    def overlaps(self, other: "Interval") -> bool:
        return self.start <= other.end and other.start <= self.end

    def contains(self, value: date | datetime) -> bool:
        """Boundary days count as inside."""
        day = to_day(value)
        return self.start <= day <= self.end

    def with_end(self, end: date | datetime) -> "Interval":
        return Interval(start=self.start, end=to_day(end))

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


def overlap(a: Interval, b: Interval) -> bool:
    return a.overlaps(b)


def find_gaps(intervals: Iterable[Interval]) -> list[Interval]:
    """Return uncovered day ranges between the given intervals.

    Nothing is reported before the first interval or after the last one.
    """
    ordered = sorted(intervals, key=lambda interval: interval.start)
    gaps: list[Interval] = []
    if not ordered:
        return gaps

    covered_until = ordered[0].end
    for interval in ordered[1:]:
        first_uncovered = add_days(covered_until, 1)
        if interval.start > first_uncovered:
            gaps.append(Interval(start=first_uncovered, end=add_days(interval.start, -1)))
        covered_until = max(covered_until, interval.end)
    return gaps


@dataclass(frozen=True)
class GapReport:
    """Outcome of a gap check, whichever side computed it."""

    gaps: tuple[Interval, ...] = field(default_factory=tuple)

    @property
    def has_gap(self) -> bool:
        return bool(self.gaps)

    @classmethod
    def from_intervals(cls, intervals: Iterable[Interval]) -> Self:
        return cls(gaps=tuple(find_gaps(intervals)))
