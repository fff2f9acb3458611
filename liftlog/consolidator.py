"""
Consolidator: One chart point per lift per day.
Normalizes every entry to a target rep count and keeps the best of each day,
while retaining the day's other entries for display.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Union

from .entry_builder import LiftEntry
from .rep_max import estimate_nrm


@dataclass(frozen=True)
class NormalizedPoint:
    """An entry's load expressed at the target rep count."""
    source_entry: LiftEntry
    normalized_load: Union[int, float]
    is_exact: bool

    def to_dict(self) -> Dict[str, Any]:
        data = self.source_entry.to_dict()
        data["normalized"] = self.normalized_load
        data["is_exact"] = self.is_exact
        return data


@dataclass
class ConsolidatedDayPoint:
    """
    The representative point of one (lift, date) pair.

    `all_points` holds every entry of the day in input order; it is meant for
    disclosure only, the chart value is always `representative`.
    """
    date: str
    representative: NormalizedPoint
    is_pr: bool
    all_points: List[NormalizedPoint] = field(default_factory=list)

    @property
    def normalized_load(self) -> Union[int, float]:
        return self.representative.normalized_load

    @property
    def is_exact(self) -> bool:
        return self.representative.is_exact

    @property
    def all_entries(self) -> List[LiftEntry]:
        return [p.source_entry for p in self.all_points]

    @property
    def merged_count(self) -> int:
        return len(self.all_points)

    def to_dict(self) -> Dict[str, Any]:
        entry = self.representative.source_entry
        return {
            "date": self.date,
            "lift": entry.lift,
            "title": entry.title,
            "reps": entry.reps,
            "max_load": entry.max_load,
            "normalized": self.normalized_load,
            "is_exact": self.is_exact,
            "is_pr": self.is_pr,
            "merged_count": self.merged_count,
            "all_entries": [p.to_dict() for p in self.all_points],
        }


def normalize_entry(entry: LiftEntry, target_reps: int) -> NormalizedPoint:
    return NormalizedPoint(
        source_entry=entry,
        normalized_load=estimate_nrm(entry.max_load, entry.reps, target_reps),
        is_exact=entry.reps == target_reps,
    )


def consolidate_same_day(
    entries: Sequence[LiftEntry],
    target_reps: int
) -> List[ConsolidatedDayPoint]:
    """
    Merge same-day entries of a single lift.

    Dates are grouped by exact string. The day's representative is the entry
    with the strictly highest normalized load, so ties keep the earliest entry.
    A day is a PR if any of its entries is.

    Args:
        entries: Entries of one lift, already in chronological order.
        target_reps: Rep count to normalize to.

    Returns:
        One ConsolidatedDayPoint per date, in order of first appearance.
    """
    date_order: List[str] = []
    by_date: Dict[str, List[NormalizedPoint]] = {}

    for entry in entries:
        if entry.date not in by_date:
            date_order.append(entry.date)
            by_date[entry.date] = []
        by_date[entry.date].append(normalize_entry(entry, target_reps))

    result = []
    for date in date_order:
        points = by_date[date]
        best = points[0]
        for point in points[1:]:
            if point.normalized_load > best.normalized_load:
                best = point
        result.append(ConsolidatedDayPoint(
            date=date,
            representative=best,
            is_pr=any(p.source_entry.is_pr for p in points),
            all_points=points,
        ))
    return result
