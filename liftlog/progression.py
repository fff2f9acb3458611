"""
Progression: Per-lift grouping and export-wide summary statistics.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .entry_builder import LiftEntry
from .rep_max import estimate_1rm

# Shown first, in this order, when present in the export
PRIORITY_LIFTS = [
    "Deadlift",
    "Bench Press",
    "Back Squat",
    "Push Press",
    "Shoulder Press",
]

# Target rep counts always offered alongside the ones actually performed
STANDARD_REP_TARGETS = (1, 2, 3, 5)


def parse_entry_date(text: str) -> Optional[date]:
    """Parse an export date ("6/1/2024"). Returns None if unparsable."""
    try:
        return datetime.strptime(text.strip(), "%m/%d/%Y").date()
    except (ValueError, AttributeError):
        return None


def _chronological_key(entry: LiftEntry) -> Tuple[int, date]:
    parsed = parse_entry_date(entry.date)
    if parsed is None:
        return (0, date.min)
    return (1, parsed)


def sort_chronologically(entries: Iterable[LiftEntry]) -> List[LiftEntry]:
    """Stable sort by date; unparsable dates go first."""
    return sorted(entries, key=_chronological_key)


@dataclass
class LiftGroups:
    """Entries split by lift, ready for consolidation."""
    lift_names: List[str] = field(default_factory=list)
    entries_by_lift: Dict[str, List[LiftEntry]] = field(default_factory=dict)
    rep_options: Dict[str, List[int]] = field(default_factory=dict)


def order_lift_names(
    names: Iterable[str],
    priority_lifts: Sequence[str] = PRIORITY_LIFTS
) -> List[str]:
    names = set(names)
    ordered = [lift for lift in priority_lifts if lift in names]
    ordered.extend(sorted(n for n in names if n not in priority_lifts))
    return ordered


def group_by_lift(
    entries: Iterable[LiftEntry],
    priority_lifts: Sequence[str] = PRIORITY_LIFTS
) -> LiftGroups:
    """
    Group entries by lift.

    Args:
        entries: Lift entries in any order.
        priority_lifts: Lift names listed before the alphabetical rest.

    Returns:
        LiftGroups with each lift's entries sorted chronologically and the
        distinct rep counts performed for it.
    """
    by_lift: Dict[str, List[LiftEntry]] = {}
    for entry in entries:
        by_lift.setdefault(entry.lift, []).append(entry)

    groups = LiftGroups(lift_names=order_lift_names(by_lift, priority_lifts))
    for lift in groups.lift_names:
        groups.entries_by_lift[lift] = sort_chronologically(by_lift[lift])
        groups.rep_options[lift] = sorted({e.reps for e in by_lift[lift]})
    return groups


def target_rep_choices(rep_options: Iterable[int]) -> List[int]:
    """Target rep counts to offer for a lift."""
    return sorted(set(STANDARD_REP_TARGETS) | set(rep_options))


@dataclass
class LiftStats:
    lift: str
    best_1rm: Union[int, float]
    pr_count: int
    sessions: int


@dataclass
class ExportSummary:
    """Headline numbers for a whole export."""
    total_sessions: int = 0
    total_prs: int = 0
    unique_lifts: int = 0
    first_date: Optional[str] = None
    last_date: Optional[str] = None
    best_lifts: List[LiftStats] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_sessions": self.total_sessions,
            "total_prs": self.total_prs,
            "unique_lifts": self.unique_lifts,
            "first_date": self.first_date,
            "last_date": self.last_date,
            "best_lifts": [
                {
                    "lift": s.lift,
                    "best_1rm": s.best_1rm,
                    "pr_count": s.pr_count,
                    "sessions": s.sessions,
                }
                for s in self.best_lifts
            ],
        }


def lift_stats(lift: str, entries: Sequence[LiftEntry]) -> LiftStats:
    return LiftStats(
        lift=lift,
        best_1rm=max(estimate_1rm(e.max_load, e.reps) for e in entries),
        pr_count=sum(1 for e in entries if e.is_pr),
        sessions=len(entries),
    )


def summarize(entries: Sequence[LiftEntry]) -> ExportSummary:
    """
    Compute export-wide statistics.

    Args:
        entries: All lift entries of an export.

    Returns:
        ExportSummary with lifts ranked by best estimated 1RM, highest first.
    """
    if not entries:
        return ExportSummary()

    groups = group_by_lift(entries)
    dated = sorted(
        (e for e in entries if parse_entry_date(e.date) is not None),
        key=_chronological_key,
    )
    best_lifts = [
        lift_stats(lift, groups.entries_by_lift[lift]) for lift in groups.lift_names
    ]
    best_lifts.sort(key=lambda s: s.best_1rm, reverse=True)

    return ExportSummary(
        total_sessions=len(entries),
        total_prs=sum(1 for e in entries if e.is_pr),
        unique_lifts=len(groups.lift_names),
        first_date=dated[0].date if dated else None,
        last_date=dated[-1].date if dated else None,
        best_lifts=best_lifts,
    )
