"""Lift progression from SugarWOD workout exports."""

from .set_details import SetObservation, decode_set_details
from .rep_extractor import RepExtractor, extract_reps, resolve_sequence_reps
from .entry_builder import EntryBuilder, LiftEntry, NoEntriesError
from .rep_max import estimate_nrm, estimate_1rm
from .consolidator import NormalizedPoint, ConsolidatedDayPoint, consolidate_same_day
from .progression import LiftGroups, ExportSummary, group_by_lift, summarize, target_rep_choices

__all__ = [
    "SetObservation",
    "decode_set_details",
    "RepExtractor",
    "extract_reps",
    "resolve_sequence_reps",
    "EntryBuilder",
    "LiftEntry",
    "NoEntriesError",
    "estimate_nrm",
    "estimate_1rm",
    "NormalizedPoint",
    "ConsolidatedDayPoint",
    "consolidate_same_day",
    "LiftGroups",
    "ExportSummary",
    "group_by_lift",
    "summarize",
    "target_rep_choices",
]
