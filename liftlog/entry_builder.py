"""
EntryBuilder: SugarWOD export rows -> canonical lift entries.
Filters out non-lift rows and degrades malformed fields to defaults so a
single bad row never aborts an import.
"""

import io
import logging
import math
import re
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from .rep_extractor import RepExtractor
from .set_details import decode_set_details

logger = logging.getLogger(__name__)

NO_ENTRIES_MESSAGE = (
    "No barbell lift data found in this file. Make sure you selected the "
    "correct source and exported the right CSV."
)

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _keep_bad_line(fields: List[str]) -> List[str]:
    # pandas drops the fields past the header width
    logger.warning(f"Row has {len(fields)} fields, extra fields ignored")
    return fields


class NoEntriesError(ValueError):
    """The export produced no usable lift entries."""

    def __init__(self, message: str = NO_ENTRIES_MESSAGE):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class LiftEntry:
    """One load-scored barbell workout from the export."""
    date: str
    lift: str
    title: str
    reps: int
    max_load: float
    set_loads: Tuple[float, ...] = ()
    notes: str = ""
    is_pr: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["set_loads"] = list(self.set_loads)
        return data


def parse_load(text: str) -> float:
    """
    Parse a best-result value, reading a leading number like "185 lbs".

    Returns 0 for anything unparsable, non-finite or negative.
    """
    m = _LEADING_NUMBER.match(text or "")
    if not m:
        return 0.0
    value = float(m.group(0))
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


class EntryBuilder:
    """
    Builds LiftEntry records from SugarWOD CSV rows.

    Rules:
    1. Skip the "Class Times" schedule rows
    2. Skip rows without a barbell lift or not scored by load
    3. Everything else becomes an entry, with defaults for bad fields
    """

    # Export column names
    COLUMNS = {
        "title": "title",
        "description": "description",
        "lift": "barbell_lift",
        "score_type": "score_type",
        "date": "date",
        "best_result": "best_result_raw",
        "set_details": "set_details",
        "notes": "notes",
        "pr": "pr",
    }

    def __init__(
        self,
        rep_extractor: Optional[RepExtractor] = None,
        class_times_title: str = "Class Times",
        load_score_type: str = "Load",
        pr_token: str = "PR"
    ):
        """
        Initialize EntryBuilder.

        Args:
            rep_extractor: Rep heuristics to use. A default chain if not provided.
            class_times_title: Title of schedule rows that are not workouts.
            load_score_type: score_type value of load-scored lifts.
            pr_token: Value of the pr column that marks a personal record.
        """
        self.rep_extractor = rep_extractor or RepExtractor()
        self.class_times_title = class_times_title
        self.load_score_type = load_score_type
        self.pr_token = pr_token

    def _field(self, row: Mapping[str, Any], name: str) -> str:
        value = row.get(self.COLUMNS[name])
        if value is None:
            return ""
        if isinstance(value, float) and math.isnan(value):
            return ""
        return str(value).strip()

    def build_entry(self, row: Mapping[str, Any]) -> Optional[LiftEntry]:
        """
        Convert a single row.

        Args:
            row: Column name -> value mapping for one export row.

        Returns:
            LiftEntry, or None if the row is not a load-scored barbell lift.
        """
        title = self._field(row, "title")
        if title == self.class_times_title:
            return None

        lift = self._field(row, "lift")
        score_type = self._field(row, "score_type")
        if not lift or score_type != self.load_score_type:
            return None

        description = self._field(row, "description")
        best_result = self._field(row, "best_result")
        max_load = parse_load(best_result)
        if best_result and not _LEADING_NUMBER.match(best_result):
            logger.debug(f"Unparsable best result {best_result!r} for {lift}, using 0")

        observations = decode_set_details(self._field(row, "set_details"))
        reps = self.rep_extractor.extract(title, description, observations, max_load)

        return LiftEntry(
            date=self._field(row, "date"),
            lift=lift,
            title=title,
            reps=reps,
            max_load=max_load,
            set_loads=tuple(obs.load for obs in observations),
            notes=self._field(row, "notes"),
            is_pr=self._field(row, "pr") == self.pr_token,
        )

    def build_entries(self, rows: Iterable[Mapping[str, Any]]) -> List[LiftEntry]:
        """
        Convert export rows into lift entries, preserving row order.

        Args:
            rows: Decoded CSV rows.

        Returns:
            List of LiftEntry. May be empty.
        """
        entries = []
        skipped = 0
        for row in rows:
            entry = self.build_entry(row)
            if entry is None:
                skipped += 1
                continue
            entries.append(entry)

        logger.info(f"Built {len(entries)} lift entries ({skipped} rows skipped)")
        return entries

    def read_rows(self, csv_text: str) -> List[Dict[str, Any]]:
        """
        Tokenize CSV text into row mappings.

        Args:
            csv_text: Full contents of the export file.

        Returns:
            One dict per non-blank row, keyed by header name.

        Raises:
            NoEntriesError: If the text is empty or not readable as CSV.
        """
        try:
            df = pd.read_csv(
                io.StringIO(csv_text),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                # Trailing delimiters must not turn the first column into an index
                index_col=False,
                engine="python",
                on_bad_lines=_keep_bad_line,
            )
        except pd.errors.EmptyDataError:
            raise NoEntriesError()
        except pd.errors.ParserError as e:
            raise NoEntriesError(f"Failed to parse file: {e}")

        return df.to_dict("records")

    def parse_csv(self, csv_text: str) -> List[LiftEntry]:
        """
        Parse a full SugarWOD CSV export.

        Args:
            csv_text: Full contents of the export file.

        Returns:
            Non-empty list of LiftEntry.

        Raises:
            NoEntriesError: If the file yields no lift entries.
        """
        entries = self.build_entries(self.read_rows(csv_text))
        if not entries:
            logger.warning("Export contained no load-scored barbell lifts")
            raise NoEntriesError()
        return entries
