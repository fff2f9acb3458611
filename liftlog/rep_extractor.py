"""
RepExtractor: Infers the rep count performed at a workout's max load.

The export does not store reps next to the best result, so they are recovered
from the workout title and description. Strategies are tried in priority order
and each one either matches (returns an int) or passes (returns None).
"""

import logging
import re
from typing import Callable, List, Optional, Sequence

from .set_details import SetObservation

logger = logging.getLogger(__name__)

# Strategy signature: (title, description, observations, max_load) -> reps or None
Strategy = Callable[[str, str, Sequence[SetObservation], float], Optional[int]]

SETS_X_REPS_PATTERN = re.compile(r"\b(\d+)\s*[xX]\s*(\d+)\b")
REP_SEQUENCE_PATTERN = re.compile(r"\b(\d{1,2}(?:-\d{1,2})+)(?!-?\d)")
HEAVY_SINGLE_PATTERN = re.compile(r"heavy\s+single", re.IGNORECASE)
HEAVY_REPS_PATTERN = re.compile(r"heavy\s+(\d+)\s*rep", re.IGNORECASE)
INDEXED_SET_PATTERN = re.compile(r"#\d+:\s*(\d+)\s*reps?", re.IGNORECASE)
BARE_REPS_PATTERN = re.compile(r"\b(\d{1,2})\s*reps?\b", re.IGNORECASE)


def first_index_of_load(observations: Sequence[SetObservation], max_load: float) -> int:
    """Position of the first set lifted at `max_load`, or -1."""
    for i, obs in enumerate(observations):
        if obs.load == max_load:
            return i
    return -1


def resolve_sequence_reps(
    sequence: Sequence[int],
    observations: Sequence[SetObservation],
    max_load: float
) -> int:
    """
    Pick the term of a rep scheme (e.g. 6-5-4-3-2-1) that belongs to the max set.

    Args:
        sequence: Rep counts in the order they were prescribed.
        observations: Recorded sets, in export order.
        max_load: Best result of the workout.

    Returns:
        The rep count of the set that produced `max_load`. When every set used
        the same load the lowest rep count wins; when the max set lies past the
        end of the scheme the last term is used.
    """
    if observations and all(obs.load == observations[0].load for obs in observations):
        return min(sequence)

    idx = first_index_of_load(observations, max_load)
    if 0 <= idx < len(sequence):
        return sequence[idx]
    return sequence[-1]


class RepExtractor:
    """
    Prioritized chain of rep-count heuristics.

    Order:
    1. NxM in title
    2. Rep sequence in title ("Deadlift 6-5-4-3-2-1")
    3. "heavy single" / "heavy N rep" in title, then description
    4. "#k: M reps" tokens in description
    5. NxM in description
    6. Rep sequence in description
    7. Bare "N reps" in description
    8. Default of 1
    """

    DEFAULT_REPS = 1

    def __init__(self, max_sequence_rep: int = 30):
        """
        Initialize RepExtractor.

        Args:
            max_sequence_rep: Largest value accepted as a term of a rep
                sequence. Larger values usually mean a date or a load.
        """
        self.max_sequence_rep = max_sequence_rep
        self.strategies: List[Strategy] = [
            self._title_sets_x_reps,
            self._title_sequence,
            self._heavy_phrase,
            self._indexed_sets,
            self._description_sets_x_reps,
            self._description_sequence,
            self._bare_reps,
        ]

    def extract(
        self,
        title: str,
        description: str,
        observations: Sequence[SetObservation],
        max_load: float
    ) -> int:
        """
        Infer the rep count performed at `max_load`.

        Args:
            title: Workout title.
            description: Free-text workout description.
            observations: Decoded set details.
            max_load: Best result of the workout.

        Returns:
            A positive rep count. Never raises.
        """
        title = title or ""
        description = description or ""

        for strategy in self.strategies:
            reps = strategy(title, description, observations, max_load)
            # Zero reps cannot be modeled, so keep looking
            if reps is not None and reps >= 1:
                return reps

        logger.debug(f"No rep signal in {title!r}, defaulting to {self.DEFAULT_REPS}")
        return self.DEFAULT_REPS

    # Text matchers

    def sets_x_reps(self, text: str) -> Optional[int]:
        """M from an "NxM" token."""
        m = SETS_X_REPS_PATTERN.search(text)
        return int(m.group(2)) if m else None

    def rep_sequence(self, text: str) -> Optional[List[int]]:
        """Terms of the first hyphenated run, if every term looks like a rep count."""
        m = REP_SEQUENCE_PATTERN.search(text)
        if not m:
            return None
        parts = [int(p) for p in m.group(1).split("-")]
        if any(n < 1 or n > self.max_sequence_rep for n in parts):
            return None
        return parts

    def heavy_reps(self, text: str) -> Optional[int]:
        if HEAVY_SINGLE_PATTERN.search(text):
            return 1
        m = HEAVY_REPS_PATTERN.search(text)
        return int(m.group(1)) if m else None

    def indexed_reps(
        self,
        text: str,
        observations: Sequence[SetObservation],
        max_load: float
    ) -> Optional[int]:
        """
        Rep count from "#1: 8 reps #2: 6 reps" notation.

        Tokens are assumed to follow the order of the recorded sets. Falls back
        to the first token when the max set has no matching token.
        """
        rep_counts = [int(r) for r in INDEXED_SET_PATTERN.findall(text)]
        if not rep_counts:
            return None

        idx = first_index_of_load(observations, max_load)
        if 0 <= idx < len(rep_counts):
            return rep_counts[idx]
        return rep_counts[0]

    # Strategies, in chain order

    def _title_sets_x_reps(self, title, description, observations, max_load):
        return self.sets_x_reps(title)

    def _title_sequence(self, title, description, observations, max_load):
        sequence = self.rep_sequence(title)
        if sequence is None:
            return None
        return resolve_sequence_reps(sequence, observations, max_load)

    def _heavy_phrase(self, title, description, observations, max_load):
        reps = self.heavy_reps(title)
        if reps is None:
            reps = self.heavy_reps(description)
        return reps

    def _indexed_sets(self, title, description, observations, max_load):
        return self.indexed_reps(description, observations, max_load)

    def _description_sets_x_reps(self, title, description, observations, max_load):
        return self.sets_x_reps(description)

    def _description_sequence(self, title, description, observations, max_load):
        sequence = self.rep_sequence(description)
        if sequence is None:
            return None
        return resolve_sequence_reps(sequence, observations, max_load)

    def _bare_reps(self, title, description, observations, max_load):
        m = BARE_REPS_PATTERN.search(description)
        return int(m.group(1)) if m else None


_default_extractor = RepExtractor()


def extract_reps(
    title: str,
    description: str,
    observations: Sequence[SetObservation],
    max_load: float
) -> int:
    """Run the default RepExtractor chain."""
    return _default_extractor.extract(title, description, observations, max_load)
