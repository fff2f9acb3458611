"""
SetDetails: Decoder for the per-set payload of an export row.
Turns the machine-encoded set_details column into ordered load observations.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetObservation:
    """A single recorded set. Only `load` is read by the pipeline."""
    load: float
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def success(self) -> Optional[bool]:
        """Outcome marker of the set, when the export recorded one."""
        value = self.raw.get("success")
        return value if isinstance(value, bool) else None


def _is_number(value: Any) -> bool:
    # JSON booleans decode to bool, which is an int subclass
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def decode_set_details(text: Optional[str]) -> List[SetObservation]:
    """
    Decode a set_details payload into set observations.

    The export escapes embedded quotes as a doubled quote (`""`), so those are
    collapsed before the JSON is parsed. Anything that does not decode into a
    list of objects yields an empty list; elements without a numeric `load`
    are dropped.

    Args:
        text: Raw set_details column value.

    Returns:
        Observations in the order the export recorded them.
    """
    if not text or not isinstance(text, str):
        return []

    raw_json = text.strip().replace('""', '"')
    try:
        parsed = json.loads(raw_json)
    except ValueError as e:
        logger.debug(f"Malformed set details ignored: {e}")
        return []

    if not isinstance(parsed, list):
        logger.debug(f"Set details are not a list: {type(parsed).__name__}")
        return []

    observations = []
    for item in parsed:
        if isinstance(item, dict) and _is_number(item.get("load")):
            observations.append(SetObservation(load=item["load"], raw=item))
    return observations
