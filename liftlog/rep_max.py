"""
RepMax: Epley rep-max estimation.

    1RM = load * (1 + reps / 30)

Used to put lifts performed at different rep counts on a common scale.
"""

import math
from typing import Union

Number = Union[int, float]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def estimate_nrm(load: Number, actual_reps: int, target_reps: int) -> Number:
    """
    Estimate the load liftable for `target_reps` given `load` x `actual_reps`.

    Args:
        load: Weight lifted.
        actual_reps: Reps performed at that weight.
        target_reps: Rep count to estimate for.

    Returns:
        Estimated load, rounded to a whole number. `load` is returned unchanged
        when the rep counts match or either of them is not positive.
    """
    if actual_reps == target_reps:
        return load
    if actual_reps <= 0 or target_reps <= 0:
        return load

    est_1rm = load * (1 + actual_reps / 30)
    if target_reps == 1:
        return _round_half_up(est_1rm)
    return _round_half_up(est_1rm / (1 + target_reps / 30))


def estimate_1rm(load: Number, reps: int) -> Number:
    """Estimated one-rep max for `load` x `reps`."""
    return estimate_nrm(load, reps, 1)
