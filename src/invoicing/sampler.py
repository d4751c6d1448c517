"""
Random selection of invoice dates without replacement.
"""

import logging
import random
from datetime import date
from typing import List, Optional, Sequence, Tuple

from .errors import NoEligibleDatesError

logger = logging.getLogger(__name__)

# Shared unseeded source; callers that need reproducibility pass their own
_default_rng = random.Random()


def default_rng() -> random.Random:
    return _default_rng


def shuffle_in_place(items: list, rng: random.Random) -> None:
    """Uniform Fisher-Yates shuffle driven by ``rng.random()``."""
    for i in range(len(items) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        items[i], items[j] = items[j], items[i]


def sample_dates(eligible: Sequence[date], requested_count: int,
                 rng: Optional[random.Random] = None) -> Tuple[List[date], bool]:
    """Pick up to ``requested_count`` distinct dates from ``eligible``.

    Returns:
        Tuple of (chosen_dates, shortfall) where shortfall is True when fewer
        eligible dates exist than were requested.

    Raises:
        NoEligibleDatesError: if ``eligible`` is empty.
    """
    if not eligible:
        raise NoEligibleDatesError()

    rng = rng or _default_rng
    effective_count = max(0, min(requested_count, len(eligible)))
    shortfall = requested_count > len(eligible)

    shuffled = list(eligible)
    shuffle_in_place(shuffled, rng)

    if shortfall:
        logger.info("Requested %d dates but only %d are eligible", requested_count, len(eligible))
    return shuffled[:effective_count], shortfall
