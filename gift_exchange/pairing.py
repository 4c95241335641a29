"""Derangement construction for gift assignments.

Every participant gives exactly once and receives exactly once, and nobody
is assigned to themselves.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence

from .errors import ASSIGN_FAILED, ExchangeError

logger = logging.getLogger(__name__)

MAX_SHUFFLE_ATTEMPTS = 300


def _has_fixed_point(ids: Sequence[str], candidate: Sequence[str]) -> bool:
    return any(a == b for a, b in zip(ids, candidate))


def derange(
    ids: Sequence[str],
    rng: Optional[random.Random] = None,
    max_attempts: int = MAX_SHUFFLE_ATTEMPTS,
) -> List[str]:
    """Return a permutation of ``ids`` where ``result[i] != ids[i]`` for all i.

    Uniform shuffles are retried up to ``max_attempts`` times. After that the
    original order with its last two entries swapped is tried once, which is
    only a derangement for two ids. Raises ``ExchangeError(ASSIGN_FAILED)``
    when no derangement was found.
    """
    ids = list(ids)
    if len(ids) < 2:
        raise ExchangeError(ASSIGN_FAILED, "need at least two ids to assign")

    rng = rng or random
    for _ in range(max_attempts):
        candidate = ids[:]
        rng.shuffle(candidate)
        if not _has_fixed_point(ids, candidate):
            return candidate

    logger.warning(
        "No derangement after %d shuffles of %d ids, trying fallback",
        max_attempts,
        len(ids),
    )
    fallback = ids[:]
    fallback[-1], fallback[-2] = fallback[-2], fallback[-1]
    if _has_fixed_point(ids, fallback):
        raise ExchangeError(ASSIGN_FAILED, "fallback arrangement has a fixed point")
    return fallback


def verify_derangement(ids: Sequence[str], to_ids: Sequence[str]) -> List[str]:
    """List every way ``to_ids`` fails to be a derangement of ``ids``."""
    issues = []

    if len(to_ids) != len(ids):
        issues.append(f"Expected {len(ids)} recipients, got {len(to_ids)}")

    id_set = set(ids)
    recipient_set = set(to_ids)

    missing = id_set - recipient_set
    if missing:
        issues.append(f"Missing recipients: {sorted(missing)}")

    extra = recipient_set - id_set
    if extra:
        issues.append(f"Unknown recipients: {sorted(extra)}")

    if len(to_ids) != len(recipient_set):
        issues.append("Duplicate recipients detected")

    self_assigned = [giver for giver, recipient in zip(ids, to_ids) if giver == recipient]
    if self_assigned:
        issues.append(f"Self assignments: {sorted(self_assigned)}")

    return issues
