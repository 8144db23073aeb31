from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from lpmedoids.errors import InternalInvariantViolation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Match:
    """A pair of representatives, or a single one when ``second`` is None."""

    first: int
    second: Optional[int]
    distance: float = 0.0

    @property
    def is_singleton(self) -> bool:
        return self.second is None


def match_representatives(representatives: Sequence[int], dC: np.ndarray) -> List[Match]:
    """Greedily pair representatives by increasing client-to-client distance.

    Candidate pairs ``(j, j')`` with ``j < j'`` are scanned in order of
    ``(dC[j, j'], j, j')``; a pair is taken when neither side is matched yet.
    With an odd number of representatives exactly one is left over and closes
    the list as a singleton match.
    """
    reps = sorted(int(j) for j in representatives)
    if len(set(reps)) != len(reps):
        raise InternalInvariantViolation("Representatives must be distinct.")
    n_clients = dC.shape[0]
    unknown = [j for j in reps if not 0 <= j < n_clients]
    if unknown:
        raise InternalInvariantViolation(f"Representatives {unknown} are not valid client indices.")

    candidates = sorted(
        (float(dC[j, jp]), j, jp) for idx, j in enumerate(reps) for jp in reps[idx + 1 :]
    )

    matched = set()
    matches: List[Match] = []
    for dist, j, jp in candidates:
        if j in matched or jp in matched:
            continue
        matched.update((j, jp))
        matches.append(Match(first=j, second=jp, distance=dist))

    leftover = [j for j in reps if j not in matched]
    if len(leftover) > 1:
        raise InternalInvariantViolation(f"Greedy matching left {leftover} unmatched.")
    matches.extend(Match(first=j, second=None) for j in leftover)

    logger.debug(
        f"Matched {len(reps)} representatives into {len(matches)} groups "
        f"({len(leftover)} singleton)"
    )
    return matches
