from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Sequence

import numpy as np

from lpmedoids.errors import InternalInvariantViolation

from .aggregates import ball, volume
from .fractional import FractionalSolution

logger = logging.getLogger(__name__)

EXPECTED_MIN_VOLUME = 0.5
EXPECTED_MAX_VOLUME = 1.0


@dataclass(frozen=True)
class Bundling:
    """Disjoint facility bundles, one per representative client.

    Attributes
    ----------
    bundles:
        Representative client -> sorted facility indices of its bundle U[j].
    radii:
        Representative client -> R[j], half the distance to its nearest other
        representative (``inf`` when there is only one).
    bundled:
        Boolean mask over facilities; True for facilities in some bundle.
    """

    bundles: Dict[int, np.ndarray]
    radii: Dict[int, float]
    bundled: np.ndarray

    def bundle(self, j: int) -> np.ndarray:
        if j not in self.bundles:
            raise InternalInvariantViolation(f"Client {j} is not a representative with a bundle.")
        return self.bundles[j]

    def volume(self, y: np.ndarray, j: int) -> float:
        return volume(y, self.bundle(j))


def representative_radii(representatives: Sequence[int], dC: np.ndarray) -> Dict[int, float]:
    """Half the distance from each representative to its nearest other representative."""
    reps = np.asarray(representatives, dtype=int)
    radii: Dict[int, float] = {}
    for j in reps:
        others = reps[reps != j]
        if others.size == 0:
            radii[int(j)] = math.inf
        else:
            radii[int(j)] = 0.5 * float(np.min(dC[j, others]))
    return radii


def bundle_facilities(
    solution: FractionalSolution,
    d: np.ndarray,
    dC: np.ndarray,
    representatives: Sequence[int],
    rng: np.random.Generator,
    radius_multiplier: float = 1.5,
    debug: bool = False,
) -> Bundling:
    """Partition facilities near the representatives into disjoint bundles.

    For each representative ``j``, ``F'[j]`` is the part of its candidate set
    strictly within ``radius_multiplier * R[j]``. A facility appearing in some
    ``F'[j]`` joins the bundle of the closest such representative (in ``d``),
    with ties broken uniformly at random. Other facilities stay unbundled.
    """
    radii = representative_radii(representatives, dC)

    # membership[r, i]: facility i belongs to F'[representatives[r]]
    membership = np.zeros((len(representatives), solution.n_facilities), dtype=bool)
    for r, j in enumerate(representatives):
        near = ball(d, solution.keep, j, radius_multiplier * radii[j])
        candidates = np.intersect1d(near, solution.candidate_facilities(j), assume_unique=True)
        membership[r, candidates] = True

    assigned: Dict[int, list[int]] = {int(j): [] for j in representatives}
    reps = np.asarray(representatives, dtype=int)
    for i in np.flatnonzero(membership.any(axis=0)):
        rows = np.flatnonzero(membership[:, i])
        dists = d[i, reps[rows]]
        closest = rows[dists == dists.min()]
        chosen = closest[0] if closest.size == 1 else closest[int(rng.integers(closest.size))]
        assigned[int(reps[chosen])].append(int(i))

    bundles = {j: np.array(members, dtype=int) for j, members in assigned.items()}
    bundled = membership.any(axis=0)

    logger.debug(
        f"Bundling placed {int(bundled.sum())} of {solution.n_facilities} facilities "
        f"into {len(bundles)} bundles"
    )

    result = Bundling(bundles=bundles, radii=radii, bundled=bundled)
    if debug:
        for j, members in bundles.items():
            if members.size == 0:
                continue
            vol = volume(solution.y, members)
            tol = solution.tolerance
            if not (EXPECTED_MIN_VOLUME - tol <= vol <= EXPECTED_MAX_VOLUME + tol):
                logger.warning(
                    f"Bundle of representative {j} has volume {vol:.4f}, "
                    f"outside [{EXPECTED_MIN_VOLUME}, {EXPECTED_MAX_VOLUME}]"
                )
    return result
