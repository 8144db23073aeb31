from __future__ import annotations

import logging
from typing import Sequence, Tuple

import numpy as np

from lpmedoids.errors import SamplingNonconvergent

from .bundling import Bundling
from .fractional import FractionalSolution
from .matching import Match

logger = logging.getLogger(__name__)

DEFAULT_MAX_TRIALS = 10_000


def _open_one(open_mask: np.ndarray, bundle: np.ndarray, rng: np.random.Generator) -> None:
    """Open a uniformly chosen facility of ``bundle``; an empty bundle opens nothing."""
    if bundle.size == 0:
        return
    open_mask[bundle[int(rng.integers(bundle.size))]] = True


def sample_trial(
    solution: FractionalSolution,
    bundling: Bundling,
    matches: Sequence[Match],
    rng: np.random.Generator,
) -> np.ndarray:
    """Draw one candidate open-set (without checking its size)."""
    y = solution.y
    open_mask = np.zeros(solution.n_facilities, dtype=bool)

    for match in matches:
        u_j = bundling.bundle(match.first)
        if match.second is None:
            if rng.random() < bundling.volume(y, match.first):
                _open_one(open_mask, u_j, rng)
            continue

        u_jp = bundling.bundle(match.second)
        p_only_j = 1.0 - bundling.volume(y, match.second)
        p_only_jp = 1.0 - bundling.volume(y, match.first)
        u = rng.random()
        if u < p_only_j:
            _open_one(open_mask, u_j, rng)
        elif u < p_only_j + p_only_jp:
            _open_one(open_mask, u_jp, rng)
        else:
            _open_one(open_mask, u_j, rng)
            _open_one(open_mask, u_jp, rng)

    free = np.flatnonzero(~bundling.bundled)
    if free.size:
        draws = rng.random(free.size)
        open_mask[free[draws < y[free]]] = True
    return open_mask


def sample_open_facilities(
    solution: FractionalSolution,
    bundling: Bundling,
    matches: Sequence[Match],
    k: int,
    rng: np.random.Generator,
    max_trials: int = DEFAULT_MAX_TRIALS,
) -> Tuple[np.ndarray, int]:
    """Rejection-sample open-sets until exactly ``k`` facilities are open.

    Returns
    -------
    open_mask:
        Boolean mask over facilities with exactly ``k`` True entries.
    trials:
        Number of trials drawn, including the accepted one.
    """
    for trial in range(1, max_trials + 1):
        open_mask = sample_trial(solution, bundling, matches, rng)
        n_open = int(open_mask.sum())
        if n_open == k:
            logger.debug(f"Sampling accepted trial {trial} with {k} open facilities")
            return open_mask, trial
    raise SamplingNonconvergent(trials=max_trials, k=k)
