from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List

import numpy as np
import pulp

from lpmedoids.errors import InvalidArgument

from .bundling import bundle_facilities
from .filtering import filter_clients
from .fractional import FractionalSolution, solve_fractional
from .matching import match_representatives
from .sampling import DEFAULT_MAX_TRIALS, sample_open_facilities
from ._shared import (
    assign_clients_to_medoids,
    clustering_cost,
    normalize_client_distances,
    normalize_dissimilarity,
    validate_k,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LPRoundingConfig:
    """Configuration for the LP-rounding k-medoids approximation.

    Attributes
    ----------
    radius_multiplier:
        Multiplier applied to R[j] when collecting the facilities around a
        representative during bundling.
    max_trials:
        Upper bound on rejection-sampling trials before giving up.
    random_state:
        Seed for the generator driving bundling tie-breaks and sampling.
    tolerance:
        Fractional values at or below this threshold count as zero.
    debug:
        Check the expected bundle volume range and log violations.
    """

    radius_multiplier: float = 1.5
    max_trials: int = DEFAULT_MAX_TRIALS
    random_state: int | None = None
    tolerance: float = 1e-9
    debug: bool = False

    def __post_init__(self) -> None:
        if not self.radius_multiplier > 0:
            raise InvalidArgument("radius_multiplier must be positive.")
        if self.max_trials < 1:
            raise InvalidArgument("max_trials must be at least 1.")
        if not (0 <= self.tolerance < 1):
            raise InvalidArgument("tolerance must be in [0, 1).")


@dataclass(frozen=True)
class LPRoundingResult:
    """Outcome of one LP-rounding run.

    ``labels[j]`` is the medoid serving client ``j``; ``cost`` is the integral
    clustering cost and ``lp_objective`` the fractional lower bound.
    """

    medoids: List[int]
    labels: np.ndarray
    cost: float
    lp_objective: float
    n_representatives: int
    trials: int

    @property
    def ratio(self) -> float:
        if self.lp_objective <= 0:
            return 1.0 if self.cost <= 0 else float("inf")
        return self.cost / self.lp_objective


def _round(
    solution: FractionalSolution,
    d: np.ndarray,
    dC: np.ndarray,
    k: int,
    config: LPRoundingConfig,
    rng: np.random.Generator,
) -> tuple[list[int], int, int]:
    representatives = filter_clients(solution, d, dC)
    bundling = bundle_facilities(
        solution,
        d,
        dC,
        representatives,
        rng,
        radius_multiplier=config.radius_multiplier,
        debug=config.debug,
    )
    matches = match_representatives(representatives, dC)
    open_mask, trials = sample_open_facilities(
        solution, bundling, matches, k, rng, max_trials=config.max_trials
    )
    medoids = np.flatnonzero(open_mask).tolist()
    return medoids, len(representatives), trials


def lp_rounding_k_medoids_detailed(
    d: np.ndarray,
    k: int,
    dC: np.ndarray | None = None,
    config: LPRoundingConfig | None = None,
    solver: pulp.LpSolver | None = None,
) -> LPRoundingResult:
    """Run the LP-rounding approximation and report costs alongside the medoids.

    Parameters
    ----------
    d:
        Dissimilarities of shape (n_facilities, n_clients).
    k:
        Number of facilities to open.
    dC:
        Client-to-client distances of shape (n_clients, n_clients). Defaults to
        ``d`` when facilities and clients coincide. Filtering and bundling
        bounds assume it is symmetric and obeys the triangle inequality.
    config:
        Optional configuration.
    solver:
        Optional PuLP solver used for the relaxation.
    """
    if config is None:
        config = LPRoundingConfig()

    d = normalize_dissimilarity(d)
    validate_k(k, d.shape[0])
    dC = normalize_client_distances(dC, d)
    n_facilities = d.shape[0]

    if k == n_facilities:
        logger.info(f"k equals the number of facilities ({k}); opening all of them")
        medoids = list(range(n_facilities))
        cost = clustering_cost(d, medoids)
        return LPRoundingResult(
            medoids=medoids,
            labels=assign_clients_to_medoids(d, medoids),
            cost=cost,
            lp_objective=cost,
            n_representatives=0,
            trials=0,
        )

    solution = solve_fractional(d, k, solver=solver, tolerance=config.tolerance)
    rng = np.random.default_rng(config.random_state)
    medoids, n_representatives, trials = _round(solution, d, dC, k, config, rng)

    cost = clustering_cost(d, medoids)
    logger.info(
        f"Opened {k} facilities after {trials} trial(s): cost={cost:.6f}, "
        f"LP bound={solution.objective:.6f}"
    )
    return LPRoundingResult(
        medoids=medoids,
        labels=assign_clients_to_medoids(d, medoids),
        cost=cost,
        lp_objective=solution.objective,
        n_representatives=n_representatives,
        trials=trials,
    )


def lp_rounding_k_medoids(
    d: np.ndarray,
    k: int,
    dC: np.ndarray | None = None,
    config: LPRoundingConfig | None = None,
) -> List[int]:
    """Return the sorted indices of the ``k`` facilities opened by LP rounding."""
    return lp_rounding_k_medoids_detailed(d, k, dC=dC, config=config).medoids


def solve(
    d: np.ndarray,
    k: int,
    dC: np.ndarray | None = None,
    radius_multiplier: float | None = None,
    config: LPRoundingConfig | None = None,
) -> List[int]:
    """Select ``k`` medoids; ``radius_multiplier`` overrides the config's value when given."""
    if config is None:
        config = LPRoundingConfig()
    if radius_multiplier is not None:
        config = replace(config, radius_multiplier=radius_multiplier)
    return lp_rounding_k_medoids(d, k, dC=dC, config=config)
