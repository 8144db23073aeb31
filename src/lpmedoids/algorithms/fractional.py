"""LP relaxation of the k-median / facility-location problem."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
import pulp

from lpmedoids.errors import InvalidArgument, SolverFailure

from ._shared import normalize_dissimilarity, validate_k

logger = logging.getLogger(__name__)

# Absolute slack allowed when re-checking the solver's primal values.
FEASIBILITY_TOLERANCE = 1e-6


@dataclass(frozen=True)
class FractionalSolution:
    """Optimal primal point of the relaxation.

    Attributes
    ----------
    x:
        Assignment values of shape (n_facilities, n_clients); column sums are 1.
    y:
        Facility openness of shape (n_facilities,).
    objective:
        LP optimum, ``sum(d * x)``.
    tolerance:
        Values at or below this threshold count as zero.
    keep:
        ``y > tolerance``; facilities outside ``keep`` are never candidates,
        bundled or matched, though they still draw with openness ``y`` when
        sampled as unbundled facilities.
    """

    x: np.ndarray
    y: np.ndarray
    objective: float
    tolerance: float = 1e-9
    keep: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        x = np.asarray(self.x, dtype=float)
        y = np.asarray(self.y, dtype=float)
        if x.ndim != 2 or y.ndim != 1 or x.shape[0] != y.shape[0]:
            raise InvalidArgument(
                f"x must be (n_facilities, n_clients) and y (n_facilities,), got {x.shape} and {y.shape}."
            )
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)
        object.__setattr__(self, "keep", y > self.tolerance)

    @property
    def n_facilities(self) -> int:
        return self.x.shape[0]

    @property
    def n_clients(self) -> int:
        return self.x.shape[1]

    def candidate_facilities(self, j: int) -> np.ndarray:
        """F[j]: kept facilities carrying positive assignment mass for client j."""
        mask = self.keep & (self.x[:, j] > self.tolerance)
        return np.flatnonzero(mask)


def check_relaxation_constraints(solution: FractionalSolution, k: int) -> None:
    """Raise SolverFailure if ``solution`` violates the relaxation's constraints."""
    x, y = solution.x, solution.y
    tol = FEASIBILITY_TOLERANCE
    col_sums = x.sum(axis=0)
    if not np.allclose(col_sums, 1.0, atol=tol, rtol=0.0):
        worst = int(np.argmax(np.abs(col_sums - 1.0)))
        raise SolverFailure(
            "Inconsistent",
            f"Assignment of client {worst} sums to {col_sums[worst]:.6f}, expected 1.",
        )
    if np.any(x > y[:, None] + tol):
        raise SolverFailure("Inconsistent", "Some x[i, j] exceeds y[i].")
    if float(y.sum()) > k + tol:
        raise SolverFailure("Inconsistent", f"Total openness {y.sum():.6f} exceeds k={k}.")


def spread_unused_budget(y: np.ndarray, k: int, tolerance: float = 1e-9) -> None:
    """Raise ``y`` in place, in facility index order, until it sums to ``k``.

    The objective does not involve ``y`` and ``x <= y`` only gets looser, so an
    optimal point stays optimal. Rounding can open exactly ``k`` facilities only
    if the total openness reaches ``k``.
    """
    slack = k - float(y.sum())
    if slack <= tolerance:
        return
    logger.debug(f"Spreading unused LP budget {slack:.6f} over facilities")
    for i in range(y.shape[0]):
        if slack <= 0.0:
            break
        raise_by = min(1.0 - y[i], slack)
        if raise_by > 0.0:
            y[i] += raise_by
            slack -= raise_by


def solve_fractional(
    d: np.ndarray,
    k: int,
    solver: pulp.LpSolver | None = None,
    tolerance: float = 1e-9,
) -> FractionalSolution:
    """Solve the LP relaxation for k facilities.

    Parameters
    ----------
    d:
        Dissimilarity matrix of shape (n_facilities, n_clients).
    k:
        Upper bound on the total fractional openness.
    solver:
        Optional PuLP solver; defaults to the bundled CBC backend.
    tolerance:
        Threshold below which primal values are treated as zero.
    """
    d = normalize_dissimilarity(d)
    n_facilities, n_clients = d.shape
    validate_k(k, n_facilities)

    prob = pulp.LpProblem("k_median_relaxation", pulp.LpMinimize)

    y = [pulp.LpVariable(f"y_{i}", lowBound=0.0, upBound=1.0) for i in range(n_facilities)]
    x = [
        [pulp.LpVariable(f"x_{i}_{j}", lowBound=0.0, upBound=1.0) for j in range(n_clients)]
        for i in range(n_facilities)
    ]

    prob += pulp.lpSum(
        float(d[i, j]) * x[i][j] for i in range(n_facilities) for j in range(n_clients)
    )

    for j in range(n_clients):
        prob += pulp.lpSum(x[i][j] for i in range(n_facilities)) == 1.0, f"assign_{j}"

    for i in range(n_facilities):
        for j in range(n_clients):
            prob += x[i][j] <= y[i], f"open_{i}_{j}"

    prob += pulp.lpSum(y) <= k, "budget"

    if solver is None:
        solver = pulp.PULP_CBC_CMD(msg=False)

    logger.debug(
        f"Solving LP relaxation: {n_facilities} facilities, {n_clients} clients, k={k}"
    )
    status = prob.solve(solver)
    status_name = pulp.LpStatus.get(status, str(status))
    if status != pulp.LpStatusOptimal:
        raise SolverFailure(status_name)

    y_val = np.array([v.value() or 0.0 for v in y], dtype=float)
    x_val = np.array([[v.value() or 0.0 for v in row] for row in x], dtype=float)
    # Solver noise can leave values marginally outside [0, 1]
    np.clip(y_val, 0.0, 1.0, out=y_val)
    np.clip(x_val, 0.0, 1.0, out=x_val)
    spread_unused_budget(y_val, k, tolerance)

    objective = float(np.sum(d * x_val))
    logger.info(f"LP optimal value: {objective:.6f}")

    solution = FractionalSolution(x=x_val, y=y_val, objective=objective, tolerance=tolerance)
    check_relaxation_constraints(solution, k)
    return solution
