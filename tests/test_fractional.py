from __future__ import annotations

import numpy as np
import pulp
import pytest

from lpmedoids.algorithms.fractional import (
    FractionalSolution,
    check_relaxation_constraints,
    solve_fractional,
    spread_unused_budget,
)
from lpmedoids.distances import InstanceConfig, random_instance
from lpmedoids.errors import InvalidArgument, SolverFailure


class _StatusSolver(pulp.LpSolver):
    """Stand-in solver that reports a fixed status without solving."""

    def __init__(self, status: int) -> None:
        super().__init__(msg=False)
        self.status = status

    def available(self) -> bool:
        return True

    def actualSolve(self, lp, **kwargs):
        lp.assignStatus(self.status)
        return self.status


def test_relaxation_satisfies_constraints() -> None:
    inst = random_instance(6, 9, config=InstanceConfig(random_state=3))
    k = 2
    solution = solve_fractional(inst.d, k)

    assert solution.x.shape == (6, 9)
    assert np.allclose(solution.x.sum(axis=0), 1.0, atol=1e-6)
    assert np.all(solution.x <= solution.y[:, None] + 1e-6)
    assert solution.y.sum() <= k + 1e-6
    assert np.isclose(solution.objective, float(np.sum(inst.d * solution.x)))


def test_relaxation_of_unit_square(unit_square) -> None:
    solution = solve_fractional(unit_square, 2)

    # Every client pays at least distance 1 for half of its mass or more
    assert np.isclose(solution.objective, 2.0, atol=1e-6)
    assert np.all(solution.keep == (solution.y > solution.tolerance))


def test_relaxation_rejects_k_above_facility_count(unit_square) -> None:
    with pytest.raises(InvalidArgument):
        solve_fractional(unit_square, 5)


def test_relaxation_rejects_negative_distances() -> None:
    d = np.array([[0.0, -1.0], [1.0, 0.0]])
    with pytest.raises(InvalidArgument):
        solve_fractional(d, 1)


@pytest.mark.parametrize(
    "status, name",
    [(pulp.LpStatusInfeasible, "Infeasible"), (pulp.LpStatusUnbounded, "Unbounded")],
)
def test_solver_status_is_surfaced(unit_square, status: int, name: str) -> None:
    with pytest.raises(SolverFailure) as excinfo:
        solve_fractional(unit_square, 2, solver=_StatusSolver(status))
    assert excinfo.value.status == name


def test_inconsistent_solution_is_rejected() -> None:
    x = np.array([[0.6, 0.0], [0.0, 1.0]])
    y = np.array([0.6, 1.0])
    with pytest.raises(SolverFailure):
        check_relaxation_constraints(FractionalSolution(x=x, y=y, objective=0.0), k=2)

    x = np.array([[1.0, 1.0], [0.0, 0.0]])
    y = np.array([0.5, 0.0])
    with pytest.raises(SolverFailure):
        check_relaxation_constraints(FractionalSolution(x=x, y=y, objective=0.0), k=1)


def test_unused_budget_is_spread_to_reach_k() -> None:
    inst = random_instance(8, 8, config=InstanceConfig(random_state=0))
    solution = solve_fractional(inst.d, 5)

    assert np.isclose(solution.y.sum(), 5.0)
    assert np.all(solution.y <= 1.0)
    assert np.all(solution.x <= solution.y[:, None] + 1e-6)


def test_spread_unused_budget_fills_in_index_order() -> None:
    y = np.array([1.0, 0.25, 0.0, 0.0])
    spread_unused_budget(y, 3)

    assert np.allclose(y, [1.0, 1.0, 1.0, 0.0])

    y = np.array([0.5, 0.5])
    spread_unused_budget(y, 1)
    assert np.allclose(y, [0.5, 0.5])
