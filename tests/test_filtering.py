from __future__ import annotations

import numpy as np

from lpmedoids.algorithms.filtering import (
    FILTER_FACTOR,
    client_connection_costs,
    filter_clients,
)
from lpmedoids.algorithms.fractional import FractionalSolution, solve_fractional
from lpmedoids.distances import InstanceConfig, random_instance


def _assert_filtering_postcondition(representatives, costs, dC) -> None:
    reps = list(representatives)
    for jp in range(dC.shape[0]):
        if jp in reps:
            continue
        assert any(dC[j, jp] <= FILTER_FACTOR * costs[jp] for j in reps)
    # A later representative was never within reach of an earlier one
    for pos, j in enumerate(reps):
        for earlier in reps[:pos]:
            assert dC[earlier, j] > FILTER_FACTOR * costs[j]


def test_filtering_keeps_one_representative_per_pair(two_pairs) -> None:
    solution, d = two_pairs
    representatives = filter_clients(solution, d, d)

    assert representatives == [0, 2]


def test_filtering_pair_costs_are_exact_ties(two_pairs) -> None:
    solution, d = two_pairs
    costs = client_connection_costs(solution, d)

    assert costs.tolist() == [0.25, 0.25, 0.25, 0.25]


def test_filtering_breaks_exact_ties_by_lowest_index(shared_facility) -> None:
    solution, d, dC = shared_facility
    costs = client_connection_costs(solution, d)

    # Neither client dominates the other, so only the tie-break fixes the order
    assert costs[0] == costs[1]
    assert filter_clients(solution, d, dC) == [0, 1]

    swapped = FractionalSolution(
        x=solution.x[:, ::-1], y=solution.y, objective=solution.objective
    )
    swapped_d = d[:, ::-1].copy()
    swapped_dC = dC[::-1, ::-1].copy()
    assert filter_clients(swapped, swapped_d, swapped_dC) == [0, 1]


def test_filtering_orders_by_connection_cost() -> None:
    # Clients at 0 and 10, facilities at 0, 5 and 10; client 1 is cheaper
    d = np.array([[0.0, 10.0], [5.0, 5.0], [10.0, 0.0]])
    dC = np.array([[0.0, 10.0], [10.0, 0.0]])
    x = np.array([[0.9, 0.0], [0.1, 0.05], [0.0, 0.95]])
    y = np.array([0.9, 0.2, 0.95])
    solution = FractionalSolution(x=x, y=y, objective=float(np.sum(d * x)))

    costs = client_connection_costs(solution, d)
    assert costs[1] < costs[0]
    assert filter_clients(solution, d, dC) == [1, 0]


def test_filtering_postcondition_on_lp_solution() -> None:
    inst = random_instance(10, 10, config=InstanceConfig(random_state=11))
    solution = solve_fractional(inst.d, 3)
    costs = client_connection_costs(solution, inst.d)

    representatives = filter_clients(solution, inst.d, inst.dC)

    assert len(set(representatives)) == len(representatives)
    assert representatives == sorted(representatives, key=lambda j: (costs[j], j))
    _assert_filtering_postcondition(representatives, costs, inst.dC)
