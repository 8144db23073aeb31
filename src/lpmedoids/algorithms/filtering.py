from __future__ import annotations

import logging

import numpy as np

from lpmedoids.errors import InternalInvariantViolation

from .aggregates import connection_cost
from .fractional import FractionalSolution

logger = logging.getLogger(__name__)

# A client is dominated when it lies within this multiple of its own
# connection cost from an already chosen representative.
FILTER_FACTOR = 4.0


def client_connection_costs(solution: FractionalSolution, d: np.ndarray) -> np.ndarray:
    """Return the fractional connection cost of every client."""
    return np.array(
        [connection_cost(solution, d, j) for j in range(solution.n_clients)], dtype=float
    )


def filter_clients(solution: FractionalSolution, d: np.ndarray, dC: np.ndarray) -> list[int]:
    """Select a set of mutually far representative clients.

    Clients are visited by non-decreasing connection cost, ties broken by the
    lower client index. Each visited client that is still remaining becomes a
    representative and removes itself together with every remaining client
    ``j'`` with ``dC[j, j'] <= 4 * cost(j')``.

    Returns
    -------
    list[int]
        Representative client indices, in the order they were chosen.
    """
    costs = client_connection_costs(solution, d)
    order = sorted((float(costs[j]), j) for j in range(solution.n_clients))

    remaining = np.ones(solution.n_clients, dtype=bool)
    representatives: list[int] = []
    for _, j in order:
        if not remaining[j]:
            continue
        representatives.append(j)
        dominated = dC[j, :] <= FILTER_FACTOR * costs
        remaining[dominated] = False
        remaining[j] = False

    if np.any(remaining):
        leftover = np.flatnonzero(remaining).tolist()
        raise InternalInvariantViolation(f"Filtering left clients {leftover} unprocessed.")

    logger.debug(
        f"Filtering kept {len(representatives)} of {solution.n_clients} clients as representatives"
    )
    return representatives
