from __future__ import annotations

import numpy as np
import pytest

from lpmedoids.algorithms.fractional import FractionalSolution
from lpmedoids.distances.minkowski import pairwise_minkowski


@pytest.fixture
def two_pairs() -> tuple[FractionalSolution, np.ndarray]:
    """Two tight pairs of points far apart, each pair half-open on both points.

    Facilities and clients coincide at positions 0, 0.5, 10, 10.5 on a line.
    """
    points = np.array([[0.0], [0.5], [10.0], [10.5]])
    d = pairwise_minkowski(points)
    x = np.array(
        [
            [0.5, 0.5, 0.0, 0.0],
            [0.5, 0.5, 0.0, 0.0],
            [0.0, 0.0, 0.5, 0.5],
            [0.0, 0.0, 0.5, 0.5],
        ]
    )
    y = np.full(4, 0.5)
    solution = FractionalSolution(x=x, y=y, objective=float(np.sum(d * x)))
    return solution, d


@pytest.fixture
def shared_facility() -> tuple[FractionalSolution, np.ndarray, np.ndarray]:
    """Clients at 0 and 10, facilities at 0, 5 and 10; facility 1 is equidistant."""
    facilities = np.array([[0.0], [5.0], [10.0]])
    clients = np.array([[0.0], [10.0]])
    d = pairwise_minkowski(facilities, clients)
    dC = pairwise_minkowski(clients)
    x = np.array(
        [
            [0.9, 0.0],
            [0.1, 0.1],
            [0.0, 0.9],
        ]
    )
    y = np.array([0.9, 0.2, 0.9])
    solution = FractionalSolution(x=x, y=y, objective=float(np.sum(d * x)))
    return solution, d, dC


@pytest.fixture
def unit_square() -> np.ndarray:
    """Euclidean distances among the corners (0,0), (1,0), (0,1), (1,1)."""
    corners = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    return pairwise_minkowski(corners)
