"""Volume and distance aggregates over a fractional solution.

All helpers are pure: the fractional values and facility sets are passed in
explicitly and nothing is cached, since candidate sets and bundles change
between phases.
"""
from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from .fractional import FractionalSolution


def _as_index_array(facilities: Iterable[int]) -> np.ndarray:
    return np.fromiter((int(i) for i in facilities), dtype=int)


def volume(y: np.ndarray, facilities: Iterable[int]) -> float:
    """Sum of fractional openness ``y`` over a facility set."""
    idx = _as_index_array(facilities)
    if idx.size == 0:
        return 0.0
    return float(np.sum(y[idx]))


def average_distance(d: np.ndarray, y: np.ndarray, facilities: Iterable[int], j: int) -> float:
    """Volume-weighted mean distance from client ``j`` to a facility set.

    Returns ``inf`` for a set of zero volume.
    """
    idx = _as_index_array(facilities)
    vol = volume(y, idx)
    if vol <= 0.0:
        return math.inf
    return float(np.dot(y[idx], d[idx, j]) / vol)


def connection_cost(solution: FractionalSolution, d: np.ndarray, j: int) -> float:
    """Fractional connection cost of client ``j`` over its candidate set F[j]."""
    return average_distance(d, solution.y, solution.candidate_facilities(j), j)


def ball(d: np.ndarray, keep: np.ndarray, j: int, radius: float) -> np.ndarray:
    """Kept facilities strictly closer than ``radius`` to client ``j``."""
    return np.flatnonzero(keep & (d[:, j] < radius))
