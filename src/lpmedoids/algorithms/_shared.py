from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np

from lpmedoids.errors import InvalidArgument


class MedoidAlgorithm(Protocol):
    """Common calling contract shared by k-medoids algorithms.

    Any implementation takes a (n_facilities, n_clients) dissimilarity matrix
    and returns ``k`` distinct, 0-based facility indices.
    """

    def __call__(self, d: np.ndarray, k: int) -> list[int]: ...


def normalize_dissimilarity(d: np.ndarray, name: str = "d") -> np.ndarray:
    """Return ``d`` as a float matrix, rejecting empty, non-finite or negative input."""
    matrix = np.asarray(d, dtype=float)
    if matrix.ndim != 2:
        raise InvalidArgument(f"{name} must be a 2-D matrix, got {matrix.ndim} dimension(s).")
    if matrix.shape[0] == 0 or matrix.shape[1] == 0:
        raise InvalidArgument(f"{name} must not be empty.")
    if not np.all(np.isfinite(matrix)):
        raise InvalidArgument(f"{name} must contain only finite values.")
    if np.any(matrix < 0):
        raise InvalidArgument(f"{name} must not contain negative distances.")
    return matrix


def normalize_client_distances(dC: np.ndarray | None, d: np.ndarray) -> np.ndarray:
    """Resolve the client-to-client metric, defaulting to ``d`` when it is square."""
    n_facilities, n_clients = d.shape
    if dC is None:
        if n_facilities != n_clients:
            raise InvalidArgument(
                "A client-to-client matrix dC is required when d is not square "
                f"(got d with shape {d.shape})."
            )
        return d

    client_matrix = normalize_dissimilarity(dC, name="dC")
    if client_matrix.shape != (n_clients, n_clients):
        raise InvalidArgument(
            f"dC must have shape ({n_clients}, {n_clients}), got {client_matrix.shape}."
        )
    return client_matrix


def validate_k(k: int, n: int) -> None:
    if k <= 0 or k > n:
        raise InvalidArgument(f"k must satisfy 1 <= k <= n_facilities={n}, got k={k}.")


def assign_clients_to_medoids(d: np.ndarray, medoids: Sequence[int]) -> np.ndarray:
    """Assign each client to its nearest open facility (returns facility indices).

    Ties go to the lowest facility index among the medoids.
    """
    centers = np.array(sorted(medoids), dtype=int)
    if centers.size == 0:
        raise InvalidArgument("At least one medoid is required.")
    matrix = np.asarray(d, dtype=float)
    nearest_idx = np.argmin(matrix[centers, :], axis=0)
    return centers[nearest_idx]


def clustering_cost(d: np.ndarray, medoids: Sequence[int]) -> float:
    """Sum over clients of the distance to their nearest medoid."""
    matrix = np.asarray(d, dtype=float)
    labels = assign_clients_to_medoids(matrix, medoids)
    col_idx = np.arange(matrix.shape[1])
    return float(np.sum(matrix[labels, col_idx]))
