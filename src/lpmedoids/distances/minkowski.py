from __future__ import annotations

from dataclasses import dataclass

import numpy as np


PType = float | int


@dataclass(frozen=True)
class MinkowskiParams:
    """Parameters for the Minkowski distance.

    Attributes
    ----------
    p:
        Norm order (p >= 1). Common choices:
        - p=1: Manhattan
        - p=2: Euclidean
    """

    p: PType = 2.0

    def __post_init__(self) -> None:
        if self.p < 1:
            raise ValueError("Minkowski parameter p must satisfy p >= 1.")


def pairwise_minkowski(
    x: np.ndarray, y: np.ndarray | None = None, params: MinkowskiParams | None = None
) -> np.ndarray:
    """Distance matrix between the rows of ``x`` (facilities) and ``y`` (clients).

    Parameters
    ----------
    x:
        Facility coordinates of shape (n_facilities, n_features).
    y:
        Optional client coordinates of shape (n_clients, n_features). If
        ``None``, facilities and clients coincide.
    params:
        MinkowskiParams instance controlling the value of ``p``.

    Returns
    -------
    np.ndarray
        Dissimilarity matrix of shape (n_facilities, n_clients).
    """
    if params is None:
        params = MinkowskiParams()

    x = np.atleast_2d(np.asarray(x, dtype=float))
    y = x if y is None else np.atleast_2d(np.asarray(y, dtype=float))
    if x.shape[1] != y.shape[1]:
        raise ValueError(
            f"Facilities and clients must share a feature dimension, got {x.shape[1]} and {y.shape[1]}."
        )

    diff = x[:, None, :] - y[None, :, :]

    if params.p == 1:
        return np.sum(np.abs(diff), axis=-1)
    if params.p == 2:
        return np.sqrt(np.sum(diff * diff, axis=-1))

    abs_p = np.abs(diff) ** params.p
    return np.sum(abs_p, axis=-1) ** (1.0 / params.p)
