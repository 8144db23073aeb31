from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from sklearn.datasets import make_blobs

from .minkowski import MinkowskiParams, pairwise_minkowski


@dataclass(frozen=True)
class InstanceConfig:
    """Parameters for synthetic k-medoids instances.

    Attributes
    ----------
    n_features:
        Dimension of the generated points.
    p:
        Minkowski order used for both facility-client and client-client distances.
    random_state:
        Seed for point generation.
    """

    n_features: int = 2
    p: float = 2.0
    random_state: int | None = None

    def __post_init__(self) -> None:
        if self.n_features < 1:
            raise ValueError("n_features must be at least 1.")
        MinkowskiParams(p=self.p)


@dataclass(frozen=True)
class MedoidInstance:
    """A k-medoids problem: facility/client coordinates and their distances."""

    facilities: np.ndarray
    clients: np.ndarray
    d: np.ndarray
    dC: np.ndarray
    labels: np.ndarray | None = None

    @property
    def n_facilities(self) -> int:
        return self.d.shape[0]

    @property
    def n_clients(self) -> int:
        return self.d.shape[1]


def _build(
    facilities: np.ndarray,
    clients: np.ndarray,
    p: float,
    labels: np.ndarray | None = None,
) -> MedoidInstance:
    params = MinkowskiParams(p=p)
    return MedoidInstance(
        facilities=facilities,
        clients=clients,
        d=pairwise_minkowski(facilities, clients, params=params),
        dC=pairwise_minkowski(clients, params=params),
        labels=labels,
    )


def random_instance(
    n_facilities: int, n_clients: int, config: InstanceConfig | None = None
) -> MedoidInstance:
    """Facilities and clients drawn independently and uniformly from the unit cube."""
    if config is None:
        config = InstanceConfig()
    if n_facilities < 1 or n_clients < 1:
        raise ValueError("An instance needs at least one facility and one client.")

    rng = np.random.default_rng(config.random_state)
    facilities = rng.random((n_facilities, config.n_features))
    clients = rng.random((n_clients, config.n_features))
    return _build(facilities, clients, config.p)


def blob_instance(
    n_points: int,
    n_centers: int,
    config: InstanceConfig | None = None,
    cluster_std: float = 0.5,
) -> MedoidInstance:
    """Gaussian blobs where every point is both a facility and a client.

    The blob memberships are kept as ground-truth ``labels``.
    """
    if config is None:
        config = InstanceConfig()

    X, y = make_blobs(
        n_samples=n_points,
        centers=n_centers,
        n_features=config.n_features,
        cluster_std=cluster_std,
        random_state=config.random_state,
    )
    return _build(X, X, config.p, labels=y)
