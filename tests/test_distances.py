from __future__ import annotations

import numpy as np
import pytest

from lpmedoids.distances import (
    InstanceConfig,
    MinkowskiParams,
    blob_instance,
    pairwise_minkowski,
    random_instance,
)


def test_pairwise_minkowski_matches_manual_norm() -> None:
    X = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 2.0]], dtype=float)
    D = pairwise_minkowski(X, params=MinkowskiParams(p=2))

    expected = np.array(
        [
            [0.0, 1.0, 2.0],
            [1.0, 0.0, np.sqrt(5.0)],
            [2.0, np.sqrt(5.0), 0.0],
        ]
    )
    assert np.allclose(D, expected)


def test_pairwise_minkowski_rectangular_manhattan() -> None:
    facilities = np.array([[0.0, 0.0], [3.0, 4.0]])
    clients = np.array([[1.0, 1.0], [3.0, 0.0], [0.0, 4.0]])
    D = pairwise_minkowski(facilities, clients, params=MinkowskiParams(p=1))

    assert D.shape == (2, 3)
    assert np.allclose(D, [[2.0, 3.0, 4.0], [5.0, 4.0, 3.0]])


def test_pairwise_minkowski_rejects_mismatched_dimensions() -> None:
    with pytest.raises(ValueError):
        pairwise_minkowski(np.zeros((2, 2)), np.zeros((3, 3)))


def test_minkowski_params_reject_p_below_one() -> None:
    with pytest.raises(ValueError):
        MinkowskiParams(p=0.5)


def test_random_instance_shapes_and_reproducibility() -> None:
    cfg = InstanceConfig(random_state=7)
    inst = random_instance(5, 8, config=cfg)
    again = random_instance(5, 8, config=cfg)

    assert inst.d.shape == (5, 8)
    assert inst.dC.shape == (8, 8)
    assert inst.labels is None
    assert np.allclose(inst.d, again.d)
    assert np.allclose(np.diag(inst.dC), 0.0)


def test_blob_instance_keeps_ground_truth() -> None:
    inst = blob_instance(30, 3, config=InstanceConfig(random_state=0))

    assert inst.d.shape == (30, 30)
    assert np.allclose(inst.d, inst.dC)
    assert inst.labels is not None
    assert set(inst.labels.tolist()) == {0, 1, 2}
