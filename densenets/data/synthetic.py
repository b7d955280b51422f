"""Pure in-memory synthetic datasets."""

from __future__ import annotations

import numpy as np

from .dataset import Dataset, TaskType, from_arrays
from .registry import register_dataset


@register_dataset("sum")
def make_sum_dataset(
    n_samples: int = 4,
    n_features: int = 2,
    seed: int = 0,
    *,
    scale: float = 0.25,
) -> Dataset:
    """Regression samples whose target is the sum of their features."""

    rng = np.random.default_rng(seed)
    X = rng.uniform(0.0, scale, size=(n_samples, n_features))
    y = X.sum(axis=1)
    return from_arrays(X, y, task_type=TaskType.REGRESSION, dataset_id="sum")


@register_dataset("linear")
def make_linear_dataset(
    n_samples: int = 32,
    seed: int = 0,
    *,
    slope: float = 0.5,
    intercept: float = 0.25,
) -> Dataset:
    """Single-feature regression on ``[0, 1]`` with targets inside ``(0, 1)``."""

    rng = np.random.default_rng(seed)
    x = np.sort(rng.uniform(0.0, 1.0, size=n_samples))
    y = slope * x + intercept
    return from_arrays(x.reshape(-1, 1), y, task_type=TaskType.REGRESSION, dataset_id="linear")


@register_dataset("blobs")
def make_blobs_dataset(
    n_per_class: int = 20,
    n_classes: int = 3,
    seed: int = 0,
    *,
    spread: float = 0.3,
) -> Dataset:
    """Gaussian blobs around evenly spaced centres on the unit circle."""

    rng = np.random.default_rng(seed)
    angles = np.linspace(0.0, 2 * np.pi, n_classes, endpoint=False)
    centers = np.stack([np.cos(angles), np.sin(angles)], axis=1) * 2.0
    inputs = []
    labels = []
    for idx, center in enumerate(centers):
        inputs.append(center + spread * rng.standard_normal((n_per_class, 2)))
        labels.append(np.full(n_per_class, idx, dtype=np.int64))
    X = np.vstack(inputs)
    y = np.concatenate(labels)
    order = rng.permutation(X.shape[0])
    return from_arrays(
        X[order], y[order], task_type=TaskType.CLASSIFICATION, dataset_id="blobs"
    )


__all__ = ["make_sum_dataset", "make_linear_dataset", "make_blobs_dataset"]
