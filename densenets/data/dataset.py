"""Sample and dataset records consumed by the engine."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from ..core.errors import EmptyDatasetError, InvalidHyperparameterError
from ..core.types import Array


class TaskType(str, Enum):
    CLASSIFICATION = "classification"
    REGRESSION = "regression"

    @classmethod
    def parse(cls, value: TaskType | str) -> TaskType:
        if isinstance(value, TaskType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise InvalidHyperparameterError(f"Unknown task type: {value!r}") from exc


@dataclass(frozen=True)
class DataPoint:
    """One sample: a named-feature mapping plus an optional target."""

    features: Mapping[str, Any]
    target: Any = None
    point_id: str = ""


@dataclass
class Dataset:
    """Ordered samples sharing a task type.

    ``features`` fixes the feature order; when empty, the insertion order of
    the first sample's mapping is used.
    """

    points: List[DataPoint]
    task_type: TaskType = TaskType.REGRESSION
    features: List[str] = field(default_factory=list)
    dataset_id: str = "dataset"
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.task_type = TaskType.parse(self.task_type)
        self.points = list(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def is_empty(self) -> bool:
        return not self.points

    def feature_names(self) -> List[str]:
        if self.features:
            return list(self.features)
        if not self.points:
            return []
        return list(self.points[0].features.keys())

    def targets(self) -> List[Any]:
        return [point.target for point in self.points]

    def feature_matrix(self) -> Array:
        """Return a ``(n_samples, n_features)`` float64 matrix."""

        if self.is_empty():
            raise EmptyDatasetError(f"Dataset {self.dataset_id!r} has no samples")
        names = self.feature_names()
        return np.stack([encode_features(point, names) for point in self.points])


def _as_float(value: Any) -> float:
    if isinstance(value, numbers.Number) and not isinstance(value, complex):
        return float(value)
    return 0.0


def encode_features(point: DataPoint, names: Sequence[str]) -> Array:
    """Encode ``point`` in ``names`` order; missing or non-numeric values become 0."""

    return np.array([_as_float(point.features.get(name)) for name in names], dtype=np.float64)


def encode_target(target: Any, task_type: TaskType | str, output_size: int) -> Array:
    """Return the one-hot (classification) or singleton (regression) target vector.

    Class indices outside ``[0, output_size)`` and non-finite targets encode as
    the all-zero vector.
    """

    if TaskType.parse(task_type) is TaskType.CLASSIFICATION:
        vector = np.zeros(output_size, dtype=np.float64)
        if isinstance(target, numbers.Real) and not math.isfinite(target):
            return vector
        index = int(target) if isinstance(target, numbers.Real) else 0
        if 0 <= index < output_size:
            vector[index] = 1.0
        return vector
    return np.array([_as_float(target)], dtype=np.float64)


def from_arrays(
    inputs: Array,
    targets: Sequence[Any] | Array | None,
    *,
    task_type: TaskType | str,
    feature_names: Sequence[str] | None = None,
    dataset_id: str = "arrays",
) -> Dataset:
    """Wrap a feature matrix and optional targets as a :class:`Dataset`."""

    X = np.asarray(inputs, dtype=np.float64)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    names = list(feature_names or [f"x{idx}" for idx in range(X.shape[1])])
    points = []
    for row_idx, row in enumerate(X):
        target = None
        if targets is not None:
            target = targets[row_idx]
            if isinstance(target, np.generic):
                target = target.item()
        points.append(
            DataPoint(
                features=dict(zip(names, row.tolist())),
                target=target,
                point_id=f"{dataset_id}-{row_idx}",
            )
        )
    return Dataset(points=points, task_type=task_type, features=names, dataset_id=dataset_id)


__all__ = [
    "DataPoint",
    "Dataset",
    "TaskType",
    "encode_features",
    "encode_target",
    "from_arrays",
]
