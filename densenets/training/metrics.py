"""Metric helpers for training summaries and evaluation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Sequence

import numpy as np


@dataclass
class ModelMetrics:
    """Headline metrics plus free-form extras.

    ``precision``, ``recall`` and ``f1_score`` mirror ``accuracy``; the
    independently computed values live in ``custom_metrics``.
    """

    accuracy: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    f1_score: float = 0.0
    loss: float = 0.0
    custom_metrics: Dict[str, float] = field(default_factory=dict)
    computed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["computed_at"] = self.computed_at.isoformat()
        return payload


def correctness_ratio(predictions: Sequence[Any], actuals: Sequence[Any]) -> float:
    """Fraction of predictions exactly equal to their target."""

    if len(predictions) != len(actuals):
        raise ValueError("predictions and actuals must have the same length")
    if not predictions:
        return 0.0
    correct = sum(1 for pred, actual in zip(predictions, actuals) if pred == actual)
    return correct / len(predictions)


def summary_metrics(accuracy: float, loss: float) -> ModelMetrics:
    return ModelMetrics(
        accuracy=accuracy,
        precision=accuracy,
        recall=accuracy,
        f1_score=accuracy,
        loss=loss,
    )


def _class_index(value: Any) -> int:
    """Integer class index, or -1 for missing, non-numeric or non-finite targets."""

    if isinstance(value, (int, float, np.number)) and np.isfinite(value):
        return int(value)
    return -1


def classification_breakdown(
    predictions: Sequence[int], actuals: Sequence[Any], num_classes: int
) -> Dict[str, float]:
    """Macro-averaged precision, recall and F1 over ``range(num_classes)``."""

    pred_idx = np.asarray(predictions, dtype=np.int64)
    targ_idx = np.asarray([_class_index(a) for a in actuals], dtype=np.int64)
    precisions = []
    recalls = []
    f1_scores = []
    for cls in range(num_classes):
        tp = np.sum((pred_idx == cls) & (targ_idx == cls))
        fp = np.sum((pred_idx == cls) & (targ_idx != cls))
        fn = np.sum((pred_idx != cls) & (targ_idx == cls))
        precision = tp / (tp + fp + 1e-9)
        recall = tp / (tp + fn + 1e-9)
        f1 = 2 * precision * recall / (precision + recall + 1e-9)
        precisions.append(precision)
        recalls.append(recall)
        f1_scores.append(f1)
    return {
        "macro_precision": float(np.mean(precisions)),
        "macro_recall": float(np.mean(recalls)),
        "macro_f1": float(np.mean(f1_scores)),
    }


def regression_breakdown(predictions: Sequence[float], actuals: Sequence[Any]) -> Dict[str, float]:
    preds = np.asarray(predictions, dtype=np.float64)
    targs = np.asarray(
        [float(a) if isinstance(a, (int, float, np.number)) else 0.0 for a in actuals],
        dtype=np.float64,
    )
    diff = preds - targs
    mse = float(np.mean(diff**2)) if diff.size else 0.0
    return {
        "mae": float(np.mean(np.abs(diff))) if diff.size else 0.0,
        "mse": mse,
        "rmse": float(np.sqrt(mse)),
    }


__all__ = [
    "ModelMetrics",
    "classification_breakdown",
    "correctness_ratio",
    "regression_breakdown",
    "summary_metrics",
]
