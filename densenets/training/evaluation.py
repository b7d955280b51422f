"""Inference helpers: output interpretation, metrics and reports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

import numpy as np

from ..core.network import Network
from ..core.types import Array
from ..data.dataset import TaskType, encode_target
from .losses import mean_squared_error
from .metrics import (
    ModelMetrics,
    classification_breakdown,
    correctness_ratio,
    regression_breakdown,
    summary_metrics,
)


@dataclass
class Prediction:
    value: Any
    confidence: float
    probabilities: Dict[str, float] | None = None


def interpret_output(output: Array, task_type: TaskType) -> int | float:
    """Arg-max class index for classification, the scalar for regression."""

    if task_type is TaskType.CLASSIFICATION:
        return int(np.argmax(output))
    return float(output[0])


def output_confidence(output: Array, task_type: TaskType, rng: np.random.Generator) -> float:
    """Largest output for classification; an uncalibrated draw in [0.8, 0.99) otherwise."""

    if task_type is TaskType.CLASSIFICATION:
        return float(max(0.0, np.max(output)))
    return 0.8 + float(rng.random()) * 0.19


class Evaluator:
    """Dropout-free inference over encoded feature matrices."""

    def __init__(self, network: Network, task_type: TaskType, rng: np.random.Generator) -> None:
        self.network = network
        self.task_type = task_type
        self.rng = rng

    def outputs(self, inputs: Array) -> List[Array]:
        return [self.network.forward(row, training=False) for row in inputs]

    def predict(self, inputs: Array, *, include_probabilities: bool = False) -> List[Prediction]:
        predictions = []
        for output in self.outputs(inputs):
            prediction = Prediction(
                value=interpret_output(output, self.task_type),
                confidence=output_confidence(output, self.task_type, self.rng),
            )
            if include_probabilities and self.task_type is TaskType.CLASSIFICATION:
                prediction.probabilities = {
                    f"class_{idx}": float(value) for idx, value in enumerate(output)
                }
            predictions.append(prediction)
        return predictions

    def training_metrics(self, inputs: Array, targets: Sequence[Any]) -> ModelMetrics:
        """Accuracy and mean per-sample MSE over the training samples."""

        outputs = self.outputs(inputs)
        losses = [
            mean_squared_error(
                output, encode_target(target, self.task_type, self.network.output_dim)
            )
            for output, target in zip(outputs, targets)
        ]
        predictions = [interpret_output(output, self.task_type) for output in outputs]
        accuracy = correctness_ratio(predictions, list(targets))
        metrics = summary_metrics(accuracy, float(np.mean(losses)) if losses else 0.0)
        metrics.custom_metrics = self._breakdown(predictions, targets)
        return metrics

    def evaluation_metrics(self, inputs: Array, targets: Sequence[Any]) -> ModelMetrics:
        """Accuracy with ``loss = 1 - accuracy``, as reported by ``evaluate``."""

        predictions = [interpret_output(output, self.task_type) for output in self.outputs(inputs)]
        accuracy = correctness_ratio(predictions, list(targets))
        metrics = summary_metrics(accuracy, 1.0 - accuracy)
        metrics.custom_metrics = self._breakdown(predictions, targets)
        return metrics

    def _breakdown(self, predictions: Sequence[Any], targets: Sequence[Any]) -> Dict[str, float]:
        if self.task_type is TaskType.CLASSIFICATION:
            return classification_breakdown(predictions, targets, self.network.output_dim)
        return regression_breakdown(predictions, targets)


def format_report(
    n_samples: int, architecture: str, parameter_count: int, metrics: ModelMetrics
) -> str:
    lines = [
        "Neural Network Evaluation Report",
        "=================================",
        f"Test Samples: {n_samples}",
        f"Network Architecture: {architecture}",
        f"Total Parameters: {parameter_count}",
        f"Accuracy: {metrics.accuracy:.4f}",
        f"Loss: {metrics.loss:.6f}",
    ]
    return "\n".join(lines) + "\n"


__all__ = [
    "Evaluator",
    "Prediction",
    "format_report",
    "interpret_output",
    "output_confidence",
]
