"""Public ``train`` / ``predict`` / ``evaluate`` facade over the engine."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np

from .core.errors import (
    ConcurrentTrainingError,
    DenseNetError,
    DimensionMismatchError,
    EmptyDatasetError,
)
from .core.network import Network, determine_output_size
from .core.optimizers import build_optimizer
from .core.types import Array
from .data.dataset import Dataset, TaskType, encode_features, encode_target
from .training.config import TrainingConfig
from .training.evaluation import Evaluator, Prediction, format_report
from .training.metrics import ModelMetrics
from .training.trainer import Trainer

logger = logging.getLogger(__name__)


@dataclass
class TrainingResult:
    success: bool
    message: str
    epochs_completed: int = 0
    converged: bool = False
    final_loss: float = float("nan")
    metrics: ModelMetrics | None = None
    loss_history: List[float] = field(default_factory=list)
    stop_epoch: int | None = None
    training_data: Dict[str, Any] = field(default_factory=dict)
    error: DenseNetError | None = None

    @classmethod
    def failure(cls, message: str, error: DenseNetError) -> TrainingResult:
        return cls(success=False, message=message, error=error)

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


@dataclass
class PredictionResult:
    success: bool
    message: str
    predictions: List[Prediction] = field(default_factory=list)
    error: DenseNetError | None = None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


@dataclass
class EvaluationResult:
    success: bool
    message: str
    metrics: ModelMetrics | None = None
    report: str = ""
    error: DenseNetError | None = None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class NeuralNetworkModel:
    """Dense feed-forward model trained with per-sample SGD.

    Every :meth:`train` call rebuilds the network from scratch.  Training
    holds an exclusive lock; a second concurrent ``train`` on the same
    instance raises :class:`ConcurrentTrainingError`.
    """

    def __init__(
        self, model_id: str = "neural-network", model_name: str = "Neural Network"
    ) -> None:
        self.model_id = model_id
        self.model_name = model_name
        self.network: Network | None = None
        self.task_type: TaskType | None = None
        self.config: TrainingConfig | None = None
        self.feature_names: List[str] = []
        self._rng = np.random.default_rng()
        self._lock = threading.Lock()

    @property
    def is_built(self) -> bool:
        return self.network is not None

    # ------------------------------------------------------------------
    # Public API

    def train(
        self,
        dataset: Dataset,
        config: TrainingConfig | Mapping[str, Any] | None = None,
        *,
        callbacks: Sequence[object] | None = None,
    ) -> TrainingResult:
        if not self._lock.acquire(blocking=False):
            raise ConcurrentTrainingError(
                f"Model {self.model_id!r} is already training; run one training at a time"
            )
        try:
            return self._train(dataset, config, callbacks)
        finally:
            self._lock.release()

    def predict(
        self, dataset: Dataset, *, include_probabilities: bool = False
    ) -> PredictionResult:
        with self._lock:
            try:
                inputs = self._encode_inputs(dataset)
                evaluator = self._evaluator()
                predictions = evaluator.predict(
                    inputs, include_probabilities=include_probabilities
                )
            except DenseNetError as exc:
                return PredictionResult(
                    success=False,
                    message=f"Neural Network prediction failed: {exc}",
                    error=exc,
                )
        return PredictionResult(
            success=True,
            message="Neural Network predictions completed",
            predictions=predictions,
        )

    def evaluate(self, dataset: Dataset) -> EvaluationResult:
        with self._lock:
            try:
                inputs = self._encode_inputs(dataset)
                evaluator = self._evaluator()
                metrics = evaluator.evaluation_metrics(inputs, dataset.targets())
            except DenseNetError as exc:
                return EvaluationResult(
                    success=False,
                    message=f"Neural Network evaluation failed: {exc}",
                    error=exc,
                )
            report = format_report(
                len(dataset),
                self.network.architecture,
                self.network.parameter_count,
                metrics,
            )
        return EvaluationResult(
            success=True,
            message="Neural Network evaluation completed",
            metrics=metrics,
            report=report,
        )

    # ------------------------------------------------------------------
    # Internal helpers

    def _train(
        self,
        dataset: Dataset,
        config: TrainingConfig | Mapping[str, Any] | None,
        callbacks: Sequence[object] | None,
    ) -> TrainingResult:
        try:
            if isinstance(config, TrainingConfig):
                cfg = config
            else:
                cfg = TrainingConfig.from_mapping(config)
            if dataset.is_empty():
                raise EmptyDatasetError(f"Dataset {dataset.dataset_id!r} has no samples")
            names = dataset.feature_names()
            inputs = dataset.feature_matrix()
            targets = dataset.targets()
            task_type = dataset.task_type
            output_size = determine_output_size(task_type.value, targets)
            encoded_targets = np.stack(
                [encode_target(target, task_type, output_size) for target in targets]
            )
            rng = np.random.default_rng(cfg.seed)
            network = Network.build(
                inputs.shape[1], output_size, cfg.hidden_layers, cfg.activation, rng
            )
            optimizer = build_optimizer(cfg.optimizer, cfg.learning_rate, momentum=cfg.momentum)
            trainer = Trainer(
                network,
                optimizer,
                loss=cfg.loss,
                callbacks=callbacks,
                log_every=cfg.log_every,
            )
        except DenseNetError as exc:
            return TrainingResult.failure(f"Neural Network training failed: {exc}", exc)

        logger.info(
            "Starting Neural Network training: %d samples, %d features",
            len(dataset),
            inputs.shape[1],
        )
        self.network = network
        self.task_type = task_type
        self.config = cfg
        self.feature_names = names
        self._rng = rng

        state = trainer.run(
            inputs,
            encoded_targets,
            epochs=cfg.epochs,
            batch_size=cfg.batch_size,
            dropout_rate=cfg.dropout_rate,
            rng=rng,
        )
        metrics = Evaluator(network, task_type, rng).training_metrics(inputs, targets)
        return TrainingResult(
            success=True,
            message="Neural Network training completed",
            epochs_completed=state.epochs_completed,
            converged=not state.stopped_early,
            final_loss=state.best_loss,
            metrics=metrics,
            loss_history=list(state.history),
            stop_epoch=state.stop_epoch,
            training_data={
                "layers": len(network.layers),
                "layer_dims": network.describe().layer_dims,
                "total_parameters": network.parameter_count,
                "training_samples": len(dataset),
                "final_learning_rate": cfg.learning_rate,
            },
        )

    def _evaluator(self) -> Evaluator:
        if self.network is None or self.task_type is None:
            raise DimensionMismatchError("Model not trained")
        return Evaluator(self.network, self.task_type, self._rng)

    def _encode_inputs(self, dataset: Dataset) -> Array:
        if dataset.is_empty():
            raise EmptyDatasetError(f"Dataset {dataset.dataset_id!r} has no samples")
        if self.network is None:
            raise DimensionMismatchError("Model not trained")
        names = dataset.feature_names()
        if self.feature_names and set(self.feature_names) <= set(names):
            names = self.feature_names
        inputs = np.stack([encode_features(point, names) for point in dataset.points])
        if inputs.shape[1] != self.network.input_dim:
            raise DimensionMismatchError(
                f"Network expects {self.network.input_dim} features, "
                f"dataset provides {inputs.shape[1]}"
            )
        return inputs


__all__ = [
    "EvaluationResult",
    "NeuralNetworkModel",
    "PredictionResult",
    "TrainingResult",
]
