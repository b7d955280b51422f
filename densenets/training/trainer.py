"""Per-sample SGD training loop with shuffling, dropout and early stopping."""

from __future__ import annotations

import logging
from typing import Mapping, Protocol, Sequence

import numpy as np

from ..core.errors import EmptyDatasetError, InvalidHyperparameterError
from ..core.network import Network
from ..core.optimizers import Optimizer
from ..core.types import Array, TrainingState
from .losses import REGISTRY as LOSS_REGISTRY

logger = logging.getLogger(__name__)

EARLY_STOP_MIN_EPOCH = 20
EARLY_STOP_FACTOR = 1.1


class EpochCallback(Protocol):
    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        ...


def early_stop_triggered(epoch: int, epoch_loss: float, best_loss: float) -> bool:
    """Divergence check applied after ``epoch`` (0-based) failed to improve."""

    return epoch > EARLY_STOP_MIN_EPOCH and epoch_loss > best_loss * EARLY_STOP_FACTOR


class Trainer:
    """Drive mini-batch training of a :class:`Network`.

    Batches are nominal: every sample runs forward, loss and backward on its
    own, so parameters change after each sample rather than once per batch.
    A trainer mutates its network in place; run one training loop at a time
    per network.
    """

    def __init__(
        self,
        network: Network,
        optimizer: Optimizer,
        *,
        loss: str = "mse",
        callbacks: Sequence[object] | None = None,
        log_every: int = 10,
    ) -> None:
        self.network = network
        self.optimizer = optimizer
        self.loss_fn = LOSS_REGISTRY.get(loss)
        self.callbacks = list(callbacks or [])
        self.log_every = max(1, int(log_every))

    def run(
        self,
        inputs: Array,
        targets: Array,
        *,
        epochs: int,
        batch_size: int,
        dropout_rate: float,
        rng: np.random.Generator,
    ) -> TrainingState:
        """Train on encoded ``inputs`` ``(n, d)`` and ``targets`` ``(n, k)``."""

        n_samples = len(inputs)
        if n_samples == 0:
            raise EmptyDatasetError("No training data available")
        if len(targets) != n_samples:
            raise ValueError(
                f"Got {n_samples} inputs but {len(targets)} target vectors"
            )
        if epochs <= 0 or batch_size <= 0:
            raise InvalidHyperparameterError("epochs and batch_size must be positive")
        if not 0 <= dropout_rate < 1:
            raise InvalidHyperparameterError("dropout_rate must be in [0, 1)")

        state = TrainingState()
        for epoch in range(epochs):
            state.epoch = epoch
            order = rng.permutation(n_samples)
            batch_losses = [
                self._train_batch(
                    inputs, targets, order[start : start + batch_size], dropout_rate, rng
                )
                for start in range(0, n_samples, batch_size)
            ]
            epoch_loss = float(np.mean(batch_losses))
            state.history.append(epoch_loss)
            state.epochs_completed = epoch + 1

            if epoch % self.log_every == 0:
                logger.info("Epoch %d, Loss: %.6f", epoch, epoch_loss)
            self._emit_epoch(epoch, {"loss": epoch_loss})

            if epoch_loss < state.best_loss:
                state.best_loss = epoch_loss
            elif early_stop_triggered(epoch, epoch_loss, state.best_loss):
                logger.info("Early stopping at epoch %d", epoch)
                state.stopped_early = True
                state.stop_epoch = epoch
                break
        return state

    # ------------------------------------------------------------------
    # Internal helpers

    def _train_batch(
        self,
        inputs: Array,
        targets: Array,
        indices: Array,
        dropout_rate: float,
        rng: np.random.Generator,
    ) -> float:
        total = 0.0
        for idx in indices:
            output = self.network.forward(
                inputs[idx], training=True, dropout_rate=dropout_rate, rng=rng
            )
            loss_value, error = self.loss_fn(output, targets[idx])
            total += loss_value
            self.network.backward(error, self.optimizer)
        return total / len(indices)

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["EpochCallback", "Trainer", "early_stop_triggered"]
