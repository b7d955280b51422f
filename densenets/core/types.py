"""Core typing contracts for densenets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class LayerGradients:
    """Gradients of one layer, oriented along the update direction.

    ``weights`` has the layer's ``(output_dim, input_dim)`` shape, ``biases``
    its ``(output_dim,)`` shape.  ``input_error`` is the error signal handed to
    the previous layer, computed against the pre-update weights.
    """

    weights: Array
    biases: Array
    input_error: Array


@dataclass(frozen=True)
class ModelDescription:
    """Description of the feed-forward network architecture."""

    layer_dims: List[int]


@dataclass
class TrainingState:
    """Book-keeping for a single training call."""

    epoch: int = 0
    best_loss: float = float("inf")
    epochs_completed: int = 0
    history: List[float] = field(default_factory=list)
    stopped_early: bool = False
    stop_epoch: int | None = None
