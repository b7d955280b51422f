"""Optimizers consuming per-layer gradients.

Gradients arrive oriented along the update direction (see
:class:`~densenets.core.types.LayerGradients`), so every optimizer *adds* its
step to the parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Protocol, Tuple

import numpy as np

from .errors import InvalidHyperparameterError
from .layers import Layer
from .types import Array, LayerGradients


class Optimizer(Protocol):
    """Protocol implemented by parameter update rules."""

    learning_rate: float

    def step(self, index: int, layer: Layer, grads: LayerGradients) -> None:
        """Apply ``grads`` to ``layer`` (identified by ``index``) in place."""


@dataclass
class SGDOptimizer:
    """Plain per-sample SGD; identical to :meth:`Layer.backward`."""

    learning_rate: float

    def step(self, index: int, layer: Layer, grads: LayerGradients) -> None:
        lr = self.learning_rate
        layer.apply_update(lr * grads.weights, lr * grads.biases)


@dataclass
class MomentumOptimizer:
    """SGD with classical momentum, one velocity buffer per layer."""

    learning_rate: float
    momentum: float = 0.9
    _velocity: Dict[int, Tuple[Array, Array]] = field(default_factory=dict, repr=False)

    def step(self, index: int, layer: Layer, grads: LayerGradients) -> None:
        v_w, v_b = self._velocity.get(
            index, (np.zeros_like(layer.weights), np.zeros_like(layer.biases))
        )
        v_w = self.momentum * v_w + self.learning_rate * grads.weights
        v_b = self.momentum * v_b + self.learning_rate * grads.biases
        self._velocity[index] = (v_w, v_b)
        layer.apply_update(v_w, v_b)


@dataclass
class AdamOptimizer:
    """Adam with bias-corrected first and second moment estimates."""

    learning_rate: float
    beta1: float = 0.9
    beta2: float = 0.999
    eps: float = 1e-8
    _moments: Dict[int, Tuple[Array, Array, Array, Array]] = field(
        default_factory=dict, repr=False
    )
    _steps: Dict[int, int] = field(default_factory=dict, repr=False)

    def step(self, index: int, layer: Layer, grads: LayerGradients) -> None:
        if index not in self._moments:
            self._moments[index] = (
                np.zeros_like(layer.weights),
                np.zeros_like(layer.biases),
                np.zeros_like(layer.weights),
                np.zeros_like(layer.biases),
            )
        m_w, m_b, v_w, v_b = self._moments[index]
        t = self._steps.get(index, 0) + 1
        self._steps[index] = t

        m_w = self.beta1 * m_w + (1 - self.beta1) * grads.weights
        m_b = self.beta1 * m_b + (1 - self.beta1) * grads.biases
        v_w = self.beta2 * v_w + (1 - self.beta2) * grads.weights**2
        v_b = self.beta2 * v_b + (1 - self.beta2) * grads.biases**2
        self._moments[index] = (m_w, m_b, v_w, v_b)

        correction1 = 1 - self.beta1**t
        correction2 = 1 - self.beta2**t
        step_w = self.learning_rate * (m_w / correction1) / (np.sqrt(v_w / correction2) + self.eps)
        step_b = self.learning_rate * (m_b / correction1) / (np.sqrt(v_b / correction2) + self.eps)
        layer.apply_update(step_w, step_b)


def build_optimizer(name: str, learning_rate: float, *, momentum: float = 0.9) -> Optimizer:
    key = name.lower()
    if key == "sgd":
        return SGDOptimizer(learning_rate=learning_rate)
    if key == "momentum":
        return MomentumOptimizer(learning_rate=learning_rate, momentum=momentum)
    if key == "adam":
        return AdamOptimizer(learning_rate=learning_rate)
    raise InvalidHyperparameterError(
        f"Unknown optimizer {name!r}. Expected one of: sgd, momentum, adam"
    )


__all__ = [
    "Optimizer",
    "SGDOptimizer",
    "MomentumOptimizer",
    "AdamOptimizer",
    "build_optimizer",
]
