"""Feed-forward network assembled from dense layers."""

from __future__ import annotations

import logging
from typing import Hashable, Iterable, List, Sequence

import numpy as np

from .activations import Activation
from .errors import DimensionMismatchError, InvalidHyperparameterError
from .layers import Layer
from .optimizers import Optimizer
from .types import Array, ModelDescription

logger = logging.getLogger(__name__)


def determine_output_size(task_type: str, targets: Iterable[Hashable]) -> int:
    """Return 1 for regression, the distinct label count for classification."""

    if task_type == "regression":
        return 1
    if task_type == "classification":
        return max(1, len(set(targets)))
    raise InvalidHyperparameterError(f"Unknown task type: {task_type}")


def apply_dropout(values: Array, rate: float, rng: np.random.Generator) -> tuple[Array, Array]:
    """Inverted dropout: zero units with probability ``rate``, rescale the rest.

    Returns the dropped-out values and the mask (already including the
    ``1 / (1 - rate)`` rescaling) so the backward pass can reuse it.
    """

    keep = rng.random(values.shape[0]) > rate
    mask = keep.astype(np.float64) / (1.0 - rate)
    return values * mask, mask


class Network:
    """Ordered stack of :class:`Layer` objects.

    Adjacent layers must agree on their shared dimension.  The network keeps
    the dropout masks of the last training forward pass so that
    :meth:`backward` routes no gradient through dropped units.
    """

    def __init__(self, layers: Sequence[Layer]) -> None:
        if not layers:
            raise DimensionMismatchError("A network needs at least one layer")
        for idx, (prev, nxt) in enumerate(zip(layers[:-1], layers[1:])):
            if prev.output_dim != nxt.input_dim:
                raise DimensionMismatchError(
                    f"Layer {idx} outputs {prev.output_dim} values but layer "
                    f"{idx + 1} expects {nxt.input_dim}"
                )
        self.layers: List[Layer] = list(layers)
        self._dropout_masks: List[Array | None] = [None] * len(self.layers)

    @classmethod
    def build(
        cls,
        n_features: int,
        output_size: int,
        hidden_layers: Sequence[int],
        activation: Activation | str,
        rng: np.random.Generator,
    ) -> Network:
        """Build input, hidden and sigmoid output layers with fresh weights."""

        hidden_activation = Activation.parse(activation)
        layers = [Layer(n_features, n_features, Activation.LINEAR, rng)]
        prev = n_features
        for width in hidden_layers:
            layers.append(Layer(prev, int(width), hidden_activation, rng))
            prev = int(width)
        layers.append(Layer(prev, output_size, Activation.SIGMOID, rng))
        network = cls(layers)
        logger.info("Built network with architecture: %s", network.architecture)
        return network

    @property
    def input_dim(self) -> int:
        return self.layers[0].input_dim

    @property
    def output_dim(self) -> int:
        return self.layers[-1].output_dim

    @property
    def architecture(self) -> str:
        return "->".join(str(layer.output_dim) for layer in self.layers)

    @property
    def parameter_count(self) -> int:
        return int(sum(layer.parameter_count for layer in self.layers))

    def describe(self) -> ModelDescription:
        dims = [self.input_dim] + [layer.output_dim for layer in self.layers]
        return ModelDescription(layer_dims=dims)

    def forward(
        self,
        inputs: Array,
        *,
        training: bool = False,
        dropout_rate: float = 0.0,
        rng: np.random.Generator | None = None,
    ) -> Array:
        use_dropout = training and dropout_rate > 0
        if use_dropout and rng is None:
            raise ValueError("Dropout during training requires a random generator")
        current = np.asarray(inputs, dtype=np.float64).reshape(-1)
        last = len(self.layers) - 1
        for idx, layer in enumerate(self.layers):
            current = layer.forward(current)
            mask = None
            if use_dropout and idx < last:
                current, mask = apply_dropout(current, dropout_rate, rng)
            self._dropout_masks[idx] = mask
        return current

    def backward(self, error: Array, optimizer: Optimizer) -> Array:
        """Backpropagate ``error`` (``target - output``) and update every layer.

        Each layer's gradients are computed before its parameters change and
        handed to ``optimizer`` straight away.  Returns the error at the input.
        """

        current = np.asarray(error, dtype=np.float64).reshape(-1)
        for idx in reversed(range(len(self.layers))):
            layer = self.layers[idx]
            grads = layer.compute_gradients(current)
            optimizer.step(idx, layer, grads)
            current = grads.input_error
            if idx > 0 and self._dropout_masks[idx - 1] is not None:
                current = current * self._dropout_masks[idx - 1]
        return current


__all__ = ["Network", "apply_dropout", "determine_output_size"]
