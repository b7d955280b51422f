"""Dense layer: affine map followed by an elementwise activation."""

from __future__ import annotations

import numpy as np

from .activations import Activation, activate, derivative_at_output
from .errors import DimensionMismatchError
from .types import Array, LayerGradients


class Layer:
    """Fully connected layer computing ``act(W @ x + b)`` for one sample.

    The layer caches the last input and the post-activation output so the
    backward pass can evaluate the activation derivative without recomputing
    the affine map.  Parameters are initialised once with Xavier/Glorot
    scaling ``sqrt(2 / (fan_in + fan_out))`` and mutated in place afterwards.
    """

    def __init__(
        self,
        input_dim: int,
        output_dim: int,
        activation: Activation | str,
        rng: np.random.Generator,
    ) -> None:
        if input_dim <= 0 or output_dim <= 0:
            raise DimensionMismatchError(
                f"Layer dimensions must be positive, got {input_dim}->{output_dim}"
            )
        self.input_dim = int(input_dim)
        self.output_dim = int(output_dim)
        self.activation = Activation.parse(activation)
        scale = np.sqrt(2.0 / (self.input_dim + self.output_dim))
        self.weights: Array = rng.standard_normal((self.output_dim, self.input_dim)) * scale
        self.biases: Array = np.zeros(self.output_dim, dtype=np.float64)
        self._last_input: Array | None = None
        self._last_output: Array | None = None

    def __repr__(self) -> str:
        return (
            f"Layer({self.input_dim}->{self.output_dim}, "
            f"activation={self.activation.value})"
        )

    @property
    def parameter_count(self) -> int:
        return self.output_dim * (self.input_dim + 1)

    def forward(self, inputs: Array) -> Array:
        x = np.asarray(inputs, dtype=np.float64).reshape(-1)
        if x.shape[0] != self.input_dim:
            raise DimensionMismatchError(
                f"Layer expects {self.input_dim} inputs, got {x.shape[0]}"
            )
        output = activate(self.activation, self.weights @ x + self.biases)
        self._last_input = x.copy()
        self._last_output = output.copy()
        return output

    def compute_gradients(self, error: Array) -> LayerGradients:
        """Return the update-direction gradients for ``error`` at the output.

        ``error`` is ``target - output`` style; the result does not touch the
        layer's parameters.
        """

        if self._last_input is None or self._last_output is None:
            raise RuntimeError("Layer.forward must run before computing gradients")
        err = np.asarray(error, dtype=np.float64).reshape(-1)
        if err.shape[0] != self.output_dim:
            raise DimensionMismatchError(
                f"Layer expects an error of length {self.output_dim}, got {err.shape[0]}"
            )
        delta = err * derivative_at_output(self.activation, self._last_output)
        return LayerGradients(
            weights=np.outer(delta, self._last_input),
            biases=delta,
            input_error=self.weights.T @ delta,
        )

    def apply_update(self, weight_step: Array, bias_step: Array) -> None:
        """Add ``weight_step`` and ``bias_step`` to the parameters in place."""

        self.weights += weight_step
        self.biases += bias_step

    def backward(self, error: Array, learning_rate: float) -> Array:
        """Compute gradients and immediately apply a plain SGD step.

        Returns the error propagated to the previous layer.
        """

        grads = self.compute_gradients(error)
        self.apply_update(learning_rate * grads.weights, learning_rate * grads.biases)
        return grads.input_error


__all__ = ["Layer"]
