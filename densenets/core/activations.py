"""Activation utilities for densenets."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict

import numpy as np

from .errors import InvalidHyperparameterError
from .types import Array


class Activation(str, Enum):
    """Closed set of elementwise activations a layer can use."""

    LINEAR = "LINEAR"
    SIGMOID = "SIGMOID"
    RELU = "RELU"
    TANH = "TANH"

    @classmethod
    def parse(cls, value: Activation | str) -> Activation:
        if isinstance(value, Activation):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            choices = ", ".join(member.value for member in cls)
            raise InvalidHyperparameterError(
                f"Unknown activation {value!r}. Expected one of: {choices}"
            ) from exc


def linear(x: Array) -> Array:
    return np.asarray(x, dtype=np.float64)


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid without overflowing for large ``|x|``."""

    return 0.5 * (1.0 + np.tanh(0.5 * x))


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(x, 0.0)


def tanh(x: Array) -> Array:
    return np.tanh(x)


# Derivatives are expressed in terms of the activation output ``y``.


def _linear_deriv(y: Array) -> Array:
    return np.ones_like(y)


def _sigmoid_deriv(y: Array) -> Array:
    return y * (1.0 - y)


def _relu_deriv(y: Array) -> Array:
    return (y > 0).astype(np.float64)


def _tanh_deriv(y: Array) -> Array:
    return 1.0 - y * y


_FORWARD: Dict[Activation, Callable[[Array], Array]] = {
    Activation.LINEAR: linear,
    Activation.SIGMOID: sigmoid,
    Activation.RELU: relu,
    Activation.TANH: tanh,
}

_DERIVATIVE: Dict[Activation, Callable[[Array], Array]] = {
    Activation.LINEAR: _linear_deriv,
    Activation.SIGMOID: _sigmoid_deriv,
    Activation.RELU: _relu_deriv,
    Activation.TANH: _tanh_deriv,
}


def activate(activation: Activation, x: Array) -> Array:
    return _FORWARD[activation](x)


def derivative_at_output(activation: Activation, y: Array) -> Array:
    """Return ``d act / d z`` evaluated from the activation output ``y``."""

    return _DERIVATIVE[activation](y)


__all__ = [
    "Activation",
    "activate",
    "derivative_at_output",
    "linear",
    "relu",
    "sigmoid",
    "tanh",
]
