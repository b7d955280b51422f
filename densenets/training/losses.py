"""Per-sample loss registry used by the training loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

import numpy as np

from ..core.errors import InvalidHyperparameterError
from ..core.types import Array

LossFn = Callable[[Array, Array], tuple[float, Array]]


@dataclass(frozen=True)
class Loss:
    """Loss wrapper returning the scalar loss and the output error signal.

    The error follows the ``target - output`` convention the layers expect.
    """

    name: str
    fn: LossFn

    def __call__(self, output: Array, target: Array) -> tuple[float, Array]:
        return self.fn(output, target)


class LossRegistry:
    """Central registry for loss functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, Loss] = {}

    def register(self, name: str, fn: LossFn) -> None:
        self._registry[name] = Loss(name, fn)

    def names(self) -> List[str]:
        return sorted(self._registry)

    def get(self, name: str) -> Loss:
        try:
            return self._registry[name]
        except KeyError as exc:
            available = ", ".join(self.names())
            raise InvalidHyperparameterError(
                f"Unknown loss {name!r}. Available losses: {available}"
            ) from exc


REGISTRY = LossRegistry()


def _mse(output: Array, target: Array) -> tuple[float, Array]:
    diff = target - output
    return float(np.mean(np.square(diff))), diff


def _mae(output: Array, target: Array) -> tuple[float, Array]:
    diff = target - output
    return float(np.mean(np.abs(diff))), np.sign(diff)


REGISTRY.register("mse", _mse)
REGISTRY.register("mae", _mae)


def mean_squared_error(output: Array, target: Array) -> float:
    return REGISTRY.get("mse")(output, target)[0]


__all__ = ["Loss", "LossRegistry", "REGISTRY", "mean_squared_error"]
