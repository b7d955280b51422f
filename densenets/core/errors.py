"""Exception taxonomy for the dense network engine."""

from __future__ import annotations


class DenseNetError(Exception):
    """Base class for every error raised by :mod:`densenets`."""


class EmptyDatasetError(DenseNetError):
    """Raised when a dataset carries no samples."""


class DimensionMismatchError(DenseNetError):
    """Raised when a vector length disagrees with the network shape."""


class InvalidHyperparameterError(DenseNetError, ValueError):
    """Raised when a training option is outside its accepted range."""


class ConcurrentTrainingError(DenseNetError, RuntimeError):
    """Raised when a second training run targets a model already training."""


__all__ = [
    "DenseNetError",
    "EmptyDatasetError",
    "DimensionMismatchError",
    "InvalidHyperparameterError",
    "ConcurrentTrainingError",
]
