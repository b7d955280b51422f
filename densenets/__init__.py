"""densenets public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.activations import Activation
from .core.errors import (
    ConcurrentTrainingError,
    DenseNetError,
    DimensionMismatchError,
    EmptyDatasetError,
    InvalidHyperparameterError,
)
from .core.layers import Layer
from .core.network import Network
from .data import DataPoint, Dataset, TaskType
from .engine import EvaluationResult, NeuralNetworkModel, PredictionResult, TrainingResult
from .training.config import TrainingConfig
from .training.trainer import Trainer

__all__ = [
    "Activation",
    "ConcurrentTrainingError",
    "DataPoint",
    "Dataset",
    "DenseNetError",
    "DimensionMismatchError",
    "EmptyDatasetError",
    "EvaluationResult",
    "InvalidHyperparameterError",
    "Layer",
    "Network",
    "NeuralNetworkModel",
    "PredictionResult",
    "TaskType",
    "Trainer",
    "TrainingConfig",
    "TrainingResult",
    "activations",
    "types",
]
