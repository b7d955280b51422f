"""Dataset records, built-in datasets and loader helpers."""

# Ensure built-in datasets register themselves when the package is imported.
from . import csv_loader as _csv_loader  # noqa: F401
from . import synthetic as _synthetic  # noqa: F401
from .dataset import DataPoint, Dataset, TaskType, encode_features, encode_target, from_arrays
from .registry import available_datasets, get_dataset, register_dataset

__all__ = [
    "DataPoint",
    "Dataset",
    "TaskType",
    "available_datasets",
    "encode_features",
    "encode_target",
    "from_arrays",
    "get_dataset",
    "register_dataset",
]
