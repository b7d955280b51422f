"""Generic CSV loader for regression and classification tasks."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.preprocessing import LabelEncoder

from .dataset import Dataset, TaskType, from_arrays
from .registry import register_dataset


@register_dataset("csv")
def load_csv_dataset(
    *,
    csv_path: str | Path,
    target_col: str | None = "target",
    task_type: TaskType | str = TaskType.REGRESSION,
) -> Dataset:
    """Load a CSV file whose numeric columns are features.

    ``target_col`` may be ``None`` (or absent from the file) for prediction
    inputs.  Classification targets are label-encoded to class indices in
    sorted label order; the mapping is kept under ``metadata["classes"]``.
    """

    path = Path(csv_path)
    df = pd.read_csv(path)
    task = TaskType.parse(task_type)
    targets = None
    classes: list[object] = []
    if target_col is not None and target_col in df.columns:
        raw = df.pop(target_col)
        if task is TaskType.CLASSIFICATION:
            encoder = LabelEncoder()
            targets = encoder.fit_transform(raw.to_numpy()).astype(np.int64)
            classes = encoder.classes_.tolist()
        else:
            targets = raw.to_numpy(dtype=np.float64)
    features = df.select_dtypes(include="number")
    dataset = from_arrays(
        features.to_numpy(dtype=np.float64),
        targets,
        task_type=task,
        feature_names=[str(col) for col in features.columns],
        dataset_id=path.stem,
    )
    dataset.metadata["source"] = str(path)
    if classes:
        dataset.metadata["classes"] = classes
    return dataset


__all__ = ["load_csv_dataset"]
