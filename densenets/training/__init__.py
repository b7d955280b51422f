"""Training loop, configuration, losses and evaluation."""

from .config import TrainingConfig, load_config_file, merge_options
from .evaluation import Evaluator, Prediction, format_report
from .metrics import ModelMetrics
from .trainer import Trainer, early_stop_triggered

__all__ = [
    "Evaluator",
    "ModelMetrics",
    "Prediction",
    "Trainer",
    "TrainingConfig",
    "early_stop_triggered",
    "format_report",
    "load_config_file",
    "merge_options",
]
