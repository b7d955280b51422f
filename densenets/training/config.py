"""Training configuration: defaults, validation and file loading."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping

from ..core.activations import Activation
from ..core.errors import InvalidHyperparameterError
from .losses import REGISTRY as LOSS_REGISTRY


@dataclass(frozen=True)
class TrainingConfig:
    """Recognised training options and their defaults."""

    learning_rate: float = 0.001
    epochs: int = 100
    batch_size: int = 32
    activation: Activation = Activation.RELU
    dropout_rate: float = 0.2
    hidden_layers: List[int] = field(default_factory=lambda: [64, 32])
    seed: int | None = None
    optimizer: str = "sgd"
    momentum: float = 0.9
    loss: str = "mse"
    log_every: int = 10

    def __post_init__(self) -> None:
        object.__setattr__(self, "activation", Activation.parse(self.activation))
        if not isinstance(self.hidden_layers, (list, tuple)):
            raise InvalidHyperparameterError(
                "Parameter validation failed: hidden_layers must be a list of "
                f"positive integers, got {self.hidden_layers!r}"
            )
        object.__setattr__(self, "hidden_layers", list(self.hidden_layers))
        object.__setattr__(self, "optimizer", str(self.optimizer).lower())
        self.validate()

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None = None) -> TrainingConfig:
        options = dict(options or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise InvalidHyperparameterError(
                f"Unknown training options: {', '.join(unknown)}"
            )
        return cls(**options)

    def validate(self) -> None:
        issues: List[str] = []
        if not _is_number(self.learning_rate) or not 0 < self.learning_rate <= 1:
            issues.append("learning_rate must be in (0, 1]")
        if not _is_int(self.epochs) or self.epochs <= 0:
            issues.append("epochs must be a positive integer")
        if not _is_int(self.batch_size) or self.batch_size <= 0:
            issues.append("batch_size must be a positive integer")
        if not _is_number(self.dropout_rate) or not 0 <= self.dropout_rate < 1:
            issues.append("dropout_rate must be in [0, 1)")
        if not all(_is_int(width) and width > 0 for width in self.hidden_layers):
            issues.append("hidden_layers must contain only positive integers")
        if self.seed is not None and not _is_int(self.seed):
            issues.append("seed must be an integer or null")
        if self.optimizer not in {"sgd", "momentum", "adam"}:
            issues.append("optimizer must be one of sgd, momentum, adam")
        if self.loss not in LOSS_REGISTRY.names():
            issues.append(f"loss must be one of {', '.join(LOSS_REGISTRY.names())}")
        if not _is_number(self.momentum) or not 0 <= self.momentum < 1:
            issues.append("momentum must be in [0, 1)")
        if not _is_int(self.log_every) or self.log_every <= 0:
            issues.append("log_every must be a positive integer")
        if issues:
            raise InvalidHyperparameterError(
                "Parameter validation failed: " + ", ".join(issues)
            )

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["activation"] = self.activation.value
        return payload


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def load_config_file(path: str | Path) -> Dict[str, Any]:
    """Read a JSON or YAML mapping of training options."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")
    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return dict(data)


def merge_options(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_options(merged[key], value)
        else:
            merged[key] = value
    return merged


__all__ = ["TrainingConfig", "load_config_file", "merge_options"]
