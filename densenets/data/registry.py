"""Named dataset factories for the command line and tests."""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from .dataset import Dataset

DatasetFactory = Callable[..., Dataset]


class DatasetRegistry:
    """Map of dataset names to factories returning :class:`Dataset` objects."""

    def __init__(self) -> None:
        self._factories: Dict[str, DatasetFactory] = {}

    def register(self, name: str) -> Callable[[DatasetFactory], DatasetFactory]:
        def _decorator(factory: DatasetFactory) -> DatasetFactory:
            if name in self._factories:
                raise ValueError(f"Dataset {name!r} is already registered")
            self._factories[name] = factory
            return factory

        return _decorator

    def names(self) -> List[str]:
        return sorted(self._factories)

    def build(self, name: str, **options: Any) -> Dataset:
        try:
            factory = self._factories[name]
        except KeyError as exc:
            available = ", ".join(self.names())
            raise KeyError(f"Unknown dataset {name!r}. Available datasets: {available}") from exc
        return factory(**options)


REGISTRY = DatasetRegistry()


def register_dataset(name: str) -> Callable[[DatasetFactory], DatasetFactory]:
    """Decorator registering a factory under ``name`` in the default registry."""

    return REGISTRY.register(name)


def get_dataset(name: str, /, **options: Any) -> Dataset:
    return REGISTRY.build(name, **options)


def available_datasets() -> List[str]:
    return REGISTRY.names()


__all__ = [
    "DatasetRegistry",
    "REGISTRY",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
