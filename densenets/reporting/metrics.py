"""Per-epoch metric sinks usable as trainer callbacks."""

from __future__ import annotations

import csv
import json
import subprocess
from pathlib import Path
from typing import Any, Dict, Mapping


def _git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


class EpochSink:
    """Base sink: truncates ``path`` on creation and appends one record per epoch.

    Non-numeric metric values are dropped so every record keeps a flat,
    numeric schema.
    """

    def __init__(self, path: str | Path, *, split: str = "train") -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split
        self.records_written = 0

    def record(self, epoch: int, metrics: Mapping[str, Any]) -> Dict[str, Any]:
        row: Dict[str, Any] = {"epoch": int(epoch), "split": self.split}
        for key, value in metrics.items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                row[key] = float(value)
        return row

    def on_epoch(self, epoch: int, metrics: Mapping[str, Any]) -> None:
        self._append(self.record(epoch, metrics))
        self.records_written += 1

    def __call__(self, epoch: int, metrics: Mapping[str, Any]) -> None:
        self.on_epoch(epoch, metrics)

    def _append(self, row: Dict[str, Any]) -> None:
        raise NotImplementedError


class JsonlSink(EpochSink):
    """JSON-lines sink tagging each epoch with the run seed and git SHA."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "train",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        super().__init__(path, split=split)
        self.seed = seed
        self.sha = sha or _git_sha()

    def record(self, epoch: int, metrics: Mapping[str, Any]) -> Dict[str, Any]:
        row = super().record(epoch, metrics)
        row["seed"] = self.seed
        row["sha"] = self.sha
        return row

    def _append(self, row: Dict[str, Any]) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(row) + "\n")


class CsvSink(EpochSink):
    """CSV sink; the header is fixed by the first epoch's columns."""

    def __init__(self, path: str | Path, *, split: str = "train") -> None:
        super().__init__(path, split=split)
        self._fieldnames: list[str] | None = None

    def _append(self, row: Dict[str, Any]) -> None:
        if self._fieldnames is None:
            self._fieldnames = sorted(row)
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self._fieldnames, extrasaction="ignore")
            if self.records_written == 0:
                writer.writeheader()
            writer.writerow(row)


__all__ = ["CsvSink", "EpochSink", "JsonlSink"]
