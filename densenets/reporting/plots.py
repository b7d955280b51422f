"""Loss-curve plotting for training runs."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping


class LossCurvePlotter:
    """Collect epoch losses and draw them once training finishes.

    The figure marks the best epoch loss and, when training stopped early,
    the epoch at which it stopped.  matplotlib is only imported when a plot
    is actually written, with the Agg backend so runs stay headless.
    """

    def __init__(self, run_dir: str | Path, enable_plots: bool = False) -> None:
        self.run_dir = Path(run_dir)
        self.enable_plots = enable_plots
        self.losses: List[float] = []

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if "loss" in metrics:
            self.losses.append(float(metrics["loss"]))

    def close(self, *, stop_epoch: int | None = None) -> Path | None:
        if not self.enable_plots or not self.losses:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt

        self.run_dir.mkdir(parents=True, exist_ok=True)
        fig, ax = plt.subplots()
        ax.plot(range(len(self.losses)), self.losses, label="epoch loss")
        ax.axhline(min(self.losses), linestyle="--", color="grey", label="best loss")
        if stop_epoch is not None:
            ax.axvline(stop_epoch, linestyle=":", color="red", label="early stop")
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Loss")
        ax.set_title("Training loss")
        ax.legend()
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path


__all__ = ["LossCurvePlotter"]
