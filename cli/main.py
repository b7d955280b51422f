"""Command line entry point for densenets training runs."""

from __future__ import annotations

import argparse
import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Dict, Iterable, Mapping, Sequence

from densenets.data import available_datasets, get_dataset
from densenets.engine import NeuralNetworkModel, TrainingResult
from densenets.reporting import CsvSink, JsonlSink, LossCurvePlotter
from densenets.training.config import TrainingConfig, load_config_file, merge_options

_PRESETS: Dict[str, Mapping[str, object]] = {
    "sum-regression": {
        "data": {"name": "sum", "options": {"n_samples": 4, "n_features": 2, "seed": 0}},
        "train": {
            "hidden_layers": [4],
            "epochs": 50,
            "learning_rate": 0.01,
            "batch_size": 2,
            "dropout_rate": 0.0,
            "seed": 0,
        },
        "run_dir": "runs/sum-regression",
    },
    "linear-regression": {
        "data": {"name": "linear", "options": {"n_samples": 32, "seed": 0}},
        "train": {
            "hidden_layers": [8],
            "activation": "TANH",
            "epochs": 60,
            "learning_rate": 0.05,
            "batch_size": 8,
            "dropout_rate": 0.0,
            "seed": 1,
        },
        "run_dir": "runs/linear-regression",
    },
    "blobs-classification": {
        "data": {"name": "blobs", "options": {"n_per_class": 20, "n_classes": 3, "seed": 0}},
        "train": {
            "hidden_layers": [16],
            "epochs": 40,
            "learning_rate": 0.1,
            "batch_size": 8,
            "dropout_rate": 0.1,
            "seed": 7,
        },
        "run_dir": "runs/blobs-classification",
    },
}


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=sorted(_PRESETS),
        default="sum-regression",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument(
        "--dataset",
        choices=sorted(available_datasets()),
        help="Override the dataset used by the run",
    )
    parser.add_argument("--csv-path", help="Path to a CSV file for the csv dataset")
    parser.add_argument("--target-col", default="target", help="Target column for CSV data")
    parser.add_argument(
        "--task",
        choices=["classification", "regression"],
        default="regression",
        help="Task type for CSV data",
    )
    parser.add_argument("--seed", type=int, help="Seed used for initialisation and shuffling")
    parser.add_argument("--epochs", type=int, help="Override the epoch budget")
    parser.add_argument("--run-dir", type=Path, help="Directory for metrics and plots")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write a loss curve to loss.png"
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("DENSENETS_LOG_LEVEL", "INFO"),
        help="Logging level for library messages",
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _resolve_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(presets()[args.preset]))
    if args.config:
        config = merge_options(config, load_config_file(args.config))
    if args.dataset:
        options: dict = {}
        if args.dataset == "csv":
            if not args.csv_path:
                raise SystemExit("--csv-path is required for the csv dataset")
            options = {
                "csv_path": args.csv_path,
                "target_col": args.target_col,
                "task_type": args.task,
            }
        config["data"] = {"name": args.dataset, "options": options}
    if args.seed is not None:
        config.setdefault("train", {})["seed"] = int(args.seed)
    if args.epochs is not None:
        config.setdefault("train", {})["epochs"] = int(args.epochs)
    if args.run_dir is not None:
        config["run_dir"] = str(args.run_dir)
    return config


def _print_startup_summary(
    *,
    dataset_name: str,
    n_samples: int,
    task_type: str,
    config: TrainingConfig,
) -> None:
    print("=== densenets run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Samples       : {n_samples}")
    print(f"Task          : {task_type}")
    print(f"Hidden layers : {config.hidden_layers}")
    print(f"Activation    : {config.activation.value}")
    print(f"Optimizer     : {config.optimizer}")
    print(f"Learning rate : {config.learning_rate}")
    print(f"Epochs        : {config.epochs}")
    print("=====================")


def _format_result(result: TrainingResult, run_dir: Path) -> str:
    payload = {
        "success": result.success,
        "message": result.message,
        "epochs_completed": result.epochs_completed,
        "converged": result.converged,
        "final_loss": result.final_loss,
        "layer_dims": result.training_data.get("layer_dims"),
        "metrics": str(run_dir / "metrics.jsonl"),
    }
    return json.dumps(payload, sort_keys=True)


def main(argv: Sequence[str] | None = None) -> TrainingResult:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(_PRESETS):
            print(name)
        raise SystemExit(0)

    _configure_logging(args.log_level)
    config = _resolve_config(args)
    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    data_cfg = dict(config["data"])
    dataset = get_dataset(data_cfg["name"], **data_cfg.get("options", {}))
    train_cfg = TrainingConfig.from_mapping(config.get("train", {}))
    run_dir = Path(config.get("run_dir", "runs/default"))

    _print_startup_summary(
        dataset_name=dataset.dataset_id,
        n_samples=len(dataset),
        task_type=dataset.task_type.value,
        config=train_cfg,
    )

    plots = LossCurvePlotter(run_dir, enable_plots=args.enable_plots)
    callbacks = [
        JsonlSink(run_dir / "metrics.jsonl", split="train", seed=train_cfg.seed),
        CsvSink(run_dir / "metrics.csv", split="train"),
        plots,
    ]

    model = NeuralNetworkModel(model_id=dataset.dataset_id)
    result = model.train(dataset, train_cfg, callbacks=callbacks)
    plots.close(stop_epoch=result.stop_epoch)
    print(_format_result(result, run_dir))
    if not result.success:
        raise SystemExit(result.message)

    evaluation = model.evaluate(dataset)
    evaluation.raise_for_error()
    (run_dir / "report.txt").write_text(evaluation.report)
    print(evaluation.report, end="")
    return result


if __name__ == "__main__":
    main()
