#!/usr/bin/env python
"""
Run partition / cross-validation / thresholdout for a set of models.

Steps:
- Load a dataset (synthetic GMM data by default, or a CSV)
- Split once into K CV folds plus a protected holdout fold
- Cross-validate every configured model on the same replicates
- Refit each model on all CV rows and release its generalization error
  through thresholdout

Usage:
    python scripts/run_experiment.py
    python scripts/run_experiment.py --seed 1 --n-folds 5
    python scripts/run_experiment.py --csv data/train.csv --label-col target
    python scripts/run_experiment.py --config configs/experiment.yaml

Results saved to experiments/experiment_{timestamp}/.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import pandas as pd

from reusable_holdout.config import ExperimentConfig
from reusable_holdout.data.dataset import Dataset
from reusable_holdout.evaluation.thresholdout import ReleaseLog
from reusable_holdout.experiments.runner import build_models, run_experiment
from reusable_holdout.io.synthetic_generator import generate_dataset

logger = logging.getLogger("run_experiment")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="K-fold CV with a thresholdout-protected holdout fold"
    )
    parser.add_argument("--config", type=Path, default=None,
                        help="Experiment YAML (default: configs/experiment.yaml)")
    parser.add_argument("--csv", type=Path, default=None,
                        help="Labeled CSV to use instead of synthetic data")
    parser.add_argument("--label-col", type=str, default="y",
                        help="Label column of --csv")
    parser.add_argument("--seed", type=int, default=None,
                        help="Override partition and thresholdout seeds")
    parser.add_argument("--n-folds", type=int, default=None,
                        help="Override number of CV folds K")
    parser.add_argument("--models", nargs="+", default=None,
                        help="Override models to run")
    parser.add_argument("--output-dir", type=Path, default=PROJECT_ROOT / "experiments",
                        help="Parent directory for results")
    parser.add_argument("--no-progress", action="store_true",
                        help="Disable progress bars")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log per-replicate errors")
    return parser.parse_args()


def load_config(args: argparse.Namespace) -> ExperimentConfig:
    """Load YAML config and apply command line overrides."""
    cfg = ExperimentConfig.from_yaml(args.config)

    data = cfg.model_dump()
    if args.seed is not None:
        data["partition"]["random_seed"] = args.seed
        data["thresholdout"]["random_seed"] = args.seed
    if args.n_folds is not None:
        data["partition"]["n_folds"] = args.n_folds
    if args.models is not None:
        data["models"] = args.models

    # Rebuild so overrides go through validation
    return ExperimentConfig(**data)


def load_dataset(args: argparse.Namespace, cfg: ExperimentConfig) -> Dataset:
    if args.csv is not None:
        logger.info(f"Loading {args.csv}")
        return Dataset.from_frame(pd.read_csv(args.csv), label_col=args.label_col)
    logger.info(f"Generating {cfg.synthetic_data.n_samples} synthetic rows")
    return generate_dataset(cfg.synthetic_data)


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_config(args)
    dataset = load_dataset(args, cfg)
    models = build_models(cfg.models, cfg)
    release_log = ReleaseLog()

    result = run_experiment(
        dataset,
        models,
        cfg=cfg,
        observers=[release_log],
        show_progress=not args.no_progress,
    )

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = args.output_dir / f"experiment_{timestamp}"
    output_dir.mkdir(parents=True, exist_ok=True)

    summary = pd.DataFrame([row.to_dict() for row in result.rows])
    summary.to_csv(output_dir / "summary.csv", index=False)

    with open(output_dir / "results.json", "w") as f:
        json.dump({
            "config": cfg.model_dump(),
            "n_rows": dataset.n_rows,
            "fold_sizes": result.fold_sizes,
            "rows": [row.to_dict() for row in result.rows],
            "cv": {k: v.to_dict() for k, v in result.cv_results.items()},
            "n_noised_releases": release_log.n_noised,
        }, f, indent=2)

    print(summary[["model_id", "train_err", "test_err", "final_err", "out_err", "branch"]]
          .to_string(index=False))
    print(f"\nResults saved to {output_dir}")


if __name__ == "__main__":
    main()
