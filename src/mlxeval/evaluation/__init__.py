"""
mlxeval Evaluation

Orchestration of single-split, cross-validation and pre-loaded-model
evaluation, together with the components it is built from:

- tester.py: leakage-free prediction of a test set
- splitter.py / folds.py: train/test partitions
- combiner.py: merging of per-fold results
- thresholds.py: fixed and proportional-cut thresholds
- metrics.py: default statistics
- result.py: RawResult -> ThresholdedResult -> FinalReport
"""

from .result import RawResult, ThresholdedResult, FinalReport
from .tester import predict_dataset, mask_labels, select_prediction
from .splitter import Split, split_dataset, n_train_instances
from .folds import Fold, FoldRun, fold_indices, make_folds, run_folds
from .combiner import combine_results
from .thresholds import (
    ThresholdSpec,
    ThresholdCalibrator,
    ProportionalCutCalibrator,
    parse_threshold,
    dispatch_threshold,
    cv_threshold,
    format_threshold,
    proportional_cut
)
from .metrics import MetricsEngine, StandardMetrics, finalize
from .runner import evaluate_raw
from .engine import (
    ExperimentOutcome,
    evaluate_model,
    evaluate_built,
    cross_validate,
    fold_report,
    run_experiment,
    summarize,
    write_predictions,
    write_cv_outputs
)

__all__ = [
    # Results
    "RawResult",
    "ThresholdedResult",
    "FinalReport",
    # Tester
    "predict_dataset",
    "mask_labels",
    "select_prediction",
    # Splitting
    "Split",
    "split_dataset",
    "n_train_instances",
    "Fold",
    "FoldRun",
    "fold_indices",
    "make_folds",
    "run_folds",
    "combine_results",
    # Thresholds
    "ThresholdSpec",
    "ThresholdCalibrator",
    "ProportionalCutCalibrator",
    "parse_threshold",
    "dispatch_threshold",
    "cv_threshold",
    "format_threshold",
    "proportional_cut",
    # Metrics
    "MetricsEngine",
    "StandardMetrics",
    "finalize",
    # Orchestration
    "evaluate_raw",
    "ExperimentOutcome",
    "evaluate_model",
    "evaluate_built",
    "cross_validate",
    "fold_report",
    "run_experiment",
    "summarize",
    "write_predictions",
    "write_cv_outputs",
]
