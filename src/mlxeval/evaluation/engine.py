"""
Evaluation Engine: orchestration of training, testing, cross-validation
and threshold calibration.

Three modes, in order of precedence:

1. Pre-loaded model: a persisted classifier is only tested
2. Cross-validation: K folds are built and tested one after another, their
   raw results combined, then thresholded and scored once
3. Single split: a separate test file, or a percentage / count split of the
   training data (optionally inverted)

Pipeline per evaluation:
    Dataset -> split/folds -> build -> test -> RawResult
            -> threshold dispatch -> ThresholdedResult
            -> metrics -> FinalReport

`run_experiment` is the top-level driver. It never raises for failed
runs: the error is returned in ExperimentOutcome and the caller decides
whether to terminate.
"""

import logging
import time
import warnings
import numpy as np
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..classifiers.base import Classifier, is_multi_target
from ..config import EvaluationConfig
from ..data.dataset import Dataset
from ..data.io import load_dataset, save_dataset, save_predictions
from ..exceptions import ConfigurationError, DataError
from ..persistence import dump_model, load_model
from . import result as R
from .combiner import combine_results
from .folds import FoldRun, run_folds
from .metrics import MetricsEngine, finalize
from .result import FinalReport, RawResult, ThresholdedResult
from .runner import describe_classifier, evaluate_raw
from .splitter import Split, split_dataset
from .tester import predict_dataset
from .thresholds import (
    PCUT1,
    ThresholdCalibrator,
    ThresholdLike,
    cv_threshold,
    dispatch_threshold,
    parse_threshold
)

logger = logging.getLogger(__name__)


def result_type(classifier: Classifier, data: Dataset, cross_validation: bool = False) -> str:
    """Type tag: ML / MT, with a -CV suffix for combined cross-validation results."""
    multi_target = is_multi_target(classifier) or data.is_multi_target()
    if cross_validation:
        return R.TYPE_MT_CV if multi_target else R.TYPE_ML_CV
    return R.TYPE_MT if multi_target else R.TYPE_ML


def _require_labels(dataset: Dataset):
    if dataset.n_labels <= 0:
        raise ConfigurationError(
            "Number of labels not specified. You must set the number of labels, "
            "either in the dataset file name (n_labels=<L>) or on the command line (-C <L>)."
        )


def evaluate_model(
    classifier: Classifier,
    train: Dataset,
    test: Dataset,
    threshold: ThresholdLike = PCUT1,
    verbosity: int = 1,
    batched: bool = False,
    calibrator: Optional[ThresholdCalibrator] = None,
    metrics: Optional[MetricsEngine] = None
) -> FinalReport:
    """
    Build `classifier` on `train`, test it on `test`, threshold and score.

    Parameters:
        classifier: Classifier to build (mutated in place)
        train: Training data (also the reference for PCut calibration)
        test: Test data
        threshold: 'PCut1', 'PCutL' or a number
        verbosity: Metrics verbosity
        batched: Use batch prediction where supported
        calibrator: Threshold calibrator (defaults to proportional cut)
        metrics: Metrics engine (defaults to StandardMetrics)

    Returns:
        FinalReport

    Example:
        >>> report = evaluate_model(h, train, test, threshold="PCut1")
        >>> print(report)
    """
    _require_labels(train)
    raw = evaluate_raw(classifier, train, test, batched=batched)
    raw = raw.with_info({R.TYPE: result_type(classifier, test), R.VERBOSITY: verbosity})
    thresholded = dispatch_threshold(raw, threshold, train=train, calibrator=calibrator)
    return finalize(thresholded, verbosity, metrics)


def evaluate_built(
    classifier: Classifier,
    test: Dataset,
    threshold: ThresholdLike,
    verbosity: int = 1,
    batched: bool = False,
    train: Optional[Dataset] = None,
    calibrator: Optional[ThresholdCalibrator] = None,
    metrics: Optional[MetricsEngine] = None
) -> FinalReport:
    """
    Test an already-built classifier on `test`, threshold and score.

    Parameters:
        classifier: Built classifier (e.g. loaded from a model bundle)
        test: Test data
        threshold: A number or per-label vector; 'PCut1' / 'PCutL' are
                   accepted when `train` is supplied for calibration
        train: Reference data for threshold calibration (optional)
    """
    _require_labels(test)
    before = time.perf_counter()
    raw = predict_dataset(classifier, test, batched=batched)
    after = time.perf_counter()

    raw = raw.with_values({
        R.N_TEST: test.n_instances,
        R.LCARD_TEST: test.label_cardinality(),
        R.TEST_TIME: after - before,
    }).with_info(describe_classifier(classifier, test)).with_info({
        R.TYPE: result_type(classifier, test),
        R.VERBOSITY: verbosity,
    })
    thresholded = dispatch_threshold(raw, threshold, train=train, calibrator=calibrator)
    return finalize(thresholded, verbosity, metrics)


def cross_validate(
    classifier: Classifier,
    dataset: Dataset,
    n_folds: int = 10,
    threshold: ThresholdLike = PCUT1,
    verbosity: int = 1,
    batched: bool = False,
    per_fold: Optional[Dict[int, FoldRun]] = None,
    metrics: Optional[MetricsEngine] = None
) -> FinalReport:
    """
    K-fold cross-validation.

    Folds are built and tested in increasing index; their raw results are
    combined in fold order and then thresholded and scored once. Only
    numeric thresholds are honoured (anything else warns and uses 0.5).

    The training and test instance counts of the combined report are both
    set to the full dataset size, as in earlier report formats; the fold
    count is recorded alongside.

    Parameters:
        classifier: Classifier rebuilt on every fold
        dataset: Full dataset
        n_folds: Number of folds K
        per_fold: If given, receives index -> FoldRun for every fold

    Returns:
        FinalReport over all N instances
    """
    _require_labels(dataset)
    runs = run_folds(classifier, dataset, n_folds, batched=batched, per_fold=per_fold)
    raw = combine_results([run.result for run in runs])
    raw = raw.with_info({
        R.TYPE: result_type(classifier, dataset, cross_validation=True),
        R.VERBOSITY: verbosity,
    })

    if raw.is_multi_target():
        thresholded = ThresholdedResult(raw, None)
    else:
        thresholded = dispatch_threshold(raw, cv_threshold(threshold))

    report = finalize(thresholded, verbosity, metrics)
    return report.with_values({
        R.N_TRAIN: dataset.n_instances,
        R.N_TEST: dataset.n_instances,
        R.N_FOLDS: n_folds,
    })


def fold_report(
    run: FoldRun,
    threshold: Optional[float],
    verbosity: int = 1,
    metrics: Optional[MetricsEngine] = None
) -> FinalReport:
    """
    Score a single fold's raw result with the threshold of the combined
    result (None for multi-target results).
    """
    raw = run.result.with_info({
        R.TYPE: R.TYPE_MT if threshold is None else R.TYPE_ML,
        R.VERBOSITY: verbosity,
    })
    if threshold is None:
        return finalize(ThresholdedResult(raw, None), verbosity, metrics)
    return finalize(dispatch_threshold(raw, threshold), verbosity, metrics)


@dataclass
class ExperimentOutcome:
    """
    Result-or-error of `run_experiment`.

    Attributes:
        report: Final report (None when evaluation was skipped or failed)
        error: The exception that ended the run, if any
        classifier: The classifier that was built or loaded
        fold_runs: Per-fold runs (cross-validation only)
        predictions_path: Predicted test set written, if any
        model_path: Model bundle written, if any
    """
    report: Optional[FinalReport] = None
    error: Optional[Exception] = None
    classifier: Optional[Classifier] = None
    fold_runs: List[FoldRun] = field(default_factory=list)
    predictions_path: Optional[Path] = None
    model_path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _train_test(train: Dataset, config: EvaluationConfig) -> Split:
    if config.test_path:
        try:
            test = load_dataset(config.test_path, n_labels=train.n_labels, reference=train)
        except DataError as e:
            raise DataError(f"Failed to load test instances from file '{config.test_path}'", e.details) from e
        if config.invert_split:
            train, test = test, train
        if train.n_instances == 0 or test.n_instances == 0:
            return Split(train=train, test=test.header(), evaluate=False)
        return Split(train=train, test=test)
    return split_dataset(
        train,
        percentage=config.split_percentage,
        number=config.split_number,
        invert=config.invert_split
    )


def _log_split(split: Split):
    train, test = split.train, split.test
    logger.info(
        f":- Dataset -: {train.name}\tL={train.n_labels}"
        f"\tD(t:T)=({train.n_instances}:{test.n_instances})"
        f"\tLC(t:T)={train.label_cardinality():.2f}:{test.label_cardinality():.2f}"
    )


def write_predictions(
    classifier: Classifier,
    test: Dataset,
    path: Path,
    raw: Optional[RawResult] = None,
    batched: bool = False
) -> Path:
    """
    Write `test` with its label fields replaced by rounded predictions.

    Multi-label scores round to 0/1; multi-target predictions are already
    class indices.
    """
    if raw is None:
        raw = predict_dataset(classifier, test, batched=batched)
    X = test.X.copy()
    X[:, :test.n_labels] = np.rint(raw.predictions)
    predicted = Dataset(
        X, test.n_labels, name=test.name, attribute_names=test.attribute_names, categories=test.categories
    )
    p = save_dataset(predicted, path)
    logger.info(f"Predictions saved to: {p}")
    return p


def summarize(report: FinalReport, n_stats: int = 3) -> str:
    """One-line summary of a report for the progress log."""
    stats = "\t".join(f"{name}={value:.3f}" for name, value in list(report.stats.items())[:n_stats])
    return (
        f":- Result -: {report.info.get(R.DATASET, '?')}\t{report.info.get(R.TYPE, '?')}"
        f"\tN={report.raw.n_instances}\t{stats}"
    )


def _check_output_dir(path) -> Path:
    out_dir = Path(path)
    if not out_dir.exists():
        raise ConfigurationError(f"Cross-validation output directory does not exist: {out_dir}")
    if not out_dir.is_dir():
        raise ConfigurationError(f"Cross-validation output directory does not point to a directory: {out_dir}")
    return out_dir


def write_cv_outputs(
    out_dir: Path,
    report: FinalReport,
    runs: List[FoldRun],
    verbosity: int = 1,
    metrics: Optional[MetricsEngine] = None
):
    """
    Write the combined report and, per fold, train set, test set,
    prediction set and fold report into `out_dir`.
    """
    report.write(out_dir / "results-cv.txt")
    for run in runs:
        i = run.index
        labels = run.test.attribute_names[:run.test.n_labels]
        save_dataset(run.train, out_dir / f"train-{i}.csv")
        save_dataset(run.test, out_dir / f"test-{i}.csv")
        save_predictions(run.result.predictions_frame(labels), out_dir / f"predictions-{i}.csv")
        fold_report(run, report.result.threshold, verbosity, metrics).write(out_dir / f"results-{i}.txt")
    logger.info(f"Cross-validation output written to: {out_dir}")


def _run_preloaded(
    classifier: Classifier,
    header: Optional[Dataset],
    data: Dataset,
    config: EvaluationConfig,
    calibrator: Optional[ThresholdCalibrator],
    metrics: Optional[MetricsEngine]
) -> Tuple[Optional[FinalReport], Split]:
    split = _train_test(data, config)
    if header is not None and header.n_labels != split.test.n_labels:
        raise DataError(
            f"Model was trained on {header.n_labels} labels, test data has {split.test.n_labels}"
        )
    if config.no_eval:
        logger.info("Evaluation suppressed; model loaded but not tested")
        return None, split
    if not split.evaluate:
        logger.warning("No test instances available for the loaded model")
        return None, split

    _log_split(split)
    report = evaluate_built(
        classifier,
        split.test,
        parse_threshold(config.threshold),
        verbosity=config.verbosity,
        batched=config.batched,
        train=split.train,
        calibrator=calibrator,
        metrics=metrics
    )
    return report, split


def _run_cv(
    classifier: Classifier,
    data: Dataset,
    config: EvaluationConfig,
    metrics: Optional[MetricsEngine]
) -> Tuple[FinalReport, List[FoldRun]]:
    if config.predictions_path:
        message = "Predictions cannot be saved when using cross-validation!"
        logger.warning(message)
        warnings.warn(message, RuntimeWarning)

    out_dir = _check_output_dir(config.cv_output_dir) if config.cv_output_dir else None
    per_fold: Dict[int, FoldRun] = {}
    report = cross_validate(
        classifier,
        data,
        n_folds=config.n_folds,
        threshold=config.threshold,
        verbosity=config.verbosity,
        batched=config.batched,
        per_fold=per_fold,
        metrics=metrics
    )
    runs = [per_fold[i] for i in sorted(per_fold)]
    if out_dir is not None:
        write_cv_outputs(out_dir, report, runs, config.verbosity, metrics)
    return report, runs


def _run_split(
    classifier: Classifier,
    data: Dataset,
    config: EvaluationConfig,
    calibrator: Optional[ThresholdCalibrator],
    metrics: Optional[MetricsEngine]
) -> Tuple[Optional[FinalReport], Split]:
    split = _train_test(data, config)
    _log_split(split)

    report = None
    if split.evaluate and not config.no_eval:
        report = evaluate_model(
            classifier,
            split.train,
            split.test,
            threshold=config.threshold,
            verbosity=config.verbosity,
            batched=config.batched,
            calibrator=calibrator,
            metrics=metrics
        )
    else:
        # either evaluation is suppressed, or the split was degenerate and
        # split.train is the full dataset
        classifier.build(split.train)
    return report, split


def _run(
    classifier: Optional[Classifier],
    config: EvaluationConfig,
    calibrator: Optional[ThresholdCalibrator],
    metrics: Optional[MetricsEngine],
    outcome: ExperimentOutcome
) -> ExperimentOutcome:
    header = None
    if config.load_model:
        classifier, header = load_model(config.load_model)
    elif classifier is None:
        raise ConfigurationError("No classifier given and no model to load")
    outcome.classifier = classifier

    logger.info("Loading and preparing dataset ...")
    data = load_dataset(config.train_path, n_labels=config.n_labels, reference=header)
    _require_labels(data)
    if config.randomize:
        data = data.shuffled(config.seed)

    split = None
    if config.load_model:
        outcome.report, split = _run_preloaded(classifier, header, data, config, calibrator, metrics)
        trained_on = header if header is not None else split.train
    elif config.cross_validation:
        outcome.report, outcome.fold_runs = _run_cv(classifier, data, config, metrics)
        trained_on = data
    else:
        outcome.report, split = _run_split(classifier, data, config, calibrator, metrics)
        trained_on = split.train

    if config.predictions_path and split is not None:
        if split.test.n_instances == 0:
            logger.warning("No test instances; predictions file not written")
        else:
            raw = outcome.report.raw if outcome.report is not None else None
            outcome.predictions_path = write_predictions(
                classifier, split.test, Path(config.predictions_path), raw=raw, batched=config.batched
            )

    if outcome.report is not None:
        logger.info(summarize(outcome.report))

    if config.dump_model:
        outcome.model_path = dump_model(config.dump_model, classifier, trained_on)
    return outcome


def run_experiment(
    classifier: Optional[Classifier],
    config: EvaluationConfig,
    calibrator: Optional[ThresholdCalibrator] = None,
    metrics: Optional[MetricsEngine] = None
) -> ExperimentOutcome:
    """
    Run a complete experiment described by `config`.

    Parameters:
        classifier: Classifier to evaluate; may be None when
                    `config.load_model` names a model bundle
        config: Run options
        calibrator: Threshold calibrator (defaults to proportional cut)
        metrics: Metrics engine (defaults to StandardMetrics)

    Returns:
        ExperimentOutcome; `outcome.error` holds the exception of a failed
        run (configuration, data or classifier error), nothing is raised
    """
    outcome = ExperimentOutcome(classifier=classifier)
    try:
        return _run(classifier, config, calibrator, metrics, outcome)
    except Exception as e:
        logger.exception(f"Experiment failed: {e}")
        outcome.error = e
        return outcome
