"""
Result value pipeline.

An evaluation produces three successive immutable values:

    RawResult          (Tester)               raw scores + ground truth
    ThresholdedResult  (Threshold Dispatcher) RawResult + threshold
    FinalReport        (Metrics Engine)       ThresholdedResult + statistics

Each stage returns a new value; nothing is filled in place after
construction. Metadata lives in two string-keyed maps: `info` (classifier
identity, options, dataset name, type tag, threshold descriptor, verbosity)
and `values` (timings, counts, cardinalities).
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union

# Info keys
CLASSIFIER = "Classifier"
OPTIONS = "Options"
ADDITIONAL_INFO = "Additional Info"
DATASET = "Dataset"
N_LABELS = "Number of labels (L)"
TYPE = "Type"
THRESHOLD = "Threshold"
VERBOSITY = "Verbosity"

# Value keys
N_TRAIN = "Number of training instances"
N_TEST = "Number of test instances"
LCARD_TRAIN = "Label cardinality (train set)"
LCARD_TEST = "Label cardinality (test set)"
BUILD_TIME = "Build Time"
TEST_TIME = "Test Time"
TOTAL_TIME = "Total Time"
N_FOLDS = "Number of folds"

# Type tags
TYPE_ML = "ML"
TYPE_MT = "MT"
TYPE_ML_CV = "ML-CV"
TYPE_MT_CV = "MT-CV"


def _frozen_matrix(a: np.ndarray) -> np.ndarray:
    a = np.array(a, dtype=float, copy=True)
    a.setflags(write=False)
    return a


@dataclass(frozen=True, eq=False)
class RawResult:
    """
    Raw predictions of one test run (or of combined folds).

    Attributes:
        predictions: Score matrix (N × L); multi-target rows hold predicted indices
        actuals: Ground truth matrix (N × L)
        info: String metadata
        values: Numeric metadata
        model: Named model descriptions supplied by the classifier
    """
    predictions: np.ndarray
    actuals: np.ndarray
    info: Dict[str, str] = field(default_factory=dict)
    values: Dict[str, float] = field(default_factory=dict)
    model: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        predictions = _frozen_matrix(self.predictions)
        actuals = _frozen_matrix(self.actuals)
        if predictions.ndim != 2 or actuals.ndim != 2:
            raise ValueError(
                f"predictions and actuals must be 2D, got {predictions.shape} and {actuals.shape}"
            )
        if predictions.shape != actuals.shape:
            raise ValueError(
                f"predictions shape {predictions.shape} must match actuals shape {actuals.shape}"
            )
        object.__setattr__(self, "predictions", predictions)
        object.__setattr__(self, "actuals", actuals)
        object.__setattr__(self, "info", dict(self.info))
        object.__setattr__(self, "values", dict(self.values))
        object.__setattr__(self, "model", dict(self.model))

    @classmethod
    def empty(cls, n_labels: int) -> 'RawResult':
        return cls(np.zeros((0, n_labels)), np.zeros((0, n_labels)))

    @property
    def n_instances(self) -> int:
        return self.predictions.shape[0]

    @property
    def n_labels(self) -> int:
        return self.predictions.shape[1]

    @property
    def type(self) -> Optional[str]:
        return self.info.get(TYPE)

    def is_multi_target(self) -> bool:
        return (self.type or "").startswith(TYPE_MT)

    def row(self, i: int) -> Tuple[np.ndarray, np.ndarray]:
        """(predicted scores, true labels) of instance i."""
        return self.predictions[i], self.actuals[i]

    def with_info(self, updates: Optional[Mapping[str, str]] = None, **kwargs) -> 'RawResult':
        merged = {**self.info, **{k: str(v) for k, v in {**(updates or {}), **kwargs}.items()}}
        return replace(self, info=merged)

    def with_values(self, updates: Optional[Mapping[str, float]] = None, **kwargs) -> 'RawResult':
        merged = {**self.values, **{k: float(v) for k, v in {**(updates or {}), **kwargs}.items()}}
        return replace(self, values=merged)

    def with_model(self, name: str, description: str) -> 'RawResult':
        return replace(self, model={**self.model, name: description})

    def predictions_frame(self, label_names: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """
        Prediction set as a table: one true and one predicted column per label.

        Parameters:
            label_names: Label column names, defaults to y0..y{L-1}
        """
        names = list(label_names) if label_names is not None else [f"y{j}" for j in range(self.n_labels)]
        data = {}
        for j, name in enumerate(names):
            data[f"true:{name}"] = self.actuals[:, j]
        for j, name in enumerate(names):
            data[f"pred:{name}"] = self.predictions[:, j]
        return pd.DataFrame(data)


ThresholdValue = Union[None, float, np.ndarray]


@dataclass(frozen=True, eq=False)
class ThresholdedResult:
    """
    A RawResult together with the threshold that turns scores into labels.

    `threshold` is None for multi-target results (predictions are already
    class indices), a float for a uniform threshold, or a vector of L
    per-label thresholds.
    """
    raw: RawResult
    threshold: ThresholdValue = None

    def __post_init__(self):
        t = self.threshold
        if t is None:
            return
        if np.ndim(t) == 0:
            object.__setattr__(self, "threshold", float(t))
            return
        t = _frozen_matrix(np.reshape(t, (1, -1)))[0]
        if t.shape[0] != self.raw.n_labels:
            raise ValueError(
                f"threshold vector length {t.shape[0]} must match number of labels {self.raw.n_labels}"
            )
        object.__setattr__(self, "threshold", t)

    @property
    def predictions(self) -> np.ndarray:
        return self.raw.predictions

    @property
    def actuals(self) -> np.ndarray:
        return self.raw.actuals

    @property
    def info(self) -> Dict[str, str]:
        return self.raw.info

    @property
    def values(self) -> Dict[str, float]:
        return self.raw.values

    def is_multi_target(self) -> bool:
        return self.raw.is_multi_target()

    def binary_predictions(self) -> np.ndarray:
        """
        Discrete predictions (N × L).

        Multi-label scores are cut at the threshold (score >= t -> 1);
        multi-target predictions are rounded to the nearest class index.
        """
        if self.is_multi_target() or self.threshold is None:
            return np.rint(self.predictions).astype(int)
        return (self.predictions >= self.threshold).astype(int)


@dataclass(frozen=True, eq=False)
class FinalReport:
    """
    Finished evaluation: thresholded result plus computed statistics.

    Attributes:
        result: The thresholded result the statistics were computed on
        stats: Statistic name -> value
        output: Statistics as rendered by the metrics engine
    """
    result: ThresholdedResult
    stats: Dict[str, float] = field(default_factory=dict)
    output: str = ""

    @property
    def raw(self) -> RawResult:
        return self.result.raw

    @property
    def info(self) -> Dict[str, str]:
        return self.result.info

    @property
    def values(self) -> Dict[str, float]:
        return self.result.values

    def with_values(self, updates: Optional[Mapping[str, float]] = None, **kwargs) -> 'FinalReport':
        raw = self.raw.with_values(updates, **kwargs)
        return replace(self, result=replace(self.result, raw=raw))

    def render(self) -> str:
        lines = ["== Evaluation Info", ""]
        lines += [f"{k:<30} {v}" for k, v in self.info.items()]
        lines += ["", "== Predictive Performance", "", self.output.rstrip(), ""]
        lines += ["== Additional Measurements", ""]
        lines += [f"{k:<30} {v:.3f}" if not float(v).is_integer() else f"{k:<30} {int(v)}"
                  for k, v in self.values.items()]
        for name, description in self.raw.model.items():
            lines += ["", f"== {name}", "", description]
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.render()

    def write(self, path: Union[str, Path]) -> Path:
        """Write the rendered report to `path`."""
        p = Path(path)
        p.write_text(self.render())
        return p
