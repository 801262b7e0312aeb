"""
Threshold dispatch for multi-label results.

A threshold specification is one of:

- a number, e.g. ``0.5``: uniform threshold for every label, no calibration
- ``PCut1``: one threshold calibrated so that the predicted label
  cardinality matches the training-set label cardinality
- ``PCutL``: one threshold per label, each matching that label's
  training-set frequency

Calibration is delegated to a ThresholdCalibrator; failures inside the
calibrator propagate unmodified. Multi-target results carry no threshold.

Usage:
    >>> thresholded = dispatch_threshold(raw, "PCut1", train=train_set)
    >>> thresholded.threshold
    0.4125
"""

import logging
import warnings
import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

from ..config import EVALUATION_DEFAULTS
from ..data.dataset import Dataset
from ..exceptions import ConfigurationError
from . import result as R
from .result import RawResult, ThresholdedResult

logger = logging.getLogger(__name__)

PCUT1 = "PCut1"
PCUTL = "PCutL"
FIXED = "fixed"

ThresholdLike = Union[str, float, int, np.ndarray, 'ThresholdSpec']


@dataclass(frozen=True)
class ThresholdSpec:
    """
    Parsed threshold specification.

    Attributes:
        mode: 'fixed', 'PCut1' or 'PCutL'
        value: The threshold for 'fixed' mode (None otherwise)
    """
    mode: str
    value: Optional[float] = None

    @property
    def is_fixed(self) -> bool:
        return self.mode == FIXED

    def __str__(self) -> str:
        return str(self.value) if self.is_fixed else self.mode


def parse_threshold(spec: ThresholdLike) -> ThresholdSpec:
    """
    Parse a threshold option.

    Raises:
        ConfigurationError: If `spec` is neither a number nor a known mode
    """
    if isinstance(spec, ThresholdSpec):
        return spec
    if isinstance(spec, (int, float, np.floating, np.integer)):
        return ThresholdSpec(FIXED, float(spec))
    text = str(spec).strip()
    if text in (PCUT1, PCUTL):
        return ThresholdSpec(text)
    try:
        return ThresholdSpec(FIXED, float(text))
    except ValueError:
        raise ConfigurationError(
            f"Unknown threshold option '{spec}': expected {PCUT1}, {PCUTL} or a number"
        )


def format_threshold(threshold: Union[float, np.ndarray]) -> str:
    """Descriptor stored under the 'Threshold' info key."""
    if np.ndim(threshold) == 0:
        return str(float(threshold))
    return "[" + ", ".join(str(float(t)) for t in threshold) + "]"


def proportional_cut(scores: np.ndarray, n_positive: int) -> float:
    """
    Threshold under which exactly the `n_positive` highest scores are kept.

    The threshold is the midpoint between the n-th and (n+1)-th highest
    score, clipped to [1e-5, 1].

    Parameters:
        scores: Any array of scores in [0, 1]
        n_positive: Number of scores that should reach the threshold

    Returns:
        threshold: float (0.5 if there are no scores)
    """
    s = np.sort(np.asarray(scores, dtype=float).ravel())[::-1]
    if s.size == 0:
        return 0.5
    if n_positive <= 0:
        return 1.0
    if n_positive >= s.size:
        return max(float(s[-1]), 1e-5)
    t = (s[n_positive - 1] + s[n_positive]) / 2.0
    return float(min(max(t, 1e-5), 1.0))


class ThresholdCalibrator(ABC):
    """Base class for threshold calibration strategies."""

    @abstractmethod
    def calibrate(
        self,
        predictions: np.ndarray,
        train: Dataset,
        mode: str
    ) -> Union[float, np.ndarray]:
        """
        Calibrate a threshold.

        Parameters
        ----------
        predictions : np.ndarray, shape (N, L)
            Raw scores to be thresholded
        train : Dataset
            Training data providing the reference label statistics
        mode : str
            'PCut1' (one scalar) or 'PCutL' (one scalar per label)

        Returns
        -------
        threshold : float or np.ndarray, shape (L,)
        """
        pass


class ProportionalCutCalibrator(ThresholdCalibrator):
    """
    Proportional cut (PCut): match the predicted label cardinality to the
    training label cardinality.

    Formula:
        PCut1: keep the round(LC_train * N) highest scores over all labels
        PCutL: for each label j keep the round(freq_j * N) highest scores of j

    Example:
        >>> calibrator = ProportionalCutCalibrator()
        >>> t = calibrator.calibrate(raw.predictions, train, "PCut1")
    """

    def calibrate(
        self,
        predictions: np.ndarray,
        train: Dataset,
        mode: str
    ) -> Union[float, np.ndarray]:
        predictions = np.asarray(predictions, dtype=float)
        N = predictions.shape[0]
        if mode == PCUT1:
            return proportional_cut(predictions, int(round(train.label_cardinality() * N)))
        if mode == PCUTL:
            if train.n_instances == 0:
                return np.full(predictions.shape[1], 0.5)
            freqs = np.mean(train.labels > 0, axis=0)
            return np.array([
                proportional_cut(predictions[:, j], int(round(freqs[j] * N)))
                for j in range(predictions.shape[1])
            ])
        raise ValueError(f"Unknown calibration mode: {mode}")


def dispatch_threshold(
    raw: RawResult,
    spec: ThresholdLike,
    train: Optional[Dataset] = None,
    calibrator: Optional[ThresholdCalibrator] = None
) -> ThresholdedResult:
    """
    Resolve `spec` into a threshold and attach it to `raw`.

    Parameters:
        raw: Raw result (its 'Type' info decides multi-label vs multi-target)
        spec: Number, 'PCut1', 'PCutL' or a precomputed per-label vector
        train: Training set (required for calibrated modes)
        calibrator: Defaults to ProportionalCutCalibrator

    Returns:
        ThresholdedResult; for multi-target results the threshold is None

    Raises:
        ConfigurationError: If calibration is requested without training data
    """
    if raw.is_multi_target():
        return ThresholdedResult(raw, None)

    if isinstance(spec, np.ndarray) and spec.ndim == 1:
        threshold = spec.astype(float)
    else:
        parsed = parse_threshold(spec)
        if parsed.is_fixed:
            threshold = parsed.value
        else:
            if train is None:
                raise ConfigurationError(
                    f"Threshold calibration ({parsed.mode}) requires the training data"
                )
            calibrator = calibrator or ProportionalCutCalibrator()
            threshold = calibrator.calibrate(raw.predictions, train, parsed.mode)
            logger.debug(f"Calibrated {parsed.mode} threshold: {format_threshold(threshold)}")

    return ThresholdedResult(raw.with_info({R.THRESHOLD: format_threshold(threshold)}), threshold)


def cv_threshold(spec: ThresholdLike) -> float:
    """
    Threshold for a combined cross-validation result.

    The per-fold training sets are no longer available once folds are
    combined, so only numeric specifications are honoured; anything else
    falls back to 0.5 with a warning.
    """
    try:
        return float(str(spec).strip()) if not isinstance(spec, ThresholdSpec) else float(spec.value)
    except (TypeError, ValueError):
        fallback = EVALUATION_DEFAULTS['cv_fallback_threshold']
        message = (
            f"Automatic threshold calibration ({spec}) is not enabled for cross-validation, "
            f"setting threshold = {fallback}"
        )
        logger.warning(message)
        warnings.warn(message, RuntimeWarning)
        return fallback
