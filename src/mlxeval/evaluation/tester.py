"""
Tester: run an already-built classifier over a test set.

Every instance is copied and its label fields are overwritten with 0.0
before the classifier sees it, so no ground truth leaks into prediction.
Multi-target classifiers return 2L-length vectors whose second half holds
the predicted class indices; only that half is kept.

Batch-capable classifiers may receive the whole (masked) test set in one
call. Both paths go through `predict_dataset` and produce identical rows
for identical inputs.
"""

import logging
import numpy as np

from ..classifiers.base import Classifier, is_multi_target, supports_batch
from ..data.dataset import Dataset
from ..exceptions import ClassifierError
from .result import RawResult

logger = logging.getLogger(__name__)


def mask_labels(instance: np.ndarray, n_labels: int) -> np.ndarray:
    """Copy of `instance` with its first `n_labels` fields set to 0.0."""
    x = np.array(instance, dtype=float, copy=True)
    x[:n_labels] = 0.0
    return x


def select_prediction(scores: np.ndarray, n_labels: int, multi_target: bool) -> np.ndarray:
    """
    Reduce a raw score array to the L values that are stored.

    Parameters:
        scores: (L,) / (2L,) vector or (N × L) / (N × 2L) matrix
        n_labels: Number of labels L
        multi_target: Keep indices [L, 2L) instead of [0, L)

    Raises:
        ClassifierError: If the score width does not match the classifier kind
    """
    scores = np.asarray(scores, dtype=float)
    width = scores.shape[-1] if scores.ndim else 0
    expected = 2 * n_labels if multi_target else n_labels
    if width != expected:
        raise ClassifierError(
            f"Classifier returned {width} scores per instance, expected {expected}",
            {"n_labels": n_labels, "multi_target": multi_target}
        )
    if multi_target:
        return scores[..., n_labels:2 * n_labels]
    return scores


def predict_dataset(classifier: Classifier, test: Dataset, batched: bool = False) -> RawResult:
    """
    Test a built classifier on `test`.

    Parameters:
        classifier: Classifier that has already been built
        test: Test data (ground truth is read from it, never passed on)
        batched: Submit the whole test set in one call when the classifier
                 supports batch prediction

    Returns:
        RawResult with raw predictions and ground truth only (no metadata)

    Raises:
        ClassifierError: If the classifier's output has the wrong shape.
        Exceptions raised by the classifier itself propagate unmodified.
    """
    L = test.n_labels
    N = test.n_instances
    multi_target = is_multi_target(classifier)

    if batched and not supports_batch(classifier):
        logger.warning(
            f"{type(classifier).__name__} does not support batch prediction; "
            f"testing one instance at a time"
        )
        batched = False

    predictions = np.zeros((N, L))

    if batched:
        masked = test.with_labels_masked(0.0)
        scores = np.asarray(classifier.predict_batch(masked), dtype=float)
        if scores.ndim != 2 or scores.shape[0] != N:
            raise ClassifierError(
                f"Batch prediction returned shape {scores.shape} for {N} instances"
            )
        predictions[:] = select_prediction(scores, L, multi_target)
    else:
        step = max(N // 10, 1)
        for i in range(N):
            x = mask_labels(test.X[i], L)
            y = classifier.predict(x)
            predictions[i] = select_prediction(y, L, multi_target)
            if (i + 1) % step == 0:
                logger.debug(f":- Evaluate {i + 1}/{N}")

    return RawResult(predictions, test.labels)
