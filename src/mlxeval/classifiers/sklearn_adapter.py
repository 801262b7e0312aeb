"""
Scikit-learn adapters for the Classifier contract.

Wraps any multi-output scikit-learn estimator (e.g. RandomForestClassifier,
MultiOutputClassifier(LogisticRegression()), ClassifierChain) so it can be
evaluated by the engine. The wrapped estimator is cloned on every build, so
repeated builds (one per fold) never share fitted state.
"""

import numpy as np
from typing import List, Optional, Tuple
from sklearn.base import BaseEstimator, clone

from ..data.dataset import Dataset
from .base import Classifier, SupportsBatchPrediction, IsMultiTarget


def per_output_proba(
    model: BaseEstimator,
    features: np.ndarray,
    n_outputs: int
) -> Optional[List[Tuple[np.ndarray, np.ndarray]]]:
    """
    Normalise predict_proba output to one (proba, classes) pair per output.

    Handles the three shapes scikit-learn produces: a list of per-output
    arrays (multi-output forests, MultiOutputClassifier), a single
    (n × n_classes) array (single-output estimators), and an (n × L) matrix
    of positive-class probabilities (ClassifierChain).

    Returns:
        List of (n × n_classes_j, n_classes_j) pairs, or None if the
        estimator has no predict_proba
    """
    if not hasattr(model, "predict_proba"):
        return None
    proba = model.predict_proba(features)
    classes = getattr(model, "classes_", None)
    if isinstance(proba, list):
        return [(np.asarray(p), np.asarray(classes[j])) for j, p in enumerate(proba)]
    proba = np.asarray(proba)
    if n_outputs == 1 and not isinstance(classes, list):
        return [(proba, np.asarray(classes))]
    return [
        (np.column_stack([1 - proba[:, j], proba[:, j]]), np.array([0, 1]))
        for j in range(proba.shape[1])
    ]


class SklearnClassifier(Classifier, SupportsBatchPrediction):
    """
    Multi-label adapter: scores are P(y_j = 1) for each label j.

    Parameters:
        estimator: Unfitted scikit-learn estimator supporting 2D targets

    Example:
        >>> from sklearn.ensemble import RandomForestClassifier
        >>> h = SklearnClassifier(RandomForestClassifier(n_estimators=10, random_state=0))
        >>> h.build(train)
        >>> scores = h.predict_batch(test.with_labels_masked())
    """

    def __init__(self, estimator: BaseEstimator):
        self.estimator = estimator
        self.model_: Optional[BaseEstimator] = None
        self.n_labels_: Optional[int] = None

    def build(self, train: Dataset) -> None:
        if train.n_instances == 0:
            raise ValueError("Cannot build a classifier on an empty training set")
        self.n_labels_ = train.n_labels
        self.model_ = clone(self.estimator)
        self.model_.fit(train.features, train.labels.astype(int))

    def _check_built(self):
        if self.model_ is None:
            raise RuntimeError(f"{type(self).__name__} has not been built")

    def _scores(self, features: np.ndarray) -> np.ndarray:
        proba = per_output_proba(self.model_, features, self.n_labels_)
        if proba is None:
            return np.asarray(self.model_.predict(features), dtype=float).reshape(len(features), -1)
        scores = np.zeros((len(features), self.n_labels_))
        for j, (p, classes) in enumerate(proba):
            positive = np.flatnonzero(classes == 1)
            if positive.size:
                scores[:, j] = p[:, positive[0]]
        return scores

    def predict(self, instance: np.ndarray) -> np.ndarray:
        self._check_built()
        return self._scores(np.asarray(instance, dtype=float)[self.n_labels_:].reshape(1, -1))[0]

    def predict_batch(self, test: Dataset) -> np.ndarray:
        self._check_built()
        return self._scores(test.features)

    def get_options(self) -> List[str]:
        return [f"{k}={v}" for k, v in sorted(self.estimator.get_params(deep=False).items())]

    def __str__(self) -> str:
        return repr(self.estimator)


class SklearnMultiTargetClassifier(SklearnClassifier, IsMultiTarget):
    """
    Multi-target adapter.

    Scores are packed as a 2L vector: the first half holds the probability
    of the chosen class for each target, the second half the chosen class
    index itself.
    """

    def _scores(self, features: np.ndarray) -> np.ndarray:
        n, L = len(features), self.n_labels_
        proba = per_output_proba(self.model_, features, L)
        scores = np.zeros((n, 2 * L))
        if proba is None:
            scores[:, L:] = np.asarray(self.model_.predict(features), dtype=float).reshape(n, L)
            scores[:, :L] = 1.0
            return scores
        for j, (p, classes) in enumerate(proba):
            best = np.argmax(p, axis=1)
            scores[:, j] = p[np.arange(n), best]
            scores[:, L + j] = classes[best]
        return scores
