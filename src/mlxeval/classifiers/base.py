"""
Classifier contract consumed by the evaluation engine.

A classifier is built on a training Dataset and then queried one instance
at a time. Optional capabilities are declared by mixing in marker classes,
which the engine queries with isinstance() instead of branching on concrete
classifier types:

- SupportsBatchPrediction: whole test set in one call
- SupportsUnlabelledIntroduction: receives the (label-free) test set before build
- IsMultiTarget: score vectors have length 2L, second half = predicted indices
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import List

from ..data.dataset import Dataset


class Classifier(ABC):
    """
    Base class for multi-label / multi-target classifiers.

    `build` mutates the instance in place; a built classifier must not be
    reused across unrelated runs.
    """

    @abstractmethod
    def build(self, train: Dataset) -> None:
        """
        Train on `train`.

        Parameters:
            train: Training data; the first `train.n_labels` columns are labels
        """
        pass

    @abstractmethod
    def predict(self, instance: np.ndarray) -> np.ndarray:
        """
        Score one instance.

        Parameters:
            instance: Full instance vector (d,) whose label fields are masked

        Returns:
            scores: Length L (multi-label, values in [0, 1]) or
                    length 2L (multi-target)
        """
        pass

    def get_options(self) -> List[str]:
        """Options describing this classifier's configuration."""
        return []

    def get_model(self) -> str:
        """Human-readable description of the trained model ('' if none)."""
        return ""

    def __str__(self) -> str:
        return type(self).__name__


class SupportsBatchPrediction(ABC):
    """Capability: score a whole test set in one call."""

    @abstractmethod
    def predict_batch(self, test: Dataset) -> np.ndarray:
        """
        Score every instance of `test` (label fields masked).

        Returns:
            scores: (N × L) or, for multi-target classifiers, (N × 2L),
                    rows in the same order as `test`
        """
        pass


class SupportsUnlabelledIntroduction(ABC):
    """Capability: semi-supervised classifiers that see the test inputs before build."""

    @abstractmethod
    def introduce_unlabelled(self, unlabelled: Dataset) -> None:
        """Receive instances whose label fields are missing (NaN)."""
        pass


class IsMultiTarget:
    """Marker: predictions are nominal indices packed into a 2L vector."""
    pass


def is_multi_target(classifier: Classifier) -> bool:
    return isinstance(classifier, IsMultiTarget)


def supports_batch(classifier: Classifier) -> bool:
    return isinstance(classifier, SupportsBatchPrediction)


def supports_unlabelled(classifier: Classifier) -> bool:
    return isinstance(classifier, SupportsUnlabelledIntroduction)
