"""
Shared fixtures: small deterministic classifiers and datasets.
"""

import numpy as np
import pytest

from mlxeval.classifiers import (
    Classifier,
    SupportsBatchPrediction,
    SupportsUnlabelledIntroduction,
    IsMultiTarget
)
from mlxeval.data import Dataset


class LabelFrequencyClassifier(Classifier, SupportsBatchPrediction):
    """Scores every instance with the training label frequencies plus a
    feature-dependent offset; records what it was shown."""

    def __init__(self):
        self.freqs = None
        self.n_labels = None
        self.build_sizes = []
        self.seen_labels = []

    def build(self, train):
        self.n_labels = train.n_labels
        self.freqs = np.mean(train.labels > 0, axis=0)
        self.build_sizes.append(train.n_instances)

    def _score(self, features):
        offset = 0.1 * np.tanh(features[..., -1:])
        return np.clip(self.freqs + offset, 0, 1)

    def predict(self, instance):
        self.seen_labels.append(np.array(instance[:self.n_labels]))
        return self._score(np.asarray(instance[self.n_labels:]))

    def predict_batch(self, test):
        self.seen_labels.extend(np.array(row) for row in test.labels)
        return self._score(test.features)

    def get_options(self):
        return ["offset=0.1"]


class PerInstanceClassifier(Classifier):
    """Same scores as LabelFrequencyClassifier, no batch capability."""

    def __init__(self):
        self._inner = LabelFrequencyClassifier()

    def build(self, train):
        self._inner.build(train)

    def predict(self, instance):
        return self._inner.predict(instance)


class FixedMultiTargetClassifier(Classifier, IsMultiTarget):
    """Always returns the same 2L vector."""

    def __init__(self, scores):
        self.scores = np.asarray(scores, dtype=float)
        self.built = 0

    def build(self, train):
        self.built += 1

    def predict(self, instance):
        return self.scores.copy()


class SemiSupervisedClassifier(LabelFrequencyClassifier, SupportsUnlabelledIntroduction):
    """Records the unlabelled data it is given before build."""

    def __init__(self):
        super().__init__()
        self.unlabelled = []
        self.events = []

    def introduce_unlabelled(self, unlabelled):
        self.unlabelled.append(unlabelled)
        self.events.append("introduce")

    def build(self, train):
        self.events.append("build")
        super().build(train)


class FailingClassifier(Classifier):
    """Raises from build."""

    def build(self, train):
        raise RuntimeError("build failed")

    def predict(self, instance):
        raise RuntimeError("predict failed")


def make_indexed_dataset(n_instances=100, n_labels=3, seed=0, name="indexed"):
    """Binary labels, then an id column (0..N-1), then two random features."""
    rng = np.random.default_rng(seed)
    labels = (rng.random((n_instances, n_labels)) < 0.4).astype(float)
    ids = np.arange(n_instances, dtype=float).reshape(-1, 1)
    features = rng.normal(size=(n_instances, 2))
    return Dataset(np.hstack([labels, ids, features]), n_labels, name=name)


@pytest.fixture
def indexed_dataset():
    """100 instances, 3 labels; column L holds the instance id."""
    return make_indexed_dataset()


@pytest.fixture
def dataset_factory():
    return make_indexed_dataset


@pytest.fixture
def frequency_classifier():
    return LabelFrequencyClassifier()


@pytest.fixture
def per_instance_classifier():
    return PerInstanceClassifier()


@pytest.fixture
def semi_supervised_classifier():
    return SemiSupervisedClassifier()


@pytest.fixture
def failing_classifier():
    return FailingClassifier()


@pytest.fixture
def multi_target_factory():
    return FixedMultiTargetClassifier
