"""
Tests for the scikit-learn classifier adapters.
"""

import numpy as np
import pytest
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.multioutput import ClassifierChain, MultiOutputClassifier

from mlxeval.classifiers import (
    SklearnClassifier,
    SklearnMultiTargetClassifier,
    is_multi_target,
    supports_batch
)
from mlxeval.data import generate_multilabel_dataset, generate_multitarget_dataset
from mlxeval.evaluation import predict_dataset


@pytest.fixture
def ml_data():
    return generate_multilabel_dataset(n_instances=120, n_labels=3, n_features=6, random_state=0)


class TestSklearnClassifier:

    @pytest.mark.parametrize("estimator", [
        RandomForestClassifier(n_estimators=10, random_state=0),
        MultiOutputClassifier(LogisticRegression(max_iter=500)),
        ClassifierChain(LogisticRegression(max_iter=500), random_state=0),
    ])
    def test_scores_are_probabilities(self, ml_data, estimator):
        h = SklearnClassifier(estimator)
        h.build(ml_data)
        scores = h.predict_batch(ml_data.with_labels_masked())
        assert scores.shape == (120, 3)
        assert np.all((scores >= 0) & (scores <= 1))

    def test_single_equals_batch(self, ml_data):
        h = SklearnClassifier(RandomForestClassifier(n_estimators=5, random_state=0))
        h.build(ml_data)
        masked = ml_data.with_labels_masked()
        batch = h.predict_batch(masked)
        np.testing.assert_allclose(h.predict(masked.X[7]), batch[7])

    def test_capabilities(self):
        h = SklearnClassifier(RandomForestClassifier())
        assert supports_batch(h)
        assert not is_multi_target(h)
        assert any(option.startswith("n_estimators=") for option in h.get_options())

    def test_rebuild_clones(self, ml_data):
        """Each build fits a fresh copy; the wrapped estimator stays unfitted."""
        estimator = RandomForestClassifier(n_estimators=5, random_state=0)
        h = SklearnClassifier(estimator)
        h.build(ml_data.subset(0, 60))
        first = h.model_
        h.build(ml_data.subset(60, 120))
        assert h.model_ is not first
        assert not hasattr(estimator, "estimators_")

    def test_empty_train(self, ml_data):
        with pytest.raises(ValueError, match="empty training set"):
            SklearnClassifier(RandomForestClassifier()).build(ml_data.header())

    def test_predict_before_build(self, ml_data):
        with pytest.raises(RuntimeError, match="has not been built"):
            SklearnClassifier(RandomForestClassifier()).predict(ml_data.X[0])


class TestSklearnMultiTargetClassifier:

    def test_packed_scores(self):
        data = generate_multitarget_dataset(n_instances=90, n_targets=2, n_classes=3, random_state=0)
        h = SklearnMultiTargetClassifier(RandomForestClassifier(n_estimators=10, random_state=0))
        assert is_multi_target(h)
        h.build(data)
        scores = h.predict_batch(data.with_labels_masked())
        assert scores.shape == (90, 4)
        assert np.all(scores[:, :2] > 0)
        assert set(np.unique(scores[:, 2:])) <= {0.0, 1.0, 2.0}

    def test_through_tester(self):
        data = generate_multitarget_dataset(n_instances=60, n_targets=2, n_classes=3, random_state=1)
        h = SklearnMultiTargetClassifier(RandomForestClassifier(n_estimators=10, random_state=0))
        h.build(data)
        raw = predict_dataset(h, data, batched=True)
        assert raw.predictions.shape == (60, 2)
        # a forest fits most of its own training data
        assert np.mean(raw.predictions == data.labels) > 0.8
