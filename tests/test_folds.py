"""
Tests for k-fold fold generation and the per-fold loop.
"""

import numpy as np
import pytest

from mlxeval.evaluation import fold_indices, make_folds, run_folds
from mlxeval.evaluation import result as R
from mlxeval.exceptions import ConfigurationError


class TestFoldIndices:
    """Fold assignment."""

    @pytest.mark.parametrize("n, k", [(100, 10), (101, 10), (7, 3), (10, 10), (23, 4)])
    def test_partition(self, n, k):
        """Test blocks are disjoint and cover every instance exactly once."""
        blocks = fold_indices(n, k)
        assert len(blocks) == k
        joined = np.concatenate(blocks)
        assert len(joined) == n
        np.testing.assert_array_equal(np.sort(joined), np.arange(n))

    def test_contiguous_blocks(self):
        """Blocks are contiguous, the first N mod K hold one extra instance."""
        blocks = fold_indices(11, 3)
        np.testing.assert_array_equal(blocks[0], [0, 1, 2, 3])
        np.testing.assert_array_equal(blocks[1], [4, 5, 6, 7])
        np.testing.assert_array_equal(blocks[2], [8, 9, 10])

    def test_too_few_folds(self):
        with pytest.raises(ConfigurationError, match="n_folds must be >= 2"):
            fold_indices(10, 1)

    def test_more_folds_than_instances(self):
        with pytest.raises(ConfigurationError, match="greater than the number of instances"):
            fold_indices(5, 6)


class TestMakeFolds:
    """Fold datasets."""

    def test_ten_folds_of_hundred(self, indexed_dataset):
        """N=100, K=10 -> each fold tests 10 and trains on 90."""
        folds = list(make_folds(indexed_dataset, 10))
        assert [f.index for f in folds] == list(range(10))
        for f in folds:
            assert f.test.n_instances == 10
            assert f.train.n_instances == 90

    def test_train_and_test_disjoint(self, indexed_dataset):
        for f in make_folds(indexed_dataset, 4):
            train_ids = set(f.train.X[:, 3])
            test_ids = set(f.test.X[:, 3])
            assert not train_ids & test_ids
            assert len(train_ids | test_ids) == 100

    def test_union_of_tests_is_dataset(self, indexed_dataset):
        ids = np.concatenate([f.test.X[:, 3] for f in make_folds(indexed_dataset, 7)])
        np.testing.assert_array_equal(ids, np.arange(100))

    def test_deterministic(self, indexed_dataset):
        a = [f.test.X for f in make_folds(indexed_dataset, 5)]
        b = [f.test.X for f in make_folds(indexed_dataset, 5)]
        for x, y in zip(a, b):
            np.testing.assert_array_equal(x, y)


class TestRunFolds:
    """Per-fold build and test."""

    def test_builds_each_fold_in_order(self, indexed_dataset, frequency_classifier):
        runs = run_folds(frequency_classifier, indexed_dataset, 4)
        assert [r.index for r in runs] == [0, 1, 2, 3]
        assert frequency_classifier.build_sizes == [75, 75, 75, 75]
        for r in runs:
            assert r.result.n_instances == 25
            assert r.result.values[R.N_TRAIN] == 75
            assert r.result.values[R.N_TEST] == 25

    def test_per_fold_collection(self, indexed_dataset, frequency_classifier):
        per_fold = {}
        runs = run_folds(frequency_classifier, indexed_dataset, 5, per_fold=per_fold)
        assert sorted(per_fold) == [0, 1, 2, 3, 4]
        assert per_fold[2] is runs[2]

    def test_fold_results_are_raw(self, indexed_dataset, frequency_classifier):
        """No threshold or type information is attached per fold."""
        runs = run_folds(frequency_classifier, indexed_dataset, 3)
        assert R.THRESHOLD not in runs[0].result.info
        assert R.TYPE not in runs[0].result.info
