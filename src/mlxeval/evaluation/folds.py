"""
K-fold cross-validation folds.

Instances are assigned to K contiguous blocks in dataset order (the first
N mod K blocks hold one extra instance). Fold i tests on block i and trains
on the union of all other blocks, so the test blocks partition the dataset.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional
from sklearn.model_selection import KFold

from ..classifiers.base import Classifier
from ..data.dataset import Dataset
from ..exceptions import ConfigurationError
from .result import RawResult
from .runner import evaluate_raw

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fold:
    """One train/test partition."""
    index: int
    train: Dataset
    test: Dataset


@dataclass(frozen=True)
class FoldRun:
    """A fold together with the raw result of building and testing on it."""
    fold: Fold
    result: RawResult

    @property
    def index(self) -> int:
        return self.fold.index

    @property
    def train(self) -> Dataset:
        return self.fold.train

    @property
    def test(self) -> Dataset:
        return self.fold.test


def fold_indices(n_instances: int, n_folds: int) -> List[np.ndarray]:
    """
    Test indices of each fold.

    Raises:
        ConfigurationError: If n_folds < 2 or n_folds > n_instances
    """
    if n_folds < 2:
        raise ConfigurationError(f"n_folds must be >= 2, got {n_folds}")
    if n_folds > n_instances:
        raise ConfigurationError(
            f"Cannot have number of folds n_folds={n_folds} greater than the number of instances={n_instances}"
        )
    kf = KFold(n_splits=n_folds, shuffle=False)
    return [test_idx for _, test_idx in kf.split(np.arange(n_instances))]


def make_folds(dataset: Dataset, n_folds: int) -> Iterator[Fold]:
    """
    Yield the K folds of `dataset` in increasing index.

    Both sides of every fold keep the source instance order.
    """
    for i, test_idx in enumerate(fold_indices(dataset.n_instances, n_folds)):
        mask = np.ones(dataset.n_instances, dtype=bool)
        mask[test_idx] = False
        yield Fold(
            index=i,
            train=dataset.take(np.flatnonzero(mask)),
            test=dataset.take(test_idx)
        )


def run_folds(
    classifier: Classifier,
    dataset: Dataset,
    n_folds: int,
    batched: bool = False,
    per_fold: Optional[Dict[int, FoldRun]] = None
) -> List[FoldRun]:
    """
    Build and test `classifier` on every fold, one fold at a time.

    No thresholding or statistics are computed here.

    Parameters:
        classifier: Classifier rebuilt from scratch on each fold's training data
        dataset: Full dataset
        n_folds: Number of folds K
        batched: Use batch prediction where supported
        per_fold: If given, receives index -> FoldRun for every fold

    Returns:
        FoldRuns in fold order
    """
    runs = []
    for fold in make_folds(dataset, n_folds):
        logger.info(
            f":- Fold [{fold.index}/{n_folds}] -: {dataset.name}\tL={dataset.n_labels}"
            f"\tD(t:T)=({fold.train.n_instances}:{fold.test.n_instances})"
            f"\tLC(t:T)={fold.train.label_cardinality():.2f}:{fold.test.label_cardinality():.2f}"
        )
        run = FoldRun(fold, evaluate_raw(classifier, fold.train, fold.test, batched=batched))
        runs.append(run)
        if per_fold is not None:
            per_fold[fold.index] = run
    return runs
