"""
Build-and-test of one train/test pair.

Produces the RawResult shared by single-split evaluation and by every
cross-validation fold: raw predictions plus data statistics, classifier
identity and running times. No threshold or statistics are applied here.
"""

import logging
import time

from ..classifiers.base import Classifier, supports_unlabelled
from ..data.dataset import Dataset
from . import result as R
from .result import RawResult
from .tester import predict_dataset

logger = logging.getLogger(__name__)


def describe_classifier(classifier: Classifier, dataset: Dataset) -> dict:
    """Info entries identifying the classifier and dataset."""
    return {
        R.CLASSIFIER: f"{type(classifier).__module__}.{type(classifier).__name__}",
        R.OPTIONS: str(list(classifier.get_options())),
        R.ADDITIONAL_INFO: str(classifier),
        R.DATASET: dataset.name,
        R.N_LABELS: str(dataset.n_labels),
    }


def evaluate_raw(
    classifier: Classifier,
    train: Dataset,
    test: Dataset,
    batched: bool = False
) -> RawResult:
    """
    Build `classifier` on `train` and test it on `test`.

    Semi-supervised classifiers first receive the test set with its labels
    set missing. Build and test times bracket exactly the build and test
    calls.

    Parameters:
        classifier: Classifier to build (mutated in place)
        train: Training data
        test: Test data
        batched: Use batch prediction where supported

    Returns:
        RawResult with predictions, counts, label cardinalities, timings
        (seconds) and classifier info; no thresholding yet
    """
    before = time.perf_counter()
    if supports_unlabelled(classifier):
        classifier.introduce_unlabelled(test.with_labels_masked(float("nan")))
    classifier.build(train)
    after = time.perf_counter()

    before_test = time.perf_counter()
    result = predict_dataset(classifier, test, batched=batched)
    after_test = time.perf_counter()

    result = result.with_values({
        R.N_TRAIN: train.n_instances,
        R.N_TEST: test.n_instances,
        R.LCARD_TRAIN: train.label_cardinality(),
        R.LCARD_TEST: test.label_cardinality(),
        R.BUILD_TIME: after - before,
        R.TEST_TIME: after_test - before_test,
        R.TOTAL_TIME: after_test - before,
    }).with_info(describe_classifier(classifier, train))

    model = classifier.get_model()
    if model:
        result = result.with_model("Model", model)

    logger.debug(
        f"Built on {train.n_instances} and tested on {test.n_instances} instances "
        f"in {after_test - before:.3f}s"
    )
    return result
