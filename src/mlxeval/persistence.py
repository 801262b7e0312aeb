"""
Model bundle persistence.

A bundle holds a built classifier together with the header (empty,
schema-only Dataset) of the data it was trained on, so that a later run
can test the classifier without retraining.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

import joblib

from .classifiers.base import Classifier
from .data.dataset import Dataset
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def dump_model(path: Union[str, Path], classifier: Classifier, header: Dataset) -> Path:
    """
    Persist `classifier` and the training schema.

    Parameters:
        path: Output file
        classifier: Built classifier
        header: Training data; only its schema is stored

    Returns:
        Path written
    """
    p = Path(path)
    joblib.dump({"classifier": classifier, "header": header.header()}, p)
    logger.info(f"Model saved to: {p}")
    return p


def load_model(path: Union[str, Path]) -> Tuple[Classifier, Optional[Dataset]]:
    """
    Load a bundle written by `dump_model`.

    Returns:
        (classifier, header); header is None for bundles without a schema

    Raises:
        ConfigurationError: If the file does not exist or holds no classifier
    """
    p = Path(path)
    if not p.is_file():
        raise ConfigurationError(f"Model file does not exist: {p}")
    bundle = joblib.load(p)
    if isinstance(bundle, Classifier):
        return bundle, None
    if not isinstance(bundle, dict) or not isinstance(bundle.get("classifier"), Classifier):
        raise ConfigurationError(f"{p} does not contain a classifier bundle")
    logger.info(f"Model loaded from: {p}")
    return bundle["classifier"], bundle.get("header")
