"""
mlxeval Classifiers

The classifier contract the engine evaluates, its capability markers, and
adapters for scikit-learn estimators.
"""

from .base import (
    Classifier,
    SupportsBatchPrediction,
    SupportsUnlabelledIntroduction,
    IsMultiTarget,
    is_multi_target,
    supports_batch,
    supports_unlabelled
)
from .sklearn_adapter import SklearnClassifier, SklearnMultiTargetClassifier

__all__ = [
    # Contract
    "Classifier",
    "SupportsBatchPrediction",
    "SupportsUnlabelledIntroduction",
    "IsMultiTarget",
    "is_multi_target",
    "supports_batch",
    "supports_unlabelled",
    # Adapters
    "SklearnClassifier",
    "SklearnMultiTargetClassifier",
]
