"""
Synthetic Data Generation for mlxeval Testing
=============================================

Small multi-label and multi-target datasets with a learnable signal, used by
the test-suite and for smoke-testing classifiers through the engine.
"""

import numpy as np
from typing import Optional
from sklearn.datasets import make_multilabel_classification

from .dataset import Dataset


def generate_multilabel_dataset(
    n_instances: int = 200,
    n_labels: int = 4,
    n_features: int = 10,
    n_labels_per_instance: int = 2,
    random_state: Optional[int] = None,
    name: str = "synthetic-ml"
) -> Dataset:
    """
    Generate a multi-label dataset.

    Parameters:
        n_instances: Number of instances N
        n_labels: Number of binary labels L
        n_features: Number of predictive features
        n_labels_per_instance: Expected label cardinality
        random_state: Random seed for reproducibility
        name: Dataset name

    Returns:
        Dataset with L binary label columns followed by the features

    Example:
        >>> data = generate_multilabel_dataset(n_instances=100, n_labels=3, random_state=0)
        >>> data.labels.shape
        (100, 3)
    """
    if n_labels < 1:
        raise ValueError(f"n_labels must be positive, got {n_labels}")

    features, Y = make_multilabel_classification(
        n_samples=n_instances,
        n_features=n_features,
        n_classes=n_labels,
        n_labels=n_labels_per_instance,
        allow_unlabeled=True,
        random_state=random_state
    )
    return Dataset(np.hstack([Y, features]).astype(float), n_labels, name=name)


def generate_multitarget_dataset(
    n_instances: int = 200,
    n_targets: int = 2,
    n_classes: int = 3,
    n_features: int = 6,
    noise: float = 0.1,
    random_state: Optional[int] = None,
    name: str = "synthetic-mt"
) -> Dataset:
    """
    Generate a multi-target dataset.

    Each target j is the arg-max over `n_classes` random linear projections of
    the features, with a fraction `noise` of entries replaced by a random class.

    Returns:
        Dataset with `n_targets` nominal label columns (values 0..n_classes-1)
    """
    if n_classes < 3:
        raise ValueError(f"n_classes must be >= 3 for multi-target data, got {n_classes}")

    rng = np.random.default_rng(random_state)
    features = rng.normal(size=(n_instances, n_features))
    targets = np.zeros((n_instances, n_targets))
    for j in range(n_targets):
        W = rng.normal(size=(n_features, n_classes))
        targets[:, j] = np.argmax(features @ W, axis=1)
        flip = rng.random(n_instances) < noise
        targets[flip, j] = rng.integers(0, n_classes, size=int(flip.sum()))

    return Dataset(
        np.hstack([targets, features]),
        n_targets,
        name=name,
        label_arity=np.full(n_targets, n_classes)
    )
