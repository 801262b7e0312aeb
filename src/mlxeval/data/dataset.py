"""
Dataset: Container for multi-label / multi-target data.

This module provides the core data structure for holding:
- Instance matrix X (labels first, then predictive features)
- The label count L declared by the schema
- Per-label arity (2 for binary labels, > 2 for nominal targets)
"""

import numpy as np
from typing import Dict, List, Optional, Sequence

from ..exceptions import ConfigurationError, DataError


class Dataset:
    """
    Container for an ordered set of instances sharing one schema.

    Attributes:
        X (np.ndarray): Instance matrix (N × d); the first L columns are labels
        n_labels (int): Number of label columns L
        name (str): Dataset name (reported in results)
        attribute_names (List[str]): Column names (length d)
        label_arity (np.ndarray): Number of values each label can take (L,)
        categories (Dict[str, List[str]]): Nominal column name -> values in
            index order (empty for all-numeric data)
        n_instances (int): Number of instances N
        n_attributes (int): Number of columns d

    Example:
        >>> X = np.hstack([np.random.randint(0, 2, (100, 3)), np.random.rand(100, 5)])
        >>> data = Dataset(X, n_labels=3, name="toy")
        >>> data.labels.shape
        (100, 3)
    """

    def __init__(
        self,
        X: np.ndarray,
        n_labels: int,
        name: str = "dataset",
        attribute_names: Optional[Sequence[str]] = None,
        label_arity: Optional[Sequence[int]] = None,
        categories: Optional[Dict[str, Sequence[str]]] = None
    ):
        """
        Initialize Dataset.

        Parameters:
            X: Instance matrix (N × d), numeric
            n_labels: Number of leading label columns L
                - May be 0 while the schema is still being prepared; the
                  engine refuses to evaluate until L > 0
            name: Dataset name
            attribute_names: Column names, defaults to y0..y{L-1}, x0..
            label_arity: Values per label column; inferred from X if None
            categories: Values of nominal columns, in the order of their indices

        Raises:
            DataError: If X is not a 2D numeric matrix or L exceeds the width
        """
        X = np.asarray(X, dtype=float)
        if X.ndim != 2:
            raise DataError(f"X must be 2D array, got shape {X.shape}")
        if n_labels < 0 or n_labels > X.shape[1]:
            raise DataError(
                f"n_labels ({n_labels}) must be in [0, {X.shape[1]}] for X with shape {X.shape}"
            )

        self.X = X
        self.n_labels = int(n_labels)
        self.name = name
        self.n_instances, self.n_attributes = X.shape

        if attribute_names is None:
            attribute_names = (
                [f"y{j}" for j in range(self.n_labels)]
                + [f"x{j}" for j in range(self.n_attributes - self.n_labels)]
            )
        if len(attribute_names) != self.n_attributes:
            raise DataError(
                f"attribute_names length ({len(attribute_names)}) must match X columns ({self.n_attributes})"
            )
        self.attribute_names: List[str] = list(attribute_names)

        if label_arity is None:
            label_arity = self._infer_label_arity()
        self.label_arity = np.asarray(label_arity, dtype=int)
        self.categories: Dict[str, List[str]] = {k: list(v) for k, v in (categories or {}).items()}

    def _infer_label_arity(self) -> np.ndarray:
        """
        Infer how many values each label column takes.

        Binary columns (and empty datasets) are reported with arity 2;
        a nominal column takes max index + 1 values.
        """
        if self.n_instances == 0 or self.n_labels == 0:
            return np.full(self.n_labels, 2, dtype=int)
        Y = np.nan_to_num(self.X[:, :self.n_labels], nan=0.0)
        return np.maximum(Y.max(axis=0).astype(int) + 1, 2)

    @property
    def labels(self) -> np.ndarray:
        """Ground truth matrix (N × L)."""
        return self.X[:, :self.n_labels]

    @property
    def features(self) -> np.ndarray:
        """Predictive feature matrix (N × (d - L))."""
        return self.X[:, self.n_labels:]

    def _derive(self, X: np.ndarray) -> 'Dataset':
        return Dataset(
            X,
            self.n_labels,
            name=self.name,
            attribute_names=self.attribute_names,
            label_arity=self.label_arity,
            categories=self.categories
        )

    def instance(self, i: int) -> np.ndarray:
        """Copy of instance i."""
        return self.X[i].copy()

    def subset(self, start: int, stop: int) -> 'Dataset':
        """
        Order-preserving copy of instances [start, stop).

        Parameters:
            start: First instance (inclusive)
            stop: Last instance (exclusive)

        Returns:
            Dataset with the same schema
        """
        return self._derive(self.X[start:stop].copy())

    def take(self, indices: Sequence[int]) -> 'Dataset':
        """Copy of the given instances, in the given order."""
        return self._derive(self.X[np.asarray(indices, dtype=int)].copy())

    def header(self) -> 'Dataset':
        """Empty dataset carrying only the schema."""
        return self.subset(0, 0)

    def with_n_labels(self, n_labels: int) -> 'Dataset':
        """Re-interpret the schema with a different label count."""
        if n_labels <= 0:
            raise ConfigurationError(f"Number of labels must be positive, got {n_labels}")
        return Dataset(
            self.X.copy(),
            n_labels,
            name=self.name,
            attribute_names=self.attribute_names,
            categories=self.categories
        )

    def with_labels_masked(self, value: float = 0.0) -> 'Dataset':
        """
        Copy with every label field overwritten.

        Parameters:
            value: 0.0 hides ground truth from a classifier at test time;
                   np.nan marks labels as missing (unlabelled data)
        """
        X = self.X.copy()
        X[:, :self.n_labels] = value
        return self._derive(X)

    def shuffled(self, seed: int = 0) -> 'Dataset':
        """Copy with instance order randomized by `seed`."""
        rng = np.random.default_rng(seed)
        return self.take(rng.permutation(self.n_instances))

    def label_cardinality(self) -> float:
        """Average number of positive labels per instance (0.0 if empty)."""
        if self.n_instances == 0 or self.n_labels == 0:
            return 0.0
        return float(np.mean(np.sum(self.labels > 0, axis=1)))

    def is_multi_target(self) -> bool:
        """True iff some label takes more than two values."""
        return bool(np.any(self.label_arity > 2))

    def __len__(self) -> int:
        return self.n_instances

    def __repr__(self) -> str:
        return (
            f"Dataset("
            f"name={self.name!r}, "
            f"n_instances={self.n_instances}, "
            f"n_labels={self.n_labels}, "
            f"n_attributes={self.n_attributes})"
        )

    def summary(self) -> str:
        """One-line description used in progress logs."""
        return (
            f":- Dataset -: {self.name}\tL={self.n_labels}\tN={self.n_instances}"
            f"\tLC={self.label_cardinality():.2f}"
        )
