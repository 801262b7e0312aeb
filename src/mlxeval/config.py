"""
Evaluation Configuration

Centralized defaults and the run options consumed by the experiment driver.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .exceptions import ConfigurationError

# Run defaults (mirrors the command-line defaults)
EVALUATION_DEFAULTS = {
    'threshold': 'PCut1',
    'verbosity': 1,
    'n_folds': 10,
    'split_ratio': 0.6,
    'cv_fallback_threshold': 0.5,
    'seed': 0,
}

PathLike = Union[str, Path]


@dataclass
class EvaluationConfig:
    """
    Options for a single experiment run.

    Attributes:
        train_path: Dataset used for training (and for splitting / CV)
        test_path: Separate test dataset (split mode only)
        n_labels: Overrides the label count carried by the dataset
        seed: Seed used when randomize is set
        randomize: Shuffle instance order before splitting / CV
        batched: Submit the whole test set to batch-capable classifiers
        verbosity: How much the metrics engine reports
        dump_model: Where to persist the trained classifier bundle
        load_model: Pre-trained classifier bundle to test instead of training
        threshold: 'PCut1', 'PCutL' or a number
        predictions_path: Where to write the predicted test set (split mode)
        no_eval: Skip testing (build and/or persist only)
        cross_validation: Run k-fold cross-validation
        n_folds: Number of folds for cross-validation
        cv_output_dir: Existing directory receiving per-fold artifacts
        split_percentage: Percentage of instances used for training
        split_number: Absolute number of training instances
        invert_split: Swap train/test roles after splitting
    """
    train_path: Optional[PathLike] = None
    test_path: Optional[PathLike] = None
    n_labels: Optional[int] = None
    seed: int = EVALUATION_DEFAULTS['seed']
    randomize: bool = False
    batched: bool = False
    verbosity: int = EVALUATION_DEFAULTS['verbosity']
    dump_model: Optional[PathLike] = None
    load_model: Optional[PathLike] = None
    threshold: str = EVALUATION_DEFAULTS['threshold']
    predictions_path: Optional[PathLike] = None
    no_eval: bool = False
    cross_validation: bool = False
    n_folds: int = EVALUATION_DEFAULTS['n_folds']
    cv_output_dir: Optional[PathLike] = None
    split_percentage: Optional[float] = None
    split_number: Optional[int] = None
    invert_split: bool = False

    def __post_init__(self):
        if self.n_folds < 2:
            raise ConfigurationError(f"n_folds must be >= 2, got {self.n_folds}")
        if self.split_percentage is not None and not 0 <= self.split_percentage <= 100:
            raise ConfigurationError(
                f"split_percentage must be in [0, 100], got {self.split_percentage}"
            )
        if self.split_number is not None and self.split_number < 0:
            raise ConfigurationError(
                f"split_number must be non-negative, got {self.split_number}"
            )
        if self.n_labels is not None and self.n_labels <= 0:
            raise ConfigurationError(f"n_labels must be positive, got {self.n_labels}")
        self.threshold = str(self.threshold)
