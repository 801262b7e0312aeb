"""
mlxeval Data Structures

This module contains the dataset container and the tabular I/O boundary.
"""

from .dataset import Dataset
from .io import (
    check_dataset_path,
    load_dataset,
    save_dataset,
    save_predictions,
    parse_dataset_name
)
from .synthetic import (
    generate_multilabel_dataset,
    generate_multitarget_dataset
)

__all__ = [
    # Data structures
    "Dataset",
    # I/O
    "check_dataset_path",
    "load_dataset",
    "save_dataset",
    "save_predictions",
    "parse_dataset_name",
    # Synthetic data generation
    "generate_multilabel_dataset",
    "generate_multitarget_dataset"
]
