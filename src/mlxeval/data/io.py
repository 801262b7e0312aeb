"""
Dataset I/O boundary.

Tabular files are read and written with pandas. Label columns come first;
the label count is taken from the caller or from an ``n_labels=<L>`` tag in
the file name (e.g. ``scene.n_labels=6.csv``). Non-numeric columns are
encoded as nominal indices in order of first appearance, or against the
values of a reference dataset so that a test file shares the training
file's indices.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from ..exceptions import ConfigurationError, DataError
from .dataset import Dataset

logger = logging.getLogger(__name__)

_LABEL_TAG = re.compile(r"\.?n_labels=(\d+)")


def parse_dataset_name(path: Union[str, Path]) -> Tuple[str, Optional[int]]:
    """
    Split a file name into dataset name and optional label count.

    Example:
        >>> parse_dataset_name("data/scene.n_labels=6.csv")
        ('scene', 6)
    """
    stem = Path(path).stem
    match = _LABEL_TAG.search(stem)
    if match is None:
        return stem, None
    return _LABEL_TAG.sub("", stem), int(match.group(1))


def check_dataset_path(path: Optional[Union[str, Path]]) -> Path:
    """Validate that `path` names an existing regular file."""
    if path is None or str(path) == "":
        raise ConfigurationError("You did not specify a dataset!")
    p = Path(path)
    if not p.exists():
        raise ConfigurationError(f"File does not exist: {p}")
    if p.is_dir():
        raise ConfigurationError(f"{p} points to a directory!")
    return p


def _encode_column(col: pd.Series, categories: Optional[Sequence[str]]) -> Tuple[np.ndarray, Optional[List[str]]]:
    """
    Encode one column as floats.

    Numeric columns pass through. Nominal columns become indices into
    `categories` when given (values outside it become NaN), otherwise into
    their own values in order of first appearance.
    """
    if categories is None:
        if pd.api.types.is_numeric_dtype(col):
            return col.to_numpy(dtype=float), None
        codes, uniques = pd.factorize(col, sort=False)
        categories = [str(u) for u in uniques]
    else:
        if col.isna().all():
            return np.full(len(col), np.nan), list(categories)
        values = col.where(col.isna(), col.astype(str))
        codes = pd.Categorical(values, categories=list(categories)).codes
        unseen = (codes < 0) & col.notna().to_numpy()
        if unseen.any():
            logger.warning(
                f"Column '{col.name}' has {int(unseen.sum())} values not seen in the reference data; "
                f"they are treated as missing"
            )
    encoded = np.asarray(codes, dtype=float)
    encoded[np.asarray(codes) < 0] = np.nan
    return encoded, list(categories)


def _encode_frame(
    frame: pd.DataFrame,
    reference: Optional[Dict[str, List[str]]] = None
) -> Tuple[np.ndarray, Dict[str, List[str]]]:
    reference = reference or {}
    columns, categories = [], {}
    for name in frame.columns:
        encoded, cats = _encode_column(frame[name], reference.get(str(name)))
        columns.append(encoded)
        if cats is not None:
            categories[str(name)] = cats
    X = np.column_stack(columns) if columns else np.empty((len(frame), 0))
    return X, categories


def load_dataset(
    path: Union[str, Path],
    n_labels: Optional[int] = None,
    reference: Optional[Dataset] = None
) -> Dataset:
    """
    Load a dataset from a CSV file.

    Parameters:
        path: CSV file with a header row, label columns first
        n_labels: Label count; overrides any tag in the file name
        reference: Dataset whose nominal values fix the indices used here,
                   e.g. the training set when loading a test file

    Returns:
        Dataset (n_labels is 0 when neither the caller nor the file name
        declares it; the engine rejects such datasets)

    Raises:
        ConfigurationError: If the path is missing, empty or a directory
        DataError: If the file cannot be parsed or has no instances

    Example:
        >>> train = load_dataset("emotions.n_labels=6.csv")
        >>> test = load_dataset("emotions-test.csv", n_labels=6, reference=train)
    """
    p = check_dataset_path(path)
    name, tagged = parse_dataset_name(p)
    try:
        frame = pd.read_csv(p)
    except pd.errors.EmptyDataError as e:
        raise ConfigurationError(f"Dataset file is empty: {p}") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise DataError(f"Failed to load instances from file '{p}'", {"cause": str(e)}) from e

    if len(frame) == 0:
        raise DataError(f"Dataset '{p}' contains no instances")

    L = n_labels if n_labels is not None else (tagged or 0)
    X, categories = _encode_frame(frame, reference.categories if reference is not None else None)
    logger.debug(f"Loaded {len(frame)} instances from {p} (L={L})")

    data = Dataset(X, L, name=name, attribute_names=[str(c) for c in frame.columns], categories=categories)
    for j, column in enumerate(data.attribute_names[:data.n_labels]):
        if column in categories:
            data.label_arity[j] = max(data.label_arity[j], len(categories[column]))
    return data


def dataset_to_frame(dataset: Dataset) -> pd.DataFrame:
    """Instances as a table; nominal columns are written back as their values."""
    frame = pd.DataFrame(dataset.X, columns=dataset.attribute_names)
    for column, cats in dataset.categories.items():
        if column in frame.columns:
            codes = frame[column].to_numpy()
            known = ~np.isnan(codes) & (codes >= 0) & (codes < len(cats))
            frame[column] = pd.Categorical.from_codes(
                np.where(known, codes, -1).astype(int), categories=cats
            ).astype(object)
    return frame


def save_dataset(dataset: Dataset, path: Union[str, Path]) -> Path:
    """Write `dataset` as CSV, label columns first."""
    p = Path(path)
    dataset_to_frame(dataset).to_csv(p, index=False)
    return p


def save_predictions(frame: pd.DataFrame, path: Union[str, Path]) -> Path:
    """Write a prediction set (or predicted test set) as CSV."""
    p = Path(path)
    frame.to_csv(p, index=False)
    return p
