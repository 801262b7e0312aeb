"""
Combination of per-fold raw results.

Rows are concatenated in fold order. Info metadata is taken from the first
fold; numeric values (timings, counts) and model descriptions are not
carried over.
"""

import numpy as np
from typing import Sequence

from .result import RawResult


def combine_results(results: Sequence[RawResult]) -> RawResult:
    """
    Concatenate per-fold results row-wise, in the given order.

    Parameters:
        results: One RawResult per fold

    Returns:
        RawResult with sum(n_instances) rows, info of the first fold and no values

    Raises:
        ValueError: If `results` is empty or the folds disagree on L
    """
    if len(results) == 0:
        raise ValueError("No fold results to combine")
    L = results[0].n_labels
    for i, r in enumerate(results):
        if r.n_labels != L:
            raise ValueError(f"Fold {i} has {r.n_labels} labels, expected {L}")

    return RawResult(
        predictions=np.vstack([r.predictions for r in results]),
        actuals=np.vstack([r.actuals for r in results]),
        info=results[0].info
    )
