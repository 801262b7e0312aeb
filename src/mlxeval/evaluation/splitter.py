"""
Train/test splitting of a single dataset.

The first n_train instances train, the rest test, both in source order:

    n_train = round(N * P / 100)   if a percentage P is given
            = K                    if an absolute count K is given
            = floor(N * 0.6)       otherwise
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from ..config import EVALUATION_DEFAULTS
from ..data.dataset import Dataset
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Split:
    """
    Result of splitting a dataset.

    Attributes:
        train: Training portion
        test: Test portion
        evaluate: False when one side came out empty; `train` is then the
                  full dataset and no evaluation should run
    """
    train: Dataset
    test: Dataset
    evaluate: bool = True


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def n_train_instances(
    n_instances: int,
    percentage: Optional[float] = None,
    number: Optional[int] = None
) -> int:
    """
    Number of training instances for a split.

    Raises:
        ConfigurationError: If the percentage is outside [0, 100] or the
                            count is outside [0, N]
    """
    if percentage is not None:
        if not 0 <= percentage <= 100:
            raise ConfigurationError(f"Split percentage must be in [0, 100], got {percentage}")
        return _round_half_up(n_instances * percentage / 100.0)
    if number is not None:
        if not 0 <= number <= n_instances:
            raise ConfigurationError(
                f"Split number must be in [0, {n_instances}], got {number}"
            )
        return int(number)
    return int(n_instances * EVALUATION_DEFAULTS['split_ratio'])


def split_dataset(
    dataset: Dataset,
    percentage: Optional[float] = None,
    number: Optional[int] = None,
    invert: bool = False
) -> Split:
    """
    Split `dataset` into train and test portions.

    Parameters:
        dataset: Data to split (order is preserved)
        percentage: Percentage of instances used for training
        number: Absolute number of training instances (ignored if percentage given)
        invert: Swap train/test roles after the split is computed

    Returns:
        Split; if either side is empty, Split(train=dataset, test=<empty>, evaluate=False)

    Example:
        >>> s = split_dataset(data, percentage=60)   # N=100
        >>> len(s.train), len(s.test)
        (60, 40)
    """
    N = dataset.n_instances
    n_train = n_train_instances(N, percentage, number)
    train = dataset.subset(0, n_train)
    test = dataset.subset(n_train, N)

    if invert:
        train, test = test, train

    if train.n_instances == 0 or test.n_instances == 0:
        logger.warning(
            f"Split of {N} instances leaves train={train.n_instances}, test={test.n_instances}; "
            f"training on the full dataset without evaluation"
        )
        return Split(train=dataset, test=dataset.header(), evaluate=False)

    return Split(train=train, test=test)
