"""
Default metrics engine.

Computes statistics from an already-thresholded result using
scikit-learn's multi-label metrics. The engine is a pure function of the
result and a verbosity level:

- verbosity 1: headline measures
- verbosity 2: all aggregate measures
- verbosity 3+: additionally one accuracy per label / target
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Dict, Tuple
from sklearn.metrics import accuracy_score, f1_score, hamming_loss, jaccard_score

from .result import FinalReport, ThresholdedResult

Stats = Dict[str, float]


class MetricsEngine(ABC):
    """Base class for statistics computation."""

    @abstractmethod
    def compute_stats(self, result: ThresholdedResult, verbosity: int = 1) -> Tuple[Stats, str]:
        """
        Compute statistics of `result`.

        Returns:
            stats: Measure name -> value
            text: Human-readable rendering of `stats`
        """
        pass


def format_stats(stats: Stats) -> str:
    return "\n".join(f"{name:<40} {value:.3f}" for name, value in stats.items())


class StandardMetrics(MetricsEngine):
    """
    Example- and label-based measures for multi-label results, accuracy
    measures for multi-target results.

    Example:
        >>> stats, text = StandardMetrics().compute_stats(thresholded, verbosity=2)
        >>> stats["Hamming score"]
        0.87
    """

    def compute_stats(self, result: ThresholdedResult, verbosity: int = 1) -> Tuple[Stats, str]:
        if result.raw.n_instances == 0:
            return {}, "No predictions to evaluate"
        if result.is_multi_target():
            stats = self._multi_target(result, verbosity)
        else:
            stats = self._multi_label(result, verbosity)
        return stats, format_stats(stats)

    def _multi_label(self, result: ThresholdedResult, verbosity: int) -> Stats:
        Y = (result.actuals > 0).astype(int)
        P = result.binary_predictions()
        L = Y.shape[1]

        hloss = hamming_loss(Y, P)
        if L > 1:
            accuracy = jaccard_score(Y, P, average='samples', zero_division=1.0)
            f1_example = f1_score(Y, P, average='samples', zero_division=1.0)
        else:
            accuracy = accuracy_score(Y, P)
            f1_example = accuracy

        stats = {
            "Accuracy": float(accuracy),
            "Hamming score": float(1.0 - hloss),
            "Exact match": float(accuracy_score(Y, P)),
        }
        if verbosity >= 2:
            stats.update({
                "Hamming loss": float(hloss),
                "F1 (micro averaged)": float(f1_score(Y, P, average='micro', zero_division=1.0)),
                "F1 (macro averaged by example)": float(f1_example),
                "F1 (macro averaged by label)": float(f1_score(Y, P, average='macro', zero_division=1.0)),
                "Label cardinality (predicted)": float(np.mean(P.sum(axis=1))),
                "Label cardinality (true)": float(np.mean(Y.sum(axis=1))),
            })
        if verbosity >= 3:
            for j in range(L):
                stats[f"Accuracy [label {j}]"] = float(accuracy_score(Y[:, j], P[:, j]))
        return stats

    def _multi_target(self, result: ThresholdedResult, verbosity: int) -> Stats:
        Y = np.rint(result.actuals).astype(int)
        P = result.binary_predictions()
        correct = (Y == P)

        stats = {
            "Hamming score": float(np.mean(correct)),
            "Exact match": float(np.mean(np.all(correct, axis=1))),
        }
        if verbosity >= 2:
            stats["Hamming loss"] = float(1.0 - np.mean(correct))
        if verbosity >= 3:
            for j in range(Y.shape[1]):
                stats[f"Accuracy [target {j}]"] = float(accuracy_score(Y[:, j], P[:, j]))
        return stats


def finalize(
    result: ThresholdedResult,
    verbosity: int = 1,
    metrics: MetricsEngine = None
) -> FinalReport:
    """Run the metrics engine and wrap everything into a FinalReport."""
    metrics = metrics or StandardMetrics()
    stats, text = metrics.compute_stats(result, verbosity)
    return FinalReport(result, stats, text)
