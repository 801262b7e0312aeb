"""
Exception hierarchy for mlxeval.

Configuration and data errors are fatal for a run; classifier errors raised
inside build/predict are propagated unmodified by the engine and are only
wrapped in ClassifierError when the classifier breaks its output contract.
"""

from typing import Any, Dict, Optional


class EvaluationEngineError(Exception):
    """Base exception for mlxeval."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(EvaluationEngineError):
    """Invalid run options: missing label count, bad paths, bad split/fold settings."""
    pass


class DataError(EvaluationEngineError):
    """Malformed or unusable input data."""
    pass


class ClassifierError(EvaluationEngineError):
    """A classifier returned output that violates the prediction contract."""
    pass
