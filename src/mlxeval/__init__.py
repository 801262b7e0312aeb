"""
mlxeval: Evaluation engine for multi-label and multi-target classifiers

Trains and tests classifiers on a single split, by k-fold
cross-validation, or from a persisted model, and turns raw score vectors
into thresholded predictions and statistics:

- Leakage-free testing (label fields are zeroed before prediction)
- Multi-label (L scores) and multi-target (2L scores) prediction shapes
- Fixed or proportional-cut (PCut1 / PCutL) thresholds
- Immutable RawResult -> ThresholdedResult -> FinalReport pipeline
"""

__version__ = "0.1.0"

# Core data structures
from .data import Dataset, load_dataset

# Classifier contract
from .classifiers import (
    Classifier,
    SupportsBatchPrediction,
    SupportsUnlabelledIntroduction,
    IsMultiTarget,
    SklearnClassifier,
    SklearnMultiTargetClassifier
)

# Evaluation
from .evaluation import (
    RawResult,
    ThresholdedResult,
    FinalReport,
    ExperimentOutcome,
    evaluate_model,
    evaluate_built,
    cross_validate,
    run_experiment
)

# Configuration and errors
from .config import EvaluationConfig, EVALUATION_DEFAULTS
from .exceptions import (
    EvaluationEngineError,
    ConfigurationError,
    DataError,
    ClassifierError
)

__all__ = [
    # Data
    "Dataset",
    "load_dataset",

    # Classifiers
    "Classifier",
    "SupportsBatchPrediction",
    "SupportsUnlabelledIntroduction",
    "IsMultiTarget",
    "SklearnClassifier",
    "SklearnMultiTargetClassifier",

    # Evaluation
    "RawResult",
    "ThresholdedResult",
    "FinalReport",
    "ExperimentOutcome",
    "evaluate_model",
    "evaluate_built",
    "cross_validate",
    "run_experiment",

    # Configuration
    "EvaluationConfig",
    "EVALUATION_DEFAULTS",
    "EvaluationEngineError",
    "ConfigurationError",
    "DataError",
    "ClassifierError",
]
