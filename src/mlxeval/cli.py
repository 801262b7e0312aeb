#!/usr/bin/env python3
"""
Command-line front end for the evaluation engine.

Builds an EvaluationConfig from the flags, wraps a scikit-learn estimator in
the classifier adapter and runs the experiment. Returns exit status 0 on
success and 1 when the run fails.
"""

import argparse
import importlib
import logging
import sys
from typing import Callable, List, Optional

from .classifiers.base import Classifier
from .classifiers.sklearn_adapter import SklearnClassifier, SklearnMultiTargetClassifier
from .config import EVALUATION_DEFAULTS, EvaluationConfig
from .exceptions import ConfigurationError
from .evaluation.engine import run_experiment

logger = logging.getLogger(__name__)

DEFAULT_CLASSIFIER = "sklearn.ensemble:RandomForestClassifier"


def resolve_factory(spec: str) -> Callable:
    """
    Resolve 'package.module:callable' to the callable.

    Raises:
        ConfigurationError: If the module or attribute cannot be found
    """
    module_name, _, attr = spec.partition(":")
    if not module_name or not attr:
        raise ConfigurationError(f"Classifier must be given as 'module:callable', got '{spec}'")
    try:
        module = importlib.import_module(module_name)
        return getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot resolve classifier '{spec}'", {"cause": str(e)}) from e


def make_classifier(spec: str, multi_target: bool = False) -> Classifier:
    """Instantiate the estimator named by `spec` and wrap it for the engine."""
    estimator = resolve_factory(spec)()
    if isinstance(estimator, Classifier):
        return estimator
    if multi_target:
        return SklearnMultiTargetClassifier(estimator)
    return SklearnClassifier(estimator)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mlxeval",
        description="Evaluate multi-label / multi-target classifiers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 66% train/test split, calibrated threshold
  mlxeval -t scene.n_labels=6.csv --split-percentage 66

  # 10-fold cross-validation, per-fold output
  mlxeval -t scene.csv -C 6 -x 10 --x-out-dir out/

  # Train, dump, then test the dumped model on a separate file
  mlxeval -t train.csv -C 6 --no-eval -d model.joblib
  mlxeval -t train.csv -T test.csv -C 6 -l model.joblib
        """
    )

    parser.add_argument("-t", "--train", dest="train_path",
                        help="Training file (label columns first); required")
    parser.add_argument("-T", "--test", dest="test_path",
                        help="Test file (used for making predictions)")
    parser.add_argument("-C", "--n-labels", type=int,
                        help="Number of labels, counted from the first column")
    parser.add_argument("--classifier", default=DEFAULT_CLASSIFIER,
                        help=f"Estimator factory as module:callable (default: {DEFAULT_CLASSIFIER})")
    parser.add_argument("--multi-target", action="store_true",
                        help="Treat the estimator as a multi-target classifier")
    parser.add_argument("--predictions", dest="predictions_path",
                        help="File to store the predictions in (not with cross-validation)")
    parser.add_argument("-x", "--folds", type=int, nargs="?", const=EVALUATION_DEFAULTS['n_folds'],
                        help="Do cross-validation with this many folds")
    parser.add_argument("--x-out-dir", dest="cv_output_dir",
                        help="Existing directory for per-fold output (train, test, predictions, results)")
    parser.add_argument("--no-eval", action="store_true",
                        help="Skip evaluation, e.g. when the test set has no labels")
    parser.add_argument("-R", "--randomize", action="store_true",
                        help="Randomize the order of instances in the dataset")
    parser.add_argument("-s", "--seed", type=int, default=EVALUATION_DEFAULTS['seed'],
                        help="Random seed (use with -R)")
    parser.add_argument("--split-percentage", type=float,
                        help="Percentage of instances used for training, e.g. 66")
    parser.add_argument("--split-number", type=int,
                        help="Number of training instances, e.g. 800")
    parser.add_argument("-i", "--invert-split", action="store_true",
                        help="Invert the train/test split")
    parser.add_argument("--threshold", default=EVALUATION_DEFAULTS['threshold'],
                        help="'PCut1' (one calibrated threshold), 'PCutL' (one per label) or a number")
    parser.add_argument("--verbosity", type=int, default=EVALUATION_DEFAULTS['verbosity'],
                        help="Amount of evaluation output")
    parser.add_argument("--batched", action="store_true",
                        help="Predict the whole test set in one call where supported")
    parser.add_argument("-d", "--dump-model",
                        help="File to dump the trained classifier into")
    parser.add_argument("-l", "--load-model",
                        help="File to load a trained classifier from")
    parser.add_argument("--debug", action="store_true",
                        help="Verbose logging")
    return parser


def config_from_args(args: argparse.Namespace) -> EvaluationConfig:
    return EvaluationConfig(
        train_path=args.train_path,
        test_path=args.test_path,
        n_labels=args.n_labels,
        seed=args.seed,
        randomize=args.randomize,
        batched=args.batched,
        verbosity=args.verbosity,
        dump_model=args.dump_model,
        load_model=args.load_model,
        threshold=args.threshold,
        predictions_path=args.predictions_path,
        no_eval=args.no_eval,
        cross_validation=args.folds is not None,
        n_folds=args.folds if args.folds is not None else EVALUATION_DEFAULTS['n_folds'],
        cv_output_dir=args.cv_output_dir,
        split_percentage=args.split_percentage,
        split_number=args.split_number,
        invert_split=args.invert_split
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    try:
        if not args.train_path:
            raise ConfigurationError("You did not specify a dataset! (-t/--train)")
        config = config_from_args(args)
        classifier = None if args.load_model else make_classifier(args.classifier, args.multi_target)
    except ConfigurationError as e:
        print(f"[Error] {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    outcome = run_experiment(classifier, config)
    if not outcome.ok:
        print(f"[Error] {outcome.error}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    if outcome.report is not None:
        print(outcome.report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
