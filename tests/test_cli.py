"""
Tests for the command-line front end.
"""

import pytest

from mlxeval.classifiers import SklearnClassifier, SklearnMultiTargetClassifier
from mlxeval.cli import build_parser, config_from_args, main, make_classifier, resolve_factory
from mlxeval.data import generate_multilabel_dataset, save_dataset
from mlxeval.exceptions import ConfigurationError


@pytest.fixture
def scene_file(tmp_path):
    data = generate_multilabel_dataset(n_instances=60, n_labels=3, n_features=5, random_state=0)
    return save_dataset(data, tmp_path / "scene.n_labels=3.csv")


class TestParser:

    def test_defaults(self):
        config = config_from_args(build_parser().parse_args(["-t", "train.csv"]))
        assert config.threshold == "PCut1"
        assert not config.cross_validation
        assert config.n_folds == 10
        assert config.n_labels is None

    def test_folds_flag(self):
        args = build_parser().parse_args(["-t", "train.csv", "-x"])
        assert config_from_args(args).cross_validation
        assert config_from_args(args).n_folds == 10
        args = build_parser().parse_args(["-t", "train.csv", "-x", "5"])
        assert config_from_args(args).n_folds == 5

    def test_split_options(self):
        args = build_parser().parse_args(
            ["-t", "train.csv", "-C", "6", "--split-percentage", "66", "-i", "--threshold", "0.4"]
        )
        config = config_from_args(args)
        assert config.n_labels == 6
        assert config.split_percentage == 66
        assert config.invert_split
        assert config.threshold == "0.4"

    def test_train_optional_at_parse_time(self):
        assert build_parser().parse_args([]).train_path is None


class TestClassifierFactory:

    def test_resolve(self):
        factory = resolve_factory("sklearn.tree:DecisionTreeClassifier")
        assert factory.__name__ == "DecisionTreeClassifier"

    @pytest.mark.parametrize("spec", ["sklearn.tree", "no.such.module:Thing", "sklearn.tree:NoSuchTree"])
    def test_resolve_errors(self, spec):
        with pytest.raises(ConfigurationError):
            resolve_factory(spec)

    def test_wrapping(self):
        assert type(make_classifier("sklearn.tree:DecisionTreeClassifier")) is SklearnClassifier
        assert isinstance(
            make_classifier("sklearn.tree:DecisionTreeClassifier", multi_target=True),
            SklearnMultiTargetClassifier
        )


class TestMain:

    def test_split_run(self, scene_file, capsys):
        status = main(["-t", str(scene_file), "--classifier", "sklearn.tree:DecisionTreeClassifier"])
        assert status == 0
        out = capsys.readouterr().out
        assert "== Evaluation Info" in out
        assert "scene" in out

    def test_cross_validation_run(self, scene_file, tmp_path, capsys):
        out_dir = tmp_path / "cv"
        out_dir.mkdir()
        status = main([
            "-t", str(scene_file), "-x", "3", "--x-out-dir", str(out_dir),
            "--threshold", "0.5", "--classifier", "sklearn.tree:DecisionTreeClassifier"
        ])
        assert status == 0
        assert (out_dir / "results-cv.txt").exists()
        assert "ML-CV" in capsys.readouterr().out

    def test_failed_run(self, tmp_path, capsys):
        status = main(["-t", str(tmp_path / "missing.csv")])
        assert status == 1
        assert "[Error]" in capsys.readouterr().err

    def test_missing_train_file(self, capsys):
        """A missing -t is reported like any other configuration error."""
        status = main([])
        assert status == 1
        err = capsys.readouterr().err
        assert "[Error] You did not specify a dataset!" in err
        assert "usage:" in err

    def test_bad_classifier(self, scene_file, capsys):
        status = main(["-t", str(scene_file), "--classifier", "nowhere:Nothing"])
        assert status == 1
        err = capsys.readouterr().err
        assert "Cannot resolve classifier" in err
        assert "usage:" in err
