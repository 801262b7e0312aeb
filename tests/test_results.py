"""
Tests for the result values and fold combination.
"""

import numpy as np
import pytest

from mlxeval.evaluation import (
    RawResult,
    ThresholdedResult,
    FinalReport,
    combine_results,
    StandardMetrics,
    finalize
)
from mlxeval.evaluation import result as R


def make_raw(n, L=2, start=0, info=None):
    predictions = np.arange(start, start + n * L, dtype=float).reshape(n, L) / 100.0
    actuals = np.ones((n, L))
    return RawResult(predictions, actuals, info=info or {R.DATASET: "toy"}, values={R.BUILD_TIME: 1.5})


class TestRawResult:
    """Test immutability and derivation."""

    def test_shape_validation(self):
        with pytest.raises(ValueError, match="must match"):
            RawResult(np.zeros((3, 2)), np.zeros((3, 3)))
        with pytest.raises(ValueError, match="2D"):
            RawResult(np.zeros(3), np.zeros(3))

    def test_arrays_are_read_only(self):
        raw = make_raw(3)
        with pytest.raises(ValueError):
            raw.predictions[0, 0] = 5.0

    def test_source_arrays_copied(self):
        predictions = np.zeros((2, 2))
        raw = RawResult(predictions, np.zeros((2, 2)))
        predictions[0, 0] = 1.0
        assert raw.predictions[0, 0] == 0.0

    def test_with_info_returns_new_value(self):
        raw = make_raw(2)
        tagged = raw.with_info({R.TYPE: R.TYPE_ML}, Verbosity=2)
        assert tagged.info[R.TYPE] == "ML"
        assert tagged.info[R.VERBOSITY] == "2"
        assert R.TYPE not in raw.info

    def test_with_values(self):
        raw = make_raw(2).with_values({R.N_TEST: 2})
        assert raw.values[R.N_TEST] == 2.0
        assert raw.values[R.BUILD_TIME] == 1.5

    def test_multi_target_from_type(self):
        assert make_raw(1, info={R.TYPE: R.TYPE_MT_CV}).is_multi_target()
        assert not make_raw(1, info={R.TYPE: R.TYPE_ML}).is_multi_target()

    def test_predictions_frame(self):
        frame = make_raw(3).predictions_frame(["a", "b"])
        assert list(frame.columns) == ["true:a", "true:b", "pred:a", "pred:b"]
        assert len(frame) == 3


class TestThresholdedResult:

    def test_vector_length_checked(self):
        with pytest.raises(ValueError, match="threshold vector length"):
            ThresholdedResult(make_raw(2, L=2), np.array([0.5, 0.5, 0.5]))

    def test_multi_target_rounds(self):
        raw = RawResult(np.array([[1.2, 2.7]]), np.array([[1, 3]]), info={R.TYPE: R.TYPE_MT})
        np.testing.assert_array_equal(ThresholdedResult(raw).binary_predictions(), [[1, 3]])

    def test_threshold_is_inclusive(self):
        raw = RawResult(np.array([[0.5, 0.49]]), np.zeros((1, 2)))
        np.testing.assert_array_equal(ThresholdedResult(raw, 0.5).binary_predictions(), [[1, 0]])


class TestCombineResults:

    def test_rows_in_fold_order(self):
        folds = [make_raw(3, start=0), make_raw(2, start=6), make_raw(4, start=10)]
        combined = combine_results(folds)
        assert combined.n_instances == 9
        np.testing.assert_array_equal(combined.predictions[:3], folds[0].predictions)
        np.testing.assert_array_equal(combined.predictions[3:5], folds[1].predictions)
        np.testing.assert_array_equal(combined.predictions[5:], folds[2].predictions)

    def test_metadata(self):
        """Info from the first fold, no values or model carried over."""
        first = make_raw(2, info={R.DATASET: "first"}).with_model("Model", "tree")
        combined = combine_results([first, make_raw(2, info={R.DATASET: "second"})])
        assert combined.info[R.DATASET] == "first"
        assert combined.values == {}
        assert combined.model == {}

    def test_empty(self):
        with pytest.raises(ValueError, match="No fold results"):
            combine_results([])

    def test_label_mismatch(self):
        with pytest.raises(ValueError, match="labels"):
            combine_results([make_raw(2, L=2), make_raw(2, L=3)])


class TestFinalReport:

    def test_render_sections(self):
        raw = make_raw(4).with_info({R.TYPE: R.TYPE_ML}).with_model("Model", "depth-2 tree")
        report = finalize(ThresholdedResult(raw, 0.05), verbosity=1)
        text = report.render()
        assert "== Evaluation Info" in text
        assert "== Predictive Performance" in text
        assert "== Additional Measurements" in text
        assert "== Model" in text
        assert "depth-2 tree" in text
        assert "Hamming score" in text

    def test_write(self, tmp_path):
        raw = make_raw(4).with_info({R.TYPE: R.TYPE_ML})
        report = finalize(ThresholdedResult(raw, 0.5))
        path = report.write(tmp_path / "results.txt")
        assert path.read_text() == str(report)

    def test_with_values_keeps_stats(self):
        raw = make_raw(4).with_info({R.TYPE: R.TYPE_ML})
        report = finalize(ThresholdedResult(raw, 0.5), metrics=StandardMetrics())
        updated = report.with_values({R.N_FOLDS: 10})
        assert updated.values[R.N_FOLDS] == 10.0
        assert updated.stats == report.stats
        assert R.N_FOLDS not in report.values
