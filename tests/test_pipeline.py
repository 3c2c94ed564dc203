import joblib
import numpy as np
import pytest

from conftest import GOOD_INPUTS, FakeModel, fit_logreg, meta_doc, write_json
from penalty.errors import InputValidationError, ModelLoadError, NotReadyError, PredictionError
from penalty.model import ModelHandle, load_model
from penalty.pipeline import PredictionContext, PredictionPipeline, PredictionResult, classify, load_context


# -------------------------------------------------------------------
# End-to-end scenarios
# -------------------------------------------------------------------

def test_scenario_goal(ready_context, fake_model):
    result = PredictionPipeline(ready_context).predict(GOOD_INPUTS)

    assert result == PredictionResult(probability=0.73, label="GOAL")
    assert result.render() == "GOAL — Probabilidad de gol: 73.0%"

    (vec,) = fake_model.calls
    np.testing.assert_allclose(vec, [(95 - 92.5) / 12.0, -0.5, 0.0, 1, 0, 0, 1, 0])


def test_scenario_out_of_range_never_calls_model(ready_context, fake_model):
    with pytest.raises(InputValidationError) as exc:
        PredictionPipeline(ready_context).predict(dict(GOOD_INPUTS, velocity=200))
    assert exc.value.result.field == "velocity"
    assert exc.value.result.bounds == (70.0, 115.0)
    assert fake_model.calls == []


def test_scenario_metadata_missing_is_not_ready(tmp_path, artifacts):
    _, model_path = artifacts
    ctx = load_context(str(tmp_path / "missing.json"), model_path)
    assert not ctx.ready
    assert ctx.errors[0].startswith("metadata:")

    with pytest.raises(NotReadyError):
        PredictionPipeline(ctx).predict(GOOD_INPUTS)


def test_not_ready_wins_over_invalid_input():
    with pytest.raises(NotReadyError):
        PredictionPipeline(PredictionContext()).predict(dict(GOOD_INPUTS, velocity="abc"))


def test_miss_below_threshold(descriptor):
    ctx = PredictionContext(metadata=descriptor, model=FakeModel(0.2))
    result = PredictionPipeline(ctx).predict(GOOD_INPUTS)
    assert result.label == "MISS"
    assert result.render() == "MISS — Probabilidad de gol: 20.0%"


@pytest.mark.parametrize("p,label", [(0.5, "GOAL"), (0.4999, "MISS"), (1.0, "GOAL"), (0.0, "MISS")])
def test_threshold_is_inclusive(p, label):
    assert classify(p, 0.5) == label


def test_same_inputs_same_vector(ready_context):
    pipeline = PredictionPipeline(ready_context)
    np.testing.assert_array_equal(pipeline.build_vector(GOOD_INPUTS), pipeline.build_vector(GOOD_INPUTS))


def test_blank_categorical_treated_as_absent(ready_context, fake_model):
    PredictionPipeline(ready_context).predict(dict(GOOD_INPUTS, pressure_level="  ", dominant_foot=None))
    np.testing.assert_array_equal(fake_model.calls[0][3:], np.zeros(5))


@pytest.mark.parametrize("bad", [1.5, -0.1, float("nan")])
def test_non_probability_output_is_prediction_error(descriptor, bad):
    ctx = PredictionContext(metadata=descriptor, model=FakeModel(bad))
    with pytest.raises(PredictionError):
        PredictionPipeline(ctx).predict(GOOD_INPUTS)


def test_partial_ranges_table_still_builds_full_vector(ready_context, fake_model):
    pipeline = PredictionPipeline(ready_context, ranges={"velocity": (60, 140)})

    assert pipeline.predict(dict(GOOD_INPUTS, velocity=130)).label == "GOAL"
    np.testing.assert_allclose(fake_model.calls[0][:3], [(130 - 92.5) / 12.0, -0.5, 0.0])

    with pytest.raises(InputValidationError) as exc:
        pipeline.predict({k: v for k, v in GOOD_INPUTS.items() if k != "angle"})
    assert exc.value.result.field == "angle"
    assert len(fake_model.calls) == 1


def test_model_exception_is_prediction_error(descriptor):
    class Broken:
        def predict(self, vector):
            raise RuntimeError("boom")

    ctx = PredictionContext(metadata=descriptor, model=Broken())
    with pytest.raises(PredictionError, match="boom"):
        PredictionPipeline(ctx).predict(GOOD_INPUTS)


# -------------------------------------------------------------------
# Startup loading
# -------------------------------------------------------------------

def test_load_context_ready_with_sklearn_model(artifacts):
    meta_path, model_path = artifacts
    ctx = load_context(str(meta_path), model_path)

    assert ctx.ready, ctx.errors
    assert ctx.status()["metadata_sha256"]
    p = PredictionPipeline(ctx).predict(GOOD_INPUTS).probability
    assert 0.0 <= p <= 1.0


def test_model_package_dict_is_unwrapped(tmp_path):
    path = tmp_path / "model.pkl"
    joblib.dump({"model": fit_logreg(8), "feature_columns": ["x"] * 8}, path)
    assert load_model(path).input_width == 8


def test_width_mismatch_blocks_predictions(tmp_path):
    meta_path = write_json(tmp_path / "meta.json", meta_doc())
    model_path = tmp_path / "model.joblib"
    joblib.dump(fit_logreg(5), model_path)

    ctx = load_context(str(meta_path), model_path)
    assert not ctx.ready
    assert any(e.startswith("schema:") for e in ctx.errors)
    with pytest.raises(NotReadyError):
        PredictionPipeline(ctx).predict(GOOD_INPUTS)


def test_missing_model_is_not_ready(tmp_path):
    meta_path = write_json(tmp_path / "meta.json", meta_doc())
    ctx = load_context(str(meta_path), tmp_path / "nope.joblib")
    assert ctx.metadata is not None
    assert not ctx.ready
    assert ctx.errors[0].startswith("model:")


def test_unusable_model_object(tmp_path):
    path = tmp_path / "model.joblib"
    joblib.dump({"weights": [1, 2, 3]}, path)
    with pytest.raises(ModelLoadError):
        load_model(path)


def test_decision_function_fallback_is_squashed():
    class Margin:
        def decision_function(self, X):
            return np.array([0.0])

    assert ModelHandle(Margin()).predict([1.0, 2.0]) == pytest.approx(0.5)


def test_predict_only_model():
    class Hard:
        def predict(self, X):
            assert X.shape == (1, 2)
            return np.array([1])

    assert ModelHandle(Hard()).predict([1.0, 2.0]) == 1.0
