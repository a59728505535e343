import json

import pytest

from conftest import make_raw_scoring, make_raw_training
from wle.config import RunConfig
from wle.errors import SchemaMismatchError
from wle.experiments import runner as runner_module


def _config(tmp_path, **overrides) -> RunConfig:
    params = dict(
        training_url="http://example.test/train.csv",
        scoring_url="http://example.test/test.csv",
        raw_training_path=tmp_path / "data" / "raw" / "pml_training.pkl",
        raw_scoring_path=tmp_path / "data" / "raw" / "pml_scoring.pkl",
        full_model_path=tmp_path / "models" / "wle_full.joblib",
        reduced_model_path=tmp_path / "models" / "wle_reduced.joblib",
        reports_dir=tmp_path / "reports",
        top_k_features=3,
        full_n_estimators=30,
        reduced_n_estimators=10,
        random_state=0,
        n_jobs=1,
    )
    params.update(overrides)
    return RunConfig(**params)


@pytest.fixture
def seeded_config(tmp_path):
    """Config whose raw-table caches already exist, so nothing is downloaded."""
    config = _config(tmp_path)
    config.raw_training_path.parent.mkdir(parents=True)
    make_raw_training().to_pickle(config.raw_training_path)
    make_raw_scoring().to_pickle(config.raw_scoring_path)
    return config


def test_pipeline_runs_end_to_end(seeded_config):
    runner = runner_module.PipelineRunner(seeded_config)
    results = runner.run()

    assert 0.0 <= results["oob_error"] <= 1.0
    assert 0.0 <= results["reduced_oob_error"] <= 1.0
    assert len(results["top_features"]) == 3
    assert results["top_features"][0] == "roll_belt"
    assert runner.reduced.frame.shape[1] == 4
    assert runner.full_model.get_params()["n_estimators"] == 30
    assert runner.reduced_model.get_params()["n_estimators"] == 10
    assert runner.reduced_model.feature_columns == results["top_features"]

    predictions = results["predictions"]
    assert predictions.index.name == "problem_id"
    assert len(predictions) == len(results["reduced_predictions"]) == 20
    assert 0.0 <= results["agreement"] <= 1.0

    assert seeded_config.full_model_path.exists()
    assert seeded_config.reduced_model_path.exists()

    out = results["output_dir"]
    for name in ["config.json", "metrics.json", "importance.csv", "predictions.csv", "importance.png", "run_log.txt"]:
        assert (out / name).exists(), name

    metrics = json.loads((out / "metrics.json").read_text(encoding="utf-8"))
    assert metrics["classes"] == ["A", "B", "C", "D", "E"]
    assert metrics["n_features"] == 4
    assert metrics["dropped_sparse_columns"] == 2
    assert metrics["dropped_identifier_columns"] == 7
    assert metrics["top_features"] == results["top_features"]


def test_cached_models_short_circuit_training(seeded_config, monkeypatch):
    first = runner_module.PipelineRunner(seeded_config, save_results=False).run()

    def _no_fit(self, data, n_estimators):
        raise AssertionError("cached model should have been reused")

    monkeypatch.setattr(runner_module.PipelineRunner, "_fit", _no_fit)
    second = runner_module.PipelineRunner(seeded_config, save_results=False).run()

    assert second["output_dir"] is None
    assert second["predictions"].equals(first["predictions"])
    assert second["top_features"] == first["top_features"]


def test_scoring_schema_mismatch_aborts_run(tmp_path):
    config = _config(tmp_path)
    config.raw_training_path.parent.mkdir(parents=True)
    make_raw_training().to_pickle(config.raw_training_path)
    make_raw_scoring().drop(columns=["yaw_belt"]).to_pickle(config.raw_scoring_path)

    with pytest.raises(SchemaMismatchError):
        runner_module.PipelineRunner(config, save_results=False).run()
    assert not config.full_model_path.exists()
