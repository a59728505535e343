import pandas as pd
import pytest
import requests

from wle.config import RunConfig
from wle.data import ingest

CSV_TEXT = (
    '"","user_name","roll_belt","kurtosis_roll_belt","classe"\n'
    '"1","carlitos",1.41,"","A"\n'
    '"2","carlitos",1.42,"#DIV/0!","A"\n'
    '"3","pedro",NA,"","B"\n'
)


class _FakeResponse:
    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def _get(url, timeout=None):
        calls.append(url)
        return _FakeResponse(CSV_TEXT)

    monkeypatch.setattr(ingest.requests, "get", _get)
    return calls


def test_parse_table_names_row_id_column_and_reads_gaps():
    df = ingest.parse_table(CSV_TEXT)

    assert list(df.columns) == ["X", "user_name", "roll_belt", "kurtosis_roll_belt", "classe"]
    assert df["roll_belt"].isna().tolist() == [False, False, True]
    assert df["kurtosis_roll_belt"].isna().sum() == 2


def test_fetch_table_downloads_once_then_uses_cache(tmp_path, fake_get):
    cache = tmp_path / "raw" / "training.pkl"

    first = ingest.fetch_table("http://example.test/train.csv", cache)
    second = ingest.fetch_table("http://example.test/train.csv", cache)

    assert cache.exists()
    assert fake_get == ["http://example.test/train.csv"]
    pd.testing.assert_frame_equal(first, second)


def test_fetch_table_force_downloads_again(tmp_path, fake_get):
    cache = tmp_path / "training.pkl"
    ingest.fetch_table("http://example.test/train.csv", cache)
    ingest.fetch_table("http://example.test/train.csv", cache, force=True)
    assert len(fake_get) == 2


def test_stale_cache_is_used_as_is(tmp_path, fake_get):
    cache = tmp_path / "training.pkl"
    pd.DataFrame({"only": [1, 2]}).to_pickle(cache)

    df = ingest.fetch_table("http://example.test/train.csv", cache)

    assert list(df.columns) == ["only"]
    assert fake_get == []


def test_http_errors_propagate(tmp_path, monkeypatch):
    monkeypatch.setattr(ingest.requests, "get", lambda url, timeout=None: _FakeResponse("", 404))
    cache = tmp_path / "training.pkl"

    with pytest.raises(requests.HTTPError):
        ingest.fetch_table("http://example.test/missing.csv", cache)
    assert not cache.exists()


def test_load_raw_tables_uses_config_paths(tmp_path, fake_get):
    config = RunConfig(
        training_url="http://example.test/train.csv",
        scoring_url="http://example.test/test.csv",
        raw_training_path=tmp_path / "train.pkl",
        raw_scoring_path=tmp_path / "test.pkl",
        full_model_path=tmp_path / "full.joblib",
        reduced_model_path=tmp_path / "reduced.joblib",
        reports_dir=tmp_path / "reports",
    )

    training, scoring = ingest.load_raw_tables(config)

    assert fake_get == ["http://example.test/train.csv", "http://example.test/test.csv"]
    assert config.raw_training_path.exists() and config.raw_scoring_path.exists()
    assert len(training) == len(scoring) == 3
