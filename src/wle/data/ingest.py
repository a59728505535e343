import io
import logging
from pathlib import Path
from typing import Tuple

import pandas as pd
import requests

from ..config import RunConfig

logger = logging.getLogger(__name__)

ROW_ID_COLUMN = "X"
REQUEST_TIMEOUT = 60


def parse_table(text: str) -> pd.DataFrame:
    """Parse delimited WLE text into a DataFrame.

    The published CSVs start with an unnamed row-number column; it is
    given the name ``X`` so downstream code can refer to it explicitly.
    """
    df = pd.read_csv(io.StringIO(text), low_memory=False)
    first = df.columns[0]
    if str(first).startswith("Unnamed:") or str(first).strip() == "":
        df = df.rename(columns={first: ROW_ID_COLUMN})
    return df


def download_table(url: str, timeout: int = REQUEST_TIMEOUT) -> pd.DataFrame:
    logger.info("Fetching %s ...", url)
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return parse_table(resp.text)


def fetch_table(url: str, cache_path: Path, force: bool = False) -> pd.DataFrame:
    """Return the table at ``url``, using ``cache_path`` as a snapshot cache.

    A cached snapshot is used as-is whenever it exists; there is no
    staleness check.
    """
    cache_path = Path(cache_path)
    if cache_path.exists() and not force:
        logger.info("Loading cached table %s", cache_path)
        return pd.read_pickle(cache_path)

    df = download_table(url)
    cache_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_pickle(cache_path)
    logger.info("Snapshot saved: %s (%d rows, %d columns)", cache_path.name, len(df), df.shape[1])
    return df


def load_raw_tables(config: RunConfig, force: bool = False) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Load (training, scoring) raw tables for a run."""
    training = fetch_table(config.training_url, config.raw_training_path, force=force)
    scoring = fetch_table(config.scoring_url, config.raw_scoring_path, force=force)
    return training, scoring


__all__ = ["parse_table", "download_table", "fetch_table", "load_raw_tables", "ROW_ID_COLUMN"]
