"""Data layer: fetching the raw WLE tables, cleaning, alignment, feature reduction."""

from .ingest import fetch_table, load_raw_tables
from .clean import CleanedDataset, clean_training, clean_with_config
from .align import ScoringDataset, align_scoring
from .reduce import rank_features, select_top_features, reduce_dataset

__all__ = [
    "fetch_table",
    "load_raw_tables",
    "CleanedDataset",
    "clean_training",
    "clean_with_config",
    "ScoringDataset",
    "align_scoring",
    "rank_features",
    "select_top_features",
    "reduce_dataset",
]
