"""
Cleaning of the raw WLE training table.

The steps run in a fixed order:

1. empty-string cells become missing;
2. columns whose missing fraction reaches the threshold are dropped;
3. the known identifier / timestamp / window columns are dropped by name;
4. remaining measurements are typed as numbers, and columns that reach the
   threshold once unparseable cells count as missing are dropped too;
5. the outcome is typed as a categorical.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd

from ..config import IDENTIFIER_COLUMNS, RunConfig
from ..errors import DegenerateCleaningError, SchemaMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleanedDataset:
    """Cleaned table: numeric features plus a categorical outcome column."""

    frame: pd.DataFrame
    feature_columns: List[str]
    outcome_column: str
    dropped_sparse: List[str] = field(default_factory=list)
    dropped_identifiers: List[str] = field(default_factory=list)

    @property
    def X(self) -> pd.DataFrame:
        return self.frame[self.feature_columns]

    @property
    def y(self) -> pd.Series:
        return self.frame[self.outcome_column]

    @property
    def classes(self) -> List[str]:
        return list(self.y.cat.categories)


def normalize_missing(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``df`` where every empty-string cell is NaN."""
    df = df.copy()
    for c in df.columns:
        if pd.api.types.is_object_dtype(df[c]) or pd.api.types.is_string_dtype(df[c]):
            df[c] = df[c].mask(df[c].eq(""), np.nan)
    return df


def missing_fraction(df: pd.DataFrame) -> pd.Series:
    """Per-column fraction of missing cells."""
    if len(df) == 0:
        return pd.Series(0.0, index=df.columns)
    return df.isna().mean()


def prune_sparse_columns(df: pd.DataFrame, threshold: float):
    """Drop columns whose missing fraction is ``>= threshold``.

    Returns the pruned frame and the list of dropped column names.
    """
    if not 0.0 < threshold <= 1.0:
        raise ValueError(f"Missing-value threshold must be in (0, 1], got {threshold}")
    fractions = missing_fraction(df)
    dropped = [c for c in df.columns if fractions[c] >= threshold]
    return df.drop(columns=dropped), dropped


def check_identifier_columns(df: pd.DataFrame, names: Sequence[str]) -> None:
    missing = [c for c in names if c not in df.columns]
    if missing:
        raise SchemaMismatchError(
            f"Expected identifier columns not found: {missing}. "
            "The input schema differs from the known WLE layout.",
            missing_columns=missing,
        )


def drop_identifier_columns(df: pd.DataFrame, names: Sequence[str] = IDENTIFIER_COLUMNS) -> pd.DataFrame:
    """Drop the named identifier columns, failing if any is absent."""
    check_identifier_columns(df, names)
    return df.drop(columns=list(names))


def to_numeric_features(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """Coerce measurement columns to floats; unparseable cells become NaN."""
    df = df.copy()
    for c in columns:
        df[c] = pd.to_numeric(df[c], errors="coerce").astype("float64")
    return df


def type_outcome(values: pd.Series) -> pd.Series:
    """Turn outcome labels into a categorical over the observed values."""
    categories = sorted(values.dropna().unique())
    return pd.Series(
        pd.Categorical(values, categories=categories),
        index=values.index,
        name=values.name,
    )


def clean_training(
    raw: pd.DataFrame,
    outcome_column: str = "classe",
    threshold: float = 0.95,
    identifier_columns: Sequence[str] = IDENTIFIER_COLUMNS,
) -> CleanedDataset:
    """Produce a CleanedDataset from the raw training table."""
    if outcome_column not in raw.columns:
        raise DegenerateCleaningError(
            f"Outcome column '{outcome_column}' is not present in the training table."
        )
    check_identifier_columns(raw, identifier_columns)

    df = normalize_missing(raw)
    df, dropped_sparse = prune_sparse_columns(df, threshold)
    if outcome_column in dropped_sparse:
        raise DegenerateCleaningError(
            f"Outcome column '{outcome_column}' is at least {threshold:.0%} missing "
            "and would be dropped; training cannot proceed."
        )

    # identifiers already removed by the sparse pass are not dropped twice
    identifiers = [c for c in identifier_columns if c in df.columns]
    df = drop_identifier_columns(df, identifiers)

    measurements = [c for c in df.columns if c != outcome_column]
    df = to_numeric_features(df, measurements)
    # unparseable cells such as "#DIV/0!" only count as missing once typed
    df, dropped_typed = prune_sparse_columns(df, threshold)
    dropped_sparse = dropped_sparse + dropped_typed

    feature_columns = [c for c in df.columns if c != outcome_column]
    if not feature_columns:
        raise DegenerateCleaningError("No feature columns remain after cleaning.")

    df[outcome_column] = type_outcome(df[outcome_column])
    df = df[feature_columns + [outcome_column]].reset_index(drop=True)

    logger.info(
        "Cleaned training table: %d rows, %d features (%d sparse and %d identifier columns dropped)",
        len(df),
        len(feature_columns),
        len(dropped_sparse),
        len(identifiers),
    )
    return CleanedDataset(
        frame=df,
        feature_columns=feature_columns,
        outcome_column=outcome_column,
        dropped_sparse=dropped_sparse,
        dropped_identifiers=identifiers,
    )


def clean_with_config(raw: pd.DataFrame, config: RunConfig) -> CleanedDataset:
    return clean_training(
        raw,
        outcome_column=config.outcome_column,
        threshold=config.missing_threshold,
        identifier_columns=config.identifier_columns,
    )


__all__ = [
    "CleanedDataset",
    "normalize_missing",
    "missing_fraction",
    "prune_sparse_columns",
    "drop_identifier_columns",
    "to_numeric_features",
    "type_outcome",
    "clean_training",
    "clean_with_config",
]
