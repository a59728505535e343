import logging
from typing import List

import numpy as np
import pandas as pd

from ..errors import SchemaMismatchError
from .clean import CleanedDataset

logger = logging.getLogger(__name__)


def rank_features(importances: pd.Series) -> pd.Series:
    """Sort importances descending.

    Equal scores keep the order in which the features appear in
    ``importances`` (the dataset's column order).
    """
    scores = pd.Series(importances, dtype="float64")
    order = np.argsort(-scores.to_numpy(), kind="stable")
    return scores.iloc[order]


def select_top_features(importances: pd.Series, k: int) -> List[str]:
    """Names of the ``k`` most important features (all of them if fewer)."""
    if k < 1:
        raise ValueError(f"k must be a positive integer, got {k}")
    return list(rank_features(importances).index[:k])


def reduce_dataset(cleaned: CleanedDataset, importances: pd.Series, k: int = 10) -> CleanedDataset:
    """Keep the top-``k`` features plus the unchanged outcome column."""
    unknown = [c for c in importances.index if c not in cleaned.feature_columns]
    if unknown:
        raise SchemaMismatchError(
            f"Importance scores reference columns absent from the dataset: {unknown}",
            missing_columns=unknown,
        )

    top = select_top_features(importances, k)
    frame = cleaned.frame[top + [cleaned.outcome_column]].copy()
    logger.info("Reduced dataset to top %d features: %s", len(top), top)
    return CleanedDataset(
        frame=frame,
        feature_columns=top,
        outcome_column=cleaned.outcome_column,
        dropped_sparse=list(cleaned.dropped_sparse),
        dropped_identifiers=list(cleaned.dropped_identifiers),
    )


__all__ = ["rank_features", "select_top_features", "reduce_dataset"]
