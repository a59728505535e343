import logging
from dataclasses import dataclass
from typing import Sequence

import pandas as pd

from ..errors import SchemaMismatchError
from .clean import normalize_missing, to_numeric_features

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringDataset:
    """Scoring rows restricted to the training feature columns."""

    frame: pd.DataFrame
    row_ids: pd.Index

    @property
    def feature_columns(self):
        return list(self.frame.columns)

    def __len__(self) -> int:
        return len(self.frame)

    def select(self, columns: Sequence[str]) -> "ScoringDataset":
        """Restrict to a subset of feature columns, e.g. a reduced model's."""
        columns = list(columns)
        absent = [c for c in columns if c not in self.frame.columns]
        if absent:
            raise SchemaMismatchError(
                f"Scoring dataset has no column(s) {absent}", missing_columns=absent
            )
        return ScoringDataset(frame=self.frame[columns], row_ids=self.row_ids)


def align_scoring(
    feature_columns: Sequence[str],
    raw_scoring: pd.DataFrame,
    id_column: str = "problem_id",
) -> ScoringDataset:
    """Select exactly ``feature_columns`` (same order) from the scoring table.

    The scoring table's own missingness plays no part in column selection;
    it inherits the training table's choice.
    """
    feature_columns = list(feature_columns)
    absent = [c for c in feature_columns if c not in raw_scoring.columns]
    if absent:
        raise SchemaMismatchError(
            f"Scoring table is missing {len(absent)} feature column(s) selected for training: {absent}",
            missing_columns=absent,
        )

    df = normalize_missing(raw_scoring)
    if id_column in df.columns:
        row_ids = pd.Index(df[id_column].to_numpy(), name=id_column)
    else:
        row_ids = pd.RangeIndex(len(df), name="row")

    frame = to_numeric_features(df[feature_columns], feature_columns).reset_index(drop=True)
    logger.info("Aligned scoring table: %d rows, %d features", len(frame), len(feature_columns))
    return ScoringDataset(frame=frame, row_ids=row_ids)


__all__ = ["ScoringDataset", "align_scoring"]
