import logging
from typing import Optional

import numpy as np
import pandas as pd
from sklearn.inspection import permutation_importance
from sklearn.metrics import confusion_matrix

from ..data.align import ScoringDataset
from ..data.reduce import rank_features
from ..errors import ExternalCapabilityError
from .forest import WLEForestModel

logger = logging.getLogger(__name__)

IMPORTANCE_KINDS = ("impurity", "permutation")


def variable_importance(
    model: WLEForestModel,
    kind: str = "impurity",
    X: Optional[pd.DataFrame] = None,
    y: Optional[pd.Series] = None,
    n_repeats: int = 5,
) -> pd.Series:
    """Per-feature importance, ranked from most to least important.

    ``impurity`` is the forest's mean decrease in Gini impurity.
    ``permutation`` is the mean drop in accuracy when a feature is shuffled
    and needs the data it is measured on.
    """
    if not model.is_fitted:
        raise RuntimeError("Model must be fitted before computing importances.")
    if kind not in IMPORTANCE_KINDS:
        raise ValueError(f"Unknown importance kind '{kind}', expected one of {IMPORTANCE_KINDS}")

    if kind == "impurity":
        scores = model.forest.feature_importances_
    else:
        if X is None or y is None:
            raise ValueError("Permutation importance needs X and y.")
        try:
            result = permutation_importance(
                model.model,
                X[model.feature_columns],
                y,
                n_repeats=n_repeats,
                random_state=model.hyperparams.get("random_state"),
                n_jobs=model.hyperparams.get("n_jobs"),
            )
        except (ValueError, TypeError) as exc:
            raise ExternalCapabilityError(f"Permutation importance failed: {exc}") from exc
        scores = result.importances_mean

    importances = pd.Series(scores, index=model.feature_columns, name="importance")
    return rank_features(importances).rename("importance")


def oob_error(model: WLEForestModel) -> float:
    """Out-of-bag misclassification rate."""
    return 1.0 - model.oob_score


def oob_confusion_matrix(model: WLEForestModel, y: pd.Series) -> pd.DataFrame:
    """Confusion matrix of out-of-bag votes with a per-class error column.

    Rows are true classes, columns predicted classes. Rows that never were
    out of bag are left out.
    """
    votes = model.oob_decision_function
    voted = votes.sum(axis=1) > 0
    labels = list(model.classes_)

    y_true = np.asarray(y)[voted]
    y_pred = np.asarray(labels, dtype=object)[votes[voted].argmax(axis=1)]

    cm = confusion_matrix(y_true, y_pred, labels=labels)
    table = pd.DataFrame(cm, index=labels, columns=labels)
    totals = table.sum(axis=1).replace(0, np.nan)
    table["class_error"] = (1.0 - np.diag(cm) / totals).fillna(0.0)
    return table


def summarize_model(model: WLEForestModel, y: pd.Series) -> dict:
    """Headline out-of-bag numbers for a fitted model."""
    cm = oob_confusion_matrix(model, y)
    summary = {
        "n_estimators": model.hyperparams.get("n_estimators"),
        "n_features": len(model.feature_columns),
        "oob_error": oob_error(model),
        "class_error": cm["class_error"].to_dict(),
    }
    logger.info("OOB error estimate: %.4f (%d trees, %d features)",
                summary["oob_error"], summary["n_estimators"], summary["n_features"])
    return summary


def predict_labels(model: WLEForestModel, scoring: ScoringDataset) -> pd.Series:
    """One predicted class per scoring row, indexed by the scoring row ids."""
    labels = model.predict(scoring.frame)
    return pd.Series(labels, index=scoring.row_ids, name="prediction")


def prediction_agreement(a: pd.Series, b: pd.Series) -> float:
    """Share of rows on which two prediction series agree."""
    if len(a) != len(b):
        raise ValueError(f"Length mismatch: {len(a)} vs {len(b)} predictions.")
    if len(a) == 0:
        return float("nan")
    return float(np.mean(np.asarray(a) == np.asarray(b)))


__all__ = [
    "variable_importance",
    "oob_error",
    "oob_confusion_matrix",
    "summarize_model",
    "predict_labels",
    "prediction_agreement",
]
