import warnings
from typing import Any, List, Optional

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier
from sklearn.impute import SimpleImputer
from sklearn.pipeline import Pipeline

from ..errors import ExternalCapabilityError, SchemaMismatchError
from .base_model import BaseModel


class WLEForestModel(BaseModel):
    """
    Random forest classifier for lift technique, with imputation of the
    residual missing measurements in front of it.

    The forest is fitted with out-of-bag scoring enabled, so a
    generalization-error estimate comes out of training without a
    separate validation split.
    """

    def __init__(
        self,
        n_estimators: int = 100,
        max_depth: Optional[int] = None,
        imputation_strategy: str = "median",
        random_state: int = 42,
        n_jobs: int = -1,
        **kwargs: Any,
    ):
        super().__init__()
        self.hyperparams = {
            "n_estimators": n_estimators,
            "max_depth": max_depth,
            "imputation_strategy": imputation_strategy,
            "random_state": random_state,
            "n_jobs": n_jobs,
            **kwargs,
        }
        self.model = Pipeline(
            [
                ("impute", SimpleImputer(strategy=imputation_strategy, keep_empty_features=True)),
                (
                    "rf",
                    RandomForestClassifier(
                        n_estimators=n_estimators,
                        max_depth=max_depth,
                        oob_score=True,
                        random_state=random_state,
                        n_jobs=n_jobs,
                        **kwargs,
                    ),
                ),
            ]
        )
        self.feature_columns: List[str] = []
        self.classes_: List[Any] = []

    @property
    def forest(self) -> RandomForestClassifier:
        return self.model.named_steps["rf"]

    def fit(self, X: pd.DataFrame, y: pd.Series) -> "WLEForestModel":
        try:
            # forests with few trees leave some rows without OOB votes
            with warnings.catch_warnings():
                warnings.filterwarnings("ignore", message="Some inputs do not have OOB scores")
                self.model.fit(X, y)
        except (ValueError, TypeError) as exc:
            raise ExternalCapabilityError(f"Random forest training failed: {exc}") from exc

        self.feature_columns = list(X.columns)
        self.classes_ = list(self.forest.classes_)
        self._is_fitted = True
        return self

    def _check_columns(self, X: pd.DataFrame) -> pd.DataFrame:
        if not self.is_fitted:
            raise RuntimeError("WLEForestModel must be fitted before calling predict().")
        absent = [c for c in self.feature_columns if c not in X.columns]
        extra = [c for c in X.columns if c not in self.feature_columns]
        if absent or extra:
            raise SchemaMismatchError(
                f"Prediction columns do not match training features (missing={absent}, unexpected={extra})",
                missing_columns=absent,
            )
        return X[self.feature_columns]

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        X = self._check_columns(X)
        try:
            return self.model.predict(X)
        except (ValueError, TypeError) as exc:
            raise ExternalCapabilityError(f"Random forest prediction failed: {exc}") from exc

    def predict_proba(self, X: pd.DataFrame) -> pd.DataFrame:
        X = self._check_columns(X)
        try:
            proba = self.model.predict_proba(X)
        except (ValueError, TypeError) as exc:
            raise ExternalCapabilityError(f"Random forest prediction failed: {exc}") from exc
        return pd.DataFrame(proba, columns=self.classes_, index=X.index)

    @property
    def oob_score(self) -> float:
        if not self.is_fitted:
            raise RuntimeError("WLEForestModel must be fitted before reading the OOB score.")
        return float(self.forest.oob_score_)

    @property
    def oob_decision_function(self) -> np.ndarray:
        if not self.is_fitted:
            raise RuntimeError("WLEForestModel must be fitted before reading OOB votes.")
        return np.asarray(self.forest.oob_decision_function_)

    def get_params(self):
        """Returns the hyperparameters of the model."""
        return self.hyperparams


def fit_forest(X: pd.DataFrame, y: pd.Series, **hyperparams: Any) -> WLEForestModel:
    """Fit a WLEForestModel in one call."""
    return WLEForestModel(**hyperparams).fit(X, y)
