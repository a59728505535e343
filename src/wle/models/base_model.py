from abc import ABC, abstractmethod
from typing import Any, Dict


# ============================================================
# Abstract base model
# ============================================================

class BaseModel(ABC):
    """
    Abstract base class for all technique classifiers.
    The interface is intentionally minimal: fit + predict.
    """

    def __init__(self) -> None:
        self.hyperparams: Dict[str, Any] = {}
        self._is_fitted: bool = False

    @abstractmethod
    def fit(self, X, y) -> "BaseModel":
        """Fit the model on a given training sample."""
        ...

    @abstractmethod
    def predict(self, X):
        """Predict class labels for new covariates X."""
        ...

    @property
    def is_fitted(self) -> bool:
        return self._is_fitted
