from .base_model import BaseModel
from .forest import WLEForestModel, fit_forest
from .evaluation import (
    variable_importance,
    oob_error,
    oob_confusion_matrix,
    summarize_model,
    predict_labels,
    prediction_agreement,
)
from .report import plot_importance, save_run_artifacts
