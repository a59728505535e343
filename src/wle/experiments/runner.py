import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd

from ..config import RunConfig
from ..data import (
    CleanedDataset,
    align_scoring,
    clean_with_config,
    load_raw_tables,
    reduce_dataset,
)
from ..logging_config import add_run_log_file, remove_run_log_file
from ..models import (
    WLEForestModel,
    fit_forest,
    predict_labels,
    prediction_agreement,
    save_run_artifacts,
    summarize_model,
    variable_importance,
)
from ..utils import cached, set_global_seed

logger = logging.getLogger(__name__)


class PipelineRunner:
    """
    Runs the WLE analysis end to end:
    fetch -> clean -> fit -> evaluate -> reduce -> refit -> predict -> report.

    Raw tables and fitted models are cached at the paths named in the
    RunConfig; an existing cache file short-circuits that step.
    """

    def __init__(
        self,
        config: RunConfig,
        model_name: str = "WLE_RF",
        save_results: bool = True,
        force: bool = False,
    ):
        self.config = config
        self.model_name = model_name
        self.save_results = save_results
        self.force = force
        self.output_dir: Optional[Path] = None

        self.cleaned: Optional[CleanedDataset] = None
        self.reduced: Optional[CleanedDataset] = None
        self.full_model: Optional[WLEForestModel] = None
        self.reduced_model: Optional[WLEForestModel] = None

        if self.save_results:
            run_timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.output_dir = Path(config.reports_dir) / f"{run_timestamp}_{self.model_name}"
            self.output_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Instantiated runner for %s. Results will be in: %s", self.model_name, self.output_dir)
        else:
            logger.info("Instantiated runner for %s. Results will not be saved.", self.model_name)

    def _fit(self, data: CleanedDataset, n_estimators: int) -> WLEForestModel:
        logger.info("Fitting random forest: %d trees on %d rows x %d features",
                    n_estimators, len(data.frame), len(data.feature_columns))
        return fit_forest(
            data.X,
            data.y,
            n_estimators=n_estimators,
            max_depth=self.config.max_depth,
            imputation_strategy=self.config.imputation_strategy,
            random_state=self.config.random_state,
            n_jobs=self.config.n_jobs,
        )

    def run(self) -> Dict[str, Any]:
        """Executes the full pipeline."""
        handler = None
        if self.save_results and self.output_dir:
            handler = add_run_log_file(self.output_dir / "run_log.txt")
        try:
            return self._run_logic()
        finally:
            if handler is not None:
                remove_run_log_file(handler)

    def _run_logic(self) -> Dict[str, Any]:
        cfg = self.config
        set_global_seed(cfg.random_state)

        # 1. Load and clean
        training_raw, scoring_raw = load_raw_tables(cfg, force=self.force)
        self.cleaned = clean_with_config(training_raw, cfg)
        scoring = align_scoring(self.cleaned.feature_columns, scoring_raw, id_column=cfg.scoring_id_column)

        # 2. Full model
        self.full_model = cached(
            cfg.full_model_path,
            lambda: self._fit(self.cleaned, cfg.full_n_estimators),
            force=self.force,
        )
        full_summary = summarize_model(self.full_model, self.cleaned.y)
        importances = variable_importance(
            self.full_model, kind=cfg.importance_kind, X=self.cleaned.X, y=self.cleaned.y
        )

        # 3. Reduced model on the top-K features
        self.reduced = reduce_dataset(self.cleaned, importances, k=cfg.top_k_features)
        self.reduced_model = cached(
            cfg.reduced_model_path,
            lambda: self._fit(self.reduced, cfg.reduced_n_estimators),
            force=self.force,
        )
        reduced_summary = summarize_model(self.reduced_model, self.reduced.y)

        # 4. Predict the scoring rows with both models
        predictions = predict_labels(self.full_model, scoring)
        reduced_predictions = predict_labels(
            self.reduced_model, scoring.select(self.reduced_model.feature_columns)
        )
        agreement = prediction_agreement(predictions, reduced_predictions)
        logger.info("Full vs reduced model agreement on scoring rows: %.2f", agreement)

        metrics = {
            "rows_training": len(self.cleaned.frame),
            "rows_scoring": len(scoring),
            "n_features": len(self.cleaned.feature_columns),
            "dropped_sparse_columns": len(self.cleaned.dropped_sparse),
            "dropped_identifier_columns": len(self.cleaned.dropped_identifiers),
            "classes": self.cleaned.classes,
            "full_model": full_summary,
            "reduced_model": reduced_summary,
            "top_features": list(self.reduced.feature_columns),
            "prediction_agreement": agreement,
        }

        if self.save_results and self.output_dir:
            table = pd.DataFrame({"full": predictions, "reduced": reduced_predictions})
            save_run_artifacts(
                self.output_dir,
                run_config={"model_name": self.model_name, **cfg.to_dict()},
                metrics=metrics,
                importances=importances,
                predictions=table,
            )
            logger.info("Successfully completed run for %s.", self.model_name)
        else:
            logger.info("Successfully completed run for %s (without saving artifacts).", self.model_name)

        return {
            "oob_error": full_summary["oob_error"],
            "reduced_oob_error": reduced_summary["oob_error"],
            "top_features": list(self.reduced.feature_columns),
            "importances": importances,
            "predictions": predictions,
            "reduced_predictions": reduced_predictions,
            "agreement": agreement,
            "output_dir": self.output_dir,
        }
