from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple
import os

from dotenv import load_dotenv

from .paths import ROOT, PATHS, ProjectPaths

load_dotenv(ROOT / ".env", override=False)


TRAINING_URL = "https://d396qusza40orc.cloudfront.net/predmachlearn/pml-training.csv"
SCORING_URL = "https://d396qusza40orc.cloudfront.net/predmachlearn/pml-testing.csv"

# Leading bookkeeping columns of the WLE tables: row id, participant,
# timestamps and sliding-window markers.
IDENTIFIER_COLUMNS: Tuple[str, ...] = (
    "X",
    "user_name",
    "raw_timestamp_part_1",
    "raw_timestamp_part_2",
    "cvtd_timestamp",
    "new_window",
    "num_window",
)


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "" or value.strip().lower() == "none":
        return None
    return int(value)


@dataclass
class Settings:
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    random_seed: int = int(os.getenv("RANDOM_SEED", "42"))

    training_url: str = os.getenv("TRAINING_URL", TRAINING_URL)
    scoring_url: str = os.getenv("SCORING_URL", SCORING_URL)
    outcome_column: str = os.getenv("OUTCOME_COLUMN", "classe")
    scoring_id_column: str = os.getenv("SCORING_ID_COLUMN", "problem_id")

    missing_threshold: float = float(os.getenv("MISSING_THRESHOLD", "0.95"))
    top_k_features: int = int(os.getenv("TOP_K_FEATURES", "10"))
    full_n_estimators: int = int(os.getenv("FULL_N_ESTIMATORS", "100"))
    reduced_n_estimators: int = int(os.getenv("REDUCED_N_ESTIMATORS", "10"))
    max_depth: Optional[int] = _optional_int(os.getenv("MAX_DEPTH"))
    imputation_strategy: str = os.getenv("IMPUTATION_STRATEGY", "median")
    importance_kind: str = os.getenv("IMPORTANCE_KIND", "impurity")
    n_jobs: int = int(os.getenv("N_JOBS", "-1"))

    raw_training_file: str = os.getenv("RAW_TRAINING_FILE", "pml_training.pkl")
    raw_scoring_file: str = os.getenv("RAW_SCORING_FILE", "pml_scoring.pkl")
    full_model_file: str = os.getenv("FULL_MODEL_FILE", "wle_full.joblib")
    reduced_model_file: str = os.getenv("REDUCED_MODEL_FILE", "wle_reduced.joblib")


settings = Settings()


@dataclass(frozen=True)
class RunConfig:
    """Everything a single pipeline run needs, passed explicitly to each stage."""

    training_url: str
    scoring_url: str
    raw_training_path: Path
    raw_scoring_path: Path
    full_model_path: Path
    reduced_model_path: Path
    reports_dir: Path

    outcome_column: str = "classe"
    scoring_id_column: str = "problem_id"
    identifier_columns: Tuple[str, ...] = field(default=IDENTIFIER_COLUMNS)
    missing_threshold: float = 0.95
    top_k_features: int = 10
    full_n_estimators: int = 100
    reduced_n_estimators: int = 10
    max_depth: Optional[int] = None
    imputation_strategy: str = "median"
    importance_kind: str = "impurity"
    random_state: int = 42
    n_jobs: int = -1

    @classmethod
    def from_settings(
        cls,
        config: Settings = settings,
        paths: ProjectPaths = PATHS,
    ) -> "RunConfig":
        return cls(
            training_url=config.training_url,
            scoring_url=config.scoring_url,
            raw_training_path=paths.data_raw / config.raw_training_file,
            raw_scoring_path=paths.data_raw / config.raw_scoring_file,
            full_model_path=paths.models_dir / config.full_model_file,
            reduced_model_path=paths.models_dir / config.reduced_model_file,
            reports_dir=paths.reports_dir,
            outcome_column=config.outcome_column,
            scoring_id_column=config.scoring_id_column,
            missing_threshold=config.missing_threshold,
            top_k_features=config.top_k_features,
            full_n_estimators=config.full_n_estimators,
            reduced_n_estimators=config.reduced_n_estimators,
            max_depth=config.max_depth,
            imputation_strategy=config.imputation_strategy,
            importance_kind=config.importance_kind,
            random_state=config.random_seed,
            n_jobs=config.n_jobs,
        )

    def to_dict(self) -> dict:
        """JSON-friendly view of the run configuration."""
        return {
            key: (str(value) if isinstance(value, Path) else list(value) if isinstance(value, tuple) else value)
            for key, value in self.__dict__.items()
        }


__all__ = ["Settings", "settings", "RunConfig", "IDENTIFIER_COLUMNS"]
