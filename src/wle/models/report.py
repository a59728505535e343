import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

import numpy as np
import pandas as pd
from matplotlib import pyplot as plt

logger = logging.getLogger(__name__)


class NpEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super(NpEncoder, self).default(obj)


def write_json(payload: Dict[str, Any], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=4, cls=NpEncoder)
    return path


def plot_importance(
    importances: pd.Series,
    top_n: int = 20,
    model_label: str = "Random forest",
    output_path: str = "reports/importance.png",
) -> str:
    """
    Horizontal bar chart of the ``top_n`` most important features.

    Parameters
    ----------
    importances : Series
        Importance scores indexed by feature name, already ranked.
    top_n : int
        Number of features to draw.
    model_label : str
        Used in the chart title.
    output_path : str
        Where to save the PNG.
    """
    top = importances.iloc[:top_n][::-1]

    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    fig, ax = plt.subplots(figsize=(8, max(3, 0.35 * len(top))))
    ax.barh(top.index.astype(str), top.to_numpy(), color="steelblue")
    ax.set_title(f"{model_label}: variable importance", fontsize=14)
    ax.set_xlabel(importances.name or "importance", fontsize=11)
    ax.tick_params(axis="y", labelsize=9)

    fig.savefig(output_path, bbox_inches="tight")
    plt.close(fig)
    logger.info("Plot saved to %s", output_path)
    return output_path


def save_run_artifacts(
    output_dir: Path,
    run_config: Dict[str, Any],
    metrics: Dict[str, Any],
    importances: pd.Series,
    predictions: pd.DataFrame,
    top_n: int = 20,
) -> Dict[str, Path]:
    """Write config, metrics, importances, predictions and the importance chart."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {
        "config": write_json(run_config, output_dir / "config.json"),
        "metrics": write_json(metrics, output_dir / "metrics.json"),
        "importance": output_dir / "importance.csv",
        "predictions": output_dir / "predictions.csv",
        "plot": output_dir / "importance.png",
    }
    importances.rename_axis("feature").reset_index().to_csv(paths["importance"], index=False)
    predictions.reset_index().to_csv(paths["predictions"], index=False)
    plot_importance(importances, top_n=top_n, output_path=str(paths["plot"]))

    logger.info("Artifacts written to %s", output_dir)
    return paths


__all__ = ["NpEncoder", "write_json", "plot_importance", "save_run_artifacts"]
