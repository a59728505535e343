import logging
from pathlib import Path
from typing import Any, Callable

from joblib import dump, load

logger = logging.getLogger(__name__)


def save_artifact(obj: Any, path: Path) -> Path:
    """Persist ``obj`` to ``path`` with joblib, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    dump(obj, path)
    return path


def load_artifact(path: Path) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Artifact not found: {path}")
    return load(path)


def cached(path: Path, build: Callable[[], Any], force: bool = False) -> Any:
    """Return the object cached at ``path``, building and saving it if absent.

    A cached object is reused as-is; delete the file (or pass
    ``force=True``) to recompute it.
    """
    path = Path(path)
    if path.exists() and not force:
        logger.info("Using cached artifact %s", path)
        return load_artifact(path)

    obj = build()
    save_artifact(obj, path)
    logger.info("Cached artifact written to %s", path)
    return obj
