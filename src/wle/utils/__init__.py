"""Miscellaneous utilities shared across modules."""

from .io import cached, load_artifact, save_artifact
from .seed import set_global_seed

__all__ = ["cached", "load_artifact", "save_artifact", "set_global_seed"]
