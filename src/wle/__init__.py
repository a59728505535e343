"""
Top-level package for the Weight Lifting Exercise (WLE) technique classifier.
Provides convenient access to global settings and paths.
"""

from .config import settings, RunConfig
from .paths import PATHS

__all__ = ["settings", "RunConfig", "PATHS"]
