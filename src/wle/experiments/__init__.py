"""Orchestration of complete WLE runs."""

from .runner import PipelineRunner

__all__ = ["PipelineRunner"]
