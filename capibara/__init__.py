"""Aggregate YAML API fragment trees into one cross-referenced document."""

from .errors import CapibaraError
from .pipeline import BuildResult, Pipeline

__all__ = ["BuildResult", "CapibaraError", "Pipeline"]
