"""Metrics exports."""

from .base import IMetric
from .core import ExplorationMetrics

__all__ = ["ExplorationMetrics", "IMetric"]
