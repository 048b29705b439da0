"""Confluence scoring and signal classification."""

from trend_core.scoring.classifier import classify
from trend_core.scoring.confluence import ConfluenceScorer, floor_percentile

__all__ = ["ConfluenceScorer", "classify", "floor_percentile"]
