"""
Scoring models for PlainCompare.

Provides the composite Life Score.
"""

from plaincompare.ml.life_scorer import LifeScorer

__all__ = ["LifeScorer"]
