"""
PlainCompare build pipeline.

Joins the regional statistics sources into one mapping database and
computes the composite Life Score for metros and states.
"""

__version__ = "0.1.0"
