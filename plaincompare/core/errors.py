"""
Pipeline error classification.

Every failure that aborts a build is a PipelineError. Missing data is not
an error anywhere in the pipeline: it travels as a DimensionValue with no
value and is handled by the scorer.
"""

from typing import Optional, Dict, Any


class PipelineError(Exception):
    """
    Base exception for build failures.

    Attributes:
        message: Human-readable error description
        source: Source key involved (e.g., 'cost', 'crime'), if any
        details: Extra context for debugging
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.source = source
        self.details = details or {}

    def __str__(self) -> str:
        parts = [self.message]
        if self.source:
            parts.insert(0, f"[{self.source}]")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/run records."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "source": self.source,
            "details": self.details,
        }


class SourceUnavailableError(PipelineError):
    """
    A required source database cannot be opened at build start.

    Raised before anything is written to the output database.
    """

    def __init__(self, source: str, path: str, reason: str):
        super().__init__(
            message=f"Source database unavailable at {path}: {reason}",
            source=source,
            details={"path": path, "reason": reason},
        )
        self.path = path
        self.reason = reason


class PublishError(PipelineError):
    """
    Committing the output tables failed.

    The transaction has been rolled back; readers still see the
    previously published tables.
    """

    def __init__(self, message: str, table: Optional[str] = None):
        super().__init__(
            message=message,
            details={"table": table} if table else None,
        )
        self.table = table
