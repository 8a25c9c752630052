"""
Source database context.

A DataSources object is built once per run and handed to every component
that reads source data. Nothing in the package opens a source database on
its own, so tests can build the context from their own engines.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from plaincompare.core.errors import SourceUnavailableError
from plaincompare.core.source_registry import SOURCE_REGISTRY

logger = logging.getLogger(__name__)


def _readonly_sqlite_url(path: Path) -> str:
    return f"sqlite:///file:{path.resolve().as_posix()}?mode=ro&uri=true"


class DataSources:
    """Read-only engines for the seven source databases, keyed by source."""

    def __init__(self, engines: Mapping[str, Engine]):
        missing = [key for key in SOURCE_REGISTRY if key not in engines]
        if missing:
            raise SourceUnavailableError(
                source=missing[0],
                path="<not provided>",
                reason=f"no engine configured (missing: {', '.join(missing)})",
            )
        self._engines: Dict[str, Engine] = dict(engines)

    @classmethod
    def open(cls, paths: Mapping[str, str]) -> "DataSources":
        """
        Open every source database read-only.

        Raises:
            SourceUnavailableError: a file is missing, unreadable, or lacks
                one of its required tables. Raised for the first failing
                source in registry order.
        """
        engines: Dict[str, Engine] = {}
        try:
            for key in SOURCE_REGISTRY:
                raw_path = paths.get(key)
                if not raw_path:
                    raise SourceUnavailableError(key, "<unset>", "no path configured")
                path = Path(raw_path)
                if not path.is_file():
                    raise SourceUnavailableError(key, str(path), "file does not exist")
                engine = create_engine(_readonly_sqlite_url(path))
                engines[key] = engine
                _verify_engine(key, str(path), engine)
                logger.info(f"Opened {key} source: {path}")
        except SourceUnavailableError:
            for engine in engines.values():
                engine.dispose()
            raise
        return cls(engines)

    def engine(self, key: str) -> Engine:
        return self._engines[key]

    def describe(self) -> Dict[str, str]:
        """Source key -> database URL, for run records."""
        return {key: str(engine.url) for key, engine in self._engines.items()}

    def verify(self) -> None:
        """Re-check that every source is readable and has its tables."""
        for key, engine in self._engines.items():
            _verify_engine(key, str(engine.url), engine)

    def close(self) -> None:
        for engine in self._engines.values():
            engine.dispose()

    def __enter__(self) -> "DataSources":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def _verify_engine(key: str, path: str, engine: Engine) -> None:
    required = SOURCE_REGISTRY[key].required_tables
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            present = set(inspect(conn).get_table_names())
    except SQLAlchemyError as e:
        raise SourceUnavailableError(key, path, f"cannot read database: {e}") from e

    absent = _missing_tables(required, present)
    if absent:
        raise SourceUnavailableError(
            key, path, f"missing required tables: {', '.join(absent)}"
        )


def _missing_tables(required: Iterable[str], present: Iterable[str]) -> List[str]:
    present_set = set(present)
    return [t for t in required if t not in present_set]


def open_sources(paths: Optional[Mapping[str, str]] = None) -> DataSources:
    """Open sources from explicit paths, or from settings when omitted."""
    if paths is None:
        from plaincompare.core.config import get_settings
        paths = get_settings().source_paths()
    return DataSources.open(paths)
