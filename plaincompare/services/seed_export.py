"""
SQL seed export.

Writes the published tables as plain SQL files that can be replayed into
the production database: one schema file, then one file per table that
clears it and re-inserts every row in batches.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from sqlalchemy import Table, select
from sqlalchemy.dialects import sqlite
from sqlalchemy.orm import Session
from sqlalchemy.schema import CreateIndex, CreateTable

from plaincompare.core.models import County, LifeScore, Metro, PopularComparison, State

logger = logging.getLogger(__name__)

ROWS_PER_INSERT = 500

SCHEMA_FILE = "00-schema.sql"

SEED_FILES = (
    (Metro, "01-metros.sql"),
    (State, "02-states.sql"),
    (County, "03-counties.sql"),
    (PopularComparison, "04-comparisons.sql"),
    (LifeScore, "05-life-scores.sql"),
)


def sql_literal(value: Any) -> str:
    """Render one value as a SQL literal."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return repr(value)
    return "'" + str(value).replace("'", "''") + "'"


def generate_schema_sql(tables: Sequence[Table]) -> str:
    dialect = sqlite.dialect()
    statements: List[str] = []
    for table in tables:
        ddl = str(CreateTable(table, if_not_exists=True).compile(dialect=dialect)).strip()
        statements.append(ddl + ";")
    for table in tables:
        for index in sorted(table.indexes, key=lambda i: i.name):
            ddl = str(CreateIndex(index, if_not_exists=True).compile(dialect=dialect)).strip()
            statements.append(ddl + ";")
    return "\n".join(statements) + "\n"


def generate_table_sql(table_name: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> str:
    lines = [f"-- {table_name}: {len(rows)} rows", f"DELETE FROM {table_name};"]
    for start in range(0, len(rows), ROWS_PER_INSERT):
        batch = rows[start:start + ROWS_PER_INSERT]
        values = ",\n".join(
            "(" + ",".join(sql_literal(v) for v in row) + ")" for row in batch
        )
        lines.append(f"INSERT INTO {table_name} ({','.join(columns)}) VALUES\n{values};")
    return "\n".join(lines) + "\n"


class SeedExportService:
    """Export published tables to SQL seed files."""

    def __init__(self, db: Session, seed_dir: Union[str, Path]):
        self.db = db
        self.seed_dir = Path(seed_dir)

    def _ensure_seed_dir(self) -> None:
        self.seed_dir.mkdir(parents=True, exist_ok=True)

    def export_schema(self) -> Path:
        tables = [model.__table__ for model, _ in SEED_FILES]
        path = self.seed_dir / SCHEMA_FILE
        path.write_text(generate_schema_sql(tables), encoding="utf-8")
        logger.info(f"Schema -> {path.name}")
        return path

    def export_table(self, model, file_name: str) -> int:
        """Write one table's seed file; returns the row count (no file when empty)."""
        table = model.__table__
        columns = [c.name for c in table.columns]
        pk_columns = list(table.primary_key.columns)
        rows = [tuple(r) for r in self.db.execute(select(table).order_by(*pk_columns))]
        if not rows:
            logger.info(f"{table.name}: 0 rows, skipped")
            return 0

        path = self.seed_dir / file_name
        path.write_text(generate_table_sql(table.name, columns, rows), encoding="utf-8")
        logger.info(f"{table.name}: {len(rows)} rows -> {file_name}")
        return len(rows)

    def export_all(self) -> Dict[str, int]:
        """Write the schema file and every non-empty table; returns rows per file."""
        self._ensure_seed_dir()
        self.export_schema()
        written: Dict[str, int] = {}
        for model, file_name in SEED_FILES:
            count = self.export_table(model, file_name)
            if count:
                written[file_name] = count
        return written
