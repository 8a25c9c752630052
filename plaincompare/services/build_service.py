"""
Full build orchestration.

Runs join -> comparisons -> extraction -> scoring entirely in memory, then
publishes every output table in one transaction. Either the whole new
snapshot lands or the previous one stays untouched.

Usage:
    with DataSources.open(settings.source_paths()) as sources:
        result = BuildService(engine, sources).run()
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from plaincompare.core.data_sources import DataSources
from plaincompare.core.database import create_tables, get_session_factory
from plaincompare.core.entities import ComparisonPair, EntitySet, ScoredEntity
from plaincompare.core.errors import PipelineError, PublishError
from plaincompare.core.models import (
    County,
    LifeScore,
    Metro,
    PipelineRun,
    PopularComparison,
    RunStatus,
    State,
)
from plaincompare.ingest.comparisons import build_popular_comparisons
from plaincompare.ingest.dimensions import extract_metro_values, extract_state_values
from plaincompare.ingest.entity_join import join_entities
from plaincompare.ingest.lookups import build_lookups
from plaincompare.ml.life_scorer import LifeScorer

logger = logging.getLogger(__name__)

BATCH_SIZE = 500


@dataclass
class BuildOutput:
    """Everything a publish writes, computed before any write happens."""

    entities: EntitySet
    comparisons: List[ComparisonPair]
    scores: List[ScoredEntity]
    summaries: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def row_counts(self) -> Dict[str, int]:
        counts = self.entities.counts()
        counts["popular_comparisons"] = len(self.comparisons)
        counts["life_scores"] = len(self.scores)
        return counts


@dataclass
class BuildResult:
    run_id: Optional[int]
    row_counts: Dict[str, int]
    summaries: Dict[str, Dict[str, Any]]


class BuildService:
    """Build and publish the mapping database from a DataSources context."""

    def __init__(
        self,
        engine: Engine,
        sources: DataSources,
        top_county_limit: int = 30,
        scorer: Optional[LifeScorer] = None,
    ):
        self.engine = engine
        self.sources = sources
        self.top_county_limit = top_county_limit
        self.scorer = scorer or LifeScorer()
        self.SessionLocal = get_session_factory(engine)

    # ------------------------------------------------------------------
    # Compute (read-only)
    # ------------------------------------------------------------------

    def compute(self) -> BuildOutput:
        lookups = build_lookups(self.sources)
        entities = join_entities(self.sources, lookups)
        comparisons = build_popular_comparisons(entities, self.top_county_limit)

        metro_values = extract_metro_values(self.sources, entities.metros)
        state_values = extract_state_values(self.sources, entities.states)

        metro_scores = self.scorer.score_population("metro", entities.metros, metro_values)
        state_scores = self.scorer.score_population("state", entities.states, state_values)

        summaries = {
            "metro": self.scorer.summarize(metro_scores),
            "state": self.scorer.summarize(state_scores),
        }
        for level, summary in summaries.items():
            logger.info(
                f"Scored {summary['total_scored']} {level}s. "
                f"Grade distribution: {summary['grade_distribution']}"
            )

        return BuildOutput(
            entities=entities,
            comparisons=comparisons,
            scores=metro_scores + state_scores,
            summaries=summaries,
        )

    # ------------------------------------------------------------------
    # Publish (single transaction)
    # ------------------------------------------------------------------

    @staticmethod
    def _check_score_slugs(scores: Sequence[ScoredEntity]) -> None:
        seen: Dict[str, str] = {}
        for s in scores:
            if s.slug in seen:
                raise PublishError(
                    f"Slug '{s.slug}' is scored as both {seen[s.slug]} and {s.type}",
                    table="life_scores",
                )
            seen[s.slug] = s.type

    @staticmethod
    def _insert_batched(db: Session, model, records: List[Dict[str, Any]]) -> None:
        for start in range(0, len(records), BATCH_SIZE):
            batch = records[start:start + BATCH_SIZE]
            db.execute(insert(model), batch)

    def publish(self, output: BuildOutput) -> Dict[str, int]:
        """
        Replace every published table with the new snapshot.

        Raises:
            PublishError: nothing was changed; the transaction was rolled back.
        """
        self._check_score_slugs(output.scores)

        tables = [
            (Metro, [e.to_record() for e in output.entities.metros]),
            (State, [e.to_record() for e in output.entities.states]),
            (County, [e.to_record() for e in output.entities.counties]),
            (PopularComparison, [p.to_record() for p in output.comparisons]),
            (LifeScore, [s.to_record() for s in output.scores]),
        ]

        db = self.SessionLocal()
        current_table = None
        try:
            for model, _ in tables:
                current_table = model.__tablename__
                db.execute(delete(model))
            for model, records in tables:
                current_table = model.__tablename__
                self._insert_batched(db, model, records)
                logger.info(f"  staged {len(records)} rows for {current_table}")
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Publish failed on {current_table}, rolled back: {e}")
            raise PublishError(f"Publish failed on {current_table}: {e}", table=current_table) from e
        finally:
            db.close()

        counts = output.row_counts()
        logger.info(f"Published snapshot: {counts}")
        return counts

    # ------------------------------------------------------------------
    # Run tracking
    # ------------------------------------------------------------------

    def _start_run(self) -> int:
        db = self.SessionLocal()
        try:
            run = PipelineRun(
                status=RunStatus.RUNNING,
                config={
                    "top_county_limit": self.top_county_limit,
                    "sources": self.sources.describe(),
                },
                started_at=datetime.utcnow(),
            )
            db.add(run)
            db.commit()
            db.refresh(run)
            return run.id
        finally:
            db.close()

    def _finish_run(
        self,
        run_id: int,
        status: RunStatus,
        row_counts: Optional[Dict[str, int]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        db = self.SessionLocal()
        try:
            run = db.get(PipelineRun, run_id)
            if run is None:
                return
            run.status = status
            run.completed_at = datetime.utcnow()
            run.row_counts = row_counts
            if error is not None:
                run.error_message = str(error)
                if isinstance(error, PipelineError):
                    run.error_details = error.to_dict()
            db.commit()
        finally:
            db.close()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self) -> BuildResult:
        """
        Verify sources, compute, publish.

        A SourceUnavailableError from verification is raised before the
        output database is touched. Later failures mark the run failed and
        propagate.
        """
        self.sources.verify()
        create_tables(self.engine)

        run_id = self._start_run()
        logger.info(f"Build run {run_id} started")

        try:
            output = self.compute()
            counts = self.publish(output)
        except SQLAlchemyError as e:
            error = PipelineError(f"Reading source data failed: {e}")
            self._finish_run(run_id, RunStatus.FAILED, error=error)
            raise error from e
        except PipelineError as e:
            self._finish_run(run_id, RunStatus.FAILED, error=e)
            raise
        except Exception as e:
            logger.error(f"Build run {run_id} failed: {e}", exc_info=True)
            self._finish_run(run_id, RunStatus.FAILED, error=e)
            raise

        self._finish_run(run_id, RunStatus.SUCCESS, row_counts=counts)
        logger.info(f"Build run {run_id} complete")
        return BuildResult(run_id=run_id, row_counts=counts, summaries=output.summaries)
