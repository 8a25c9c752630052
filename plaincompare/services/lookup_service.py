"""
Read-only queries over the published tables.

These are what page handlers and sitemap generators call. Nothing here
writes; a reader simply sees whichever snapshot was last committed.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from plaincompare.core.models import County, LifeScore, Metro, PopularComparison, State


DEFAULT_COMPARISON_LIMIT = 50


def get_metro_by_slug(db: Session, slug: str) -> Optional[Metro]:
    return db.get(Metro, slug)


def get_all_metros(db: Session) -> List[Metro]:
    return list(db.scalars(select(Metro).order_by(func.lower(Metro.name), Metro.slug)))


def get_state_by_slug(db: Session, slug: str) -> Optional[State]:
    return db.get(State, slug)


def get_all_states(db: Session) -> List[State]:
    return list(db.scalars(select(State).order_by(func.lower(State.name), State.slug)))


def get_county_by_slug(db: Session, slug: str) -> Optional[County]:
    return db.get(County, slug)


def get_all_counties(db: Session) -> List[County]:
    return list(db.scalars(select(County).order_by(func.lower(County.name), County.slug)))


def get_popular_comparisons(
    db: Session, level: str, limit: int = DEFAULT_COMPARISON_LIMIT
) -> List[PopularComparison]:
    query = (
        select(PopularComparison)
        .where(PopularComparison.level == level)
        .order_by(PopularComparison.slug_a, PopularComparison.slug_b)
        .limit(limit)
    )
    return list(db.scalars(query))


def get_life_score(db: Session, slug: str) -> Optional[LifeScore]:
    return db.get(LifeScore, slug)


def get_life_score_rankings(db: Session, entity_type: str) -> List[LifeScore]:
    """All scores for one level, best first."""
    query = (
        select(LifeScore)
        .where(LifeScore.type == entity_type)
        .order_by(LifeScore.composite_score.desc(), func.lower(LifeScore.name), LifeScore.slug)
    )
    return list(db.scalars(query))


def get_stats(db: Session) -> Dict[str, Any]:
    """Row counts shown on the home page."""
    return {
        "metro_count": db.scalar(select(func.count()).select_from(Metro)),
        "state_count": db.scalar(select(func.count()).select_from(State)),
        "county_count": db.scalar(select(func.count()).select_from(County)),
        "comparison_count": db.scalar(select(func.count()).select_from(PopularComparison)),
    }
