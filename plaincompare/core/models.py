"""
SQLAlchemy models for the output mapping database.

metros, states, counties, popular_comparisons and life_scores are the
published tables. They are rebuilt in full on every run and read by the
site. pipeline_runs is bookkeeping for the build itself.
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, Enum, Float, Index, CheckConstraint
from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


class RunStatus(str, enum.Enum):
    """Build run status enumeration - ONLY these values allowed."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class EntityType(str, enum.Enum):
    """Geographic entity level."""
    METRO = "metro"
    STATE = "state"
    COUNTY = "county"


class Metro(Base):
    """Metro area (CBSA). Canonical list comes from the cost source."""
    __tablename__ = "metros"

    slug = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=False)
    cbsa = Column(String(5), nullable=False)
    state_abbr = Column(String(2), nullable=True)
    population = Column(Integer, nullable=True)
    wage_area = Column(String(7), nullable=True)  # zero-padded CBSA, only if the wage source has it

    __table_args__ = (
        Index("idx_metros_cbsa", "cbsa"),
        Index("idx_metros_state", "state_abbr"),
    )

    def __repr__(self) -> str:
        return f"<Metro(slug={self.slug}, cbsa={self.cbsa})>"


class State(Base):
    """US state. Canonical list comes from the cost source."""
    __tablename__ = "states"

    slug = Column(String(100), primary_key=True)
    abbr = Column(String(2), nullable=False)
    name = Column(String(100), nullable=False)
    fips = Column(String(2), nullable=True)
    wage_area = Column(String(7), nullable=True)

    def __repr__(self) -> str:
        return f"<State(slug={self.slug}, abbr={self.abbr})>"


class County(Base):
    """US county. Canonical list comes from the childcare source."""
    __tablename__ = "counties"

    slug = Column(String(255), primary_key=True)
    name = Column(String(255), nullable=False)
    state_abbr = Column(String(2), nullable=False)
    state_name = Column(String(100), nullable=False)
    fips = Column(String(5), nullable=False)
    population = Column(Integer, nullable=True)

    __table_args__ = (
        Index("idx_counties_fips", "fips"),
        Index("idx_counties_state", "state_abbr"),
    )

    def __repr__(self) -> str:
        return f"<County(slug={self.slug}, fips={self.fips})>"


class PopularComparison(Base):
    """
    Precomputed comparison pair.

    slug_a is always the lexicographically smaller slug, so (a, b) and
    (b, a) can never both be stored.
    """
    __tablename__ = "popular_comparisons"

    slug_a = Column(String(255), primary_key=True)
    slug_b = Column(String(255), primary_key=True)
    level = Column(String(10), nullable=False)

    __table_args__ = (
        CheckConstraint("slug_a < slug_b", name="ck_popular_comparisons_order"),
        Index("idx_popular_comparisons_level", "level"),
    )

    def __repr__(self) -> str:
        return f"<PopularComparison({self.slug_a} vs {self.slug_b}, level={self.level})>"


class LifeScore(Base):
    """
    Composite life score for one metro or state.

    Dimension scores are 0-100 after percentile ranking and direction
    inversion; NULL means the entity had no raw value for that dimension.
    """
    __tablename__ = "life_scores"

    slug = Column(String(255), primary_key=True)
    type = Column(String(10), nullable=False)
    name = Column(String(255), nullable=False)

    cost_score = Column(Float, nullable=True)
    wages_score = Column(Float, nullable=True)
    rent_score = Column(Float, nullable=True)
    crime_score = Column(Float, nullable=True)
    schools_score = Column(Float, nullable=True)
    childcare_score = Column(Float, nullable=True)
    enviro_score = Column(Float, nullable=True)

    composite_score = Column(Float, nullable=False)
    grade = Column(String(2), nullable=False)

    __table_args__ = (
        Index("idx_life_scores_type_composite", "type", "composite_score"),
    )

    def __repr__(self) -> str:
        return (
            f"<LifeScore(slug={self.slug}, type={self.type}, "
            f"composite={self.composite_score}, grade={self.grade})>"
        )


class PipelineRun(Base):
    """
    Tracks every build that got past its preconditions.

    Not part of the published snapshot.
    """
    __tablename__ = "pipeline_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    status = Column(
        Enum(RunStatus, native_enum=False, length=20),
        nullable=False,
        default=RunStatus.PENDING,
        index=True
    )
    config = Column(JSON, nullable=False)  # top_county_comparisons, source paths

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    # Results
    row_counts = Column(JSON, nullable=True)  # {"metros": 387, ...}
    error_message = Column(Text, nullable=True)
    error_details = Column(JSON, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<PipelineRun(id={self.id}, status={self.status}, "
            f"created_at={self.created_at})>"
        )


# Tables replaced together on every publish, in insert order.
PUBLISHED_MODELS = (Metro, State, County, PopularComparison, LifeScore)
