"""
Life Score scoring engine.

Ranks every metro (and, separately, every state) on seven dimensions,
converts each raw metric to a 0-100 percentile within its own population,
inverts lower-is-better dimensions, and blends the result into a weighted
composite with a letter grade. Missing dimensions are left out of both the
numerator and the weight sum rather than being filled with zero.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from plaincompare.core.entities import DimensionValue, Entity, ScoredEntity
from plaincompare.ml.life_score_metadata import (
    DIMENSIONS,
    FALLBACK_GRADE,
    GRADE_THRESHOLDS,
    MODEL_VERSION,
    NEUTRAL_COMPOSITE,
    Dimension,
)

logger = logging.getLogger(__name__)

# Single-member populations get the top of the scale.
SINGLE_VALUE_PERCENTILE = 100.0


def round_half_up(value: float, places: int) -> float:
    """Round half away from zero on the value's decimal representation."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


class LifeScorer:
    """Compute life scores for one entity population at a time."""

    def __init__(self, dimensions: Sequence[Dimension] = DIMENSIONS):
        self.dimensions = tuple(dimensions)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _get_grade(score: float) -> str:
        for threshold, grade in GRADE_THRESHOLDS:
            if score >= threshold:
                return grade
        return FALLBACK_GRADE

    @staticmethod
    def _percentile_rank(values: Mapping[str, Optional[float]]) -> Dict[str, float]:
        """
        Return percentile ranks (0-100) keyed by slug.

        Missing values are left out of the population and out of the result.
        Equal values are ordered by slug, so each still gets its own rank.
        """
        present = sorted(
            ((value, slug) for slug, value in values.items() if value is not None),
        )
        m = len(present)
        if m == 0:
            return {}
        if m == 1:
            return {present[0][1]: SINGLE_VALUE_PERCENTILE}
        return {
            slug: (rank_pos / (m - 1)) * 100.0
            for rank_pos, (_, slug) in enumerate(present)
        }

    def _composite(self, scores: Mapping[str, Optional[float]]) -> float:
        """Weighted mean over the dimensions present, renormalized by their weights."""
        weighted_sum = 0.0
        weight_total = 0.0
        for dim in self.dimensions:
            score = scores.get(dim.key)
            if score is None:
                continue
            weighted_sum += score * dim.weight
            weight_total += dim.weight
        if weight_total == 0:
            return NEUTRAL_COMPOSITE
        return round_half_up(weighted_sum / weight_total, 1)

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score_population(
        self,
        entity_type: str,
        entities: Sequence[Entity],
        values: Mapping[str, Mapping[str, DimensionValue]],
    ) -> List[ScoredEntity]:
        """
        Score every entity of one type against the others of that type.

        Args:
            entity_type: "metro" or "state"
            entities: the joined entities, in output order
            values: dimension key -> slug -> DimensionValue; slugs or whole
                dimensions not present are treated as missing
        """
        logger.info(f"Scoring {len(entities)} {entity_type} entities...")

        # --- Percentile rank each dimension, then apply direction ---
        # Unrounded values feed the composite; only the stored score is rounded.
        dimension_scores: Dict[str, Dict[str, float]] = {}
        for dim in self.dimensions:
            by_slug = values.get(dim.key, {})
            raw = {
                e.slug: by_slug[e.slug].value if e.slug in by_slug else None
                for e in entities
            }
            percentiles = self._percentile_rank(raw)
            dimension_scores[dim.key] = {
                slug: 100.0 - pct if dim.lower_is_better else pct
                for slug, pct in percentiles.items()
            }
            logger.debug(
                f"  {entity_type}/{dim.key}: {len(percentiles)} of {len(entities)} present"
            )

        # --- Weighted composite + grade ---
        records: List[ScoredEntity] = []
        for e in entities:
            unrounded = {
                dim.key: dimension_scores[dim.key].get(e.slug)
                for dim in self.dimensions
            }
            composite = self._composite(unrounded)
            scores = {
                key: None if value is None else round_half_up(value, 2)
                for key, value in unrounded.items()
            }
            records.append(ScoredEntity(
                slug=e.slug,
                type=entity_type,
                name=e.name,
                scores=scores,
                composite_score=composite,
                grade=self._get_grade(composite),
                dimensions_present=[k for k, v in scores.items() if v is not None],
            ))

        return records

    @staticmethod
    def summarize(records: Sequence[ScoredEntity]) -> Dict[str, Any]:
        """Grade distribution and top 10 for a scored population."""
        grade_dist: Dict[str, int] = {}
        for rec in records:
            grade_dist[rec.grade] = grade_dist.get(rec.grade, 0) + 1

        top_10 = sorted(records, key=lambda r: (-r.composite_score, r.name.lower()))[:10]

        return {
            "total_scored": len(records),
            "grade_distribution": grade_dist,
            "top_10": [
                {
                    "slug": r.slug,
                    "name": r.name,
                    "composite_score": r.composite_score,
                    "grade": r.grade,
                }
                for r in top_10
            ],
        }

    # ------------------------------------------------------------------
    # Methodology
    # ------------------------------------------------------------------

    @staticmethod
    def get_methodology() -> Dict[str, Any]:
        """Return scoring methodology documentation."""
        return {
            "model_version": MODEL_VERSION,
            "description": (
                "The Life Score blends seven independently sourced dimensions "
                "into one 0-100 number. Each dimension is percentile-ranked "
                "within its own level (metros against metros, states against "
                "states), so scores are not comparable across levels."
            ),
            "dimensions": [
                {
                    "name": d.key,
                    "label": d.label,
                    "weight": d.weight,
                    "direction": "lower_is_better" if d.lower_is_better else "higher_is_better",
                    "description": d.description,
                }
                for d in DIMENSIONS
            ],
            "missing_data": (
                "A dimension with no data is left out and the remaining "
                "weights are renormalized. An entity with no data at all "
                f"gets {NEUTRAL_COMPOSITE}."
            ),
            "ties": "Equal raw values are ordered by slug and receive distinct ranks.",
            "grade_thresholds": {
                grade: f">={threshold}" for threshold, grade in GRADE_THRESHOLDS
            },
        }
