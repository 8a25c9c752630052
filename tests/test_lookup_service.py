"""
Unit tests for the read-only lookup queries.
"""
import pytest

from plaincompare.core.models import County, LifeScore, Metro, PopularComparison, State
from plaincompare.services import lookup_service


@pytest.fixture
def populated_db(test_db):
    test_db.add_all([
        Metro(slug="pittsburgh-pa", name="Pittsburgh, PA", cbsa="38300", state_abbr="PA"),
        Metro(slug="austin-tx", name="austin, TX", cbsa="12420", state_abbr="TX"),
        State(slug="texas", abbr="TX", name="Texas", fips="48"),
        State(slug="kansas", abbr="KS", name="Kansas"),
        County(slug="travis-county-tx", name="Travis County", state_abbr="TX",
               state_name="Texas", fips="48453", population=1300000),
        PopularComparison(slug_a="austin-tx", slug_b="pittsburgh-pa", level="metro"),
        PopularComparison(slug_a="kansas", slug_b="texas", level="state"),
        LifeScore(slug="pittsburgh-pa", type="metro", name="Pittsburgh, PA",
                  cost_score=100.0, composite_score=100.0, grade="A+"),
        LifeScore(slug="austin-tx", type="metro", name="austin, TX",
                  cost_score=0.0, composite_score=31.8, grade="F"),
        LifeScore(slug="texas", type="state", name="Texas",
                  composite_score=50.0, grade="D"),
        LifeScore(slug="kansas", type="state", name="Kansas",
                  composite_score=50.0, grade="D"),
    ])
    test_db.commit()
    return test_db


@pytest.mark.unit
class TestLookups:

    def test_by_slug(self, populated_db):
        assert lookup_service.get_metro_by_slug(populated_db, "austin-tx").cbsa == "12420"
        assert lookup_service.get_state_by_slug(populated_db, "texas").fips == "48"
        assert lookup_service.get_county_by_slug(populated_db, "travis-county-tx").fips == "48453"
        assert lookup_service.get_metro_by_slug(populated_db, "nowhere") is None

    def test_all_in_name_order(self, populated_db):
        metros = lookup_service.get_all_metros(populated_db)
        assert [m.slug for m in metros] == ["austin-tx", "pittsburgh-pa"]

        states = lookup_service.get_all_states(populated_db)
        assert [s.slug for s in states] == ["kansas", "texas"]

        assert len(lookup_service.get_all_counties(populated_db)) == 1

    def test_popular_comparisons_by_level(self, populated_db):
        metro_pairs = lookup_service.get_popular_comparisons(populated_db, "metro")
        assert [(p.slug_a, p.slug_b) for p in metro_pairs] == [("austin-tx", "pittsburgh-pa")]

        assert lookup_service.get_popular_comparisons(populated_db, "county") == []
        assert lookup_service.get_popular_comparisons(populated_db, "state", limit=0) == []

    def test_life_score_rankings(self, populated_db):
        metros = lookup_service.get_life_score_rankings(populated_db, "metro")
        assert [s.slug for s in metros] == ["pittsburgh-pa", "austin-tx"]

        # Equal composites fall back to name order
        states = lookup_service.get_life_score_rankings(populated_db, "state")
        assert [s.slug for s in states] == ["kansas", "texas"]

        assert lookup_service.get_life_score(populated_db, "texas").grade == "D"

    def test_stats(self, populated_db):
        assert lookup_service.get_stats(populated_db) == {
            "metro_count": 2,
            "state_count": 2,
            "county_count": 1,
            "comparison_count": 2,
        }
