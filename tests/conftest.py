"""
Pytest configuration and shared fixtures.
"""
import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from plaincompare.core.models import Base
from plaincompare.core.config import reset_settings
from plaincompare.core.data_sources import DataSources


@pytest.fixture(scope="function")
def clean_env(monkeypatch):
    """
    Clean environment for testing.

    Removes all app-related env vars to ensure clean state.
    """
    env_vars = [
        "DATABASE_URL",
        "DATABASE_COST_PATH",
        "DATABASE_RENT_PATH",
        "DATABASE_CRIME_PATH",
        "DATABASE_WAGE_PATH",
        "DATABASE_SCHOOLS_PATH",
        "DATABASE_CHILDCARE_PATH",
        "DATABASE_ENVIRO_PATH",
        "TOP_COUNTY_COMPARISONS",
        "SEED_DIR",
        "LOG_LEVEL",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)

    # Reset settings cache
    reset_settings()

    yield

    # Reset again after test
    reset_settings()


@pytest.fixture(scope="function")
def test_db():
    """
    Create an in-memory SQLite database for testing.

    Fresh database for each test.
    """
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


# =============================================================================
# Source database fixtures
# =============================================================================
#
# Four metros, four states and five counties. Austin, New York and
# Pittsburgh are on the curated metro list; Smallville is not and has no
# data anywhere. Kansas has no data in any dimension. Pittsburgh has no
# wage area. Texas and New York tie on the environment metric.

SOURCE_SCHEMAS = {
    "cost": [
        """CREATE TABLE msas (cbsa TEXT, name TEXT, slug TEXT, state_abbr TEXT,
               rpp_all REAL, rpp_goods REAL, rpp_services REAL, rpp_rents REAL, year INTEGER)""",
        """CREATE TABLE states (abbr TEXT, name TEXT, slug TEXT,
               rpp_all REAL, rpp_goods REAL, rpp_services REAL, rpp_rents REAL, year INTEGER)""",
    ],
    "rent": [
        """CREATE TABLE fmr_metro (cbsa_code TEXT, br0 INTEGER, br1 INTEGER, br2 INTEGER,
               br3 INTEGER, br4 INTEGER, year INTEGER)""",
        """CREATE TABLE fmr_county (fips TEXT, br0 INTEGER, br1 INTEGER, br2 INTEGER,
               br3 INTEGER, br4 INTEGER, year INTEGER)""",
        "CREATE TABLE counties (fips TEXT, state_code TEXT)",
        "CREATE TABLE states (state_code TEXT, state_abbr TEXT)",
    ],
    "crime": [
        "CREATE TABLE states (state_abbr TEXT, state_fips TEXT, state_name TEXT, slug TEXT)",
        """CREATE TABLE state_crime (state_fips TEXT, year INTEGER, violent_crime INTEGER,
               property_crime INTEGER, murder INTEGER, robbery INTEGER, burglary INTEGER,
               population INTEGER)""",
    ],
    "wage": [
        """CREATE TABLE areas (area_code TEXT, area_title TEXT, area_type TEXT,
               slug TEXT, state_slug TEXT)""",
        """CREATE TABLE metro_wages (area_code TEXT, occ_code TEXT, tot_emp INTEGER,
               a_median REAL, a_mean REAL)""",
        """CREATE TABLE state_wages (area_code TEXT, occ_code TEXT, tot_emp INTEGER,
               a_median REAL, a_mean REAL)""",
    ],
    "schools": [
        "CREATE TABLE states (state_abbr TEXT, state_fips TEXT, state_name TEXT, slug TEXT)",
        """CREATE TABLE schools (state_fips TEXT, enrollment INTEGER,
               student_teacher_ratio REAL, charter INTEGER, title_i INTEGER)""",
    ],
    "childcare": [
        """CREATE TABLE states (abbr TEXT, name TEXT, slug TEXT, avg_center_infant REAL,
               avg_center_toddler REAL, avg_center_preschool REAL, min_center_infant REAL)""",
        """CREATE TABLE counties (fips TEXT, name TEXT, state TEXT, slug TEXT,
               population INTEGER)""",
    ],
    "enviro": [
        """CREATE TABLE states (state_abbr TEXT, state_name TEXT, slug TEXT,
               num_facilities INTEGER, num_water_systems INTEGER,
               num_superfund_sites INTEGER, num_violations INTEGER)""",
    ],
}

SOURCE_ROWS = {
    "cost": {
        "msas": [
            {"cbsa": "35620", "name": "New York-Newark-Jersey City, NY-NJ",
             "slug": "new-york-newark-jersey-city-ny-nj", "state_abbr": "NY", "rpp_all": 125.0},
            {"cbsa": "12420", "name": "Austin-Round Rock-San Marcos, TX",
             "slug": "austin-round-rock-san-marcos-tx", "state_abbr": "TX", "rpp_all": 98.0},
            {"cbsa": "99999", "name": "Smallville, KS",
             "slug": "smallville-ks", "state_abbr": "KS", "rpp_all": None},
            {"cbsa": "38300", "name": "Pittsburgh, PA",
             "slug": "pittsburgh-pa", "state_abbr": "PA", "rpp_all": 92.0},
        ],
        "states": [
            {"abbr": "TX", "name": "Texas", "slug": "texas", "rpp_all": 97.0},
            {"abbr": "NY", "name": "New York", "slug": "new-york", "rpp_all": 115.0},
            {"abbr": "PA", "name": "Pennsylvania", "slug": "pennsylvania", "rpp_all": 96.0},
            {"abbr": "KS", "name": "Kansas", "slug": "kansas", "rpp_all": None},
        ],
    },
    "rent": {
        "fmr_metro": [
            {"cbsa_code": "12420", "br2": 1500, "year": 2023},
            {"cbsa_code": "12420", "br2": 1700, "year": 2024},
            {"cbsa_code": "35620", "br2": 2500, "year": 2024},
            {"cbsa_code": "38300", "br2": 1200, "year": 2024},
        ],
        "fmr_county": [
            {"fips": "48453", "br2": 1600, "year": 2024},
            {"fips": "36061", "br2": 2800, "year": 2024},
            {"fips": "42003", "br2": 1100, "year": 2024},
            {"fips": "42003", "br2": 900, "year": 2023},
        ],
        "counties": [
            {"fips": "48453", "state_code": "48"},
            {"fips": "36061", "state_code": "36"},
            {"fips": "42003", "state_code": "42"},
        ],
        "states": [
            {"state_code": "48", "state_abbr": "TX"},
            {"state_code": "36", "state_abbr": "NY"},
            {"state_code": "42", "state_abbr": "PA"},
            {"state_code": "20", "state_abbr": "KS"},
        ],
    },
    "crime": {
        "states": [
            {"state_abbr": "TX", "state_fips": "48", "state_name": "Texas", "slug": "texas"},
            {"state_abbr": "NY", "state_fips": "36", "state_name": "New York", "slug": "new-york"},
            {"state_abbr": "PA", "state_fips": "42", "state_name": "Pennsylvania", "slug": "pennsylvania"},
            {"state_abbr": "KS", "state_fips": "20", "state_name": "Kansas", "slug": "kansas"},
        ],
        "state_crime": [
            {"state_fips": "48", "year": 2022, "violent_crime": 9000, "population": 1000000},
            {"state_fips": "48", "year": 2023, "violent_crime": 4000, "population": 1000000},
            {"state_fips": "36", "year": 2023, "violent_crime": 3500, "population": 1000000},
            {"state_fips": "42", "year": 2023, "violent_crime": 2800, "population": 1000000},
            {"state_fips": "20", "year": 2023, "violent_crime": None, "population": 2900000},
        ],
    },
    "wage": {
        "areas": [
            {"area_code": "0012420", "area_title": "Austin-Round Rock-San Marcos, TX",
             "area_type": "metro", "slug": "austin-tx", "state_slug": "tx"},
            {"area_code": "0035620", "area_title": "New York-Newark-Jersey City, NY-NJ",
             "area_type": "metro", "slug": "new-york-ny", "state_slug": "ny"},
            {"area_code": "48", "area_title": "Texas", "area_type": "state",
             "slug": "texas", "state_slug": "tx"},
            {"area_code": "36", "area_title": "New York", "area_type": "state",
             "slug": "new-york-state", "state_slug": "ny"},
            {"area_code": "42", "area_title": "Pennsylvania", "area_type": "state",
             "slug": "pennsylvania", "state_slug": "pa"},
        ],
        "metro_wages": [
            {"area_code": "0012420", "occ_code": "00-0001", "tot_emp": 100, "a_median": 60000},
            {"area_code": "0012420", "occ_code": "00-0002", "tot_emp": 200, "a_median": 50000},
            {"area_code": "0012420", "occ_code": "00-0003", "tot_emp": 50, "a_median": 0},
            {"area_code": "0035620", "occ_code": "00-0001", "tot_emp": 300, "a_median": 70000},
        ],
        "state_wages": [
            {"area_code": "48", "occ_code": "00-0001", "tot_emp": 1000, "a_median": 50000},
            {"area_code": "36", "occ_code": "00-0001", "tot_emp": 1000, "a_median": 65000},
            {"area_code": "42", "occ_code": "00-0001", "tot_emp": 1000, "a_median": 52000},
        ],
    },
    "schools": {
        "states": [
            {"state_abbr": "TX", "state_fips": "48", "state_name": "Texas", "slug": "texas"},
            {"state_abbr": "NY", "state_fips": "36", "state_name": "New York", "slug": "new-york"},
            {"state_abbr": "PA", "state_fips": "42", "state_name": "Pennsylvania", "slug": "pennsylvania"},
            {"state_abbr": "KS", "state_fips": "20", "state_name": "Kansas", "slug": "kansas"},
        ],
        "schools": [
            {"state_fips": "48", "enrollment": 500, "student_teacher_ratio": 15.0},
            {"state_fips": "48", "enrollment": 400, "student_teacher_ratio": 15.0},
            {"state_fips": "36", "enrollment": 600, "student_teacher_ratio": 12.0},
            {"state_fips": "42", "enrollment": 450, "student_teacher_ratio": 14.0},
        ],
    },
    "childcare": {
        "states": [
            {"abbr": "TX", "name": "Texas", "slug": "texas", "avg_center_infant": 10000},
            {"abbr": "NY", "name": "New York", "slug": "new-york", "avg_center_infant": 20000},
            {"abbr": "PA", "name": "Pennsylvania", "slug": "pennsylvania", "avg_center_infant": 13000},
            {"abbr": "KS", "name": "Kansas", "slug": "kansas", "avg_center_infant": None},
        ],
        "counties": [
            {"fips": "48453", "name": "Travis County", "state": "TX",
             "slug": "travis-county-tx", "population": 1300000},
            {"fips": "36061", "name": "New York County", "state": "NY",
             "slug": "new-york-county-ny", "population": 1600000},
            {"fips": "42003", "name": "Allegheny County", "state": "PA",
             "slug": "allegheny-county-pa", "population": 1200000},
            {"fips": "36047", "name": "Kings County", "state": "NY",
             "slug": "kings-county-ny", "population": 2600000},
            {"fips": "48301", "name": "Loving County", "state": "TX",
             "slug": "loving-county-tx", "population": None},
        ],
    },
    "enviro": {
        "states": [
            {"state_abbr": "TX", "state_name": "Texas", "slug": "texas",
             "num_water_systems": 4000, "num_violations": 1000},
            {"state_abbr": "NY", "state_name": "New York", "slug": "new-york",
             "num_water_systems": 2000, "num_violations": 500},
            {"state_abbr": "PA", "state_name": "Pennsylvania", "slug": "pennsylvania",
             "num_water_systems": 1000, "num_violations": 0},
            {"state_abbr": "KS", "state_name": "Kansas", "slug": "kansas",
             "num_water_systems": None, "num_violations": None},
        ],
    },
}


def write_source_db(path, key, rows_by_table=None):
    """Create one source SQLite file with its schema and rows."""
    rows_by_table = SOURCE_ROWS[key] if rows_by_table is None else rows_by_table
    engine = create_engine(f"sqlite:///{path}")
    try:
        with engine.begin() as conn:
            for ddl in SOURCE_SCHEMAS[key]:
                conn.execute(text(ddl))
            for table, rows in rows_by_table.items():
                for row in rows:
                    columns = ", ".join(row)
                    params = ", ".join(f":{c}" for c in row)
                    conn.execute(text(f"INSERT INTO {table} ({columns}) VALUES ({params})"), row)
    finally:
        engine.dispose()


@pytest.fixture
def make_source_db():
    """Factory for writing a single source database with custom rows."""
    return write_source_db


@pytest.fixture
def source_dbs(tmp_path):
    """Write all seven source databases; returns source key -> file path."""
    source_dir = tmp_path / "sources"
    source_dir.mkdir()
    paths = {}
    for key in SOURCE_SCHEMAS:
        path = source_dir / f"{key}.db"
        write_source_db(path, key)
        paths[key] = str(path)
    return paths


@pytest.fixture
def data_sources(source_dbs):
    """Opened DataSources over the fixture databases."""
    sources = DataSources.open(source_dbs)
    try:
        yield sources
    finally:
        sources.close()


@pytest.fixture
def output_engine(tmp_path):
    """File-backed output database engine (separate connections see commits)."""
    from plaincompare.core.database import create_output_engine
    engine = create_output_engine(f"sqlite:///{tmp_path / 'out' / 'plaincompare.db'}")
    try:
        yield engine
    finally:
        engine.dispose()
