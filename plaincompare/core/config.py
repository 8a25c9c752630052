"""
Configuration module with strict validation.

Key principles:
- Every source database path has a safe default matching the deploy layout
- The output database URL defaults to a local SQLite file
- Source paths are only checked when a build opens them, never at import
"""
from typing import Dict, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Bounds for the number of counties paired in popular comparisons
TOP_COUNTY_MIN = 2
TOP_COUNTY_MAX = 500


class Settings(BaseSettings):
    """Application settings with validation.

    Loads from environment variables and .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Output database (the mapping DB the site reads)
    database_url: str = Field(
        default="sqlite:///data/plaincompare.db",
        description="SQLAlchemy URL of the output mapping database"
    )

    # Source databases (one SQLite file per dataset)
    database_cost_path: str = Field(
        default="/data/cost.db",
        description="Cost of living DB (regional price parities, canonical metros/states)"
    )
    database_rent_path: str = Field(
        default="/data/rent.db",
        description="Fair market rent DB"
    )
    database_crime_path: str = Field(
        default="/data/crime.db",
        description="State crime DB"
    )
    database_wage_path: str = Field(
        default="/data/wage.db",
        description="Occupational wage DB"
    )
    database_schools_path: str = Field(
        default="/data/schools.db",
        description="Public schools DB"
    )
    database_childcare_path: str = Field(
        default="/data/childcare.db",
        description="Childcare price DB (canonical counties)"
    )
    database_enviro_path: str = Field(
        default="/data/enviro.db",
        description="Environmental facilities and water systems DB"
    )

    # Popular comparisons
    top_county_comparisons: int = Field(
        default=30,
        ge=TOP_COUNTY_MIN,
        le=TOP_COUNTY_MAX,
        description="Number of most populous counties paired for popular comparisons"
    )

    # Seed export
    seed_dir: str = Field(
        default="data/seed",
        description="Directory for exported SQL seed files"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    def source_paths(self) -> Dict[str, str]:
        """
        Map each source key to its configured database path.

        Keys match SOURCE_REGISTRY in plaincompare.core.source_registry.
        """
        return {
            "cost": self.database_cost_path,
            "rent": self.database_rent_path,
            "crime": self.database_crime_path,
            "wage": self.database_wage_path,
            "schools": self.database_schools_path,
            "childcare": self.database_childcare_path,
            "enviro": self.database_enviro_path,
        }


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the settings instance.

    Only the CLI entry point should call this; everything below it
    receives settings or a DataSources context explicitly.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """
    Reset the cached settings instance.

    Useful for testing to ensure clean state between tests.
    """
    global _settings
    _settings = None
