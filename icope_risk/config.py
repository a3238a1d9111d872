"""
Configuration Management for the ICOPE Risk Engine

Environment-based configuration using Pydantic Settings.
"""
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ICOPE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra fields from .env file
    )

    # Application
    app_name: str = "ICOPE Risk Engine"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Level used by configure_logging()")

    # Domain risk bands (fraction of the domain's maximum score)
    healthy_max_ratio: float = Field(default=0.25, description="Highest score ratio still classed healthy")
    at_risk_max_ratio: float = Field(default=0.50, description="Highest score ratio still classed at_risk")

    # Reporting
    trend_window_months: int = Field(default=12, ge=1, description="Monthly buckets kept in trend series")
    report_score_decimals: int = Field(default=1, ge=0, description="Rounding for per-domain averages")
    top_concern_limit: int = Field(default=5, ge=1, description="Domains listed in the summary text")

    @model_validator(mode="after")
    def _check_ratios(self) -> "Settings":
        if not 0.0 <= self.healthy_max_ratio <= 1.0 or not 0.0 <= self.at_risk_max_ratio <= 1.0:
            raise ValueError("risk ratios must lie within [0, 1]")
        if self.at_risk_max_ratio <= self.healthy_max_ratio:
            raise ValueError("at_risk_max_ratio must be greater than healthy_max_ratio")
        return self


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
