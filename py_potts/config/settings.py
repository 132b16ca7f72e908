"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.location import SplitRule


class Settings(BaseSettings):
    """Engine settings, overridable through ``POTTS_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="POTTS_", env_file=".env", extra="ignore")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=False, description="Render logs as JSON")

    # Split
    balance_difference: float = Field(
        default=0.05, ge=0, le=1, description="Allowed size gap between split halves, as a fraction of volume"
    )
    diameter_ratio: float = Field(
        default=0.9, gt=0, le=1, description="Diameters within this ratio of the maximum are split candidates"
    )
    split_probability: float = Field(
        default=0.5, ge=0, le=1, description="Probability that the splitting location keeps the first half"
    )
    split_rule: SplitRule = Field(default=SplitRule.LONGEST_AXIS, description="Rule used to orient the split plane")

    # Iteration caps
    max_connect_iterations: int = Field(default=100, ge=1, description="Connectivity repair passes per split")
    max_balance_iterations: int = Field(default=10000, ge=1, description="Balancing moves per split")
    max_region_iterations: int = Field(default=1000, ge=1, description="Region growth rounds per distribution")


settings = Settings()
