"""
Package configuration settings.
"""

from typing import Literal, Optional, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Adaptive testing defaults loaded from environment variables."""

    # Runtime
    ENV: str = "development"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Ability scale bounds used when a Cat is built without explicit bounds
    MIN_THETA: float = -6.0
    MAX_THETA: float = 6.0

    # Quantization of the EAP prior table
    PRIOR_STEP_SIZE: float = Field(
        default=0.1,
        gt=0.0,
        description="Grid spacing of discretized prior distributions",
    )

    # Seed applied when neither a Cat nor a Clowder receives one (None = entropy)
    DEFAULT_RANDOM_SEED: Optional[str] = None

    model_config = SettingsConfigDict(
        env_prefix="ADAPTIVE_CAT_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_theta_bounds(self) -> Self:
        """Ensure the default ability scale is a non-empty interval."""
        if self.MIN_THETA >= self.MAX_THETA:
            raise ValueError(
                f"MIN_THETA must be less than MAX_THETA, got "
                f"MIN_THETA={self.MIN_THETA}, MAX_THETA={self.MAX_THETA}"
            )
        return self


settings = Settings()
