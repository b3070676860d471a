"""Runner configuration via Pydantic Settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .environment import HELSINKI_GRAVITY
from .tracker import MAX_BOUNCES_PER_STEP, MIN_FLIGHT_TIME, DropConditions


class PhysicsSettings(BaseSettings):
    """Drop parameters for the tracker."""

    model_config = SettingsConfigDict(env_prefix="BALLDROP_PHYSICS_", env_file=".env", extra="ignore")

    gravity: float = Field(default=HELSINKI_GRAVITY, gt=0)
    restitution: float = Field(default=0.6, gt=0, lt=1)
    start_height: float = Field(default=8.0, ge=0)
    start_velocity: float = 5.0
    max_bounces_per_step: int = Field(default=MAX_BOUNCES_PER_STEP, ge=1)
    min_flight_time: float = Field(default=MIN_FLIGHT_TIME, ge=0)


class ViewportSettings(BaseSettings):
    """Physical field size and display scale."""

    model_config = SettingsConfigDict(env_prefix="BALLDROP_VIEWPORT_", env_file=".env", extra="ignore")

    width_m: float = Field(default=10.0, gt=0)
    height_m: float = Field(default=10.0, gt=0)
    pixels_per_meter: float = Field(default=40.0, gt=0)


class AnimationSettings(BaseSettings):
    """Frame loop and output settings."""

    model_config = SettingsConfigDict(env_prefix="BALLDROP_ANIMATION_", env_file=".env", extra="ignore")

    fps: float = Field(default=60.0, gt=0)
    max_frames: int = Field(default=600, ge=1)
    output_dir: str = "outputs"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="BALLDROP_LOG_", env_file=".env", extra="ignore")

    level: str = "INFO"
    file: Optional[str] = None


class Settings(BaseSettings):
    """Root settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    physics: PhysicsSettings = Field(default_factory=PhysicsSettings)
    viewport: ViewportSettings = Field(default_factory=ViewportSettings)
    animation: AnimationSettings = Field(default_factory=AnimationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def drop_conditions(self) -> DropConditions:
        """DropConditions for the configured physics section."""
        return DropConditions(
            start_height=self.physics.start_height,
            start_velocity=self.physics.start_velocity,
            acceleration=-self.physics.gravity,
            restitution=self.physics.restitution,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
