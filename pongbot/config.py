"""
Configuration for Pongbot.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .rating.elo import RatingSettings


class Settings(BaseSettings):
    """Application settings, read once per process."""

    model_config = SettingsConfigDict(
        env_prefix="PONGBOT_", env_file=".env", extra="ignore", frozen=True
    )

    # Chat
    channel: str = Field(default="#pongbot", description="Channel the bot answers in")

    # Rating
    delta_tau: float = Field(default=0.94, description="Per-match volatility decay")
    k_factor: float = Field(default=100.0, description="Maximum rating swing at tau=1")
    tau_floor: float = Field(default=0.1, description="Lower bound for volatility")

    # Database
    mongodb_url: str = Field(default="mongodb://localhost:27017")
    database_name: str = Field(default="pingpong")

    # Logging
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=False)
    log_file: str = Field(default="logs/pongbot.log", description="JSON log path when log_to_file")

    # Celebration GIFs
    giphy_api_key: Optional[str] = Field(default=None)
    giphy_tag: str = Field(default="ping pong")
    fallback_gif_url: str = Field(
        default="https://media.giphy.com/media/3oEjHGr1Fhz0kyv8Ig/giphy.gif"
    )
    gif_timeout: float = Field(default=5.0, description="Seconds to wait for Giphy")

    @field_validator("delta_tau")
    @classmethod
    def _check_delta_tau(cls, v: float) -> float:
        if not 0 < v < 1:
            raise ValueError("delta_tau must be strictly between 0 and 1")
        return v

    def rating_settings(self) -> RatingSettings:
        return RatingSettings(
            k_factor=self.k_factor, delta_tau=self.delta_tau, tau_floor=self.tau_floor
        )


class DatabaseSettings(BaseSettings):
    """MongoDB collection layout."""

    model_config = SettingsConfigDict(
        env_prefix="PONGBOT_DB_", env_file=".env", extra="ignore", frozen=True
    )

    players_collection: str = "players"
    challenges_collection: str = "challenges"
    connection_timeout: int = Field(default=5, description="Seconds")
    enable_indexes: bool = True


@lru_cache()
def get_config() -> Settings:
    return Settings()


@lru_cache()
def get_db_config() -> DatabaseSettings:
    return DatabaseSettings()
