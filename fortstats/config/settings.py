"""
Configuration settings using Pydantic Settings.

Every tunable of the parsing pipeline and the stats aggregator lives here so
callers can override values via environment variables or a local .env file.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application Configuration
    app_log_level: str = Field("INFO", alias="FORTSTATS_LOG_LEVEL")

    # Flag scoring
    default_points_per_cap: int = Field(
        10,
        alias="FORTSTATS_POINTS_PER_CAP",
        description="Assumed capture value when the log has no final team score",
    )
    team_flag_hold_bonus_points: int = Field(5, alias="FORTSTATS_FLAG_HOLD_BONUS_POINTS")

    # Concussion (debuff) windows, in game seconds
    conc_duration_seconds: int = Field(10, alias="FORTSTATS_CONC_DURATION")
    medic_conc_duration_seconds: int = Field(5, alias="FORTSTATS_MEDIC_CONC_DURATION")

    # Game clock repair
    clock_jump_threshold_seconds: int = Field(
        3500,
        alias="FORTSTATS_CLOCK_JUMP_THRESHOLD",
        description="Forward gaps larger than this are treated as a wall-clock adjustment (NTP/DST)",
    )

    # Output naming
    server_short_name_length: int = Field(10, alias="FORTSTATS_SERVER_SHORT_NAME_LENGTH")
    unknown_value_placeholder: str = Field("(not found)", alias="FORTSTATS_UNKNOWN_PLACEHOLDER")
    max_event_details: int = Field(
        0,
        ge=0,
        alias="FORTSTATS_MAX_EVENT_DETAILS",
        description="Maximum event descriptors kept per stat; 0 keeps all",
    )

    # MVP weights
    mvp_weight_kill: float = Field(1.0, alias="FORTSTATS_MVP_WEIGHT_KILL")
    mvp_weight_sg_kill: float = Field(2.0, alias="FORTSTATS_MVP_WEIGHT_SG_KILL")
    mvp_weight_touch: float = Field(1.0, alias="FORTSTATS_MVP_WEIGHT_TOUCH")
    mvp_weight_initial_touch: float = Field(2.0, alias="FORTSTATS_MVP_WEIGHT_INITIAL_TOUCH")
    mvp_weight_bonus_capture: float = Field(5.0, alias="FORTSTATS_MVP_WEIGHT_BONUS_CAPTURE")
    mvp_weight_team_kill: float = Field(-2.0, alias="FORTSTATS_MVP_WEIGHT_TEAM_KILL")

    def conc_duration_for(self, is_medic: bool) -> int:
        """Debuff window for an actor; medics recover in half the time."""
        return self.medic_conc_duration_seconds if is_medic else self.conc_duration_seconds


# Global settings instance; every field has a default so this never fails
# at import time. Override via environment or a .env file.
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance.

    This function provides dependency injection support for settings.
    """
    return settings
