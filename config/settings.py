"""
Application settings using Pydantic Settings.
Load configuration from environment variables and .env file.
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env lives)
PROJECT_ROOT = Path(__file__).parent.parent
ENV_FILE = PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Supabase (service role key is needed for upserts/deletes)
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    supabase_schema: str = "public"

    # Third-party sports APIs
    balldontlie_api_key: Optional[str] = None
    balldontlie_base_url: str = "https://api.balldontlie.io"
    nhl_api_base_url: str = "https://api-web.nhle.com"

    # Seasons
    nba_season: int = 2023
    mlb_season: int = 2023
    epl_season: int = 2024
    nhl_season: str = "20232024"
    nhl_game_type: int = 2  # 2 = regular season

    # HTTP behaviour
    page_size: int = 100
    page_delay: float = 0.2  # seconds between paginated requests
    request_timeout: int = 30
    http_max_attempts: int = 3

    # Leagues handled by a default run
    enabled_leagues: List[str] = ["nba", "nhl", "mlb", "epl"]

    # Ingestion shaping
    nhl_leaders_per_category: int = 10
    recent_form_games: int = 5

    # Picks
    max_bets_of_the_day: int = 5
    min_bet_confidence: int = 55
    max_bets_per_league: int = 2

    # Caching TTL (seconds)
    cache_dashboard_ttl: int = 300
    cache_schedule_ttl: int = 3600
    cache_stats_ttl: int = 900

    # Dashboard
    dashboard_props_limit: int = 25

    # Scheduler Settings
    update_hour: str = "*/6"  # cron expression for the ingestion job
    update_minute: int = 0
    picks_hour: int = 11
    picks_minute: int = 30
    schedule_timezone: str = "America/New_York"

    # Logging
    log_level: str = "INFO"

    def has_supabase_credentials(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing."""
