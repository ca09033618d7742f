"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or .env file."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = "UWH Community"
    debug: bool = False
    allowed_origins: str = "*"  # Comma-separated origins, or "*" for all

    # Database
    database_url: str = "sqlite:///./uwh_community.db"

    # Identity (user id is supplied by the upstream auth proxy)
    identity_header: str = "X-User-Id"

    # Nearby club search
    default_search_radius_km: float = 50
    max_search_radius_km: float = 500
    default_search_limit: int = 20
    max_search_limit: int = 100

    # Sessions
    checkin_window_minutes: int = 30
    gps_checkin_radius_km: float = 0.5
    rsvp_note_max_length: int = 200


settings = Settings()
