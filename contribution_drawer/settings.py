from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Values are read from process environment and optionally from `.env`.
    """

    sentry_dsn: str | None = None
    environment: str = "development"
    release: str | None = None
    sentry_traces_sample_rate: float = 0.1
    rate_limit_per_minute: int = 30
    rate_limit_window_seconds: int = 60
    # Least recently used sessions are evicted once the cap is reached.
    max_sessions: int = 1000
    # None keeps sessions until evicted by the cap or deleted.
    session_idle_seconds: int | None = 3600
    # None keeps every history entry for the lifetime of a session.
    history_max_depth: int | None = None
    # Label font for exported images; Pillow's default font when unset.
    export_font_path: str | None = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
