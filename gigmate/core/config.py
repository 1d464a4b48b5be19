"""
Application configuration loaded from environment variables.

Uses pydantic-settings for type-safe env var parsing with automatic
.env file loading. All secrets are injected via environment — never
hard-coded.

To extend: add new fields here and document them in .env.example.
See https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ─── Core ──────────────────────────────────────────────────────
    environment: str = "development"
    debug: bool = False

    # ─── CORS ──────────────────────────────────────────────────────
    # Comma-separated allowed origins for the mobile web shell.
    cors_origins_str: str = "http://localhost:5173,http://localhost:3000"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    # ─── AI ────────────────────────────────────────────────────────
    # Get from https://aistudio.google.com/
    # Leaving this empty is a supported deployment: hotspot calls return
    # nothing and the curated fallback list is shown instead.
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"

    # When True, the Gemini client serves canned responses (local dev / demos).
    ai_mock_mode: bool = False

    # ─── Demand pipeline ───────────────────────────────────────────
    live_max_attempts: int = 3
    forecast_max_attempts: int = 2
    retry_delay_ms: int = 1000

    # Coalescing window for location / mode / platform changes.
    debounce_ms: int = 300

    # Device fix wait. Low accuracy keeps the first fix fast.
    sensor_timeout_ms: int = 5000
    sensor_high_accuracy: bool = False

    # City used when the profile has none.
    default_city: str = "Chandigarh"

    # Number of ranked zones shown under the map.
    top_hotspots: int = 3

    # ─── Sessions ──────────────────────────────────────────────────
    # A session nobody has polled for this long is closed by the sweeper.
    session_idle_ttl_s: int = 900
    session_sweep_interval_s: int = 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Don't fail on unknown env vars
    )


# Module-level singleton: import this everywhere instead of instantiating Settings()
settings = Settings()
