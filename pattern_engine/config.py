"""Application configuration loaded from environment variables."""

import os
from pathlib import Path
from pydantic_settings import BaseSettings

# Check if .env file exists and is readable
_env_file = None
try:
    env_path = Path(".env")
    if env_path.exists() and os.access(env_path, os.R_OK):
        _env_file = ".env"
except (OSError, PermissionError):
    # If we can't access .env, continue without it
    pass


class Settings(BaseSettings):
    """All configuration for the pattern detection engine.

    Values are loaded from environment variables or a .env file.
    """

    # Application
    app_name: str = "paradocs-patterns"
    debug: bool = False

    # Database
    database_url: str = "sqlite:///./data/patterns.db"

    # Shared secret for the administrative analysis trigger
    admin_secret: str = ""

    # Geographic clustering
    geo_eps_km: float = 50.0
    geo_min_points: int = 5
    geo_lookback_days: int = 365

    # Temporal anomalies
    temporal_lookback_weeks: int = 52
    z_threshold: float = 2.5

    # Seasonal analysis
    seasonal_history_years: int = 3

    # Lifecycle
    staleness_days: int = 30
    reclassify_on_sweep: bool = False

    # A "running" analysis older than this is treated as abandoned
    run_timeout_minutes: int = 30

    # Read endpoints
    trending_limit_max: int = 20
    nearby_default_radius_km: float = 100.0
    nearby_limit: int = 10

    model_config = {
        "env_file": _env_file,
        "env_file_encoding": "utf-8",
        "env_file_ignore_empty": True,
    }
