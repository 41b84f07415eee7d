"""
Basic configuration

- CORS origins for development and production
- Storage location and cache TTL for the JSON repository
- Donation cooldown and referral rate limits
- Supports environment variables (and a project-level .env file)
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Project root is the parent of bloodlink/
PROJECT_ROOT = Path(__file__).parent.parent.parent
load_dotenv(dotenv_path=PROJECT_ROOT / '.env')


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


# Default localhost origins for development
DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8080",
]

# Get additional CORS origins from environment variable
ADDITIONAL_CORS_ORIGINS = os.getenv("CORS_ORIGINS", "").split(",") if os.getenv("CORS_ORIGINS") else []

# Filter out empty strings from split
ADDITIONAL_CORS_ORIGINS = [origin.strip() for origin in ADDITIONAL_CORS_ORIGINS if origin.strip()]

# Combine default and additional origins
CORS_ORIGINS = DEFAULT_CORS_ORIGINS + ADDITIONAL_CORS_ORIGINS

# JSON repository
DATA_DIR = os.getenv("BLOODLINK_DATA_DIR", "data")
CACHE_TTL_SECONDS = _env_int("BLOODLINK_CACHE_TTL_SECONDS", 60)
SEED_DEMO_DATA = _env_bool("BLOODLINK_SEED_DEMO_DATA", False)

# Donors become eligible again on the same calendar day this many months later
DONATION_COOLDOWN_MONTHS = _env_int("DONATION_COOLDOWN_MONTHS", 3)

# Referral creation throttling (per user)
RATE_LIMIT_MAX_ATTEMPTS = _env_int("RATE_LIMIT_MAX_ATTEMPTS", 5)
RATE_LIMIT_WINDOW_SECONDS = _env_int("RATE_LIMIT_WINDOW_SECONDS", 15 * 60)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
