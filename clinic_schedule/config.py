"""Runtime settings read from the environment (and a local .env file)."""
import os

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


# Backend
CLINIC_API_BASE_URL = os.getenv("CLINIC_API_BASE_URL", "http://localhost:8080/api")
CLINIC_API_TOKEN = os.getenv("CLINIC_API_TOKEN", "")
CLINIC_API_TIMEOUT = float(os.getenv("CLINIC_API_TIMEOUT", "30"))
OFFLINE_MODE = os.getenv("OFFLINE_MODE", "0") == "1"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Appointments
DEFAULT_APPOINTMENT_DURATION = _int_env("DEFAULT_APPOINTMENT_DURATION", 30)
AUTO_COMPLETE_GRACE_MINUTES = _int_env("AUTO_COMPLETE_GRACE_MINUTES", 5)

# Week time-grid (visible window and band sizing, in hours / pixels)
GRID_START_HOUR = _int_env("GRID_START_HOUR", 8)
GRID_END_HOUR = _int_env("GRID_END_HOUR", 21)
GRID_PIXELS_PER_HOUR = _int_env("GRID_PIXELS_PER_HOUR", 60)
GRID_MIN_BAND_PX = _int_env("GRID_MIN_BAND_PX", 20)
GRID_MAX_BAND_PX = _int_env("GRID_MAX_BAND_PX", 480)

# Patient lists / long record sets
PAGE_SIZE = _int_env("PAGE_SIZE", 20)
PAGINATION_THRESHOLD = _int_env("PAGINATION_THRESHOLD", 50)
