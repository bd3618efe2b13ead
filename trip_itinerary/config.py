"""Configuration: .env loading, paths, constants."""

import os
from pathlib import Path
from dotenv import load_dotenv

# Project root = parent of trip_itinerary/
PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

# --- Traveler ---
BASE_LOCATION = os.getenv("BASED", "SVQ")
DEBUG = os.getenv("DEBUG", "").strip().lower() not in ("", "0", "false", "no")

# --- Paths ---
INPUT_PATH = os.getenv("ITINERARY_INPUT", "")
OUTPUT_DIR = PROJECT_ROOT / "output"

# --- Parsing ---
LOCATION_CODE_LENGTH = 3  # IATA-style airport/city codes

# --- Assembly ---
CONNECTION_WINDOW_HOURS = 24  # segments further apart than this belong to different trips
