"""
Configuration constants for the tracker backend.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Routing provider (OpenRouteService directions, driving profile)
ORS_BASE_URL = os.getenv(
    "ORS_BASE_URL",
    "https://api.openrouteservice.org/v2/directions/driving-car"
)
ORS_API_KEY = os.getenv("ORS_API_KEY")

# Seconds to wait for the routing provider before giving up
ROUTING_TIMEOUT_SECONDS = float(os.getenv("ROUTING_TIMEOUT_SECONDS", "10"))

# Route segment cache
ROUTE_CACHE_KEY = "tracker_routes"
ROUTE_CACHE_VERSION = "1.0"
ROUTE_CACHE_TTL_SECONDS = 7 * 24 * 60 * 60  # 7 days
ROUTE_CACHE_DIR = Path(os.getenv("ROUTE_CACHE_DIR", str(PROJECT_ROOT / ".cache")))

# Two coordinates closer than this (degrees, per axis) are the same point
COORDINATE_TOLERANCE = 1e-6

# Encoded polyline precision (5 decimal places)
POLYLINE_PRECISION = 5

# Location spreadsheet
GOOGLE_SHEET_ID = os.getenv("GOOGLE_SHEET_ID")
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
SHEET_RANGE = "A:F"
SHEETS_TIMEOUT_SECONDS = 10
GOOGLE_SHEETS_VALUES_URL = "https://sheets.googleapis.com/v4/spreadsheets/{sheet_id}/values/{range}"
