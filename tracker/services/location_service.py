"""
Service for reading the location history spreadsheet.
"""
import math
import requests
import pandas as pd
from typing import Any, List, Optional
from pydantic import BaseModel

from tracker.config import (
    GOOGLE_SHEET_ID, GOOGLE_API_KEY, SHEET_RANGE, GOOGLE_SHEETS_VALUES_URL,
    SHEETS_TIMEOUT_SECONDS
)
from tracker.geometry import LatLng

# Spreadsheet columns: timestamp | device | latitude | longitude | city | state
SHEET_COLUMNS = ['timestamp', 'device', 'latitude', 'longitude', 'city', 'state']


class LocationSourceError(Exception):
    """Raised when the location spreadsheet cannot be read."""


class Location(BaseModel):
    """One GPS ping from the spreadsheet."""
    id: str
    timestamp: str
    latitude: float
    longitude: float
    address: str = ""


def fetch_sheet_rows(sheet_id: Optional[str] = GOOGLE_SHEET_ID,
                     api_key: Optional[str] = GOOGLE_API_KEY,
                     sheet_range: str = SHEET_RANGE) -> List[List[Any]]:
    """
    Fetch the raw cell values of the location spreadsheet.

    Returns:
        List of rows, header row included
    """
    if not sheet_id:
        raise LocationSourceError("GOOGLE_SHEET_ID is not set")

    url = GOOGLE_SHEETS_VALUES_URL.format(sheet_id=sheet_id, range=sheet_range)
    try:
        response = requests.get(url, params={"key": api_key}, timeout=SHEETS_TIMEOUT_SECONDS)
        response.raise_for_status()
        data = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        print(f"[Location Service] Error fetching location data: {e}")
        raise LocationSourceError("Failed to fetch location data") from e

    return data.get('values', [])


def _parse_coordinate(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _format_address(city: Any, state: Any) -> str:
    city = city.strip() if isinstance(city, str) else ''
    state = state.strip() if isinstance(state, str) else ''
    if city and state:
        return f"{city}, {state}"
    return city or state


def parse_location_rows(rows: List[List[Any]]) -> List[Location]:
    """
    Convert spreadsheet rows into locations.

    The first row is the header. Rows whose latitude or longitude is missing
    or not a number are skipped; 0.0 is a valid coordinate.
    """
    if not rows or len(rows) <= 1:
        return []

    # Rows from the Sheets API are ragged: trailing empty cells are omitted
    data_rows = [list(row[:len(SHEET_COLUMNS)]) + [None] * (len(SHEET_COLUMNS) - len(row))
                 for row in rows[1:]]
    df = pd.DataFrame(data_rows, columns=SHEET_COLUMNS)
    df['id'] = [str(i + 1) for i in range(len(df))]
    df['latitude'] = df['latitude'].map(_parse_coordinate)
    df['longitude'] = df['longitude'].map(_parse_coordinate)

    skipped = int(df[['latitude', 'longitude']].isna().any(axis=1).sum())
    if skipped:
        print(f"[Location Service] Skipping {skipped} row(s) without valid coordinates")
    df = df.dropna(subset=['latitude', 'longitude'])

    locations = []
    for _, row in df.iterrows():
        timestamp = row['timestamp']
        locations.append(Location(
            id=row['id'],
            timestamp=str(timestamp) if isinstance(timestamp, str) else '',
            latitude=float(row['latitude']),
            longitude=float(row['longitude']),
            address=_format_address(row['city'], row['state'])
        ))

    return locations


def get_location_history() -> List[Location]:
    """Fetch and parse the full location history."""
    rows = fetch_sheet_rows()
    locations = parse_location_rows(rows)
    print(f"[Location Service] Loaded {len(locations)} locations")
    return locations


def locations_to_waypoints(locations: List[Location]) -> List[LatLng]:
    """Waypoints in the order the locations were recorded."""
    return [(location.latitude, location.longitude) for location in locations]
