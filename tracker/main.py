"""
FastAPI application serving the location history and its road-following route.
"""
import polyline
from fastapi import FastAPI, HTTPException
from typing import List, Tuple
from pydantic import BaseModel

from tracker.config import POLYLINE_PRECISION
from tracker.services.location_service import (
    Location, get_location_history, locations_to_waypoints
)
from tracker.services.route_service import create_route_assembler

app = FastAPI(title="Location Tracker API", version="1.0.0")

# One assembler per process so unchanged trips are not re-assembled
route_assembler = create_route_assembler()


class RouteResponse(BaseModel):
    """Response model for the route endpoint."""
    waypoints: List[Tuple[float, float]]
    path: List[Tuple[float, float]]
    encoded: str


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "Location Tracker API", "version": "1.0.0"}


@app.get("/api/locations", response_model=List[Location])
def get_locations():
    """Get the recorded location history."""
    try:
        return get_location_history()
    except Exception as e:
        print(f"[API] Error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch locations")


@app.get("/api/route", response_model=RouteResponse)
def get_route():
    """
    Get the road-following route through the recorded locations.

    Returns:
        - waypoints: The recorded (lat, lng) points in chronological order
        - path: The assembled road path
        - encoded: The path as an encoded polyline
    """
    try:
        waypoints = locations_to_waypoints(get_location_history())
        path = route_assembler.assemble(waypoints)
        return RouteResponse(
            waypoints=waypoints,
            path=path,
            encoded=polyline.encode(path, POLYLINE_PRECISION)
        )
    except HTTPException:
        raise
    except Exception as e:
        print(f"[API] Error: {e}")
        raise HTTPException(status_code=500, detail="Failed to build route")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
