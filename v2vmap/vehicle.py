"""Vehicles placed on the road network."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Vehicle:
    """A simulated vehicle with its position and radio range."""

    id: int = 0
    latitude: float = 0.0
    longitude: float = 0.0
    speed_kmh: float = 0.0
    transmission_radius_meters: float = 0.0
    edge_id: int = 0
    highway_type: str = ""

    def set_lat_lon(self, latitude: float, longitude: float) -> None:
        """Move the vehicle to a new position."""
        self.latitude = latitude
        self.longitude = longitude