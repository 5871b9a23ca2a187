"""Map state: visible tiles, road overlay and simulated vehicles."""

from __future__ import annotations

import math
import os
import random
from dataclasses import dataclass, replace

from .loader import load_from_osm_file
from .projection import (
    DEFAULT_TILE_SIZE,
    clamp_latitude,
    lon_lat_to_scene,
    normalize_longitude,
    scene_to_lon_lat,
    tile_key,
)
from .roadgraph import RoadGraph
from .tiles import TileManager
from .vehicle import Vehicle

MIN_ZOOM = 0
MAX_ZOOM = 19
DEFAULT_ZOOM = 12
DEFAULT_CENTER_LAT = 47.750839
DEFAULT_CENTER_LON = 7.335888
DEFAULT_VEHICLE_COUNT = 60
VEHICLE_RADIUS_PIXELS = 5.0
MIN_TILE_RANGE = 2
MAX_TILE_RANGE = 6


def _fuzzy_equal(a: float, b: float) -> bool:
    p1, p2 = 1.0 + a, 1.0 + b
    return abs(p1 - p2) * 1e12 <= min(abs(p1), abs(p2))


@dataclass
class TileInfo:
    """A tile shown on the map, at scene position ``(x, y)``."""

    x: float
    y: float
    data: bytes | None = None
    still_needed: bool = False
    loading: bool = False


@dataclass(frozen=True)
class RoadSegment:
    """A road edge projected to scene coordinates."""

    edge_id: int
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class VehicleMarker:
    """A vehicle projected to scene coordinates, with its tooltip."""

    vehicle: Vehicle
    x: float
    y: float
    radius: float
    tooltip: str


def vehicle_tooltip(vehicle: Vehicle) -> str:
    """The text describing a vehicle on hover."""
    return (
        f"Véhicule #{vehicle.id}\n"
        f"Lat: {vehicle.latitude:.6f}\n"
        f"Lon: {vehicle.longitude:.6f}\n"
        f"Vitesse: {vehicle.speed_kmh:.1f} km/h\n"
        f"Rayon: {vehicle.transmission_radius_meters:.1f} m\n"
        f"Route: {vehicle.highway_type}"
    )


class MapModel:
    """Center, zoom and contents of a slippy map viewport."""

    tile_size = DEFAULT_TILE_SIZE

    def __init__(
        self,
        tile_manager: TileManager | None = None,
        viewport_width: int = 0,
        viewport_height: int = 0,
        rng: random.Random | None = None,
    ) -> None:
        self._tile_manager = tile_manager if tile_manager is not None else TileManager()
        self._tile_manager.subscribe(self.on_tile_ready)
        self._width = viewport_width
        self._height = viewport_height
        self._rng = rng if rng is not None else random.Random()
        self._zoom = DEFAULT_ZOOM
        self._center_lat = DEFAULT_CENTER_LAT
        self._center_lon = DEFAULT_CENTER_LON
        self._tiles: dict[str, TileInfo] = {}
        self._graph = RoadGraph()
        self._graph_loaded = False
        self._vehicles: list[Vehicle] = []
        self._limit_region = False
        self._min_lat, self._max_lat = -90.0, 90.0
        self._min_lon, self._max_lon = -180.0, 180.0

    @property
    def zoom(self) -> int:
        return self._zoom

    @property
    def center(self) -> tuple[float, float]:
        """The map center as ``(lat, lon)``."""
        return self._center_lat, self._center_lon

    @property
    def viewport_size(self) -> tuple[int, int]:
        return self._width, self._height

    @property
    def tiles(self) -> dict[str, TileInfo]:
        return dict(self._tiles)

    @property
    def road_graph(self) -> RoadGraph:
        return self._graph

    @property
    def road_graph_loaded(self) -> bool:
        return self._graph_loaded

    @property
    def vehicles(self) -> tuple[Vehicle, ...]:
        return tuple(self._vehicles)

    def resize(self, width: int, height: int) -> None:
        """Set the viewport size in pixels."""
        self._width = width
        self._height = height

    def viewport_ready(self) -> bool:
        """Whether the viewport has a usable size."""
        return self._width > 0 and self._height > 0

    def _mark_tiles_unneeded(self) -> None:
        for info in self._tiles.values():
            info.still_needed = False

    def set_center_lat_lon(
        self, lat: float, lon: float, zoom: int, preserve_if_out_of_bounds: bool = False
    ) -> bool:
        """Move the map; returns whether the center or zoom changed."""
        lat = clamp_latitude(lat)
        lon = normalize_longitude(lon)
        lat, lon, clamped = self.clamp_center_to_bounds(lat, lon)
        if clamped and preserve_if_out_of_bounds:
            lat, lon = self._center_lat, self._center_lon

        zoom_changed = zoom != self._zoom
        center_changed = not _fuzzy_equal(lat, self._center_lat) or not _fuzzy_equal(
            lon, self._center_lon
        )
        if not zoom_changed and not center_changed:
            return False

        self._center_lat = lat
        self._center_lon = lon
        self._zoom = zoom
        self._mark_tiles_unneeded()
        self.load_visible_tiles()
        return True

    def set_limit_region(
        self, min_lat: float, max_lat: float, min_lon: float, max_lon: float
    ) -> None:
        """Restrict the center to a bounding box."""
        self._limit_region = True
        self._min_lat, self._max_lat = min_lat, max_lat
        self._min_lon, self._max_lon = min_lon, max_lon

    def clamp_center_to_bounds(self, lat: float, lon: float) -> tuple[float, float, bool]:
        """Clamp a center to the limit region; returns ``(lat, lon, changed)``."""
        if not self._limit_region:
            return lat, lon, False
        clamped_lat = min(max(lat, self._min_lat), self._max_lat)
        clamped_lon = min(max(lon, self._min_lon), self._max_lon)
        changed = not _fuzzy_equal(lat, clamped_lat) or not _fuzzy_equal(lon, clamped_lon)
        return clamped_lat, clamped_lon, changed

    def center_scene(self) -> tuple[float, float]:
        """The map center in scene pixels at the current zoom."""
        return lon_lat_to_scene(self._center_lon, self._center_lat, self._zoom, self.tile_size)

    def zoom_to_level(self, new_zoom: int) -> None:
        """Zoom around the current center, ignoring levels out of range."""
        if new_zoom == self._zoom or not MIN_ZOOM <= new_zoom <= MAX_ZOOM:
            return
        if not self.viewport_ready():
            self._zoom = new_zoom
            self.load_visible_tiles()
            return
        self._center_lat = clamp_latitude(self._center_lat)
        self._center_lon = normalize_longitude(self._center_lon)
        self._zoom = new_zoom
        self._mark_tiles_unneeded()
        self.load_visible_tiles()

    def zoom_at(self, scene_x: float, scene_y: float, zoom_in: bool) -> bool:
        """Zoom one level and recenter on a scene point; returns whether it zoomed."""
        if not self.viewport_ready():
            return False
        new_zoom = min(MAX_ZOOM, self._zoom + 1) if zoom_in else max(MIN_ZOOM, self._zoom - 1)
        if new_zoom == self._zoom:
            return False
        lon, lat = scene_to_lon_lat(scene_x, scene_y, self._zoom, self.tile_size)
        self.set_center_lat_lon(clamp_latitude(lat), normalize_longitude(lon), new_zoom)
        return True

    def zoom_in_on(self, scene_x: float, scene_y: float) -> bool:
        """Center on a scene point and zoom in one level if possible."""
        if not self.viewport_ready():
            return False
        lon, lat = scene_to_lon_lat(scene_x, scene_y, self._zoom, self.tile_size)
        target = self._zoom + 1 if self._zoom < MAX_ZOOM else self._zoom
        self.set_center_lat_lon(lat, lon, target, True)
        return True

    def pan_by(self, dx: float, dy: float) -> bool:
        """Apply a drag of ``(dx, dy)`` pixels; returns whether the center moved."""
        if not self.viewport_ready():
            return False
        start_x, start_y = self.center_scene()
        lon, lat = scene_to_lon_lat(start_x - dx, start_y - dy, self._zoom, self.tile_size)
        if not (-180.0 <= lon <= 180.0 and -85.0 <= lat <= 85.0):
            return False
        return self.set_center_lat_lon(lat, lon, self._zoom)

    def load_visible_tiles(self) -> None:
        """Request the tiles around the center and drop the others."""
        if not self.viewport_ready():
            return
        self._mark_tiles_unneeded()
        size = self.tile_size
        cx, cy = self.center_scene()
        range_x = math.ceil(self._width / size / 2.0) + 1
        range_y = math.ceil(self._height / size / 2.0) + 1
        reach = min(max(range_x, range_y, MIN_TILE_RANGE), MAX_TILE_RANGE)
        base_x = math.floor(cx / size)
        base_y = math.floor(cy / size)
        for dx in range(-reach, reach + 1):
            for dy in range(-reach, reach + 1):
                tx, ty = base_x + dx, base_y + dy
                key = tile_key(self._zoom, tx, ty)
                info = self._tiles.get(key)
                if info is not None:
                    info.x, info.y = tx * size, ty * size
                    info.still_needed = True
                    continue
                self._tiles[key] = TileInfo(
                    x=tx * size, y=ty * size, still_needed=True, loading=True
                )
                self._tile_manager.request_tile(self._zoom, tx, ty)
        self._tiles = {key: info for key, info in self._tiles.items() if info.still_needed}

    def on_tile_ready(self, z: int, x: int, y: int, data: bytes) -> None:
        """Store the image data of a delivered tile."""
        size = self.tile_size
        key = tile_key(z, x, y)
        info = self._tiles.get(key)
        if info is None:
            self._tiles[key] = TileInfo(x=x * size, y=y * size, data=data, still_needed=True)
            return
        info.data = data
        info.x, info.y = x * size, y * size
        info.still_needed = True
        info.loading = False

    def load_road_graph(self, graph: RoadGraph) -> None:
        """Show a road graph, place vehicles on it and center on its extent."""
        self._mark_tiles_unneeded()
        self._graph = graph
        self._graph_loaded = True
        self.generate_vehicles(DEFAULT_VEHICLE_COUNT)
        nodes = graph.nodes()
        if nodes:
            lats = [node.lat for node in nodes]
            lons = [node.lon for node in nodes]
            center_lat = (min(lats) + max(lats)) / 2.0
            center_lon = (min(lons) + max(lons)) / 2.0
            self.set_center_lat_lon(center_lat, center_lon, self._zoom)

    def load_road_graph_from_file(self, path: str | os.PathLike[str]) -> RoadGraph:
        """Load an OSM file as the road graph; raises RoadGraphLoadError."""
        graph = load_from_osm_file(path)
        self.load_road_graph(graph)
        return graph

    def _valid_edges(self):
        nodes = self._graph.nodes()
        for edge in self._graph.edges():
            if 0 <= edge.from_node < len(nodes) and 0 <= edge.to_node < len(nodes):
                yield edge, nodes[edge.from_node], nodes[edge.to_node]

    def generate_vehicles(self, count: int) -> None:
        """Place ``count`` vehicles along the road edges."""
        self._vehicles = []
        if not self._graph_loaded:
            return
        if not self._graph.edges() or not self._graph.nodes():
            return
        for vehicle_id, (edge, from_node, to_node) in enumerate(self._valid_edges(), start=1):
            if vehicle_id > count:
                break
            t = self._rng.uniform(0.1, 0.9)
            self._vehicles.append(
                Vehicle(
                    id=vehicle_id,
                    latitude=from_node.lat + (to_node.lat - from_node.lat) * t,
                    longitude=from_node.lon + (to_node.lon - from_node.lon) * t,
                    speed_kmh=edge.max_speed_kmh,
                    transmission_radius_meters=self._rng.uniform(100.0, 500.0),
                    edge_id=edge.id,
                    highway_type=edge.highway_type,
                )
            )
        vehicle_id = len(self._vehicles) + 1
        while vehicle_id <= count and self._vehicles:
            source = self._vehicles[(vehicle_id - 1) % len(self._vehicles)]
            self._vehicles.append(replace(source, id=vehicle_id))
            vehicle_id += 1

    def road_segments(self) -> list[RoadSegment]:
        """Every valid edge projected at the current zoom."""
        if not self._graph_loaded:
            return []
        segments = []
        for edge, from_node, to_node in self._valid_edges():
            x1, y1 = lon_lat_to_scene(from_node.lon, from_node.lat, self._zoom, self.tile_size)
            x2, y2 = lon_lat_to_scene(to_node.lon, to_node.lat, self._zoom, self.tile_size)
            segments.append(RoadSegment(edge.id, x1, y1, x2, y2))
        return segments

    def vehicle_markers(self) -> list[VehicleMarker]:
        """Every vehicle projected at the current zoom."""
        markers = []
        for vehicle in self._vehicles:
            x, y = lon_lat_to_scene(vehicle.longitude, vehicle.latitude, self._zoom, self.tile_size)
            markers.append(
                VehicleMarker(vehicle, x, y, VEHICLE_RADIUS_PIXELS, vehicle_tooltip(vehicle))
            )
        return markers

    def can_zoom_in(self) -> bool:
        return self._zoom < MAX_ZOOM

    def can_zoom_out(self) -> bool:
        return self._zoom > MIN_ZOOM