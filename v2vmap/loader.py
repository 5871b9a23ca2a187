"""Build a RoadGraph from OpenStreetMap XML data."""

from __future__ import annotations

import math
import os
import re
import xml.etree.ElementTree as ET
from dataclasses import replace
from itertools import pairwise

from .roadgraph import RoadEdge, RoadGraph, RoadNode

EARTH_RADIUS_METERS = 6371000.0
DEFAULT_MAX_SPEED_KMH = 50.0
MPH_TO_KMH = 1.60934

SUPPORTED_HIGHWAY_TYPES = frozenset(
    {
        "motorway", "motorway_link", "trunk", "trunk_link",
        "primary", "primary_link", "secondary", "secondary_link",
        "tertiary", "tertiary_link", "residential", "unclassified",
        "living_street", "service",
    }
)

_ONEWAY_TRUE = frozenset({"yes", "true", "1", "-1"})
_SPEED_RE = re.compile(r"(\d+(?:\.\d+)?)(?:\s*(km/h|kmh|mph|kph))?")
_INT_RE = re.compile(r"\s*[+-]?[0-9]+\s*")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class RoadGraphLoadError(Exception):
    """Raised when OSM data cannot be read into a road graph."""


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in metres between two points given in degrees."""
    lat1_rad, lon1_rad = math.radians(lat1), math.radians(lon1)
    lat2_rad, lon2_rad = math.radians(lat2), math.radians(lon2)
    dlat = lat2_rad - lat1_rad
    dlon = lon2_rad - lon1_rad
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def is_highway_type_supported(value: str) -> bool:
    """Whether a ``highway`` tag value denotes a drivable road."""
    return value in SUPPORTED_HIGHWAY_TYPES


def is_oneway_value_true(value: str) -> bool:
    """Whether a ``oneway`` tag value makes the road one-way (``-1`` included)."""
    return value in _ONEWAY_TRUE


def parse_max_speed_kmh(value: str) -> float:
    """Parse a ``maxspeed`` tag into km/h, falling back to 50 km/h."""
    if not value:
        return DEFAULT_MAX_SPEED_KMH
    match = _SPEED_RE.fullmatch(value.strip().lower())
    if match is None:
        return DEFAULT_MAX_SPEED_KMH
    speed = float(match.group(1))
    if match.group(2) == "mph":
        speed *= MPH_TO_KMH
    return speed


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse_int(text: str | None) -> int | None:
    if text is None or _INT_RE.fullmatch(text) is None:
        return None
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def _parse_float(text: str | None) -> float:
    if not text or "_" in text:
        return 0.0
    try:
        return float(text.strip())
    except ValueError:
        return 0.0


def _add_way(graph: RoadGraph, way: ET.Element) -> None:
    way_id = _parse_int(way.get("id")) or 0
    refs: list[int] = []
    tags: dict[str, str] = {}
    for child in way.iter():
        if child is way:
            continue
        name = _local_name(child.tag)
        if name == "nd":
            ref = _parse_int(child.get("ref"))
            if ref is not None:
                refs.append(ref)
        elif name == "tag":
            tags[child.get("k", "")] = child.get("v", "")

    highway_type = tags.get("highway", "")
    if not is_highway_type_supported(highway_type):
        return

    oneway_tag = tags.get("oneway", "")
    oneway = is_oneway_value_true(oneway_tag)
    reverse_oneway = oneway_tag == "-1"
    max_speed = parse_max_speed_kmh(tags.get("maxspeed", ""))

    for i, (from_id, to_id) in enumerate(pairwise(refs)):
        from_node = graph.node_by_id(from_id)
        to_node = graph.node_by_id(to_id)
        if from_node is None or to_node is None:
            continue
        from_index = graph.node_index(from_id)
        to_index = graph.node_index(to_id)

        forward = RoadEdge(
            id=(way_id << 16) + i,
            from_node=from_index,
            to_node=to_index,
            length_meters=haversine(from_node.lat, from_node.lon, to_node.lat, to_node.lon),
            oneway=oneway and not reverse_oneway,
            max_speed_kmh=max_speed,
            highway_type=highway_type,
        )
        if not reverse_oneway:
            graph.add_edge(forward)
        if not oneway or reverse_oneway:
            graph.add_edge(
                replace(
                    forward,
                    id=(way_id << 16) + i + len(refs),
                    from_node=to_index,
                    to_node=from_index,
                    oneway=reverse_oneway,
                )
            )


def load_from_osm_data(data: bytes | str) -> RoadGraph:
    """Build a road graph from OSM XML; raises RoadGraphLoadError on bad XML."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise RoadGraphLoadError(f"error while reading OSM data: {exc}") from exc

    positions: dict[int, tuple[float, float]] = {}
    for element in root.iter():
        if _local_name(element.tag) != "node":
            continue
        node_id = _parse_int(element.get("id"))
        if node_id is None:
            continue
        positions[node_id] = (_parse_float(element.get("lat")), _parse_float(element.get("lon")))

    graph = RoadGraph()
    for node_id, (lat, lon) in positions.items():
        graph.add_node(RoadNode(id=node_id, lat=lat, lon=lon))

    for element in root.iter():
        if _local_name(element.tag) == "way":
            _add_way(graph, element)
    return graph


def load_from_osm_file(path: str | os.PathLike[str]) -> RoadGraph:
    """Build a road graph from an ``.osm`` file; ``.pbf`` files are not supported."""
    text_path = os.fspath(path)
    lower = text_path.lower()
    if lower.endswith(".pbf"):
        raise RoadGraphLoadError(".pbf files are not supported")
    try:
        with open(text_path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise RoadGraphLoadError(f"cannot open OSM file: {exc}") from exc
    return load_from_osm_data(data)