"""Download road data for a bounding box from the Overpass API."""

from __future__ import annotations

import urllib.error
import urllib.request
from collections.abc import Callable, Mapping
from urllib.parse import quote, urlencode

INTERPRETER_URL = "https://overpass-api.de/api/interpreter"
USER_AGENT = "v2v-map-simulator/0.1 (contact: user@example.com)"
CONTENT_TYPE = "application/x-www-form-urlencoded"

Opener = Callable[[str, bytes, Mapping[str, str]], bytes]


class DownloadError(Exception):
    """Raised when the Overpass request fails."""


def build_overpass_query(min_lat: float, min_lon: float, max_lat: float, max_lon: float) -> str:
    """Overpass QL selecting highway ways in the box, with their nodes."""
    return (
        "[out:xml][timeout:25];"
        f'(way["highway"]({min_lat:.7f},{min_lon:.7f},{max_lat:.7f},{max_lon:.7f});'
        "node(w);"
        ");out body;"
    )


def encode_request_body(min_lat: float, min_lon: float, max_lat: float, max_lon: float) -> bytes:
    """Form-encoded POST body carrying the query as ``data``."""
    query = build_overpass_query(min_lat, min_lon, max_lat, max_lon)
    return urlencode({"data": query}, quote_via=quote).encode("utf-8")


def _http_post(url: str, body: bytes, headers: Mapping[str, str]) -> bytes:
    request = urllib.request.Request(url, data=body, headers=dict(headers), method="POST")
    with urllib.request.urlopen(request, timeout=60) as response:
        return response.read()


class OSMDownloader:
    """Fetch OSM XML for a bounding box."""

    def __init__(self, opener: Opener | None = None) -> None:
        self._opener = opener or _http_post

    def fetch_bounding_box(
        self, min_lat: float, min_lon: float, max_lat: float, max_lon: float
    ) -> bytes:
        """Return the OSM XML payload; raises DownloadError on failure."""
        body = encode_request_body(min_lat, min_lon, max_lat, max_lon)
        headers = {"Content-Type": CONTENT_TYPE, "User-Agent": USER_AGENT}
        try:
            return self._opener(INTERPRETER_URL, body, headers)
        except (urllib.error.URLError, OSError) as exc:
            raise DownloadError(str(exc)) from exc