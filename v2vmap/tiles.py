"""Fetch map tiles with an in-memory LRU cache and a bounded disk cache."""

from __future__ import annotations

import os
import tempfile
import urllib.request
from collections import OrderedDict
from collections.abc import Callable, Mapping
from pathlib import Path
from urllib.parse import urlsplit

from .projection import tile_key

TILE_URL_TEMPLATE = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
USER_AGENT = "v2v-map-simulator/0.1 (contact: user@example.com)"
REFERER = "https://example.com/v2v-map-simulator"
DEFAULT_MEMORY_CAPACITY = 100
MAX_DISK_CACHE_BYTES = 50 * 1024 * 1024

Fetcher = Callable[[str, Mapping[str, str]], bytes]
TileCallback = Callable[[int, int, int, bytes], None]


def tile_url(z: int, x: int, y: int) -> str:
    """The URL of tile ``z/x/y`` on the tile server."""
    return TILE_URL_TEMPLATE.format(z=z, x=x, y=y)


def _to_int(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return 0


def parse_tile_url(url: str) -> tuple[int, int, int] | None:
    """Recover ``(z, x, y)`` from a tile URL, or None if its path is too short."""
    parts = urlsplit(url).path.split("/")
    if len(parts) < 4:
        return None
    z = _to_int(parts[-3])
    x = _to_int(parts[-2])
    y = _to_int(parts[-1].split(".")[0])
    return z, x, y


def default_cache_dir() -> Path:
    """Directory for the on-disk tile cache."""
    base = os.environ.get("XDG_CACHE_HOME")
    if not base:
        home = Path.home() if "HOME" in os.environ or os.name == "nt" else None
        if home is None:
            return Path(tempfile.gettempdir()) / "v2v_map_cache"
        base = str(home / ".cache")
    return Path(base) / "v2v_map" / "v2v_map_tiles"


def _http_fetch(url: str, headers: Mapping[str, str]) -> bytes:
    request = urllib.request.Request(url, headers=dict(headers))
    with urllib.request.urlopen(request, timeout=30) as response:
        return response.read()


class TileManager:
    """Deliver tiles to subscribers, from memory, disk or the network."""

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        cache_dir: str | os.PathLike[str] | None = None,
        capacity: int = DEFAULT_MEMORY_CAPACITY,
    ) -> None:
        self._fetcher = fetcher or _http_fetch
        self._cache_dir = Path(cache_dir) if cache_dir is not None else default_cache_dir()
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        self._capacity = capacity
        self._memory: OrderedDict[str, bytes] = OrderedDict()
        self._callbacks: list[TileCallback] = []

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def subscribe(self, callback: TileCallback) -> None:
        """Call ``callback(z, x, y, data)`` whenever a tile becomes ready."""
        self._callbacks.append(callback)

    def _emit(self, z: int, x: int, y: int, data: bytes) -> None:
        for callback in list(self._callbacks):
            callback(z, x, y, data)

    def _remember(self, key: str, data: bytes) -> None:
        self._memory[key] = data
        self._memory.move_to_end(key)
        while len(self._memory) > self._capacity:
            self._memory.popitem(last=False)

    def _disk_path(self, z: int, x: int, y: int) -> Path:
        return self._cache_dir / str(z) / str(x) / f"{y}.png"

    def _disk_read(self, z: int, x: int, y: int) -> bytes | None:
        try:
            return self._disk_path(z, x, y).read_bytes()
        except OSError:
            return None

    def _disk_write(self, z: int, x: int, y: int, data: bytes) -> None:
        path = self._disk_path(z, x, y)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError:
            return
        self._trim_disk()

    def _trim_disk(self) -> None:
        files = [p for p in self._cache_dir.rglob("*.png") if p.is_file()]
        total = sum(p.stat().st_size for p in files)
        if total <= MAX_DISK_CACHE_BYTES:
            return
        for path in sorted(files, key=lambda p: p.stat().st_mtime):
            size = path.stat().st_size
            path.unlink(missing_ok=True)
            total -= size
            if total <= MAX_DISK_CACHE_BYTES:
                break

    def request_tile(self, z: int, x: int, y: int) -> None:
        """Make tile ``z/x/y`` ready, notifying subscribers."""
        key = tile_key(z, x, y)
        cached = self._memory.get(key)
        if cached is not None:
            self._memory.move_to_end(key)
            self._emit(z, x, y, cached)
            return
        url = tile_url(z, x, y)
        data = self._disk_read(z, x, y)
        if data is None:
            try:
                data = self._fetcher(url, {"User-Agent": USER_AGENT, "Referer": REFERER})
            except OSError:
                data = b""
            else:
                self._disk_write(z, x, y, data)
        self.handle_reply(url, data)

    def handle_reply(self, url: str, data: bytes) -> None:
        """Store the tile fetched from ``url`` and notify subscribers."""
        coords = parse_tile_url(url)
        if coords is None:
            return
        z, x, y = coords
        self._remember(tile_key(z, x, y), data)
        self._emit(z, x, y, data)

    def cached_tile(self, z: int, x: int, y: int) -> bytes | None:
        """The tile held in memory, or None."""
        key = tile_key(z, x, y)
        data = self._memory.get(key)
        if data is not None:
            self._memory.move_to_end(key)
        return data