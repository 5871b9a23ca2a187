import pytest

from v2vmap.tiles import REFERER, USER_AGENT, TileManager, parse_tile_url, tile_url


class FakeFetcher:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def __call__(self, url, headers):
        self.calls.append((url, dict(headers)))
        if self.fail:
            raise OSError("network down")
        return ("tile:" + url).encode()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def manager(fetcher, tmp_path):
    return TileManager(fetcher, tmp_path / "cache", 100)


def test_tile_url_format():
    assert tile_url(12, 2130, 1430) == "https://tile.openstreetmap.org/12/2130/1430.png"


@pytest.mark.parametrize("z,x,y", [(0, 0, 0), (12, 2130, 1430), (19, -3, 7)])
def test_parse_tile_url_round_trip(z, x, y):
    assert parse_tile_url(tile_url(z, x, y)) == (z, x, y)


def test_parse_tile_url_short_path():
    assert parse_tile_url("https://example.com/a.png") is None


def test_request_fetches_and_notifies(manager, fetcher):
    received = []
    manager.subscribe(lambda z, x, y, data: received.append((z, x, y, data)))
    manager.request_tile(3, 4, 5)
    url = tile_url(3, 4, 5)
    assert received == [(3, 4, 5, ("tile:" + url).encode())]
    assert fetcher.calls[0][0] == url
    assert fetcher.calls[0][1]["User-Agent"] == USER_AGENT
    assert fetcher.calls[0][1]["Referer"] == REFERER


def test_memory_cache_avoids_refetch(manager, fetcher):
    received = []
    manager.subscribe(lambda *args: received.append(args))
    manager.request_tile(1, 1, 1)
    manager.request_tile(1, 1, 1)
    assert len(fetcher.calls) == 1
    assert len(received) == 2
    assert received[0] == received[1]
    assert manager.cached_tile(1, 1, 1) == received[0][3]


def test_cached_tile_missing(manager):
    assert manager.cached_tile(9, 9, 9) is None


def test_disk_cache_reused_by_new_manager(tmp_path):
    first = FakeFetcher()
    TileManager(first, tmp_path, 10).request_tile(2, 1, 0)
    second = FakeFetcher()
    other = TileManager(second, tmp_path, 10)
    received = []
    other.subscribe(lambda *args: received.append(args))
    other.request_tile(2, 1, 0)
    assert second.calls == []
    assert received[0][3] == ("tile:" + tile_url(2, 1, 0)).encode()


def test_memory_capacity_evicts_least_recent(fetcher, tmp_path):
    manager = TileManager(fetcher, tmp_path, 2)
    manager.request_tile(0, 0, 0)
    manager.request_tile(1, 0, 0)
    manager.cached_tile(0, 0, 0)
    manager.request_tile(1, 1, 0)
    assert manager.cached_tile(1, 0, 0) is None
    assert manager.cached_tile(0, 0, 0) is not None
    assert manager.cached_tile(1, 1, 0) is not None


def test_fetch_failure_emits_empty_tile(tmp_path):
    manager = TileManager(FakeFetcher(fail=True), tmp_path, 10)
    received = []
    manager.subscribe(lambda *args: received.append(args))
    manager.request_tile(4, 5, 6)
    assert received == [(4, 5, 6, b"")]
    assert not (tmp_path / "4" / "5" / "6.png").exists()


def test_handle_reply_stores_and_emits(manager):
    received = []
    manager.subscribe(lambda *args: received.append(args))
    manager.handle_reply(tile_url(7, 8, 9), b"png")
    assert received == [(7, 8, 9, b"png")]
    assert manager.cached_tile(7, 8, 9) == b"png"


def test_handle_reply_ignores_bad_url(manager):
    received = []
    manager.subscribe(lambda *args: received.append(args))
    manager.handle_reply("https://example.com/x.png", b"png")
    assert received == []