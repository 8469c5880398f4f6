from xpathcraft.cache import (
    SHADOW_PATH_MARKER,
    TtlCache,
    element_fingerprint,
    element_path,
    hash_attributes,
)
from xpathcraft.lxml_adapter import LxmlTreeAdapter


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_entries_expire_after_ttl() -> None:
    clock = FakeClock()
    cache = TtlCache(10, clock)
    cache.put("k", "payload")

    clock.advance(9.5)
    assert cache.get("k") == "payload"
    assert "k" in cache

    clock.advance(0.5)
    assert cache.get("k") is None
    assert len(cache) == 0


def test_evict_expired_drops_only_stale_entries() -> None:
    clock = FakeClock()
    cache = TtlCache(5, clock)
    cache.put("old", 1)
    clock.advance(3)
    cache.put("new", 2)
    clock.advance(3)

    assert cache.evict_expired() == 1
    assert len(cache) == 1
    assert cache.get("new") == 2

    cache.clear()
    assert len(cache) == 0


def test_put_records_insertion_time() -> None:
    clock = FakeClock(42.0)
    entry = TtlCache(1, clock).put("k", None)
    assert entry.created_at == 42.0
    assert entry.key == "k"


def test_attribute_hash_matches_known_values() -> None:
    assert hash_attributes([]) == "0"
    assert hash_attributes([("id", "a")]) == "1x5b3"


def test_attribute_hash_is_order_independent() -> None:
    forward = hash_attributes([("id", "save"), ("class", "btn")])
    backward = hash_attributes([("class", "btn"), ("id", "save")])
    assert forward == backward
    assert forward != hash_attributes([("id", "save")])


def test_fingerprint_uses_child_index_path_below_body() -> None:
    adapter = LxmlTreeAdapter.from_xml("<html><body><div><p>One</p><p>Two</p></div></body></html>")
    second = adapter.evaluate("//p")[1]

    assert element_path(adapter, second) == "div[0]>p[1]"
    assert element_fingerprint(adapter, second) == "div[0]>p[1]_0"


def test_fingerprint_crosses_shadow_boundaries() -> None:
    adapter = LxmlTreeAdapter.from_xml(
        "<html><body><span>x</span><user-card>"
        "<template shadowrootmode='open'><em>a</em><button>Go</button></template>"
        "</user-card></body></html>"
    )
    host = adapter.first("//user-card")
    button = adapter.first("//button", adapter.shadow_root(host))

    assert element_path(adapter, button) == f"user-card[1]>{SHADOW_PATH_MARKER}>button[1]"
