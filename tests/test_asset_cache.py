from app.domain.errors import AssetLoadError
from app.services.asset_cache import AssetCache

from conftest import FakeLoader


def test_cached_entry_is_served_without_fetch():
    loader = FakeLoader()
    cache = AssetCache(loader)
    got = []
    cache.request("中", got.append)
    cache.request("中", got.append)
    assert loader.calls == ["中"]
    assert len(got) == 2 and got[0] is got[1]
    assert cache.get("中") is got[0]
    assert len(cache) == 1


def test_in_flight_requests_wait_for_one_load():
    loader = FakeLoader(auto=False)
    cache = AssetCache(loader)
    got = []
    cache.request("中", got.append)
    cache.request("中", got.append)
    cache.request("国", got.append)
    assert loader.calls == ["中", "国"]
    assert cache.is_loading("中")
    assert got == []

    loader.finish("中")
    assert [e.character for e in got] == ["中", "中"]
    assert not cache.is_loading("中")
    assert cache.is_loading("国")


def test_failure_notifies_every_waiter_and_is_not_cached():
    loader = FakeLoader(auto=False)
    cache = AssetCache(loader)
    errors = []
    cache.request("中", lambda e: None, errors.append)
    cache.request("中", lambda e: None, errors.append)
    cache.request("中", lambda e: None)
    loader.fail("中", "timeout")

    assert len(errors) == 2
    assert all(isinstance(e, AssetLoadError) and e.reason == "timeout" for e in errors)
    assert cache.get("中") is None
    assert not cache.is_loading("中")


def test_failing_ready_callback_does_not_starve_other_waiters():
    loader = FakeLoader(auto=False)
    cache = AssetCache(loader)
    got = []

    def boom(_entry):
        raise RuntimeError("callback")

    cache.request("中", boom)
    cache.request("中", got.append)
    loader.finish("中")
    assert len(got) == 1
