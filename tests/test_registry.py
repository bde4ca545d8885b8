"""
Tests for the callback handle registry
"""
import threading

import pytest

from lpbridge.registry import HandleRegistry


def test_register_and_resolve():
    reg = HandleRegistry()
    payload = object()
    handle = reg.register(payload)
    assert handle != 0
    assert reg.resolve(handle) is payload
    assert len(reg) == 1


def test_unknown_and_null_handles_resolve_to_none():
    reg = HandleRegistry()
    assert reg.resolve(0) is None
    assert reg.resolve(None) is None
    assert reg.resolve(12345) is None


def test_unregister_invalidates_handle():
    reg = HandleRegistry()
    handle = reg.register("a")
    reg.unregister(handle)
    assert reg.resolve(handle) is None
    assert len(reg) == 0


def test_unregister_twice_raises():
    reg = HandleRegistry()
    handle = reg.register("a")
    reg.unregister(handle)
    with pytest.raises(KeyError):
        reg.unregister(handle)


def test_stale_handle_does_not_resolve_after_slot_reuse():
    reg = HandleRegistry()
    old = reg.register("old")
    reg.unregister(old)
    new = reg.register("new")
    assert new != old
    assert reg.resolve(old) is None
    assert reg.resolve(new) == "new"


def test_registered_unregisters_on_error():
    reg = HandleRegistry()
    with pytest.raises(RuntimeError):
        with reg.registered("payload") as handle:
            assert reg.resolve(handle) == "payload"
            raise RuntimeError("boom")
    assert reg.resolve(handle) is None
    assert len(reg) == 0


def test_concurrent_registration():
    reg = HandleRegistry()
    handles = []
    lock = threading.Lock()

    def worker(n):
        for i in range(200):
            h = reg.register((n, i))
            with lock:
                handles.append((h, (n, i)))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(reg) == 1600
    assert len({h for h, _ in handles}) == 1600
    for h, value in handles:
        assert reg.resolve(h) == value
        reg.unregister(h)
    assert len(reg) == 0
