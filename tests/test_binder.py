from __future__ import annotations

import asyncio
import concurrent.futures
import types
from types import SimpleNamespace

import pytest

from callback_bridge.core.binder import add_async_wrappers, bind_known_callbacks


def _completes_with(value):
    def operation(*args):
        callback = args[-1]
        callback(value)

    return operation


@pytest.mark.anyio
async def test_binds_only_named_callable_members(error_slot):
    fn1 = _completes_with("from a")
    fn2 = _completes_with("from b")
    namespace = SimpleNamespace(a=fn1, b=fn2, c="notAFunction")

    bound = bind_known_callbacks(namespace, {"a", "c"}, signal=error_slot)

    assert bound == ["a"]
    assert namespace.a is not fn1
    assert namespace.b is fn2
    assert namespace.c == "notAFunction"

    future = namespace.a("arg")
    assert isinstance(future, asyncio.Future)
    assert await future == "from a"


def test_bound_method_called_synchronously_with_callback():
    host_calls = []
    seen = []

    def get(tab_id, callback):
        host_calls.append(tab_id)
        callback({"id": tab_id})

    tabs = SimpleNamespace(get=get)
    add_async_wrappers(tabs, "get")

    future = tabs.get(3, seen.append)

    assert host_calls == [3]
    assert seen == [{"id": 3}]
    assert isinstance(future, concurrent.futures.Future)
    assert future.result(timeout=1) == {"id": 3}


def test_missing_target_is_noop():
    assert bind_known_callbacks(None, {"get"}) == []
    assert add_async_wrappers(None, "get", "set") == []


def test_class_members_are_left_untouched():
    class StorageArea:
        def get(self, keys, callback):
            callback({})

        def clear(self, callback):
            callback()

    area = StorageArea()
    own_set = _completes_with(None)
    area.set = own_set

    bound = bind_known_callbacks(area, {"get", "set", "clear"})

    assert bound == ["set"]
    assert area.set is not own_set
    assert "get" not in vars(area)
    assert StorageArea.get.__name__ == "get"
    assert not hasattr(StorageArea.get, "__wrapped__")


@pytest.mark.anyio
async def test_mapping_namespace_is_updated_in_place(error_slot):
    namespace = {"query": _completes_with(["tab"]), "TAB_ID_NONE": -1}

    assert bind_known_callbacks(namespace, ["query", "TAB_ID_NONE"], signal=error_slot) == ["query"]
    assert namespace["TAB_ID_NONE"] == -1
    assert await namespace["query"]({}) == ["tab"]


def test_module_namespace_is_supported():
    module = types.ModuleType("fake_host_tabs")
    original = _completes_with(1)
    module.get = original

    assert add_async_wrappers(module, "get", "remove") == ["get"]
    assert module.get.__wrapped__ is original


def test_slots_only_target_has_no_own_members():
    class Slotted:
        __slots__ = ("get",)

        def __init__(self) -> None:
            self.get = _completes_with(None)

    target = Slotted()
    original = target.get

    assert bind_known_callbacks(target, {"get"}) == []
    assert target.get is original


def test_binding_twice_wraps_again():
    namespace = SimpleNamespace(get=_completes_with(None))
    bind_known_callbacks(namespace, {"get"})
    first = namespace.get

    bind_known_callbacks(namespace, {"get"})

    assert namespace.get is not first
    assert namespace.get.__wrapped__ is first
