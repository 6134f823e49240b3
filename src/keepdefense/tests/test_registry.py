from types import SimpleNamespace

from keepdefense.core.model.registry import EntityStore


def _item(name: str) -> SimpleNamespace:
    return SimpleNamespace(name=name, item_id=-1)


def test_add_assigns_increasing_handles():
    store = EntityStore("item_id")
    a, b = _item("a"), _item("b")
    assert store.add(a) == 1
    assert store.add(b) == 2
    assert a.item_id == 1 and b.item_id == 2
    assert store.get(2) is b
    assert 1 in store
    assert len(store) == 2


def test_discard_hides_before_compact():
    store = EntityStore("item_id")
    a = _item("a")
    handle = store.add(a)
    store.discard(handle)
    assert store.get(handle) is None
    assert handle not in store
    assert len(store) == 1
    assert not store
    assert list(store) == []
    assert store.compact() == 1
    assert store.compact() == 0


def test_handles_are_never_reused():
    store = EntityStore("item_id")
    first = store.add(_item("a"))
    store.discard(first)
    store.compact()
    second = store.add(_item("b"))
    assert second != first
    assert store.get(first) is None


def test_discard_during_iteration_is_safe():
    store = EntityStore("item_id")
    for name in "abcd":
        store.add(_item(name))
    seen = []
    for item in store:
        seen.append(item.name)
        if item.name == "a":
            store.discard(3)
    assert seen == ["a", "b", "d"]
    assert [item.item_id for item in store] == [1, 2, 4]


def test_get_none_and_unknown_handles():
    store = EntityStore("item_id")
    store.add(_item("a"))
    assert store.get(None) is None
    assert not store.alive(99)
    assert len(store) == 1
