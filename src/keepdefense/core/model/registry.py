from __future__ import annotations

from typing import Generic, Iterator, TypeVar


T = TypeVar("T")


class EntityStore(Generic[T]):
    """
    Insertion-ordered arena of entities keyed by integer handles.

    Handles are never reused, so a handle kept by another entity either
    resolves to the entity it was issued for or to nothing. ``discard`` only
    marks; marked entities disappear from every query at once and are dropped
    from storage by ``compact``.
    """

    def __init__(self, id_attr: str) -> None:
        self._id_attr = id_attr
        self._items: dict[int, T] = {}
        self._removed: set[int] = set()
        self._next_id = 1

    def add(self, entity: T) -> int:
        handle = self._next_id
        self._next_id += 1
        setattr(entity, self._id_attr, handle)
        self._items[handle] = entity
        return handle

    def get(self, handle: int | None) -> T | None:
        if handle is None or handle in self._removed:
            return None
        return self._items.get(handle)

    def alive(self, handle: int | None) -> bool:
        return self.get(handle) is not None

    def discard(self, handle: int) -> None:
        if handle in self._items:
            self._removed.add(handle)

    def compact(self) -> int:
        if not self._removed:
            return 0
        for handle in self._removed:
            self._items.pop(handle, None)
        count = len(self._removed)
        self._removed.clear()
        return count

    def __iter__(self) -> Iterator[T]:
        # snapshot: discards made by the caller during iteration are safe
        for handle, entity in list(self._items.items()):
            if handle not in self._removed:
                yield entity

    def __len__(self) -> int:
        return len(self._items) - len(self._removed)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __contains__(self, handle: object) -> bool:
        return isinstance(handle, int) and self.alive(handle)
