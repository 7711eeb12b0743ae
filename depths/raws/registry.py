"""Append-only, name-indexed arenas for raw definitions."""

from __future__ import annotations

from typing import Dict, Generic, Iterator, Sequence, TypeVar

__all__ = ["IndexedRegistry"]

T = TypeVar("T")


class IndexedRegistry(Generic[T]):
    """Arena of entries addressed by stable integer index and by name.

    Entries are only ever appended, so an index handed out once stays valid
    for the lifetime of the registry. Registering a name twice keeps both
    entries in the arena but points the name at the newest one.
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._entries: list[T] = []
        self._index: Dict[str, int] = {}

    def append(self, name: str, entry: T) -> int:
        position = len(self._entries)
        self._entries.append(entry)
        self._index[name] = position
        return position

    def index_of(self, name: str) -> int:
        try:
            return self._index[name]
        except KeyError as exc:
            raise KeyError(f"Unknown {self.kind} '{name}'") from exc

    def get(self, name: str) -> T:
        return self._entries[self.index_of(name)]

    def at(self, index: int) -> T:
        return self._entries[index]

    def names(self) -> Sequence[str]:
        return tuple(self._index.keys())

    def values(self) -> Sequence[T]:
        return tuple(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
