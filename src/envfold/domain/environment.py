"""Immutable name/value mappings: the snapshot and the logical environment.

Both are read-only views over a private dict copy. Once constructed they
never change, so they can be shared across threads without locking.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Protocol, runtime_checkable


class FrozenEnv(Mapping[str, str]):
    """Read-only mapping of environment names to values."""

    __slots__ = ("_data",)

    def __init__(self, entries: Mapping[str, str] | Iterable[tuple[str, str]] = ()) -> None:
        self._data: Mapping[str, str] = MappingProxyType(dict(entries))

    def __getitem__(self, name: str) -> str:
        return self._data[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __hash__(self) -> int:
        return hash(frozenset(self._data.items()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self._data)!r})"

    def to_dict(self) -> dict[str, str]:
        """Independent, name-sorted copy."""
        return {name: self._data[name] for name in sorted(self._data)}


class EnvironmentSnapshot(FrozenEnv):
    """The base environment as captured at invocation time.

    ``excluded`` lists names dropped because they were not valid text.
    """

    __slots__ = ("excluded",)

    def __init__(
        self,
        entries: Mapping[str, str] | Iterable[tuple[str, str]] = (),
        *,
        excluded: Iterable[str] = (),
    ) -> None:
        super().__init__(entries)
        self.excluded: tuple[str, ...] = tuple(excluded)


@runtime_checkable
class EnvironmentQuery(Protocol):
    """The read-only accessor handed to compile-time consumers."""

    def lookup(self, name: str) -> str | None: ...


class LogicalEnvironment(FrozenEnv):
    """Final, resolved environment. Only produced by a resolution."""

    __slots__ = ()

    def lookup(self, name: str) -> str | None:
        """Return the value for *name*, or None if absent."""
        return self._data.get(name)

    def fingerprint(self) -> str:
        """SHA-256 over the name-sorted entries.

        Equal environments always produce equal fingerprints, regardless
        of insertion order.
        """
        digest = hashlib.sha256()
        for name in sorted(self._data):
            digest.update(name.encode("utf-8", "surrogatepass"))
            digest.update(b"\0")
            digest.update(self._data[name].encode("utf-8", "surrogatepass"))
            digest.update(b"\0")
        return digest.hexdigest()
