"""Capture the process environment into an EnvironmentSnapshot.

On POSIX the raw ``os.environb`` bytes are decoded as strict UTF-8 so that
entries which are not valid text are detected instead of being smuggled
through as surrogate escapes. The policy for such entries is configurable:

- ``exclude`` (default): drop the entry, log a warning, record its name
- ``lossy``: keep it, decoding invalid bytes as U+FFFD, log a warning
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from enum import StrEnum

import structlog

from envfold.domain.environment import EnvironmentSnapshot

log = structlog.get_logger(__name__)

ENCODING = "utf-8"


class NonTextPolicy(StrEnum):
    EXCLUDE = "exclude"
    LOSSY = "lossy"


def _to_bytes(raw: str | bytes) -> bytes:
    if isinstance(raw, bytes):
        return raw
    # os.environ round-trips undecodable bytes as lone surrogates
    return raw.encode(ENCODING, errors="surrogateescape")


def _decode(raw: str | bytes) -> tuple[str, bool]:
    """Decode *raw* as text. Returns ``(text, is_valid)``.

    Invalid input is decoded with U+FFFD replacement characters.
    """
    try:
        data = _to_bytes(raw)
    except UnicodeEncodeError:
        # Surrogates outside the escape range: not representable at all.
        return raw.encode(ENCODING, errors="replace").decode(ENCODING), False  # type: ignore[union-attr]
    try:
        return data.decode(ENCODING), True
    except UnicodeDecodeError:
        return data.decode(ENCODING, errors="replace"), False


def snapshot_from_mapping(
    source: Mapping[str, str] | Mapping[bytes, bytes],
    *,
    policy: NonTextPolicy | str = NonTextPolicy.EXCLUDE,
) -> EnvironmentSnapshot:
    """Build a snapshot from an explicit mapping of text or bytes entries.

    Under ``lossy``, a repaired entry never replaces another entry: when
    two names decode to the same text, valid names win and later
    repaired ones are excluded.
    """
    policy = NonTextPolicy(policy)
    entries: dict[str, str] = {}
    excluded: list[str] = []
    repaired: list[tuple[str, str]] = []
    for raw_name, raw_value in source.items():
        name, name_ok = _decode(raw_name)
        value, value_ok = _decode(raw_value)
        if name_ok and value_ok:
            entries[name] = value
            continue
        if policy is NonTextPolicy.EXCLUDE:
            excluded.append(name)
            log.warning("snapshot.entry_excluded", name=name, reason="not valid text")
        else:
            repaired.append((name, value))
    for name, value in repaired:
        if name in entries:
            excluded.append(name)
            log.warning("snapshot.entry_excluded", name=name, reason="name collides after repair")
            continue
        entries[name] = value
        log.warning("snapshot.entry_lossy", name=name, reason="not valid text")
    return EnvironmentSnapshot(entries, excluded=sorted(excluded))


def capture_environment(
    *,
    policy: NonTextPolicy | str = NonTextPolicy.EXCLUDE,
) -> EnvironmentSnapshot:
    """Snapshot the real process environment right now.

    The result is an independent copy: later changes to ``os.environ``
    do not affect it.
    """
    source: Mapping[str, str] | Mapping[bytes, bytes]
    source = dict(os.environb) if os.supports_bytes_environ else dict(os.environ)
    snapshot = snapshot_from_mapping(source, policy=policy)
    log.debug("snapshot.captured", count=len(snapshot), excluded=len(snapshot.excluded))
    return snapshot
