"""Randomness sources.

Every stage that needs entropy takes a ``RandomSource`` argument, so tests
and reproducible runs can swap in a deterministic stream.
"""
from __future__ import annotations

import hashlib
import os
import secrets
from typing import Protocol, runtime_checkable

import structlog

from rabin_zsig.errors import EntropyError

log = structlog.get_logger()


@runtime_checkable
class RandomSource(Protocol):
    def read(self, n_bytes: int) -> bytes:
        """Return exactly ``n_bytes`` random bytes or raise EntropyError."""
        ...


def _check_length(data: bytes, n_bytes: int, source: str) -> bytes:
    if len(data) != n_bytes:
        raise EntropyError(f"{source}: short read ({len(data)} of {n_bytes} bytes)")
    return data


class SecretsRandomSource:
    """Operating system CSPRNG via the ``secrets`` module."""

    def read(self, n_bytes: int) -> bytes:
        return _check_length(secrets.token_bytes(n_bytes), n_bytes, "secrets")


class DeviceRandomSource:
    """Reads from a random device such as ``/dev/urandom``.

    Interrupted reads are retried; any other short read is fatal.
    """

    def __init__(self, path: str = "/dev/urandom"):
        self.path = path
        self._fd: int | None = None

    def __enter__(self) -> "DeviceRandomSource":
        self.open()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def open(self) -> None:
        if self._fd is None:
            try:
                self._fd = os.open(self.path, os.O_RDONLY)
            except OSError as e:
                raise EntropyError(f"cannot open {self.path}: {e}") from e

    def close(self) -> None:
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    def read(self, n_bytes: int) -> bytes:
        self.open()
        while True:
            try:
                data = os.read(self._fd, n_bytes)
                break
            except InterruptedError:
                log.debug("entropy read interrupted, retrying", path=self.path)
                continue
            except OSError as e:
                raise EntropyError(f"{self.path}: read failed: {e}") from e
        return _check_length(data, n_bytes, self.path)


class SeededRandomSource:
    """Deterministic byte stream expanded from a seed with SHAKE-256.

    Successive reads consume consecutive slices of the stream, so the same
    seed and the same sequence of read sizes always yield the same bytes.
    """

    def __init__(self, seed: bytes):
        if not seed:
            raise ValueError("seed must not be empty")
        self.seed = bytes(seed)
        self._counter = 0

    def read(self, n_bytes: int) -> bytes:
        block = hashlib.shake_256(self.seed + self._counter.to_bytes(8, "big")).digest(n_bytes)
        self._counter += 1
        return _check_length(block, n_bytes, "seeded")


class FixedRandomSource:
    """Serves bytes from a preloaded buffer. Runs dry with EntropyError."""

    def __init__(self, data: bytes):
        self._data = bytearray(data)

    @property
    def remaining(self) -> int:
        return len(self._data)

    def read(self, n_bytes: int) -> bytes:
        chunk = bytes(self._data[:n_bytes])
        del self._data[:n_bytes]
        return _check_length(chunk, n_bytes, "fixed buffer")
