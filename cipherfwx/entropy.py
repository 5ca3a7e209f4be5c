"""Secure random sources.

Providers are probed in a fixed preference order and the first one that
answers is used for the rest of the process. Nothing here ever falls back to
the non-cryptographic ``random`` module.
"""

import os
import secrets
import typing

from .errors import RandomSourceUnavailable


class RandomSource:
    """Interface for anything able to hand out cryptographically secure bytes."""

    name = "abstract"

    def random_bytes(self, n: int) -> bytes:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class SecretsRandomSource(RandomSource):
    name = "secrets"

    def random_bytes(self, n: int) -> bytes:
        return secrets.token_bytes(n)


class UrandomRandomSource(RandomSource):
    name = "os.urandom"

    def random_bytes(self, n: int) -> bytes:
        return os.urandom(n)


class DeviceRandomSource(RandomSource):
    name = "device"

    def __init__(self, path: str = "/dev/urandom"):
        self.path = path

    def random_bytes(self, n: int) -> bytes:
        with open(self.path, "rb") as handle:
            data = handle.read(n)
        if len(data) != n:
            raise RandomSourceUnavailable(f"Short read from {self.path}")
        return data


class UnavailableRandomSource(RandomSource):
    """Stand-in installed by a host that found no secure source; every draw fails."""

    name = "unavailable"

    def random_bytes(self, n: int) -> bytes:
        raise RandomSourceUnavailable("No cryptographically secure random source available")


PROBE_ORDER: typing.Tuple[typing.Callable[[], RandomSource], ...] = (
    SecretsRandomSource,
    UrandomRandomSource,
    DeviceRandomSource,
)

_DEFAULT_SOURCE: typing.Optional[RandomSource] = None


def resolve_random_source(
    candidates: typing.Optional[typing.Iterable[typing.Callable[[], RandomSource]]] = None
) -> RandomSource:
    """Return the first candidate that produces bytes, in preference order."""
    for factory in (PROBE_ORDER if candidates is None else candidates):
        try:
            source = factory()
            probe = source.random_bytes(4)
        except (OSError, NotImplementedError, RandomSourceUnavailable):
            continue
        if len(probe) == 4:
            return source
    raise RandomSourceUnavailable("No cryptographically secure random source available")


def default_random_source() -> RandomSource:
    global _DEFAULT_SOURCE
    if _DEFAULT_SOURCE is None:
        _DEFAULT_SOURCE = resolve_random_source()
    return _DEFAULT_SOURCE


def set_default_random_source(source: typing.Optional[RandomSource]) -> None:
    """Install the process-wide source (``None`` re-probes on next use)."""
    global _DEFAULT_SOURCE
    _DEFAULT_SOURCE = source


__all__ = [
    "DeviceRandomSource",
    "PROBE_ORDER",
    "RandomSource",
    "SecretsRandomSource",
    "UnavailableRandomSource",
    "UrandomRandomSource",
    "default_random_source",
    "resolve_random_source",
    "set_default_random_source",
]
