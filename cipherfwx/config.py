"""Cipher configuration: an immutable option set merged layer by layer."""

import dataclasses
from collections.abc import Mapping
import typing

from .buffer import ByteBuffer, as_buffer
from .errors import UnsupportedConfiguration
from .formats import FORMATS
from .hashers import HASHERS
from .kdf import KDFS
from .modes import MODES
from .padding import PADDINGS

_REGISTRIES: typing.Dict[str, typing.Mapping[str, typing.Any]] = {
    "mode": MODES,
    "padding": PADDINGS,
    "kdf": KDFS,
    "hasher": HASHERS,
    "format": FORMATS,
}


def resolve_strategy(option: str, value):
    """Map a registered name such as ``"cbc"`` to its strategy object."""
    if not isinstance(value, str):
        return value
    registry = _REGISTRIES[option]
    try:
        return registry[value.lower()]
    except KeyError:
        known = ", ".join(sorted(registry))
        raise UnsupportedConfiguration(f"Unsupported {option} '{value}' (expected one of: {known})") from None


@dataclasses.dataclass(frozen=True)
class CipherConfig:
    """Recognized cipher options; ``None`` means "not set at this layer"."""

    mode: typing.Any = None
    padding: typing.Any = None
    iv: typing.Optional[ByteBuffer] = None
    salt: typing.Optional[ByteBuffer] = None
    kdf: typing.Any = None
    hasher: typing.Any = None
    key_size: typing.Optional[int] = None
    iv_size: typing.Optional[int] = None
    format: typing.Any = None
    iterations: typing.Optional[int] = None

    def __post_init__(self):
        for option in _REGISTRIES:
            object.__setattr__(self, option, resolve_strategy(option, getattr(self, option)))
        for option in ("iv", "salt"):
            value = getattr(self, option)
            if value is not None:
                object.__setattr__(self, option, as_buffer(value))
        if self.iterations is not None and self.iterations < 1:
            raise UnsupportedConfiguration("iterations must be at least 1")

    @classmethod
    def option_names(cls) -> typing.Tuple[str, ...]:
        return tuple(field.name for field in dataclasses.fields(cls))

    def extend(self, overrides=None) -> "CipherConfig":
        """Return a new config with ``overrides`` layered on top of this one."""
        if overrides is None:
            return self
        if isinstance(overrides, CipherConfig):
            changes = {
                name: getattr(overrides, name)
                for name in self.option_names()
                if getattr(overrides, name) is not None
            }
        elif isinstance(overrides, Mapping):
            unknown = set(overrides) - set(self.option_names())
            if unknown:
                raise UnsupportedConfiguration(f"Unknown cipher option(s): {', '.join(sorted(unknown))}")
            changes = {name: value for name, value in overrides.items() if value is not None}
        else:
            raise TypeError(f"Unsupported config type: {type(overrides)!r}")
        if not changes:
            return self
        return dataclasses.replace(self, **changes)


__all__ = ["CipherConfig", "resolve_strategy"]
