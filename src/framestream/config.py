"""Runtime configuration for frame streams.

Buffer sizes are plain runtime fields. All three default to 64 KiB, the
default LZ4 frame block size, so one raw buffer maps onto one codec block.
They stay independently tunable: nothing in the framing depends on them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

from framestream.errors import UsageError

DEFAULT_CODEC = "lz4"
DEFAULT_BUFFER_SIZE = 64 * 1024

ENV_CODEC = "FRAMESTREAM_CODEC"
ENV_LEVEL = "FRAMESTREAM_LEVEL"
ENV_WRITE_BUFFER = "FRAMESTREAM_WRITE_BUFFER"
ENV_READ_BUFFER = "FRAMESTREAM_READ_BUFFER"
ENV_DECODED_BUFFER = "FRAMESTREAM_DECODED_BUFFER"
ENV_STRICT = "FRAMESTREAM_STRICT"


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    v = v.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


def _env_int(name: str, default: int | None) -> int | None:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    try:
        return int(v.strip())
    except ValueError as err:
        raise UsageError(f"{name} must be an integer, got {v!r}") from err


@dataclass(frozen=True)
class StreamConfig:
    """
    codec:               backend id ("lz4", "zstd", "zlib")
    level:               compression level, None = backend default
    write_buffer_size:   raw bytes accumulated before each encoder update
    read_buffer_size:    compressed bytes requested per upstream read
    decoded_buffer_size: max decoded bytes produced per decoder call
    strict:              raise TruncatedFrame when input ends mid-frame
    """

    codec: str = DEFAULT_CODEC
    level: int | None = None
    write_buffer_size: int = DEFAULT_BUFFER_SIZE
    read_buffer_size: int = DEFAULT_BUFFER_SIZE
    decoded_buffer_size: int = DEFAULT_BUFFER_SIZE
    strict: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.codec, str) or not self.codec.strip():
            raise UsageError("codec must be a non-empty string")
        for name in ("write_buffer_size", "read_buffer_size", "decoded_buffer_size"):
            v = getattr(self, name)
            if not isinstance(v, int) or v < 1:
                raise UsageError(f"{name} must be a positive integer, got {v!r}")

    def with_overrides(self, **changes: object) -> StreamConfig:
        """Return a copy with the non-None keyword values applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls) -> StreamConfig:
        base = cls()
        return cls(
            codec=(os.getenv(ENV_CODEC) or base.codec).strip().lower(),
            level=_env_int(ENV_LEVEL, base.level),
            write_buffer_size=_env_int(ENV_WRITE_BUFFER, base.write_buffer_size),
            read_buffer_size=_env_int(ENV_READ_BUFFER, base.read_buffer_size),
            decoded_buffer_size=_env_int(ENV_DECODED_BUFFER, base.decoded_buffer_size),
            strict=_env_bool(ENV_STRICT, base.strict),
        )
