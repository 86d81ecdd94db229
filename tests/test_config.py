from __future__ import annotations

import pytest

from framestream.config import (
    DEFAULT_BUFFER_SIZE,
    ENV_CODEC,
    ENV_DECODED_BUFFER,
    ENV_LEVEL,
    ENV_READ_BUFFER,
    ENV_STRICT,
    ENV_WRITE_BUFFER,
    StreamConfig,
)
from framestream.errors import UsageError

ALL_ENV = (ENV_CODEC, ENV_LEVEL, ENV_WRITE_BUFFER, ENV_READ_BUFFER, ENV_DECODED_BUFFER, ENV_STRICT)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ALL_ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    cfg = StreamConfig()
    assert cfg.codec == "lz4"
    assert cfg.level is None
    assert cfg.write_buffer_size == cfg.read_buffer_size == cfg.decoded_buffer_size == DEFAULT_BUFFER_SIZE
    assert cfg.strict is False
    assert StreamConfig.from_env() == cfg


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_CODEC, " ZLIB ")
    monkeypatch.setenv(ENV_LEVEL, "9")
    monkeypatch.setenv(ENV_WRITE_BUFFER, "256")
    monkeypatch.setenv(ENV_READ_BUFFER, "128")
    monkeypatch.setenv(ENV_DECODED_BUFFER, "64")
    monkeypatch.setenv(ENV_STRICT, "yes")
    cfg = StreamConfig.from_env()
    assert cfg == StreamConfig(
        codec="zlib",
        level=9,
        write_buffer_size=256,
        read_buffer_size=128,
        decoded_buffer_size=64,
        strict=True,
    )


def test_env_bool_unknown_value_keeps_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_STRICT, "maybe")
    assert StreamConfig.from_env().strict is False


def test_env_int_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_WRITE_BUFFER, "64k")
    with pytest.raises(UsageError, match=ENV_WRITE_BUFFER):
        StreamConfig.from_env()


@pytest.mark.parametrize("field", ["write_buffer_size", "read_buffer_size", "decoded_buffer_size"])
def test_rejects_non_positive_buffers(field: str) -> None:
    with pytest.raises(UsageError, match=field):
        StreamConfig(**{field: 0})


def test_with_overrides_skips_none() -> None:
    cfg = StreamConfig(codec="zlib", level=3)
    assert cfg.with_overrides(codec=None, level=None) == cfg
    assert cfg.with_overrides(level=1).level == 1
