from __future__ import annotations

import hashlib
import io
from pathlib import Path

import pytest

from framestream.config import StreamConfig
from framestream.errors import CodecError, TruncatedFrame
from framestream.streams import FrameWriter
from framestream.verify import verify_file, verify_stream


def _compress(data: bytes, cfg: StreamConfig) -> bytes:
    out = io.BytesIO()
    with FrameWriter(out, cfg) as w:
        w.write(data)
    return out.getvalue()


@pytest.mark.parametrize("codec", ["lz4", "zlib"])
def test_verify_stream_reports_sizes_and_hash(codec: str) -> None:
    cfg = StreamConfig(codec=codec)
    data = b"TOTALE 12.00\n" * 1000
    blob = _compress(data, cfg)

    rep = verify_stream(io.BytesIO(blob), cfg, chunk_size=4096)
    assert rep.codec == codec
    assert rep.compressed_bytes == len(blob)
    assert rep.decompressed_bytes == len(data)
    assert rep.sha256 == hashlib.sha256(data).hexdigest()
    assert 0 < rep.ratio < 1


def test_verify_empty_stream() -> None:
    cfg = StreamConfig()
    rep = verify_stream(io.BytesIO(_compress(b"", cfg)), cfg)
    assert rep.decompressed_bytes == 0
    assert rep.ratio == 0.0
    assert rep.sha256 == hashlib.sha256(b"").hexdigest()


def test_verify_file(tmp_path: Path) -> None:
    p = tmp_path / "f.lz4"
    p.write_bytes(_compress(b"abc" * 100, StreamConfig()))
    assert verify_file(p).decompressed_bytes == 300


def test_verify_truncated_strict_raises() -> None:
    blob = _compress(b"abc" * 100, StreamConfig())[:-8]
    assert verify_stream(io.BytesIO(blob)).decompressed_bytes == 300
    with pytest.raises(TruncatedFrame):
        verify_stream(io.BytesIO(blob), StreamConfig(strict=True))


def test_verify_corrupt_raises() -> None:
    blob = bytearray(_compress(b"abc" * 100, StreamConfig()))
    blob[-1] ^= 0x01
    with pytest.raises(CodecError):
        verify_stream(io.BytesIO(bytes(blob)))
