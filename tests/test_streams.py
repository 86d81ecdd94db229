from __future__ import annotations

import gc
import io
import shutil
from pathlib import Path

import pytest

from framestream.config import StreamConfig
from framestream.errors import CodecError, UsageError
from framestream.streams import FrameReader, FrameWriter
from framestream.streams import open as fs_open


def test_open_path_binary_roundtrip(tmp_path: Path) -> None:
    p = tmp_path / "data.lz4"
    data = b"HELLO 123\n" * 1000
    with fs_open(p, "wb") as f:
        assert f.write(data) == len(data)
    assert p.read_bytes()[:4] == b"\x04\x22\x4d\x18"
    with fs_open(p, "rb") as f:
        assert f.read() == data


def test_open_text_mode_lines(tmp_path: Path) -> None:
    p = tmp_path / "lines.zlib"
    lines = [f"riga {i}: qty={i * 3}\n" for i in range(200)]
    with fs_open(p, "wt", codec="zlib", encoding="utf-8") as f:
        f.writelines(lines)
    with fs_open(p, "rt", codec="zlib", encoding="utf-8") as f:
        assert list(f) == lines


def test_open_borrowed_fileobj_is_not_closed() -> None:
    buf = io.BytesIO()
    with fs_open(buf, "wb") as f:
        f.write(b"abc")
    assert not buf.closed
    buf.seek(0)
    with fs_open(buf, "rb") as f:
        assert f.read() == b"abc"
    assert not buf.closed


def test_open_owned_file_is_closed(tmp_path: Path) -> None:
    p = tmp_path / "x.lz4"
    f = fs_open(p, "wb")
    raw = f._fileobj  # type: ignore[union-attr]
    f.close()
    assert raw.closed


def test_open_rejects_bad_mode_and_binary_encoding(tmp_path: Path) -> None:
    with pytest.raises(UsageError):
        fs_open(tmp_path / "x", "ab")
    with pytest.raises(UsageError):
        fs_open(tmp_path / "x", "rb", encoding="utf-8")


def test_open_unknown_codec_closes_owned_file(tmp_path: Path) -> None:
    with pytest.raises(UsageError):
        fs_open(tmp_path / "x", "wb", codec="brotli")


def test_readline_and_readinto() -> None:
    cfg = StreamConfig(decoded_buffer_size=5)
    out = io.BytesIO()
    with FrameWriter(out, cfg) as w:
        w.write(b"alpha\nbeta\ngamma")
    r = FrameReader(io.BytesIO(out.getvalue()), cfg)
    assert r.readline() == b"alpha\n"
    buf = bytearray(4)
    assert r.readinto(buf) == 4
    assert bytes(buf) == b"beta"
    assert r.read() == b"\ngamma"
    assert r.readinto(buf) == 0
    r.close()


def test_copyfileobj_through_both_sides() -> None:
    data = bytes(range(256)) * 400
    out = io.BytesIO()
    with FrameWriter(out) as w:
        shutil.copyfileobj(io.BytesIO(data), w, 1000)
    back = io.BytesIO()
    with FrameReader(io.BytesIO(out.getvalue())) as r:
        shutil.copyfileobj(r, back, 777)
    assert back.getvalue() == data


def test_closed_writer_and_reader_raise_value_error() -> None:
    w = FrameWriter(io.BytesIO())
    w.close()
    assert w.closed
    with pytest.raises(ValueError):
        w.write(b"x")
    with pytest.raises(ValueError):
        w.flush()

    r = FrameReader(io.BytesIO(b""))
    r.close()
    with pytest.raises(ValueError):
        r.read()


def test_dropping_writer_writes_footer() -> None:
    out = io.BytesIO()
    w = FrameWriter(out)
    w.write(b"no explicit close")
    del w
    gc.collect()
    with FrameReader(io.BytesIO(out.getvalue())) as r:
        assert r.read() == b"no explicit close"


def test_corrupt_input_raises_codec_error() -> None:
    out = io.BytesIO()
    with FrameWriter(out) as w:
        w.write(b"some data worth compressing " * 20)
    blob = bytearray(out.getvalue())
    blob[4] ^= 0xFF  # frame descriptor flags
    with FrameReader(io.BytesIO(bytes(blob))) as r:
        with pytest.raises(CodecError, match="LZ4 decompression failed"):
            r.read()


def test_garbage_input_raises_codec_error() -> None:
    with FrameReader(io.BytesIO(b"definitely not an lz4 frame")) as r:
        with pytest.raises(CodecError):
            r.read()


def test_reader_and_writer_capabilities() -> None:
    w = FrameWriter(io.BytesIO())
    assert w.writable() and not w.readable() and not w.seekable()
    w.close()
    r = FrameReader(io.BytesIO(b""))
    assert r.readable() and not r.writable() and not r.seekable()
    r.close()
