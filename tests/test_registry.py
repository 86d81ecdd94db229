from __future__ import annotations

import pytest

from framestream.core import codec_zstd
from framestream.core.registry import CODEC_IDS, create_decoder, create_encoder, normalize_codec_id, sniff_codec
from framestream.errors import CodecUnavailable, UsageError


def _first_bytes(codec: str) -> bytes:
    enc = create_encoder(codec)
    out = enc.begin() + enc.update(b"hello hello hello") + enc.end()
    enc.release()
    return out


def test_normalize_codec_id() -> None:
    assert normalize_codec_id(" LZ4 ") == "lz4"
    with pytest.raises(UsageError, match="Unsupported codec"):
        normalize_codec_id("snappy")


@pytest.mark.parametrize("codec", ["lz4", "zlib"])
def test_sniff_codec_recognizes_own_output(codec: str) -> None:
    assert sniff_codec(_first_bytes(codec)) == codec


def test_sniff_codec_zstd() -> None:
    pytest.importorskip("zstandard")
    assert sniff_codec(_first_bytes("zstd")) == "zstd"


def test_sniff_codec_unknown() -> None:
    assert sniff_codec(b"") is None
    assert sniff_codec(b"PK\x03\x04") is None


def test_zstd_missing_module_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(codec_zstd, "zstd", None)
    with pytest.raises(CodecUnavailable, match="zstandard"):
        create_encoder("zstd")
    with pytest.raises(CodecUnavailable):
        create_decoder("zstd")


def test_zlib_level_out_of_range_is_usage_error() -> None:
    with pytest.raises(UsageError, match="zlib level"):
        create_encoder("zlib", level=42)


def test_every_codec_id_creates_sessions() -> None:
    for cid in CODEC_IDS:
        if cid == "zstd" and not codec_zstd.have_zstd():
            continue
        enc = create_encoder(cid)
        dec = create_decoder(cid)
        blob = enc.begin() + enc.update(b"abc") + enc.end()
        consumed, out = dec.decompress(blob, 1024)
        assert out == b"abc"
        assert consumed == len(blob)
        assert dec.finished
        enc.release()
        dec.release()


def test_zstd_level_out_of_range_is_usage_error() -> None:
    pytest.importorskip("zstandard")
    with pytest.raises(UsageError, match="zstd level"):
        create_encoder("zstd", level=1000)
