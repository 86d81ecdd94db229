"""Codec id -> session factories.

Backends are imported lazily so a missing optional module only fails the
codec that needs it.
"""

from __future__ import annotations

from framestream.core.codec_base import DecoderSession, EncoderSession
from framestream.errors import UsageError

CODEC_IDS: tuple[str, ...] = ("lz4", "zstd", "zlib")


def normalize_codec_id(codec_id: str) -> str:
    cid = str(codec_id).strip().lower()
    if cid not in CODEC_IDS:
        raise UsageError(f"Unsupported codec: {codec_id!r} (expected one of: {', '.join(CODEC_IDS)})")
    return cid


def create_encoder(codec_id: str, level: int | None = None) -> EncoderSession:
    cid = normalize_codec_id(codec_id)
    if cid == "lz4":
        from framestream.core.codec_lz4 import LZ4Encoder as encoder_cls
    elif cid == "zstd":
        from framestream.core.codec_zstd import ZstdEncoder as encoder_cls
    else:
        from framestream.core.codec_zlib import ZlibEncoder as encoder_cls

    # Bad levels surface as ValueError from every backend.
    try:
        return encoder_cls(level)
    except ValueError as e:
        raise UsageError(f"Invalid {cid} level {level!r}: {e}") from e


def create_decoder(codec_id: str) -> DecoderSession:
    cid = normalize_codec_id(codec_id)
    if cid == "lz4":
        from framestream.core.codec_lz4 import LZ4Decoder

        return LZ4Decoder()
    if cid == "zstd":
        from framestream.core.codec_zstd import ZstdDecoder

        return ZstdDecoder()
    from framestream.core.codec_zlib import ZlibDecoder

    return ZlibDecoder()


# Leading bytes of each frame format.
_MAGICS: tuple[tuple[bytes, str], ...] = (
    (b"\x04\x22\x4d\x18", "lz4"),
    (b"\x28\xb5\x2f\xfd", "zstd"),
)


def sniff_codec(head: bytes) -> str | None:
    """Best-effort codec id from the first bytes of a stream (None if unknown)."""
    for magic, cid in _MAGICS:
        if head[: len(magic)] == magic:
            return cid
    # zlib: CMF=deflate with a window <= 32K, and (CMF*256 + FLG) % 31 == 0
    if len(head) >= 2 and (head[0] & 0x0F) == 8 and (head[0] >> 4) <= 7:
        if ((head[0] << 8) | head[1]) % 31 == 0:
            return "zlib"
    return None
