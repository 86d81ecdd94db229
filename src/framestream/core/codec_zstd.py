from __future__ import annotations

try:
    import zstandard as zstd  # type: ignore
except ImportError:  # pragma: no cover
    zstd = None

from framestream.core.codec_base import DecoderSession, EncoderSession, codec_errors
from framestream.errors import CodecUnavailable

DEFAULT_LEVEL = 3


def _require() -> None:
    if zstd is None:
        raise CodecUnavailable(
            "Module 'zstandard' not available. Install with: python3 -m pip install 'framestream[zstd]'"
        )


def _native_errors() -> tuple[type[BaseException], ...]:
    return (zstd.ZstdError,) if zstd is not None else ()


def have_zstd() -> bool:
    return zstd is not None


class ZstdEncoder(EncoderSession):
    """
    zstd frame encoder on top of a compressobj.

    zstd has no standalone header call: begin() returns b"" and the frame
    header goes out with the first block. Every update() ends with a block
    flush so the sink sees the data without waiting for the frame end.
    """

    codec_id = "zstd"
    label = "zstd"

    def __init__(self, level: int | None = None) -> None:
        _require()
        self.native_errors = _native_errors()
        with codec_errors("Failed to create zstd compression context", self.native_errors):
            cctx = zstd.ZstdCompressor(
                level=DEFAULT_LEVEL if level is None else int(level),
                write_checksum=True,
            )
            self._c = cctx.compressobj()

    def begin(self) -> bytes:
        return b""

    def update(self, data: bytes | memoryview) -> bytes:
        if self._c is None:
            raise RuntimeError("zstd compression context already released")
        return self._c.compress(bytes(data)) + self._c.flush(zstd.COMPRESSOBJ_FLUSH_BLOCK)

    def end(self) -> bytes:
        if self._c is None:
            raise RuntimeError("zstd compression context already released")
        return self._c.flush(zstd.COMPRESSOBJ_FLUSH_FINISH)

    def release(self) -> None:
        self._c = None


class ZstdDecoder(DecoderSession):
    """
    zstd decompressobj has no output cap, so whatever exceeds max_length
    is parked in ``_out`` and reported through ``pending``.
    """

    codec_id = "zstd"
    label = "zstd"

    def __init__(self) -> None:
        _require()
        self.native_errors = _native_errors()
        with codec_errors("Failed to create zstd decompression context", self.native_errors):
            self._d = zstd.ZstdDecompressor().decompressobj()
        self._out = bytearray()
        self._started = False
        self._finished = False

    def decompress(self, data: bytes | memoryview, max_length: int) -> tuple[int, bytes]:
        if self._d is None:
            raise RuntimeError("zstd decompression context already released")
        consumed = 0
        n = len(data)
        if n and not self._finished:
            self._started = True
            self._out += self._d.decompress(bytes(data))
            consumed = n
            if self._d.eof:
                self._finished = True
                consumed -= len(self._d.unused_data)

        chunk = bytes(self._out[:max_length])
        del self._out[:max_length]
        return consumed, chunk

    @property
    def pending(self) -> bool:
        return bool(self._out)

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def started(self) -> bool:
        return self._started

    def release(self) -> None:
        self._d = None
        self._out = bytearray()
