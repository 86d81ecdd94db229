from __future__ import annotations

import zlib

from framestream.core.codec_base import DecoderSession, EncoderSession, codec_errors

_ZLIB_ERRORS: tuple[type[BaseException], ...] = (zlib.error,)


class ZlibEncoder(EncoderSession):
    """zlib/DEFLATE stream (no external deps). begin() emits the 2-byte header plus an empty sync block."""

    codec_id = "zlib"
    label = "zlib"
    native_errors = _ZLIB_ERRORS

    def __init__(self, level: int | None = None) -> None:
        lvl = -1 if level is None else int(level)
        if not (-1 <= lvl <= 9):
            raise ValueError(f"zlib level must be -1..9, got {level}")
        with codec_errors("Failed to create zlib compression context", self.native_errors):
            self._c = zlib.compressobj(lvl)

    def begin(self) -> bytes:
        if self._c is None:
            raise RuntimeError("zlib compression context already released")
        return self._c.flush(zlib.Z_SYNC_FLUSH)

    def update(self, data: bytes | memoryview) -> bytes:
        if self._c is None:
            raise RuntimeError("zlib compression context already released")
        return self._c.compress(data) + self._c.flush(zlib.Z_SYNC_FLUSH)

    def end(self) -> bytes:
        if self._c is None:
            raise RuntimeError("zlib compression context already released")
        return self._c.flush(zlib.Z_FINISH)

    def release(self) -> None:
        self._c = None


class ZlibDecoder(DecoderSession):
    codec_id = "zlib"
    label = "zlib"
    native_errors = _ZLIB_ERRORS

    def __init__(self) -> None:
        with codec_errors("Failed to create zlib decompression context", self.native_errors):
            self._d = zlib.decompressobj()
        self._started = False
        self._pending = False

    def decompress(self, data: bytes | memoryview, max_length: int) -> tuple[int, bytes]:
        if self._d is None:
            raise RuntimeError("zlib decompression context already released")
        if self._d.eof:
            return 0, b""
        n = len(data)
        if n:
            self._started = True

        out = self._d.decompress(data, max_length)

        # Input past max_length stays with the caller (unconsumed_tail);
        # input past the end of the stream is unused_data.
        consumed = n - len(self._d.unconsumed_tail)
        if self._d.eof:
            consumed -= len(self._d.unused_data)
        self._pending = (not self._d.eof) and len(out) == max_length
        return consumed, out

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def finished(self) -> bool:
        return self._d is not None and self._d.eof

    @property
    def started(self) -> bool:
        return self._started

    def release(self) -> None:
        self._d = None
