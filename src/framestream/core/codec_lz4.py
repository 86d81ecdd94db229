from __future__ import annotations

import lz4.frame

from framestream.core.codec_base import DecoderSession, EncoderSession, codec_errors

# python-lz4 reports every LZ4F_* error code as RuntimeError.
_LZ4_ERRORS: tuple[type[BaseException], ...] = (RuntimeError,)


class LZ4Encoder(EncoderSession):
    """
    LZ4 frame encoder.

    auto_flush is on so every update() hands back complete blocks: a
    flush of the raw buffer really reaches the sink instead of sitting in
    the LZ4F staging buffer until the next block boundary.
    """

    codec_id = "lz4"
    label = "LZ4"
    native_errors = _LZ4_ERRORS

    def __init__(self, level: int | None = None, *, content_checksum: bool = True) -> None:
        with codec_errors("Failed to create LZ4 compression context", self.native_errors):
            self._c: lz4.frame.LZ4FrameCompressor | None = lz4.frame.LZ4FrameCompressor(
                compression_level=lz4.frame.COMPRESSIONLEVEL_MIN if level is None else int(level),
                content_checksum=content_checksum,
                auto_flush=True,
            )

    def _ctx(self) -> lz4.frame.LZ4FrameCompressor:
        if self._c is None:
            raise RuntimeError("LZ4 compression context already released")
        return self._c

    def begin(self) -> bytes:
        return self._ctx().begin()

    def update(self, data: bytes | memoryview) -> bytes:
        return self._ctx().compress(data)

    def end(self) -> bytes:
        return self._ctx().flush()

    def release(self) -> None:
        self._c = None


class LZ4Decoder(DecoderSession):
    codec_id = "lz4"
    label = "LZ4"
    native_errors = _LZ4_ERRORS

    def __init__(self) -> None:
        with codec_errors("Failed to create LZ4 decompression context", self.native_errors):
            self._d: lz4.frame.LZ4FrameDecompressor | None = lz4.frame.LZ4FrameDecompressor()
        self._started = False
        self._pending = False

    def _ctx(self) -> lz4.frame.LZ4FrameDecompressor:
        if self._d is None:
            raise RuntimeError("LZ4 decompression context already released")
        return self._d

    def decompress(self, data: bytes | memoryview, max_length: int) -> tuple[int, bytes]:
        d = self._ctx()
        if d.eof:
            return 0, b""
        n = len(data)
        if n:
            self._started = True

        out = d.decompress(bytes(data), max_length=max_length)

        if d.eof:
            # Bytes past the end mark; part of them may come from input the
            # decompressor kept internally on an earlier call.
            unused = d.unused_data or b""
            self._pending = False
            return max(0, n - len(unused)), out

        # Input the decompressor could not process yet is kept inside it
        # (needs_input False), so from the caller's side all of it is taken.
        # A full output window may also leave decoded bytes inside LZ4F.
        self._pending = (not d.needs_input) or len(out) == max_length
        return n, out

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
