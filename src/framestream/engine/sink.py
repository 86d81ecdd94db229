from __future__ import annotations

import logging

from framestream.core.codec_base import ByteSink, EncoderSession, codec_errors
from framestream.errors import CodecError, StreamBroken, StreamClosed

logger = logging.getLogger(__name__)


class CompressingSink:
    """
    Raw bytes in, one compressed frame out to ``sink``.

    - the frame header is written during construction, before any byte is accepted
    - raw bytes accumulate in a fixed-capacity buffer; the write that fills
      it triggers one encoder update over the whole buffer
    - close() writes the footer exactly once and releases the encoder

    ``sink`` is borrowed: it is written to, never closed.
    """

    def __init__(self, sink: ByteSink, encoder: EncoderSession, buffer_size: int) -> None:
        if buffer_size < 1:
            encoder.release()
            raise ValueError(f"buffer_size must be >= 1, got {buffer_size}")
        self._sink = sink
        self._encoder = encoder
        self._capacity = int(buffer_size)
        self._buf = bytearray()
        self._closed = False
        self._broken = False
        self.flush_count = 0

        try:
            with codec_errors(f"Failed to start {encoder.label} compression", encoder.native_errors):
                header = encoder.begin()
            self._sink.write(header)
        except BaseException:
            self._release()
            raise
        logger.debug("%s frame opened (header=%d bytes)", encoder.label, len(header))

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def buffer_size(self) -> int:
        return self._capacity

    @property
    def buffered(self) -> int:
        return len(self._buf)

    def _check_usable(self) -> None:
        if self._closed:
            raise StreamClosed("write to a closed compressing stream")
        if self._broken:
            raise StreamBroken("compressing stream is unusable after a codec failure")

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Append raw bytes; flush every time the buffer reaches capacity."""
        self._check_usable()
        view = memoryview(data).cast("B")
        pos = 0
        while pos < len(view):
            take = min(self._capacity - len(self._buf), len(view) - pos)
            self._buf += view[pos : pos + take]
            pos += take
            if len(self._buf) == self._capacity:
                self.flush()
        return len(view)

    def flush(self) -> None:
        self._check_usable()
        if not self._buf:
            return
        try:
            with codec_errors(f"{self._encoder.label} compression failed", self._encoder.native_errors):
                out = self._encoder.update(self._buf)
        except CodecError:
            self._broken = True
            raise
        self._sink.write(out)
        self.flush_count += 1
        self._buf.clear()

    def close(self) -> None:
        """Idempotent. Final flush, footer, release."""
        if self._closed:
            return
        try:
            if not self._broken:
                self.flush()
                with codec_errors(f"Failed to end {self._encoder.label} compression", self._encoder.native_errors):
                    footer = self._encoder.end()
                self._sink.write(footer)
                logger.debug("%s frame closed (footer=%d bytes)", self._encoder.label, len(footer))
        finally:
            self._release()
            self._closed = True

    def _release(self) -> None:
        self._encoder.release()
        self._buf = bytearray()

    def __enter__(self) -> CompressingSink:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
