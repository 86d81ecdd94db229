from __future__ import annotations

import logging

from framestream.core.codec_base import ByteSource, DecoderSession, codec_errors
from framestream.errors import CodecError, StreamBroken, StreamClosed, TruncatedFrame

logger = logging.getLogger(__name__)


class DecompressingSource:
    """
    Compressed bytes pulled from ``source``, decoded bytes served to the caller.

    State:
      _raw[_offset:_limit]  compressed bytes read from upstream, not yet
                            taken by the decoder
      _view[_pos:]          decoded bytes from the latest decoder call, not
                            yet returned to the caller

    Invariant: 0 <= _offset <= _limit <= len(_raw).

    ``source`` is borrowed: it is read from, never closed.
    """

    def __init__(
        self,
        source: ByteSource,
        decoder: DecoderSession,
        read_size: int,
        decoded_size: int,
        *,
        strict: bool = False,
    ) -> None:
        if read_size < 1 or decoded_size < 1:
            raise ValueError(f"buffer sizes must be >= 1, got read={read_size} decoded={decoded_size}")
        self._source = source
        self._decoder = decoder
        self._read_size = int(read_size)
        self._decoded_size = int(decoded_size)
        self._strict = strict

        self._raw = b""
        self._offset = 0
        self._limit = 0
        self._view = b""
        self._pos = 0

        self._eof = False
        self._closed = False
        self._broken = False
        self.upstream_reads = 0
        self.decoder_calls = 0

    @property
    def eof(self) -> bool:
        """True once end-of-stream was declared and the decoded view is drained."""
        return self._eof and self._pos >= len(self._view)

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_usable(self) -> None:
        if self._closed:
            raise StreamClosed("read from a closed decompressing stream")
        if self._broken:
            raise StreamBroken("decompressing stream is unusable after a codec failure")

    # -------------
    # Pull loop
    # -------------

    def _fill(self) -> int:
        data = self._source.read(self._read_size)
        self.upstream_reads += 1
        self._raw = bytes(data) if data else b""
        self._offset = 0
        self._limit = len(self._raw)
        return self._limit

    def _end_of_stream(self) -> int:
        self._eof = True
        d = self._decoder
        if d.started and not d.finished:
            if self._strict:
                self._broken = True
                raise TruncatedFrame(f"{d.label} stream ended before the end of the frame")
            logger.warning("%s stream ended before the end of the frame", d.label)
        return 0

    def _pull(self) -> int:
        """
        Refill the decoded view. Returns the number of decoded bytes made
        available, 0 on end-of-stream.
        """
        if self._eof:
            return 0
        d = self._decoder
        while True:
            if d.finished and not d.pending:
                trailing = self._limit - self._offset
                if trailing:
                    logger.warning("ignoring %d trailing bytes after the end of the %s frame", trailing, d.label)
                self._eof = True
                return 0

            if self._offset == self._limit and not d.pending:
                if self._fill() == 0:
                    return self._end_of_stream()

            span = memoryview(self._raw)[self._offset : self._limit]
            was_pending = d.pending
            try:
                with codec_errors(f"{d.label} decompression failed", d.native_errors):
                    consumed, produced = d.decompress(span, self._decoded_size)
                    if not (consumed or produced or was_pending or d.finished):
                        raise CodecError(f"{d.label} decoder made no progress on {len(span)} input bytes")
            except CodecError:
                self._broken = True
                raise
            self.decoder_calls += 1
            self._offset += consumed

            if produced:
                self._view = produced
                self._pos = 0
                return len(produced)

    # -------------
    # Caller side
    # -------------

    def read_byte(self) -> int | None:
        """Next decoded byte, or None at end-of-stream."""
        self._check_usable()
        if self._pos >= len(self._view) and self._pull() == 0:
            return None
        b = self._view[self._pos]
        self._pos += 1
        return b

    def read1(self, size: int = -1) -> bytes:
        """At most one decoder call's worth of bytes; b"" only at end-of-stream."""
        self._check_usable()
        if self._pos >= len(self._view) and self._pull() == 0:
            return b""
        end = len(self._view) if size is None or size < 0 else min(len(self._view), self._pos + size)
        out = self._view[self._pos : end]
        self._pos = end
        return out

    def read(self, size: int = -1) -> bytes:
        self._check_usable()
        if size is None or size < 0:
            chunks = []
            while True:
                chunk = self.read1()
                if not chunk:
                    return b"".join(chunks)
                chunks.append(chunk)
        chunks = []
        want = size
        while want > 0:
            chunk = self.read1(want)
            if not chunk:
                break
            chunks.append(chunk)
            want -= len(chunk)
        return b"".join(chunks)

    def peek(self, size: int = 1) -> bytes:
        """Decoded bytes available without advancing; like BufferedReader.peek the
        result may be shorter or longer than ``size``, empty only at end-of-stream."""
        self._check_usable()
        if self._pos >= len(self._view):
            self._pull()
        return self._view[self._pos :]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._decoder.release()
        self._raw = b""
        self._view = b""
        self._pos = 0

    def __enter__(self) -> DecompressingSource:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
