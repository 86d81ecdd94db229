"""File-like wrappers around the adapters.

FrameWriter / FrameReader are ``io.BufferedIOBase`` objects, so they work
anywhere a binary file does (``shutil.copyfileobj``, ``io.TextIOWrapper``,
``with`` blocks). ``open()`` mirrors ``gzip.open``.
"""

from __future__ import annotations

import builtins
import io
import os
from typing import IO, Any

from framestream.config import StreamConfig
from framestream.core.codec_base import ByteSink, ByteSource
from framestream.core.registry import create_decoder, create_encoder
from framestream.engine.sink import CompressingSink
from framestream.engine.source import DecompressingSource
from framestream.errors import UsageError


def _closed_error() -> ValueError:
    return ValueError("I/O operation on closed file.")


class FrameWriter(io.BufferedIOBase):
    """
    Compressing binary writer over ``fileobj``.

    The frame header is written on construction; close() (explicit, via
    ``with``, or on garbage collection through ``IOBase.__del__``) writes
    the footer. ``fileobj`` is closed only when ``owns_fileobj`` is true.
    """

    def __init__(
        self,
        fileobj: ByteSink,
        config: StreamConfig | None = None,
        *,
        owns_fileobj: bool = False,
    ) -> None:
        super().__init__()
        cfg = config or StreamConfig()
        self.config = cfg
        self._fileobj = fileobj
        self._owns_fileobj = False
        self._adapter: CompressingSink | None = None
        self._adapter = CompressingSink(
            fileobj,
            create_encoder(cfg.codec, cfg.level),
            cfg.write_buffer_size,
        )
        self._owns_fileobj = owns_fileobj

    @property
    def adapter(self) -> CompressingSink:
        assert self._adapter is not None
        return self._adapter

    def writable(self) -> bool:
        return True

    def write(self, b: Any) -> int:
        if self.closed:
            raise _closed_error()
        return self.adapter.write(b)

    def flush(self) -> None:
        if self.closed:
            raise _closed_error()
        # IOBase.close() flushes once more after the adapter is already closed.
        if self._adapter is None or self._adapter.closed:
            return
        self._adapter.flush()
        f = getattr(self._fileobj, "flush", None)
        if f is not None:
            f()

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self._adapter is not None:
                self._adapter.close()
                f = getattr(self._fileobj, "flush", None)
                if f is not None:
                    f()
        finally:
            try:
                if self._owns_fileobj:
                    self._fileobj.close()  # type: ignore[attr-defined]
            finally:
                super().close()

    def fileno(self) -> int:
        raise io.UnsupportedOperation("fileno")


class FrameReader(io.BufferedIOBase):
    """Decompressing binary reader over ``fileobj`` (not seekable)."""

    def __init__(
        self,
        fileobj: ByteSource,
        config: StreamConfig | None = None,
        *,
        owns_fileobj: bool = False,
    ) -> None:
        super().__init__()
        cfg = config or StreamConfig()
        self.config = cfg
        self._fileobj = fileobj
        self._owns_fileobj = False
        self._adapter: DecompressingSource | None = None
        self._adapter = DecompressingSource(
            fileobj,
            create_decoder(cfg.codec),
            cfg.read_buffer_size,
            cfg.decoded_buffer_size,
            strict=cfg.strict,
        )
        self._owns_fileobj = owns_fileobj

    @property
    def adapter(self) -> DecompressingSource:
        assert self._adapter is not None
        return self._adapter

    def readable(self) -> bool:
        return True

    def read(self, size: int | None = -1) -> bytes:
        if self.closed:
            raise _closed_error()
        return self.adapter.read(-1 if size is None else size)

    def read1(self, size: int = -1) -> bytes:
        if self.closed:
            raise _closed_error()
        return self.adapter.read1(size)

    def peek(self, size: int = 1) -> bytes:
        if self.closed:
            raise _closed_error()
        return self.adapter.peek(size)

    def readinto(self, b: Any) -> int:
        m = memoryview(b).cast("B")
        data = self.read(len(m))
        n = len(data)
        m[:n] = data
        return n

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self._adapter is not None:
                self._adapter.close()
            if self._owns_fileobj:
                self._fileobj.close()  # type: ignore[attr-defined]
        finally:
            super().close()


def open(
    file: str | os.PathLike[str] | IO[bytes],
    mode: str = "rb",
    *,
    codec: str | None = None,
    level: int | None = None,
    config: StreamConfig | None = None,
    encoding: str | None = None,
    errors: str | None = None,
    newline: str | None = None,
) -> FrameReader | FrameWriter | io.TextIOWrapper:
    """
    Open a compressed stream in binary ("rb", "wb") or text ("rt", "wt") mode.

    ``file`` is a path (opened and owned by the returned object) or an
    existing binary file object (borrowed).
    """
    if mode in ("r", "w"):
        mode += "b"
    if mode not in ("rb", "wb", "rt", "wt"):
        raise UsageError(f"Invalid mode: {mode!r}")
    if "b" in mode and (encoding is not None or errors is not None or newline is not None):
        raise UsageError("encoding/errors/newline are only valid in text mode")

    cfg = (config or StreamConfig()).with_overrides(codec=codec, level=level)
    writing = mode.startswith("w")

    if isinstance(file, (str, bytes, os.PathLike)):
        fileobj = builtins.open(file, "wb" if writing else "rb")
        owns = True
    elif hasattr(file, "write" if writing else "read"):
        fileobj = file
        owns = False
    else:
        raise TypeError("file must be a path or a binary file object")

    try:
        binary: FrameReader | FrameWriter
        if writing:
            binary = FrameWriter(fileobj, cfg, owns_fileobj=owns)
        else:
            binary = FrameReader(fileobj, cfg, owns_fileobj=owns)
    except BaseException:
        if owns:
            fileobj.close()
        raise

    if "t" in mode:
        return io.TextIOWrapper(binary, encoding=encoding, errors=errors, newline=newline)
    return binary
