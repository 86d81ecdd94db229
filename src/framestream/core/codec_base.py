from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from framestream.errors import CodecError


class ByteSink(Protocol):
    """Anything with a bulk ``write``: files, sockets wrapped by makefile, BytesIO."""

    def write(self, data: bytes, /) -> object: ...


class ByteSource(Protocol):
    """Bulk ``read``; may return fewer bytes than asked, ``b""`` means exhausted."""

    def read(self, size: int, /) -> bytes: ...


class EncoderSession(ABC):
    """
    Stateful frame encoder: one session, one frame.

    Lifecycle: begin() once, update() any number of times, end() once,
    release() exactly once (idempotent). Every call returns the compressed
    bytes to append to the sink, possibly empty.
    """

    codec_id: str
    label: str
    native_errors: tuple[type[BaseException], ...] = ()

    @abstractmethod
    def begin(self) -> bytes:
        """Return the frame header (may be empty if the codec emits it lazily)."""
        raise NotImplementedError

    @abstractmethod
    def update(self, data: bytes | memoryview) -> bytes:
        """Compress a body span; all of ``data`` is consumed in one call."""
        raise NotImplementedError

    @abstractmethod
    def end(self) -> bytes:
        """Return the frame footer, including any data still held by the codec."""
        raise NotImplementedError

    @abstractmethod
    def release(self) -> None:
        raise NotImplementedError


class DecoderSession(ABC):
    """
    Stateful frame decoder.

    ``decompress(data, max_length)`` returns ``(consumed, produced)``:
    consumed may be less than ``len(data)``, produced may be empty even when
    input was consumed. When ``pending`` is true the session holds decoded
    output it could not return under ``max_length`` and must be called again
    (with an empty span if need be) before new input is fetched.
    """

    codec_id: str
    label: str
    native_errors: tuple[type[BaseException], ...] = ()

    @abstractmethod
    def decompress(self, data: bytes | memoryview, max_length: int) -> tuple[int, bytes]:
        raise NotImplementedError

    @property
    @abstractmethod
    def pending(self) -> bool:
        raise NotImplementedError

    @property
    @abstractmethod
    def finished(self) -> bool:
        """True once the end of the frame has been decoded."""
        raise NotImplementedError

    @property
    @abstractmethod
    def started(self) -> bool:
        """True once any input has been fed to the session."""
        raise NotImplementedError

    @abstractmethod
    def release(self) -> None:
        raise NotImplementedError


@contextmanager
def codec_errors(what: str, native: tuple[type[BaseException], ...]) -> Iterator[None]:
    """Translate a codec library's own exceptions into CodecError."""
    try:
        yield
    except CodecError:
        raise
    except native as e:
        raise CodecError(f"{what}: {e}") from e
