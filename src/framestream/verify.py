"""Verification helpers.

verify_stream decodes a whole compressed stream and reports sizes plus the
sha256 of the decoded bytes. Any codec failure propagates as CodecError;
with ``strict`` a frame cut short raises TruncatedFrame.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from framestream.config import StreamConfig
from framestream.core.codec_base import ByteSource
from framestream.streams import FrameReader

CHUNK_SIZE_DEFAULT = 256 * 1024


@dataclass(frozen=True)
class VerifyReport:
    codec: str
    compressed_bytes: int
    decompressed_bytes: int
    sha256: str

    @property
    def ratio(self) -> float:
        if self.decompressed_bytes == 0:
            return 0.0
        return self.compressed_bytes / self.decompressed_bytes


class _CountingSource:
    def __init__(self, inner: ByteSource) -> None:
        self._inner = inner
        self.count = 0

    def read(self, size: int) -> bytes:
        data = self._inner.read(size)
        self.count += len(data)
        return data


def verify_stream(
    fileobj: BinaryIO | ByteSource,
    config: StreamConfig | None = None,
    *,
    chunk_size: int = CHUNK_SIZE_DEFAULT,
) -> VerifyReport:
    cfg = config or StreamConfig()
    src = _CountingSource(fileobj)
    h = hashlib.sha256()
    total = 0
    with FrameReader(src, cfg) as r:
        while True:
            b = r.read(chunk_size)
            if not b:
                break
            h.update(b)
            total += len(b)
    return VerifyReport(
        codec=cfg.codec,
        compressed_bytes=src.count,
        decompressed_bytes=total,
        sha256=h.hexdigest(),
    )


def verify_file(path: Path, config: StreamConfig | None = None) -> VerifyReport:
    with path.open("rb") as f:
        return verify_stream(f, config)
