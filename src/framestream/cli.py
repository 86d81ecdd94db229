"""framestream CLI.

Console-script: ``framestream``.

  framestream compress   IN OUT [--codec lz4|zstd|zlib] [--level N] [--buffer-size N]
  framestream decompress IN OUT [--codec auto|lz4|zstd|zlib]
  framestream verify     IN     [--codec auto|...] [--strict]

``-`` stands for stdin/stdout. Defaults come from FRAMESTREAM_* env vars.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO

from framestream.config import StreamConfig
from framestream.core.registry import CODEC_IDS, sniff_codec
from framestream.errors import EXIT_GENERIC, FrameStreamError, UsageError
from framestream.streams import FrameReader, FrameWriter
from framestream.verify import verify_stream

COPY_CHUNK = 256 * 1024


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--debug", action="store_true", help="Show stack traces on errors")
    p.add_argument("-v", "--verbose", action="store_true", help="Log frame lifecycle to stderr")


def _open_in(stack: ExitStack, arg: str) -> BinaryIO:
    if arg == "-":
        return sys.stdin.buffer
    return stack.enter_context(Path(arg).open("rb"))


def _open_out(stack: ExitStack, arg: str) -> BinaryIO:
    if arg == "-":
        return sys.stdout.buffer
    return stack.enter_context(Path(arg).open("wb"))


def _resolve_read_codec(src: BinaryIO, codec: str) -> tuple[BinaryIO, str]:
    """For --codec auto, sniff the magic without losing the bytes."""
    if codec != "auto":
        return src, codec
    # stdin.buffer and open(..., "rb") are both BufferedReader.
    head = src.peek(4)[:4]  # type: ignore[attr-defined]
    cid = sniff_codec(head)
    if cid is None:
        raise UsageError("Cannot detect codec from stream header; pass --codec explicitly")
    return src, cid


def _cmd_compress(ns: argparse.Namespace, cfg: StreamConfig) -> int:
    cfg = cfg.with_overrides(codec=ns.codec, level=ns.level, write_buffer_size=ns.buffer_size)
    with ExitStack() as stack:
        src = _open_in(stack, ns.input)
        dst = _open_out(stack, ns.output)
        with FrameWriter(dst, cfg) as w:
            shutil.copyfileobj(src, w, COPY_CHUNK)
    return 0


def _cmd_decompress(ns: argparse.Namespace, cfg: StreamConfig) -> int:
    with ExitStack() as stack:
        src = _open_in(stack, ns.input)
        src, cid = _resolve_read_codec(src, ns.codec)
        cfg = cfg.with_overrides(codec=cid, read_buffer_size=ns.buffer_size, strict=ns.strict or None)
        dst = _open_out(stack, ns.output)
        with FrameReader(src, cfg) as r:
            shutil.copyfileobj(r, dst, COPY_CHUNK)
    return 0


def _cmd_verify(ns: argparse.Namespace, cfg: StreamConfig) -> int:
    with ExitStack() as stack:
        src = _open_in(stack, ns.input)
        src, cid = _resolve_read_codec(src, ns.codec)
        cfg = cfg.with_overrides(codec=cid, strict=ns.strict or None)
        rep = verify_stream(src, cfg)
    print(
        f"OK codec={rep.codec} compressed={rep.compressed_bytes} "
        f"decompressed={rep.decompressed_bytes} sha256={rep.sha256}"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="framestream", description="Streaming frame compression")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_c = sub.add_parser("compress", help="Compress IN into a single frame at OUT")
    p_c.add_argument("input", help="Input file ('-' for stdin)")
    p_c.add_argument("output", help="Output file ('-' for stdout)")
    p_c.add_argument("--codec", choices=CODEC_IDS, default=None, help="Codec id (default: lz4)")
    p_c.add_argument("--level", type=int, default=None, help="Compression level (codec default if unset)")
    p_c.add_argument("--buffer-size", type=int, default=None, help="Raw bytes per encoder update")
    _add_common_args(p_c)

    p_d = sub.add_parser("decompress", help="Decompress a frame from IN into OUT")
    p_d.add_argument("input", help="Input file ('-' for stdin)")
    p_d.add_argument("output", help="Output file ('-' for stdout)")
    p_d.add_argument("--codec", choices=("auto", *CODEC_IDS), default="auto")
    p_d.add_argument("--buffer-size", type=int, default=None, help="Compressed bytes per upstream read")
    p_d.add_argument("--strict", action="store_true", help="Fail if input ends mid-frame")
    _add_common_args(p_d)

    p_v = sub.add_parser("verify", help="Decode a frame fully and report sizes + sha256")
    p_v.add_argument("input", help="Input file ('-' for stdin)")
    p_v.add_argument("--codec", choices=("auto", *CODEC_IDS), default="auto")
    p_v.add_argument("--strict", action="store_true", help="Fail if input ends mid-frame")
    _add_common_args(p_v)

    return p


def main(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    p = build_parser()
    ns = p.parse_args(argv)

    if getattr(ns, "verbose", False):
        logging.basicConfig(level=logging.DEBUG, format="[framestream] %(name)s: %(message)s")

    try:
        cfg = StreamConfig.from_env()
        if ns.cmd == "compress":
            return _cmd_compress(ns, cfg)
        if ns.cmd == "decompress":
            return _cmd_decompress(ns, cfg)
        if ns.cmd == "verify":
            return _cmd_verify(ns, cfg)
        raise AssertionError("unreachable")

    except SystemExit:
        raise
    except FrameStreamError as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[framestream] {e}", file=sys.stderr)
        return int(getattr(e, "exit_code", EXIT_GENERIC) or EXIT_GENERIC)
    except Exception as e:
        if getattr(ns, "debug", False):
            raise
        print(f"[framestream] error: {e}", file=sys.stderr)
        return EXIT_GENERIC


if __name__ == "__main__":
    raise SystemExit(main())
