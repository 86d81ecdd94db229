"""Typed errors for framestream.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- Any codec failure is fatal for the stream instance: no retries, no resume.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_CODEC = 11
EXIT_CODEC_UNAVAILABLE = 12
EXIT_TRUNCATED = 13


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, bad buffer size, unknown codec)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (I/O error, misuse, unexpected error)"),
    ExitCodeInfo(EXIT_CODEC, "CODEC", "Codec failure (corrupt frame, context creation failed)"),
    ExitCodeInfo(EXIT_CODEC_UNAVAILABLE, "CODEC_UNAVAILABLE", "Codec backend module not installed"),
    ExitCodeInfo(EXIT_TRUNCATED, "TRUNCATED", "Input ended before the end of the frame (strict mode)"),
)

_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE: do not edit manually.\n")
    lines.append("> Source of truth: `src/framestream/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Every library error extends `FrameStreamError` and carries an `exit_code`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class FrameStreamError(Exception):
    """Base error for framestream."""

    exit_code: int = EXIT_GENERIC


class UsageError(FrameStreamError):
    exit_code = EXIT_USAGE


class CodecError(FrameStreamError):
    """A codec session could not be created or reported an error mid-stream."""

    exit_code = EXIT_CODEC


class CodecUnavailable(FrameStreamError):
    exit_code = EXIT_CODEC_UNAVAILABLE


class StreamClosed(FrameStreamError, ValueError):
    """Operation attempted on an adapter that has already been closed."""


class StreamBroken(FrameStreamError):
    """Operation attempted on an adapter after a fatal codec failure."""


class TruncatedFrame(FrameStreamError):
    exit_code = EXIT_TRUNCATED
