"""
Main transcode service entrypoint.

Provides a single function that turns a download request into an outcome,
used by both the CLI and the web app.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from nanoid import generate

from downloads.service.advisory import AdvisoryEntry, build_fallback_advisory
from downloads.service.config import get_scratch_dir
from downloads.service.constants import TEMP_TOKEN_SIZE
from downloads.service.naming import derive_file_name
from downloads.service.process import TranscodeFailureKind
from downloads.service.strategy import choose_download_strategy
from downloads.service.timeout import run_with_timeout

TOKEN_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789'


class InvalidTranscodeRequest(ValueError):
    """Raised when the request has no source URL"""

    pass


class TranscodeInternalError(RuntimeError):
    """Raised for failures unrelated to ffmpeg, e.g. no usable scratch directory"""

    pass


@dataclass(frozen=True)
class TranscodeRequest:
    """A single download request"""
    source_url: str
    name_hint: Optional[str] = None


@dataclass
class DirectLink:
    """Source is not an HLS stream; the client downloads it directly"""
    url: str
    file_name: str


@dataclass
class Transcoded:
    """ffmpeg produced an MP4, read fully into memory"""
    data: bytes
    file_name: str
    byte_length: int


@dataclass
class TranscodeFailed:
    """Conversion failed; advisory lists alternative tools"""
    reason: TranscodeFailureKind
    diagnostic: str
    advisory: List[AdvisoryEntry] = field(default_factory=list)


def allocate_output_path(file_name, scratch_dir=None):
    """
    Build a collision-free temporary path for one conversion.

    Args:
        file_name: The derived output file name
        scratch_dir: Directory for temporary files (default from settings)

    Returns:
        Path: <scratch_dir>/<random token>_<file_name>

    Raises:
        TranscodeInternalError: If the scratch directory is not usable
    """
    scratch_dir = Path(scratch_dir) if scratch_dir else get_scratch_dir()
    if not scratch_dir.is_dir():
        raise TranscodeInternalError(f"Scratch directory does not exist: {scratch_dir}")

    token = generate(TOKEN_ALPHABET, size=TEMP_TOKEN_SIZE)
    return scratch_dir / f"{token}_{file_name}"


def discard_output(output_path, logger=None):
    """Delete a temporary output file, best effort"""
    try:
        Path(output_path).unlink(missing_ok=True)
    except OSError as e:
        if logger:
            logger(f"Warning: could not delete temporary file {output_path}: {e}")


def transcode_request(request, timeout=None, spawn=None, scratch_dir=None, binary=None,
                      logger=None):
    """
    Resolve a download request into a direct link, an MP4 or a failure.

    This is the main entrypoint for the transcode service. It handles:
    - File name derivation
    - Strategy detection (direct link vs HLS remux)
    - Running ffmpeg under a deadline
    - Reading the output and removing the temporary file
    - Fallback advice when conversion fails

    ffmpeg is never retried; a failed attempt is final for this request.

    Args:
        request: TranscodeRequest
        timeout: Deadline in seconds (default from settings)
        spawn: Optional callable(args) returning a process handle
        scratch_dir: Directory for temporary files (default from settings)
        binary: ffmpeg executable (default from settings)
        logger: Optional callable(str) for logging

    Returns:
        DirectLink, Transcoded or TranscodeFailed

    Raises:
        InvalidTranscodeRequest: If source_url is missing or empty
        TranscodeInternalError: If no temporary path can be allocated
    """
    def log(message):
        if logger:
            logger(message)

    source_url = request.source_url
    if not source_url or not source_url.strip():
        raise InvalidTranscodeRequest("Missing required parameter: source URL")

    file_name = derive_file_name(request.name_hint)
    strategy = choose_download_strategy(source_url)

    log(f"Processing URL: {source_url}")
    log(f"Strategy: {strategy}")
    log(f"File name: {file_name}")

    if strategy == 'direct':
        return DirectLink(url=source_url, file_name=file_name)

    output_path = allocate_output_path(file_name, scratch_dir=scratch_dir)
    log(f"Temporary output: {output_path}")

    try:
        result = run_with_timeout(
            source_url,
            output_path,
            timeout=timeout,
            spawn=spawn,
            binary=binary,
            logger=logger
        )

        if result.ok:
            try:
                data = output_path.read_bytes()
            except OSError as e:
                log(f"Output unreadable: {e}")
                reason = TranscodeFailureKind.PROCESS_SPAWN_ERROR
                diagnostic = f"output unreadable: {e}"
            else:
                log(f"Complete! {file_name} ({len(data)} bytes)")
                return Transcoded(data=data, file_name=file_name, byte_length=len(data))
        else:
            reason = result.failure_kind
            diagnostic = result.diagnostic
    finally:
        discard_output(output_path, logger=logger)

    log(f"Conversion failed ({reason.value})")
    return TranscodeFailed(
        reason=reason,
        diagnostic=diagnostic,
        advisory=build_fallback_advisory(source_url, file_name)
    )
