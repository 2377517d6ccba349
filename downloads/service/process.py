"""
ffmpeg process runner.

Spawns ffmpeg to remux an HLS stream into MP4, collects its stderr and
turns the exit status into a ProcessResult.
"""
from dataclasses import dataclass
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Optional
import subprocess

from downloads.service.config import get_ffmpeg_binary
from downloads.service.constants import FFMPEG_REMUX_ARGS

STDERR_CHUNK_SIZE = 4096


class TranscodeFailureKind(Enum):
    """Why a transcode attempt failed"""
    NON_ZERO_EXIT = 'non_zero_exit'
    PROCESS_SPAWN_ERROR = 'process_spawn_error'
    TIMEOUT = 'timeout'


@dataclass
class ProcessResult:
    """Outcome of a single ffmpeg run"""
    ok: bool
    output_path: Optional[Path] = None
    diagnostic: str = ''
    exit_code: Optional[int] = None
    failure_kind: Optional[TranscodeFailureKind] = None

    @classmethod
    def success(cls, output_path):
        return cls(ok=True, output_path=Path(output_path), exit_code=0)

    @classmethod
    def failure(cls, failure_kind, diagnostic, exit_code=None):
        return cls(
            ok=False,
            diagnostic=diagnostic,
            exit_code=exit_code,
            failure_kind=failure_kind
        )


class SubprocessHandle:
    """
    Thin wrapper over subprocess.Popen.

    Tests substitute any object with the same shape: an iterable `stderr`
    of byte chunks, `wait()` returning the exit code, and `kill()`.
    """

    def __init__(self, popen):
        self._popen = popen

    @property
    def pid(self):
        return self._popen.pid

    @property
    def stderr(self):
        stream = self._popen.stderr
        if stream is None:
            return iter(())
        return iter(partial(stream.read1, STDERR_CHUNK_SIZE), b'')

    def wait(self):
        returncode = self._popen.wait()
        if self._popen.stderr is not None:
            self._popen.stderr.close()
        return returncode

    def kill(self):
        # No-op if the process already exited
        if self._popen.poll() is None:
            self._popen.kill()


def spawn_process(args):
    """
    Start a non-interactive process with stderr piped.

    Raises:
        OSError: If the executable is missing or cannot be run
    """
    popen = subprocess.Popen(
        args,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE
    )
    return SubprocessHandle(popen)


def build_ffmpeg_command(source_url, output_path, binary=None):
    """
    Build the ffmpeg command that remuxes an HLS stream into MP4.

    Args:
        source_url: HLS playlist URL
        output_path: Path for output file
        binary: ffmpeg executable (default from settings)

    Returns:
        list: Command arguments, suitable for Popen without a shell
    """
    return [
        binary or get_ffmpeg_binary(),
        '-i', source_url,
    ] + FFMPEG_REMUX_ARGS + [
        str(output_path)
    ]


def run_transcoder(source_url, output_path, spawn=None, on_spawn=None, binary=None,
                   logger=None):
    """
    Run ffmpeg once and wait for it to exit.

    Args:
        source_url: HLS playlist URL
        output_path: Path for output file
        spawn: Optional callable(args) returning a process handle
               (default: spawn_process)
        on_spawn: Optional callable(handle), called once the process is running
        binary: ffmpeg executable (default from settings)
        logger: Optional callable(str) for logging

    Returns:
        ProcessResult
    """
    def log(message):
        if logger:
            logger(message)

    spawn = spawn or spawn_process
    cmd = build_ffmpeg_command(source_url, output_path, binary=binary)

    log(f"Running: {' '.join(cmd)}")

    try:
        handle = spawn(cmd)
    except OSError as e:
        log(f"ffmpeg could not be started: {e}")
        return ProcessResult.failure(
            TranscodeFailureKind.PROCESS_SPAWN_ERROR,
            f"ffmpeg could not be started: {e}"
        )

    if on_spawn:
        on_spawn(handle)

    # Accumulate stderr as it arrives; this is the diagnostic on failure
    stderr_chunks = []
    for chunk in handle.stderr:
        stderr_chunks.append(chunk)

    returncode = handle.wait()
    stderr = b''.join(stderr_chunks).decode('utf-8', errors='replace')

    if returncode != 0:
        log(f"ffmpeg failed with code {returncode}")
        return ProcessResult.failure(
            TranscodeFailureKind.NON_ZERO_EXIT,
            f"ffmpeg failed with code {returncode}\n{stderr}".rstrip(),
            exit_code=returncode
        )

    log(f"ffmpeg finished: {output_path}")
    return ProcessResult.success(output_path)
