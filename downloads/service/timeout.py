"""
Deadline enforcement for ffmpeg runs.

Races the ffmpeg process against a fixed deadline. Whichever finishes
first resolves a single-result slot; the other result is discarded.
"""
from concurrent.futures import Future, InvalidStateError
from concurrent.futures import TimeoutError as FutureTimeoutError
import threading

from downloads.service.config import get_transcode_timeout
from downloads.service.constants import TIMEOUT_MESSAGE
from downloads.service.process import ProcessResult, TranscodeFailureKind, run_transcoder

# Seconds to wait for the runner thread to reap a killed process
REAP_TIMEOUT = 5


def _resolve(slot, result):
    """Set the slot's result unless another writer got there first"""
    try:
        slot.set_result(result)
    except InvalidStateError:
        return False
    return True


def run_with_timeout(source_url, output_path, timeout=None, spawn=None, binary=None,
                     logger=None):
    """
    Run ffmpeg with a deadline.

    If the deadline passes first, the process is killed outright (SIGKILL, no
    grace period) and a TIMEOUT failure is returned instead of whatever the
    process would have produced.

    Args:
        source_url: HLS playlist URL
        output_path: Path for output file
        timeout: Deadline in seconds (default from settings, 600)
        spawn: Optional callable(args) returning a process handle
        binary: ffmpeg executable (default from settings)
        logger: Optional callable(str) for logging

    Returns:
        ProcessResult
    """
    def log(message):
        if logger:
            logger(message)

    if timeout is None:
        timeout = get_transcode_timeout()

    slot = Future()
    lock = threading.Lock()
    handles = []

    def register(handle):
        with lock:
            handles.append(handle)
            expired = slot.done()
        # Spawned after the deadline already fired
        if expired:
            handle.kill()

    def work():
        try:
            result = run_transcoder(
                source_url,
                output_path,
                spawn=spawn,
                on_spawn=register,
                binary=binary,
                logger=logger
            )
        except Exception as e:
            try:
                slot.set_exception(e)
            except InvalidStateError:
                pass
            return
        _resolve(slot, result)

    worker = threading.Thread(target=work, name='ffmpeg-runner', daemon=True)
    worker.start()

    try:
        return slot.result(timeout=timeout)
    except FutureTimeoutError:
        pass

    with lock:
        timed_out = _resolve(
            slot,
            ProcessResult.failure(TranscodeFailureKind.TIMEOUT, TIMEOUT_MESSAGE)
        )
        live_handles = list(handles)

    if timed_out:
        try:
            for handle in live_handles:
                handle.kill()
            worker.join(REAP_TIMEOUT)
        finally:
            log(f"ffmpeg timed out after {timeout}s, process killed")

    return slot.result()
