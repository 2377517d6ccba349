"""
Fake process handles for exercising the service layer without ffmpeg.
"""
from pathlib import Path
import threading


class FakeProcessHandle:
    """Stands in for SubprocessHandle"""

    def __init__(self, returncode=0, stderr_chunks=(), hang=False):
        self.returncode = returncode
        self.stderr_chunks = list(stderr_chunks)
        self.hang = hang
        self.killed = threading.Event()
        self.wait_calls = 0

    @property
    def stderr(self):
        for chunk in self.stderr_chunks:
            yield chunk
        if self.hang:
            self.killed.wait()

    def wait(self):
        self.wait_calls += 1
        if self.hang:
            self.killed.wait()
        if self.killed.is_set():
            return -9
        return self.returncode

    def kill(self):
        self.killed.set()


class FakeSpawner:
    """
    Callable passed as `spawn`.

    Records every command, optionally writes `output` to the output path
    (the last argument), and returns `handle`.
    """

    def __init__(self, handle=None, output=None, error=None):
        self.handle = handle or FakeProcessHandle()
        self.output = output
        self.error = error
        self.calls = []

    def __call__(self, args):
        self.calls.append(list(args))
        if self.error:
            raise self.error
        if self.output is not None:
            Path(args[-1]).write_bytes(self.output)
        return self.handle

    @property
    def called(self):
        return bool(self.calls)
