"""Pausable byte stream and the flow-control surface exposed to consumers."""
from __future__ import annotations

import io
import logging
import threading
from pathlib import Path
from typing import Optional, TextIO

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 65_536


class PausableReader(io.RawIOBase):
    """Raw file reader whose next chunk read blocks while paused.

    Data already handed to the buffered/text layers keeps flowing, so a pause
    takes effect at the next chunk boundary.
    """

    def __init__(self, path: Path, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        super().__init__()
        self.path = path
        self.chunk_size = max(1, chunk_size)
        self.chunks_read = 0
        self._handle = path.open("rb", buffering=0)
        self._flowing = threading.Event()
        self._flowing.set()

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        self._flowing.wait()
        view = memoryview(buffer)[: self.chunk_size]
        read = self._handle.readinto(view)
        if read:
            self.chunks_read += 1
        return read or 0

    def pause(self) -> None:
        if self._flowing.is_set():
            log.debug("pausing stream %s after %d chunk(s)", self.path, self.chunks_read)
        self._flowing.clear()

    def resume(self) -> None:
        if not self._flowing.is_set():
            log.debug("resuming stream %s", self.path)
        self._flowing.set()

    def is_paused(self) -> bool:
        return not self._flowing.is_set()

    def close(self) -> None:
        handle = getattr(self, "_handle", None)
        if handle is not None and not self.closed:
            handle.close()
        super().close()


def open_text_stream(reader: PausableReader, *, encoding: str, errors: str) -> TextIO:
    """Layer buffering and decoding over a pausable reader for the csv module."""

    buffered = io.BufferedReader(reader, buffer_size=reader.chunk_size)
    return io.TextIOWrapper(buffered, encoding=encoding, errors=errors, newline="")


class FlowController:
    """pause/resume/is_paused over whichever stream is currently attached."""

    def __init__(self) -> None:
        self._stream: Optional[PausableReader] = None

    @property
    def stream(self) -> Optional[PausableReader]:
        return self._stream

    def attach(self, stream: PausableReader) -> None:
        self._stream = stream

    def detach(self) -> None:
        self._stream = None

    def pause(self) -> None:
        if self._stream is not None:
            self._stream.pause()

    def resume(self) -> None:
        if self._stream is not None:
            self._stream.resume()

    def is_paused(self) -> bool:
        if self._stream is None:
            return False
        return self._stream.is_paused()
