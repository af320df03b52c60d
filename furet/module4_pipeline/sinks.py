# file: furet/module4_pipeline/sinks.py

"""
Output sinks for the line pipeline.

Every sink accepts one record at a time and appends a newline to it.
"""

import io
import os
from typing import BinaryIO, Optional

from .pipeline_errors import OutputError


class RecordSink:
    """Base sink: write_record() per record, close() once at the end."""

    def write_record(self, record: bytes) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


class StreamSink(RecordSink):
    """
    Sink over a pre-opened binary stream (e.g. stdout).

    The stream is flushed on close but never closed.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def write_record(self, record: bytes) -> None:
        try:
            self.stream.write(record + b"\n")
        except OSError as e:
            raise OutputError(f"error writing to output: {e}") from e

    def close(self) -> None:
        try:
            self.stream.flush()
        except OSError as e:
            raise OutputError(f"error writing to output: {e}") from e


class LazyFileSink(RecordSink):
    """
    Sink that creates its file on the first write.

    A run that fails before producing any output leaves no empty file
    behind.
    """

    def __init__(self, path: str):
        self.path = os.fspath(path)
        self._file: Optional[BinaryIO] = None

    @property
    def opened(self) -> bool:
        return self._file is not None

    def write_record(self, record: bytes) -> None:
        if self._file is None:
            try:
                self._file = open(self.path, "wb")
            except OSError as e:
                raise OutputError(f"failed to create output file {self.path!r}: {e}") from e
        try:
            self._file.write(record + b"\n")
        except OSError as e:
            raise OutputError(f"error writing to output file {self.path!r}: {e}") from e

    def close(self) -> None:
        if self._file is None:
            return
        f, self._file = self._file, None
        try:
            f.close()
        except OSError as e:
            raise OutputError(f"failed to close output file {self.path!r}: {e}") from e


class DeferredSink(RecordSink):
    """
    Sink that holds all output until close, then copies it to a stream.

    Used when input and output are both the terminal, so results do not
    interleave with typed input.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self._buffer = io.BytesIO()

    def write_record(self, record: bytes) -> None:
        self._buffer.write(record + b"\n")

    def close(self) -> None:
        data = self._buffer.getvalue()
        self._buffer = io.BytesIO()
        if not data:
            return
        try:
            self.stream.write(data)
            self.stream.flush()
        except OSError as e:
            raise OutputError(f"error writing to output: {e}") from e
