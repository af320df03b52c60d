# file: furet/module4_pipeline/records.py

"""
Line record source.

Splits a binary stream into newline-delimited records without reading
more than one line at a time.
"""

from typing import BinaryIO, Iterator

from .pipeline_errors import InputError


DEFAULT_MAX_RECORD_SIZE = 64 * 1024


def iter_records(
    stream: BinaryIO,
    max_record_size: int = DEFAULT_MAX_RECORD_SIZE
) -> Iterator[bytes]:
    """
    Yield records from a binary stream, one per line.

    The trailing '\\n' and a '\\r' before it are removed. A final line
    without a newline is still a record; an empty stream yields nothing.

    Args:
        stream: Readable binary stream
        max_record_size: Longest accepted record in bytes, newline excluded

    Yields:
        Record bytes

    Raises:
        InputError: On read failure or a record longer than max_record_size
    """
    if max_record_size <= 0:
        raise ValueError(f"max_record_size must be positive, got {max_record_size}")

    # Room for the record plus "\r\n"
    limit = max_record_size + 2

    while True:
        try:
            line = stream.readline(limit)
        except OSError as e:
            raise InputError(f"error reading from input: {e}") from e

        if not line:
            return

        if line.endswith(b"\n"):
            line = line[:-1]
        elif len(line) == limit:
            raise InputError(f"line too long (limit {max_record_size} bytes)")

        if line.endswith(b"\r"):
            line = line[:-1]

        if len(line) > max_record_size:
            raise InputError(f"line too long (limit {max_record_size} bytes)")

        yield line
