# file: furet/module4_pipeline/pipeline_errors.py

"""
Pipeline error types.
"""

from ..errors import FuretError


class PipelineError(FuretError):
    """Base exception for line pipeline failures."""
    pass


class InputError(PipelineError):
    """Raised when the record source cannot be read."""
    pass


class OutputError(PipelineError):
    """Raised when the output sink cannot be written."""
    pass


class RecordError(PipelineError):
    """
    Raised when processing stops on a record.

    Attributes:
        position: 0-based index of the failing record
        cause: The underlying error (also chained as __cause__)
    """

    def __init__(self, position: int, cause: Exception):
        super().__init__(f"record {position}: {cause}")
        self.position = position
        self.cause = cause
