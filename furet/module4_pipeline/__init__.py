# file: furet/module4_pipeline/__init__.py

"""
Module 4: Line Cipher Pipeline

Encrypts or decrypts a line-oriented stream record by record:
1. Reads one newline-delimited record at a time
2. Encrypts it into a token, or verifies and decrypts a token
3. Writes the result followed by a newline

This module does NOT:
- Parse command line flags (handled by furet.cli)
- Implement the token format (handled by Module 3)
"""

from .pipeline import (
    LineCipherPipeline,
    PipelineConfig,
    PipelineMode,
    PipelineResult,
    PipelineState,
)
from .records import iter_records, DEFAULT_MAX_RECORD_SIZE
from .sinks import RecordSink, StreamSink, LazyFileSink, DeferredSink
from .pipeline_errors import PipelineError, InputError, OutputError, RecordError

__all__ = [
    'LineCipherPipeline',
    'PipelineConfig',
    'PipelineMode',
    'PipelineResult',
    'PipelineState',
    'iter_records',
    'DEFAULT_MAX_RECORD_SIZE',
    'RecordSink',
    'StreamSink',
    'LazyFileSink',
    'DeferredSink',
    'PipelineError',
    'InputError',
    'OutputError',
    'RecordError',
]

__version__ = '1.0.0'
