# file: furet/module4_pipeline/pipeline.py

"""
Line Cipher Pipeline

Applies the token codec to each record of a line stream, in order, one
record at a time.

Pipeline:
    Record source
    → encrypt (one key) or verify/decrypt (candidate keys)
    → sink (result + newline)

States:
    IDLE → PROCESSING → DONE | FAILED
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from ..errors import FuretError
from ..module2_keys import KeyMaterial
from ..module3_token import DEFAULT_MAX_CLOCK_SKEW, TokenCodec
from .pipeline_errors import RecordError
from .sinks import RecordSink

logger = logging.getLogger(__name__)


class PipelineMode(Enum):
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


class PipelineState(Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineConfig:
    """
    Fixed settings for one pipeline run.

    Attributes:
        mode: Encrypt or decrypt, for the whole run
        keys: Encrypt uses exactly one key; decrypt tries each in order
        ttl: Maximum token age in seconds, None or 0 disables the check
        max_clock_skew: Seconds a token timestamp may lie in the future
    """

    mode: PipelineMode
    keys: Tuple[KeyMaterial, ...]
    ttl: Optional[int] = None
    max_clock_skew: int = DEFAULT_MAX_CLOCK_SKEW

    def __post_init__(self):
        object.__setattr__(self, "keys", tuple(self.keys))
        if not self.keys:
            raise ValueError("At least one key is required")
        if self.mode is PipelineMode.ENCRYPT and len(self.keys) != 1:
            raise ValueError(f"Encryption uses exactly one key, got {len(self.keys)}")

    def to_codec_config(self) -> dict:
        return {
            'token': {
                'ttl_seconds': self.ttl or 0,
                'max_clock_skew_seconds': self.max_clock_skew,
            }
        }


@dataclass(frozen=True)
class PipelineResult:
    mode: PipelineMode
    records_processed: int


class LineCipherPipeline:
    """
    Sequential, fail-fast record processor.

    A pipeline instance runs once. On the first failing record it stops
    reading input and raises RecordError; output already written for
    earlier records is left in the sink.
    """

    def __init__(self, config: PipelineConfig, codec: Optional[TokenCodec] = None):
        self.config = config
        self.codec = codec or TokenCodec(config.to_codec_config())
        self.state = PipelineState.IDLE
        self.records_processed = 0

    def _process(self, record: bytes) -> bytes:
        if self.config.mode is PipelineMode.ENCRYPT:
            return self.codec.encrypt(record, self.config.keys[0]).encode("ascii")
        return self.codec.decrypt(record, self.config.keys)

    def _fail(self, position: int, error: Exception) -> RecordError:
        self.state = PipelineState.FAILED
        logger.debug("Pipeline failed at record %d (%s)", position, type(error).__name__)
        return RecordError(position, error)

    def run(self, records: Iterable[bytes], sink: RecordSink) -> PipelineResult:
        """
        Process every record from `records` into `sink`.

        Args:
            records: Lazily produced records (newline already stripped)
            sink: Output sink; not closed by the pipeline

        Returns:
            PipelineResult with the number of records written

        Raises:
            RecordError: On the first record that fails to read, encrypt,
                         verify, decrypt or write; chained from the cause
            RuntimeError: If the pipeline has already run
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError(f"Pipeline already ran (state: {self.state.value})")

        self.state = PipelineState.PROCESSING
        logger.debug("Pipeline started in %s mode with %d key(s)",
                     self.config.mode.value, len(self.config.keys))

        iterator = iter(records)
        position = 0

        while True:
            try:
                record = next(iterator)
            except StopIteration:
                break
            except FuretError as e:
                raise self._fail(position, e) from e
            except BaseException:
                self.state = PipelineState.FAILED
                raise

            try:
                sink.write_record(self._process(record))
            except FuretError as e:
                raise self._fail(position, e) from e
            except BaseException:
                self.state = PipelineState.FAILED
                raise

            position += 1
            self.records_processed = position

        self.state = PipelineState.DONE
        logger.debug("Pipeline done: %d record(s)", self.records_processed)

        return PipelineResult(mode=self.config.mode, records_processed=self.records_processed)
