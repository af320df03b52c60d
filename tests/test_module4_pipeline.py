# file: tests/test_module4_pipeline.py

"""
Unit tests for Module 4: Line Cipher Pipeline.

Test coverage:
    - Record splitting (newlines, CR, final line, size limit, read errors)
    - Sinks (stream, lazy file, deferred)
    - Encrypt/decrypt runs and state transitions
    - Fail-fast behavior and failing record position
"""

import io

import pytest

from furet.module2_keys import KeyMaterial
from furet.module3_token import (
    AuthenticationError,
    EncryptionError,
    MalformedTokenError,
    TokenCodec,
    encrypt,
)
from furet.module4_pipeline import (
    LineCipherPipeline,
    PipelineConfig,
    PipelineMode,
    PipelineState,
    iter_records,
    StreamSink,
    LazyFileSink,
    DeferredSink,
    InputError,
    OutputError,
    RecordError,
)


class BrokenStream:
    """Stream whose reads and writes always fail."""

    def readable(self):
        return True

    def writable(self):
        return True

    def readline(self, size=-1):
        raise OSError("device not ready")

    def write(self, b):
        raise OSError("disk full")

    def flush(self):
        raise OSError("disk full")


class ListSink(StreamSink):
    """Sink collecting records in memory."""

    def __init__(self):
        super().__init__(io.BytesIO())

    @property
    def lines(self):
        return self.stream.getvalue().split(b"\n")[:-1]


def tracked(records, consumed):
    """Yield records while noting which ones were pulled."""
    for record in records:
        consumed.append(record)
        yield record


@pytest.fixture
def key():
    return KeyMaterial.generate()


class TestIterRecords:
    """Test line splitting."""

    def test_basic_lines(self):
        """Test newline is stripped from each record."""
        stream = io.BytesIO(b"one\ntwo\nthree\n")
        assert list(iter_records(stream)) == [b"one", b"two", b"three"]

    def test_final_line_without_newline(self):
        """Test the last line is a record even without a newline."""
        stream = io.BytesIO(b"one\ntwo")
        assert list(iter_records(stream)) == [b"one", b"two"]

    def test_empty_lines_kept(self):
        """Test blank lines are empty records."""
        stream = io.BytesIO(b"\n\nx\n")
        assert list(iter_records(stream)) == [b"", b"", b"x"]

    def test_empty_stream(self):
        """Test no records from an empty stream."""
        assert list(iter_records(io.BytesIO(b""))) == []

    def test_crlf(self):
        """Test a carriage return before the newline is dropped."""
        stream = io.BytesIO(b"dos\r\nunix\n")
        assert list(iter_records(stream)) == [b"dos", b"unix"]

    def test_record_at_limit(self):
        """Test a record of exactly max_record_size is accepted."""
        stream = io.BytesIO(b"abcd\r\nefgh")
        assert list(iter_records(stream, max_record_size=4)) == [b"abcd", b"efgh"]

    def test_record_over_limit(self):
        """Test a record longer than max_record_size fails."""
        stream = io.BytesIO(b"ok\n" + b"x" * 10 + b"\n")
        records = iter_records(stream, max_record_size=4)
        assert next(records) == b"ok"
        with pytest.raises(InputError, match="too long"):
            next(records)

    def test_final_record_over_limit(self):
        """Test an oversize final line without newline fails."""
        with pytest.raises(InputError, match="too long"):
            list(iter_records(io.BytesIO(b"x" * 5), max_record_size=4))

    def test_lazy(self):
        """Test records are read one line at a time."""
        stream = io.BytesIO(b"a\nb\nc\n")
        records = iter_records(stream)
        assert next(records) == b"a"
        assert stream.tell() == 2

    def test_read_error(self):
        """Test OSError on read becomes InputError."""
        with pytest.raises(InputError, match="device not ready"):
            list(iter_records(BrokenStream()))

    def test_invalid_limit(self):
        """Test a non-positive limit is rejected."""
        with pytest.raises(ValueError):
            list(iter_records(io.BytesIO(b""), max_record_size=0))


class TestSinks:
    """Test output sinks."""

    def test_stream_sink(self):
        """Test records are written with a trailing newline."""
        stream = io.BytesIO()
        sink = StreamSink(stream)
        sink.write_record(b"a")
        sink.write_record(b"")
        sink.close()
        assert stream.getvalue() == b"a\n\n"
        assert not stream.closed

    def test_stream_sink_write_error(self):
        """Test OSError on write becomes OutputError."""
        with pytest.raises(OutputError, match="disk full"):
            StreamSink(BrokenStream()).write_record(b"a")

    def test_lazy_file_not_created_without_write(self, tmp_path):
        """Test no file exists until the first record."""
        path = tmp_path / "out.txt"
        sink = LazyFileSink(str(path))
        sink.close()
        assert not path.exists()

    def test_lazy_file_created_on_write(self, tmp_path):
        """Test the file holds every record written."""
        path = tmp_path / "out.txt"
        with LazyFileSink(path) as sink:
            assert not path.exists()
            sink.write_record(b"first")
            assert sink.opened
            sink.write_record(b"second")
        assert path.read_bytes() == b"first\nsecond\n"

    def test_lazy_file_open_error(self, tmp_path):
        """Test an uncreatable path raises OutputError on first write."""
        sink = LazyFileSink(str(tmp_path / "missing" / "out.txt"))
        with pytest.raises(OutputError, match="failed to create"):
            sink.write_record(b"x")

    def test_deferred_sink(self):
        """Test nothing reaches the stream before close."""
        stream = io.BytesIO()
        sink = DeferredSink(stream)
        sink.write_record(b"one")
        sink.write_record(b"two")
        assert stream.getvalue() == b""
        sink.close()
        assert stream.getvalue() == b"one\ntwo\n"


class TestPipelineEncrypt:
    """Test encrypt runs."""

    def test_encrypt_decrypt_roundtrip(self, key):
        """Test encrypting then decrypting restores every record."""
        records = [b"alpha", b"", b"gamma delta"]

        encrypted = ListSink()
        LineCipherPipeline(PipelineConfig(PipelineMode.ENCRYPT, (key,))).run(records, encrypted)
        assert len(encrypted.lines) == 3

        decrypted = ListSink()
        result = LineCipherPipeline(PipelineConfig(PipelineMode.DECRYPT, (key,))).run(
            encrypted.lines, decrypted
        )
        assert decrypted.lines == records
        assert result.records_processed == 3
        assert result.mode is PipelineMode.DECRYPT

    def test_tokens_are_single_lines(self, key):
        """Test each record becomes exactly one base64 line."""
        sink = ListSink()
        LineCipherPipeline(PipelineConfig(PipelineMode.ENCRYPT, [key])).run([b"x" * 1000], sink)
        assert len(sink.lines) == 1
        assert sink.lines[0].startswith(b"gAAAAA")

    def test_encrypt_requires_one_key(self, key):
        """Test an encrypt config with two keys is rejected."""
        with pytest.raises(ValueError, match="exactly one key"):
            PipelineConfig(PipelineMode.ENCRYPT, (key, KeyMaterial.generate()))

    def test_no_keys(self):
        """Test a config without keys is rejected."""
        with pytest.raises(ValueError):
            PipelineConfig(PipelineMode.DECRYPT, ())

    def test_encrypt_primitive_failure(self, key):
        """Test a failing random source stops the run at that record."""
        calls = []

        def flaky(n):
            calls.append(n)
            if len(calls) > 1:
                raise OSError("entropy pool exhausted")
            return b"\x00" * n

        pipeline = LineCipherPipeline(
            PipelineConfig(PipelineMode.ENCRYPT, (key,)),
            codec=TokenCodec(random_source=flaky),
        )
        sink = ListSink()
        with pytest.raises(RecordError) as exc_info:
            pipeline.run([b"a", b"b", b"c"], sink)

        assert exc_info.value.position == 1
        assert isinstance(exc_info.value.cause, EncryptionError)
        assert len(sink.lines) == 1


class TestPipelineDecrypt:
    """Test decrypt runs, rotation and fail-fast."""

    def test_fail_fast_position(self, key):
        """Test [r1, r2(invalid), r3] outputs r1, fails at 1, never reads r3."""
        r1 = encrypt(b"first", key).encode()
        r2 = b"not-a-token"
        r3 = encrypt(b"third", key).encode()
        consumed = []

        pipeline = LineCipherPipeline(PipelineConfig(PipelineMode.DECRYPT, (key,)))
        sink = ListSink()

        with pytest.raises(RecordError) as exc_info:
            pipeline.run(tracked([r1, r2, r3], consumed), sink)

        assert sink.lines == [b"first"]
        assert exc_info.value.position == 1
        assert isinstance(exc_info.value.cause, MalformedTokenError)
        assert exc_info.value.__cause__ is exc_info.value.cause
        assert consumed == [r1, r2]
        assert pipeline.state is PipelineState.FAILED
        assert pipeline.records_processed == 1

    def test_authentication_failure_position(self, key):
        """Test a token from another key fails at its own position."""
        other = KeyMaterial.generate()
        records = [encrypt(b"a", key).encode(), encrypt(b"b", key).encode(), encrypt(b"c", other).encode()]

        with pytest.raises(RecordError) as exc_info:
            LineCipherPipeline(PipelineConfig(PipelineMode.DECRYPT, (key,))).run(records, ListSink())

        assert exc_info.value.position == 2
        assert isinstance(exc_info.value.cause, AuthenticationError)

    def test_key_rotation(self):
        """Test records from either key decrypt with both candidates."""
        old, new = KeyMaterial.generate(), KeyMaterial.generate()
        records = [encrypt(b"old", old).encode(), encrypt(b"new", new).encode()]

        sink = ListSink()
        LineCipherPipeline(PipelineConfig(PipelineMode.DECRYPT, (new, old))).run(records, sink)
        assert sink.lines == [b"old", b"new"]

    def test_ttl_from_config(self, key):
        """Test the pipeline TTL reaches the codec."""
        stale = encrypt(b"stale", key, now=0).encode()
        pipeline = LineCipherPipeline(PipelineConfig(PipelineMode.DECRYPT, (key,), ttl=60))
        with pytest.raises(RecordError):
            pipeline.run([stale], ListSink())

    def test_input_error_position(self, key):
        """Test a read failure is reported at the record being read."""
        stream = io.BytesIO(encrypt(b"ok", key).encode() + b"\n" + b"x" * 200 + b"\n")
        pipeline = LineCipherPipeline(PipelineConfig(PipelineMode.DECRYPT, (key,)))
        sink = ListSink()

        with pytest.raises(RecordError) as exc_info:
            pipeline.run(iter_records(stream, max_record_size=100), sink)

        assert exc_info.value.position == 1
        assert isinstance(exc_info.value.cause, InputError)
        assert sink.lines == [b"ok"]

    def test_output_error(self, key):
        """Test a write failure stops the run."""
        pipeline = LineCipherPipeline(PipelineConfig(PipelineMode.ENCRYPT, (key,)))
        with pytest.raises(RecordError) as exc_info:
            pipeline.run([b"a"], StreamSink(BrokenStream()))
        assert isinstance(exc_info.value.cause, OutputError)


class TestPipelineState:
    """Test state transitions."""

    def test_idle_to_done(self, key):
        """Test a successful run ends in DONE."""
        pipeline = LineCipherPipeline(PipelineConfig(PipelineMode.ENCRYPT, (key,)))
        assert pipeline.state is PipelineState.IDLE
        pipeline.run([b"a"], ListSink())
        assert pipeline.state is PipelineState.DONE

    def test_empty_input(self, key):
        """Test no records still completes."""
        pipeline = LineCipherPipeline(PipelineConfig(PipelineMode.DECRYPT, (key,)))
        result = pipeline.run([], ListSink())
        assert result.records_processed == 0
        assert pipeline.state is PipelineState.DONE

    def test_unexpected_error_from_source(self, key):
        """Test a non-furet error while reading still ends in FAILED."""
        pipeline = LineCipherPipeline(PipelineConfig(PipelineMode.DECRYPT, (key,)))
        with pytest.raises(ValueError):
            pipeline.run(iter_records(io.BytesIO(b"x\n"), max_record_size=0), ListSink())
        assert pipeline.state is PipelineState.FAILED

    def test_unexpected_error_from_record(self, key):
        """Test a str record in encrypt mode propagates TypeError and ends in FAILED."""
        pipeline = LineCipherPipeline(PipelineConfig(PipelineMode.ENCRYPT, (key,)))
        with pytest.raises(TypeError):
            pipeline.run(["not bytes"], ListSink())
        assert pipeline.state is PipelineState.FAILED

    def test_interrupt_ends_in_failed(self, key):
        """Test KeyboardInterrupt from the source is re-raised and ends in FAILED."""
        def interrupted():
            yield b"a"
            raise KeyboardInterrupt

        pipeline = LineCipherPipeline(PipelineConfig(PipelineMode.ENCRYPT, (key,)))
        sink = ListSink()
        with pytest.raises(KeyboardInterrupt):
            pipeline.run(interrupted(), sink)
        assert pipeline.state is PipelineState.FAILED
        assert len(sink.lines) == 1

    def test_single_use(self, key):
        """Test a pipeline cannot run twice."""
        pipeline = LineCipherPipeline(PipelineConfig(PipelineMode.ENCRYPT, (key,)))
        pipeline.run([b"a"], ListSink())
        with pytest.raises(RuntimeError, match="already ran"):
            pipeline.run([b"b"], ListSink())
