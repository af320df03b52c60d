# file: furet/cli.py

"""
furet command line interface.

Encrypts or decrypts its input line by line with Fernet tokens, or
generates a new key.
"""

import argparse
import logging
import os
import sys
from typing import BinaryIO, List, Optional

from . import __version__
from .config import load_config
from .errors import FuretError
from .module2_keys import InvalidKeyError, KeyMaterial, KeyMaterialError
from .module3_token import EncryptionError, InvalidTokenError
from .module4_pipeline import (
    DeferredSink,
    InputError,
    LazyFileSink,
    LineCipherPipeline,
    OutputError,
    PipelineConfig,
    PipelineMode,
    RecordError,
    RecordSink,
    StreamSink,
    iter_records,
)

logger = logging.getLogger(__name__)


KEY_ENV_VAR = "FURET_KEY"
ISSUES_URL = "https://github.com/arl/furet"

USAGE = """
furet encrypts or decrypts data with Fernet, line by line.
Usage:
    furet [-o OUTPUT] --key KEY [INPUT]
    furet [--decrypt] --key KEY [--key OLDKEY ...] [-o OUTPUT] [INPUT]
    furet --generate [-o OUTPUT]
Options:
    -e, --encrypt     Encrypt the input to the output. Default if omitted.
    -d, --decrypt     Decrypt the input to the output.
    -k, --key         Key to use (hexadecimal, standard base64 or URL-safe base64).
                      Repeat to try several keys when decrypting.
                      Defaults to the FURET_KEY environment variable.
    -g, --generate    Generate a random key.
    -o, --output      Output file. Created on first write.
        --ttl         Reject tokens older than this many seconds (0: never).
        --config      YAML configuration file.
    -v, --verbose     Log debug information.

INPUT defaults to standard input, and OUTPUT defaults to standard output.

Example:
    $ KEY=$(furet -g)
    $ furet --key $KEY -o file.furet file
    $ furet --key $KEY -o file.furet < file
    $ furet --decrypt -k $KEY -o file file.furet
    $ furet --decrypt -k $KEY < file.furet > file"""


class CommandError(FuretError):
    """Raised for failures reported to the user, with optional hints."""

    def __init__(self, message: str, hints: Optional[List[str]] = None):
        super().__init__(message)
        self.hints = hints or []


def setup_logging(verbose: bool = False, fmt: str = "furet: %(message)s"):
    """Configure logging for the command line tool."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=fmt, stream=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="furet",
        usage=USAGE,
        add_help=True,
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-e", "--encrypt", action="store_true", help="encrypt the input")
    mode.add_argument("-d", "--decrypt", action="store_true", help="decrypt the input")
    mode.add_argument("-g", "--generate", action="store_true", help="generate a random Fernet key")

    parser.add_argument("-k", "--key", action="append", default=None, help="fernet key")
    parser.add_argument("-o", "--output", default="", metavar="FILE",
                        help="output to FILE (default stdout)")
    parser.add_argument("--ttl", type=int, default=None, help="maximum token age in seconds")
    parser.add_argument("--config", default=None, help="YAML configuration file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug information")
    parser.add_argument("--version", action="version", version=f"furet {__version__}")
    parser.add_argument("input", nargs="?", default="", help="input file (default stdin)")

    return parser


def _report(message: str, hints: Optional[List[str]] = None) -> int:
    logger.error("error: %s", message)
    for hint in hints or []:
        logger.error("hint: %s", hint)
    logger.error("report unexpected or unhelpful errors at %s", ISSUES_URL)
    return 1


def _decode_keys(texts: List[str]) -> List[KeyMaterial]:
    keys = []
    for text in texts:
        try:
            keys.append(KeyMaterial.decode(text))
        except InvalidKeyError as e:
            raise CommandError(
                f"can't decode Fernet key: {e}",
                hints=["generate a key with: furet --generate"]
            ) from e
    return keys


def _open_sink(output: str, reading_stdin: bool) -> RecordSink:
    if output and output != "-":
        return LazyFileSink(output)

    stdout = sys.stdout
    if reading_stdin and stdout.isatty() and sys.stdin.isatty():
        # Keep the results from getting in the way of typing the input
        return DeferredSink(stdout.buffer)
    return StreamSink(stdout.buffer)


def _describe_failure(error: RecordError) -> str:
    cause = error.cause
    if isinstance(cause, InvalidTokenError):
        return f"can't decrypt input at record {error.position}: {cause}"
    if isinstance(cause, EncryptionError):
        return f"can't encrypt input at record {error.position}: {cause}"
    if isinstance(cause, InputError):
        return f"{cause} (record {error.position})"
    return f"record {error.position}: {cause}"


def _close_after_failure(sink: RecordSink) -> None:
    # The error already propagating is the one to report
    try:
        sink.close()
    except OutputError as e:
        logger.debug("ignoring output close failure: %s", e)


def _produce(args: argparse.Namespace, config: dict, key_texts: List[str],
             input_file: Optional[BinaryIO], sink: RecordSink) -> None:
    if args.generate:
        try:
            key = KeyMaterial.generate()
        except KeyMaterialError as e:
            raise CommandError(f"error generating Fernet key: {e}") from e
        sink.write_record(key.encode().encode("ascii"))
        return

    keys = _decode_keys(key_texts)
    mode = PipelineMode.DECRYPT if args.decrypt else PipelineMode.ENCRYPT

    if mode is PipelineMode.ENCRYPT and len(keys) > 1:
        logger.warning("warning: %d keys given, encrypting with the first one", len(keys))
        keys = keys[:1]

    pipeline = LineCipherPipeline(PipelineConfig(
        mode=mode,
        keys=tuple(keys),
        ttl=config['token']['ttl_seconds'],
        max_clock_skew=config['token']['max_clock_skew_seconds'],
    ))

    source = input_file if input_file is not None else sys.stdin.buffer
    records = iter_records(source, config['pipeline']['max_record_size'])

    try:
        result = pipeline.run(records, sink)
    except RecordError as e:
        raise CommandError(_describe_failure(e)) from e

    logger.debug("%s: %d record(s)", result.mode.value, result.records_processed)


def run(args: argparse.Namespace) -> int:
    """
    Execute a parsed command line.

    Returns:
        Process exit status

    Raises:
        FuretError: On any failure; main() turns it into a report
    """
    config = load_config(args.config)
    if args.ttl is not None:
        if args.ttl < 0:
            raise CommandError(f"--ttl must not be negative, got {args.ttl}")
        config['token']['ttl_seconds'] = args.ttl

    key_texts = list(args.key or [])
    if not key_texts and os.environ.get(KEY_ENV_VAR):
        key_texts = [os.environ[KEY_ENV_VAR]]

    if not key_texts and not args.generate:
        raise CommandError(
            "--key flag is mandatory to encrypt or decrypt",
            hints=[f"pass --key KEY or set {KEY_ENV_VAR}"]
        )

    input_file = None
    if args.input and args.input != "-":
        try:
            input_file = open(args.input, "rb")
        except OSError as e:
            raise CommandError(f"failed to open input file {args.input!r}: {e}") from e

    try:
        sink = _open_sink(args.output, reading_stdin=input_file is None)
        try:
            _produce(args, config, key_texts, input_file, sink)
        except BaseException:
            _close_after_failure(sink)
            raise
        sink.close()
        return 0
    finally:
        if input_file is not None:
            input_file.close()


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        print(USAGE, file=sys.stderr)
        return 1

    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        return run(args)
    except CommandError as e:
        return _report(str(e), e.hints)
    except FuretError as e:
        return _report(str(e))


if __name__ == "__main__":
    sys.exit(main())
