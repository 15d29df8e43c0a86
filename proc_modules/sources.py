"""
Line sources for the /proc/modules parser.

The live pseudo-file is read as plain text. Copies captured into support
bundles are often compressed, so ``.zst`` and ``.gz`` snapshots are
decompressed on the fly.
"""

import contextlib
import gzip
import io
import logging
import os
from typing import IO, Iterator, Union

import zstandard as zstd

from .errors import SourceOpenError, SourceReadError

logger = logging.getLogger(__name__)

ENCODING = 'utf-8'

# Lines end at \n only; a stray \r stays inside the line it belongs to
NEWLINE = '\n'

# Errors that can surface while pulling lines out of an open source
_READ_ERRORS = (OSError, EOFError, UnicodeDecodeError, zstd.ZstdError)


def _open_text(path: str) -> IO[str]:
    if path.endswith('.zst'):
        compressed_file = open(path, 'rb')
        try:
            dctx = zstd.ZstdDecompressor()
            reader = dctx.stream_reader(compressed_file, closefd=True)
        except zstd.ZstdError:
            compressed_file.close()
            raise
        return io.TextIOWrapper(reader, encoding=ENCODING, newline=NEWLINE)
    if path.endswith('.gz'):
        return gzip.open(path, 'rt', encoding=ENCODING, newline=NEWLINE)
    return open(path, 'r', encoding=ENCODING, newline=NEWLINE)


def _read_lines(handle: IO[str], path: str) -> Iterator[str]:
    try:
        for line in handle:
            yield line
    except _READ_ERRORS as e:
        raise SourceReadError(f"error reading: {e}", source=path) from e


@contextlib.contextmanager
def open_source(path: Union[str, os.PathLike]) -> Iterator[Iterator[str]]:
    """
    Open a module list and yield an iterator over its lines.

    The handle is closed when the block exits, on errors too.

    Args:
        path: Path to /proc/modules or a (possibly compressed) copy of it

    Raises:
        SourceOpenError: If the file cannot be opened
        SourceReadError: If reading or decompressing fails mid-stream
    """
    path = os.fspath(path)
    try:
        handle = _open_text(path)
    except (OSError, zstd.ZstdError) as e:
        raise SourceOpenError(f"error opening: {e}", source=path) from e

    logger.debug("opened %s", path)
    try:
        yield _read_lines(handle, path)
    finally:
        handle.close()
