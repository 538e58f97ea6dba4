import logging
from pathlib import Path
from typing import Iterator, List, Union

from tqdm import tqdm

from gfakit.core.errors import GFAIOError, MissingFieldsError, Utf8Error

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview, str]


def as_bytes(value: BytesLike) -> bytes:
    """Coerce a record or column to bytes; text is encoded as UTF-8."""
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def decode_utf8(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise Utf8Error() from e


def strip_line(line: BytesLike) -> bytes:
    """Drop the line terminator, if any."""
    return as_bytes(line).rstrip(b"\r\n")


def split_fields(line: BytesLike) -> List[bytes]:
    """Split a record on the tab column delimiter."""
    return strip_line(line).split(b"\t")


def read_lines(path: Union[str, Path], progress: bool = False, desc: str = "Reading records") -> Iterator[bytes]:
    """
    Yield the lines of a file as bytes, without line terminators.

    Args:
        path: File to read
        progress: Show a tqdm progress bar (counts the lines up front)
        desc: Progress bar label

    Raises:
        GFAIOError: If the file cannot be opened or read
    """
    path = Path(path)
    try:
        total = None
        if progress:
            with open(path, 'rb') as f:
                total = sum(1 for _ in f)
        with open(path, 'rb') as f:
            with tqdm(total=total, desc=desc, unit=" lines", disable=not progress) as pbar:
                for line in f:
                    pbar.update(1)
                    yield line.rstrip(b"\r\n")
    except OSError as e:
        logger.error(f"Failed to read {path}: {e}")
        raise GFAIOError(str(path), e) from e


def next_field(fields: Iterator[bytes]) -> bytes:
    """Take the next column of a record, failing if the record has ended."""
    try:
        return next(fields)
    except StopIteration:
        raise MissingFieldsError() from None
