"""IPS stream applier.

IPS Format:
- Header: "PATCH" (5 bytes)
- Records: [offset(3) + size(2) + data(size)] or [offset(3) + 0x0000 + RLE_size(2) + RLE_byte(1)]
- Footer: "EOF" (3 bytes)

All multi-byte fields are unsigned big-endian. The applier works on two
caller-owned binary streams: the patch is read forward exactly once and the
target is only ever seeked and written. Seeking past the end of the target
and writing there grows it; file and BytesIO streams zero-fill the gap.

A failure partway through leaves the target partially patched. There is no
rollback.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional

from ..exceptions import FormatError, PatchError, PreconditionError, TruncatedStreamError
from ..utils.result import Err, Ok, Result

logger = logging.getLogger(__name__)

IPS_HEADER = b"PATCH"
IPS_TRAILER = b"EOF"

OFFSET_SIZE = 3
LENGTH_SIZE = 2
RLE_COUNT_SIZE = 2
RECORD_HEADER_SIZE = OFFSET_SIZE + LENGTH_SIZE

MAX_OFFSET = 0xFFFFFF
MAX_LENGTH = 0xFFFF
DEFAULT_CHUNK_SIZE = 4096

# The record loop stops once only the trailer can be left. That test is only
# sound while a record header is longer than the trailer.
if RECORD_HEADER_SIZE <= len(IPS_TRAILER):
    raise RuntimeError("IPS record header must be longer than the trailer")


@dataclass(frozen=True)
class IpsRecord:
    """A decoded IPS record (literal payloads are not retained)."""

    offset: int
    length: int
    repeat_count: int = 0
    fill_value: Optional[int] = None

    @property
    def is_rle(self) -> bool:
        return self.length == 0

    @property
    def size(self) -> int:
        """Number of bytes the record writes to the target."""
        return self.repeat_count if self.is_rle else self.length

    @property
    def end(self) -> int:
        return self.offset + self.size


@dataclass
class PatchStats:
    """Summary of one patch application."""

    records: int = 0
    literal_records: int = 0
    rle_records: int = 0
    bytes_written: int = 0


def read_u16_be(data: bytes) -> int:
    """Decode a 2-byte unsigned big-endian integer."""
    if len(data) != 2:
        raise ValueError(f"expected 2 bytes, got {len(data)}")
    return int.from_bytes(data, "big")


def read_u24_be(data: bytes) -> int:
    """Decode a 3-byte unsigned big-endian integer (never sign-extended)."""
    if len(data) != 3:
        raise ValueError(f"expected 3 bytes, got {len(data)}")
    return int.from_bytes(data, "big", signed=False)


def _supports(stream: object, capability: str) -> bool:
    check = getattr(stream, capability, None)
    if check is None:
        return False
    try:
        return bool(check())
    except ValueError:
        # io objects raise ValueError once closed
        return False


class _PatchReader:
    """Forward-only reader over the patch stream.

    Answers "are more than N bytes left?" without rewinding. Seekable streams
    measure their end once; other streams keep a small look-ahead buffer.
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._pending = bytearray()
        self._end: Optional[int] = None
        self.consumed = 0

        if _supports(stream, "seekable"):
            position = stream.tell()
            stream.seek(0, io.SEEK_END)
            self._end = stream.tell()
            stream.seek(position, io.SEEK_SET)

    def _read_raw(self, size: int) -> bytes:
        return self._stream.read(size) or b""

    def has_more_than(self, count: int) -> bool:
        if self._end is not None:
            return self._end - self._stream.tell() > count

        while len(self._pending) <= count:
            chunk = self._read_raw(count + 1 - len(self._pending))
            if not chunk:
                break
            self._pending += chunk
        return len(self._pending) > count

    def readinto(self, view: memoryview) -> int:
        """Fill ``view`` as far as the stream allows, retrying short reads."""
        filled = 0
        if self._pending:
            filled = min(len(self._pending), len(view))
            view[:filled] = self._pending[:filled]
            del self._pending[:filled]

        while filled < len(view):
            chunk = self._read_raw(len(view) - filled)
            if not chunk:
                break
            view[filled:filled + len(chunk)] = chunk
            filled += len(chunk)

        self.consumed += filled
        return filled

    def read(self, size: int) -> bytes:
        buffer = bytearray(size)
        filled = self.readinto(memoryview(buffer))
        return bytes(buffer[:filled])

    def read_exact(self, size: int, what: str) -> bytes:
        data = self.read(size)
        if len(data) != size:
            raise TruncatedStreamError(
                f"patch ended while reading {what}",
                expected=size,
                received=len(data),
            )
        return data


def _write_all(destination: BinaryIO, data: memoryview) -> None:
    while data:
        written = destination.write(data)
        if not written:
            # None from a non-blocking raw stream, 0 from a stalled one
            raise OSError(f"destination accepted no data ({len(data)} bytes pending)")
        if written >= len(data):
            return
        data = data[written:]


def _check_source(source: BinaryIO) -> None:
    if not _supports(source, "readable"):
        raise PreconditionError("source must be readable", capability="read")


def _check_chunk_size(chunk_size: int) -> None:
    if not isinstance(chunk_size, int) or chunk_size <= 0:
        raise PreconditionError(
            f"chunk_size must be a positive integer, got {chunk_size!r}",
            capability="buffer",
        )


def _read_header(reader: _PatchReader) -> None:
    header = reader.read(len(IPS_HEADER))
    if header != IPS_HEADER:
        raise FormatError("bad header", position=0)


def _read_trailer(reader: _PatchReader) -> None:
    position = reader.consumed
    trailer = reader.read(len(IPS_TRAILER))
    if trailer != IPS_TRAILER:
        raise FormatError("missing trailer", position=position)


def _read_record_start(reader: _PatchReader) -> tuple[int, int]:
    offset = read_u24_be(reader.read_exact(OFFSET_SIZE, "record offset"))
    length = read_u16_be(reader.read_exact(LENGTH_SIZE, "record length"))
    return offset, length


def _read_rle_body(reader: _PatchReader) -> tuple[int, int]:
    repeat_count = read_u16_be(reader.read_exact(RLE_COUNT_SIZE, "RLE repeat count"))
    fill_value = reader.read_exact(1, "RLE fill byte")[0]
    return repeat_count, fill_value


def _copy_literal(
    reader: _PatchReader,
    destination: Optional[BinaryIO],
    length: int,
    buffer: bytearray,
) -> None:
    """Move ``length`` literal bytes to ``destination`` (or drop them if None)."""
    view = memoryview(buffer)
    remaining = length
    while remaining > 0:
        wanted = min(remaining, len(buffer))
        got = reader.readinto(view[:wanted])
        if got < wanted:
            raise TruncatedStreamError(
                "patch ended inside literal record data",
                expected=length,
                received=length - remaining + got,
            )
        if destination is not None:
            _write_all(destination, view[:got])
        remaining -= got


def _write_fill(destination: BinaryIO, repeat_count: int, fill_value: int, chunk_size: int) -> None:
    block = bytes([fill_value]) * min(repeat_count, chunk_size)
    remaining = repeat_count
    while remaining > 0:
        step = min(remaining, len(block))
        _write_all(destination, memoryview(block)[:step])
        remaining -= step


def apply_patch(
    source: BinaryIO,
    destination: BinaryIO,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> PatchStats:
    """Apply an IPS patch stream to a destination stream.

    Args:
        source: Readable binary stream positioned at the "PATCH" header
        destination: Writable, seekable binary stream to patch in place
        chunk_size: Size of the scratch buffer used for literal copies

    Returns:
        PatchStats for the applied records

    Raises:
        PreconditionError: A stream lacks read, write or seek support
        FormatError: Header or trailer magic does not match
        TruncatedStreamError: The patch ends inside a record
    """
    _check_source(source)
    if not _supports(destination, "writable"):
        raise PreconditionError("destination must be writable", capability="write")
    if not _supports(destination, "seekable"):
        raise PreconditionError("destination must be seekable", capability="seek")
    _check_chunk_size(chunk_size)

    reader = _PatchReader(source)
    _read_header(reader)

    stats = PatchStats()
    buffer: Optional[bytearray] = None

    while reader.has_more_than(len(IPS_TRAILER)):
        offset, length = _read_record_start(reader)
        destination.seek(offset, io.SEEK_SET)

        if length > 0:
            if buffer is None:
                buffer = bytearray(min(chunk_size, MAX_LENGTH))
            _copy_literal(reader, destination, length, buffer)
            stats.literal_records += 1
            stats.bytes_written += length
            logger.debug("IPS literal: offset=0x%06X size=%d", offset, length)
        else:
            repeat_count, fill_value = _read_rle_body(reader)
            _write_fill(destination, repeat_count, fill_value, chunk_size)
            stats.rle_records += 1
            stats.bytes_written += repeat_count
            logger.debug(
                "IPS fill: offset=0x%06X count=%d value=0x%02X",
                offset, repeat_count, fill_value,
            )
        stats.records += 1

    _read_trailer(reader)

    logger.info(
        "Applied IPS patch: %d records (%d literal, %d RLE), %d bytes written",
        stats.records, stats.literal_records, stats.rle_records, stats.bytes_written,
    )
    return stats


def try_apply_patch(
    source: BinaryIO,
    destination: BinaryIO,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Result[PatchStats]:
    """Like apply_patch, but returns Ok(stats) or Err(PatchError).

    Stream I/O failures are not patch errors and still propagate.
    """
    try:
        return Ok(apply_patch(source, destination, chunk_size=chunk_size))
    except PatchError as exc:
        return Err(exc)


def iter_records(source: BinaryIO, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[IpsRecord]:
    """Decode the records of an IPS patch without applying them.

    The header is validated before the first record is yielded and the
    trailer after the last one.
    """
    _check_source(source)
    _check_chunk_size(chunk_size)

    reader = _PatchReader(source)
    _read_header(reader)

    scratch = bytearray(min(chunk_size, MAX_LENGTH))

    while reader.has_more_than(len(IPS_TRAILER)):
        offset, length = _read_record_start(reader)
        if length > 0:
            _copy_literal(reader, None, length, scratch)
            yield IpsRecord(offset=offset, length=length)
        else:
            repeat_count, fill_value = _read_rle_body(reader)
            yield IpsRecord(offset=offset, length=0, repeat_count=repeat_count, fill_value=fill_value)

    _read_trailer(reader)
