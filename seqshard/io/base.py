"""
Shared pieces of the streaming FASTA/FASTQ decoders.

A decoder walks a buffered byte stream one record at a time. Lines are read
in fragments of at most ``buffer_size`` bytes, so a line longer than the
read-ahead buffer is simply read in several pieces; line length is never
bounded by the buffer.
"""

import logging
import os
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Union

from seqshard.io.compression import TEXT_ENCODING, TEXT_ERRORS
from seqshard.io.errors import (
    DecompressionError,
    NotStartedError,
    SequenceFileError,
    StreamReadError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 65536
UNKNOWN_PROGRESS = -1.0
FASTA_LINE_WIDTH = 80


@dataclass(frozen=True)
class SequenceRecord:
    """
    A single decoded sequence record.

    Attributes:
        identifier: Header line without its marker character and terminator
        sequence: All sequence lines joined, with no line terminators
    """
    identifier: str
    sequence: str

    def __len__(self) -> int:
        return len(self.sequence)

    def to_fasta(self, line_width: int = FASTA_LINE_WIDTH) -> str:
        """
        Format as FASTA text with the sequence wrapped at ``line_width``.

        The final line may be partial; an empty sequence still gets its own
        (empty) line. No trailing newline is included.
        """
        lines = [f">{self.identifier}"]
        lines.extend(
            self.sequence[i:i + line_width]
            for i in range(0, len(self.sequence), line_width)
        )
        if not self.sequence:
            lines.append("")
        return "\n".join(lines)


class Format(Enum):
    """Supported sequence file formats, keyed by their record marker."""
    FASTA = ">"
    FASTQ = "@"

    @property
    def marker(self) -> bytes:
        return self.value.encode("ascii")

    @classmethod
    def from_marker(cls, first: bytes) -> "Format":
        """Map the first byte of a file to its format."""
        for fmt in cls:
            if first[:1] == fmt.marker:
                return fmt
        if not first:
            raise UnsupportedFormatError("empty input: not a recognized sequence format")
        raise UnsupportedFormatError(
            f"first byte {first[:1]!r} is not a recognized sequence format marker"
        )


class DecoderState(Enum):
    NOT_STARTED = "not_started"
    READING = "reading"
    READING_HEADER = "reading_header"
    READING_SEQUENCE = "reading_sequence"
    SKIPPING_QUALITY = "skipping_quality"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


def _strip_terminator(line: bytes) -> bytes:
    if line.endswith(b"\n"):
        line = line[:-1]
    if line.endswith(b"\r"):
        line = line[:-1]
    return line


def _decode(data: bytes) -> str:
    return data.decode(TEXT_ENCODING, TEXT_ERRORS)


def _file_size(raw: BinaryIO) -> Optional[int]:
    try:
        return os.fstat(raw.fileno()).st_size
    except (OSError, AttributeError, ValueError):
        return None


class SequenceDecoder(ABC):
    """
    Record-by-record reader over one open sequence file.

    Use ``advance()`` to move to the next record, then ``identifier`` and
    either ``read_sequence()`` or ``iter_sequence_bytes()`` to read it.
    Stream errors do not escape ``advance()``: they are stored on ``error``
    and ``advance()`` returns False. Iterating the decoder directly yields
    ``SequenceRecord`` objects and re-raises a stored error at the end.

    Example:
        >>> with open_sequence_file("reads.fastq.gz") as decoder:
        ...     while decoder.advance():
        ...         print(decoder.identifier, len(decoder.read_sequence()))
    """

    format: Format
    reading_state = DecoderState.READING

    def __init__(
        self,
        raw: BinaryIO,
        stream: BinaryIO,
        filepath: Optional[Union[str, Path]] = None,
        compression: Optional[str] = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ):
        if buffer_size < 1:
            raise ValueError("buffer_size must be positive")
        self.filepath = filepath
        self.compression = compression
        self.state = DecoderState.NOT_STARTED
        self.error: Optional[SequenceFileError] = None

        self._raw = raw
        self._stream = stream
        self._buffer_size = buffer_size
        self._size = _file_size(raw)
        self._closed = False

        self._identifier: Optional[str] = None
        self._sequence: Optional[str] = None
        self._sequence_pending = False
        self._sequence_length = 0
        self._record_index = -1

        # Line bookkeeping for fragments shorter than a full line
        self._at_line_start = True
        self._held_cr = False

    @property
    def marker(self) -> bytes:
        return self.format.marker

    @property
    def identifier(self) -> str:
        """Identifier of the current record."""
        if self._identifier is None:
            raise NotStartedError("advance() has not returned a record yet")
        return self._identifier

    @property
    def records_read(self) -> int:
        return self._record_index + 1

    def advance(self) -> bool:
        """
        Move to the next record.

        Any unread sequence data of the current record is skipped first.

        Returns:
            True if a record is available, False at end of stream or on error
        """
        if self.state in (DecoderState.EXHAUSTED, DecoderState.FAILED):
            return False

        try:
            if self.state is DecoderState.NOT_STARTED:
                header = self._read_line()
            else:
                for _ in self._sequence_chunks():
                    pass
                header = self._next_header()
        except SequenceFileError as exc:
            self._fail(exc)
            return False

        if header is None or not header.startswith(self.marker):
            self._finish()
            return False

        self._start_record(header)
        return True

    def read_sequence(self) -> str:
        """
        Return the sequence of the current record.

        The first call reads the sequence from the stream; later calls for the
        same record return the cached value. If ``iter_sequence_bytes()`` has
        already consumed part of the record, only the remainder is returned.
        """
        if self._identifier is None:
            raise NotStartedError("advance() has not returned a record yet")
        if self._sequence is None:
            parts = []
            try:
                for chunk in self._sequence_chunks():
                    parts.append(chunk)
            except SequenceFileError as exc:
                self._fail(exc)
            self._sequence = _decode(b"".join(parts))
        return self._sequence

    def iter_sequence_bytes(self) -> Iterator[int]:
        """
        Lazily iterate over the current record's sequence, one byte value at a
        time, without assembling the sequence string.

        The iterator stops at the end of the record, and yields nothing more
        once ``advance()`` has moved on. Read errors end the iteration and
        are stored on ``error``.
        """
        if self._identifier is None:
            raise NotStartedError("advance() has not returned a record yet")
        return self._iter_bytes(self._record_index)

    def _iter_bytes(self, record_index: int) -> Iterator[int]:
        chunks = self._sequence_chunks()
        while self._record_index == record_index:
            try:
                chunk = next(chunks)
            except StopIteration:
                return
            except SequenceFileError as exc:
                self._fail(exc)
                return
            for value in chunk:
                if self._record_index != record_index:
                    return
                yield value

    def progress(self) -> float:
        """
        Percentage of the input file consumed so far (0.0-100.0).

        For compressed files this is the offset into the compressed file, so
        it is only an approximation and may lag behind due to buffering.
        Returns -1.0 when the file size cannot be determined.
        """
        if self._closed:
            return 100.0 if self.state is DecoderState.EXHAUSTED else UNKNOWN_PROGRESS
        if not self._size:
            return UNKNOWN_PROGRESS
        try:
            position = self._raw.tell()
        except (OSError, ValueError):
            return UNKNOWN_PROGRESS
        return min(100.0, position * 100.0 / self._size)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._stream is not self._raw:
                self._stream.close()
        finally:
            self._raw.close()

    def __enter__(self) -> "SequenceDecoder":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __iter__(self) -> Iterator[SequenceRecord]:
        while self.advance():
            sequence = self.read_sequence()
            if self.error is not None:
                break
            yield SequenceRecord(self.identifier, sequence)
        if self.error is not None:
            raise self.error

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(filepath={str(self.filepath)!r}, "
            f"state={self.state.value}, records_read={self.records_read})"
        )

    @abstractmethod
    def _ends_sequence(self, fragment: bytes) -> bool:
        """Whether a line starting with ``fragment`` terminates the sequence block."""

    @abstractmethod
    def _end_sequence(self, fragment: Optional[bytes]) -> None:
        """Handle the line that terminated the sequence block (None at end of stream)."""

    @abstractmethod
    def _next_header(self) -> Optional[bytes]:
        """Return the next record's marker line once the sequence is consumed."""

    def _start_record(self, header: bytes) -> None:
        self._identifier = _decode(header[len(self.marker):])
        self._sequence = None
        self._sequence_pending = True
        self._sequence_length = 0
        self._record_index += 1
        self.state = self.reading_state

    def _finish(self) -> None:
        self.state = DecoderState.EXHAUSTED
        self._sequence_pending = False
        self.close()

    def _fail(self, exc: SequenceFileError) -> None:
        logger.debug(f"Read error in {self.filepath}: {exc}")
        self.error = exc
        self.state = DecoderState.FAILED
        self._sequence_pending = False
        self.close()

    def _read_fragment(self) -> bytes:
        """Read the next piece of the current line; b'' at end of stream."""
        try:
            return self._stream.readline(self._buffer_size)
        except (OSError, EOFError, zlib.error) as exc:
            if self.compression is not None:
                raise DecompressionError(
                    f"{self.filepath}: malformed {self.compression} stream: {exc}"
                ) from exc
            raise StreamReadError(f"{self.filepath}: {exc}") from exc

    def _complete_line(self, fragment: bytes) -> bytes:
        parts = [fragment]
        while not fragment.endswith(b"\n"):
            fragment = self._read_fragment()
            if not fragment:
                break
            parts.append(fragment)
        self._at_line_start = True
        return _strip_terminator(b"".join(parts))

    def _read_line(self) -> Optional[bytes]:
        """Read one whole line without its terminator, or None at end of stream."""
        fragment = self._read_fragment()
        if not fragment:
            return None
        return self._complete_line(fragment)

    def _sequence_chunks(self) -> Iterator[bytes]:
        """Yield the remaining sequence data of the current record, terminators removed."""
        while self._sequence_pending:
            fragment = self._read_fragment()
            if not fragment:
                self._sequence_pending = False
                self._end_sequence(None)
                return

            if self._at_line_start and self._ends_sequence(fragment):
                self._sequence_pending = False
                self._end_sequence(fragment)
                return

            if self._held_cr:
                self._held_cr = False
                if fragment != b"\n":
                    fragment = b"\r" + fragment

            if fragment.endswith(b"\n"):
                chunk = _strip_terminator(fragment)
                self._at_line_start = True
            else:
                chunk = fragment
                self._at_line_start = False
                if chunk.endswith(b"\r"):
                    # may be the first half of a split CRLF
                    chunk = chunk[:-1]
                    self._held_cr = True

            if chunk:
                self._sequence_length += len(chunk)
                yield chunk
