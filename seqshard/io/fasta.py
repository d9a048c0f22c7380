"""
FASTA decoding and writing.

FASTA records start with a '>' header line followed by any number of
(possibly wrapped) sequence lines. The header of the next record is what
ends the current one, so the decoder keeps it buffered between records.
"""

from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

from seqshard.io.base import (
    FASTA_LINE_WIDTH,
    DecoderState,
    Format,
    SequenceDecoder,
    SequenceRecord,
)
from seqshard.io.compression import open_output


class FastaDecoder(SequenceDecoder):
    """Streaming decoder for FASTA files."""

    format = Format.FASTA
    reading_state = DecoderState.READING

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._header: Optional[bytes] = None

    def _ends_sequence(self, fragment: bytes) -> bool:
        return fragment.startswith(b">")

    def _end_sequence(self, fragment: Optional[bytes]) -> None:
        self._header = self._complete_line(fragment) if fragment else None

    def _next_header(self) -> Optional[bytes]:
        header, self._header = self._header, None
        return header


def write_fasta_record(
    handle: TextIO,
    record: SequenceRecord,
    line_width: int = FASTA_LINE_WIDTH,
) -> None:
    """Write one record to an open text handle, every line newline-terminated."""
    handle.write(record.to_fasta(line_width))
    handle.write("\n")


def write_fasta(
    records: Union[SequenceRecord, Iterable[SequenceRecord]],
    filepath: Union[str, Path],
    line_width: int = FASTA_LINE_WIDTH,
) -> int:
    """
    Write sequences to a FASTA file.

    Args:
        records: Single record or iterable of SequenceRecord objects
        filepath: Output file path; a '.gz' suffix gzip-compresses the output
        line_width: Number of characters per sequence line

    Returns:
        Number of records written

    Example:
        >>> write_fasta([SequenceRecord("seq1", "ACGT")], "output.fasta")
        1
    """
    if isinstance(records, SequenceRecord):
        records = [records]

    count = 0
    with open_output(filepath) as f:
        for record in records:
            write_fasta_record(f, record, line_width)
            count += 1
    return count
