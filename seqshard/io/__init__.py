"""
Streaming sequence file I/O.

This module provides record-by-record decoders for:
- FASTA: Sequence storage format
- FASTQ: Sequence + quality scores (NGS data)

Either format may be gzip- or bzip2-compressed; the format itself is
detected from the first byte of each file.
"""

from seqshard.io.base import (
    DEFAULT_BUFFER_SIZE,
    UNKNOWN_PROGRESS,
    DecoderState,
    Format,
    SequenceDecoder,
    SequenceRecord,
)
from seqshard.io.errors import (
    DecompressionError,
    NotStartedError,
    OpenError,
    SequenceFileError,
    StreamReadError,
    UnsupportedFormatError,
)
from seqshard.io.fasta import FastaDecoder, write_fasta, write_fasta_record
from seqshard.io.fastq import FastqDecoder
from seqshard.io.reader import open_sequence_file, read_sequences

__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "UNKNOWN_PROGRESS",
    "DecoderState",
    "Format",
    "SequenceDecoder",
    "SequenceRecord",
    "FastaDecoder",
    "FastqDecoder",
    "open_sequence_file",
    "read_sequences",
    "write_fasta",
    "write_fasta_record",
    "SequenceFileError",
    "OpenError",
    "UnsupportedFormatError",
    "DecompressionError",
    "StreamReadError",
    "NotStartedError",
]
