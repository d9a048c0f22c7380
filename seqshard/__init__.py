"""
seqshard: streaming FASTA/FASTQ conversion and sharding

This package provides tools for:
- Record-by-record decoding of FASTA and FASTQ files (plain, gzip, bzip2)
- Parallel conversion of many inputs into N round-robin FASTA shards
- 2-bit k-mer packing

Example:
    >>> from seqshard import convert_files
    >>> convert_files(["a.fastq.gz", "b.fastq.gz"], 4, lambda i: f"part{i}.fasta")
"""

__version__ = "0.1.0"
__author__ = "seqshard Contributors"

from seqshard.io import (
    Format,
    SequenceRecord,
    FastaDecoder,
    FastqDecoder,
    open_sequence_file,
    read_sequences,
    write_fasta,
    SequenceFileError,
)

from seqshard.pipeline import (
    convert_files,
    ConversionSummary,
    PipelineConfig,
)

from seqshard.sequence import KmerPacker

__all__ = [
    # I/O
    "Format",
    "SequenceRecord",
    "FastaDecoder",
    "FastqDecoder",
    "open_sequence_file",
    "read_sequences",
    "write_fasta",
    "SequenceFileError",
    # Pipeline
    "convert_files",
    "ConversionSummary",
    "PipelineConfig",
    # Utilities
    "KmerPacker",
]
