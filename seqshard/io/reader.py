"""
Format-detecting open for FASTA/FASTQ files.
"""

import logging
import zlib
from pathlib import Path
from typing import Dict, Iterator, Type, Union

from seqshard.io.base import DEFAULT_BUFFER_SIZE, Format, SequenceDecoder, SequenceRecord
from seqshard.io.compression import compression_for, open_compressed
from seqshard.io.errors import DecompressionError, OpenError, StreamReadError
from seqshard.io.fasta import FastaDecoder
from seqshard.io.fastq import FastqDecoder

logger = logging.getLogger(__name__)

DECODERS: Dict[Format, Type[SequenceDecoder]] = {
    Format.FASTA: FastaDecoder,
    Format.FASTQ: FastqDecoder,
}


def detect_format(stream) -> Format:
    """Peek at the first byte of a buffered stream without consuming it."""
    return Format.from_marker(stream.peek(1)[:1])


def open_sequence_file(
    filepath: Union[str, Path],
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> SequenceDecoder:
    """
    Open a FASTA or FASTQ file and return the matching decoder.

    Files ending in '.gz' or '.bz2' are decompressed on the fly. The format
    is chosen once from the first byte of the (decompressed) content.

    Args:
        filepath: Path to the input file
        buffer_size: Maximum bytes read per line fragment

    Returns:
        FastaDecoder or FastqDecoder positioned at the start of the file

    Raises:
        OpenError: The file cannot be opened
        UnsupportedFormatError: The content starts with neither '>' nor '@'
        DecompressionError: The compressed stream is malformed
    """
    try:
        raw = open(filepath, "rb")
    except OSError as exc:
        raise OpenError(exc.errno, f"cannot open {filepath}: {exc.strerror}", str(filepath)) from exc

    compression = compression_for(filepath)
    try:
        stream = open_compressed(raw, compression)
        try:
            fmt = detect_format(stream)
        except (OSError, EOFError, zlib.error) as exc:
            if compression is not None:
                raise DecompressionError(
                    f"{filepath}: malformed {compression} stream: {exc}"
                ) from exc
            raise StreamReadError(f"{filepath}: {exc}") from exc
    except BaseException:
        raw.close()
        raise

    logger.debug(f"Opened {filepath} as {fmt.name} (compression: {compression or 'none'})")
    return DECODERS[fmt](
        raw,
        stream,
        filepath=filepath,
        compression=compression,
        buffer_size=buffer_size,
    )


def read_sequences(
    filepath: Union[str, Path],
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> Iterator[SequenceRecord]:
    """
    Read all records from a FASTA or FASTQ file.

    Yields:
        SequenceRecord objects in file order

    Example:
        >>> for record in read_sequences("reads.fastq.gz"):
        ...     print(f"{record.identifier}: {len(record)} bp")
    """
    with open_sequence_file(filepath, buffer_size=buffer_size) as decoder:
        yield from decoder
