"""
FASTQ decoding.

Each record is a header line starting with '@', one or more sequence lines,
a separator line starting with '+', and a quality block holding exactly as
many bytes as the sequence. Quality lines may be wrapped differently from
the sequence lines and may themselves start with '@', so the quality block
is skipped by byte count rather than by looking for the next header.
"""

import logging
from typing import Optional

from seqshard.io.base import DecoderState, Format, SequenceDecoder

logger = logging.getLogger(__name__)


def _payload_length(fragment: bytes) -> int:
    """Length of a line fragment with its line terminator excluded."""
    if fragment.endswith(b"\r\n"):
        return len(fragment) - 2
    if fragment.endswith(b"\n"):
        return len(fragment) - 1
    return len(fragment)


class FastqDecoder(SequenceDecoder):
    """
    Streaming decoder for FASTQ files.

    Attributes:
        quality_skipped: Quality bytes discarded after the previous record
        resync_count: Stray lines skipped while looking for a header
    """

    format = Format.FASTQ
    reading_state = DecoderState.READING_SEQUENCE

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.quality_skipped = 0
        self.resync_count = 0

    def _ends_sequence(self, fragment: bytes) -> bool:
        return fragment.startswith(b"+")

    def _end_sequence(self, fragment: Optional[bytes]) -> None:
        if fragment:
            # rest of the separator line
            self._complete_line(fragment)

    def _next_header(self) -> Optional[bytes]:
        self.state = DecoderState.SKIPPING_QUALITY
        if not self._skip_quality(self._sequence_length):
            return None

        self.state = DecoderState.READING_HEADER
        line = self._read_line()
        while line is not None and not line.startswith(b"@"):
            self.resync_count += 1
            logger.debug(f"{self.filepath}: skipping stray line before header: {line[:40]!r}")
            line = self._read_line()
        return line

    def _skip_quality(self, length: int) -> bool:
        """Discard ``length`` quality bytes; False if the stream ended first."""
        skipped = 0
        held_cr = False
        fragment = b"\n"
        while skipped < length:
            fragment = self._read_fragment()
            if not fragment:
                self.quality_skipped = skipped
                return False
            if held_cr:
                held_cr = False
                if fragment != b"\n":
                    skipped += 1
            if fragment.endswith(b"\r"):
                # may be the first half of a split CRLF
                held_cr = True
                skipped += len(fragment) - 1
            else:
                skipped += _payload_length(fragment)

        if not fragment.endswith(b"\n"):
            # quality block longer than the sequence; drop the rest of the line
            self._complete_line(fragment)
        self.quality_skipped = min(skipped, length)
        return True
