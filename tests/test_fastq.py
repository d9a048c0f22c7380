"""
FASTQ decoder tests
"""

import itertools

import pytest

from seqshard.io import DecoderState, FastqDecoder, open_sequence_file, read_sequences

FASTQ_TEXT = "@r1\nACGT\n+\n!!!!\n@r2\nGGGG\n+\nIIII\n"


def _records(path, **kwargs):
    return [(r.identifier, r.sequence) for r in read_sequences(path, **kwargs)]


class TestFastqDecoding:
    """Record-by-record decoding"""

    def test_two_records(self, write_seq_file):
        path = write_seq_file("in.fastq", FASTQ_TEXT)
        assert _records(path) == [("r1", "ACGT"), ("r2", "GGGG")]

    def test_states(self, write_seq_file):
        path = write_seq_file("in.fastq", FASTQ_TEXT)
        with open_sequence_file(path) as decoder:
            assert isinstance(decoder, FastqDecoder)
            assert decoder.advance()
            assert decoder.state is DecoderState.READING_SEQUENCE
            assert decoder.read_sequence() == "ACGT"
            assert decoder.advance()
            assert decoder.quality_skipped == 4
            assert not decoder.advance()
            assert decoder.state is DecoderState.EXHAUSTED

    def test_separator_with_repeated_identifier(self, write_seq_file):
        path = write_seq_file("in.fastq", "@r1 extra\nAC\n+r1 extra\nII\n@r2\nG\n+\nI\n")
        assert _records(path) == [("r1 extra", "AC"), ("r2", "G")]

    def test_advance_without_reading_sequence(self, write_seq_file):
        path = write_seq_file("in.fastq", FASTQ_TEXT * 3)
        with open_sequence_file(path) as decoder:
            count = 0
            while decoder.advance():
                count += 1
            assert count == 6
            assert decoder.error is None

    def test_crlf(self, write_seq_file):
        path = write_seq_file("in.fastq", "@r1\r\nACGT\r\n+\r\n@@@@\r\n@r2\r\nGG\r\n+\r\nII\r\n")
        assert _records(path) == [("r1", "ACGT"), ("r2", "GG")]


class TestQualitySkipping:
    """The quality block is skipped by byte count"""

    def test_quality_lines_starting_with_marker(self, write_seq_file):
        """Quality bytes equal to '@' are never mistaken for a header"""
        path = write_seq_file("in.fastq", "@r1\nACGT\n+\n@@@@\n@r2\nGG\n+\n@I\n")
        assert _records(path) == [("r1", "ACGT"), ("r2", "GG")]

    def test_wrapping_differs_from_sequence(self, write_seq_file):
        text = (
            "@r1\nACGTAC\nGTAC\n+\n@@@\n@@@@\n@@@\n"
            "@r2\nAAAAAAAA\n+\n@@\n@@\n@@\n@@\n"
            "@r3\nC\nC\nC\n+\n@@@\n"
        )
        path = write_seq_file("in.fastq", text)
        with open_sequence_file(path) as decoder:
            seen = []
            skipped = []
            while decoder.advance():
                if seen:
                    skipped.append(decoder.quality_skipped)
                seen.append((decoder.identifier, decoder.read_sequence()))
        assert seen == [("r1", "ACGTACGTAC"), ("r2", "AAAAAAAA"), ("r3", "CCC")]
        assert skipped == [10, 8]

    def test_skip_matches_previous_length(self, write_seq_file):
        """Skipped quality bytes always equal the previous sequence length"""
        parts = []
        lengths = []
        for i in range(30):
            length = (i * 7) % 23 + 1
            seq = "ACGT" * 6
            seq = seq[:length]
            seq_lines = [seq[j:j + 5] for j in range(0, length, 5)]
            qual = "@" * length
            qual_lines = [qual[j:j + 3] for j in range(0, length, 3)]
            parts.append(f"@read{i}\n" + "\n".join(seq_lines) + "\n+\n" + "\n".join(qual_lines) + "\n")
            lengths.append(length)
        path = write_seq_file("in.fastq", "".join(parts))

        skipped = []
        with open_sequence_file(path) as decoder:
            count = 0
            while decoder.advance():
                if count:
                    skipped.append(decoder.quality_skipped)
                assert len(decoder.read_sequence()) == lengths[count]
                count += 1
        assert count == 30
        assert skipped == lengths[:-1]

    def test_resync_over_stray_lines(self, write_seq_file):
        path = write_seq_file("in.fastq", "@r1\nACGT\n+\nIIII\n\n\n@r2\nGG\n+\nII\n")
        with open_sequence_file(path) as decoder:
            records = list(decoder)
            assert decoder.resync_count == 2
        assert [(r.identifier, r.sequence) for r in records] == [("r1", "ACGT"), ("r2", "GG")]

    def test_quality_longer_than_sequence(self, write_seq_file):
        path = write_seq_file("in.fastq", "@r1\nAC\n+\nIIII\n@r2\nGG\n+\nII\n")
        assert _records(path) == [("r1", "AC"), ("r2", "GG")]

    def test_truncated_quality_ends_cleanly(self, write_seq_file):
        path = write_seq_file("in.fastq", "@r1\nACGT\n+\nII")
        with open_sequence_file(path) as decoder:
            assert [r.sequence for r in decoder] == ["ACGT"]
            assert decoder.error is None

    def test_small_buffer(self, write_seq_file):
        seq = "ACGT" * 40
        text = f"@r1\n{seq}\n+\n{'@' * len(seq)}\n@r2\nGG\n+\nII\n"
        path = write_seq_file("in.fastq", text)
        assert _records(path, buffer_size=6) == [("r1", seq), ("r2", "GG")]

    def test_crlf_split_in_quality_block(self, write_seq_file):
        """A CR split from its LF is a terminator, not a quality byte"""
        text = "@r1\nACG\r\n+\r\n@@\r\n@\r\n@r2\nGG\r\n+\r\nII\r\n"
        path = write_seq_file("in.fastq", text)
        assert _records(path, buffer_size=3) == [("r1", "ACG"), ("r2", "GG")]
        with open_sequence_file(path, buffer_size=3) as decoder:
            assert decoder.advance()
            assert decoder.advance()
            assert decoder.identifier == "r2"
            assert decoder.quality_skipped == 3
            assert not decoder.advance()
            assert decoder.error is None


class TestFastqSequenceBytes:
    """Lazy byte iteration keeps the quality bookkeeping"""

    def test_byte_count_tracked(self, write_seq_file):
        path = write_seq_file("in.fastq", "@r1\nAC\nGT\n+\n@@\n@@\n@r2\nGG\n+\nII\n")
        with open_sequence_file(path) as decoder:
            assert decoder.advance()
            assert bytes(decoder.iter_sequence_bytes()) == b"ACGT"
            assert decoder.advance()
            assert decoder.identifier == "r2"
            assert decoder.quality_skipped == 4
            assert bytes(decoder.iter_sequence_bytes()) == b"GG"
            assert not decoder.advance()

    def test_partial_iteration_then_advance(self, write_seq_file):
        path = write_seq_file("in.fastq", "@r1\nACGTACGT\n+\n@@@@@@@@\n@r2\nGG\n+\nII\n")
        with open_sequence_file(path, buffer_size=3) as decoder:
            assert decoder.advance()
            assert bytes(itertools.islice(decoder.iter_sequence_bytes(), 3)) == b"ACG"
            assert decoder.advance()
            assert decoder.identifier == "r2"
            assert decoder.read_sequence() == "GG"


@pytest.mark.parametrize("suffix", ["", ".gz", ".bz2"])
def test_compressed_fastq(write_seq_file, suffix):
    path = write_seq_file("in.fastq" + suffix, FASTQ_TEXT)
    assert _records(path) == [("r1", "ACGT"), ("r2", "GGGG")]
