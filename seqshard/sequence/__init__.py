"""
Sequence utilities.

This module provides 2-bit k-mer packing, independent of the
conversion pipeline.
"""

from seqshard.sequence.kmers import (
    INVALID_KMER,
    MAX_KMER_SIZE,
    KmerPacker,
    kmer_counts,
)

__all__ = [
    "INVALID_KMER",
    "MAX_KMER_SIZE",
    "KmerPacker",
    "kmer_counts",
]
