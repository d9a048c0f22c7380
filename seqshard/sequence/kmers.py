"""
2-bit packed k-mer representation.

Each nucleotide takes two bits (A=0, C=1, G=2, T=3), so a k-mer of up to
32 bases fits in one unsigned 64-bit integer. Any other byte packs as A.
"""

import numpy as np
from typing import Union

MAX_KMER_SIZE = 32

# Sentinel for "no k-mer". With k=32 it is also the valid k-mer "tttt...t".
INVALID_KMER = (1 << 64) - 1

BASE_CODES = {"A": 0, "C": 1, "G": 2, "T": 3}
CODE_BASES = "acgt"

# byte value -> 2-bit code
_BYTE_CODES = np.zeros(256, dtype=np.uint64)
for _base, _code in BASE_CODES.items():
    _BYTE_CODES[ord(_base)] = _code
    _BYTE_CODES[ord(_base.lower())] = _code


class KmerPacker:
    """
    Packs and unpacks k-mers for one fixed k.

    Args:
        k: K-mer length in bases (at most MAX_KMER_SIZE)

    Example:
        >>> packer = KmerPacker(3)
        >>> kmer = 0
        >>> for base in "ACG":
        ...     kmer = packer.append_base(kmer, base)
        >>> packer.to_string(kmer)
        'acg'
    """

    def __init__(self, k: int):
        if k < 1:
            raise ValueError("k must be at least 1")
        if k > MAX_KMER_SIZE:
            raise ValueError(f"kmer size k={k} is too large (max {MAX_KMER_SIZE})")
        self.k = k
        self.mask = (1 << (2 * k)) - 1

    @property
    def length(self) -> int:
        return self.k

    @property
    def count(self) -> int:
        """Number of distinct k-mers representable."""
        return self.mask + 1

    def append_base(self, kmer: int, base: Union[str, int]) -> int:
        """
        Shift ``kmer`` left by one base, dropping the oldest, and append ``base``.

        ``base`` is a single character or a byte value. Anything that is not
        A, C, G or T packs as A.
        """
        if isinstance(base, str):
            if len(base) != 1:
                raise ValueError(f"expected a single base, got {base!r}")
            base = ord(base)
        code = int(_BYTE_CODES[base]) if 0 <= base < 256 else 0
        return ((kmer << 2) & self.mask) | code

    def to_string(self, kmer: int) -> str:
        if kmer == INVALID_KMER:
            return "-" * self.k
        return "".join(
            CODE_BASES[(kmer >> (2 * i)) & 3] for i in range(self.k - 1, -1, -1)
        )

    def pack_sequence(self, sequence: Union[str, bytes]) -> np.ndarray:
        """
        Pack every overlapping k-mer of a sequence.

        Args:
            sequence: Nucleotide sequence

        Returns:
            numpy uint64 array of shape (len(sequence) - k + 1,), empty if
            the sequence is shorter than k
        """
        if isinstance(sequence, str):
            sequence = sequence.encode("ascii", errors="replace")
        codes = _BYTE_CODES[np.frombuffer(sequence, dtype=np.uint8)]

        num_kmers = len(codes) - self.k + 1
        if num_kmers <= 0:
            return np.zeros(0, dtype=np.uint64)

        kmers = np.zeros(num_kmers, dtype=np.uint64)
        two = np.uint64(2)
        for offset in range(self.k):
            kmers = np.left_shift(kmers, two) | codes[offset:offset + num_kmers]
        return kmers


def kmer_counts(sequence: Union[str, bytes], k: int = 3) -> np.ndarray:
    """
    Count packed k-mers of a sequence.

    Returns:
        numpy array of shape (4^k,) indexed by packed k-mer value
    """
    if k > 12:
        raise ValueError("kmer_counts supports k <= 12")
    packer = KmerPacker(k)
    return np.bincount(packer.pack_sequence(sequence).astype(np.int64),
                       minlength=packer.count)
