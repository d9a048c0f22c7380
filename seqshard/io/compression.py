"""Suffix based selection of (de)compression transforms."""

import bz2
import gzip
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

GZIP_SUFFIX = ".gz"
BZIP2_SUFFIX = ".bz2"

# Any input byte survives a decode/encode round trip with these settings
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "surrogateescape"


def compression_for(filepath: Union[str, Path]) -> Optional[str]:
    """Return "gzip", "bzip2" or None depending on the file suffix."""
    suffix = Path(filepath).suffix.lower()
    if suffix == GZIP_SUFFIX:
        return "gzip"
    if suffix == BZIP2_SUFFIX:
        return "bzip2"
    return None


def open_compressed(raw: BinaryIO, compression: Optional[str]) -> BinaryIO:
    """
    Wrap an open binary handle in a decompressing reader.

    The returned object supports ``peek`` and ``readline``. With no
    compression the raw handle is returned unchanged. Closing the wrapper
    does not close ``raw``.
    """
    if compression == "gzip":
        return gzip.GzipFile(fileobj=raw, mode="rb")
    if compression == "bzip2":
        return bz2.BZ2File(raw, mode="rb")
    return raw


def open_output(filepath: Union[str, Path]) -> TextIO:
    """Open an output file for writing text, gzip-compressed for '.gz' names."""
    filepath = Path(filepath)
    opener = gzip.open if filepath.suffix.lower() == GZIP_SUFFIX else open
    return opener(filepath, "wt", encoding=TEXT_ENCODING, errors=TEXT_ERRORS, newline="\n")
