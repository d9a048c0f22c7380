"""
Exceptions raised while opening and decoding sequence files.
"""


class SequenceFileError(Exception):
    """Base class for sequence file errors."""
    pass


class OpenError(SequenceFileError, OSError):
    """Raised when an input file cannot be opened (missing, permission denied)."""
    pass


class UnsupportedFormatError(SequenceFileError, ValueError):
    """Raised when the first byte of a file is neither '>' nor '@'."""
    pass


class DecompressionError(SequenceFileError):
    """Raised when a gzip or bzip2 stream is malformed."""
    pass


class StreamReadError(SequenceFileError):
    """Raised for any other failure while reading an input stream."""
    pass


class NotStartedError(SequenceFileError, RuntimeError):
    """Raised when record data is requested before the first advance()."""
    pass
