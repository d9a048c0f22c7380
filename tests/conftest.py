"""Shared fixtures for the seqshard test suite."""

import bz2
import gzip
from pathlib import Path

import pytest


@pytest.fixture
def write_seq_file(tmp_path):
    """Write text to tmp_path/name, compressed according to the suffix."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        data = content.encode("utf-8")
        if name.endswith(".gz"):
            with gzip.open(path, "wb") as f:
                f.write(data)
        elif name.endswith(".bz2"):
            with bz2.open(path, "wb") as f:
                f.write(data)
        else:
            path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def read_text():
    """Read a (possibly gzip-compressed) output file as text."""

    def _read(path) -> str:
        path = Path(path)
        if path.suffix == ".gz":
            with gzip.open(path, "rt") as f:
                return f.read()
        return path.read_text()

    return _read
