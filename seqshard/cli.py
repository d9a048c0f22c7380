"""
Command line interface.

Split and/or convert FASTA/FASTQ files into one or more FASTA files::

    # convert a fastq file into fasta (named myseqs.fasta)
    seqshard /path/to/myseqs.fastq

    # convert all fastq files in a folder to 64 gzipped fasta files
    seqshard -n 64 -z -o newfiles%03d.fasta.gz /path/to/*.fastq

    # convert all fastq files in a folder to a single fasta file
    seqshard -o simple.fasta /path/to/*.fastq
"""

import argparse
import logging
import os
import sys
from typing import Callable, List, Optional

from seqshard import __version__
from seqshard.io.errors import SequenceFileError
from seqshard.pipeline import PipelineConfig, convert_files

logger = logging.getLogger("seqshard")


def strip_extensions(filename: str) -> str:
    """Drop every extension: 'reads.fastq.gz' -> 'reads'."""
    root, ext = os.path.splitext(filename)
    while ext:
        filename = root
        root, ext = os.path.splitext(filename)
    return filename


def placeholder_for(n_outputs: int) -> str:
    """Zero-padded shard number placeholder wide enough for ``n_outputs``."""
    if n_outputs == 1:
        return ""
    if n_outputs < 10:
        return "%01d"
    if n_outputs < 100:
        return "%02d"
    if n_outputs < 1000:
        return "%03d"
    if n_outputs < 10000:
        return "%04d"
    return "%08d"


def default_pattern(files: List[str], n_outputs: int) -> str:
    """Derive an output pattern from the first input file."""
    if len(files) == 1:
        pattern = strip_extensions(files[0])
    else:
        pattern = os.path.basename(files[0])
    return pattern + placeholder_for(n_outputs) + ".fasta"


def output_namer(pattern: str, n_outputs: int) -> Callable[[int], str]:
    """
    Build the shard index -> path function for a printf-style pattern.

    A single output uses the pattern verbatim, so its name may contain a
    literal '%'.

    Raises:
        ValueError: ``n_outputs`` > 1 and the pattern has no '%d' placeholder
    """
    if n_outputs == 1:
        return lambda index: pattern
    try:
        names = {pattern % 0, pattern % (n_outputs - 1)}
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid output pattern {pattern!r}: {exc}") from exc
    if len(names) == 1:
        raise ValueError(f"output pattern {pattern!r} needs a %d placeholder for {n_outputs} outputs")
    return lambda index: pattern % index


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seqshard",
        description=(
            "Split and/or convert fasta/fastq files into multiple fasta files. "
            "Inputs are read in parallel and sequences distributed evenly "
            "across all output files."
        ),
    )
    parser.add_argument("files", nargs="+", help="input FASTA/FASTQ files (.gz and .bz2 accepted)")
    parser.add_argument("-n", "--outputs", type=int, default=1,
                        help="number of output files to split into (default: 1)")
    parser.add_argument("-o", "--output", metavar="PATTERN", default="",
                        help="output filename pattern (use %%d for the output sequence number)")
    parser.add_argument("-z", "--gzip", action="store_true", help="gzip output files")
    parser.add_argument("-j", "--workers", type=int, default=None,
                        help="maximum number of input files read at once (default: CPU count)")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="only report warnings and errors, no status line")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.outputs < 1:
        parser.error("-n must be at least 1")

    pattern = args.output or default_pattern(args.files, args.outputs)
    if args.gzip and not pattern.endswith(".gz"):
        pattern += ".gz"

    try:
        namer = output_namer(pattern, args.outputs)
        config = PipelineConfig(workers=args.workers, show_progress=not args.quiet)
    except ValueError as exc:
        parser.error(str(exc))

    if not args.quiet:
        print(f"Using {config.worker_count(len(args.files))} CPUs for splitting", file=sys.stderr)
        print(f"Splitting {len(args.files)} inputs into {args.outputs} outputs.", file=sys.stderr)
        print(f"Output file pattern is: '{pattern}'\n", file=sys.stderr)

    try:
        convert_files(args.files, args.outputs, namer, config)
    except (SequenceFileError, OSError) as exc:
        logger.error(f"Conversion failed: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
