"""
Concurrent fan-in/fan-out conversion pipeline.

This module provides:
- An ingress pool decoding input files in parallel
- A round-robin sharder feeding one writer task per output file
- A per-worker progress status line
- ``convert_files``, the coordinator tying them together
"""

from seqshard.pipeline.channels import END_OF_STREAM, PipelineAborted
from seqshard.pipeline.config import PipelineConfig, available_cpus
from seqshard.pipeline.convert import ConversionSummary, convert_files
from seqshard.pipeline.egress import shard_records, write_records
from seqshard.pipeline.ingress import fill_work_queue, ingress_worker
from seqshard.pipeline.progress import ProgressAggregator, ProgressSample, format_percent

__all__ = [
    "convert_files",
    "ConversionSummary",
    "PipelineConfig",
    "available_cpus",
    "ingress_worker",
    "fill_work_queue",
    "shard_records",
    "write_records",
    "ProgressAggregator",
    "ProgressSample",
    "format_percent",
    "PipelineAborted",
    "END_OF_STREAM",
]
