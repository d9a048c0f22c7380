"""
Egress: round-robin sharding of records across FASTA writer tasks.
"""

import logging
import queue
import threading
from pathlib import Path
from typing import List, Union

from seqshard.io.base import FASTA_LINE_WIDTH
from seqshard.io.compression import open_output
from seqshard.io.fasta import write_fasta_record
from seqshard.pipeline import channels
from seqshard.pipeline.channels import END_OF_STREAM

logger = logging.getLogger(__name__)


def shard_records(
    record_channel: queue.Queue,
    writer_channels: List[queue.Queue],
    stop_event: threading.Event,
    poll_interval: float = 0.1,
) -> int:
    """
    Route the record with global index ``i`` to writer ``i % len(writer_channels)``.

    When ``record_channel`` is closed, closes every writer channel.

    Returns:
        Total number of records routed
    """
    n_outputs = len(writer_channels)
    index = 0
    while True:
        record = channels.get(record_channel, stop_event, poll_interval)
        if record is END_OF_STREAM:
            break
        channels.put(writer_channels[index % n_outputs], record, stop_event, poll_interval)
        index += 1

    for channel in writer_channels:
        channels.close(channel, stop_event, poll_interval)

    logger.info(f"Split {index:,} sequences.")
    return index


def write_records(
    filepath: Union[str, Path],
    channel: queue.Queue,
    stop_event: threading.Event,
    line_width: int = FASTA_LINE_WIDTH,
    poll_interval: float = 0.1,
) -> int:
    """
    Write every record from ``channel`` to ``filepath`` as wrapped FASTA.

    The file is gzip-compressed when its name ends in '.gz'. It is closed
    (and a compressed stream flushed) when the channel is closed or the run
    is aborted.

    Returns:
        Number of records written
    """
    written = 0
    with open_output(filepath) as handle:
        while True:
            record = channels.get(channel, stop_event, poll_interval)
            if record is END_OF_STREAM:
                break
            write_fasta_record(handle, record, line_width)
            written += 1

    logger.debug(f"{filepath}: wrote {written:,} records")
    return written
