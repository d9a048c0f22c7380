"""
Ingress pool: decode input files in parallel onto one shared record channel.
"""

import logging
import queue
import threading
from typing import Optional

from seqshard.io.reader import open_sequence_file
from seqshard.pipeline import channels
from seqshard.pipeline.config import PipelineConfig
from seqshard.pipeline.progress import ProgressSample

logger = logging.getLogger(__name__)


def fill_work_queue(files) -> queue.Queue:
    """Queue every input path once; workers drain it without blocking."""
    work_queue: queue.Queue = queue.Queue()
    for filepath in files:
        work_queue.put(filepath)
    return work_queue


def ingress_worker(
    slot: int,
    work_queue: queue.Queue,
    record_channel: queue.Queue,
    progress_channel: Optional[queue.Queue],
    stop_event: threading.Event,
    config: PipelineConfig,
) -> int:
    """
    Decode files from ``work_queue`` until it is empty.

    Each record goes onto ``record_channel`` in file order, paired with a
    progress sample for ``slot`` on ``progress_channel``. Progress samples are
    dropped while that channel is full; the status line only shows the latest
    value per slot. Any open or decode error propagates and ends the whole run.

    Returns:
        Number of records this worker produced
    """
    produced = 0
    while not stop_event.is_set():
        try:
            filepath = work_queue.get_nowait()
        except queue.Empty:
            break

        logger.debug(f"Worker {slot}: reading {filepath}")
        file_records = 0
        with open_sequence_file(filepath, buffer_size=config.buffer_size) as decoder:
            for record in decoder:
                if progress_channel is not None:
                    channels.offer(progress_channel, ProgressSample(slot, decoder.progress()))
                channels.put(record_channel, record, stop_event, config.poll_interval)
                file_records += 1

        logger.info(f"{filepath}: {file_records:,} records ({decoder.format.name})")
        produced += file_records

    if stop_event.is_set():
        raise channels.PipelineAborted()
    return produced
