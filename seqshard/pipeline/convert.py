"""
Coordinator for a conversion run.

Data flow::

    files -> ingress workers -> record channel -> sharder -> writer tasks -> files
                    \\-> progress channel -> status line

The coordinator owns every channel, the stop event and the task futures.
The first task to fail records its error and sets the stop event; the other
tasks notice at their next channel handoff and unwind, closing their files.
The error is then raised once from ``convert_files``.
"""

import logging
import os
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from seqshard.pipeline import channels
from seqshard.pipeline.channels import PipelineAborted
from seqshard.pipeline.config import PipelineConfig
from seqshard.pipeline.egress import shard_records, write_records
from seqshard.pipeline.ingress import fill_work_queue, ingress_worker
from seqshard.pipeline.progress import ProgressAggregator

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class ConversionSummary:
    """
    Record counts of a finished run.

    Attributes:
        output_paths: Destination of each shard, by shard index
        worker_records: Records produced by each ingress worker
        records_sharded: Records routed by the sharder
        records_written: Records written to each shard
    """
    output_paths: List[str]
    worker_records: List[int] = field(default_factory=list)
    records_sharded: int = 0
    records_written: List[int] = field(default_factory=list)

    @property
    def records_read(self) -> int:
        return sum(self.worker_records)

    @property
    def total_written(self) -> int:
        return sum(self.records_written)


def _run_task(name: str, errors: queue.Queue, stop_event: threading.Event,
              fn: Callable, *args):
    try:
        return fn(*args)
    except PipelineAborted:
        raise
    except BaseException as exc:
        logger.debug(f"Task {name} failed: {exc!r}")
        errors.put((name, exc))
        stop_event.set()
        raise


def convert_files(
    files: Sequence[PathLike],
    output_count: int,
    output_namer: Callable[[int], PathLike],
    config: Optional[PipelineConfig] = None,
) -> ConversionSummary:
    """
    Convert FASTA/FASTQ inputs into ``output_count`` wrapped FASTA files.

    Records are distributed round-robin: the i-th record to reach the
    sharder goes to output ``i % output_count``.

    Args:
        files: Input paths; each may be gzip- or bzip2-compressed
        output_count: Number of output files (at least 1)
        output_namer: Maps a shard index to its output path
        config: Pipeline tunables

    Returns:
        ConversionSummary with per-stage record counts

    Raises:
        ValueError: Invalid arguments
        SequenceFileError: An input could not be opened or decoded
        OSError: An output could not be written

    Example:
        >>> convert_files(["a.fastq", "b.fastq.gz"], 2, lambda i: f"out{i}.fasta")
    """
    files = [os.fspath(f) for f in files]
    if not files:
        raise ValueError("no input files provided")
    if output_count < 1:
        raise ValueError("output_count must be at least 1")
    config = config or PipelineConfig()

    output_paths = [os.fspath(output_namer(i)) for i in range(output_count)]
    if len(set(output_paths)) != output_count:
        raise ValueError("output_namer must return a distinct path for every shard")
    inputs = {os.path.abspath(f) for f in files}
    clashes = [path for path in output_paths if os.path.abspath(path) in inputs]
    if clashes:
        raise ValueError(f"output would overwrite input file: {clashes[0]}")

    n_workers = config.worker_count(len(files))
    logger.info(f"Splitting {len(files)} inputs into {output_count} outputs "
                f"using {n_workers} workers")

    stop_event = threading.Event()
    errors: queue.Queue = queue.Queue()
    work_queue = fill_work_queue(files)
    record_channel: queue.Queue = queue.Queue(maxsize=config.record_queue_size)
    writer_channels = [queue.Queue(maxsize=config.shard_queue_size) for _ in range(output_count)]
    progress_channel: Optional[queue.Queue] = None
    if config.show_progress:
        progress_channel = queue.Queue(maxsize=config.record_queue_size)

    # every task must be running at once or the channels deadlock
    max_threads = n_workers + output_count + 2
    tasks: Dict[Future, str] = {}

    with ThreadPoolExecutor(max_workers=max_threads, thread_name_prefix="seqshard") as executor:

        def submit(name: str, fn: Callable, *args) -> Future:
            future = executor.submit(_run_task, name, errors, stop_event, fn, *args)
            tasks[future] = name
            return future

        writers = [
            submit(f"writer-{i}", write_records, path, channel, stop_event,
                   config.line_width, config.poll_interval)
            for i, (path, channel) in enumerate(zip(output_paths, writer_channels))
        ]
        sharder = submit("sharder", shard_records, record_channel, writer_channels,
                         stop_event, config.poll_interval)
        if progress_channel is not None:
            aggregator = ProgressAggregator(n_workers, stream=config.progress_stream,
                                            interval=config.progress_interval)
            submit("progress", aggregator.run, progress_channel, stop_event)
        ingress = [
            submit(f"ingress-{slot}", ingress_worker, slot, work_queue, record_channel,
                   progress_channel, stop_event, config)
            for slot in range(n_workers)
        ]

        # the record channel is closed only once every producer is done
        wait(ingress)
        try:
            channels.close(record_channel, stop_event, config.poll_interval)
            if progress_channel is not None:
                channels.close(progress_channel, stop_event, config.poll_interval)
        except PipelineAborted:
            pass
        wait(tasks)

    if not errors.empty():
        name, exc = errors.get_nowait()
        logger.debug(f"Conversion aborted by {name}")
        raise exc

    summary = ConversionSummary(
        output_paths=output_paths,
        worker_records=[f.result() for f in ingress],
        records_sharded=sharder.result(),
        records_written=[f.result() for f in writers],
    )
    logger.info(f"Wrote {summary.total_written:,} records to {output_count} outputs")
    return summary
