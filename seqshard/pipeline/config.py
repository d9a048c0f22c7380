"""Settings for a conversion run."""

import os
from dataclasses import dataclass, field
from typing import Optional, TextIO

from seqshard.io.base import DEFAULT_BUFFER_SIZE, FASTA_LINE_WIDTH


def available_cpus() -> int:
    """Number of CPUs this process may run on."""
    if hasattr(os, "sched_getaffinity"):
        return max(1, len(os.sched_getaffinity(0)))
    return max(1, os.cpu_count() or 1)


@dataclass
class PipelineConfig:
    """
    Tunables for ``convert_files``.

    Attributes:
        workers: Ingress worker count; defaults to the available CPUs. The
            pool never exceeds the number of input files.
        buffer_size: Read-ahead size per line fragment, in bytes
        record_queue_size: Capacity of the shared record channel
        shard_queue_size: Capacity of each writer's channel
        line_width: FASTA output column width
        show_progress: Render the per-worker status line
        progress_interval: Seconds between status line refreshes
        progress_stream: Where the status line is written (default: stderr)
        poll_interval: Seconds a blocked task waits before re-checking for abort
    """
    workers: Optional[int] = None
    buffer_size: int = DEFAULT_BUFFER_SIZE
    record_queue_size: int = 1024
    shard_queue_size: int = 5
    line_width: int = FASTA_LINE_WIDTH
    show_progress: bool = True
    progress_interval: float = 1.0
    progress_stream: Optional[TextIO] = field(default=None, repr=False)
    poll_interval: float = 0.1

    def __post_init__(self):
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        for name in ("buffer_size", "record_queue_size", "shard_queue_size", "line_width"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.progress_interval <= 0 or self.poll_interval <= 0:
            raise ValueError("intervals must be positive")

    def worker_count(self, n_files: int) -> int:
        """Ingress pool size for ``n_files`` inputs."""
        return max(1, min(self.workers or available_cpus(), n_files))
