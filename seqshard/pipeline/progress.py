"""
Per-worker progress status line.

Ingress workers send ``ProgressSample`` messages on a side channel; the
aggregator keeps the latest percentage for each worker slot and redraws a
single status line on a fixed period. It has no effect on the conversion.
"""

import queue
import sys
import threading
import time
from dataclasses import dataclass
from typing import List, Optional, TextIO

from seqshard.pipeline.channels import END_OF_STREAM


@dataclass(frozen=True)
class ProgressSample:
    slot: int
    percent: float


def format_percent(percent: float, worker_count: int) -> str:
    """
    Render one slot of the status line.

    The granularity depends only on the worker count so that the whole line
    stays roughly within a terminal width. Unknown (negative) values and
    values above 100 are shown as dashes.
    """
    unknown = percent < 0 or percent > 100
    if worker_count <= 10:
        # 100.00%
        return "   -    " if unknown else f"{percent:6.2f}% "
    if worker_count <= 16:
        # 100%
        return "  -  " if unknown else f"{int(percent):3d}% "
    if worker_count <= 40:
        # 00-99
        if unknown:
            return "--"
        return "99" if percent > 99.0 else f"{int(percent):02d}"
    # a-z
    if unknown:
        return "-"
    if percent > 90.0:
        return "z"
    return chr(ord("a") + int(26.0 * percent / 100.0))


class ProgressAggregator:
    """
    Collects progress samples and periodically draws the status line.

    Args:
        worker_count: Number of ingress worker slots
        stream: Output stream for the status line (default: stderr)
        interval: Seconds between redraws
    """

    def __init__(self, worker_count: int, stream: Optional[TextIO] = None,
                 interval: float = 1.0):
        if worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        self.worker_count = worker_count
        self.stream = stream if stream is not None else sys.stderr
        self.interval = interval
        self.slots: List[float] = [0.0] * worker_count

    def update(self, sample: ProgressSample) -> None:
        self.slots[sample.slot] = sample.percent

    def render(self) -> str:
        return "".join(format_percent(pct, self.worker_count) for pct in self.slots)

    def draw(self) -> None:
        self.stream.write("\r" + self.render())
        self.stream.flush()

    def run(self, channel: queue.Queue, stop_event: threading.Event) -> None:
        """Consume samples until the channel is closed or the run is stopped."""
        next_draw = time.monotonic() + self.interval
        while not stop_event.is_set():
            try:
                sample = channel.get(timeout=max(0.0, next_draw - time.monotonic()))
            except queue.Empty:
                sample = None

            if sample is END_OF_STREAM:
                break
            if sample is not None:
                self.update(sample)

            if time.monotonic() >= next_draw:
                self.draw()
                next_draw = time.monotonic() + self.interval

        self.draw()
        self.stream.write("\n")
        self.stream.flush()
