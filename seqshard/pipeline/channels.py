"""
Queue helpers shared by the pipeline tasks.

Every blocking put/get waits at most ``poll_interval`` seconds at a time and
re-checks the run's stop event, so a task blocked on a full or empty channel
notices when a sibling task has failed.
"""

import queue
import threading
from typing import Any


class PipelineAborted(Exception):
    """Raised inside a task that stops because another task failed."""
    pass


class _EndOfStream:
    def __repr__(self) -> str:
        return "END_OF_STREAM"


# Sentinel closing a channel
END_OF_STREAM = _EndOfStream()


def put(channel: queue.Queue, item: Any, stop_event: threading.Event,
        poll_interval: float = 0.1) -> None:
    """Put ``item`` on ``channel``, blocking while it is full."""
    while True:
        if stop_event.is_set():
            raise PipelineAborted()
        try:
            channel.put(item, timeout=poll_interval)
            return
        except queue.Full:
            continue


def get(channel: queue.Queue, stop_event: threading.Event,
        poll_interval: float = 0.1) -> Any:
    """Take the next item from ``channel``, blocking while it is empty."""
    while True:
        if stop_event.is_set():
            raise PipelineAborted()
        try:
            return channel.get(timeout=poll_interval)
        except queue.Empty:
            continue


def close(channel: queue.Queue, stop_event: threading.Event,
          poll_interval: float = 0.1) -> None:
    put(channel, END_OF_STREAM, stop_event, poll_interval)


def offer(channel: queue.Queue, item: Any) -> bool:
    """Put ``item`` on ``channel`` only if there is room right now."""
    try:
        channel.put_nowait(item)
    except queue.Full:
        return False
    return True
