"""Queues that carry progress from download workers to the interface."""

from __future__ import annotations

import queue
from dataclasses import dataclass, field
from typing import Any


@dataclass
class GuiChannels:
    """The four message channels shared by the interface and a worker."""

    dl_count_channel: queue.Queue[int] = field(default_factory=queue.Queue)
    post_count_channel: queue.Queue[int] = field(default_factory=queue.Queue)
    dl_status_channel: queue.Queue[bool] = field(default_factory=queue.Queue)
    finished_status_channel: queue.Queue[bool] = field(default_factory=queue.Queue)

    @staticmethod
    def drain_latest(queue_: queue.Queue[Any]) -> Any:
        """Empty the queue and return the last item in it, or None if it was empty."""
        latest = None
        while True:
            try:
                latest = queue_.get_nowait()
            except queue.Empty:
                return latest