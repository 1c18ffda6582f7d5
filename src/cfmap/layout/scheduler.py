"""
Cooperative tick scheduler.

Stands in for the host's animation loop: callbacks are queued and then run
in FIFO order when the host calls `run_pending()` once per frame. Nothing
here is threaded; a callback always runs to completion before the next.
"""

import logging
from collections import deque
from typing import Callable, Deque

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TickScheduler:
    def __init__(self):
        self._queue: Deque[Callback] = deque()
        self.frames = 0

    @property
    def pending(self) -> int:
        return len(self._queue)

    def schedule(self, callback: Callback) -> None:
        self._queue.append(callback)

    def run_pending(self) -> int:
        """
        Run the callbacks queued before this call (one frame).

        Callbacks scheduled while the frame runs wait for the next frame.
        Returns the number of callbacks executed.
        """
        batch = len(self._queue)
        for _ in range(batch):
            self._queue.popleft()()
        self.frames += 1
        return batch

    def drain(self, max_frames: int) -> int:
        """Run frames until the queue is empty or max_frames is reached."""
        frames = 0
        while self._queue and frames < max_frames:
            self.run_pending()
            frames += 1
        if self._queue:
            logger.debug(f"Scheduler drain stopped with {len(self._queue)} callbacks pending")
        return frames

    def clear(self) -> None:
        self._queue.clear()
