"""
Intcode VM - Input/Output Channels

The interpreter never touches a real device. Input is a FIFO the caller
fills ahead of time; opcode 3 pops from it and stalls when it is empty.
Every value emitted by opcode 4 lands in two logs:

  output_log  - cumulative, never cleared (introspection, tests)
  drain_log   - cleared by drain(), for drivers that consume output in
                batches between stalls

Both logs record the same stream but are cleared independently.
"""

from collections import deque
from typing import Deque, Iterable, List, Optional

from ..cpu.alu import wrap64


class IOChannels:
    """Input queue plus cumulative and drainable output logs."""

    def __init__(self):
        self._rx_queue: Deque[int] = deque()
        self.output_log: List[int] = []
        self._drain_log: List[int] = []

    # --- Input side ---

    def inject(self, value: int):
        """Append one value to the input queue."""
        self._rx_queue.append(wrap64(value))

    def inject_many(self, values: Iterable[int]):
        for value in values:
            self.inject(value)

    def receive(self) -> Optional[int]:
        """Pop the oldest queued input, None when the queue is empty."""
        if self._rx_queue:
            return self._rx_queue.popleft()
        return None

    @property
    def pending_input(self) -> List[int]:
        return list(self._rx_queue)

    # --- Output side ---

    def transmit(self, value: int):
        """Record one output value in both logs."""
        self.output_log.append(value)
        self._drain_log.append(value)

    def drain(self) -> List[int]:
        """Return everything output since the last drain and clear it."""
        out = self._drain_log
        self._drain_log = []
        return out

    def reset(self):
        self._rx_queue.clear()
        self.output_log.clear()
        self._drain_log.clear()
