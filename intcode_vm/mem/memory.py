"""
Intcode VM - Sparse Unbounded Memory

Memory is a dict keyed by address instead of a flat array, so programs can
use addresses far beyond their own length (relative-base scratch space,
large data tables) without pre-sizing. Unset cells read as 0.

The highest address ever read or written is tracked so dump() can
materialize a dense view covering everything the program touched.
"""

from typing import Dict, Iterable, List, Tuple

from ..cpu.alu import wrap64
from ..errors import NegativeAddress


class Memory:
    """Sparse memory of signed 64-bit cells."""

    def __init__(self, program: Iterable[int] = ()):
        self._cells: Dict[int, int] = {}
        self._highest = -1
        self.load_program(program)

    # --- Core read/write ---

    def read(self, addr: int) -> int:
        """Read the cell at addr, 0 if never written."""
        if addr < 0:
            raise NegativeAddress(addr)
        if addr > self._highest:
            self._highest = addr
        return self._cells.get(addr, 0)

    def write(self, addr: int, value: int):
        if addr < 0:
            raise NegativeAddress(addr, write=True)
        if addr > self._highest:
            self._highest = addr
        self._cells[addr] = wrap64(value)

    def peek(self, addr: int) -> int:
        """Like read(), but leaves the touched range alone."""
        if addr < 0:
            raise NegativeAddress(addr)
        return self._cells.get(addr, 0)

    # --- Bulk load ---

    def load_program(self, program: Iterable[int]):
        """Place program words at addresses 0..len-1."""
        for addr, value in enumerate(program):
            self.write(addr, value)

    def clear(self):
        self._cells.clear()
        self._highest = -1

    # --- Inspection ---

    @property
    def highest_address(self) -> int:
        """Highest address ever touched, -1 for untouched memory."""
        return self._highest

    def dump(self) -> List[int]:
        """Dense copy from 0 through the highest touched address."""
        return [self._cells.get(addr, 0) for addr in range(self._highest + 1)]

    def __len__(self) -> int:
        return self._highest + 1

    def snapshot(self) -> Dict[int, int]:
        """Copy of every materialized cell."""
        return dict(self._cells)

    @staticmethod
    def diff_snapshots(snap_a: Dict[int, int],
                       snap_b: Dict[int, int]) -> Dict[int, Tuple[int, int]]:
        """Compare two snapshots, return {addr: (old, new)} for changes."""
        changes = {}
        for addr in sorted(set(snap_a) | set(snap_b)):
            old = snap_a.get(addr, 0)
            new = snap_b.get(addr, 0)
            if old != new:
                changes[addr] = (old, new)
        return changes

    def dump_text(self, start: int = 0, length: int = None,
                  per_line: int = 8) -> str:
        """Produce a decimal dump of memory for debugging."""
        if length is None:
            length = max(self._highest + 1 - start, 0)
        lines = []
        for offset in range(0, length, per_line):
            addr = start + offset
            count = min(per_line, length - offset)
            words = ' '.join(f'{self._cells.get(addr + i, 0):>8d}'
                             for i in range(count))
            lines.append(f'{addr:06d}  {words}')
        return '\n'.join(lines)
