"""
Intcode VM - Register Set

Register model:
  IP     - instruction pointer, starts at 0, never negative
  RB     - relative base, moved only by opcode 9 (ARB)
  steps  - instructions executed since construction/reset
"""


class Registers:
    """Interpreter register set."""

    __slots__ = ('IP', 'RB', 'steps')

    def __init__(self):
        self.IP: int = 0      # Instruction pointer
        self.RB: int = 0      # Relative base
        self.steps: int = 0   # Executed instruction counter

    def advance(self, count: int):
        """Move IP past the current instruction."""
        self.IP += count

    def jump(self, target: int):
        """Overwrite IP with a jump target."""
        self.IP = target

    def adjust_base(self, delta: int):
        """ARB: add delta to the relative base."""
        self.RB += delta

    # --- Display ---

    def display(self) -> str:
        """Format register state for trace/debug output."""
        return f"IP={self.IP:<6d} RB={self.RB:<6d} N={self.steps}"

    def reset(self):
        """Return to power-on state."""
        self.IP = 0
        self.RB = 0
        self.steps = 0
