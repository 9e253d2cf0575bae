"""
Intcode VM - ALU Operations

Cells are signed 64-bit words. Python ints are unbounded, so every result
is folded back into the signed 64-bit range with two's complement wrap,
the same way a 64-bit machine word behaves on overflow.
"""

WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1
SIGN_BIT = 1 << (WORD_BITS - 1)

MAX_WORD = SIGN_BIT - 1
MIN_WORD = -SIGN_BIT


def wrap64(value: int) -> int:
    """Fold an arbitrary int into the signed 64-bit range."""
    value &= WORD_MASK
    if value & SIGN_BIT:
        return value - (1 << WORD_BITS)
    return value


def add(a: int, b: int) -> int:
    """Opcode 1."""
    return wrap64(a + b)


def mul(a: int, b: int) -> int:
    """Opcode 2."""
    return wrap64(a * b)


def less_than(a: int, b: int) -> int:
    """Opcode 7: 1 if a < b else 0."""
    return 1 if a < b else 0


def equals(a: int, b: int) -> int:
    """Opcode 8: 1 if a == b else 0."""
    return 1 if a == b else 0
