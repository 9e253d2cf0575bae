"""
Intcode VM - Opcode Decoder / Dispatch Table

An opcode word packs the operation and the addressing modes of its
parameters in decimal digits:

    ABCDE
      |||
      |++-- DE: operation (word % 100)
      +---- C:  mode of parameter 1
     B:         mode of parameter 2
    A:          mode of parameter 3

Missing mode digits are 0 (position).

Addressing modes:
  POSITION   (0)  parameter is an address to dereference
  IMMEDIATE  (1)  parameter is the value itself (read-only)
  RELATIVE   (2)  parameter is an offset from the relative base
"""

from enum import IntEnum
from typing import NamedTuple, Optional, Tuple

from ..errors import UnknownOpcode, InvalidParameterMode


class ParamMode(IntEnum):
    POSITION = 0
    IMMEDIATE = 1
    RELATIVE = 2

    def __str__(self) -> str:
        return self.name


# ──────────────────────────────────────────────
# Opcode table
# ──────────────────────────────────────────────
# Format: opcode -> (mnemonic, param_count, written_param_index)
# written_param_index is the 0-based parameter resolved as a write
# address, or None when the instruction writes nothing.

ADD = 1
MUL = 2
IN = 3
OUT = 4
JNZ = 5
JZ = 6
LT = 7
EQ = 8
ARB = 9
HALT = 99

OPCODES = {
    ADD:  ('ADD',  3, 2),
    MUL:  ('MUL',  3, 2),
    IN:   ('IN',   1, 0),
    OUT:  ('OUT',  1, None),
    JNZ:  ('JNZ',  2, None),   # jump-if-true
    JZ:   ('JZ',   2, None),   # jump-if-false
    LT:   ('LT',   3, 2),
    EQ:   ('EQ',   3, 2),
    ARB:  ('ARB',  1, None),   # adjust relative base
    HALT: ('HALT', 0, None),
}


class Decoded(NamedTuple):
    """One decoded opcode word."""
    opcode: int
    mnemonic: str
    modes: Tuple[ParamMode, ...]
    write_index: Optional[int]

    @property
    def length(self) -> int:
        """Words occupied by the instruction, opcode included."""
        return 1 + len(self.modes)


def get_op_code(word: int) -> int:
    return word % 100


def get_param_mode(word: int, index: int, at: int = 0) -> ParamMode:
    """Mode digit for 0-based parameter ``index`` of ``word``."""
    digit = word // (10 ** (index + 2)) % 10
    try:
        return ParamMode(digit)
    except ValueError:
        raise InvalidParameterMode(digit, at) from None


def decode_opcode(word: int, at: int) -> Decoded:
    """Decode the opcode word found at address ``at``.

    Negative words never decode; Python's modulo would otherwise map
    e.g. -1 onto 99.
    """
    if word < 0:
        raise UnknownOpcode(word, at)
    op = get_op_code(word)
    if op not in OPCODES:
        raise UnknownOpcode(op, at)
    mnem, count, write_index = OPCODES[op]
    modes = tuple(get_param_mode(word, i, at) for i in range(count))
    return Decoded(op, mnem, modes, write_index)
