"""
Intcode Disassembler
====================
Linear-sweep listing of an Intcode program.

API Usage:
    from intcode_vm.disassembler import Disassembler

    dis = Disassembler()
    for row in dis.disassemble([1002, 4, 3, 4, 33]):
        print(row.format())
    # 000000: 1002 4 3 4               MUL [4], #3, [4]
    # 000004: 33                       DATA 33

Intcode is self-modifying and freely mixes code and data, so a static
listing is only a best guess: words that do not decode (or whose operands
would run off the end of the program) are emitted as DATA rows one word
at a time and the sweep continues from the next word.

Operand syntax:
    [12]      position mode, address 12
    #5        immediate value 5
    [rb+3]    relative mode, relative base + 3
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .cpu.decoder import ParamMode, decode_opcode, JNZ, JZ
from .errors import IntcodeError
from .loader import parse_program


def format_operand(mode: ParamMode, raw: int) -> str:
    """Render one raw parameter in listing syntax."""
    if mode is ParamMode.IMMEDIATE:
        return f"#{raw}"
    if mode is ParamMode.RELATIVE:
        sign = '-' if raw < 0 else '+'
        return f"[rb{sign}{abs(raw)}]"
    return f"[{raw}]"


@dataclass
class DisassembledInstruction:
    """One decoded instruction (or DATA word) with formatting data."""
    address: int
    words: List[int]
    mnemonic: str
    operands: List[str] = field(default_factory=list)
    comment: str = ""

    @property
    def length(self) -> int:
        return len(self.words)

    @property
    def is_data(self) -> bool:
        return self.mnemonic == 'DATA'

    @property
    def word_str(self) -> str:
        return " ".join(str(w) for w in self.words)

    def format(self, word_width: int = 24) -> str:
        """Format as a single listing line."""
        asm = f"{self.mnemonic} {', '.join(self.operands)}".strip()
        line = f"{self.address:06d}: {self.word_str.ljust(word_width)} {asm}"
        if self.comment:
            line += f"  ; {self.comment}"
        return line


class Disassembler:
    """Intcode program disassembler."""

    def decode_one(self, program: Sequence[int],
                   address: int) -> DisassembledInstruction:
        """Decode the instruction at ``address`` of ``program``."""
        word = program[address]
        try:
            decoded = decode_opcode(word, address)
        except IntcodeError:
            return self._data(word, address)

        end = address + decoded.length
        if end > len(program):
            return self._data(word, address)

        raw = list(program[address + 1:end])
        operands = [format_operand(mode, value)
                    for mode, value in zip(decoded.modes, raw)]

        comment = ""
        if decoded.opcode in (JNZ, JZ) and decoded.modes[1] is ParamMode.IMMEDIATE:
            comment = f"-> {raw[1]:06d}"
        elif decoded.write_index is not None \
                and decoded.modes[decoded.write_index] is ParamMode.IMMEDIATE:
            comment = "invalid write mode"

        return DisassembledInstruction(
            address=address,
            words=[word] + raw,
            mnemonic=decoded.mnemonic,
            operands=operands,
            comment=comment,
        )

    def disassemble(self, program: Sequence[int], start: int = 0,
                    end: Optional[int] = None) -> List[DisassembledInstruction]:
        """Sweep ``program[start:end]`` and return every row."""
        if end is None or end > len(program):
            end = len(program)
        rows = []
        addr = start
        while addr < end:
            row = self.decode_one(program, addr)
            rows.append(row)
            addr += row.length
        return rows

    def disassemble_source(self, source: str) -> List[DisassembledInstruction]:
        """Parse comma-separated program text and disassemble it."""
        return self.disassemble(parse_program(source))

    def listing(self, program: Sequence[int]) -> str:
        return "\n".join(row.format() for row in self.disassemble(program))

    @staticmethod
    def _data(word: int, address: int) -> DisassembledInstruction:
        return DisassembledInstruction(address=address, words=[word],
                                       mnemonic='DATA', operands=[str(word)])
