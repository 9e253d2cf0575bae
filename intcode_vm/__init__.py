"""
Intcode VM
==========
A resumable interpreter for the Intcode stored-program instruction set.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌─────────────┐    ┌──────────────┐
    │  Source  │───>│  Loader  │───>│ Interpreter │<──>│ Caller/driver│
    │ (1,2,..) │    │ (words)  │    │ regs + mem  │    │ input/output │
    └──────────┘    └──────────┘    └─────────────┘    └──────────────┘

    - loader.py:        permissive comma-separated integer parser
    - cpu/decoder.py:   opcode word -> operation + parameter modes
    - cpu/alu.py:       signed 64-bit arithmetic and compares
    - cpu/regs.py:      IP, relative base, step counter
    - mem/memory.py:    sparse, unbounded, zero-default memory
    - periph/io.py:     input queue, cumulative + drainable output logs
    - interpreter.py:   fetch/decode/execute with suspend/resume
    - disassembler.py:  linear-sweep program listing
"""

__version__ = "0.1.0"

from .errors import (
    IntcodeError, MalformedProgram, NegativeAddress, InvalidWriteMode,
    UnknownOpcode, InvalidParameterMode, InputExhausted, InterpreterFaulted,
)
from .cpu.decoder import ParamMode
from .loader import parse_program, format_program
from .interpreter import (
    Interpreter, Event, State, HALTED, WAITING_FOR_INPUT, OutputProduced,
)
from .disassembler import Disassembler, DisassembledInstruction
