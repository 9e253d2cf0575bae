"""
Intcode VM - Main Interpreter Class

This is the top-level class that integrates:
  - Registers (cpu/regs.py)
  - Sparse memory (mem/memory.py)
  - Opcode decoder (cpu/decoder.py)
  - ALU operations (cpu/alu.py)
  - Input/output channels (periph/io.py)

Execution model:
  1. Fetch opcode word at IP
  2. Decode operation + parameter modes
  3. Resolve parameters (read values, write addresses)
  4. Execute handler, update registers/memory
  5. Return to the caller on output, input stall or halt

run() never blocks and never loops past an event. The registers, memory
and queues are the whole continuation: a caller provides input and calls
run() again to resume exactly where execution stopped.

Stop states:
  - HALTED:             opcode 99 executed; sticky, IP stays on the 99
  - WAITING_FOR_INPUT:  opcode 3 found the input queue empty; IP unchanged
  - OUTPUT_PRODUCED:    opcode 4 emitted a value (Event.value)
  - BREAK:              breakpoint address reached
  - TIMEOUT:            max_steps instructions executed without an event
"""

import copy
import logging
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Sequence, Union

from .cpu import alu
from .cpu.decoder import (
    ParamMode, Decoded, decode_opcode,
    ADD, MUL, IN, OUT, JNZ, JZ, LT, EQ, ARB, HALT,
)
from .cpu.regs import Registers
from .disassembler import format_operand
from .errors import (
    IntcodeError, InvalidWriteMode, InvalidParameterMode, NegativeAddress, InputExhausted,
    InterpreterFaulted,
)
from .loader import parse_program
from .mem.memory import Memory
from .periph.io import IOChannels

log = logging.getLogger(__name__)


class State(Enum):
    HALTED = 'HALTED'
    WAITING_FOR_INPUT = 'WAITING_FOR_INPUT'
    OUTPUT_PRODUCED = 'OUTPUT_PRODUCED'
    BREAK = 'BREAK'
    TIMEOUT = 'TIMEOUT'


class Event(NamedTuple):
    """What a run() call stopped on. ``value`` is set for outputs only."""
    state: State
    value: Optional[int] = None

    @property
    def halted(self) -> bool:
        return self.state is State.HALTED

    @property
    def waiting(self) -> bool:
        return self.state is State.WAITING_FOR_INPUT

    @property
    def is_output(self) -> bool:
        return self.state is State.OUTPUT_PRODUCED


HALTED = Event(State.HALTED)
WAITING_FOR_INPUT = Event(State.WAITING_FOR_INPUT)
BREAK = Event(State.BREAK)
TIMEOUT = Event(State.TIMEOUT)


def OutputProduced(value: int) -> Event:
    return Event(State.OUTPUT_PRODUCED, value)


class Interpreter:
    """Resumable Intcode interpreter.

    Usage:
        vm = Interpreter.from_source("3,9,8,9,10,9,4,9,99,-1,8")
        vm.provide_input(8)
        event = vm.run()          # Event(OUTPUT_PRODUCED, 1)
        vm.run()                  # HALTED
    """

    def __init__(self, program: Sequence[int], trace: bool = False):
        self._program = tuple(alu.wrap64(v) for v in program)
        self.regs = Registers()
        self.mem = Memory(self._program)
        self.io = IOChannels()

        # Error that aborted an earlier run(); later runs refuse to continue
        self._fault: Optional[IntcodeError] = None

        self._breakpoints = set()
        # Breakpoint address just reported, stepped over on the next run()
        self._break_resume: Optional[int] = None

        self._trace = trace
        self._trace_output: List[str] = []

        self._dispatch = {
            ADD:  self._op_add,
            MUL:  self._op_mul,
            IN:   self._op_in,
            OUT:  self._op_out,
            JNZ:  self._op_jnz,
            JZ:   self._op_jz,
            LT:   self._op_lt,
            EQ:   self._op_eq,
            ARB:  self._op_arb,
            HALT: self._op_halt,
        }

    @classmethod
    def from_source(cls, source: Union[str, bytes], **kwargs) -> 'Interpreter':
        """Build an interpreter from comma-separated program text."""
        return cls(parse_program(source), **kwargs)

    # ══════════════════════════════════════════════
    # Input
    # ══════════════════════════════════════════════

    def provide_input(self, value: int):
        self.io.inject(value)

    def provide_input_many(self, values: Iterable[int]):
        self.io.inject_many(values)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[Event]:
        """Execute one instruction. Returns the Event it stopped on, else None."""
        if self._fault is not None:
            raise InterpreterFaulted(self._fault)

        ip = self.regs.IP
        if ip in self._breakpoints and ip != self._break_resume:
            self._break_resume = ip
            log.debug("Breakpoint hit at %d", ip)
            return BREAK

        executed = self.regs.steps
        try:
            event = self._execute(ip)
        except IntcodeError as e:
            self._fault = e
            log.warning("Run aborted at IP=%d: %s", ip, e)
            raise

        if self.regs.steps != executed:
            self._break_resume = None
        return event

    def run(self, max_steps: Optional[int] = None) -> Event:
        """Run until output, input stall, halt, breakpoint or max_steps.

        Returns immediately on the first output; never loops past it.
        """
        executed = 0
        while max_steps is None or executed < max_steps:
            event = self.step()
            if event is not None:
                return event
            executed += 1
        return TIMEOUT

    def run_ignoring_output(self, max_steps: Optional[int] = None) -> Event:
        """Keep running through outputs; stop on halt or input stall.

        Outputs stay available in output_log() / drain_output_log().
        """
        while True:
            event = self.run(max_steps)
            if not event.is_output:
                return event

    def run_to_completion(self, inputs: Iterable[int] = ()) -> List[int]:
        """Feed ``inputs``, run until halt and return the full output log.

        Raises InputExhausted if the program asks for more input than given.
        """
        self.provide_input_many(inputs)
        event = self.run_ignoring_output()
        while event.state is State.BREAK:
            event = self.run_ignoring_output()
        if event.waiting:
            raise InputExhausted(
                f"Program at IP={self.regs.IP} needs more input")
        return self.output_log()

    # ══════════════════════════════════════════════
    # Operand resolution
    # ══════════════════════════════════════════════

    def _load_param(self, ip: int, index: int, mode: ParamMode) -> int:
        """Resolve parameter ``index`` of the instruction at ip for reading."""
        raw = self.mem.read(ip + 1 + index)
        if mode is ParamMode.IMMEDIATE:
            return raw
        if mode is ParamMode.RELATIVE:
            return self.mem.read(self.regs.RB + raw)
        return self.mem.read(raw)

    def _store_target(self, ip: int, index: int, mode: ParamMode) -> int:
        """Resolve parameter ``index`` of the instruction at ip as a write address."""
        raw = self.mem.read(ip + 1 + index)
        return self._resolve_write(raw, mode)

    def _resolve_write(self, raw: int, mode: ParamMode) -> int:
        if mode is ParamMode.IMMEDIATE:
            raise InvalidWriteMode(mode)
        addr = raw + self.regs.RB if mode is ParamMode.RELATIVE else raw
        if addr < 0:
            raise NegativeAddress(addr, write=True)
        return addr

    # ══════════════════════════════════════════════
    # Instruction execution
    # ══════════════════════════════════════════════

    def _execute(self, ip: int) -> Optional[Event]:
        word = self.mem.read(ip)
        decoded = decode_opcode(word, ip)
        if self._trace:
            self._trace_line(ip, decoded)
        return self._dispatch[decoded.opcode](ip, decoded)

    def _trace_line(self, ip: int, decoded: Decoded):
        raw = [self.mem.read(ip + 1 + i) for i in range(len(decoded.modes))]
        operands = ', '.join(format_operand(m, r)
                             for m, r in zip(decoded.modes, raw))
        line = f"{ip:06d}: {decoded.mnemonic:4s} {operands:28s} {self.regs.display()}"
        self._trace_output.append(line)
        log.debug(line)

    def _binary(self, ip: int, d: Decoded, fn):
        a = self._load_param(ip, 0, d.modes[0])
        b = self._load_param(ip, 1, d.modes[1])
        dst = self._store_target(ip, 2, d.modes[2])
        self.mem.write(dst, fn(a, b))
        self.regs.advance(4)
        self.regs.steps += 1

    def _op_add(self, ip: int, d: Decoded):
        self._binary(ip, d, alu.add)

    def _op_mul(self, ip: int, d: Decoded):
        self._binary(ip, d, alu.mul)

    def _op_lt(self, ip: int, d: Decoded):
        self._binary(ip, d, alu.less_than)

    def _op_eq(self, ip: int, d: Decoded):
        self._binary(ip, d, alu.equals)

    def _op_in(self, ip: int, d: Decoded) -> Optional[Event]:
        dst = self._store_target(ip, 0, d.modes[0])
        value = self.io.receive()
        if value is None:
            log.debug("Waiting for input at IP=%d", ip)
            return WAITING_FOR_INPUT
        self.mem.write(dst, value)
        self.regs.advance(2)
        self.regs.steps += 1
        return None

    def _op_out(self, ip: int, d: Decoded) -> Event:
        value = self._load_param(ip, 0, d.modes[0])
        self.regs.advance(2)
        self.regs.steps += 1
        self.io.transmit(value)
        log.debug("Output %d at IP=%d", value, ip)
        return OutputProduced(value)

    def _jump_if(self, ip: int, d: Decoded, taken: bool):
        target = self._load_param(ip, 1, d.modes[1])
        if taken:
            if target < 0:
                raise NegativeAddress(target)
            self.regs.jump(target)
        else:
            self.regs.advance(3)
        self.regs.steps += 1

    def _op_jnz(self, ip: int, d: Decoded):
        self._jump_if(ip, d, self._load_param(ip, 0, d.modes[0]) != 0)

    def _op_jz(self, ip: int, d: Decoded):
        self._jump_if(ip, d, self._load_param(ip, 0, d.modes[0]) == 0)

    def _op_arb(self, ip: int, d: Decoded):
        self.regs.adjust_base(self._load_param(ip, 0, d.modes[0]))
        self.regs.advance(2)
        self.regs.steps += 1

    def _op_halt(self, ip: int, d: Decoded) -> Event:
        log.debug("Halted at IP=%d after %d instructions", ip, self.regs.steps)
        return HALTED

    # ══════════════════════════════════════════════
    # Memory / output inspection
    # ══════════════════════════════════════════════

    def write_memory(self, address: int, value: int,
                     mode: Union[ParamMode, int] = ParamMode.POSITION):
        """Poke a value into memory, e.g. to patch a program before running."""
        try:
            mode = ParamMode(mode)
        except ValueError:
            raise InvalidParameterMode(mode, address) from None
        addr = self._resolve_write(address, mode)
        self.mem.write(addr, value)

    def read_memory(self, address: int) -> int:
        """Inspect a cell without extending the dump_memory() range."""
        return self.mem.peek(address)

    def dump_memory(self) -> List[int]:
        return self.mem.dump()

    def output_log(self) -> List[int]:
        """Every output produced since construction."""
        return list(self.io.output_log)

    def drain_output_log(self) -> List[int]:
        """Outputs since the previous drain; clears them."""
        return self.io.drain()

    @property
    def ip(self) -> int:
        return self.regs.IP

    @property
    def relative_base(self) -> int:
        return self.regs.RB

    @property
    def pending_input(self) -> List[int]:
        return self.io.pending_input

    @property
    def faulted(self) -> bool:
        return self._fault is not None

    # ══════════════════════════════════════════════
    # Breakpoints
    # ══════════════════════════════════════════════

    def add_breakpoint(self, addr: int):
        """Stop with BREAK before executing the instruction at addr."""
        self._breakpoints.add(addr)

    def remove_breakpoint(self, addr: int):
        self._breakpoints.discard(addr)

    def clear_breakpoints(self):
        self._breakpoints.clear()

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Enable instruction trace logging."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    # ══════════════════════════════════════════════
    # Lifecycle
    # ══════════════════════════════════════════════

    def clone(self) -> 'Interpreter':
        """Independent deep copy: memory, registers, queues and logs."""
        return copy.deepcopy(self)

    def reset(self):
        """Reload the original program and clear all execution state."""
        self.regs.reset()
        self.mem.clear()
        self.mem.load_program(self._program)
        self.io.reset()
        self._fault = None
        self._break_resume = None
        self._breakpoints.clear()
        self._trace_output.clear()
