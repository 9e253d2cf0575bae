"""
Intcode VM - Decoder, ALU, Register, Memory and I/O Unit Tests

Covers the building blocks the interpreter is assembled from:
  - Opcode word splitting (operation + mode digits)
  - Signed 64-bit wraparound
  - Sparse memory: zero default, highest-touched tracking, snapshots
  - Input queue and the two output logs
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from intcode_vm.cpu import alu
from intcode_vm.cpu.decoder import (
    ParamMode, decode_opcode, get_op_code, get_param_mode, OPCODES,
)
from intcode_vm.cpu.regs import Registers
from intcode_vm.mem.memory import Memory
from intcode_vm.periph.io import IOChannels
from intcode_vm.errors import UnknownOpcode, InvalidParameterMode, NegativeAddress


class TestDecoder:

    def test_op_code_extraction(self):
        assert get_op_code(1002) == 2
        assert get_op_code(2) == 2
        assert get_op_code(99) == 99

    def test_param_modes(self):
        assert get_param_mode(1002, 0) is ParamMode.POSITION
        assert get_param_mode(1002, 1) is ParamMode.IMMEDIATE
        assert get_param_mode(1002, 2) is ParamMode.POSITION
        assert get_param_mode(21101, 2) is ParamMode.RELATIVE

    def test_decode_full_word(self):
        d = decode_opcode(21101, 0)
        assert d.opcode == 1
        assert d.mnemonic == 'ADD'
        assert d.modes == (ParamMode.IMMEDIATE, ParamMode.IMMEDIATE, ParamMode.RELATIVE)
        assert d.write_index == 2
        assert d.length == 4

    def test_decode_halt_ignores_extra_digits(self):
        d = decode_opcode(11199, 5)
        assert d.mnemonic == 'HALT'
        assert d.modes == ()
        assert d.length == 1

    def test_every_opcode_decodes(self):
        for op, (mnem, count, _) in OPCODES.items():
            d = decode_opcode(op, 0)
            assert d.mnemonic == mnem
            assert len(d.modes) == count

    @pytest.mark.parametrize("word", [0, 10, 98, 100])
    def test_unknown_opcode(self, word):
        with pytest.raises(UnknownOpcode) as exc:
            decode_opcode(word, 12)
        assert exc.value.at == 12

    def test_negative_word(self):
        with pytest.raises(UnknownOpcode) as exc:
            decode_opcode(-99, 3)
        assert exc.value.opcode == -99

    def test_bad_mode_digit(self):
        with pytest.raises(InvalidParameterMode) as exc:
            decode_opcode(1904, 7)
        assert exc.value.mode == 9
        assert exc.value.at == 7


class TestALU:

    def test_wrap64(self):
        assert alu.wrap64(2 ** 63) == -2 ** 63
        assert alu.wrap64(-2 ** 63 - 1) == 2 ** 63 - 1
        assert alu.wrap64(-5) == -5
        assert alu.wrap64(12345) == 12345

    def test_add_overflow(self):
        assert alu.add(alu.MAX_WORD, 1) == alu.MIN_WORD

    def test_mul(self):
        assert alu.mul(34915192, 34915192) == 1219070632396864
        assert alu.mul(-3, 4) == -12

    def test_compares(self):
        assert alu.less_than(-1, 0) == 1
        assert alu.less_than(0, 0) == 0
        assert alu.equals(3, 3) == 1
        assert alu.equals(3, -3) == 0


class TestRegisters:

    def test_power_on_state(self):
        r = Registers()
        assert (r.IP, r.RB, r.steps) == (0, 0, 0)

    def test_jump_advance_adjust(self):
        r = Registers()
        r.advance(4)
        r.adjust_base(-3)
        assert r.IP == 4
        assert r.RB == -3
        r.jump(10)
        assert r.IP == 10
        assert "IP=10" in r.display()
        assert "RB=-3" in r.display()

    def test_reset(self):
        r = Registers()
        r.jump(8)
        r.adjust_base(5)
        r.steps = 3
        r.reset()
        assert (r.IP, r.RB, r.steps) == (0, 0, 0)


class TestMemory:

    def test_load_and_read(self):
        mem = Memory([1, 2, 3])
        assert mem.read(0) == 1
        assert mem.read(2) == 3
        assert mem.read(1000) == 0

    def test_highest_address_tracks_reads_and_writes(self):
        mem = Memory()
        assert mem.highest_address == -1
        assert mem.dump() == []
        mem.read(5)
        assert mem.dump() == [0] * 6
        mem.write(8, 4)
        assert mem.dump() == [0] * 8 + [4]
        assert len(mem) == 9

    def test_peek_does_not_extend_range(self):
        mem = Memory([7, 8])
        assert mem.peek(1) == 8
        assert mem.peek(500) == 0
        assert mem.highest_address == 1
        assert mem.dump() == [7, 8]
        with pytest.raises(NegativeAddress):
            mem.peek(-1)

    def test_far_write_is_sparse(self):
        mem = Memory()
        mem.write(10 ** 12, 7)
        assert mem.read(10 ** 12) == 7
        assert len(mem.snapshot()) == 1

    def test_negative_addresses(self):
        mem = Memory()
        with pytest.raises(NegativeAddress):
            mem.read(-1)
        with pytest.raises(NegativeAddress) as exc:
            mem.write(-2, 0)
        assert exc.value.write

    def test_writes_wrap(self):
        mem = Memory()
        mem.write(0, 2 ** 64 + 3)
        assert mem.read(0) == 3

    def test_snapshot_diff(self):
        mem = Memory([1, 2, 3])
        before = mem.snapshot()
        mem.write(1, 20)
        mem.write(5, 6)
        changes = Memory.diff_snapshots(before, mem.snapshot())
        assert changes == {1: (2, 20), 5: (0, 6)}

    def test_clear(self):
        mem = Memory([1, 2])
        mem.clear()
        assert mem.dump() == []

    def test_dump_text(self):
        text = Memory([1, 2, 3]).dump_text()
        assert text.split() == ['000000', '1', '2', '3']

    def test_dump_text_wraps_lines(self):
        lines = Memory(range(10)).dump_text(per_line=4).split('\n')
        assert len(lines) == 3
        assert lines[1].split()[0] == '000004'


class TestIOChannels:

    def test_fifo(self):
        io = IOChannels()
        io.inject(1)
        io.inject_many([2, 3])
        assert io.pending_input == [1, 2, 3]
        assert [io.receive(), io.receive(), io.receive()] == [1, 2, 3]
        assert io.receive() is None

    def test_logs_cleared_independently(self):
        io = IOChannels()
        io.transmit(4)
        io.transmit(5)
        assert io.drain() == [4, 5]
        assert io.drain() == []
        assert io.output_log == [4, 5]

    def test_reset(self):
        io = IOChannels()
        io.inject(1)
        io.transmit(2)
        io.reset()
        assert io.pending_input == []
        assert io.output_log == []
        assert io.drain() == []
