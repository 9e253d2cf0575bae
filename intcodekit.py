#!/usr/bin/env python3
"""
intcodekit - Intcode VM command line
====================================

    intcodekit run     - Execute a program, feeding input values
    intcodekit disasm  - Print a linear-sweep listing of a program

Usage:
    python intcodekit.py <command> [options]
    python intcodekit.py <command> --help

Examples:
    python intcodekit.py run prog.txt --input 1
    python intcodekit.py run prog.txt --input 5,7 --patch 1=12 --patch 2=2
    python intcodekit.py run prog.txt --interactive --trace -v --log-dir logs
    python intcodekit.py disasm prog.txt --range 0-40
    echo "104,42,99" | python intcodekit.py run -

Exit codes:
    0  program halted
    1  program error (bad source, negative address, unknown opcode, ...)
    2  internal error
    3  program stalled waiting for input
    4  --max-steps reached
"""

import argparse
import logging
import sys
import os

# Allow running from project root or as module
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from intcode_vm import __version__, Interpreter, Disassembler, IntcodeError, parse_program
from intcode_vm.interpreter import State
from intcode_vm.log_setup import setup_logging

EXIT_OK = 0
EXIT_PROGRAM_ERROR = 1
EXIT_INTERNAL_ERROR = 2
EXIT_STALLED = 3
EXIT_TIMEOUT = 4


def parse_int_arg(value: str) -> int:
    """Parse an integer argument that may be hex (0x...) or decimal."""
    value = value.strip()
    if value.lower().startswith(("0x", "-0x")):
        return int(value, 16)
    return int(value)


def parse_input_values(values) -> list:
    """Flatten repeated/comma-separated --input values into ints."""
    result = []
    for chunk in values or []:
        for field in chunk.split(","):
            field = field.strip()
            if field:
                result.append(parse_int_arg(field))
    return result


def parse_patch(value: str) -> tuple:
    """Parse ADDR=VALUE."""
    if "=" not in value:
        raise argparse.ArgumentTypeError(f"expected ADDR=VALUE, got {value!r}")
    addr, val = value.split("=", 1)
    try:
        return parse_int_arg(addr), parse_int_arg(val)
    except ValueError:
        raise argparse.ArgumentTypeError(f"bad patch {value!r}") from None


def parse_range(value: str) -> tuple:
    """Parse START-END (end exclusive)."""
    start, _, end = value.partition("-")
    try:
        return parse_int_arg(start), parse_int_arg(end) if end else None
    except ValueError:
        raise argparse.ArgumentTypeError(f"bad range {value!r}") from None


def read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


# ══════════════════════════════════════════════
# Commands
# ══════════════════════════════════════════════

def cmd_run(args, log) -> int:
    vm = Interpreter.from_source(read_source(args.program), trace=args.trace)
    for addr, value in args.patch:
        log.debug("Patching [%d] = %d", addr, value)
        vm.write_memory(addr, value)
    vm.provide_input_many(parse_input_values(args.input))

    while True:
        event = vm.run(max_steps=args.max_steps)
        if event.is_output:
            if not args.quiet:
                print(event.value)
            continue
        if event.halted:
            break
        if event.state is State.TIMEOUT:
            print(f"Stopped after {args.max_steps} instructions at IP={vm.ip}",
                  file=sys.stderr)
            return EXIT_TIMEOUT
        if event.waiting:
            if not args.interactive:
                print(f"Program is waiting for input at IP={vm.ip}", file=sys.stderr)
                return EXIT_STALLED
            try:
                line = input("input> ")
            except EOFError:
                print(f"\nInput closed at IP={vm.ip}", file=sys.stderr)
                return EXIT_STALLED
            vm.provide_input_many(parse_input_values([line]))

    if args.quiet:
        print(",".join(str(v) for v in vm.output_log()))
    if args.dump:
        print(",".join(str(v) for v in vm.dump_memory()))
    if args.trace:
        print(vm.get_trace(), file=sys.stderr)
    log.info("Halted after %d instructions, %d output(s)",
             vm.regs.steps, len(vm.output_log()))
    return EXIT_OK


def cmd_disasm(args, log) -> int:
    program = parse_program(read_source(args.program))
    start, end = args.range if args.range else (0, None)
    for row in Disassembler().disassemble(program, start=start, end=end):
        print(row.format())
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intcodekit",
        description="Intcode VM toolkit: run and disassemble Intcode programs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version",
                        version=f"intcodekit {__version__}")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase console log verbosity (-v, -vv)")
    parser.add_argument("--log-dir", default=None,
                        help="Write a timestamped DEBUG log file into this directory")

    sub = parser.add_subparsers(dest="command", metavar="command")

    p_run = sub.add_parser("run", help="Execute a program")
    p_run.add_argument("program", help="Program source file ('-' for stdin)")
    p_run.add_argument("--input", "-i", action="append",
                       help="Input values, comma separated; may repeat")
    p_run.add_argument("--patch", type=parse_patch, action="append", default=[],
                       metavar="ADDR=VALUE", help="Poke memory before running")
    p_run.add_argument("--interactive", action="store_true",
                       help="Prompt on stdin when the program needs input")
    p_run.add_argument("--max-steps", type=int, default=None,
                       help="Give up after this many instructions between events")
    p_run.add_argument("--trace", action="store_true",
                       help="Print an instruction trace to stderr on exit")
    p_run.add_argument("--dump", action="store_true",
                       help="Print final memory as comma separated values")
    p_run.add_argument("--quiet", "-q", action="store_true",
                       help="Print outputs once, comma separated, at halt")

    p_dis = sub.add_parser("disasm", help="Disassemble a program")
    p_dis.add_argument("program", help="Program source file ('-' for stdin)")
    p_dis.add_argument("--range", type=parse_range, default=None,
                       metavar="START-END", help="Address range (end exclusive)")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return EXIT_OK

    if args.verbose >= 2:
        console_level = logging.DEBUG
    elif args.verbose == 1:
        console_level = logging.INFO
    else:
        console_level = logging.WARNING
    log = setup_logging("intcode_vm", console_level=console_level,
                        log_dir=args.log_dir)

    commands = {"run": cmd_run, "disasm": cmd_disasm}
    try:
        return commands[args.command](args, log)
    except FileNotFoundError:
        print(f"Error: File not found: {args.program}", file=sys.stderr)
        return EXIT_PROGRAM_ERROR
    except IntcodeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_PROGRAM_ERROR
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_PROGRAM_ERROR
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return EXIT_INTERNAL_ERROR


if __name__ == "__main__":
    sys.exit(main())
