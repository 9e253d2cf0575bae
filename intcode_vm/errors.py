"""
Intcode VM - Error Types

Every failure the interpreter can surface derives from IntcodeError so a
driver can catch the whole family in one place. None of these are retried
inside the VM: they mean a malformed program or a caller-side bug.

Constructor arguments are passed through to Exception so errors survive
copy/pickle (a faulted interpreter can still be cloned).
"""


class IntcodeError(Exception):
    """Base class for all interpreter failures."""
    pass


class MalformedProgram(IntcodeError):
    """Raised when program source contains no usable integers."""
    pass


class NegativeAddress(IntcodeError):
    """Raised when a read or write resolves to an address below zero."""

    def __init__(self, address: int, write: bool = False):
        super().__init__(address, write)
        self.address = address
        self.write = write

    def __str__(self) -> str:
        kind = "Writing" if self.write else "Reading"
        return f"{kind} memory at negative address {self.address}"


class InvalidWriteMode(IntcodeError):
    """Raised when immediate mode is used as a write target."""

    def __init__(self, mode):
        super().__init__(mode)
        self.mode = mode

    def __str__(self) -> str:
        return f"Parameter mode {self.mode!s} cannot be written to"


class UnknownOpcode(IntcodeError):
    """Raised when the opcode word does not name a known operation."""

    def __init__(self, opcode: int, at: int):
        super().__init__(opcode, at)
        self.opcode = opcode
        self.at = at

    def __str__(self) -> str:
        return f"Unsupported operation {self.opcode} at {self.at}"


class InvalidParameterMode(IntcodeError):
    """Raised when a mode digit is not 0, 1 or 2."""

    def __init__(self, mode: int, at: int):
        super().__init__(mode, at)
        self.mode = mode
        self.at = at

    def __str__(self) -> str:
        return f"Unknown parameter mode {self.mode} at {self.at}"


class InputExhausted(IntcodeError):
    """Raised by batch helpers when the program stalls waiting for input."""
    pass


class InterpreterFaulted(IntcodeError):
    """Raised by run() after a previous run() aborted with an error.

    The state left behind by an aborted instruction is not safely
    resumable, so the interpreter refuses to continue. The original
    error is kept on ``cause``.
    """

    def __init__(self, cause: IntcodeError):
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return f"Interpreter faulted earlier: {self.cause}"
