"""
Intcode VM - Program Source Loader

Program source is a line (or stream) of base-10 signed integers separated
by commas. Parsing is permissive: whitespace around fields is ignored and
any field that is not a signed 64-bit integer is dropped as noise.
"""

import logging
import re
from typing import Iterable, List, Union

from .cpu.alu import MIN_WORD, MAX_WORD
from .errors import MalformedProgram

log = logging.getLogger(__name__)

_INT_FIELD = re.compile(r'[+-]?\d+')


def parse_program(source: Union[str, bytes]) -> List[int]:
    """Parse comma-separated integers into a program.

    Raises MalformedProgram if nothing in the source parses.
    """
    if isinstance(source, (bytes, bytearray)):
        source = source.decode('utf-8', errors='replace')

    program = []
    skipped = 0
    for field in source.split(','):
        field = field.strip()
        if not _INT_FIELD.fullmatch(field):
            if field:
                skipped += 1
            continue
        value = int(field)
        if not MIN_WORD <= value <= MAX_WORD:
            skipped += 1
            continue
        program.append(value)

    if not program:
        raise MalformedProgram("No integers found in program source")
    if skipped:
        log.debug("Skipped %d unparseable field(s) in program source", skipped)
    return program


def format_program(program: Iterable[int]) -> str:
    """Inverse of parse_program: comma-joined decimal text."""
    return ','.join(str(v) for v in program)
