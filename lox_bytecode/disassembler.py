from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

from .errors import UnknownOpcodeError
from .opcodes import Opcode, decode, instruction_width, render
from .values import format_value

if TYPE_CHECKING:  # pragma: no cover
    from .chunk import Chunk

ILLEGAL_INSTRUCTION = "Illegal Instruction"
SAME_LINE = "   |"


def disassemble_chunk(chunk: Chunk, name: str) -> str:
    """Render every instruction in `chunk`, one per line, under a `== name ==` header."""
    parts = [f"== {name} ==\n"]
    offset = 0
    while offset < chunk.code_length():
        text, offset = disassemble_instruction(chunk, offset)
        parts.append(text)
        parts.append("\n")
    return "".join(parts)


def disassemble_instruction(chunk: Chunk, offset: int) -> Tuple[str, int]:
    """Render the instruction starting at `offset`.

    Returns the text and the offset of the next instruction. An undecodable
    byte (or an instruction cut short by the end of the chunk) yields the
    illegal-instruction marker and an offset past the end, so scanning stops.
    """
    prefix = f"{offset:04d} {_line_column(chunk, offset)} "
    end = chunk.code_length()

    try:
        op = decode(chunk.byte_at(offset), offset)
    except UnknownOpcodeError:
        return prefix + ILLEGAL_INSTRUCTION, end

    next_offset = offset + instruction_width(op)
    if next_offset > end:
        return prefix + ILLEGAL_INSTRUCTION, end

    if op is Opcode.CONSTANT:
        return prefix + _constant_instruction(chunk, op, offset), next_offset
    return prefix + render(op), next_offset


def _line_column(chunk: Chunk, offset: int) -> str:
    line = chunk.get_line(offset)
    if offset > 0 and line == chunk.get_line(offset - 1):
        return SAME_LINE
    return f"{line:>4}"


def _constant_instruction(chunk: Chunk, op: Opcode, offset: int) -> str:
    index = chunk.byte_at(offset + 1)
    value = chunk.get_constant(index)
    return f"{render(op):<16} {index:04d} {format_value(value)}"


__all__ = ["disassemble_chunk", "disassemble_instruction", "ILLEGAL_INSTRUCTION"]
