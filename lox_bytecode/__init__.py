"""Bytecode chunks, instruction pointers and a disassembler for a Lox stack VM."""
from .chunk import Chunk
from .cursor import UNBOUND, BoundCursor, Cursor, UnboundCursor
from .disassembler import disassemble_chunk, disassemble_instruction
from .errors import (
    BytecodeError,
    BytecodeFormatError,
    ChunkSealedError,
    ConstantIndexOutOfRangeError,
    UnknownOpcodeError,
    VMRuntimeError,
)
from .opcodes import Opcode, decode, instruction_width, operand_count, render
from .vm import VM

__all__ = [
    "Chunk",
    "Cursor",
    "BoundCursor",
    "UnboundCursor",
    "UNBOUND",
    "Opcode",
    "decode",
    "operand_count",
    "instruction_width",
    "render",
    "disassemble_chunk",
    "disassemble_instruction",
    "VM",
    "BytecodeError",
    "BytecodeFormatError",
    "ChunkSealedError",
    "ConstantIndexOutOfRangeError",
    "UnknownOpcodeError",
    "VMRuntimeError",
]
