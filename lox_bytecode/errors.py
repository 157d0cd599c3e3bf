from __future__ import annotations

from typing import Sequence

from .events import TraceFrame


class BytecodeError(Exception):
    """Base class for structural errors in compiled bytecode."""


class UnknownOpcodeError(BytecodeError, ValueError):
    def __init__(self, byte: int, offset: int | None = None):
        location = "" if offset is None else f" at offset {offset:04d}"
        super().__init__(f"Unknown opcode {byte!r}{location}")
        self.byte = byte
        self.offset = offset


class ConstantIndexOutOfRangeError(BytecodeError, IndexError):
    def __init__(self, index: int, size: int):
        super().__init__(f"Constant index {index} out of range (pool holds {size})")
        self.index = index
        self.size = size


class ChunkSealedError(BytecodeError):
    """A chunk was mutated after a cursor was taken from it."""


class BytecodeFormatError(BytecodeError):
    def __init__(self, message: str, line: int | None = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class VMRuntimeError(RuntimeError):
    """Runtime error raised by the execution engine with attached traceback frames."""

    def __init__(self, message: str, frames: Sequence[TraceFrame]):
        super().__init__(message)
        self.frames = list(frames)


__all__ = [
    "BytecodeError",
    "UnknownOpcodeError",
    "ConstantIndexOutOfRangeError",
    "ChunkSealedError",
    "BytecodeFormatError",
    "VMRuntimeError",
]
