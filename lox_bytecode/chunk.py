from __future__ import annotations

from typing import Any, List, Sequence, Tuple

from .cursor import BoundCursor
from .disassembler import disassemble_chunk
from .errors import ChunkSealedError, ConstantIndexOutOfRangeError


class Chunk:
    """Compiled bytecode for one compilation unit.

    Holds the instruction bytes, the constant pool and one source line per
    byte. A chunk is built with `write` and `add_constant`, then handed to
    the execution engine, which takes a cursor with `base_cursor`. Taking
    the first cursor seals the chunk: from then on both sequences are
    immutable and further writes raise `ChunkSealedError`.
    """

    def __init__(self) -> None:
        self._code = bytearray()
        self._lines: List[int] = []
        self._constants: List[Any] = []
        self._sealed = False
        self._frozen_code: bytes | None = None
        self._frozen_constants: Tuple[Any, ...] | None = None

    # ------------------------------------------------------------------ construction
    def write(self, byte: int, line: int) -> None:
        self._check_writable()
        # bytearray rejects values outside 0..255 with ValueError
        self._code.append(byte)
        self._lines.append(line)

    def add_constant(self, value: Any) -> int:
        self._check_writable()
        self._constants.append(value)
        return len(self._constants) - 1

    def _check_writable(self) -> None:
        if self._sealed:
            raise ChunkSealedError("chunk is sealed: a cursor has already been taken from it")

    # ------------------------------------------------------------------ queries
    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def code(self) -> bytes:
        if self._frozen_code is not None:
            return self._frozen_code
        return bytes(self._code)

    @property
    def lines(self) -> Tuple[int, ...]:
        return tuple(self._lines)

    @property
    def constants(self) -> Sequence[Any]:
        if self._frozen_constants is not None:
            return self._frozen_constants
        return tuple(self._constants)

    def code_length(self) -> int:
        return len(self._code)

    def get_constant(self, index: int) -> Any:
        if not 0 <= index < len(self._constants):
            raise ConstantIndexOutOfRangeError(index, len(self._constants))
        return self._constants[index]

    def get_line(self, offset: int) -> int:
        return self._lines[offset]

    def byte_at(self, offset: int) -> int:
        return self._code[offset]

    # ------------------------------------------------------------------ execution hand-off
    def base_cursor(self) -> BoundCursor:
        if not self._sealed:
            self._frozen_code = bytes(self._code)
            self._frozen_constants = tuple(self._constants)
            self._sealed = True
        return BoundCursor(self)

    def disassemble(self, name: str) -> str:
        return disassemble_chunk(self, name)

    def __len__(self) -> int:
        return len(self._code)

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return (
            f"Chunk(code={len(self._code)} bytes, constants={len(self._constants)}, {state})"
        )


__all__ = ["Chunk"]
