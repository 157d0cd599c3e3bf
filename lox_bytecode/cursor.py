"""Instruction pointers over a chunk's code.

A cursor is either unbound or bound. Only `BoundCursor` defines the decode
and advance operations, and the only way to obtain one is
`Chunk.base_cursor()`, which seals the chunk first. Code that tries to decode
through an `UnboundCursor` is rejected by a type checker (no such attribute)
and fails with `AttributeError` if it runs anyway.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

from .opcodes import Opcode, decode

if TYPE_CHECKING:  # pragma: no cover
    from .chunk import Chunk


class UnboundCursor:
    """Placeholder instruction pointer that is not attached to any chunk."""

    __slots__ = ()

    is_bound = False

    def __repr__(self) -> str:
        return "UnboundCursor()"


UNBOUND = UnboundCursor()


class BoundCursor:
    __slots__ = ("_chunk", "_code", "offset")

    is_bound = True

    def __init__(self, chunk: Chunk, offset: int = 0) -> None:
        if not chunk.sealed:
            raise ValueError("cursor requires a sealed chunk; use Chunk.base_cursor()")
        self._chunk = chunk
        self._code = chunk.code
        self.offset = offset

    @property
    def chunk(self) -> Chunk:
        return self._chunk

    @property
    def at_end(self) -> bool:
        return self.offset >= len(self._code)

    @property
    def line(self) -> int:
        return self._chunk.get_line(self.offset)

    def peek_opcode(self) -> Opcode:
        return decode(self._code[self.offset], self.offset)

    def peek_byte(self) -> int:
        return self._code[self.offset]

    def advance(self, offset: int) -> None:
        # No bounds check; callers test `at_end` before the next peek.
        self.offset += offset

    def __repr__(self) -> str:
        return f"BoundCursor(offset={self.offset})"


Cursor = Union[UnboundCursor, BoundCursor]


__all__ = ["UnboundCursor", "BoundCursor", "Cursor", "UNBOUND"]
