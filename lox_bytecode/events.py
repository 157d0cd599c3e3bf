from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from .values import format_value


@dataclass(frozen=True)
class TraceFrame:
    """Location of the instruction that was executing when an error surfaced."""

    function_name: str
    offset: int
    line: int


@dataclass(frozen=True)
class InstructionTrace:
    offset: int
    line: int
    text: str
    stack: Sequence[Any]


def format_trace(event: InstructionTrace) -> str:
    stack = "".join(f"[ {format_value(value)} ]" for value in event.stack)
    return f"          {stack}\n{event.text}"


__all__ = ["TraceFrame", "InstructionTrace", "format_trace"]
