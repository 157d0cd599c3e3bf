from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping

from .errors import UnknownOpcodeError


class Opcode(IntEnum):
    """Instruction tags. The integer value is the byte stored in a chunk."""

    RETURN = 0x00    # RETURN
    NEGATE = 0x01    # NEGATE
    CONSTANT = 0x02  # CONSTANT index


@dataclass(frozen=True)
class OpcodeInfo:
    mnemonic: str
    operand_count: int


OPCODE_TABLE: Mapping[Opcode, OpcodeInfo] = MappingProxyType(
    {
        Opcode.RETURN: OpcodeInfo("OP_RETURN", 0),
        Opcode.NEGATE: OpcodeInfo("OP_NEGATE", 0),
        Opcode.CONSTANT: OpcodeInfo("OP_CONSTANT", 1),
    }
)

_BY_BYTE: Mapping[int, Opcode] = MappingProxyType({int(op): op for op in OPCODE_TABLE})
_BY_MNEMONIC: Mapping[str, Opcode] = MappingProxyType(
    {info.mnemonic: op for op, info in OPCODE_TABLE.items()}
)


def decode(byte: int, offset: int | None = None) -> Opcode:
    """Map a tag byte to its opcode.

    Raises `UnknownOpcodeError` when no opcode uses `byte`; `offset` is only
    used to make the error message point at the bad byte.
    """
    try:
        return _BY_BYTE[byte]
    except (KeyError, TypeError):
        raise UnknownOpcodeError(byte, offset) from None


def operand_count(opcode: Opcode) -> int:
    return OPCODE_TABLE[opcode].operand_count


def instruction_width(opcode: Opcode) -> int:
    """Tag byte plus operand bytes: the distance to the next instruction."""
    return 1 + operand_count(opcode)


def render(opcode: Opcode) -> str:
    return OPCODE_TABLE[opcode].mnemonic


def from_mnemonic(mnemonic: str) -> Opcode:
    return _BY_MNEMONIC[mnemonic]


__all__ = [
    "Opcode",
    "OpcodeInfo",
    "OPCODE_TABLE",
    "decode",
    "operand_count",
    "instruction_width",
    "render",
    "from_mnemonic",
]
