from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from .chunk import Chunk
from .errors import BytecodeFormatError
from .opcodes import Opcode, from_mnemonic, operand_count, render
from .values import normalize_value, try_parse_literal

PathLike = Union[str, Path]

MAX_SMALL_CONSTANTS = 256


class ChunkWriter:
    @staticmethod
    def to_dict(chunk: Chunk, name: str) -> dict:
        return {
            "name": name,
            "code": list(chunk.code),
            "lines": list(chunk.lines),
            "constants": list(chunk.constants),
        }

    @staticmethod
    def write_to_file(chunk: Chunk, path: PathLike, name: str = "chunk") -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(ChunkWriter.to_dict(chunk, name), f, indent=2)
            f.write("\n")


class ChunkReader:
    @staticmethod
    def from_dict(data: object) -> Tuple[str, Chunk]:
        if not isinstance(data, dict):
            raise BytecodeFormatError("bytecode document must be a JSON object")
        try:
            code = data["code"]
            lines = data["lines"]
            constants = data.get("constants", [])
        except KeyError as exc:
            raise BytecodeFormatError(f"missing field {exc.args[0]!r}") from None
        if not all(isinstance(seq, list) for seq in (code, lines, constants)):
            raise BytecodeFormatError("code, lines and constants must be arrays")
        if len(code) != len(lines):
            raise BytecodeFormatError(
                f"code has {len(code)} bytes but lines has {len(lines)} entries"
            )

        if len(constants) > MAX_SMALL_CONSTANTS:
            raise BytecodeFormatError(
                f"{len(constants)} constants exceed the {MAX_SMALL_CONSTANTS} a one-byte operand can address"
            )

        chunk = Chunk()
        for value in constants:
            try:
                chunk.add_constant(normalize_value(value))
            except ValueError as exc:
                raise BytecodeFormatError(str(exc)) from None
        for byte, line in zip(code, lines):
            if not isinstance(byte, int) or isinstance(byte, bool) or not 0 <= byte <= 255:
                raise BytecodeFormatError(f"invalid byte {byte!r}")
            if not isinstance(line, int) or isinstance(line, bool):
                raise BytecodeFormatError(f"invalid line number {line!r}")
            chunk.write(byte, line)
        return str(data.get("name", "chunk")), chunk

    @staticmethod
    def load_from_file(path: PathLike) -> Tuple[str, Chunk]:
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise BytecodeFormatError(f"invalid JSON: {exc}") from None
        return ChunkReader.from_dict(data)

    @staticmethod
    def assemble(source_lines: Iterable[str]) -> Chunk:
        """Build a chunk from `LINE MNEMONIC [LITERAL]` text, one instruction per line.

        Blank lines are skipped and `#` starts a comment unless it sits inside a
        quoted string. OP_CONSTANT takes a literal (number, string, true/false,
        nil) that is added to the constant pool.
        """
        chunk = Chunk()
        for text_line, raw in enumerate(source_lines, start=1):
            stripped = _strip_comment(raw).strip()
            if not stripped:
                continue
            parts = stripped.split(None, 2)
            if len(parts) < 2:
                raise BytecodeFormatError("expected LINE MNEMONIC [OPERAND]", text_line)
            line_token, mnemonic = parts[0], parts[1]
            operand = parts[2] if len(parts) > 2 else None
            try:
                source_line = int(line_token)
            except ValueError:
                raise BytecodeFormatError(f"invalid line number {line_token!r}", text_line) from None
            try:
                op = from_mnemonic(mnemonic.upper())
            except KeyError:
                raise BytecodeFormatError(f"unknown mnemonic {mnemonic!r}", text_line) from None

            if operand_count(op) == 0:
                if operand is not None:
                    raise BytecodeFormatError(f"{render(op)} takes no operand", text_line)
                chunk.write(op, source_line)
                continue

            if operand is None:
                raise BytecodeFormatError(f"{render(op)} requires an operand", text_line)
            _assemble_operand(chunk, op, operand, source_line, text_line)
        return chunk

    @staticmethod
    def load_assembly(path: PathLike) -> Chunk:
        with open(path, "r", encoding="utf-8") as f:
            return ChunkReader.assemble(f)


def _strip_comment(raw: str) -> str:
    quote: Optional[str] = None
    escaped = False
    for i, ch in enumerate(raw):
        if quote is not None:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == "#":
            return raw[:i]
    return raw


def _assemble_operand(chunk: Chunk, op: Opcode, operand: str, source_line: int, text_line: int) -> None:
    if op is Opcode.CONSTANT:
        try:
            value = try_parse_literal(operand)
        except ValueError as exc:
            raise BytecodeFormatError(str(exc), text_line) from None
        if len(chunk.constants) >= MAX_SMALL_CONSTANTS:
            raise BytecodeFormatError("too many constants in one chunk", text_line)
        index = chunk.add_constant(value)
        chunk.write(op, source_line)
        chunk.write(index, source_line)
        return
    raise BytecodeFormatError(f"cannot assemble operand for {render(op)}", text_line)


__all__ = ["ChunkWriter", "ChunkReader", "MAX_SMALL_CONSTANTS"]
