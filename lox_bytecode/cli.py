from __future__ import annotations

import argparse
import pathlib
import sys
from typing import Optional, Tuple

from .bytecode_io import ChunkReader
from .chunk import Chunk
from .errors import BytecodeError, VMRuntimeError
from .events import format_trace
from .values import format_value
from .vm import VM


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="lox-bytecode", description="Inspect and run Lox bytecode chunks")
    subparsers = parser.add_subparsers(dest="command", required=True)

    disasm = subparsers.add_parser("disasm", help="Print a human-readable listing of a chunk")
    disasm.add_argument("file", help="Bytecode file (.json) or assembly text")
    disasm.add_argument("--name", help="Header name (defaults to the file stem)")

    run = subparsers.add_parser("run", help="Execute a chunk and print its return value")
    run.add_argument("file", help="Bytecode file (.json) or assembly text")
    run.add_argument("--name", help="Name used in listings and tracebacks")
    run.add_argument("--trace", action="store_true", help="Print the stack and each instruction as it executes")
    run.add_argument("--disassemble", action="store_true", help="Print the listing before executing")

    args = parser.parse_args(argv)

    try:
        name, chunk = _load_chunk(pathlib.Path(args.file))
    except (BytecodeError, OSError) as exc:
        print(f"Failed to load {args.file}: {exc}", file=sys.stderr)
        return 1

    try:
        if args.name:
            name = args.name
        if args.command == "disasm":
            sys.stdout.write(chunk.disassemble(name))
            return 0

        if args.disassemble:
            sys.stdout.write(chunk.disassemble(name))
        vm = VM(chunk, trace=args.trace, function_name=name)
        try:
            result = vm.run()
        finally:
            if args.trace:
                for event in vm.drain_trace():
                    print(format_trace(event))
        print(format_value(result))
        return 0
    except VMRuntimeError as exc:
        frame = exc.frames[0] if exc.frames else None
        if frame is not None:
            print(f"[line {frame.line}] in {frame.function_name}", file=sys.stderr)
        print(f"Runtime error: {exc}", file=sys.stderr)
        return 1
    except BytecodeError as exc:
        print(f"Malformed bytecode in {args.file}: {exc}", file=sys.stderr)
        return 1


def _load_chunk(path: pathlib.Path) -> Tuple[str, Chunk]:
    if path.suffix == ".json":
        name, chunk = ChunkReader.load_from_file(path)
        return name, chunk
    return path.stem, ChunkReader.load_assembly(path)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
