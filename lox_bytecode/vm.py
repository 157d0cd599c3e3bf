from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from .chunk import Chunk
from .cursor import UNBOUND, BoundCursor, Cursor
from .disassembler import disassemble_instruction
from .errors import BytecodeError, VMRuntimeError
from .events import InstructionTrace, TraceFrame
from .opcodes import Opcode
from .values import is_number


class VM:
    """Stack machine that executes a sealed chunk through a bound cursor.

    The chunk must end every path with OP_RETURN. The loop checks for the
    end of the code before each decode and reports running off the end as a
    runtime error instead of reading past it.
    """

    def __init__(self, chunk: Chunk, *, trace: bool = False, function_name: str = "<script>"):
        self.chunk = chunk
        self.ip: Cursor = UNBOUND
        self.stack: List[Any] = []
        self.trace = trace
        self.function_name = function_name
        self.return_value: Any = None
        self.halted = False
        self._trace_buffer: List[InstructionTrace] = []
        self._handlers: Dict[Opcode, Callable[[BoundCursor], Optional[str]]] = {
            Opcode.CONSTANT: self._op_CONSTANT,
            Opcode.NEGATE: self._op_NEGATE,
            Opcode.RETURN: self._op_RETURN,
        }

    def _bound_ip(self) -> BoundCursor:
        if not isinstance(self.ip, BoundCursor):
            self.ip = self.chunk.base_cursor()
        return self.ip

    # ------------------------------------------------------------------ execution
    def step(self) -> Optional[str]:
        """Executes a single instruction."""
        ip = self._bound_ip()
        if self.halted:
            return "halt"
        if ip.at_end:
            raise VMRuntimeError("Unexpected end of bytecode", self._capture_traceback(ip.offset))

        start = ip.offset
        try:
            op = ip.peek_opcode()
            if self.trace:
                self._record_trace(start)
        except BytecodeError as exc:
            raise self._wrap_runtime_error(exc, start) from exc

        ip.advance(1)
        handler = self._handlers[op]
        try:
            control = handler(ip)
        except BytecodeError as exc:
            raise self._wrap_runtime_error(exc, start) from exc

        if control == "halt":
            self.halted = True
            return "halt"
        return None

    def run(self) -> Any:
        while self.step() != "halt":
            pass
        return self.return_value

    # ------------------------------------------------------------------ handlers
    def _op_CONSTANT(self, ip: BoundCursor) -> None:
        if ip.at_end:
            raise VMRuntimeError("Unexpected end of bytecode", self._capture_traceback(ip.offset - 1))
        index = ip.peek_byte()
        ip.advance(1)
        self.stack.append(self.chunk.get_constant(index))

    def _op_NEGATE(self, ip: BoundCursor) -> None:
        if not self.stack or not is_number(self.stack[-1]):
            raise VMRuntimeError("Operand must be a number.", self._capture_traceback(ip.offset - 1))
        self.stack.append(-self.stack.pop())

    def _op_RETURN(self, ip: BoundCursor) -> str:
        self.return_value = self.stack.pop() if self.stack else None
        return "halt"

    # ------------------------------------------------------------------ diagnostics
    def _record_trace(self, offset: int) -> None:
        text, _ = disassemble_instruction(self.chunk, offset)
        self._trace_buffer.append(
            InstructionTrace(
                offset=offset,
                line=self.chunk.get_line(offset),
                text=text,
                stack=tuple(self.stack),
            )
        )

    def drain_trace(self) -> List[InstructionTrace]:
        events = self._trace_buffer
        self._trace_buffer = []
        return events

    def _capture_traceback(self, offset: int) -> List[TraceFrame]:
        last = min(offset, self.chunk.code_length() - 1)
        line = self.chunk.get_line(last) if last >= 0 else 0
        return [TraceFrame(function_name=self.function_name, offset=offset, line=line)]

    def _wrap_runtime_error(self, exc: Exception, offset: int) -> VMRuntimeError:
        message = str(exc) or exc.__class__.__name__
        return VMRuntimeError(message, self._capture_traceback(offset))


__all__ = ["VM"]
