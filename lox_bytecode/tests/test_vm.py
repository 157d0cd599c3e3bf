import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from lox_bytecode.chunk import Chunk
from lox_bytecode.cursor import BoundCursor, UnboundCursor
from lox_bytecode.errors import ChunkSealedError, ConstantIndexOutOfRangeError, UnknownOpcodeError, VMRuntimeError
from lox_bytecode.opcodes import Opcode
from lox_bytecode.vm import VM


def constant(chunk, value, line):
    chunk.write(Opcode.CONSTANT, line)
    chunk.write(chunk.add_constant(value), line)


def test_negate_constant():
    chunk = Chunk()
    constant(chunk, 1.2, 1)
    chunk.write(Opcode.NEGATE, 1)
    chunk.write(Opcode.RETURN, 2)
    assert VM(chunk).run() == -1.2


def test_double_negation_and_stack():
    chunk = Chunk()
    constant(chunk, 4.0, 1)
    chunk.write(Opcode.NEGATE, 1)
    chunk.write(Opcode.NEGATE, 1)
    chunk.write(Opcode.RETURN, 1)
    vm = VM(chunk)
    assert vm.run() == 4.0
    assert vm.stack == []
    assert vm.halted


def test_return_on_empty_stack_yields_nil():
    chunk = Chunk()
    chunk.write(Opcode.RETURN, 1)
    assert VM(chunk).run() is None


def test_ip_starts_unbound_and_binds_on_first_step():
    chunk = Chunk()
    chunk.write(Opcode.RETURN, 1)
    vm = VM(chunk)
    assert isinstance(vm.ip, UnboundCursor)
    assert not chunk.sealed
    assert vm.step() == "halt"
    assert isinstance(vm.ip, BoundCursor)
    assert chunk.sealed
    with pytest.raises(ChunkSealedError):
        chunk.write(Opcode.RETURN, 1)


def test_step_after_halt_is_noop():
    chunk = Chunk()
    chunk.write(Opcode.RETURN, 1)
    vm = VM(chunk)
    vm.run()
    assert vm.step() == "halt"


def test_missing_return_reports_end_of_bytecode():
    chunk = Chunk()
    constant(chunk, 1.0, 5)
    with pytest.raises(VMRuntimeError) as info:
        VM(chunk).run()
    assert "end of bytecode" in str(info.value)
    assert info.value.frames[0].offset == 2
    assert info.value.frames[0].line == 5


def test_empty_chunk_reports_end_of_bytecode():
    with pytest.raises(VMRuntimeError) as info:
        VM(Chunk()).run()
    assert info.value.frames[0].line == 0


def test_truncated_constant_operand():
    chunk = Chunk()
    chunk.write(Opcode.CONSTANT, 3)
    with pytest.raises(VMRuntimeError, match="end of bytecode"):
        VM(chunk).run()


def test_unknown_opcode_aborts_execution():
    chunk = Chunk()
    chunk.write(Opcode.NEGATE, 1)
    chunk.write(0xAB, 2)
    chunk.write(Opcode.RETURN, 3)
    vm = VM(chunk)
    vm.stack.append(1.0)
    with pytest.raises(VMRuntimeError) as info:
        vm.run()
    assert isinstance(info.value.__cause__, UnknownOpcodeError)
    assert info.value.frames[0].offset == 1
    assert info.value.frames[0].line == 2


def test_bad_constant_index_aborts_execution():
    chunk = Chunk()
    chunk.write(Opcode.CONSTANT, 1)
    chunk.write(9, 1)
    chunk.write(Opcode.RETURN, 1)
    with pytest.raises(VMRuntimeError) as info:
        VM(chunk).run()
    assert isinstance(info.value.__cause__, ConstantIndexOutOfRangeError)
    assert info.value.frames[0].offset == 0


@pytest.mark.parametrize("value", ["text", True, None])
def test_negate_requires_number(value):
    chunk = Chunk()
    constant(chunk, value, 1)
    chunk.write(Opcode.NEGATE, 2)
    chunk.write(Opcode.RETURN, 2)
    with pytest.raises(VMRuntimeError, match="Operand must be a number.") as info:
        VM(chunk, function_name="main").run()
    frame = info.value.frames[0]
    assert (frame.function_name, frame.offset, frame.line) == ("main", 2, 2)


def test_trace_records_each_instruction():
    chunk = Chunk()
    constant(chunk, 2.0, 1)
    chunk.write(Opcode.NEGATE, 1)
    chunk.write(Opcode.RETURN, 2)
    vm = VM(chunk, trace=True)
    vm.run()
    events = vm.drain_trace()
    assert [e.offset for e in events] == [0, 2, 3]
    assert [tuple(e.stack) for e in events] == [(), (2.0,), (-2.0,)]
    assert events[1].text == "0002    | OP_NEGATE"
    assert vm.drain_trace() == []


def test_two_vms_over_one_chunk():
    chunk = Chunk()
    constant(chunk, 3.0, 1)
    chunk.write(Opcode.NEGATE, 1)
    chunk.write(Opcode.RETURN, 1)
    assert VM(chunk).run() == -3.0
    assert VM(chunk).run() == -3.0


def test_bad_constant_index_with_trace_is_wrapped():
    chunk = Chunk()
    chunk.write(Opcode.CONSTANT, 4)
    chunk.write(9, 4)
    chunk.write(Opcode.RETURN, 4)
    vm = VM(chunk, trace=True)
    with pytest.raises(VMRuntimeError) as info:
        vm.run()
    assert isinstance(info.value.__cause__, ConstantIndexOutOfRangeError)
    assert (info.value.frames[0].offset, info.value.frames[0].line) == (0, 4)
    assert vm.drain_trace() == []
