from types import SimpleNamespace

import pytest

from hcc.backend import CompileError
from hcc.metadata import FunctionMetadata, TypeMetadata
from hcc.qproc import QprocBackend
from hcc.value import Value

INT = TypeMetadata("int", 4)
CHAR = TypeMetadata("char", 1)


@pytest.fixture
def ctx():
    return SimpleNamespace(backend=QprocBackend(), current_function=FunctionMetadata())


def test_compile_time_value_emits_nothing(ctx):
    v = Value.create_as_compile_time_value(ctx, 7)
    assert v.is_compile_time
    assert v.compile_time_value == 7
    assert not v.is_register()
    assert ctx.backend.output == ""


def test_create_as_register(ctx):
    v = Value.create_as_register(ctx, 0)
    assert v.reg_name == "r0"
    assert v.is_register()
    assert ctx.backend.output == "movi r0 0\n"


def test_compile_time_folding(ctx):
    a = Value.create_as_compile_time_value(ctx, 7)
    a.add(ctx, Value.create_as_compile_time_value(ctx, 5))
    assert a.compile_time_value == 7 + 5
    a.mul(ctx, Value.create_as_compile_time_value(ctx, 2))
    assert a.compile_time_value == (7 + 5) * 2
    a.div(ctx, Value.create_as_compile_time_value(ctx, 5))
    assert a.compile_time_value == (7 + 5) * 2 // 5
    assert ctx.backend.output == ""


def test_compile_time_sub_wraps_to_unsigned(ctx):
    a = Value.create_as_compile_time_value(ctx, 3)
    a.sub(ctx, Value.create_as_compile_time_value(ctx, 5))
    assert a.compile_time_value == 2**64 - 2


def test_compile_time_division_by_zero(ctx):
    a = Value.create_as_compile_time_value(ctx, 3)
    with pytest.raises(CompileError):
        a.div(ctx, Value.create_as_compile_time_value(ctx, 0))


def test_stack_var_allocation(ctx):
    a = Value.create_as_stack_var(ctx, INT)
    b = Value.create_as_stack_var(ctx, CHAR)
    assert a.var_stack_align == INT.size
    assert b.var_stack_align == INT.size + CHAR.size
    assert ctx.current_function.align == INT.size + CHAR.size
    ref = QprocBackend()
    ref.emit_reserve_stack_space(INT.size)
    ref.emit_reserve_stack_space(CHAR.size)
    assert ctx.backend.output == ref.output


def test_stack_var_without_reserve(ctx):
    v = Value.create_as_stack_var(ctx, INT, False)
    assert ctx.backend.output == ""
    assert v.var_type == INT
    assert ctx.current_function.align == INT.size


def test_use_register_returns_self(ctx):
    v = Value.create_as_register(ctx, 1)
    assert v.use(ctx) is v
    assert v.do_cond_lod(ctx) is v


def test_use_compile_time_materialises(ctx):
    v = Value.create_as_compile_time_value(ctx, 9)
    r = v.use(ctx)
    ref = QprocBackend()
    reg = ref.emit_mov_const(9)
    assert r.reg_name == reg
    assert not r.is_compile_time
    assert ctx.backend.output == ref.output


def test_do_cond_lod_loads_stack_var(ctx):
    v = Value.create_as_stack_var(ctx, INT, False)
    loaded = v.do_cond_lod(ctx)
    ref = QprocBackend()
    reg = ref.emit_load_from_stack(INT.size, INT.size)
    assert loaded.reg_name == reg
    assert ctx.backend.output == ref.output


def test_add_registers(ctx):
    a = Value.create_as_register(ctx, 1)
    b = Value.create_as_register(ctx, 2)
    a.add(ctx, b)
    ref = QprocBackend()
    ra = ref.emit_mov_const(1)
    rb = ref.emit_mov_const(2)
    ref.emit_add(ra, ra, rb)
    assert ctx.backend.output == ref.output


def test_add_to_stack_var_stores_back(ctx):
    var = Value.create_as_stack_var(ctx, INT, False)
    other = Value.create_as_register(ctx, 3)
    var.add(ctx, other)
    ref = QprocBackend()
    ro = ref.emit_mov_const(3)
    rv = ref.emit_load_from_stack(INT.size, INT.size)
    ref.emit_add(rv, rv, ro)
    ref.emit_store_to_stack(INT.size, INT.size, rv)
    assert ctx.backend.output == ref.output


def test_set_to_both_compile_time(ctx):
    a = Value.create_as_compile_time_value(ctx, 1)
    a.set_to(ctx, Value.create_as_compile_time_value(ctx, 8))
    assert a.compile_time_value == 8
    assert ctx.backend.output == ""


def test_set_stack_var_from_constant(ctx):
    var = Value.create_as_stack_var(ctx, INT, False)
    other = Value.create_as_compile_time_value(ctx, 9)
    var.set_to(ctx, other)
    ref = QprocBackend()
    reg = ref.emit_mov_const(9)
    ref.emit_store_to_stack(INT.size, INT.size, reg)
    assert ctx.backend.output == ref.output
    assert other.is_compile_time


def test_set_register_from_register(ctx):
    a = Value.create_as_register(ctx, 1)
    b = Value.create_as_register(ctx, 2)
    a.set_to(ctx, b)
    ref = QprocBackend()
    ra = ref.emit_mov_const(1)
    rb = ref.emit_mov_const(2)
    ref.emit_move(ra, rb)
    assert ctx.backend.output == ref.output


def test_set_register_from_stack_var(ctx):
    var = Value.create_as_stack_var(ctx, INT, False)
    reg_value = Value.create_as_register(ctx, 1)
    reg_value.set_to(ctx, var)
    ref = QprocBackend()
    ra = ref.emit_mov_const(1)
    loaded = ref.emit_load_from_stack(INT.size, INT.size)
    ref.emit_move(ra, loaded)
    assert ctx.backend.output == ref.output