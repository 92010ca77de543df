"""Values produced while lowering IR to machine code."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from hcc.backend import CompileError
from hcc.metadata import TypeMetadata

_MASK = (1 << 64) - 1


@dataclass(eq=False)
class Value:
    """A value living in a register, on the stack, or known at compile time.

    The ``hcc`` argument of the methods is the compiler state: anything with
    ``backend`` and ``current_function`` attributes.
    """

    reg_name: str = ""
    is_compile_time: bool = False
    compile_time_value: int = 0
    var_stack_align: int = 0
    var_name: str = ""
    var_type: TypeMetadata = field(default_factory=TypeMetadata)

    def is_register(self) -> bool:
        return self.reg_name != ""

    @classmethod
    def create_as_register(cls, hcc: Any, value: int, reg_name: str = "") -> Value:
        """Load a constant into a register and return it."""
        return cls(reg_name=hcc.backend.emit_mov_const(value & _MASK, reg_name))

    @classmethod
    def create_as_compile_time_value(cls, hcc: Any, value: int) -> Value:
        """Return a constant known at compile time; nothing is emitted."""
        return cls(is_compile_time=True, compile_time_value=value & _MASK)

    @classmethod
    def create_as_stack_var(cls, hcc: Any, var_type: TypeMetadata, reserve: bool = True) -> Value:
        """Allocate a variable in the current function's frame."""
        function = hcc.current_function
        value = cls(var_stack_align=function.align + var_type.size, var_type=var_type)
        if reserve:
            hcc.backend.emit_reserve_stack_space(var_type.size)
        function.align += var_type.size
        return value

    def use(self, hcc: Any) -> Value:
        """Return a value usable as an operand, materialising constants."""
        if not self.is_compile_time:
            return self
        return Value.create_as_register(hcc, self.compile_time_value)

    def do_cond_lod(self, hcc: Any, load_reg: str = "") -> Value:
        """Return a register holding this value, loading it if needed."""
        if self.is_register() and not self.is_compile_time:
            return self
        if self.is_compile_time:
            return self.use(hcc)
        reg = hcc.backend.emit_load_from_stack(self.var_stack_align, self.var_type.size, load_reg)
        return Value(reg_name=reg)

    def _combine(
        self,
        hcc: Any,
        other: Value,
        fold: Callable[[int, int], int],
        emit: Callable[[str, str, str], None],
    ) -> None:
        if self.is_compile_time and other.is_compile_time:
            self.compile_time_value = fold(self.compile_time_value, other.compile_time_value) & _MASK
            return
        lhs = self.do_cond_lod(hcc)
        rhs = other.do_cond_lod(hcc)
        emit(lhs.reg_name, lhs.reg_name, rhs.reg_name)
        if not self.is_register():
            hcc.backend.emit_store_to_stack(self.var_stack_align, self.var_type.size, lhs.reg_name)

    def add(self, hcc: Any, other: Value) -> None:
        self._combine(hcc, other, lambda a, b: a + b, hcc.backend.emit_add)

    def sub(self, hcc: Any, other: Value) -> None:
        self._combine(hcc, other, lambda a, b: a - b, hcc.backend.emit_sub)

    def mul(self, hcc: Any, other: Value) -> None:
        self._combine(hcc, other, lambda a, b: a * b, hcc.backend.emit_mul)

    def div(self, hcc: Any, other: Value) -> None:
        if self.is_compile_time and other.is_compile_time and other.compile_time_value == 0:
            raise CompileError("division by zero")
        self._combine(hcc, other, lambda a, b: a // b, hcc.backend.emit_div)

    def set_to(self, hcc: Any, other: Value) -> None:
        """Store ``other`` into this value."""
        backend = hcc.backend
        if self.is_compile_time and other.is_compile_time:
            self.compile_time_value = other.compile_time_value
            return

        if not self.is_compile_time and other.is_compile_time:
            loaded = other.use(hcc)
            if self.is_register():
                backend.emit_move(self.reg_name, loaded.reg_name)
            else:
                backend.emit_store_to_stack(self.var_stack_align, self.var_type.size, loaded.reg_name)
        elif not self.is_register() and other.is_register():
            backend.emit_store_to_stack(self.var_stack_align, self.var_type.size, other.reg_name)
        elif self.is_register() and other.is_register():
            backend.emit_move(self.reg_name, other.reg_name)
        elif not self.is_register() and not other.is_register():
            lhs = self.do_cond_lod(hcc)
            other.do_cond_lod(hcc)
            backend.emit_store_to_stack(self.var_stack_align, self.var_type.size, lhs.reg_name)
        else:
            rhs = other.do_cond_lod(hcc)
            backend.emit_move(self.reg_name, rhs.reg_name)