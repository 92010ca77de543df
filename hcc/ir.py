"""The intermediate representation and its lowering to machine code."""

from __future__ import annotations

from typing import Any, Callable

from hcc.backend import CompileError
from hcc.metadata import Optimization
from hcc.opcodes import IrKind, IrOpcode
from hcc.optimizations import constant_propagation, dce_unused, stack_reserve, stack_setup
from hcc.value import Value

_STACK_KINDS = frozenset({IrKind.ALLOCA, IrKind.CSV})

_BINARY: dict[IrKind, Callable[[Value, Any, Value], None]] = {
    IrKind.ADD: Value.add,
    IrKind.SUB: Value.sub,
    IrKind.MUL: Value.mul,
    IrKind.DIV: Value.div,
}


class IR:
    """A list of IR opcodes with a read cursor used while compiling.

    The ``hcc`` argument of the methods is the compiler state: it carries
    ``backend``, ``optimizations``, ``current_function`` and ``values``
    (a list used as a stack).
    """

    def __init__(self, passes_for_each_optimization: int = 64) -> None:
        self.ops: list[IrOpcode] = []
        self.passes_for_each_optimization = passes_for_each_optimization
        self._index = 0

    def __len__(self) -> int:
        return len(self.ops)

    def __iter__(self):
        return iter(self.ops)

    def add_line(self) -> None:
        """Append a statement marker."""
        self.ops.append(IrOpcode(IrKind.LINE))

    def add_reset(self) -> None:
        """Append a register counter reset."""
        self.ops.append(IrOpcode(IrKind.RESET))

    def add(self, op: IrOpcode) -> None:
        self.ops.append(op)

    def _next(self) -> IrOpcode:
        if self._index >= len(self.ops):
            return IrOpcode(IrKind.END)
        op = self.ops[self._index]
        self._index += 1
        return op

    def _peek(self, count: int = 1) -> IrOpcode:
        saved = self._index
        op = IrOpcode(IrKind.NULL)
        for _ in range(count):
            op = self._next()
        self._index = saved
        return op

    def opcode_affects_stack(self, op: IrOpcode) -> bool:
        return op.kind in _STACK_KINDS

    def perform_static_optimizations(self, hcc: Any) -> None:
        """Terminate the opcode list and run the enabled optimization passes."""
        self.add(IrOpcode(IrKind.END))
        enabled = hcc.optimizations.has_flag

        if enabled(Optimization.CONSTANT_PROPAGATION):
            self.ops = constant_propagation(self.ops)
        if enabled(Optimization.DCE):
            self.ops = dce_unused(self.ops, self.passes_for_each_optimization)
        if enabled(Optimization.FP_OMISSION):
            self.ops = stack_setup(self.ops)
        if enabled(Optimization.STACK_RESERVE):
            self.ops = stack_reserve(self.ops)

    @staticmethod
    def _pop(hcc: Any) -> Value:
        try:
            return hcc.values.pop()
        except IndexError:
            raise CompileError("value stack is empty") from None

    @staticmethod
    def _variable(hcc: Any, name: str) -> Value:
        try:
            return hcc.current_function.variables[name]
        except KeyError:
            raise CompileError(f"undefined variable {name}") from None

    def compile(self, hcc: Any) -> None:
        """Emit code for the opcodes from the cursor on; raise CompileError on failure."""
        backend = hcc.backend
        current_funcdef = IrOpcode()

        while True:
            op = self._next()
            kind = op.kind
            if kind is IrKind.END:
                break

            if kind is IrKind.NULL:
                raise CompileError("IR_NULL opcode encountered")
            elif kind is IrKind.FUNCDEF:
                if self._peek().kind is IrKind.RET and hcc.optimizations.has_flag(
                    Optimization.FUNCTION_BODY_ELIMINATION
                ):
                    # A function that returns at once needs no frame.
                    backend.emit_label(op.name)
                    backend.emit_single_ret()
                    self._next()
                else:
                    if op.need_stack:
                        backend.reset_reg_index()
                        backend.emit_function_prologue(op.name)
                    else:
                        backend.emit_label(op.name)
                    current_funcdef = op
            elif kind is IrKind.CREG:
                hcc.values.append(Value.create_as_register(hcc, op.value, op.reg_name))
            elif kind is IrKind.CCTV:
                hcc.values.append(Value.create_as_compile_time_value(hcc, op.value))
            elif kind is IrKind.CSV:
                hcc.values.append(Value.create_as_stack_var(hcc, op.md))
            elif kind is IrKind.RET:
                if hcc.values:
                    value = hcc.values.pop().use(hcc)
                    if value.reg_name != backend.abi.return_register:
                        backend.emit_move(backend.abi.return_register, value.reg_name)
                if current_funcdef.need_stack:
                    backend.emit_function_epilogue()
                else:
                    backend.emit_single_ret()
                hcc.values.clear()
            elif kind is IrKind.ALLOCA:
                hcc.current_function.variables[op.name] = Value.create_as_stack_var(hcc, op.md, False)
            elif kind in _BINARY:
                rhs = self._pop(hcc)
                lhs = self._pop(hcc)
                _BINARY[kind](lhs, hcc, rhs)
                hcc.values.append(lhs)
            elif kind is IrKind.ASSIGN:
                target = self._variable(hcc, op.name)
                target.set_to(hcc, self._pop(hcc))
            elif kind is IrKind.ASM:
                backend.output += op.code + "\n"
            elif kind is IrKind.VARREF:
                hcc.values.append(self._variable(hcc, op.name).do_cond_lod(hcc))
            elif kind is IrKind.ADDROF:
                variable = self._variable(hcc, op.name)
                hcc.values.append(Value(reg_name=backend.emit_loadaddr_from_stack(variable.var_stack_align)))
            elif kind is IrKind.CALL:
                backend.emit_call(op.name)
                hcc.values.append(Value(reg_name=backend.abi.return_register))
            elif kind is IrKind.RESET:
                backend.reset_reg_index()
            elif kind is IrKind.RESERVE:
                if op.size > 0:
                    backend.emit_reserve_stack_space(op.size)

    def results_in_error(self, hcc: Any) -> CompileError | None:
        """Compile once as a dry run; return the error it raises, if any.

        The backend output is discarded and the cursor rewound afterwards.
        """
        self._index = 0
        try:
            self.compile(hcc)
        except CompileError as exc:
            return exc
        finally:
            hcc.backend.output = ""
            self._index = 0
        return None