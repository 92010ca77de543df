"""Static optimization passes over a list of IR opcodes.

Every pass returns a new list and leaves its input untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from hcc.backend import CompileError
from hcc.opcodes import IrKind, IrOpcode

_ARITHMETIC = frozenset({IrKind.ADD, IrKind.SUB, IrKind.MUL, IrKind.DIV})
_STACK_KINDS = frozenset({IrKind.ALLOCA, IrKind.CSV})


@dataclass
class _VarInfo:
    alloca_idx: int
    optimizable: bool = True
    definition: list[IrOpcode] = field(default_factory=list)
    def_start: int | None = None
    last_assign_idx: int | None = None
    assignments: int = 0
    address_taken: bool = False

    def foldable(self) -> bool:
        return (
            self.optimizable
            and not self.address_taken
            and self.assignments == 1
            and bool(self.definition)
            and self.last_assign_idx is not None
            and self.def_start is not None
        )


def _trace_constant(ops: list[IrOpcode], assign_idx: int) -> tuple[int, list[IrOpcode]] | None:
    """Find the constant expression feeding the assignment at ``assign_idx``."""
    needed = 1
    for j in range(assign_idx - 1, -1, -1):
        kind = ops[j].kind
        if kind is IrKind.CCTV:
            pushed, popped = 1, 0
        elif kind in _ARITHMETIC:
            pushed, popped = 1, 2
        else:
            return None
        needed += popped - pushed
        if needed == 0:
            return j, ops[j:assign_idx]
        if needed < 0:
            return None
    return None


def constant_propagation(ops: list[IrOpcode]) -> list[IrOpcode]:
    """Replace variables assigned once from a constant expression by that expression."""
    variables: dict[str, _VarInfo] = {}

    for i, op in enumerate(ops):
        if op.kind is IrKind.ALLOCA:
            variables[op.name] = _VarInfo(alloca_idx=i)
        elif op.kind is IrKind.ASSIGN:
            var = variables.get(op.name)
            if var is None:
                continue
            var.assignments += 1
            var.last_assign_idx = i
            if not var.optimizable or var.assignments > 1:
                var.optimizable = False
                var.definition = []
                continue
            traced = _trace_constant(ops, i)
            if traced is None:
                var.optimizable = False
                var.definition = []
            else:
                var.def_start, var.definition = traced
        elif op.kind is IrKind.ADDROF:
            var = variables.get(op.name)
            if var is not None:
                var.address_taken = True
                var.optimizable = False

    foldable = {name: var for name, var in variables.items() if var.foldable()}

    deleted: set[int] = set()
    for var in foldable.values():
        deleted.add(var.alloca_idx)
        deleted.add(var.last_assign_idx)
        deleted.update(range(var.def_start, var.last_assign_idx))

    result: list[IrOpcode] = []
    for i, op in enumerate(ops):
        if i in deleted:
            continue
        var = foldable.get(op.name) if op.kind is IrKind.VARREF else None
        if var is not None:
            result.extend(replace(d) for d in var.definition)
        else:
            result.append(op)
    return result


def dce_unused(ops: list[IrOpcode], passes: int = 64) -> list[IrOpcode]:
    """Remove variables that are never read, together with their assignments.

    Each pass that removes a variable does not count against ``passes``.
    """
    ir = list(ops)
    used_vars: list[str] = []
    remaining = passes
    while remaining > 0:
        var = ""
        remove: set[int] = set()
        for i, op in enumerate(ir):
            if op.kind is IrKind.ALLOCA and not var:
                if op.name not in used_vars:
                    var = op.name
                    remove.add(i)
            elif op.kind is IrKind.VARREF and op.name == var:
                used_vars.append(var)
                remove.clear()
                var = ""
                break
            elif op.kind is IrKind.ASSIGN and op.name == var:
                for j in range(i, -1, -1):
                    remove.add(j)
                    if ir[j].kind is IrKind.LINE:
                        break

        if var:
            ir = [op for i, op in enumerate(ir) if i not in remove]
        else:
            remaining -= 1
    return ir


def stack_setup(ops: list[IrOpcode]) -> list[IrOpcode]:
    """Mark every function that touches the stack as needing a frame."""
    result: list[IrOpcode] = []
    current: IrOpcode | None = None
    for op in ops:
        if op.kind is IrKind.FUNCDEF:
            op = replace(op)
            current = op
        elif op.kind in _STACK_KINDS:
            if current is None:
                raise CompileError("stack allocation outside of a function")
            current.need_stack = True
        result.append(op)
    return result


def stack_reserve(ops: list[IrOpcode]) -> list[IrOpcode]:
    """Insert one stack reservation after each function header."""
    insert_index = 0
    size = 0
    inserts: list[tuple[int, int]] = []

    for i, op in enumerate(ops):
        if op.kind is IrKind.FUNCDEF and insert_index == 0:
            insert_index = i + 1
            size = 0
        elif op.kind in (IrKind.FUNCDEF, IrKind.END) and insert_index > 0:
            inserts.insert(0, (insert_index, size))
            insert_index = i + 1
            size = 0
            if op.kind is IrKind.END:
                break
        elif op.kind is IrKind.ALLOCA and i != 0:
            size += op.md.size

    result = list(ops)
    for index, reserved in inserts:
        result.insert(index, IrOpcode(IrKind.RESERVE, size=reserved))
    return result