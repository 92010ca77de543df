"""Syntax tree nodes and their lowering to IR."""

from __future__ import annotations

import abc
from typing import Any

from hcc.backend import CompileError
from hcc.metadata import Optimization
from hcc.opcodes import IrKind, IrOpcode

_BINARY_OPS = {
    "add": IrKind.ADD,
    "sub": IrKind.SUB,
    "mul": IrKind.MUL,
    "div": IrKind.DIV,
}


def _line(indent: int, text: str) -> None:
    print("  " * indent + text)


class AstNode(abc.ABC):
    """A syntax tree node.

    ``compile`` appends IR to ``hcc.ir`` and raises CompileError on failure.
    """

    def __init__(self, children: list[AstNode] | None = None) -> None:
        self.children: list[AstNode] = list(children) if children else []

    @abc.abstractmethod
    def print(self, indent: int = 0) -> None:
        """Write the subtree to standard output."""

    def compile(self, hcc: Any) -> None:
        for child in self.children:
            child.compile(hcc)


class AstRootNode(AstNode):
    """The top of a translation unit."""

    def print(self, indent: int = 0) -> None:
        _line(indent, "AstRootNode")
        for child in self.children:
            child.print(indent + 1)


class AstFuncDef(AstNode):
    """A function definition; ``args`` maps argument names to type names."""

    def __init__(
        self,
        name: str = "",
        args: dict[str, str] | None = None,
        children: list[AstNode] | None = None,
    ) -> None:
        super().__init__(children)
        self.name = name
        self.args: dict[str, str] = dict(args) if args else {}

    def _sorted_args(self) -> list[tuple[str, str]]:
        return sorted(self.args.items())

    def print(self, indent: int = 0) -> None:
        _line(indent, "AstFuncDef")
        _line(indent + 1, "args:")
        for arg_name, arg_type in self._sorted_args():
            _line(indent + 2, f"{arg_name}: {arg_type}")
        _line(indent + 1, f"name: {self.name}")
        for child in self.children:
            child.print(indent + 1)

    def compile(self, hcc: Any) -> None:
        op = IrOpcode(IrKind.FUNCDEF, name=self.name)
        for arg_name, arg_type in self._sorted_args():
            op.arg_names.append(arg_name)
            op.arg_types.append(hcc.backend.get_type(arg_type))
        hcc.ir.add(op)
        super().compile(hcc)


class AstVarDeclare(AstNode):
    """Declaration of one or more variables of the same type."""

    def __init__(self, names: list[str] | None = None, type_name: str = "") -> None:
        super().__init__()
        self.names: list[str] = list(names) if names else []
        self.type_name = type_name

    def print(self, indent: int = 0) -> None:
        _line(indent, "AstVarDeclare")
        _line(indent + 1, "names: " + "".join(f"{name} " for name in self.names))
        _line(indent + 1, f"type: {self.type_name}")

    def compile(self, hcc: Any) -> None:
        var_type = hcc.backend.get_type(self.type_name)
        for name in self.names:
            hcc.ir.add(IrOpcode(IrKind.ALLOCA, name=name, md=var_type))


class AstVarAssign(AstNode):
    """Assignment of an expression to a variable."""

    def __init__(self, name: str, expr: AstNode) -> None:
        super().__init__()
        self.name = name
        self.expr = expr

    def print(self, indent: int = 0) -> None:
        _line(indent, "AstVarAssign")
        _line(indent + 1, f"name: {self.name}")
        _line(indent + 1, "expr:")
        self.expr.print(indent + 2)

    def compile(self, hcc: Any) -> None:
        hcc.ir.add_reset()
        hcc.ir.add_line()
        self.expr.compile(hcc)
        hcc.ir.add(IrOpcode(IrKind.ASSIGN, name=self.name))


class AstNumber(AstNode):
    """An integer literal."""

    def __init__(self, value: int) -> None:
        super().__init__()
        self.value = value

    def print(self, indent: int = 0) -> None:
        _line(indent, "AstNumber")
        _line(indent + 1, f"value: {self.value}")

    def compile(self, hcc: Any) -> None:
        if hcc.optimizations.has_flag(Optimization.CONSTANT_FOLDING):
            hcc.ir.add(IrOpcode(IrKind.CCTV, value=self.value))
        else:
            hcc.ir.add(IrOpcode(IrKind.CREG, value=self.value, reg_name=""))


class AstBinaryOp(AstNode):
    """An arithmetic operation; ``op`` is one of add, sub, mul, div."""

    def __init__(self, op: str, left: AstNode, right: AstNode) -> None:
        super().__init__()
        self.op = op
        self.left = left
        self.right = right

    def print(self, indent: int = 0) -> None:
        _line(indent, "AstBinaryOp")
        _line(indent + 1, f"op: {self.op}")
        _line(indent + 1, "left:")
        self.left.print(indent + 2)
        _line(indent + 1, "right:")
        self.right.print(indent + 2)

    def compile(self, hcc: Any) -> None:
        self.left.compile(hcc)
        self.right.compile(hcc)
        try:
            kind = _BINARY_OPS[self.op]
        except KeyError:
            raise CompileError(f"unknown operator {self.op}") from None
        hcc.ir.add(IrOpcode(kind))


class AstReturn(AstNode):
    """A return statement, with or without a value."""

    def __init__(self, expr: AstNode | None = None) -> None:
        super().__init__()
        self.expr = expr

    def print(self, indent: int = 0) -> None:
        _line(indent, "AstReturn")
        if self.expr is not None:
            self.expr.print(indent + 1)

    def compile(self, hcc: Any) -> None:
        hcc.ir.add_reset()
        if self.expr is not None:
            self.expr.compile(hcc)
        hcc.ir.add(IrOpcode(IrKind.RET))


class AstVarRef(AstNode):
    """A read of a variable."""

    def __init__(self, name: str) -> None:
        super().__init__()
        self.name = name

    def print(self, indent: int = 0) -> None:
        _line(indent, self.name)

    def compile(self, hcc: Any) -> None:
        hcc.ir.add(IrOpcode(IrKind.VARREF, name=self.name))


class AstAsm(AstNode):
    """Inline assembly copied to the output verbatim."""

    def __init__(self, code: str) -> None:
        super().__init__()
        self.code = code

    def print(self, indent: int = 0) -> None:
        _line(indent, "AstAsm")

    def compile(self, hcc: Any) -> None:
        hcc.ir.add(IrOpcode(IrKind.ASM, code=self.code))


class AstAddrof(AstNode):
    """The address of a variable."""

    def __init__(self, name: str) -> None:
        super().__init__()
        self.name = name

    def print(self, indent: int = 0) -> None:
        _line(indent, "&" + self.name)

    def compile(self, hcc: Any) -> None:
        hcc.ir.add(IrOpcode(IrKind.ADDROF, name=self.name))


class AstFuncCall(AstNode):
    """A call of a named function; the arguments are not yet passed."""

    def __init__(self, name: str, args: list[AstNode] | None = None) -> None:
        super().__init__()
        self.name = name
        self.args: list[AstNode] = list(args) if args else []

    def print(self, indent: int = 0) -> None:
        _line(indent, "AstFuncCall")
        _line(indent + 1, f"name: {self.name}")
        for arg in self.args:
            arg.print(indent + 1)

    def compile(self, hcc: Any) -> None:
        hcc.ir.add(IrOpcode(IrKind.CALL, name=self.name))