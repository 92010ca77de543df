"""Base class of code generation backends."""

from __future__ import annotations

from hcc.metadata import ABIMetadata, TypeMetadata


class CompileError(Exception):
    """Raised when the program cannot be compiled."""


def _to_signed(value: int, bits: int) -> int:
    """Reinterpret the low ``bits`` bits of ``value`` as a signed integer."""
    mask = (1 << bits) - 1
    value &= mask
    if value >> (bits - 1):
        value -= 1 << bits
    return value


class Backend:
    """A code generator; the base class emits nothing."""

    comment_prefix = "//"

    def __init__(self) -> None:
        self.reg_index = 0
        self.output = ""
        self.abi = ABIMetadata()
        self.codegen_comments = False
        self.types: dict[str, TypeMetadata] = {}

    def _comment(self, text: str, prefix: str | None = None) -> None:
        if self.codegen_comments:
            self.output += f"{prefix or self.comment_prefix} {text}\n"

    def increment_reg_index(self) -> int:
        return 0

    def reset_reg_index(self) -> None:
        self.reg_index = 0

    def emit_function_prologue(self, name: str) -> None:
        pass

    def emit_function_epilogue(self) -> None:
        pass

    def emit_mov_const(self, value: int, reg_name: str = "") -> str:
        return ""

    def emit_add(self, rout: str, rlhs: str, rrhs: str) -> None:
        pass

    def emit_sub(self, rout: str, rlhs: str, rrhs: str) -> None:
        pass

    def emit_mul(self, rout: str, rlhs: str, rrhs: str) -> None:
        pass

    def emit_div(self, rout: str, rlhs: str, rrhs: str) -> None:
        pass

    def emit_move(self, rdest: str, rsrc: str) -> None:
        pass

    def emit_reserve_stack_space(self, size: int) -> None:
        pass

    def emit_load_from_stack(self, align: int, size: int, load_reg: str = "") -> str:
        return ""

    def emit_store_to_stack(self, align: int, size: int, rsrc: str) -> None:
        pass

    def emit_loadaddr_from_stack(self, align: int, load_reg: str = "") -> str:
        return ""

    def emit_call(self, name: str) -> None:
        pass

    def emit_push(self, reg: str) -> None:
        pass

    def emit_pop(self, reg: str) -> None:
        pass

    def emit_single_ret(self) -> None:
        pass

    def emit_label(self, name: str) -> None:
        pass

    def get_type(self, name: str) -> TypeMetadata:
        """Return the type registered under ``name``."""
        try:
            return self.types[name]
        except KeyError:
            raise CompileError(f"unknown type {name}") from None