"""Code generation for the HyperCPU assembler."""

from __future__ import annotations

from hcc.backend import Backend, _to_signed
from hcc.metadata import TypeMetadata


class HyperCPUBackend(Backend):
    """Emits HyperCPU assembly."""

    comment_prefix = "//"

    def __init__(self) -> None:
        super().__init__()
        for name, size in (("void", 0), ("char", 1), ("short", 2), ("int", 4), ("long", 8)):
            self.types[name] = TypeMetadata(name, size)
        self.abi.return_register = "x0"
        self.abi.args_registers = [f"x{i}" for i in range(2, 8)]

    def increment_reg_index(self) -> int:
        result = self.reg_index
        self.reg_index += 1
        if self.reg_index > 7:
            self.reg_index = 0
        return result

    def emit_function_prologue(self, name: str) -> None:
        self._comment("emit_function_prologue")
        self.output += f"{name}:\npush xbp;\nmov xbp, xsp;\n"

    def emit_function_epilogue(self) -> None:
        self._comment("emit_function_epilogue")
        self.output += "mov xsp, xbp;\npop xbp;\nret;\n"

    def emit_mov_const(self, value: int, reg_name: str = "") -> str:
        self._comment("emit_mov_const")
        if not reg_name:
            reg_name = f"x{self.increment_reg_index()}"
        self.output += f"mov {reg_name}, 0u{_to_signed(value, 64)};\n"
        return reg_name

    def _binary(self, mnemonic: str, rout: str, rlhs: str, rrhs: str) -> None:
        self._comment(f"emit_{mnemonic}")
        self.output += f"{mnemonic} {rlhs}, {rrhs};\n"
        if rout != rlhs:
            self.output += f"mov {rout}, {rlhs};\n"

    def emit_add(self, rout: str, rlhs: str, rrhs: str) -> None:
        self._binary("add", rout, rlhs, rrhs)

    def emit_sub(self, rout: str, rlhs: str, rrhs: str) -> None:
        self._binary("sub", rout, rlhs, rrhs)

    def emit_mul(self, rout: str, rlhs: str, rrhs: str) -> None:
        self._binary("mul", rout, rlhs, rrhs)

    def emit_div(self, rout: str, rlhs: str, rrhs: str) -> None:
        self._comment("emit_div")
        self.output += "push x1;\n"
        if rrhs != "x2":
            self.output += f"mov x2, {rrhs};\n"
        self.output += f"div {rlhs};\n"
        self.output += "pop x1;\n"
        if rout != rlhs:
            self.output += f"mov {rlhs}, {rout};\n"

    def emit_move(self, rdest: str, rsrc: str) -> None:
        if rdest != rsrc:
            self._comment("emit_move")
            self.output += f"mov {rdest}, {rsrc};\n"

    def emit_reserve_stack_space(self, size: int) -> None:
        self._comment("emit_reserve_stack_space")
        self.output += f"sub xsp, 0u{_to_signed(size, 64)};\n"

    @staticmethod
    def _frame_offset(align: int) -> int:
        return _to_signed(0xFF - align + 1, 32)

    def emit_load_from_stack(self, align: int, size: int, load_reg: str = "") -> str:
        self._comment("emit_load_from_stack")
        reg = load_reg or f"x{self.increment_reg_index()}"
        bits = _to_signed(size * 8, 32)
        self.output += f"mov {reg}, b{bits} ptr [xbp+0u{self._frame_offset(align)}];\n"
        return reg

    def emit_store_to_stack(self, align: int, size: int, rsrc: str) -> None:
        self._comment("emit_store_from_stack")
        bits = _to_signed(size * 8, 32)
        self.output += f"mov b{bits} ptr [xbp+0u{self._frame_offset(align)}], {rsrc};\n"

    def emit_loadaddr_from_stack(self, align: int, load_reg: str = "") -> str:
        self._comment("emit_loadaddr_from_stack")
        reg = load_reg or str(self.increment_reg_index())
        if reg == "r0":
            reg = str(self.increment_reg_index())
        reg = "r" + reg
        self.output += f"mov {reg}, xbp;\n"
        self.output += f"sub {reg}, {_to_signed(align, 32)};\n"
        return reg

    def emit_call(self, name: str) -> None:
        self._comment("emit_call")
        self.output += f"call {name};\n"

    def emit_push(self, reg: str) -> None:
        self._comment("emit_push")
        self.output += f"push {reg};\n"

    def emit_pop(self, reg: str) -> None:
        self._comment("emit_pop")
        self.output += f"pop {reg};\n"

    def emit_single_ret(self) -> None:
        self._comment("emit_single_ret")
        self.output += "ret;\n"

    def emit_label(self, name: str) -> None:
        self._comment("emit_label")
        self.output += f"{name}:\n"