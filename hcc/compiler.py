"""The compiler driver: backend selection, optimizations and output."""

from __future__ import annotations

from pathlib import Path
from typing import IO

from hcc.ast import AstNode
from hcc.backend import Backend, CompileError
from hcc.flags import Flags
from hcc.hypercpu import HyperCPUBackend
from hcc.ir import IR
from hcc.metadata import FunctionMetadata, Optimization, optimization_from_name
from hcc.qproc import QprocBackend
from hcc.value import Value

_BACKENDS: dict[str, type[Backend]] = {
    "qproc": QprocBackend,
    "hypercpu": HyperCPUBackend,
}

_DEFAULT_OPTIMIZATIONS = (
    Optimization.CONSTANT_FOLDING,
    Optimization.FUNCTION_BODY_ELIMINATION,
    Optimization.DCE,
    Optimization.FP_OMISSION,
    Optimization.STACK_RESERVE,
    Optimization.CONSTANT_PROPAGATION,
)


def read_file(filename: str | Path) -> str:
    """Return the whole text of ``filename``."""
    try:
        return Path(filename).read_text()
    except OSError as exc:
        raise CompileError(f"could not open {filename}") from exc


class Compiler:
    """Compiler state shared by the AST, the IR and the backend."""

    def __init__(self) -> None:
        self.print_ast = False
        self.backend: Backend | None = None
        self.ir = IR()
        self.optimizations: Flags[Optimization] = Flags()
        for optimization in _DEFAULT_OPTIMIZATIONS:
            self.optimizations.set_flag(optimization)
        self.current_function = FunctionMetadata()
        self.values: list[Value] = []
        self._output: IO[str] | None = None

    def __enter__(self) -> Compiler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the output file, if one is open."""
        if self._output is not None:
            self._output.close()
            self._output = None

    def open_output(self, filename: str | Path) -> None:
        """Direct generated code to ``filename``, closing any previous output."""
        self.close()
        self._output = open(filename, "w")

    def select_backend(self, name: str) -> None:
        """Choose the code generator by name."""
        try:
            self.backend = _BACKENDS[name]()
        except KeyError:
            raise CompileError("no such backend") from None

    def get_optimization_from_name(self, name: str) -> Optimization | None:
        return optimization_from_name(name)

    def compile_ast(self, root: AstNode | None) -> str:
        """Compile a syntax tree, write the code to the output and return it."""
        if self._output is None:
            raise CompileError("no output opened")
        if self.backend is None:
            raise CompileError("no backend selected")
        if root is None:
            raise CompileError("root == nullptr")

        if self.print_ast:
            root.print()

        try:
            root.compile(self)
        except CompileError as exc:
            raise CompileError(f"compile error: {exc}") from exc

        error = self.ir.results_in_error(self)
        if error is not None:
            raise CompileError(f"ir compile error: {error}") from error

        self.ir.perform_static_optimizations(self)
        try:
            self.ir.compile(self)
        except CompileError as exc:
            raise CompileError(f"ir compile error: {exc}") from exc

        self._output.write(self.backend.output)
        self._output.flush()
        return self.backend.output