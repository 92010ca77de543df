import pytest

from hcc.ast import (
    AstBinaryOp,
    AstFuncDef,
    AstNumber,
    AstReturn,
    AstRootNode,
    AstVarAssign,
    AstVarDeclare,
    AstVarRef,
)
from hcc.backend import CompileError
from hcc.compiler import Compiler, read_file
from hcc.metadata import Optimization


def _program(*statements):
    return AstRootNode([AstFuncDef("main", children=list(statements))])


def _compile(tmp_path, root, backend="qproc"):
    with Compiler() as compiler:
        compiler.open_output(tmp_path / "a.out")
        compiler.select_backend(backend)
        return compiler.compile_ast(root)


def test_unknown_backend_error():
    compiler = Compiler()
    with pytest.raises(CompileError) as info:
        compiler.select_backend("ThisBackendDoesNotExist")
    assert str(info.value) == "no such backend"


def test_types_error(tmp_path):
    # int main() {vec x; return x;}
    root = _program(AstVarDeclare(["x"], "vec"), AstReturn(AstVarRef("x")))
    with pytest.raises(CompileError) as info:
        _compile(tmp_path, root)
    assert str(info.value) == "compile error: unknown type vec"


def test_undefined_variable_in_return(tmp_path):
    # int main() {return x;}
    root = _program(AstReturn(AstVarRef("x")))
    with pytest.raises(CompileError) as info:
        _compile(tmp_path, root)
    assert str(info.value) == "ir compile error: undefined variable x"


def test_undefined_variable_in_expression(tmp_path):
    # int main() {int z; z = y + 1;}
    root = _program(
        AstVarDeclare(["z"], "int"),
        AstVarAssign("z", AstBinaryOp("add", AstVarRef("y"), AstNumber(1))),
    )
    with pytest.raises(CompileError) as info:
        _compile(tmp_path, root)
    assert str(info.value) == "ir compile error: undefined variable y"


def test_qproc_function_codegen(tmp_path):
    # int main() {return 0;}
    output = _compile(tmp_path, _program(AstReturn(AstNumber(0))))
    assert output == "main:\nmovi r0 0\npop ip\n"
    assert read_file(tmp_path / "a.out") == output


def test_hypercpu_function_codegen(tmp_path):
    output = _compile(tmp_path, _program(AstReturn(AstNumber(0))), "hypercpu")
    assert output == "main:\nmov x0, 0u0;\nret;\n"


def test_constant_variable_is_propagated(tmp_path):
    # int main() {int x; x = 5; return x;}
    root = _program(
        AstVarDeclare(["x"], "int"),
        AstVarAssign("x", AstNumber(5)),
        AstReturn(AstVarRef("x")),
    )
    assert _compile(tmp_path, root) == "main:\nmovi r0 5\npop ip\n"


def test_no_backend_selected(tmp_path):
    with Compiler() as compiler:
        compiler.open_output(tmp_path / "a.out")
        with pytest.raises(CompileError, match="^no backend selected$"):
            compiler.compile_ast(_program(AstReturn(AstNumber(0))))


def test_no_output_opened():
    compiler = Compiler()
    compiler.select_backend("qproc")
    with pytest.raises(CompileError, match="^no output opened$"):
        compiler.compile_ast(_program(AstReturn(AstNumber(0))))


def test_missing_root(tmp_path):
    with Compiler() as compiler:
        compiler.open_output(tmp_path / "a.out")
        compiler.select_backend("qproc")
        with pytest.raises(CompileError, match="root == nullptr"):
            compiler.compile_ast(None)


def test_print_ast(tmp_path, capsys):
    with Compiler() as compiler:
        compiler.print_ast = True
        compiler.open_output(tmp_path / "a.out")
        compiler.select_backend("qproc")
        compiler.compile_ast(_program(AstReturn(AstNumber(0))))
    printed = capsys.readouterr().out
    assert printed == (
        "AstRootNode\n"
        "  AstFuncDef\n"
        "    args:\n"
        "    name: main\n"
        "    AstReturn\n"
        "      AstNumber\n"
        "        value: 0\n"
    )


def test_default_optimizations_enabled():
    compiler = Compiler()
    assert all(compiler.optimizations.has_flag(opt) for opt in Optimization)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("constant-folding", Optimization.CONSTANT_FOLDING),
        ("emit-frame-pointer", Optimization.FP_OMISSION),
        ("function-body-elimination", Optimization.FUNCTION_BODY_ELIMINATION),
        ("dce", Optimization.DCE),
        ("stack-reserve", Optimization.STACK_RESERVE),
        ("constant-propagation", Optimization.CONSTANT_PROPAGATION),
        ("no-such-thing", None),
    ],
)
def test_get_optimization_from_name(name, expected):
    assert Compiler().get_optimization_from_name(name) is expected


def test_select_backend_sets_abi():
    compiler = Compiler()
    compiler.select_backend("hypercpu")
    assert compiler.backend.abi.return_register == "x0"
    compiler.select_backend("qproc")
    assert compiler.backend.abi.return_register == "r0"


def test_open_output_replaces_previous(tmp_path):
    with Compiler() as compiler:
        compiler.open_output(tmp_path / "first.s")
        compiler.open_output(tmp_path / "second.s")
        compiler.select_backend("qproc")
        compiler.compile_ast(_program(AstReturn(AstNumber(0))))
    assert read_file(tmp_path / "first.s") == ""
    assert read_file(tmp_path / "second.s") == "main:\nmovi r0 0\npop ip\n"


def test_read_file_round_trip(tmp_path):
    path = tmp_path / "src.c"
    path.write_text("int main() {return 0;}\n")
    assert read_file(path) == "int main() {return 0;}\n"


def test_read_file_missing(tmp_path):
    missing = tmp_path / "missing.c"
    with pytest.raises(CompileError) as info:
        read_file(missing)
    assert str(info.value) == f"could not open {missing}"