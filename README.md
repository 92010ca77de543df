# hcc

`hcc` is the core of a small C compiler. It takes the syntax tree of a
C-like program, lowers it to an intermediate representation (IR), runs a
few optimization passes over that IR and emits assembly text for one of
two targets:

- `qproc`
- `hypercpu` (beta)

The package has no runtime dependencies.

## What it compiles

Programs are handed to the compiler as trees of nodes from `hcc.ast`:

| node            | meaning                                                   |
|-----------------|-----------------------------------------------------------|
| `AstRootNode`   | the whole translation unit                                |
| `AstFuncDef`    | a function; `args` maps argument names to type names      |
| `AstVarDeclare` | declaration of one or more variables of one type          |
| `AstVarAssign`  | `name = expr`                                             |
| `AstNumber`     | an integer literal                                        |
| `AstBinaryOp`   | `op` is one of `add`, `sub`, `mul`, `div`                 |
| `AstReturn`     | `return` with or without an expression                    |
| `AstVarRef`     | a read of a variable                                      |
| `AstAddrof`     | the address of a variable (`&x`)                          |
| `AstFuncCall`   | a call of a named function (arguments are not passed)     |
| `AstAsm`        | inline assembly copied into the output as it is           |

Variables may have the types `void`, `char`, `short`, `int` and `long`.
Every node can write itself as an indented tree to standard output with
`print()`.

## Using the compiler

`hcc.compiler.Compiler` ties the stages together:

```python
from hcc.ast import AstFuncDef, AstNumber, AstReturn, AstRootNode
from hcc.compiler import Compiler

root = AstRootNode([
    AstFuncDef("main", children=[AstReturn(AstNumber(0))]),
])

with Compiler() as compiler:
    compiler.select_backend("qproc")
    compiler.open_output("a.s")
    code = compiler.compile_ast(root)
```

`compile_ast` writes the generated assembly to the opened output file and
also returns it. The program above gives:

```
main:
movi r0 0
pop ip
```

- `select_backend` accepts `"qproc"` or `"hypercpu"`; any other name
  raises `hcc.backend.CompileError("no such backend")`.
- `open_output` closes any previous output first; `close()`, or leaving
  the `with` block, closes it.
- Setting `print_ast = True` prints the tree before compiling.
- `hcc.compiler.read_file` returns the text of a file, raising
  `CompileError("could not open ...")` when it cannot be read.

Errors are raised as `hcc.backend.CompileError`. Problems found while
lowering the tree are prefixed with `compile error:` (for example
`compile error: unknown type vec`); problems found while generating code
are prefixed with `ir compile error:` (for example
`ir compile error: undefined variable x`). Calling `compile_ast` without
an output or a backend raises `no output opened` or `no backend selected`.

## Optimizations

All optimizations are enabled by default and kept in
`Compiler.optimizations`, a `hcc.flags.Flags` collection
(`set_flag`, `unset_flag`, `flip_flag`, `has_flag`). Names map to
`hcc.metadata.Optimization` members through
`Compiler.get_optimization_from_name` or
`hcc.metadata.optimization_from_name`; an unknown name gives `None`.

| name                        | effect                                                        |
|-----------------------------|---------------------------------------------------------------|
| `constant-folding`          | literals are kept as compile-time constants and folded        |
| `constant-propagation`      | variables assigned once from a constant expression are inlined |
| `dce`                       | variables that are never read are removed with their stores   |
| `emit-frame-pointer`        | functions that allocate stack variables get a frame           |
| `stack-reserve`             | stack space for locals is reserved once per function          |
| `function-body-elimination` | a function that returns at once becomes a label and a return  |

The IR passes are also available on their own in `hcc.optimizations`
(`constant_propagation`, `dce_unused`, `stack_setup`, `stack_reserve`);
each takes a list of `hcc.opcodes.IrOpcode` and returns a new list.

## Targets

`hcc.qproc.QprocBackend` and `hcc.hypercpu.HyperCPUBackend` derive from
`hcc.backend.Backend` and collect the generated assembly in their
`output` string. Setting `codegen_comments = True` on a backend adds a
comment line before each emitted construct. Each backend carries an
`hcc.metadata.ABIMetadata`: values are returned in `r0` on qproc and in
`x0` on HyperCPU. Type sizes follow the target; `long` is 4 bytes on
qproc and 8 bytes on HyperCPU.

## What it does not do

The package has no front end: it does not read or parse C source text,
so programs must be built as `hcc.ast` trees. It also has no
command-line tool; compiling is done from Python through `Compiler`.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.