# cmpler

A compiler for a small subset of C. It reads a source file, checks it, and
produces textual LLVM IR, an object file, or a linked executable. It can
also evaluate a program's `main` directly from the generated IR.

## The language

A program is a sequence of top-level declarations:

- functions without parameters: `int main() { ... }`
- global variables with an initialiser: `int x = 5;`

Inside a function body you can write:

- local variables: `int y = x + 2;`
- assignments: `y = y + 1;`
- `return expr;`
- `if (cond) { ... } else { ... }`
- `while (cond) { ... }`
- `for (init; cond; inc) { ... }` (each part is optional)
- nested blocks `{ ... }` and empty statements `;`

Expressions are integer literals, variables, parentheses and the binary
operators `* /` (tightest), `+ -`, `< <= > >=`, `== !=` and `=` (loosest,
right-associative). The tokens `&&`, `||`, `!` and the keyword `void` are
recognised by the lexer but are not accepted by the parser. Characters that
form no token become error tokens, which the parser then rejects.

Before code generation the program is checked: every variable must be
declared in an enclosing scope, and no name may be declared twice in the
same scope. Inner blocks may shadow outer names; `if`, `while` and `for`
bodies each open their own scope.

## Installing

```
pip install .
```

Emitting IR needs nothing else. Producing object files needs `clang`
(preferred) or `llc` on your `PATH`; linking executables runs `cc`.

## Command line

```
cmpler build program.c                 # compile and link an executable
cmpler build program.c -o prog         # choose the output file's name
cmpler build program.c --emit-ir       # write LLVM IR (program.ll)
cmpler build program.c --emit-obj      # write an object file (program.o)
cmpler build program.c --opt-level aggressive
cmpler run program.c                   # build, link and run a.out
cmpler run program.c -- arg1 arg2      # pass arguments to the program
cmpler run program.c --jit             # evaluate main and print its result
cmpler --version
```

Optimisation levels are `none`, `less`, `default` and `aggressive`;
`default` is used when none is given. Operations on constants are always
folded while the IR is built; at any level other than `none`, branches on
constant conditions are also folded and unreachable blocks removed. The
level is passed on to `clang`/`llc` when an object file is produced.

A plain `build` writes the object file next to the input (`<input>.o`) and
links the executable to `--output`, or else to `a.out` (`<input>.exe` on
Windows). `run` without `--jit` always links to `a.out` in the working
directory and fails if the program exits with a non-zero status.

`run --jit` does not produce native code: it interprets the generated IR of
`main` in Python and prints the returned `i32`.

On failure the command prints `error: <stage>: <message>` to standard error
and exits with status 1.

## Configuration

`cmpler` looks for a `cmpler.toml` in the current directory and each of its
parents, using the first one it finds.

```toml
emit_ir = false
emit_obj = false
target = "x86_64"
output = "build/prog"
verbose = false
```

For `build`, `emit_ir` and `emit_obj` from the file switch those outputs on
when the command line does not, and `output` is used when `-o` is not given.
For `run`, `emit_ir = true` in the file turns on `--jit`. `target` and
`verbose` are read and type-checked but not otherwise used. The
optimisation level cannot be set in the file. A wrongly typed value or
malformed TOML is reported as a configuration error.

## Logging

Log records of the `cmpler` logger go to standard output and to
`logs/cmpler.log`, rotated at midnight. The level is taken from the
`CMPLER_LOG` environment variable (`trace`, `debug`, `info`, `warn`,
`warning`, `error` or `off`) and defaults to `info`.

## Using it as a library

```python
from cmpler.config import OptLevel
from cmpler.driver import compile_source, compile_to_llvm_ir
from cmpler.errors import CompilerError

source = "int main() { return (1 + 2) * 3; }"

try:
    program = compile_source(source)            # lex, parse and check
    ir = compile_to_llvm_ir(source, OptLevel.NONE)
except CompilerError as err:
    print(f"error: {err.report}")
```

- `cmpler.driver`: `compile_source`, `compile_to_llvm_ir`,
  `compile_to_object(source, opt_level, output_path)` and
  `link_executable(object_file, output_exe)`.
- `cmpler.tokens`: `lex`, `Token`, `TokenKind`, `Span`.
- `cmpler.syntax.Parser(tokens).parse_program()` returns a
  `cmpler.nodes.Program`, a tree of frozen dataclasses.
- `cmpler.semantic.SemanticAnalyzer().analyze(program)` and the scoped
  `cmpler.symbols.SymbolTable`.
- `cmpler.codegen.LLVMCodeGen.compile_program(program, opt_level)` returns
  the IR module as text.
- `cmpler.config.Config.load()` / `Config.from_file(path)` and
  `find_config_file(name, start)`.
- `cmpler.logger.init_logger(log_dir)`.

Errors are subclasses of `cmpler.errors.CompilerError`: `ParseError`
(`ExpectedTokenError`, `UnexpectedTokenError`, `UnexpectedEofError`),
`SemanticError` (`DuplicateSymbolError`, `UndefinedVariableError`,
`TypeMismatchError`), `ConfigError` and `CodegenError`. Each has a `report`
property giving the message prefixed with its stage.

## Limitations

- Functions take no parameters and cannot be called from expressions.
- Global variables are checked but no IR is generated for them, so using a
  global inside a function fails at code generation.
- Only `int` values exist; there are no unary operators, logical
  operators, pointers or arrays.