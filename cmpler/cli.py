"""The ``cmpler`` command: build or run Small-C programs."""

from __future__ import annotations

import argparse
import logging
import operator
import os
import re
import subprocess
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path

from .config import Config, OptLevel
from .driver import compile_to_llvm_ir, compile_to_object, link_executable
from .errors import CodegenError, CompilerError
from .logger import init_logger

_log = logging.getLogger(__name__)

_VERSION = "0.1.0"


@dataclass
class BuildArgs:
    """Options of ``cmpler build``."""

    input: Path
    output: Path | None = None
    emit_ir: bool = False
    emit_obj: bool = False
    opt_level: OptLevel = OptLevel.DEFAULT


@dataclass
class RunArgs:
    """Options of ``cmpler run``."""

    input: Path
    jit: bool = False
    args: list[str] = field(default_factory=list)


def build_parser() -> argparse.ArgumentParser:
    """The argument parser of the ``cmpler`` command."""
    parser = argparse.ArgumentParser(
        prog="cmpler", description="Small-C compiler frontend"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_VERSION}")
    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    build = commands.add_parser("build", help="compile a program")
    build.add_argument("input", type=Path, metavar="FILE")
    build.add_argument("-o", "--output", type=Path)
    build.add_argument("--emit-ir", action="store_true")
    build.add_argument("--emit-obj", action="store_true")
    build.add_argument(
        "--opt-level",
        type=OptLevel,
        choices=list(OptLevel),
        default=OptLevel.DEFAULT,
    )

    run = commands.add_parser("run", help="compile and run a program")
    run.add_argument("input", type=Path, metavar="FILE")
    run.add_argument("--jit", action="store_true")
    run.add_argument(
        "args", nargs="*", metavar="ARGS", help="program arguments, given after --"
    )
    return parser


def _parse_cli(argv: Sequence[str] | None) -> BuildArgs | RunArgs:
    words = list(sys.argv[1:] if argv is None else argv)
    if "--" in words:
        split = words.index("--")
        head, tail, separated = words[:split], words[split + 1 :], True
    else:
        head, tail, separated = words, [], False

    parser = build_parser()
    ns = parser.parse_args(head)
    if ns.command == "build":
        if separated:
            parser.error("unexpected argument '--' found")
        return BuildArgs(ns.input, ns.output, ns.emit_ir, ns.emit_obj, ns.opt_level)
    if ns.args:
        parser.error(
            f"unexpected argument '{ns.args[0]}' found; "
            "program arguments go after '--'"
        )
    return RunArgs(ns.input, ns.jit, tail)


def launch_build(args: BuildArgs) -> None:
    """Write IR, an object file or a linked executable as ``args`` asks."""
    source = args.input.read_text(encoding="utf-8")
    opt_level = args.opt_level

    if args.emit_ir:
        ir = compile_to_llvm_ir(source, opt_level)
        out = args.output or args.input.with_suffix(".ll")
        out.write_text(ir, encoding="utf-8")
        print(f"[cmpler] Wrote LLVM IR to {out}")

    if args.emit_obj:
        out = args.output or args.input.with_suffix(".o")
        compile_to_object(source, opt_level, out)
        print(f"[cmpler] Wrote object file to {out}")

    if not args.emit_ir and not args.emit_obj:
        obj_path = args.input.with_suffix(".o")
        compile_to_object(source, opt_level, obj_path)
        if args.output is not None:
            exe_path = args.output
        elif os.name == "nt":
            exe_path = args.input.with_suffix(".exe")
        else:
            exe_path = Path("a.out")
        link_executable(obj_path, exe_path)
        print(f"[cmpler] Generated executable {exe_path}")


def launch_run(args: RunArgs) -> None:
    """Run the program, either in-process or as a linked executable."""
    source = args.input.read_text(encoding="utf-8")

    if args.jit:
        ir = compile_to_llvm_ir(source, OptLevel.DEFAULT)
        print(_execute_ir(ir, "main"))
        return

    obj_path = args.input.with_suffix(".o")
    compile_to_object(source, OptLevel.DEFAULT, obj_path)
    exe_path = Path("a.out")
    link_executable(obj_path, exe_path)
    _log.info("Running %s", exe_path)

    result = subprocess.run([str(exe_path.resolve()), *args.args], check=False)
    if result.returncode != 0:
        raise CodegenError(f"Execution failed: exit status: {result.returncode}")


def _run_cli(argv: Sequence[str] | None) -> None:
    cfg = Config.load()
    args = _parse_cli(argv)
    if isinstance(args, BuildArgs):
        args = replace(
            args,
            emit_ir=args.emit_ir or cfg.emit_ir,
            emit_obj=args.emit_obj or cfg.emit_obj,
            output=args.output if args.output is not None else cfg.output,
        )
        launch_build(args)
    else:
        if not args.jit and cfg.emit_ir:
            args = replace(args, jit=True)
        launch_run(args)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``cmpler`` command; returns the exit status."""
    init_logger()
    try:
        _run_cli(argv)
    except CompilerError as exc:
        print(f"error: {exc.report}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: I/O error: {exc}", file=sys.stderr)
        return 1
    return 0


# -- in-process execution of generated IR ---------------------------------

_DEFINE_RE = re.compile(r"define i32 @(\S+)\(\) \{")
_ALLOCA_RE = re.compile(r"(%\S+) = alloca i32, align \d+")
_STORE_RE = re.compile(r"store i\d+ (\S+), ptr (%\S+), align \d+")
_LOAD_RE = re.compile(r"(%\S+) = load i32, ptr (%\S+), align \d+")
_ARITH_RE = re.compile(r"(%\S+) = (add|sub|mul|sdiv) i32 (\S+), (\S+)")
_ICMP_RE = re.compile(r"(%\S+) = icmp (\w+) i\d+ (\S+), (\S+)")
_CONDBR_RE = re.compile(r"br i1 (\S+), label (%\S+), label (%\S+)")
_BR_RE = re.compile(r"br label (%\S+)")
_RET_RE = re.compile(r"ret i32 (\S+)")

_INT_MIN = -(1 << 31)


def _wrap32(value: int) -> int:
    return ((value - _INT_MIN) % (1 << 32)) + _INT_MIN


def _sdiv(a: int, b: int) -> int:
    if b == 0 or (a == _INT_MIN and b == -1):
        raise CodegenError("Execution failed: integer division error")
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


_ARITH: dict[str, Callable[[int, int], int]] = {
    "add": operator.add,
    "sub": operator.sub,
    "mul": operator.mul,
    "sdiv": _sdiv,
}

_ICMP: dict[str, Callable[[int, int], bool]] = {
    "slt": operator.lt,
    "sle": operator.le,
    "sgt": operator.gt,
    "sge": operator.ge,
    "eq": operator.eq,
    "ne": operator.ne,
}


def _parse_functions(ir: str) -> dict[str, dict[str, list[str]]]:
    functions: dict[str, dict[str, list[str]]] = {}
    blocks: dict[str, list[str]] | None = None
    current: list[str] | None = None
    for raw in ir.splitlines():
        line = raw.strip()
        if not line or line.startswith(";") or line.startswith("source_filename"):
            continue
        if (match := _DEFINE_RE.fullmatch(line)) is not None:
            blocks = functions.setdefault(match.group(1), {})
            current = None
        elif line == "}":
            blocks = current = None
        elif blocks is not None:
            if line.endswith(":"):
                current = blocks.setdefault(f"%{line[:-1]}", [])
            elif current is not None:
                current.append(line)
    return functions


def _operand(text: str, values: dict[str, int]) -> int:
    if text.startswith("%"):
        try:
            return values[text]
        except KeyError:
            raise CodegenError(f"Execution failed: use of undefined value {text}") from None
    if text == "true":
        return 1
    if text == "false":
        return 0
    return int(text)


def _run_block(
    instrs: list[str], values: dict[str, int], memory: dict[str, int]
) -> tuple[str, int | str]:
    """Execute one block; return ("ret", value) or ("br", label)."""
    for instr in instrs:
        if (m := _ALLOCA_RE.fullmatch(instr)) is not None:
            memory[m.group(1)] = 0
        elif (m := _STORE_RE.fullmatch(instr)) is not None:
            memory[m.group(2)] = _operand(m.group(1), values)
        elif (m := _LOAD_RE.fullmatch(instr)) is not None:
            try:
                values[m.group(1)] = memory[m.group(2)]
            except KeyError:
                raise CodegenError(
                    f"Execution failed: load from unknown slot {m.group(2)}"
                ) from None
        elif (m := _ARITH_RE.fullmatch(instr)) is not None:
            lhs = _operand(m.group(3), values)
            rhs = _operand(m.group(4), values)
            values[m.group(1)] = _wrap32(_ARITH[m.group(2)](lhs, rhs))
        elif (m := _ICMP_RE.fullmatch(instr)) is not None:
            lhs = _operand(m.group(3), values)
            rhs = _operand(m.group(4), values)
            values[m.group(1)] = int(_ICMP[m.group(2)](lhs, rhs))
        elif (m := _CONDBR_RE.fullmatch(instr)) is not None:
            taken = _operand(m.group(1), values)
            return "br", m.group(2) if taken else m.group(3)
        elif (m := _BR_RE.fullmatch(instr)) is not None:
            return "br", m.group(1)
        elif (m := _RET_RE.fullmatch(instr)) is not None:
            return "ret", _operand(m.group(1), values)
        else:
            raise CodegenError(f"Execution failed: unsupported instruction '{instr}'")
    raise CodegenError("Execution failed: block ends without a terminator")


def _execute_ir(ir: str, entry: str) -> int:
    """Run function ``entry`` of an IR module and return its i32 result."""
    blocks = _parse_functions(ir).get(entry)
    if not blocks:
        raise CodegenError(f"Failed to find '{entry}': function not defined")
    values: dict[str, int] = {}
    memory: dict[str, int] = {}
    label = next(iter(blocks))
    while True:
        kind, payload = _run_block(blocks[label], values, memory)
        if kind == "ret":
            assert isinstance(payload, int)
            return payload
        assert isinstance(payload, str)
        if payload not in blocks:
            raise CodegenError(f"Execution failed: branch to unknown block {payload}")
        label = payload


if __name__ == "__main__":
    sys.exit(main())