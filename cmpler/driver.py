"""The compilation pipeline, from source text to IR, objects and executables."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from .codegen import LLVMCodeGen
from .config import OptLevel
from .errors import CodegenError
from .nodes import Program
from .semantic import SemanticAnalyzer
from .syntax import Parser
from .tokens import lex

_log = logging.getLogger(__name__)

_OPT_DIGITS = {
    OptLevel.NONE: "0",
    OptLevel.LESS: "1",
    OptLevel.DEFAULT: "2",
    OptLevel.AGGRESSIVE: "3",
}


def compile_source(source: str) -> Program:
    """Lex, parse and check ``source``; return the checked program."""
    _log.info("Starting compilation")

    tokens = lex(source)
    _log.info("Lexing complete (%d tokens)", len(tokens))

    program = Parser(tokens).parse_program()
    _log.info("Parsing complete (%d declarations)", len(program.decls))

    SemanticAnalyzer().analyze(program)
    _log.info("Semantic analysis complete")

    return program


def compile_to_llvm_ir(source: str, opt_level: OptLevel = OptLevel.DEFAULT) -> str:
    """Compile ``source`` and return the textual LLVM IR module."""
    program = compile_source(source)
    return LLVMCodeGen.compile_program(program, opt_level)


def _object_command(opt_level: OptLevel, output: Path) -> list[str]:
    level = _OPT_DIGITS[opt_level]
    clang = shutil.which("clang")
    if clang is not None:
        return [clang, "-c", "-x", "ir", f"-O{level}", "-o", str(output), "-"]
    llc = shutil.which("llc")
    if llc is not None:
        return [llc, "-filetype=obj", f"-O={level}", "-o", str(output), "-"]
    raise CodegenError("Failed to get target: neither clang nor llc was found")


def compile_to_object(
    source: str, opt_level: OptLevel, output_path: str | os.PathLike[str]
) -> Path:
    """Compile ``source`` to a native object file at ``output_path``."""
    ir = compile_to_llvm_ir(source, opt_level)
    output = Path(output_path)
    command = _object_command(opt_level, output)
    try:
        result = subprocess.run(
            command, input=ir, text=True, capture_output=True, check=False
        )
    except OSError as exc:
        raise CodegenError(f"Failed to create target machine: {exc}") from exc
    if result.returncode != 0:
        detail = (result.stderr or "").strip() or f"exit status: {result.returncode}"
        raise CodegenError(f"Failed to write object file: {detail}")
    return output


def link_executable(
    object_file: str | os.PathLike[str], output_exe: str | os.PathLike[str]
) -> None:
    """Link ``object_file`` into ``output_exe`` with the system C compiler.

    Raises :class:`OSError` if the compiler cannot be started and
    :class:`CodegenError` if linking fails.
    """
    result = subprocess.run(
        ["cc", os.fspath(object_file), "-o", os.fspath(output_exe)], check=False
    )
    if result.returncode != 0:
        raise CodegenError(f"Linker failed: exit status: {result.returncode}")