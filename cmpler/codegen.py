"""Generation of textual LLVM IR from a checked syntax tree."""

from __future__ import annotations

import operator
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from .config import OptLevel
from .errors import CodegenError
from .nodes import (
    Binary,
    BlockStmt,
    EmptyStmt,
    Expr,
    ExprStmt,
    ForStmt,
    FunctionDecl,
    IfStmt,
    IntLiteral,
    LocalVarStmt,
    Program,
    ReturnStmt,
    Stmt,
    VarRef,
    WhileStmt,
)
from .tokens import TokenKind

_I32 = "i32"
_I1 = "i1"
_BITS = {_I32: 32, _I1: 1}
_ALIGN = {_I32: 4, _I1: 1}

MODULE_NAME = "cmpler_module"


def _sdiv(a: int, b: int, bits: int) -> int | None:
    """Signed division truncating toward zero; None where the result is undefined."""
    if b == 0 or (a == -(1 << (bits - 1)) and b == -1):
        return None
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


_ARITHMETIC: dict[TokenKind, tuple[str, str, Callable[[int, int, int], int | None]]] = {
    TokenKind.PLUS: ("add", "addtmp", lambda a, b, _: a + b),
    TokenKind.MINUS: ("sub", "subtmp", lambda a, b, _: a - b),
    TokenKind.STAR: ("mul", "multmp", lambda a, b, _: a * b),
    TokenKind.SLASH: ("sdiv", "divtmp", _sdiv),
}

_COMPARISONS: dict[TokenKind, tuple[str, str]] = {
    TokenKind.LESS: ("slt", "lttmp"),
    TokenKind.LESS_EQUAL: ("sle", "letmp"),
    TokenKind.GREATER: ("sgt", "gttmp"),
    TokenKind.GREATER_EQUAL: ("sge", "getmp"),
    TokenKind.EQUAL: ("eq", "eqtmp"),
    TokenKind.NOT_EQUAL: ("ne", "netmp"),
}

_PREDICATES: dict[str, Callable[[int, int], bool]] = {
    "slt": operator.lt,
    "sle": operator.le,
    "sgt": operator.gt,
    "sge": operator.ge,
    "eq": operator.eq,
    "ne": operator.ne,
}


@dataclass(frozen=True, slots=True)
class _Value:
    ty: str
    ref: str
    const: int | None = None  # bit pattern, when the value is a constant

    @property
    def signed(self) -> int:
        bits = _BITS[self.ty]
        assert self.const is not None
        return self.const - (1 << bits) if self.const >> (bits - 1) else self.const


def _constant(ty: str, value: int) -> _Value:
    bits = _BITS[ty]
    pattern = value & ((1 << bits) - 1)
    if ty == _I1:
        ref = "true" if pattern else "false"
    else:
        ref = str(pattern - (1 << bits) if pattern >> (bits - 1) else pattern)
    return _Value(ty, ref, pattern)


@dataclass(slots=True)
class _Instr:
    text: str
    is_terminator: bool = False
    targets: tuple[str, ...] = ()
    condition: _Value | None = None


def _jump(target: str) -> _Instr:
    return _Instr(f"br label %{target}", True, (target,))


@dataclass(slots=True)
class _Block:
    name: str
    instrs: list[_Instr] = field(default_factory=list)

    @property
    def terminated(self) -> bool:
        return bool(self.instrs) and self.instrs[-1].is_terminator

    def render(self) -> str:
        return "\n".join([f"{self.name}:", *(f"  {i.text}" for i in self.instrs)])


def _make_unique(base: str, taken: set[str], counter: int) -> tuple[str, int]:
    name = base
    while name in taken:
        counter += 1
        name = f"{base}{counter}"
    taken.add(name)
    return name, counter


@dataclass(slots=True)
class _Function:
    name: str
    blocks: list[_Block] = field(default_factory=list)
    taken: set[str] = field(default_factory=set)
    last_unique: int = 0

    def unique(self, base: str) -> str:
        name, self.last_unique = _make_unique(base, self.taken, self.last_unique)
        return name

    def append_block(self, base: str) -> _Block:
        block = _Block(self.unique(base))
        self.blocks.append(block)
        return block

    def simplify_cfg(self) -> None:
        """Fold constant branches and drop blocks that can no longer be reached."""
        for block in self.blocks:
            block.instrs = [_fold_branch(instr) for instr in block.instrs]
        by_name = {block.name: block for block in self.blocks}
        reachable: set[str] = set()
        pending = [self.blocks[0].name] if self.blocks else []
        while pending:
            name = pending.pop()
            if name in reachable:
                continue
            reachable.add(name)
            pending.extend(t for instr in by_name[name].instrs for t in instr.targets)
        self.blocks = [block for block in self.blocks if block.name in reachable]

    def render(self) -> str:
        body = "\n\n".join(block.render() for block in self.blocks)
        return f"define i32 @{self.name}() {{\n{body}\n}}"


def _fold_branch(instr: _Instr) -> _Instr:
    cond = instr.condition
    if cond is None or cond.const is None:
        return instr
    return _jump(instr.targets[0] if cond.const else instr.targets[1])


def _require_same_type(lhs: _Value, rhs: _Value) -> None:
    if lhs.ty != rhs.ty:
        raise CodegenError.unsupported_op(
            f"operands of different types: {lhs.ty} and {rhs.ty}"
        )


class LLVMCodeGen:
    """Builds an LLVM IR module for the functions of a program.

    Operations on constants are folded while the IR is built; for any
    optimisation level other than ``NONE`` constant branches are folded and
    unreachable blocks are removed afterwards.
    """

    def __init__(self, module_name: str, opt_level: OptLevel) -> None:
        self.module_name = module_name
        self.opt_level = opt_level
        self._functions: list[_Function] = []
        self._global_names: set[str] = set()
        self._global_unique = 0
        self._function: _Function | None = None
        self._block: _Block | None = None
        self._variables: dict[str, str] = {}

    @classmethod
    def compile_program(cls, program: Program, opt_level: OptLevel) -> str:
        """Generate the IR of ``program`` and return it as text."""
        gen = cls(MODULE_NAME, opt_level)
        gen._gen_program(program)
        if opt_level is not OptLevel.NONE:
            for function in gen._functions:
                function.simplify_cfg()
        return str(gen)

    def __str__(self) -> str:
        header = (
            f"; ModuleID = '{self.module_name}'\n"
            f'source_filename = "{self.module_name}"\n'
        )
        if not self._functions:
            return header
        body = "\n\n".join(function.render() for function in self._functions)
        return f"{header}\n{body}\n"

    # -- structure -------------------------------------------------------

    def _gen_program(self, program: Program) -> None:
        for decl in program.decls:
            if isinstance(decl, FunctionDecl):
                self._gen_function(decl)

    def _gen_function(self, decl: FunctionDecl) -> None:
        base = f"{decl.name}." if decl.name[-1].isdigit() else decl.name
        name = decl.name
        if name in self._global_names:
            name, self._global_unique = _make_unique(
                base, self._global_names, self._global_unique
            )
        else:
            self._global_names.add(name)
        function = _Function(name)
        self._functions.append(function)
        self._function = function
        self._block = function.append_block("entry")
        self._variables.clear()

        self._gen_stmts(decl.body)

        if not self._block.terminated:
            self._append(_Instr(f"ret i32 {_constant(_I32, 0).ref}", True))

    def _gen_stmts(self, stmts: Iterable[Stmt]) -> None:
        for stmt in stmts:
            self._gen_stmt(stmt)

    def _gen_stmt(self, stmt: Stmt) -> None:
        match stmt:
            case EmptyStmt():
                pass
            case LocalVarStmt(name=name, init=init):
                ptr = self._emit(_I32, name, "alloca i32, align 4").ref
                self._store(self._gen_expr(init), ptr)
                self._variables[name] = ptr
            case ExprStmt(expr=Binary(op=TokenKind.ASSIGN, left=left, right=right)):
                if isinstance(left, VarRef):
                    value = self._gen_expr(right)
                    self._store(value, self._pointer(left.name))
            case ExprStmt(expr=expr):
                self._gen_expr(expr)
            case ReturnStmt(value=value):
                result = self._gen_expr(value)
                self._append(_Instr(f"ret {result.ty} {result.ref}", True))
            case IfStmt(cond=cond, then_block=then_block, else_block=else_block):
                self._gen_if(cond, then_block, else_block)
            case WhileStmt(cond=cond, body=body):
                self._gen_while(cond, body)
            case ForStmt(init=init, cond=cond, inc=inc, body=body):
                self._gen_for(init, cond, inc, body)
            case BlockStmt(stmts=stmts):
                self._gen_stmts(stmts)

    def _gen_if(
        self,
        cond: Expr,
        then_block: tuple[Stmt, ...],
        else_block: tuple[Stmt, ...] | None,
    ) -> None:
        then_bb = self._current_function.append_block("then")
        else_bb = self._current_function.append_block("else")
        cont_bb = self._current_function.append_block("cont")

        value = self._gen_expr(cond)
        if value.ty != _I1:
            value = self._compare("ne", value, _constant(_I32, 0), "ifcond")
        self._cond_branch(value, then_bb, else_bb)

        self._block = then_bb
        self._gen_stmts(then_block)
        self._branch_unless_terminated(cont_bb)

        self._block = else_bb
        if else_block is not None:
            self._gen_stmts(else_block)
        self._branch_unless_terminated(cont_bb)

        self._block = cont_bb

    def _gen_while(self, cond: Expr, body: tuple[Stmt, ...]) -> None:
        loop_bb = self._current_function.append_block("loop")
        cont_bb = self._current_function.append_block("cont")

        self._append(_jump(loop_bb.name))
        self._block = loop_bb

        value = self._gen_expr(cond)
        if value.ty != _I1:
            value = self._compare("slt", value, _constant(_I32, 0), "whilecond")

        body_bb = self._current_function.append_block("body")
        self._cond_branch(value, body_bb, cont_bb)

        self._block = body_bb
        self._gen_stmts(body)
        self._branch_unless_terminated(loop_bb)

        self._block = cont_bb

    def _gen_for(
        self,
        init: Expr | None,
        cond: Expr | None,
        inc: Expr | None,
        body: tuple[Stmt, ...],
    ) -> None:
        if init is not None:
            self._gen_expr(init)
        loop_bb = self._current_function.append_block("loop")
        cont_bb = self._current_function.append_block("cont")

        self._append(_jump(loop_bb.name))
        self._block = loop_bb

        if cond is not None:
            value = self._gen_expr(cond)
            flag = self._compare("slt", value, _constant(_I32, 0), "forcond")
            self._cond_branch(flag, loop_bb, cont_bb)

        self._gen_stmts(body)
        if inc is not None:
            self._gen_expr(inc)
        self._branch_unless_terminated(loop_bb)

        self._block = cont_bb

    # -- expressions -----------------------------------------------------

    def _gen_expr(self, expr: Expr) -> _Value:
        match expr:
            case IntLiteral(value=value):
                return _constant(_I32, value)
            case VarRef(name=name):
                ptr = self._pointer(name)
                return self._emit(_I32, name, f"load i32, ptr {ptr}, align 4")
            case Binary(op=op, left=left, right=right):
                lhs = self._gen_expr(left)
                rhs = self._gen_expr(right)
                if op in _ARITHMETIC:
                    return self._arithmetic(op, lhs, rhs)
                if op in _COMPARISONS:
                    predicate, name = _COMPARISONS[op]
                    return self._compare(predicate, lhs, rhs, name)
                raise CodegenError.unsupported_op(
                    f"operator {op} cannot be used inside an expression"
                )
        raise CodegenError.unsupported_op(f"not an expression: {expr!r}")

    def _arithmetic(self, op: TokenKind, lhs: _Value, rhs: _Value) -> _Value:
        _require_same_type(lhs, rhs)
        opcode, name, fold = _ARITHMETIC[op]
        if lhs.const is not None and rhs.const is not None:
            result = fold(lhs.signed, rhs.signed, _BITS[lhs.ty])
            if result is not None:
                return _constant(lhs.ty, result)
        return self._emit(lhs.ty, name, f"{opcode} {lhs.ty} {lhs.ref}, {rhs.ref}")

    def _compare(self, predicate: str, lhs: _Value, rhs: _Value, name: str) -> _Value:
        _require_same_type(lhs, rhs)
        if lhs.const is not None and rhs.const is not None:
            return _constant(_I1, int(_PREDICATES[predicate](lhs.signed, rhs.signed)))
        return self._emit(
            _I1, name, f"icmp {predicate} {lhs.ty} {lhs.ref}, {rhs.ref}"
        )

    # -- emission helpers ------------------------------------------------

    @property
    def _current_function(self) -> _Function:
        assert self._function is not None
        return self._function

    def _append(self, instr: _Instr) -> None:
        assert self._block is not None
        self._block.instrs.append(instr)

    def _emit(self, ty: str, base: str, body: str) -> _Value:
        name = self._current_function.unique(base)
        self._append(_Instr(f"%{name} = {body}"))
        return _Value(ty, f"%{name}")

    def _store(self, value: _Value, ptr: str) -> None:
        self._append(
            _Instr(f"store {value.ty} {value.ref}, ptr {ptr}, align {_ALIGN[value.ty]}")
        )

    def _pointer(self, name: str) -> str:
        try:
            return self._variables[name]
        except KeyError:
            raise CodegenError(f"Unknown variable '{name}' in code generation") from None

    def _cond_branch(self, cond: _Value, then_bb: _Block, else_bb: _Block) -> None:
        self._append(
            _Instr(
                f"br i1 {cond.ref}, label %{then_bb.name}, label %{else_bb.name}",
                True,
                (then_bb.name, else_bb.name),
                cond,
            )
        )

    def _branch_unless_terminated(self, target: _Block) -> None:
        assert self._block is not None
        if not self._block.terminated:
            self._append(_jump(target.name))