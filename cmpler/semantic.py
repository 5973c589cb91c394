"""Name resolution and type checking of a parsed program."""

from __future__ import annotations

from collections.abc import Iterable

from .errors import TypeMismatchError, UndefinedVariableError
from .nodes import (
    Binary,
    BlockStmt,
    Decl,
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
    VarDecl,
    VarRef,
    WhileStmt,
)
from .symbols import SymbolTable, Type
from .tokens import Span


def _require_int(ty: Type, span: Span) -> None:
    if ty is not Type.INT:
        raise TypeMismatchError(str(Type.INT), str(ty), span)


class SemanticAnalyzer:
    """Checks that names are declared once and used only where visible."""

    def __init__(self) -> None:
        self._symbols = SymbolTable()

    def analyze(self, program: Program) -> None:
        """Check ``program``; raises a :class:`SemanticError` on the first problem."""
        for decl in program.decls:
            self._symbols.insert(decl)
        for decl in program.decls:
            self._check_decl(decl)

    def _check_decl(self, decl: Decl) -> None:
        if isinstance(decl, FunctionDecl):
            self._check_scoped(decl.body)
        elif isinstance(decl, VarDecl):
            _require_int(self._check_expr(decl.init), decl.init.span)

    def _check_scoped(self, stmts: Iterable[Stmt]) -> None:
        self._symbols.enter_scope()
        for stmt in stmts:
            self._check_stmt(stmt)
        self._symbols.exit_scope()

    def _check_stmt(self, stmt: Stmt) -> None:
        match stmt:
            case EmptyStmt():
                pass
            case ReturnStmt(value=value):
                self._check_expr(value)
            case ExprStmt(expr=expr):
                self._check_expr(expr)
            case IfStmt(cond=cond, then_block=then_block, else_block=else_block):
                _require_int(self._check_expr(cond), cond.span)
                self._check_scoped(then_block)
                if else_block is not None:
                    self._check_scoped(else_block)
            case WhileStmt(cond=cond, body=body):
                _require_int(self._check_expr(cond), cond.span)
                self._check_scoped(body)
            case ForStmt(init=init, cond=cond, inc=inc, body=body):
                self._symbols.enter_scope()
                if init is not None:
                    self._check_expr(init)
                if cond is not None:
                    _require_int(self._check_expr(cond), cond.span)
                if inc is not None:
                    self._check_expr(inc)
                for inner in body:
                    self._check_stmt(inner)
                self._symbols.exit_scope()
            case LocalVarStmt(name=name, init=init, span=span):
                _require_int(self._check_expr(init), span)
                self._symbols.insert_symbol(name, Type.INT, span)
            case BlockStmt(stmts=stmts):
                self._check_scoped(stmts)

    def _check_expr(self, expr: Expr) -> Type:
        match expr:
            case IntLiteral():
                return Type.INT
            case VarRef(name=name, span=span):
                symbol = self._symbols.lookup(name)
                if symbol is None:
                    raise UndefinedVariableError(name, span)
                return symbol.ty
            case Binary(left=left, right=right, span=span):
                lt = self._check_expr(left)
                rt = self._check_expr(right)
                if lt is not Type.INT or rt is not Type.INT:
                    found = lt if lt is not Type.INT else rt
                    raise TypeMismatchError(str(Type.INT), str(found), span)
                return Type.INT
        raise TypeError(f"not an expression: {expr!r}")