"""Syntax tree nodes for declarations, statements and expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .tokens import Span, TokenKind


@dataclass(frozen=True)
class IntLiteral:
    value: int
    span: Span


@dataclass(frozen=True)
class VarRef:
    name: str
    span: Span


@dataclass(frozen=True)
class Binary:
    op: TokenKind
    left: Expr
    right: Expr
    span: Span


Expr = Union[IntLiteral, VarRef, Binary]


@dataclass(frozen=True)
class ReturnStmt:
    value: Expr


@dataclass(frozen=True)
class IfStmt:
    cond: Expr
    then_block: tuple[Stmt, ...]
    else_block: Optional[tuple[Stmt, ...]] = None


@dataclass(frozen=True)
class WhileStmt:
    cond: Expr
    body: tuple[Stmt, ...]


@dataclass(frozen=True)
class ForStmt:
    init: Optional[Expr]
    cond: Optional[Expr]
    inc: Optional[Expr]
    body: tuple[Stmt, ...]


@dataclass(frozen=True)
class BlockStmt:
    stmts: tuple[Stmt, ...]


@dataclass(frozen=True)
class ExprStmt:
    expr: Expr


@dataclass(frozen=True)
class LocalVarStmt:
    name: str
    init: Expr
    span: Span


@dataclass(frozen=True)
class EmptyStmt:
    pass


Stmt = Union[
    ReturnStmt,
    IfStmt,
    WhileStmt,
    ForStmt,
    BlockStmt,
    ExprStmt,
    LocalVarStmt,
    EmptyStmt,
]


@dataclass(frozen=True)
class FunctionDecl:
    name: str
    params: tuple[str, ...]
    body: tuple[Stmt, ...]
    span: Span


@dataclass(frozen=True)
class VarDecl:
    name: str
    init: Expr
    span: Span


Decl = Union[FunctionDecl, VarDecl]


@dataclass(frozen=True)
class Program:
    decls: tuple[Decl, ...]