"""A recursive-descent parser producing the syntax tree."""

from __future__ import annotations

from collections.abc import Iterable

from .errors import ExpectedTokenError, UnexpectedEofError, UnexpectedTokenError
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
from .tokens import Span, Token, TokenKind

# Operator -> (precedence, right associative)
_BINARY_OPERATORS: dict[TokenKind, tuple[int, bool]] = {
    TokenKind.ASSIGN: (0, True),
    TokenKind.EQUAL: (1, False),
    TokenKind.NOT_EQUAL: (1, False),
    TokenKind.LESS: (2, False),
    TokenKind.LESS_EQUAL: (2, False),
    TokenKind.GREATER: (2, False),
    TokenKind.GREATER_EQUAL: (2, False),
    TokenKind.PLUS: (3, False),
    TokenKind.MINUS: (3, False),
    TokenKind.STAR: (4, False),
    TokenKind.SLASH: (4, False),
}


class Parser:
    """Turns a token sequence into a :class:`Program`."""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens = tuple(tokens)
        self._pos = 0

    def parse_program(self) -> Program:
        """Parse declarations until the tokens run out."""
        decls: list[Decl] = []
        while self._peek() is not None:
            decls.append(self._parse_decl())
        return Program(tuple(decls))

    def _parse_decl(self) -> Decl:
        int_tok = self._expect(TokenKind.INT)
        name_tok = self._expect_identifier("declaration name")
        span = Span(int_tok.span.start, name_tok.span.end)

        if self._consume(TokenKind.LPAREN):
            self._expect(TokenKind.RPAREN)
            body = self._parse_block()
            return FunctionDecl(name_tok.text, (), body, span)

        self._expect(TokenKind.ASSIGN)
        init = self._parse_expr()
        self._expect(TokenKind.SEMICOLON)
        return VarDecl(name_tok.text, init, span)

    def _parse_block(self) -> tuple[Stmt, ...]:
        self._expect(TokenKind.LBRACE)
        return self._parse_until_rbrace()

    def _parse_until_rbrace(self) -> tuple[Stmt, ...]:
        stmts: list[Stmt] = []
        while not self._consume(TokenKind.RBRACE):
            stmts.append(self._parse_stmt())
        return tuple(stmts)

    def _parse_stmt(self) -> Stmt:
        if self._consume(TokenKind.LBRACE):
            return BlockStmt(self._parse_until_rbrace())
        if self._consume(TokenKind.SEMICOLON):
            return EmptyStmt()
        if self._peek_kind() is TokenKind.INT:
            int_tok = self._expect(TokenKind.INT)
            name_tok = self._expect_identifier("local variable name")
            self._expect(TokenKind.ASSIGN)
            init = self._parse_expr()
            self._expect(TokenKind.SEMICOLON)
            span = Span(int_tok.span.start, init.span.end)
            return LocalVarStmt(name_tok.text, init, span)
        if self._consume(TokenKind.RETURN):
            value = self._parse_expr()
            self._expect(TokenKind.SEMICOLON)
            return ReturnStmt(value)
        if self._consume(TokenKind.IF):
            cond = self._parse_condition()
            then_block = self._parse_block()
            else_block = self._parse_block() if self._consume(TokenKind.ELSE) else None
            return IfStmt(cond, then_block, else_block)
        if self._consume(TokenKind.WHILE):
            cond = self._parse_condition()
            return WhileStmt(cond, self._parse_block())
        if self._consume(TokenKind.FOR):
            self._expect(TokenKind.LPAREN)
            init = self._parse_optional_expr(TokenKind.SEMICOLON)
            self._expect(TokenKind.SEMICOLON)
            cond = self._parse_optional_expr(TokenKind.SEMICOLON)
            self._expect(TokenKind.SEMICOLON)
            inc = self._parse_optional_expr(TokenKind.RPAREN)
            self._expect(TokenKind.RPAREN)
            return ForStmt(init, cond, inc, self._parse_block())

        expr = self._parse_expr()
        self._expect(TokenKind.SEMICOLON)
        return ExprStmt(expr)

    def _parse_condition(self) -> Expr:
        self._expect(TokenKind.LPAREN)
        cond = self._parse_expr()
        self._expect(TokenKind.RPAREN)
        return cond

    def _parse_optional_expr(self, terminator: TokenKind) -> Expr | None:
        if self._peek_kind() is terminator:
            return None
        return self._parse_expr()

    def _parse_expr(self) -> Expr:
        return self._parse_precedence(0)

    def _parse_precedence(self, min_prec: int) -> Expr:
        lhs = self._parse_primary()
        while True:
            kind = self._peek_kind()
            entry = _BINARY_OPERATORS.get(kind) if kind is not None else None
            if entry is None or entry[0] < min_prec:
                return lhs
            prec, right_assoc = entry
            self._bump()
            rhs = self._parse_precedence(prec if right_assoc else prec + 1)
            lhs = Binary(kind, lhs, rhs, Span(lhs.span.start, rhs.span.end))

    def _parse_primary(self) -> Expr:
        tok = self._bump()
        if tok is None:
            raise UnexpectedEofError()
        if tok.kind is TokenKind.INTEGER_LITERAL:
            return IntLiteral(int(tok.text), tok.span)
        if tok.kind is TokenKind.IDENTIFIER:
            return VarRef(tok.text, tok.span)
        if tok.kind is TokenKind.LPAREN:
            expr = self._parse_expr()
            self._expect(TokenKind.RPAREN)
            return expr
        raise UnexpectedTokenError(tok.kind, tok.span)

    def _peek(self) -> Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _peek_kind(self) -> TokenKind | None:
        tok = self._peek()
        return tok.kind if tok is not None else None

    def _bump(self) -> Token | None:
        tok = self._peek()
        if tok is not None:
            self._pos += 1
        return tok

    def _consume(self, kind: TokenKind) -> bool:
        if self._peek_kind() is kind:
            self._pos += 1
            return True
        return False

    def _expect(self, kind: TokenKind) -> Token:
        tok = self._peek()
        if tok is not None and tok.kind is kind:
            self._pos += 1
            return tok
        if tok is None:
            raise ExpectedTokenError(kind.value, TokenKind.ERROR, Span(0, 0))
        raise ExpectedTokenError(kind.value, tok.kind, tok.span)

    def _expect_identifier(self, context: str) -> Token:
        tok = self._peek()
        if tok is None:
            raise UnexpectedEofError()
        if tok.kind is TokenKind.IDENTIFIER:
            self._pos += 1
            return tok
        raise ExpectedTokenError(f"identifier ({context})", tok.kind, tok.span)