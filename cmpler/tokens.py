"""Source spans, token kinds and the lexer."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class Span:
    """A half-open range of character offsets into the source text."""

    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"


class TokenKind(Enum):
    """Every kind of token the lexer produces."""

    IF = "If"
    ELSE = "Else"
    WHILE = "While"
    FOR = "For"
    RETURN = "Return"
    INT = "Int"
    VOID = "Void"

    IDENTIFIER = "Identifier"
    INTEGER_LITERAL = "IntegerLiteral"

    PLUS = "Plus"
    MINUS = "Minus"
    STAR = "Star"
    SLASH = "Slash"
    ASSIGN = "Assign"
    EQUAL = "Equal"
    NOT_EQUAL = "NotEqual"
    LESS = "Less"
    LESS_EQUAL = "LessEqual"
    GREATER = "Greater"
    GREATER_EQUAL = "GreaterEqual"
    LOGICAL_AND = "LogicalAnd"
    LOGICAL_OR = "LogicalOr"
    LOGICAL_NOT = "LogicalNot"

    SEMICOLON = "Semicolon"
    COMMA = "Comma"
    LPAREN = "LParen"
    RPAREN = "RParen"
    LBRACE = "LBrace"
    RBRACE = "RBrace"

    ERROR = "Error"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Token:
    """A lexed token with its position and the text it covers."""

    kind: TokenKind
    span: Span
    text: str


_KEYWORDS: dict[str, TokenKind] = {
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "while": TokenKind.WHILE,
    "for": TokenKind.FOR,
    "return": TokenKind.RETURN,
    "int": TokenKind.INT,
    "void": TokenKind.VOID,
}

_PUNCTUATION: dict[str, TokenKind] = {
    "==": TokenKind.EQUAL,
    "!=": TokenKind.NOT_EQUAL,
    "<=": TokenKind.LESS_EQUAL,
    ">=": TokenKind.GREATER_EQUAL,
    "&&": TokenKind.LOGICAL_AND,
    "||": TokenKind.LOGICAL_OR,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "=": TokenKind.ASSIGN,
    "<": TokenKind.LESS,
    ">": TokenKind.GREATER,
    "!": TokenKind.LOGICAL_NOT,
    ";": TokenKind.SEMICOLON,
    ",": TokenKind.COMMA,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
}

# Two-character operators come first so that the longest match wins.
_TOKEN_RE = re.compile(
    r"(?P<space>[ \t\n\r\f]+)"
    r"|(?P<word>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<number>[0-9]+)"
    r"|(?P<punct>" + "|".join(re.escape(p) for p in _PUNCTUATION) + r")"
)


def iter_tokens(source: str) -> Iterator[Token]:
    """Yield the tokens of ``source``; unknown characters become error tokens."""
    pos = 0
    while pos < len(source):
        match = _TOKEN_RE.match(source, pos)
        if match is None:
            yield Token(TokenKind.ERROR, Span(pos, pos + 1), source[pos])
            pos += 1
            continue
        text = match.group()
        span = Span(match.start(), match.end())
        pos = match.end()
        group = match.lastgroup
        if group == "space":
            continue
        if group == "word":
            kind = _KEYWORDS.get(text, TokenKind.IDENTIFIER)
        elif group == "number":
            kind = TokenKind.INTEGER_LITERAL
        else:
            kind = _PUNCTUATION[text]
        yield Token(kind, span, text)


def lex(source: str) -> list[Token]:
    """Split ``source`` into a list of tokens."""
    return list(iter_tokens(source))