"""The error hierarchy raised by every stage of the compiler."""

from __future__ import annotations

from .tokens import Span, TokenKind


class CompilerError(Exception):
    """Base class of every error the compiler reports."""

    category = "Compiler error"

    @property
    def report(self) -> str:
        """The message prefixed with the stage that raised it."""
        return f"{self.category}: {self}"


class ConfigError(CompilerError):
    """The configuration file could not be read or parsed."""

    category = "Configuration error"

    @classmethod
    def read_failed(cls, cause: object) -> ConfigError:
        return cls(f"Failed to read config file: {cause}")

    @classmethod
    def parse_failed(cls, cause: object) -> ConfigError:
        return cls(f"Failed to parse config TOML: {cause}")


class LexError(CompilerError):
    """A character sequence that forms no token."""

    category = "Lexical error"

    def __init__(self, token: str, span: Span) -> None:
        super().__init__(f"Lex error at {span}: unexpected token '{token}'")
        self.token = token
        self.span = span


class ParseError(CompilerError):
    """Base class of syntax errors."""

    category = "Parse error"


class ExpectedTokenError(ParseError):
    """A specific token was required but another one was found."""

    def __init__(self, expected: str, found: TokenKind, span: Span) -> None:
        super().__init__(f"Unexpected token `{found}` at {span}, expected {expected}")
        self.expected = expected
        self.found = found
        self.span = span


class UnexpectedTokenError(ParseError):
    """A token that cannot start an expression."""

    def __init__(self, found: TokenKind, span: Span) -> None:
        super().__init__(f"Unexpected token `{found}` at {span}")
        self.found = found
        self.span = span


class UnexpectedEofError(ParseError):
    """The input ended in the middle of a construct."""

    def __init__(self) -> None:
        super().__init__("Unexpected end of input")


class SemanticError(CompilerError):
    """Base class of errors found by semantic analysis."""

    category = "Semantic error"


class DuplicateSymbolError(SemanticError):
    """A name declared twice in the same scope."""

    def __init__(self, name: str, span: Span) -> None:
        super().__init__(f"Duplicate symbol '{name}' at {span}")
        self.name = name
        self.span = span


class UndefinedVariableError(SemanticError):
    """A name used without a visible declaration."""

    def __init__(self, name: str, span: Span) -> None:
        super().__init__(f"Undefined variable '{name}' at {span}")
        self.name = name
        self.span = span


class TypeMismatchError(SemanticError):
    """An expression whose type is not the one required."""

    def __init__(self, expected: str, found: str, span: Span) -> None:
        super().__init__(
            f'Type mismatch: expected "{expected}", found "{found}" at {span}'
        )
        self.expected = expected
        self.found = found
        self.span = span


class CodegenError(CompilerError):
    """Failure while generating, writing or linking code."""

    category = "Code generation error"

    @classmethod
    def llvm_init(cls, detail: str) -> CodegenError:
        return cls(f"Failed to initialize LLVM: {detail}")

    @classmethod
    def unsupported_op(cls, detail: str) -> CodegenError:
        return cls(f"Unsupported operation: {detail}")