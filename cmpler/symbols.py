"""Scoped symbol table used by semantic analysis."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import DuplicateSymbolError
from .nodes import Decl
from .tokens import Span


class Type(Enum):
    """The value types of the language."""

    INT = "Int"
    VOID = "Void"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Symbol:
    """A declared name together with its type and where it was declared."""

    name: str
    ty: Type
    span: Span


class SymbolTable:
    """A stack of scopes; lookups search from the innermost scope outwards."""

    def __init__(self) -> None:
        self._scopes: list[dict[str, Symbol]] = [{}]

    def enter_scope(self) -> None:
        """Open a new innermost scope."""
        self._scopes.append({})

    def exit_scope(self) -> None:
        """Discard the innermost scope and every name declared in it."""
        if self._scopes:
            self._scopes.pop()

    def insert(self, decl: Decl) -> None:
        """Declare a top-level function or variable in the current scope."""
        self.insert_symbol(decl.name, Type.INT, decl.span)

    def insert_symbol(self, name: str, ty: Type, span: Span) -> None:
        """Declare ``name`` in the current scope.

        Raises :class:`DuplicateSymbolError` if the scope already holds it.
        """
        scope = self._scopes[-1]
        if name in scope:
            raise DuplicateSymbolError(name, span)
        scope[name] = Symbol(name, ty, span)

    def lookup(self, name: str) -> Symbol | None:
        """Return the innermost visible symbol called ``name``, if any."""
        for scope in reversed(self._scopes):
            symbol = scope.get(name)
            if symbol is not None:
                return symbol
        return None