"""A compiler for a small subset of C: lexer, parser, checker, LLVM IR generation and a command-line driver."""

__version__ = "0.1.0"