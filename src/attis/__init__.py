"""
Attis - Compiler for the Cybele Language
========================================

This package provides the front end of the compiler for Cybele, a small
expression language. Given a source file it produces an abstract syntax
tree ready for evaluation or code generation.

Main Components
---------------
- **cybele**: lexer, parser, AST and reference evaluator
- **cli**: the `attis` command-line driver
- **linked_list**: intrusive doubly-linked list used for token sequences

Quick Start
-----------
Compile and evaluate a string:
    >>> from attis import compile_source
    >>> compile_source("(1+2)*3;").value
    9

Inspect the tree:
    >>> from attis.cybele import parse_source, ASTPrinter
    >>> print(ASTPrinter().print(parse_source("1+2;")))
    Scope
      Statement 1
        BinaryOperator '+'
          Literal '1'
          Literal '2'

Or use the command-line tool:
    $ attis program.cyb
    $ attis --ast program.cyb
"""

__version__ = "0.1.0"
__author__ = "Attis Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from attis.errors import AttisError, SourceLocation
from attis.cybele import (
    CybeleCompiler,
    CompilerOptions,
    CompilerResult,
    compile_source,
    CybeleError,
    parse_source,
    evaluate_source,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Errors
    "AttisError",
    "CybeleError",
    "SourceLocation",
    # Compiler
    "CybeleCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_source",
    "parse_source",
    "evaluate_source",
]
