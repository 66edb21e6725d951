"""
Cybele Front End
================

This package implements the front end of the compiler for Cybele, a
small expression language of integer arithmetic with grouping and
statement separation:

    1 + 2 * 3;
    (1 + 2) * 3;
    -7 + 10;

It provides:

- A character source reading files, pipes or strings byte by byte
- A context-sensitive lexer that validates token adjacency as it scans
- A single-pass operator-precedence parser building a typed AST
- A reference evaluator used to check parsed trees

Pipeline
--------
    Source → CharacterSource → Lexer → TokenList → Parser → SyntaxTree

Usage
-----
>>> from attis.cybele import compile_source
>>> result = compile_source("1;2;3+4;")
>>> result.value
7
>>> len(result.ast.statements)
3

Language Subset
---------------
Supported:
- Non-negative decimal integer literals
- Binary + - * / % and unary + -
- Parentheses, ';' statement separators, whitespace and newlines

Not supported:
- Identifiers, keywords, strings, floating-point literals, comments
- Multi-character operators
- Non-ASCII source text
"""

from attis.cybele.compiler import (
    CybeleCompiler,
    CompilerOptions,
    CompilerResult,
    compile_source,
)
from attis.cybele.errors import (
    CybeleError,
    SourceReadError,
    AllocationError,
    CybeleSyntaxError,
    UnknownCharacterError,
    BadBinaryOperatorError,
    BadUnaryOperatorError,
    BadOpenParenthesisError,
    BadCloseParenthesisError,
    BadSemicolonError,
    MissingOperatorError,
    InvalidEndOfInputError,
    CybeleParseError,
    UnbalancedParenthesisError,
    OperatorWithoutOperandError,
    UnknownOperatorPriorityError,
    OperandWithoutOperatorError,
    MisplacedUnaryOperatorError,
    EmptyParenthesisError,
    ASTInvariantError,
    CybeleEvaluationError,
    DivideByZeroError,
)
from attis.cybele.source import CharacterSource
from attis.cybele.lexer import CybeleLexer, Token, TokenKind, TokenList, tokenize_source
from attis.cybele.parser import CybeleParser, OPERATOR_PRIORITY, get_priority, parse_source
from attis.cybele.ast import (
    ASTNode,
    NodeType,
    SyntaxTree,
    ASTVisitor,
    ASTPrinter,
    check_invariants,
    format_expression,
    fold_tree,
    walk,
)
from attis.cybele.evaluator import ASTEvaluator, evaluate, evaluate_source, format_answer

__all__ = [
    # Main API
    "CybeleCompiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_source",
    # Errors
    "CybeleError",
    "SourceReadError",
    "AllocationError",
    "CybeleSyntaxError",
    "UnknownCharacterError",
    "BadBinaryOperatorError",
    "BadUnaryOperatorError",
    "BadOpenParenthesisError",
    "BadCloseParenthesisError",
    "BadSemicolonError",
    "MissingOperatorError",
    "InvalidEndOfInputError",
    "CybeleParseError",
    "UnbalancedParenthesisError",
    "OperatorWithoutOperandError",
    "UnknownOperatorPriorityError",
    "OperandWithoutOperatorError",
    "MisplacedUnaryOperatorError",
    "EmptyParenthesisError",
    "ASTInvariantError",
    "CybeleEvaluationError",
    "DivideByZeroError",
    # Source and lexer
    "CharacterSource",
    "CybeleLexer",
    "Token",
    "TokenKind",
    "TokenList",
    "tokenize_source",
    # Parser
    "CybeleParser",
    "OPERATOR_PRIORITY",
    "get_priority",
    "parse_source",
    # AST
    "ASTNode",
    "NodeType",
    "SyntaxTree",
    "ASTVisitor",
    "ASTPrinter",
    "check_invariants",
    "format_expression",
    "fold_tree",
    "walk",
    # Evaluation
    "ASTEvaluator",
    "evaluate",
    "evaluate_source",
    "format_answer",
]
