"""
Cybele Front-End Error Hierarchy
================================

This module defines the exception hierarchy for the Cybele lexer, parser
and evaluation harness. All exceptions inherit from CybeleError, which
itself inherits from the base AttisError.

Every error is fatal: the front end stops at the first violation and
raises one of these, so library callers receive a structured value
instead of a terminated process.

Exception Hierarchy
-------------------
CybeleError (base for all Cybele errors)
├── SourceReadError - the character source failed while reading
├── AllocationError - out of memory while building tokens or nodes
├── CybeleSyntaxError - token adjacency violations found by the lexer
│   ├── UnknownCharacterError - byte outside the accepted alphabet
│   ├── BadBinaryOperatorError - binary operator without a left operand
│   ├── BadUnaryOperatorError - two unary operators in a row
│   ├── BadOpenParenthesisError - '(' after a literal or ')'
│   ├── BadCloseParenthesisError - ')' not after a literal or ')'
│   ├── BadSemicolonError - ';' after an operator or '('
│   ├── MissingOperatorError - literal directly after a literal or ')'
│   └── InvalidEndOfInputError - input ends inside an expression
├── CybeleParseError - tree construction errors
│   ├── UnbalancedParenthesisError - unmatched '(' or ')'
│   ├── OperatorWithoutOperandError - operator with nothing to its left
│   ├── UnknownOperatorPriorityError - operator missing from priority table
│   ├── OperandWithoutOperatorError - operand with no operator slot to fill
│   ├── MisplacedUnaryOperatorError - unary operator after an operand
│   └── EmptyParenthesisError - '()' with nothing inside
├── ASTInvariantError - a built tree is malformed
└── CybeleEvaluationError - errors while evaluating a tree
    └── DivideByZeroError - '/' or '%' by a value near zero

Error Message Format
--------------------
    program.cyb:3:5: error: binary operator '*' must follow a literal or ')'
        1+*
          ^
    hint: add an operand before '*'
"""

from typing import Optional

from attis.errors import AttisError, SourceLocation


# =============================================================================
# Base Cybele Exception
# =============================================================================

class CybeleError(AttisError):
    """
    Base exception for all Cybele front-end errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The source text of the offending line
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            program.cyb:1:3: error: semicolon must follow a literal, ')' or ';'
                1+;
                  ^
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class SourceReadError(CybeleError):
    """
    The character source reported a read failure.

    End of input that coincides with an I/O error is not a normal end of
    file; the lexer raises this instead of finishing.
    """

    def __init__(self, name: str, reason: str):
        self.source_name = name
        self.reason = reason
        super().__init__(f"cannot read '{name}': {reason}")


class AllocationError(CybeleError):
    """Memory was exhausted while building tokens or tree nodes."""

    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"out of memory during {stage}")


# =============================================================================
# Syntax Errors (Lexer)
# =============================================================================

class CybeleSyntaxError(CybeleError):
    """
    Syntax error detected while tokenizing.

    The lexer checks that each token may legally follow the previous one,
    so most malformed inputs are rejected here before the parser runs.
    """
    pass


def _describe(char: str) -> str:
    """Quote a character for a message, spelling out unprintable ones."""
    if char.isprintable() and char.isascii():
        return f"'{char}'"
    return f"0x{ord(char):02X}"


class UnknownCharacterError(CybeleSyntaxError):
    """
    Byte outside the accepted alphabet.

    Only decimal digits, + - * / %, parentheses, semicolons and
    whitespace may appear in Cybele source.
    """

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"unknown character {_describe(char)}",
            location=location,
            hint="only digits, + - * / %, parentheses and ';' are allowed",
            source_line=source_line,
        )


class BadBinaryOperatorError(CybeleSyntaxError):
    """Binary operator that does not follow a literal or ')'."""

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.operator = operator
        super().__init__(
            f"binary operator '{operator}' must follow a literal or ')'",
            location=location,
            hint=f"add an operand before '{operator}'",
            source_line=source_line,
        )


class BadUnaryOperatorError(CybeleSyntaxError):
    """Unary operator directly after another unary operator."""

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.operator = operator
        super().__init__(
            f"unary operator '{operator}' cannot follow another unary operator",
            location=location,
            hint="wrap the inner operand in parentheses, e.g. -(-1)",
            source_line=source_line,
        )


class BadOpenParenthesisError(CybeleSyntaxError):
    """'(' directly after a literal or ')'."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "'(' cannot follow a literal or ')'",
            location=location,
            hint="add an operator before '('",
            source_line=source_line,
        )


class BadCloseParenthesisError(CybeleSyntaxError):
    """')' that does not follow a literal or another ')'."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "')' must follow a literal or ')'",
            location=location,
            source_line=source_line,
        )


class BadSemicolonError(CybeleSyntaxError):
    """';' after an operator or '('."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "';' must follow a literal, ')' or ';'",
            location=location,
            hint="the statement before ';' is incomplete",
            source_line=source_line,
        )


class MissingOperatorError(CybeleSyntaxError):
    """Literal directly after a finished literal or ')'."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "missing operator before literal",
            location=location,
            source_line=source_line,
        )


class InvalidEndOfInputError(CybeleSyntaxError):
    """Input ends after an operator or '('."""

    def __init__(
        self,
        last: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.last = last
        super().__init__(
            f"unexpected end of input after '{last}'",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Parse Errors
# =============================================================================

class CybeleParseError(CybeleError):
    """Error raised while assembling tokens into a tree."""
    pass


class UnbalancedParenthesisError(CybeleParseError):
    """
    Parentheses do not pair up.

    Raised for a ')' with no open '(' and for a ';' or end of input
    reached while a '(' is still open.
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message, location=location, hint=hint)


class OperatorWithoutOperandError(CybeleParseError):
    """Binary operator placed where there is no left operand."""

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
    ):
        self.operator = operator
        super().__init__(
            f"operator '{operator}' has no left operand",
            location=location,
        )


class UnknownOperatorPriorityError(CybeleParseError):
    """Operator with no entry in the priority table."""

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
    ):
        self.operator = operator
        super().__init__(
            f"no priority defined for operator '{operator}'",
            location=location,
        )


class OperandWithoutOperatorError(CybeleParseError):
    """Literal or '(' placed where the open expression has no free operand slot."""

    def __init__(
        self,
        operand: str,
        location: Optional[SourceLocation] = None,
    ):
        self.operand = operand
        super().__init__(
            f"'{operand}' is not preceded by an operator",
            location=location,
            hint=f"add an operator before '{operand}'",
        )


class MisplacedUnaryOperatorError(CybeleParseError):
    """Unary operator placed directly after a complete operand."""

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
    ):
        self.operator = operator
        super().__init__(
            f"unary operator '{operator}' cannot follow an operand",
            location=location,
        )


class EmptyParenthesisError(CybeleParseError):
    """A ')' closes a '(' that holds no expression."""

    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__(
            "empty parentheses",
            location=location,
            hint="put an expression between '(' and ')'",
        )


class ASTInvariantError(CybeleError):
    """A tree does not satisfy the structural rules of its node types."""
    pass


# =============================================================================
# Evaluation Errors
# =============================================================================

class CybeleEvaluationError(CybeleError):
    """Error raised while evaluating a tree."""
    pass


class DivideByZeroError(CybeleEvaluationError):
    """Division or modulus by a value whose magnitude is below 0.01."""

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
    ):
        self.operator = operator
        word = "division" if operator == "/" else "modulus"
        super().__init__(f"{word} by zero", location=location)
