"""
Cybele AST Evaluator
====================

Reference evaluator used to check parsed trees. It is a test harness,
not a code generator: it walks the tree and computes the value of the
outermost scope.

Evaluation Rules
----------------
- **Literal**: the base-10 integer spelled by its text
- **UnaryOperator**: '-' negates its operand, '+' passes it through
- **BinaryOperator**: + - * / % on the two operands; integer arithmetic
  when both are integers (C truncation for / and %), floating point
  otherwise
- **Parenthesis**: the value of its inner expression
- **Scope**: each statement in order; the value is that of the last
  statement, or None when there are none

Dividing by a value whose magnitude is below 0.01 raises
DivideByZeroError.

Example Usage
-------------
>>> from attis.cybele.evaluator import evaluate_source
>>> evaluate_source("1;2;3+4;")
7
>>> evaluate_source("10-3-2;")
5
"""

from typing import Optional, Union
import math

from attis.cybele.ast import ASTNode, ASTVisitor, SyntaxTree
from attis.cybele.errors import CybeleEvaluationError, DivideByZeroError
from attis.cybele.parser import parse_source

Number = Union[int, float]

# Divisors closer to zero than this are treated as zero
ZERO_THRESHOLD = 0.01


class ASTEvaluator(ASTVisitor):
    """
    Evaluates a Cybele AST.

    The tree is folded bottom-up over an explicit stack, so programs of
    any length or nesting depth evaluate without recursion. Each
    leave_<type> method receives the node and the values of the nodes
    below it.

    Usage:
        evaluator = ASTEvaluator()
        value = evaluator.evaluate(tree)
    """

    def evaluate(self, tree: Union[SyntaxTree, ASTNode]) -> Optional[Number]:
        """
        Evaluate a tree or a subtree.

        Returns:
            The value, or None for a scope without statements

        Raises:
            CybeleEvaluationError: If the tree cannot be evaluated
        """
        node = tree.root if isinstance(tree, SyntaxTree) else tree
        if node is None:
            raise CybeleEvaluationError("cannot evaluate a released tree")
        return self.fold(node)

    def leave_Literal(self, node: ASTNode) -> int:
        return int(node.text, 10)

    def leave_UnaryOperator(self, node: ASTNode, operand: Number) -> Number:
        if node.text == "-":
            return -operand
        if node.text == "+":
            return operand
        raise CybeleEvaluationError(f"unknown unary operator '{node.text}'", node.location)

    def leave_BinaryOperator(self, node: ASTNode, left: Number, right: Number) -> Number:
        operator = node.text

        if operator == "+":
            return left + right
        if operator == "-":
            return left - right
        if operator == "*":
            return left * right

        if operator in ("/", "%"):
            if abs(right) < ZERO_THRESHOLD:
                raise DivideByZeroError(operator, node.location)
            if isinstance(left, int) and isinstance(right, int):
                return _int_divide(left, right) if operator == "/" else _int_modulo(left, right)
            return left / right if operator == "/" else math.fmod(left, right)

        raise CybeleEvaluationError(f"unknown binary operator '{operator}'", node.location)

    def leave_Parenthesis(self, node: ASTNode, inner: Number) -> Number:
        return inner

    def leave_Scope(self, node: ASTNode, *statements: Number) -> Optional[Number]:
        return statements[-1] if statements else None

    def generic_leave(self, node: ASTNode, *values) -> None:
        raise CybeleEvaluationError(
            f"cannot evaluate {node.type.value} node", node.location
        )


def _int_divide(left: int, right: int) -> int:
    """Integer division truncating toward zero."""
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _int_modulo(left: int, right: int) -> int:
    """Remainder with the sign of the dividend."""
    return left - right * _int_divide(left, right)


def evaluate(tree: Union[SyntaxTree, ASTNode]) -> Optional[Number]:
    """Evaluate a tree with a fresh ASTEvaluator."""
    return ASTEvaluator().evaluate(tree)


def evaluate_source(source: str, filename: str = "<string>") -> Optional[Number]:
    """
    Lex, parse and evaluate source text.

    The tree is released once evaluated.
    """
    with parse_source(source, filename) as tree:
        return evaluate(tree)


def format_answer(value: Optional[Number]) -> str:
    """
    Format a value for display.

    Integers, and floats within 0.01 of an integer, print as integers;
    other floats use six decimal places.
    """
    if value is None:
        return "(no statements)"
    if isinstance(value, int):
        return str(value)
    if abs(value - round(value)) < ZERO_THRESHOLD:
        return str(int(round(value)))
    return f"{value:f}"
