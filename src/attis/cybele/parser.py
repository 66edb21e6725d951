"""
Cybele Operator-Precedence Parser
=================================

This module builds the AST from the lexer's token sequence in a single
left-to-right pass, without recursion or backtracking. Each token is
placed straight into the partially built tree.

Insertion Point
---------------
The parser keeps a cursor: the Scope or Parenthesis whose `right` slot
holds the expression currently being built. It starts at the outermost
scope, moves to each Parenthesis node as it opens and goes back to the
saved `old_root` when that parenthesis closes. Searches only descend
through `right` links below the cursor, so they never leave the
innermost open parenthesis.

Token Placement
---------------
- **Literal / '('**: installed in the empty slot, or as the right
  operand of the deepest binary operator still waiting for one.
- **Operator**: descends along `right` through operators of strictly
  lower priority, takes the place of the node where it stops and hangs
  that node under its own `left` (priority climbing). Operators of equal
  priority stop the descent, which makes them left-associative.
- **')'**: restores the cursor saved by the matching '('.
- **';'**: moves the finished statement from the scope's slot onto the
  scope's statement list.
- **EOF**: seals any unterminated statement.

Operator Priority
-----------------
| Operator        | Priority |
|-----------------|----------|
| unary + -       | 1000     |
| binary * / %    | 100      |
| binary + -      | 10       |

Only the relative order matters; new levels can be slotted in between.

Example Usage
-------------
>>> from attis.cybele.parser import parse_source
>>> from attis.cybele.ast import format_expression
>>> tree = parse_source("1+2*3; (1+2)*3;")
>>> [format_expression(s) for s in tree.statements]
['(1 + (2 * 3))', '([(1 + 2)] * 3)']
"""

from typing import Callable
import logging

from attis.cybele.lexer import CybeleLexer, Token, TokenKind, TokenList
from attis.cybele.ast import ASTNode, NodeType, SyntaxTree
from attis.cybele.errors import (
    UnbalancedParenthesisError,
    OperatorWithoutOperandError,
    UnknownOperatorPriorityError,
    OperandWithoutOperatorError,
    MisplacedUnaryOperatorError,
    EmptyParenthesisError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Operator Priority
# =============================================================================

OPERATOR_PRIORITY: dict[tuple[NodeType, str], int] = {
    (NodeType.UNARY_OPERATOR, "+"): 1000,
    (NodeType.UNARY_OPERATOR, "-"): 1000,
    (NodeType.BINARY_OPERATOR, "*"): 100,
    (NodeType.BINARY_OPERATOR, "/"): 100,
    (NodeType.BINARY_OPERATOR, "%"): 100,
    (NodeType.BINARY_OPERATOR, "+"): 10,
    (NodeType.BINARY_OPERATOR, "-"): 10,
}


def get_priority(node: ASTNode) -> int:
    """
    Look up the priority of an operator node.

    Raises:
        UnknownOperatorPriorityError: If the operator is not in the table
    """
    try:
        return OPERATOR_PRIORITY[(node.type, node.text)]
    except KeyError:
        raise UnknownOperatorPriorityError(node.text, node.location) from None


# =============================================================================
# Parser
# =============================================================================

class CybeleParser:
    """
    Single-pass operator-precedence parser for Cybele.

    The parser consumes its TokenList: every token is removed from the
    list once handled, so after a successful parse the list holds nothing.

    Usage:
        tokens = CybeleLexer(source).lex()
        tree = CybeleParser(tokens).parse()

    Attributes:
        tokens: The token sequence being consumed
        root: The outermost Scope, root of the tree being built
    """

    def __init__(self, tokens: TokenList):
        """
        Initialize the parser.

        Args:
            tokens: Token sequence from the lexer
        """
        self.tokens = tokens
        self.root = ASTNode.scope()

        # Node whose right slot is the top of the open expression
        self._cursor = self.root

        # Nearest enclosing scope; always the root in this dialect
        self._scope = self.root

        self._paren_depth = 0
        self._statement_count = 0

        self._handlers: dict[TokenKind, Callable[[Token], None]] = {
            TokenKind.LITERAL: self._parse_literal,
            TokenKind.UNARY_OPERATOR: self._parse_unary_operator,
            TokenKind.BINARY_OPERATOR: self._parse_binary_operator,
            TokenKind.OPEN_PARENTHESIS: self._parse_open_parenthesis,
            TokenKind.CLOSE_PARENTHESIS: self._parse_close_parenthesis,
            TokenKind.SEMICOLON: self._parse_semicolon,
        }

    def parse(self) -> SyntaxTree:
        """
        Parse the token sequence into a tree.

        Parsing stops at the first EOF token, or when the list runs out.

        Returns:
            SyntaxTree rooted at the outermost Scope

        Raises:
            CybeleParseError: If the tokens cannot form a tree
        """
        last = None
        for token in self.tokens:
            self.tokens.remove(token)
            last = token
            if token.kind is TokenKind.EOF:
                break
            self._handlers[token.kind](token)

        self._parse_end_of_input(last)

        logger.debug(f"Parsed {self._statement_count} statements")
        return SyntaxTree(self.root)

    # =========================================================================
    # Tree Helpers
    # =========================================================================

    def _new_node(self, token: Token, node_type: NodeType) -> ASTNode:
        return ASTNode(
            node_type,
            token.text,
            parent_scope=self._scope,
            location=token.location,
        )

    def _slot_owner(self) -> ASTNode:
        """Node whose right slot is the current search root."""
        if self._cursor.is_container():
            return self._cursor
        return self.root

    def _attach_operand(self, node: ASTNode) -> None:
        """
        Install an operand (literal or parenthesis) in the open expression.

        The operand fills the empty slot, or becomes the right operand of
        the deepest binary operator along the right spine that has none.
        """
        owner = self._slot_owner()
        target = owner

        if owner.right is not None:
            target = owner.right
            while target.type is NodeType.BINARY_OPERATOR and target.right is not None:
                target = target.right

            if not target.is_operator() or target.right is not None:
                raise OperandWithoutOperatorError(node.text, node.location)

        target.right = node
        node.parent_node = target

    def _place_operator(self, node: ASTNode) -> None:
        """
        Insert an operator by priority climbing.

        Descends from the slot while the nodes met are operators of lower
        priority, then rotates the node found there under `node.left`.
        """
        priority = get_priority(node)
        previous = self._slot_owner()
        current = previous.right

        while (
            current is not None
            and current.is_operator()
            and get_priority(current) < priority
        ):
            previous = current
            current = current.right

        if node.type is NodeType.BINARY_OPERATOR and current is None:
            raise OperatorWithoutOperandError(node.text, node.location)
        if node.type is NodeType.UNARY_OPERATOR and current is not None:
            raise MisplacedUnaryOperatorError(node.text, node.location)

        previous.right = node
        node.parent_node = previous
        node.left = current
        if current is not None:
            current.parent_node = node

    def _seal_statement(self) -> None:
        """Move the statement in the scope's slot onto its statement list."""
        scope = self._scope
        statement = scope.right
        if statement is None:
            return

        scope.right = None
        scope.append_statement(statement)
        self._statement_count += 1
        logger.debug(
            f"Sealed statement {self._statement_count} "
            f"({statement.type.value} '{statement.text}')"
        )

    # =========================================================================
    # Token Handlers
    # =========================================================================

    def _parse_literal(self, token: Token) -> None:
        self._attach_operand(self._new_node(token, NodeType.LITERAL))

    def _parse_unary_operator(self, token: Token) -> None:
        self._place_operator(self._new_node(token, NodeType.UNARY_OPERATOR))

    def _parse_binary_operator(self, token: Token) -> None:
        self._place_operator(self._new_node(token, NodeType.BINARY_OPERATOR))

    def _parse_open_parenthesis(self, token: Token) -> None:
        node = self._new_node(token, NodeType.PARENTHESIS)
        node.old_root = self._cursor
        self._attach_operand(node)
        self._cursor = node
        self._paren_depth += 1

    def _parse_close_parenthesis(self, token: Token) -> None:
        self._paren_depth -= 1
        if self._paren_depth < 0:
            raise UnbalancedParenthesisError(
                "')' has no matching '('",
                token.location,
            )

        parenthesis = self._cursor
        if parenthesis.right is None:
            raise EmptyParenthesisError(token.location)

        self._cursor = parenthesis.old_root
        parenthesis.old_root = None

    def _parse_semicolon(self, token: Token) -> None:
        if self._paren_depth != 0:
            raise UnbalancedParenthesisError(
                "';' inside an open parenthesis",
                token.location,
                hint="close every '(' before ending the statement",
            )
        self._seal_statement()

    def _parse_end_of_input(self, token) -> None:
        if self._paren_depth != 0:
            word = "parenthesis" if self._paren_depth == 1 else "parentheses"
            raise UnbalancedParenthesisError(
                f"end of input with {self._paren_depth} unclosed {word}",
                token.location if token is not None else None,
                hint="add the missing ')'",
            )
        self._seal_statement()


def parse_source(source: str, filename: str = "<string>") -> SyntaxTree:
    """
    Convenience function to lex and parse source text.

    Args:
        source: Cybele source code
        filename: Name for error messages

    Returns:
        SyntaxTree of the source
    """
    tokens = CybeleLexer(source, filename).lex()
    return CybeleParser(tokens).parse()
