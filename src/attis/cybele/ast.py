"""
Cybele Abstract Syntax Tree (AST) Definitions
=============================================

This module defines the tree the parser builds. Node kinds form a closed
set, so there is a single ASTNode record tagged with a NodeType instead
of a class per kind; the fields that only make sense for one kind are
left as None on the others.

Node Types
----------
| Type           | left        | right              | extra                 |
|----------------|-------------|--------------------|-----------------------|
| Literal        | None        | None               |                       |
| UnaryOperator  | None        | operand            |                       |
| BinaryOperator | left operand| right operand      |                       |
| Parenthesis    | None        | inner expression   | old_root (while open) |
| Scope          | None        | statement building | list_head, list_tail  |

Ownership and Back-Links
------------------------
The outermost Scope owns every node reachable through `left`, `right`
and its statement list (`list_head` → `next` → ... → `list_tail`).
`parent_node`, `parent_scope` and `old_root` point back up the tree and
never own anything; SyntaxTree.release() clears all of them so the tree
can be torn down explicitly.

Design Notes
------------
- `parent_node` is the node whose slot holds this node; the parser
  follows it when rotating a subtree under a new operator.
- `parent_scope` is always a Scope, never a Parenthesis.
- The statement list is intrusive: each statement root carries the
  `next` link to the following statement.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator, Optional, Union

from attis.errors import SourceLocation
from attis.cybele.errors import ASTInvariantError


# =============================================================================
# Node Types
# =============================================================================

class NodeType(Enum):
    """Kind of an AST node. Values double as visitor method suffixes."""

    LITERAL = "Literal"
    UNARY_OPERATOR = "UnaryOperator"
    BINARY_OPERATOR = "BinaryOperator"
    PARENTHESIS = "Parenthesis"
    SCOPE = "Scope"


# Text given to synthetic scope nodes, which have no originating token
SCOPE_TEXT = "<scope>"


# =============================================================================
# AST Node
# =============================================================================

@dataclass(eq=False)
class ASTNode:
    """
    A node of the Cybele AST.

    Nodes compare by identity; two literals with the same text are still
    different nodes.

    Attributes:
        type: The NodeType tag
        text: Text of the originating token (SCOPE_TEXT for scopes)
        left: Left child (BinaryOperator only)
        right: Right child (operand, inner expression or open statement)
        parent_node: Node whose slot holds this node
        parent_scope: Enclosing Scope
        old_root: Parser insertion point to restore when a Parenthesis closes
        list_head: First sealed statement (Scope only)
        list_tail: Last sealed statement (Scope only)
        next: Following statement in the enclosing scope's list
        location: Source location of the originating token
    """
    type: NodeType
    text: str
    left: Optional["ASTNode"] = None
    right: Optional["ASTNode"] = None
    parent_node: Optional["ASTNode"] = field(default=None, repr=False)
    parent_scope: Optional["ASTNode"] = field(default=None, repr=False)
    old_root: Optional["ASTNode"] = field(default=None, repr=False)
    list_head: Optional["ASTNode"] = field(default=None, repr=False)
    list_tail: Optional["ASTNode"] = field(default=None, repr=False)
    next: Optional["ASTNode"] = field(default=None, repr=False)
    location: Optional[SourceLocation] = field(default=None, repr=False)

    def __repr__(self) -> str:
        return f"ASTNode({self.type.value}, {self.text!r})"

    @classmethod
    def scope(cls, parent_scope: Optional["ASTNode"] = None) -> "ASTNode":
        """Create an empty Scope node."""
        return cls(NodeType.SCOPE, SCOPE_TEXT, parent_scope=parent_scope)

    def is_operator(self) -> bool:
        """Return True for unary and binary operator nodes."""
        return self.type in (NodeType.UNARY_OPERATOR, NodeType.BINARY_OPERATOR)

    def is_container(self) -> bool:
        """Return True for nodes whose `right` is an insertion slot."""
        return self.type in (NodeType.SCOPE, NodeType.PARENTHESIS)

    def children(self) -> list["ASTNode"]:
        """Return the owned children held in `left` and `right`."""
        return [child for child in (self.left, self.right) if child is not None]

    # =========================================================================
    # Scope Statement List
    # =========================================================================

    def append_statement(self, statement: "ASTNode") -> None:
        """Link a completed statement at the end of this scope's list."""
        statement.next = None
        if self.list_tail is None:
            self.list_head = statement
        else:
            self.list_tail.next = statement
        self.list_tail = statement

    def statements(self) -> Iterator["ASTNode"]:
        """Iterate over the sealed statements of this scope, in order."""
        statement = self.list_head
        while statement is not None:
            following = statement.next
            yield statement
            statement = following


# =============================================================================
# Syntax Tree
# =============================================================================

class SyntaxTree:
    """
    Owner of a parsed tree.

    The tree is rooted at the outermost Scope. Releasing it unlinks every
    node; release is idempotent and also happens when the tree is used as
    a context manager:

        with parse_source("1+2;") as tree:
            value = evaluate(tree)

    Attributes:
        root: The outermost Scope, or None once released
    """

    def __init__(self, root: ASTNode):
        self.root: Optional[ASTNode] = root

    @property
    def released(self) -> bool:
        return self.root is None

    @property
    def statements(self) -> list[ASTNode]:
        """The top-level statements, in source order."""
        if self.root is None:
            return []
        return list(self.root.statements())

    def node_count(self) -> int:
        """Number of nodes owned by the tree, the root included."""
        return sum(1 for _ in walk(self.root)) if self.root is not None else 0

    def release(self) -> None:
        """Unlink every node of the tree. Safe to call more than once."""
        if self.root is None:
            return

        pending = [self.root]
        while pending:
            node = pending.pop()
            pending.extend(node.children())
            pending.extend(node.statements())

            node.left = None
            node.right = None
            node.parent_node = None
            node.parent_scope = None
            node.old_root = None
            node.list_head = None
            node.list_tail = None
            node.next = None

        self.root = None

    def __enter__(self) -> "SyntaxTree":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        if self.root is None:
            return "SyntaxTree(released)"
        return f"SyntaxTree({len(self.statements)} statements)"


def _owned(node: ASTNode) -> list[ASTNode]:
    """Nodes owned directly by `node`: statements, then left, then right."""
    return list(node.statements()) + node.children()


def walk(root: ASTNode) -> Iterator[ASTNode]:
    """Yield every node owned by `root`, parents before children."""
    pending = [root]
    while pending:
        node = pending.pop()
        yield node
        # Reversed so statements and left children come out first
        pending.extend(reversed(_owned(node)))


# =============================================================================
# Invariant Checking
# =============================================================================

def check_invariants(tree: Union[SyntaxTree, ASTNode]) -> None:
    """
    Verify that a completed tree is well formed.

    Checks the shape rules of every node type, that each `parent_node`
    points at the node owning the slot, that each non-scope node knows
    its enclosing scope, and that only the root lacks a scope.

    Raises:
        ASTInvariantError: On the first violation found
    """
    root = tree.root if isinstance(tree, SyntaxTree) else tree
    if root is None:
        raise ASTInvariantError("tree has been released")

    if root.type is not NodeType.SCOPE:
        raise ASTInvariantError(f"root must be a Scope, not {root.type.value}")
    if root.parent_scope is not None or root.parent_node is not None:
        raise ASTInvariantError("root scope must not have a parent")

    # (node, expected parent_node, enclosing scope)
    pending: list[tuple[ASTNode, Optional[ASTNode], ASTNode]] = []
    for statement in root.statements():
        pending.append((statement, root, root))
    _check_scope(root)

    while pending:
        node, parent, scope = pending.pop()
        _check_node(node, parent, scope)

        if node.type is NodeType.SCOPE:
            for statement in node.statements():
                pending.append((statement, node, node))
        else:
            for child in node.children():
                pending.append((child, node, scope))


def _fail(node: ASTNode, message: str) -> None:
    raise ASTInvariantError(f"{node.type.value} '{node.text}': {message}", node.location)


def _check_scope(scope: ASTNode) -> None:
    if scope.left is not None:
        _fail(scope, "scope must not have a left child")
    if scope.right is not None:
        _fail(scope, "scope still holds an unsealed statement")
    if (scope.list_head is None) != (scope.list_tail is None):
        _fail(scope, "statement list head and tail disagree")
    if scope.list_tail is not None and scope.list_tail.next is not None:
        _fail(scope, "last statement must not link onward")


def _check_node(node: ASTNode, parent: ASTNode, scope: ASTNode) -> None:
    if node.parent_node is not parent:
        _fail(node, "parent_node does not point at the owning node")
    if node.parent_scope is not scope:
        _fail(node, "parent_scope does not point at the enclosing scope")

    node_type = node.type
    if node_type is NodeType.LITERAL:
        if node.left is not None or node.right is not None:
            _fail(node, "literal must be a leaf")
    elif node_type is NodeType.BINARY_OPERATOR:
        if node.left is None or node.right is None:
            _fail(node, "binary operator needs two operands")
    elif node_type is NodeType.UNARY_OPERATOR:
        if node.left is not None or node.right is None:
            _fail(node, "unary operator needs exactly a right operand")
    elif node_type is NodeType.PARENTHESIS:
        if node.left is not None or node.right is None:
            _fail(node, "parenthesis must hold its expression on the right")
        if node.old_root is not None:
            _fail(node, "parenthesis was never closed")
    elif node_type is NodeType.SCOPE:
        _check_scope(node)


# =============================================================================
# Bottom-Up Folding
# =============================================================================

def fold_tree(root: ASTNode, combine: Callable[[ASTNode, list], Any]) -> Any:
    """
    Combine a tree bottom-up without recursion.

    `combine(node, values)` is called once per node, after all of the
    node's owned nodes (statements first, then `left`, then `right`) and
    receives their results in that order. The result for `root` is
    returned. Deep trees need no Python stack.
    """
    values: list = []
    pending: list[tuple[ASTNode, Optional[list[ASTNode]]]] = [(root, None)]

    while pending:
        node, owned = pending.pop()
        if owned is None:
            owned = _owned(node)
            pending.append((node, owned))
            pending.extend((child, None) for child in reversed(owned))
            continue

        count = len(owned)
        arguments = values[len(values) - count:]
        del values[len(values) - count:]
        values.append(combine(node, arguments))

    return values[0]


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Top-down visits dispatch on the node type: a Literal goes to
    visit_Literal, a Scope to visit_Scope, and so on. Unhandled types
    fall back to generic_visit, which walks on to the nodes below.

    Bottom-up visits (fold) dispatch to leave_<type>(node, *values),
    where `values` are the results for the node's statements and
    children. Unhandled types fall back to generic_leave.

    Usage:
        class LiteralCounter(ASTVisitor):
            def __init__(self):
                self.count = 0

            def visit_Literal(self, node):
                self.count += 1
    """

    def visit(self, node: ASTNode):
        """Visit a node by dispatching to the method for its type."""
        method_name = f"visit_{node.type.value}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """
        Visit the nodes below `node` that have a handler.

        Nodes without a handler are walked through iteratively, so only
        handlers that call generic_visit themselves add stack depth.
        """
        pending = list(reversed(_owned(node)))
        while pending:
            child = pending.pop()
            handler = getattr(self, f"visit_{child.type.value}", None)
            if handler is not None:
                handler(child)
            else:
                pending.extend(reversed(_owned(child)))

    def fold(self, node: ASTNode):
        """Visit a tree bottom-up and return the value for `node`."""
        return fold_tree(node, self._leave)

    def _leave(self, node: ASTNode, values: list):
        handler = getattr(self, f"leave_{node.type.value}", self.generic_leave)
        return handler(node, *values)

    def generic_leave(self, node: ASTNode, *values) -> None:
        return None


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter:
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(tree))

    Output for "1+2*3;":
        Scope
          Statement 1
            BinaryOperator '+'
              Literal '1'
              BinaryOperator '*'
                Literal '2'
                Literal '3'
    """

    def __init__(self):
        self.output: list[str] = []

    def print(self, tree: Union[SyntaxTree, ASTNode]) -> str:
        """Print the tree and return it as a string."""
        node = tree.root if isinstance(tree, SyntaxTree) else tree
        self.output = []
        if node is None:
            return ""

        # Entries are nodes or plain heading strings, with their depth
        pending: list[tuple[Union[ASTNode, str], int]] = [(node, 0)]
        while pending:
            entry, depth = pending.pop()
            if isinstance(entry, str):
                self._emit(entry, depth)
                continue

            self._emit(self._describe(entry), depth)
            below: list[tuple[Union[ASTNode, str], int]] = []
            for number, statement in enumerate(entry.statements(), start=1):
                below.append((f"Statement {number}", depth + 1))
                below.append((statement, depth + 2))
            below.extend((child, depth + 1) for child in entry.children())
            pending.extend(reversed(below))

        return "\n".join(self.output)

    def _emit(self, text: str, depth: int) -> None:
        self.output.append(f"{'  ' * depth}{text}")

    @staticmethod
    def _describe(node: ASTNode) -> str:
        if node.type in (NodeType.SCOPE, NodeType.PARENTHESIS):
            return node.type.value
        return f"{node.type.value} '{node.text}'"


def _render(node: ASTNode, parts: list[str]) -> str:
    if node.type is NodeType.SCOPE:
        return "; ".join(parts)

    remaining = iter(parts)
    left = next(remaining, "") if node.left is not None else ""
    right = next(remaining, "") if node.right is not None else ""

    if node.type is NodeType.LITERAL:
        return node.text
    if node.type is NodeType.UNARY_OPERATOR:
        return f"{node.text}{right}"
    if node.type is NodeType.BINARY_OPERATOR:
        return f"({left} {node.text} {right})"
    return f"[{right}]"


def format_expression(node: Optional[ASTNode]) -> str:
    """
    Render a node as a one-line expression.

    Binary operators are fully parenthesised and Parenthesis nodes are
    shown in square brackets, so the tree shape can be read back:

        "1+2*3"    -> "(1 + (2 * 3))"
        "(1+2)*3"  -> "([(1 + 2)] * 3)"
        "-7"       -> "-7"

    A Scope renders as its statements joined by "; ".
    """
    if node is None:
        return ""
    return fold_tree(node, _render)
