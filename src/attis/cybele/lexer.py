"""
Cybele Lexer (Tokenizer)
========================

This module implements the lexer for Cybele. It reads a CharacterSource
one byte at a time and produces the ordered token sequence consumed by
the parser.

Token Categories
----------------
| Input        | Token                                              |
|--------------|----------------------------------------------------|
| 0-9          | LITERAL (a whole digit run is one token)           |
| + -          | UNARY_OPERATOR or BINARY_OPERATOR, by context      |
| * / %        | BINARY_OPERATOR                                    |
| ( )          | OPEN_PARENTHESIS, CLOSE_PARENTHESIS                |
| ;            | SEMICOLON                                          |
| space \\t \\r \\n | skipped                                       |

The sign characters are context-sensitive: '+' and '-' are unary at the
start of input and after a binary operator, '(' or ';'. Anywhere else
they are binary.

Adjacency Rules
---------------
The only state the lexer keeps is the kind of the last emitted token,
and every new token is checked against it:

- a binary operator must follow a literal or ')'
- a unary operator must not follow another unary operator
- '(' must not follow a literal or ')'
- ')' must follow a literal or ')'
- ';' must follow a literal, ')' or ';', or be the first token
- a literal must not follow a literal or ')'
- input may only end after a literal, ')' or ';' (or be empty)

Any violation raises the matching CybeleSyntaxError subclass.

Example Usage
-------------
>>> from attis.cybele.lexer import CybeleLexer
>>> for token in CybeleLexer("-12*(3+4);").tokenize():
...     print(token)
Token(UNARY_OPERATOR, '-', 1:1)
Token(LITERAL, '12', 1:2)
Token(BINARY_OPERATOR, '*', 1:4)
Token(OPEN_PARENTHESIS, '(', 1:5)
Token(LITERAL, '3', 1:6)
Token(BINARY_OPERATOR, '+', 1:7)
Token(LITERAL, '4', 1:8)
Token(CLOSE_PARENTHESIS, ')', 1:9)
Token(SEMICOLON, ';', 1:10)
Token(EOF, 1:11)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator, Optional, Union
import logging

from attis.errors import SourceLocation
from attis.linked_list import LinkedList, ListEntry
from attis.cybele.source import CharacterSource
from attis.cybele.errors import (
    SourceReadError,
    UnknownCharacterError,
    BadBinaryOperatorError,
    BadUnaryOperatorError,
    BadOpenParenthesisError,
    BadCloseParenthesisError,
    BadSemicolonError,
    MissingOperatorError,
    InvalidEndOfInputError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Token Types
# =============================================================================

class TokenKind(Enum):
    """Classification of a Cybele token."""

    LITERAL = auto()            # digit run
    UNARY_OPERATOR = auto()     # prefix + or -
    BINARY_OPERATOR = auto()    # + - * / % between operands
    OPEN_PARENTHESIS = auto()   # (
    CLOSE_PARENTHESIS = auto()  # )
    SEMICOLON = auto()          # ;
    EOF = auto()                # end of input


@dataclass
class Token(ListEntry):
    """
    A classified lexeme.

    Tokens carry the links that place them in a TokenList; the links are
    not dataclass fields, so equality compares only the token itself.

    Attributes:
        kind: The TokenKind classification
        text: The verbatim characters (the digit run for literals)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source
    """
    kind: TokenKind
    text: str
    line: int = 1
    column: int = 1
    filename: str = "<string>"

    def __repr__(self) -> str:
        if self.text:
            return f"Token({self.kind.name}, {self.text!r}, {self.line}:{self.column})"
        return f"Token({self.kind.name}, {self.line}:{self.column})"

    __str__ = __repr__

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_operator(self) -> bool:
        """Return True for unary and binary operators."""
        return self.kind in (TokenKind.UNARY_OPERATOR, TokenKind.BINARY_OPERATOR)


class TokenList(LinkedList[Token]):
    """
    The ordered token sequence produced by the lexer.

    The parser removes tokens from the list as it consumes them.
    """

    @classmethod
    def from_tokens(cls, tokens: Iterable[Token]) -> "TokenList":
        """Build a list from any iterable of tokens."""
        token_list = cls()
        for token in tokens:
            token_list.append(token)
        return token_list

    def kinds(self) -> list[TokenKind]:
        """Return the kind of every token, in order."""
        return [token.kind for token in self]

    def texts(self) -> list[str]:
        """Return the text of every token, in order."""
        return [token.text for token in self]


# =============================================================================
# Lexer Implementation
# =============================================================================

class CybeleLexer:
    """
    Tokenizes Cybele source.

    The lexer is single-pass and never looks ahead: each byte either
    extends the literal being scanned or produces one token, which is
    validated against the kind of the previous token.

    Usage:
        lexer = CybeleLexer(CharacterSource.open("program.cyb"))
        tokens = lexer.lex()

    Attributes:
        source: The CharacterSource being read
        filename: Name of the source (for error reporting)
        trace: Log every byte read at DEBUG level
    """

    DIGITS = frozenset(b"0123456789")
    WHITESPACE = frozenset(b" \t\r\n")

    # Tokens after which '+' and '-' are signs rather than operators
    UNARY_CONTEXT = frozenset({
        None,
        TokenKind.BINARY_OPERATOR,
        TokenKind.OPEN_PARENTHESIS,
        TokenKind.SEMICOLON,
    })

    # Tokens that complete an operand
    OPERAND_END = frozenset({
        TokenKind.LITERAL,
        TokenKind.CLOSE_PARENTHESIS,
    })

    # Tokens the input may end with
    VALID_END = frozenset({
        None,
        TokenKind.LITERAL,
        TokenKind.CLOSE_PARENTHESIS,
        TokenKind.SEMICOLON,
    })

    def __init__(
        self,
        source: Union[CharacterSource, str],
        filename: Optional[str] = None,
        trace: bool = False,
    ):
        """
        Initialize the lexer.

        Args:
            source: A CharacterSource, or source text to wrap in one
            filename: Name for error messages (defaults to the source name)
            trace: Log every byte read at DEBUG level
        """
        if isinstance(source, str):
            source = CharacterSource.from_string(source, filename or "<string>")
        self.source = source
        self.filename = filename or source.name
        self.trace = trace

        # Position of the most recently read byte
        self._line = 1
        self._column = 0
        self._at_line_start = False
        self._line_text = bytearray()

        # Kind and text of the last emitted token
        self._last_kind: Optional[TokenKind] = None
        self._last_text = ""

        # Digit run in progress
        self._literal = bytearray()
        self._literal_line = 0
        self._literal_column = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source.

        Yields:
            Token objects in source order, always ending with EOF

        Raises:
            CybeleSyntaxError: If an adjacency rule is violated
            SourceReadError: If the source fails while reading
        """
        while True:
            byte = self._read()

            if byte is None:
                if self.source.error is not None:
                    raise SourceReadError(
                        self.filename, str(self.source.error)
                    ) from self.source.error
                break

            if byte in self.DIGITS:
                self._extend_literal(byte)
                continue

            if self._literal:
                yield self._finish_literal()

            if byte in self.WHITESPACE:
                continue

            yield self._scan_symbol(chr(byte))

        if self._literal:
            yield self._finish_literal()

        if self._last_kind not in self.VALID_END:
            raise InvalidEndOfInputError(
                self._last_text,
                self._location(self._line, self._column + 1),
                self._current_line(),
            )

        yield Token(TokenKind.EOF, "", self._line, self._column + 1, self.filename)

    def lex(self) -> TokenList:
        """Tokenize the whole source into a TokenList."""
        tokens = TokenList()
        for token in self.tokenize():
            tokens.append(token)
        logger.debug(f"Lexed {len(tokens)} tokens from {self.filename}")
        return tokens

    # =========================================================================
    # Character Access
    # =========================================================================

    def _read(self) -> Optional[int]:
        """Read one byte and advance the line/column position."""
        byte = self.source.next_byte()
        if byte is None:
            return None

        if self._at_line_start:
            self._line += 1
            self._column = 0
            self._line_text.clear()
            self._at_line_start = False

        self._column += 1
        if byte == 0x0A:
            self._at_line_start = True
        elif byte != 0x0D:
            self._line_text.append(byte)

        if self.trace:
            logger.debug(f"Lex {chr(byte)!r} at {self._line}:{self._column}")

        return byte

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _extend_literal(self, byte: int) -> None:
        """Append a digit, starting a new literal when none is open."""
        if not self._literal:
            if self._last_kind in self.OPERAND_END:
                raise MissingOperatorError(
                    self._location(self._line, self._column),
                    self._current_line(),
                )
            self._literal_line = self._line
            self._literal_column = self._column
        self._literal.append(byte)

    def _finish_literal(self) -> Token:
        """Close the digit run and emit it as a LITERAL token."""
        text = self._literal.decode("ascii")
        self._literal.clear()
        return self._emit(
            TokenKind.LITERAL, text, self._literal_line, self._literal_column
        )

    def _scan_symbol(self, char: str) -> Token:
        """Classify and validate a single-character token."""
        line, column = self._line, self._column
        location = self._location(line, column)
        last = self._last_kind

        if char in "+-":
            if last is TokenKind.UNARY_OPERATOR:
                raise BadUnaryOperatorError(char, location, self._current_line())
            if last in self.UNARY_CONTEXT:
                return self._emit(TokenKind.UNARY_OPERATOR, char, line, column)
            return self._scan_binary(char, line, column)

        if char in "*/%":
            return self._scan_binary(char, line, column)

        if char == "(":
            if last in self.OPERAND_END:
                raise BadOpenParenthesisError(location, self._current_line())
            return self._emit(TokenKind.OPEN_PARENTHESIS, char, line, column)

        if char == ")":
            if last not in self.OPERAND_END:
                raise BadCloseParenthesisError(location, self._current_line())
            return self._emit(TokenKind.CLOSE_PARENTHESIS, char, line, column)

        if char == ";":
            if last is not None and last not in (
                TokenKind.LITERAL,
                TokenKind.CLOSE_PARENTHESIS,
                TokenKind.SEMICOLON,
            ):
                raise BadSemicolonError(location, self._current_line())
            return self._emit(TokenKind.SEMICOLON, char, line, column)

        raise UnknownCharacterError(char, location, self._current_line())

    def _scan_binary(self, char: str, line: int, column: int) -> Token:
        """Emit a binary operator after checking it has a left operand."""
        if self._last_kind not in self.OPERAND_END:
            raise BadBinaryOperatorError(
                char, self._location(line, column), self._current_line()
            )
        return self._emit(TokenKind.BINARY_OPERATOR, char, line, column)

    def _emit(self, kind: TokenKind, text: str, line: int, column: int) -> Token:
        """Create a token and remember it as the last one emitted."""
        self._last_kind = kind
        self._last_text = text
        token = Token(kind, text, line, column, self.filename)
        logger.debug(f"Token {token!r}")
        return token

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _location(self, line: int, column: int) -> SourceLocation:
        return SourceLocation(self.filename, line, column)

    def _current_line(self) -> str:
        """Text of the current line read so far, for error context."""
        return self._line_text.decode("ascii", errors="replace")


def tokenize_source(source: str, filename: str = "<string>") -> TokenList:
    """
    Convenience function to tokenize source text.

    Args:
        source: Cybele source code
        filename: Name for error messages

    Returns:
        TokenList ending with an EOF token
    """
    return CybeleLexer(source, filename).lex()
