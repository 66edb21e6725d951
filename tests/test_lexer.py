"""
Cybele Lexer Test Suite
=======================

Tests for token classification, context-sensitive signs, position
tracking and the adjacency rules enforced while scanning.
"""

import logging

import pytest

from attis.cybele.lexer import CybeleLexer, Token, TokenKind, TokenList, tokenize_source
from attis.cybele.source import CharacterSource
from attis.cybele.errors import (
    CybeleSyntaxError,
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


K = TokenKind


def kinds(source):
    return tokenize_source(source).kinds()


# =============================================================================
# Basic Tokens
# =============================================================================

class TestTokens:
    """Tests for basic token generation."""

    def test_empty_source(self):
        """Empty source should produce only EOF token."""
        assert kinds("") == [K.EOF]

    def test_whitespace_only(self):
        """Whitespace-only source should produce only EOF token."""
        assert kinds("  \n\t \r\n ") == [K.EOF]

    def test_literal(self):
        """A digit run is a single literal holding its text."""
        tokens = list(CybeleLexer("1234;").tokenize())
        assert tokens[0].kind == K.LITERAL
        assert tokens[0].text == "1234"

    def test_literal_at_end_of_input(self):
        """A literal may end the input without a semicolon."""
        tokens = tokenize_source("42")
        assert tokens.kinds() == [K.LITERAL, K.EOF]
        assert tokens.texts() == ["42", ""]

    def test_leading_zeros_kept(self):
        """Literal text is kept verbatim."""
        assert tokenize_source("007;").head.text == "007"

    def test_full_expression(self):
        """Every token kind in one expression."""
        assert kinds("-12*(3+4);") == [
            K.UNARY_OPERATOR,
            K.LITERAL,
            K.BINARY_OPERATOR,
            K.OPEN_PARENTHESIS,
            K.LITERAL,
            K.BINARY_OPERATOR,
            K.LITERAL,
            K.CLOSE_PARENTHESIS,
            K.SEMICOLON,
            K.EOF,
        ]

    @pytest.mark.parametrize("operator", ["+", "-", "*", "/", "%"])
    def test_binary_operators(self, operator):
        """Each operator between literals is binary."""
        tokens = tokenize_source(f"8{operator}2;")
        assert tokens.kinds() == [K.LITERAL, K.BINARY_OPERATOR, K.LITERAL, K.SEMICOLON, K.EOF]
        assert tokens.texts()[1] == operator

    def test_whitespace_separates_tokens(self):
        """Whitespace between tokens is skipped."""
        assert tokenize_source(" 1 +\t2 ;\n").texts() == ["1", "+", "2", ";", ""]

    def test_empty_statements(self):
        """Semicolons may follow semicolons or start the input."""
        assert kinds(";;1;;") == [K.SEMICOLON, K.SEMICOLON, K.LITERAL, K.SEMICOLON, K.SEMICOLON, K.EOF]

    def test_ends_with_eof(self):
        """The last token is always EOF."""
        tokens = tokenize_source("1;2;")
        assert tokens.tail.kind == K.EOF


# =============================================================================
# Sign Context
# =============================================================================

class TestSignContext:
    """'+' and '-' are classified by the token before them."""

    @pytest.mark.parametrize("source,index,expected", [
        ("-1", 0, K.UNARY_OPERATOR),          # start of input
        ("+1", 0, K.UNARY_OPERATOR),
        ("1*-1", 2, K.UNARY_OPERATOR),        # after binary operator
        ("1/+1", 2, K.UNARY_OPERATOR),
        ("(-1)", 1, K.UNARY_OPERATOR),        # after '('
        ("1;-1", 2, K.UNARY_OPERATOR),        # after ';'
        ("1-1", 1, K.BINARY_OPERATOR),        # after literal
        ("1+1", 1, K.BINARY_OPERATOR),
        ("(1)-1", 3, K.BINARY_OPERATOR),      # after ')'
        ("(1)+1", 3, K.BINARY_OPERATOR),
    ])
    def test_sign_classification(self, source, index, expected):
        """The sign's kind follows from the previous token."""
        assert kinds(source)[index] == expected

    def test_whitespace_does_not_change_context(self):
        """Whitespace between tokens does not affect classification."""
        assert kinds("1 - 1") == [K.LITERAL, K.BINARY_OPERATOR, K.LITERAL, K.EOF]
        assert kinds("1 * - 1") == [
            K.LITERAL, K.BINARY_OPERATOR, K.UNARY_OPERATOR, K.LITERAL, K.EOF,
        ]

    def test_unary_after_newline_statement(self):
        """A sign at the start of a new statement is unary."""
        assert kinds("1;\n-2;")[2] == K.UNARY_OPERATOR


# =============================================================================
# Adjacency Errors
# =============================================================================

class TestAdjacencyErrors:
    """Malformed token sequences are rejected while scanning."""

    @pytest.mark.parametrize("source,error", [
        ("1+;", BadSemicolonError),
        ("(;", BadSemicolonError),
        ("-;", BadSemicolonError),
        ("*1", BadBinaryOperatorError),
        ("(/2)", BadBinaryOperatorError),
        ("1;%2", BadBinaryOperatorError),
        ("1+*2", BadBinaryOperatorError),
        ("--1", BadUnaryOperatorError),
        ("1*-+1", BadUnaryOperatorError),
        ("1(", BadOpenParenthesisError),
        ("(1)(2)", BadOpenParenthesisError),
        (")1(", BadCloseParenthesisError),
        ("()", BadCloseParenthesisError),
        ("1+)", BadCloseParenthesisError),
        ("1 2", MissingOperatorError),
        ("(1)2", MissingOperatorError),
        ("1+", InvalidEndOfInputError),
        ("(", InvalidEndOfInputError),
        ("-", InvalidEndOfInputError),
        ("1a", UnknownCharacterError),
        ("1.5", UnknownCharacterError),
        ("x", UnknownCharacterError),
    ])
    def test_rejected(self, source, error):
        """Each violation raises its own error type."""
        with pytest.raises(error):
            tokenize_source(source)

    def test_syntax_errors_share_base(self):
        """All adjacency errors are CybeleSyntaxErrors."""
        with pytest.raises(CybeleSyntaxError):
            tokenize_source("1+;")

    def test_error_location(self):
        """Errors point at the offending character."""
        with pytest.raises(BadSemicolonError) as exc_info:
            tokenize_source("1+;", "test.cyb")
        error = exc_info.value
        assert error.location.filename == "test.cyb"
        assert error.location.line == 1
        assert error.location.column == 3
        assert str(error).startswith("test.cyb:1:3: error:")

    def test_error_source_line(self):
        """Errors carry the current line as context."""
        with pytest.raises(MissingOperatorError) as exc_info:
            tokenize_source("1+\n2 3;")
        error = exc_info.value
        assert error.location.line == 2
        assert error.location.column == 3
        assert error.source_line == "2 3"
        assert "    2 3\n      ^" in str(error)

    def test_unknown_character_message(self):
        """Printable characters are quoted."""
        with pytest.raises(UnknownCharacterError) as exc_info:
            tokenize_source("1&2")
        assert exc_info.value.char == "&"
        assert "unknown character '&'" in str(exc_info.value)

    def test_non_ascii_rejected(self):
        """Non-ASCII input is rejected at its first byte."""
        with pytest.raises(UnknownCharacterError) as exc_info:
            tokenize_source("1+é")
        assert "0xC3" in str(exc_info.value)

    def test_invalid_end_names_last_token(self):
        """End-of-input errors mention the dangling token."""
        with pytest.raises(InvalidEndOfInputError) as exc_info:
            tokenize_source("2*")
        assert exc_info.value.last == "*"

    def test_no_tokens_after_error(self):
        """tokenize() stops at the first error."""
        seen = []
        with pytest.raises(BadSemicolonError):
            for token in CybeleLexer("1+;2;").tokenize():
                seen.append(token.kind)
        assert seen == [K.LITERAL, K.BINARY_OPERATOR]


# =============================================================================
# Positions and Sources
# =============================================================================

class TestPositions:
    """Line and column tracking."""

    def test_columns(self):
        """Columns are 1-indexed."""
        tokens = list(CybeleLexer("12+3;").tokenize())
        assert [(t.line, t.column) for t in tokens] == [(1, 1), (1, 3), (1, 4), (1, 5), (1, 6)]

    def test_lines(self):
        """A newline starts a new line at column 1."""
        tokens = list(CybeleLexer("1+\n 23;").tokenize())
        literal = tokens[2]
        assert literal.text == "23"
        assert (literal.line, literal.column) == (2, 2)

    def test_crlf(self):
        """CRLF line endings count as one line break."""
        tokens = list(CybeleLexer("1;\r\n2;").tokenize())
        assert (tokens[2].line, tokens[2].column) == (2, 1)

    def test_filename(self):
        """Tokens carry the source name."""
        tokens = list(CybeleLexer("1;", "prog.cyb").tokenize())
        assert all(t.filename == "prog.cyb" for t in tokens)
        assert str(tokens[0].location) == "prog.cyb:1:1"

    def test_character_source_input(self):
        """The lexer reads from a CharacterSource."""
        source = CharacterSource.from_bytes(b"3*4;", "bytes.cyb")
        lexer = CybeleLexer(source)
        assert lexer.filename == "bytes.cyb"
        assert lexer.lex().texts() == ["3", "*", "4", ";", ""]

    def test_read_error(self, failing_source):
        """A failing source raises SourceReadError, not a clean EOF."""
        source = failing_source(b"1+2")
        with pytest.raises(SourceReadError) as exc_info:
            CybeleLexer(source).lex()
        assert "cannot read 'pipe'" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, OSError)


# =============================================================================
# Token List
# =============================================================================

class TestTokenList:
    """Tests for Token and TokenList."""

    def test_lex_returns_token_list(self):
        """lex() collects tokens into a TokenList."""
        tokens = CybeleLexer("1;").lex()
        assert isinstance(tokens, TokenList)
        assert len(tokens) == 3
        assert all(token.list_owner is tokens for token in tokens)

    def test_from_tokens(self):
        """A TokenList can be built from plain tokens."""
        tokens = TokenList.from_tokens([
            Token(K.LITERAL, "1"),
            Token(K.EOF, ""),
        ])
        assert tokens.kinds() == [K.LITERAL, K.EOF]

    def test_token_repr(self):
        """Tokens show kind, text and position."""
        assert repr(Token(K.LITERAL, "12", 3, 4)) == "Token(LITERAL, '12', 3:4)"
        assert repr(Token(K.EOF, "", 1, 9)) == "Token(EOF, 1:9)"

    def test_token_equality_ignores_links(self):
        """Tokens compare by content, not list membership."""
        listed = tokenize_source("5").head
        assert listed == Token(K.LITERAL, "5", 1, 1, "<string>")

    def test_is_operator(self):
        """Only unary and binary operators are operators."""
        tokens = list(CybeleLexer("-1+2;").tokenize())
        assert [t.is_operator() for t in tokens] == [True, False, True, False, False, False]


# =============================================================================
# Logging
# =============================================================================

class TestLogging:
    """Debug logging of tokens and bytes."""

    def test_tokens_logged(self, caplog):
        """Each emitted token is logged at DEBUG level."""
        with caplog.at_level(logging.DEBUG, logger="attis.cybele.lexer"):
            tokenize_source("1+2;")
        assert "Token Token(BINARY_OPERATOR, '+', 1:2)" in caplog.text
        assert "Lex " not in caplog.text

    def test_trace_logs_bytes(self, caplog):
        """With trace on, every byte read is logged."""
        with caplog.at_level(logging.DEBUG, logger="attis.cybele.lexer"):
            CybeleLexer("7;", trace=True).lex()
        assert "Lex '7' at 1:1" in caplog.text
        assert "Lex ';' at 1:2" in caplog.text
