"""
Cybele Compiler Main Module
===========================

This module provides the main interface to the Cybele front end. It
runs the whole pipeline:

    Source → Lex → Parse → Check → Evaluate

Usage
-----
Command line:
    $ attis program.cyb

Programmatic:
    >>> from attis.cybele import compile_source
    >>> compile_source("1+2*3;").value
    7

Configuration
-------------
CompilerOptions can be built directly or from environment variables
(see CompilerOptions.from_env):

| Variable          | Option     | Default |
|-------------------|------------|---------|
| ATTIS_CHECK_TREE  | check_tree | on      |
| ATTIS_TRACE       | trace      | off     |
| ATTIS_EVALUATE    | evaluate   | on      |

Error Handling
--------------
The first error stops the pipeline and propagates as a CybeleError.
When a tree has already been built it is released before the error
leaves the compiler.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
import logging
import os

from attis.cybele.source import CharacterSource
from attis.cybele.lexer import CybeleLexer, Token, TokenList
from attis.cybele.parser import CybeleParser
from attis.cybele.ast import SyntaxTree, check_invariants
from attis.cybele.evaluator import Number, evaluate
from attis.cybele.errors import AllocationError

logger = logging.getLogger(__name__)


_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean environment variable, ignoring invalid values."""
    if (value := os.environ.get(name)) is None:
        return default
    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        check_tree: Verify the tree's structural invariants after parsing
        trace: Log every byte the lexer reads (DEBUG level)
        evaluate: Evaluate the tree and store the value in the result
    """
    check_tree: bool = True
    trace: bool = False
    evaluate: bool = True

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Environment variables (all optional):
            ATTIS_CHECK_TREE: Enable/disable the invariant check
            ATTIS_TRACE: Enable/disable lexer tracing
            ATTIS_EVALUATE: Enable/disable evaluation

        Accepted values are 1/true/yes/on and 0/false/no/off; anything
        else leaves the default in place.
        """
        defaults = cls()
        return cls(
            check_tree=_env_flag("ATTIS_CHECK_TREE", defaults.check_tree),
            trace=_env_flag("ATTIS_TRACE", defaults.trace),
            evaluate=_env_flag("ATTIS_EVALUATE", defaults.evaluate),
        )


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source name
        success: True once every stage has completed
        tokens: The tokens the lexer produced, in order
        token_count: Number of tokens lexed (EOF included)
        ast: The parsed tree (if parsing succeeded)
        value: Value of the program (if evaluated)
    """
    filename: str = ""
    success: bool = False
    tokens: list[Token] = field(default_factory=list)
    token_count: int = 0
    ast: Optional[SyntaxTree] = None
    value: Optional[Number] = None

    def release(self) -> None:
        """Release the tree, if any. Safe to call more than once."""
        if self.ast is not None:
            self.ast.release()

    def __enter__(self) -> "CompilerResult":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class CybeleCompiler:
    """
    Front end for the Cybele language.

    Example:
        compiler = CybeleCompiler()
        result = compiler.compile_file("program.cyb")
        print(result.value)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        """
        Initialize the compiler.

        Args:
            options: Compiler configuration (uses defaults if None)
        """
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<string>") -> CompilerResult:
        """
        Compile source text.

        Raises:
            CybeleError: If compilation fails
        """
        return self.compile_stream(CharacterSource.from_string(source, filename))

    def compile_file(self, filepath: Union[str, Path]) -> CompilerResult:
        """
        Compile a source file.

        Raises:
            CybeleError: If compilation fails
            FileNotFoundError: If the source file does not exist
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        with CharacterSource.open(path) as source:
            return self.compile_stream(source)

    def compile_stream(self, source: CharacterSource) -> CompilerResult:
        """
        Compile everything a CharacterSource yields.

        Returns:
            CompilerResult with the tokens, tree and (optionally) value

        Raises:
            CybeleError: If compilation fails
        """
        result = CompilerResult(filename=source.name)
        logger.debug(f"Compiling {source.name}")

        try:
            tokens = self._lex(source)
            result.tokens = list(tokens)
            result.token_count = len(tokens)

            result.ast = self._parse(tokens)

            if self.options.check_tree:
                check_invariants(result.ast)

            if self.options.evaluate:
                result.value = evaluate(result.ast)
        except MemoryError as e:
            result.release()
            raise AllocationError("compilation") from e
        except BaseException:
            result.release()
            raise

        result.success = True
        return result

    def _lex(self, source: CharacterSource) -> TokenList:
        """Tokenize the source."""
        return CybeleLexer(source, trace=self.options.trace).lex()

    def _parse(self, tokens: TokenList) -> SyntaxTree:
        """Parse tokens into a tree."""
        return CybeleParser(tokens).parse()


def compile_source(
    source: str,
    filename: str = "<string>",
    options: Optional[CompilerOptions] = None,
) -> CompilerResult:
    """
    Convenience function to compile source text.

    Example:
        >>> compile_source("(1+2)*3;").value
        9
    """
    return CybeleCompiler(options).compile_source(source, filename)
