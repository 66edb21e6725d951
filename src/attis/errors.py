"""
Attis Error Hierarchy
=====================

This module defines the root of the exception hierarchy for the Attis
toolchain. All exceptions inherit from AttisError, allowing callers to
catch every toolchain error with a single except clause if desired.

Exception Hierarchy
-------------------
AttisError (base)
└── CybeleError (Cybele front end, see attis.cybele.errors)

Design Philosophy
-----------------
Each exception captures source location information (filename, line,
column) when applicable. Error messages follow this format:

    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class AttisError(Exception):
    """
    Base exception for all Attis errors.

    All exceptions in the toolchain inherit from this class, allowing
    callers to catch every compiler error with a single except clause:

        try:
            compiler.compile_file("program.cyb")
        except AttisError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source code for error reporting.

    Used by tokens, AST nodes and errors to point back into the input.
    The frozen design ensures locations cannot be accidentally modified.

    Attributes:
        filename: Name of the source file (or "<string>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
