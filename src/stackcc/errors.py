"""
stackcc Error Hierarchy
=======================

This module defines the root of the exception hierarchy for stackcc.
All exceptions inherit from StackCCError, allowing callers to catch every
compiler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
StackCCError (base)
└── MiniCError (compiler errors, see stackcc.minic.errors)
    ├── CSyntaxError - lexical and syntax errors in source
    └── CCodeGenError - internal code generation errors

Design Philosophy
-----------------
Each exception captures source location information (filename, line, column)
when applicable. This allows for detailed error messages that help users
quickly locate and fix issues in their source code.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class StackCCError(Exception):
    """
    Base exception for all stackcc errors.

    All exceptions in the package inherit from this class, allowing callers
    to catch all compiler errors with a single except clause:

        try:
            compile_source("main() { return 0; }")
        except StackCCError as e:
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

    This class is used by tokens, syntax tree nodes and errors to track
    where they occur in the source text. The immutable (frozen) design
    ensures locations cannot be accidentally modified.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
