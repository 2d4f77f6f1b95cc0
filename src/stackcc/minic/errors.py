"""
MiniC Compiler Error Hierarchy
==============================

This module defines the exception hierarchy for the MiniC compiler.
All exceptions inherit from MiniCError, which itself inherits from
the base StackCCError for consistent error handling across the package.

Every error is fatal: the compiler stops at the first problem it finds
and never emits partial assembly.

Exception Hierarchy
-------------------
MiniCError (base for all MiniC errors)
├── CSyntaxError - lexer and parser syntax errors
│   ├── InvalidCharacterError - unexpected character
│   ├── UnexpectedTokenError - token does not fit the grammar
│   ├── MissingTokenError - required punctuation/keyword absent
│   └── TooManyArgumentsError - more than six parameters or arguments
└── CCodeGenError - internal code generation errors
    └── InvalidLValueError - address taken of a non-variable

Error Message Format
--------------------
All errors include source location information and follow this format:

    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing

Example:
    <input>:1:14: error: expected ';'
        main() { x = 1 }
                     ^
"""

from typing import Optional

from stackcc.errors import StackCCError, SourceLocation


# =============================================================================
# Base MiniC Exception
# =============================================================================

class MiniCError(StackCCError):
    """
    Base exception for all MiniC compiler errors.

    This class provides common functionality for error messages including
    source location tracking, source line context, and helpful hints.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The actual source text at the error location
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

            <input>:1:10: error: invalid character '@' (0x40)
                main() { @ }
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


# =============================================================================
# Syntax Errors (Lexer and Parser)
# =============================================================================

class CSyntaxError(MiniCError):
    """
    Syntax error in MiniC source code.

    Raised when the lexer or parser encounters input that cannot be
    tokenized or parsed according to the MiniC grammar.
    """
    pass


class InvalidCharacterError(CSyntaxError):
    """
    Invalid character in source code.

    Raised when the lexer encounters a character that starts no token.
    Note that only lowercase letters form identifiers, so an uppercase
    letter or an underscore is reported here too.
    """

    def __init__(
        self,
        char: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.char = char
        super().__init__(
            f"invalid character '{char}' (0x{ord(char):02X})",
            location=location,
            source_line=source_line,
        )


class UnexpectedTokenError(CSyntaxError):
    """
    Unexpected token during parsing.

    Raised when the parser encounters a token that doesn't match
    the expected grammar rule, e.g. an operator where a number or
    expression should start, or a function definition that does not
    begin with a name.
    """

    def __init__(
        self,
        found: str,
        expected: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        self.expected = expected

        message = f"unexpected token '{found}'"
        hint = None
        if expected:
            hint = f"expected {expected}"

        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


class MissingTokenError(CSyntaxError):
    """
    Required token is missing.

    Raised when a required token (like ';' or ')') is not found
    where expected.
    """

    def __init__(
        self,
        expected: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.expected = expected
        super().__init__(
            f"expected {expected}",
            location=location,
            source_line=source_line,
        )


class TooManyArgumentsError(CSyntaxError):
    """
    More parameters or arguments than argument registers.

    The calling convention passes at most six integer arguments in
    registers and the generator never spills extra ones to the stack.
    """

    def __init__(
        self,
        function_name: str,
        count: int,
        limit: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.function_name = function_name
        self.count = count
        self.limit = limit
        super().__init__(
            f"'{function_name}' has {count} arguments, at most {limit} are supported",
            location=location,
            source_line=source_line,
        )


# =============================================================================
# Code Generation Errors
# =============================================================================

class CCodeGenError(MiniCError):
    """
    Error during code generation.

    These indicate a mismatch between what the parser produced and what
    the generator accepts, e.g. a node kind the generator does not know.
    """
    pass


class InvalidLValueError(CCodeGenError):
    """
    Invalid left-hand side of assignment.

    Raised when the generator is asked for the address of an expression
    that is not a variable reference.

    Examples of invalid lvalues:
        - 42 = x         // literal
        - (a + b) = x    // expression result
        - f() = x        // function return value
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "expression is not assignable (not an lvalue)",
            location=location,
            hint="left side of assignment must be a variable",
            source_line=source_line,
        )
