"""
MiniC Lexer (Tokenizer)
=======================

This module implements the scanner for MiniC. It converts source text
into the complete ordered list of tokens for the parser.

Token Categories
----------------
- Keywords: return, if, else, while, for
- Identifiers: maximal runs of lowercase letters
- Numbers: maximal runs of decimal digits
- Reserved: + - * / ( ) { } , ; < > = <= >= == !=

Scanning Rules
--------------
At each position, in priority order:

1. Skip whitespace.
2. Keywords, but only when the next character cannot continue an
   identifier (``iffoo`` is one identifier, not ``if`` + ``foo``).
3. Identifiers.
4. Two-character operators, then single-character ones.
5. Decimal integer literals.

Anything else is an InvalidCharacterError.

Example Usage
-------------
>>> from stackcc.minic.lexer import CLexer
>>> for token in CLexer('main() { return 42; }').tokenize():
...     print(token)
Token(IDENTIFIER, 'main', 1:1)
Token(RESERVED, '(', 1:5)
Token(RESERVED, ')', 1:6)
Token(RESERVED, '{', 1:8)
Token(RETURN, 'return', 1:10)
Token(NUMBER, 42, 1:17)
Token(RESERVED, ';', 1:19)
Token(RESERVED, '}', 1:21)
Token(EOF, 1:22)
"""

import logging
import string
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional

from stackcc.errors import SourceLocation
from stackcc.minic.errors import CSyntaxError, InvalidCharacterError

logger = logging.getLogger(__name__)


# =============================================================================
# Token Type Enumeration
# =============================================================================

class CTokenType(Enum):
    """
    Token types for MiniC.

    Operators and punctuation share the RESERVED type and are told apart
    by their text; keywords each get their own type.
    """

    EOF = auto()            # End of input
    RESERVED = auto()       # Operators and punctuation
    IDENTIFIER = auto()     # Variable/function names
    NUMBER = auto()         # Integer literals

    # === Keywords ===
    RETURN = auto()         # return
    IF = auto()             # if
    ELSE = auto()           # else
    WHILE = auto()          # while
    FOR = auto()            # for


KEYWORDS: dict[str, CTokenType] = {
    "return": CTokenType.RETURN,
    "if": CTokenType.IF,
    "else": CTokenType.ELSE,
    "while": CTokenType.WHILE,
    "for": CTokenType.FOR,
}

# Checked before the single-character set so "<=" never scans as "<" "="
TWO_CHAR_OPERATORS = ("<=", ">=", "==", "!=")

SINGLE_CHAR_OPERATORS = "+-*/(){},;<>="

# Largest literal the generator can materialize in a 64-bit register
MAX_LITERAL = 2**64 - 1


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class CToken:
    """
    A single token from MiniC source code.

    Attributes:
        type: The CTokenType classification
        text: The matched source text
        value: Numeric value, present only for NUMBER tokens
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
    """
    type: CTokenType
    text: str
    value: Optional[int] = None
    line: int = 1
    column: int = 1
    filename: str = "<input>"

    def __repr__(self) -> str:
        if self.type == CTokenType.EOF:
            return f"Token(EOF, {self.line}:{self.column})"
        if self.value is not None:
            return f"Token({self.type.name}, {self.value}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.text!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_reserved(self, text: str) -> bool:
        """Return True if this is the operator or punctuation ``text``."""
        return self.type == CTokenType.RESERVED and self.text == text


# =============================================================================
# Lexer Implementation
# =============================================================================

class CLexer:
    """
    Tokenizes MiniC source code.

    Usage:
        lexer = CLexer(source_text, filename)
        tokens = list(lexer.tokenize())

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_CHARS = string.ascii_lowercase

    DIGITS = string.digits

    WHITESPACE = " \t\r\n"

    def __init__(self, source: str, filename: str = "<input>"):
        self.source = source
        self.filename = filename

        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[CToken]:
        """
        Generate tokens from the source code.

        Yields:
            CToken objects for each lexical element, then one EOF token

        Raises:
            CSyntaxError: On the first character that starts no token
        """
        count = 0
        while True:
            self._skip_whitespace()
            if self._at_end():
                break
            yield self._scan_token()
            count += 1

        logger.debug("%s: scanned %d tokens", self.filename, count)
        yield self._make_token(CTokenType.EOF, "", self._line, self._column)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """Character at current position + offset, or "" past the end."""
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """Consume and return the current character, tracking line/column."""
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    def _starts_with(self, text: str) -> bool:
        return self.source.startswith(text, self._pos)

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._peek() in self.WHITESPACE:
            self._advance()

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: CTokenType,
        text: str,
        start_line: int,
        start_column: int,
        value: Optional[int] = None,
    ) -> CToken:
        return CToken(
            type=token_type,
            text=text,
            value=value,
            line=start_line,
            column=start_column,
            filename=self.filename,
        )

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> CToken:
        """Scan one token at the current (non-whitespace) position."""
        start_line = self._line
        start_column = self._column

        keyword = self._match_keyword()
        if keyword is not None:
            for _ in keyword:
                self._advance()
            return self._make_token(KEYWORDS[keyword], keyword, start_line, start_column)

        char = self._peek()

        if char in self.IDENT_CHARS:
            return self._scan_identifier(start_line, start_column)

        for op in TWO_CHAR_OPERATORS:
            if self._starts_with(op):
                self._advance()
                self._advance()
                return self._make_token(CTokenType.RESERVED, op, start_line, start_column)

        if char in SINGLE_CHAR_OPERATORS:
            self._advance()
            return self._make_token(CTokenType.RESERVED, char, start_line, start_column)

        if char and char in self.DIGITS:
            return self._scan_number(start_line, start_column)

        raise InvalidCharacterError(
            char,
            SourceLocation(self.filename, start_line, start_column),
            self._get_current_line(),
        )

    def _match_keyword(self) -> Optional[str]:
        """
        Return the keyword at the current position, if any.

        A keyword only matches when the character after it cannot
        continue an identifier.
        """
        for keyword in KEYWORDS:
            if self._starts_with(keyword):
                following = self._peek(len(keyword))
                if not following or following not in self.IDENT_CHARS:
                    return keyword
        return None

    def _scan_identifier(self, start_line: int, start_column: int) -> CToken:
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        return self._make_token(CTokenType.IDENTIFIER, "".join(chars), start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> CToken:
        """Scan a decimal literal, accumulating value = value * 10 + digit."""
        chars = []
        value = 0
        while self._peek() and self._peek() in self.DIGITS:
            digit = self._advance()
            chars.append(digit)
            value = value * 10 + int(digit)

        if value > MAX_LITERAL:
            raise CSyntaxError(
                "integer literal out of range",
                SourceLocation(self.filename, start_line, start_column),
                hint=f"literals must not exceed {MAX_LITERAL}",
                source_line=self._get_current_line(),
            )

        return self._make_token(CTokenType.NUMBER, "".join(chars), start_line, start_column, value)

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def _get_current_line(self) -> str:
        """Get the current line of source text for error reporting."""
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]


def tokenize(source: str, filename: str = "<input>") -> list[CToken]:
    """Scan ``source`` to completion and return the token list (EOF last)."""
    return list(CLexer(source, filename).tokenize())
