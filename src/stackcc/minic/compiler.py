"""
MiniC Compiler Main Module
==========================

This module provides the main compiler interface for MiniC.
It orchestrates the complete compilation process:

    Source → Lex → Parse → Generate → Assembly

Usage
-----
Command line:
    $ stcc 'main() { return 42; }' > out.s
    $ cc -o out out.s

Programmatic:
    >>> from stackcc.minic import compile_source
    >>> asm = compile_source('main() { return 42; }').assembly

Compilation Pipeline
--------------------
1. **Lexical Analysis**: Convert source to tokens
2. **Parsing**: Build the function list, resolving variables to slots
3. **Code Generation**: Convert the AST to x86-64 assembly

Error Handling
--------------
Compilation stops at the first error, which propagates to the caller as
a MiniCError subclass. No partial assembly is ever returned.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from stackcc.minic.lexer import CLexer, CToken
from stackcc.minic.parser import CParser
from stackcc.minic.codegen import CodeGenerator
from stackcc.minic.ast import ProgramNode

logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        emit_comments: Annotate the generated assembly with '#' comments
    """
    emit_comments: bool = False


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        assembly: Generated assembly code
        ast: Abstract syntax tree
        token_count: Number of tokens lexed, EOF included
    """
    filename: str = ""
    success: bool = False
    assembly: str = ""
    ast: Optional[ProgramNode] = None
    token_count: int = 0


class Compiler:
    """
    MiniC compiler targeting x86-64.

    Example:
        compiler = Compiler()
        result = compiler.compile_file("prog.c")
        print(result.assembly)

    Attributes:
        options: Compiler configuration options
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: str = "<input>") -> CompilerResult:
        """
        Compile MiniC source code to assembly.

        Args:
            source: MiniC source code string
            filename: Source filename for error messages

        Returns:
            CompilerResult containing assembly output

        Raises:
            MiniCError: If compilation fails
        """
        result = CompilerResult(filename=filename)

        # Stage 1: Lexical analysis
        tokens = self._lex(source, filename)
        result.token_count = len(tokens)

        # Stage 2: Parsing
        result.ast = self._parse(tokens, filename, source.splitlines())

        # Stage 3: Code generation
        result.assembly = self._generate(result.ast)
        result.success = True

        logger.debug(
            "%s: compiled %d functions from %d tokens",
            filename, len(result.ast.functions), result.token_count,
        )
        return result

    def compile_file(self, filepath: str) -> CompilerResult:
        """
        Compile a MiniC source file to assembly.

        Raises:
            MiniCError: If compilation fails
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))

    def _lex(self, source: str, filename: str) -> list[CToken]:
        """Tokenize source."""
        lexer = CLexer(source, filename)
        return list(lexer.tokenize())

    def _parse(self, tokens: list[CToken], filename: str, source_lines: list[str]) -> ProgramNode:
        """Parse tokens into AST."""
        parser = CParser(tokens, filename, source_lines)
        return parser.parse()

    def _generate(self, ast: ProgramNode) -> str:
        """Generate assembly from AST."""
        generator = CodeGenerator(emit_comments=self.options.emit_comments)
        return generator.generate(ast)


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_source(
    source: str,
    filename: str = "<input>",
    options: Optional[CompilerOptions] = None,
) -> CompilerResult:
    """
    Compile MiniC source code with a fresh compiler.

    Example:
        >>> result = compile_source('main() { return 7; }')
        >>> result.assembly.splitlines()[0]
        '.intel_syntax noprefix'
    """
    return Compiler(options).compile_source(source, filename)


def compile_file(
    filepath: str,
    options: Optional[CompilerOptions] = None,
) -> CompilerResult:
    """Compile a MiniC source file with a fresh compiler."""
    return Compiler(options).compile_file(filepath)
