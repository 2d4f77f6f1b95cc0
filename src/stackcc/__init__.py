"""
stackcc - A Tiny Stack-Machine C Compiler for x86-64
====================================================

This package compiles MiniC, a minimal C-like language, to x86-64
assembly that the system C compiler can assemble and link.

Main Components
---------------
- **minic**: the compiler proper (lexer, parser, code generator)
- **cli**: the ``stcc`` command-line tool

Quick Start
-----------
    >>> from stackcc.minic import compile_source
    >>> asm = compile_source('main() { return 42; }').assembly

Or use the command-line tool:
    $ stcc 'main() { return 42; }' > ret.s
    $ cc -o ret ret.s && ./ret; echo $?
    42

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"

from stackcc.errors import StackCCError, SourceLocation

__all__ = [
    "__version__",
    "StackCCError",
    "SourceLocation",
]
