"""
stackcc Command-Line Interface
==============================

This package provides the command-line tool for stackcc:

- **stcc**: MiniC to x86-64 compiler

The tool is implemented as a Click-based CLI application with
help text and uniform error reporting.
"""

__all__ = ["stcc"]
