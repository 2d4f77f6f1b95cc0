"""
MiniC Compiler
==============

This module implements a compiler for MiniC, a tiny C-like language of
untyped 64-bit integers, targeting x86-64 assembly (GNU as, Intel syntax).

This implementation provides:

- A lexer (tokenizer) for MiniC source code
- A recursive descent parser producing an AST with resolved variable slots
- A stack-machine code generator emitting x86-64 assembly

Pipeline
--------
    Source → Lexer → Parser → AST → Code Generator → Assembly

The generated assembly can be assembled and linked with the system C
compiler, e.g. ``cc -o prog prog.s``.

Usage
-----
>>> from stackcc.minic import compile_source
>>> result = compile_source('main() { return 42; }')
>>> print(result.assembly)

Language Subset
---------------
- Values: 64-bit signed integers only, no declarations
- Operators: + - * / == != < <= > >= = and unary + -
- Control flow: if/else, while, for, return, { } blocks
- Functions: definitions and calls with up to six arguments

Memory Model
------------
- Every variable is an 8-byte slot in its function's frame
- First use of a name declares it; scope is the whole function
- Return values in RAX, arguments in RDI RSI RDX RCX R8 R9
"""

# =============================================================================
# Public API Imports
# =============================================================================

from stackcc.minic.compiler import (
    Compiler,
    CompilerOptions,
    CompilerResult,
    compile_source,
    compile_file,
)
from stackcc.minic.errors import (
    MiniCError,
    CSyntaxError,
    InvalidCharacterError,
    UnexpectedTokenError,
    MissingTokenError,
    TooManyArgumentsError,
    CCodeGenError,
    InvalidLValueError,
)
from stackcc.minic.lexer import CLexer, CTokenType, CToken, tokenize
from stackcc.minic.parser import CParser, parse_source
from stackcc.minic.codegen import CodeGenerator
from stackcc.minic.ast import (
    ASTNode,
    ASTPrinter,
    ProgramNode,
    FunctionNode,
    LocalVariable,
    NoOp,
    BlockStatement,
    ExpressionStatement,
    IfStatement,
    WhileStatement,
    ForStatement,
    ReturnStatement,
    BinaryExpression,
    BinaryOperator,
    AssignmentExpression,
    CallExpression,
    VariableReference,
    NumberLiteral,
)

__all__ = [
    # Main API
    "Compiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_source",
    "compile_file",
    # Errors
    "MiniCError",
    "CSyntaxError",
    "InvalidCharacterError",
    "UnexpectedTokenError",
    "MissingTokenError",
    "TooManyArgumentsError",
    "CCodeGenError",
    "InvalidLValueError",
    # Lexer
    "CLexer",
    "CTokenType",
    "CToken",
    "tokenize",
    # Parser
    "CParser",
    "parse_source",
    # Code Generator
    "CodeGenerator",
    # AST Nodes
    "ASTNode",
    "ASTPrinter",
    "ProgramNode",
    "FunctionNode",
    "LocalVariable",
    "NoOp",
    "BlockStatement",
    "ExpressionStatement",
    "IfStatement",
    "WhileStatement",
    "ForStatement",
    "ReturnStatement",
    "BinaryExpression",
    "BinaryOperator",
    "AssignmentExpression",
    "CallExpression",
    "VariableReference",
    "NumberLiteral",
]
