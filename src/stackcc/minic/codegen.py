"""
x86-64 Code Generator for MiniC
===============================

This module generates x86-64 assembly (GNU as, Intel syntax) from the
MiniC AST. The output can be fed directly to ``cc`` or ``as`` and linked
against any System V caller.

Code Generation Strategy
------------------------
The generator uses a pure stack machine model:

1. Every expression leaves exactly one 8-byte value pushed on the stack
2. Binary operations evaluate left, then right, pop the right operand into
   RDI and the left into RAX, compute into RAX and push it
3. Statements leave the stack as they found it; expression statements
   pop and discard their value
4. Local variables live in fixed slots addressed from RBP

Register Usage
--------------
| Register    | Usage                                       |
|-------------|---------------------------------------------|
| RAX         | Expression results, return value            |
| RDI         | Right operand of binary operations          |
| RDI..R9     | First six integer arguments (System V)      |
| RBP         | Frame pointer                               |
| RSP         | Stack pointer / evaluation stack            |

Stack Frame Layout
------------------
    +-----------------+ <- RSP at entry + 8
    | Return address  |  (pushed by CALL)
    +-----------------+
    | Saved RBP       |
    +-----------------+ <- RBP
    | slot offset 0   |  [rbp - 8]
    | slot offset 8   |  [rbp - 16]
    | ...             |
    +-----------------+ <- RBP - stack_size
    | Temp values     |  (expression evaluation)
    +-----------------+

Call Alignment
--------------
The evaluation stack means RSP is only 8-byte aligned at a call site, while
the ABI requires 16-byte alignment. Every call tests RSP at runtime and
pads by 8 bytes when needed:

        mov     rax, rsp
        and     rax, 15
        jnz     .L.call.N
        mov     rax, 0
        call    f
        jmp     .L.join.N
    .L.call.N:
        sub     rsp, 8
        mov     rax, 0
        call    f
        add     rsp, 8
    .L.join.N:
        push    rax

RAX is zeroed before the call so variadic callees see no vector arguments.

Usage
-----
>>> from stackcc.minic.parser import parse_source
>>> from stackcc.minic.codegen import CodeGenerator
>>> ast = parse_source('main() { return 42; }')
>>> gen = CodeGenerator()
>>> asm = gen.generate(ast)
>>> print(asm)
"""

import logging

from stackcc.minic.ast import (
    ProgramNode,
    FunctionNode,
    Statement,
    NoOp,
    BlockStatement,
    ExpressionStatement,
    IfStatement,
    WhileStatement,
    ForStatement,
    ReturnStatement,
    Expression,
    BinaryExpression,
    BinaryOperator,
    AssignmentExpression,
    CallExpression,
    VariableReference,
    NumberLiteral,
)
from stackcc.minic.errors import CCodeGenError, InvalidLValueError

logger = logging.getLogger(__name__)


# System V integer argument registers, in argument order
ARGUMENT_REGISTERS = ("rdi", "rsi", "rdx", "rcx", "r8", "r9")

# setcc instruction for each comparison operator
COMPARISON_SET = {
    BinaryOperator.EQUAL: "sete",
    BinaryOperator.NOT_EQUAL: "setne",
    BinaryOperator.LESS: "setl",
    BinaryOperator.LESS_EQ: "setle",
}

# Range of a sign-extended 32-bit immediate, the widest `push` accepts
IMM32_MIN = -(2**31)
IMM32_MAX = 2**31 - 1


def slot_address(offset: int) -> int:
    """Distance below RBP of the slot with the given offset."""
    return offset + 8


class CodeGenerator:
    """
    Generates x86-64 assembly from a MiniC AST.

    A single instance may be reused; every call to generate() starts
    from a clean output buffer and label counter.
    """

    def __init__(self, emit_comments: bool = False):
        """
        Initialize the code generator.

        Args:
            emit_comments: Annotate routines and control constructs with
                           '#' comment lines.
        """
        self._emit_comments = emit_comments

        # Assembly output lines
        self._output: list[str] = []

        # Label generation, shared by every function of a compilation
        self._label_counter: int = 0

        # Function whose body is being generated (for return jumps)
        self._current_function: str = ""

    def generate(self, program: ProgramNode) -> str:
        """
        Generate assembly code from AST.

        Args:
            program: The root AST node

        Returns:
            Complete assembly source, newline-terminated
        """
        self._output = []
        self._label_counter = 0
        self._current_function = ""

        self._check_duplicate_functions(program)

        self._emit(".intel_syntax noprefix")

        for func in program.functions:
            self._generate_function(func)

        logger.debug(
            "generated %d functions, %d labels, %d lines",
            len(program.functions), self._label_counter, len(self._output),
        )
        return "\n".join(self._output) + "\n"

    def _check_duplicate_functions(self, program: ProgramNode) -> None:
        seen: dict[str, FunctionNode] = {}
        for func in program.functions:
            first = seen.get(func.name)
            if first is not None:
                logger.warning(
                    "%s: function '%s' already defined at %s; both are emitted",
                    func.location, func.name, first.location,
                )
            else:
                seen[func.name] = func

    # =========================================================================
    # Assembly Output Methods
    # =========================================================================

    def _emit(self, line: str = "") -> None:
        """Emit a line of assembly."""
        self._output.append(line)

    def _emit_comment(self, comment: str) -> None:
        """Emit a comment, only when comments are enabled."""
        if self._emit_comments:
            self._emit(f"    # {comment}")

    def _emit_label(self, label: str) -> None:
        """Emit a label definition."""
        self._emit(f"{label}:")

    def _emit_instruction(self, mnemonic: str, operand: str = "") -> None:
        """Emit an instruction with optional operand."""
        if operand:
            self._emit(f"        {mnemonic:<8}{operand}")
        else:
            self._emit(f"        {mnemonic}")

    def _next_label_id(self) -> int:
        """Reserve a fresh label number."""
        self._label_counter += 1
        return self._label_counter

    def _push(self, operand: str) -> None:
        self._emit_instruction("push", operand)

    def _pop(self, register: str) -> None:
        self._emit_instruction("pop", register)

    # =========================================================================
    # Functions
    # =========================================================================

    def _generate_function(self, func: FunctionNode) -> None:
        """Generate the routine for one function definition."""
        self._current_function = func.name

        self._emit_comment(f"function {func.name}: {len(func.parameters)} parameters, "
                           f"{func.stack_size} bytes of locals")
        self._emit(f".globl {func.name}")
        self._emit_label(func.name)

        # Prologue
        self._push("rbp")
        self._emit_instruction("mov", "rbp, rsp")
        self._emit_instruction("sub", f"rsp, {func.stack_size}")

        # Spill register arguments into their slots
        for param, register in zip(func.parameters, ARGUMENT_REGISTERS):
            self._emit_instruction("mov", f"[rbp-{slot_address(param.offset)}], {register}")

        for stmt in func.body:
            self._generate_statement(stmt)

        # Epilogue
        self._emit_label(self._return_label(func.name))
        self._emit_instruction("mov", "rsp, rbp")
        self._pop("rbp")
        self._emit_instruction("ret")

        self._current_function = ""

    @staticmethod
    def _return_label(name: str) -> str:
        return f".L.return.{name}"

    # =========================================================================
    # Statements
    # =========================================================================

    def _generate_statement(self, stmt: Statement) -> None:
        """
        Generate code for a statement.

        The runtime stack depth is the same before and after.
        """
        if isinstance(stmt, NoOp):
            return
        elif isinstance(stmt, BlockStatement):
            for inner in stmt.statements:
                self._generate_statement(inner)
        elif isinstance(stmt, ExpressionStatement):
            self._generate_expression(stmt.expression)
            self._pop("rax")
        elif isinstance(stmt, IfStatement):
            self._generate_if(stmt)
        elif isinstance(stmt, WhileStatement):
            self._generate_while(stmt)
        elif isinstance(stmt, ForStatement):
            self._generate_for(stmt)
        elif isinstance(stmt, ReturnStatement):
            self._generate_expression(stmt.value)
            self._pop("rax")
            self._emit_instruction("jmp", self._return_label(self._current_function))
        else:
            raise CCodeGenError(
                f"cannot generate code for {type(stmt).__name__}",
                stmt.location,
            )

    def _generate_if(self, stmt: IfStatement) -> None:
        label_id = self._next_label_id()
        else_label = f".L.else.{label_id}"
        end_label = f".L.end.{label_id}"

        self._emit_comment(f"if #{label_id}")
        self._generate_condition(stmt.condition, else_label)
        self._generate_statement(stmt.then_branch)
        self._emit_instruction("jmp", end_label)
        self._emit_label(else_label)
        self._generate_statement(stmt.else_branch)
        self._emit_label(end_label)

    def _generate_while(self, stmt: WhileStatement) -> None:
        label_id = self._next_label_id()
        begin_label = f".L.begin.{label_id}"
        end_label = f".L.end.{label_id}"

        self._emit_comment(f"while #{label_id}")
        self._emit_label(begin_label)
        self._generate_condition(stmt.condition, end_label)
        self._generate_statement(stmt.body)
        self._emit_instruction("jmp", begin_label)
        self._emit_label(end_label)

    def _generate_for(self, stmt: ForStatement) -> None:
        label_id = self._next_label_id()
        begin_label = f".L.begin.{label_id}"
        end_label = f".L.end.{label_id}"

        self._emit_comment(f"for #{label_id}")
        self._generate_clause(stmt.initializer)
        self._emit_label(begin_label)
        if not isinstance(stmt.condition, NoOp):
            self._generate_condition(stmt.condition, end_label)
        self._generate_statement(stmt.body)
        self._generate_clause(stmt.update)
        self._emit_instruction("jmp", begin_label)
        self._emit_label(end_label)

    def _generate_clause(self, clause) -> None:
        """A for-loop initializer or update: an expression whose value is dropped."""
        if isinstance(clause, NoOp):
            return
        self._generate_expression(clause)
        self._pop("rax")

    def _generate_condition(self, condition: Expression, false_label: str) -> None:
        """Evaluate ``condition`` and jump to ``false_label`` when it is zero."""
        self._generate_expression(condition)
        self._pop("rax")
        self._emit_instruction("cmp", "rax, 0")
        self._emit_instruction("je", false_label)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _generate_expression(self, expr: Expression) -> None:
        """
        Generate code for an expression.

        Exactly one value is pushed on the runtime stack.
        """
        if isinstance(expr, NumberLiteral):
            self._generate_number(expr.value)
        elif isinstance(expr, VariableReference):
            self._generate_address(expr)
            self._pop("rax")
            self._emit_instruction("mov", "rax, [rax]")
            self._push("rax")
        elif isinstance(expr, AssignmentExpression):
            self._generate_assignment(expr)
        elif isinstance(expr, CallExpression):
            self._generate_call(expr)
        elif isinstance(expr, BinaryExpression):
            self._generate_binary(expr)
        else:
            raise CCodeGenError(
                f"cannot generate code for {type(expr).__name__}",
                expr.location,
            )

    def _generate_number(self, value: int) -> None:
        if IMM32_MIN <= value <= IMM32_MAX:
            self._push(str(value))
        else:
            self._emit_instruction("mov", f"rax, {value}")
            self._push("rax")

    def _generate_address(self, expr: Expression) -> None:
        """Push the address of an lvalue (no dereference)."""
        if not isinstance(expr, VariableReference):
            raise InvalidLValueError(expr.location)

        self._emit_instruction("mov", "rax, rbp")
        self._emit_instruction("sub", f"rax, {slot_address(expr.offset)}")
        self._push("rax")

    def _generate_assignment(self, expr: AssignmentExpression) -> None:
        self._generate_address(expr.target)
        self._generate_expression(expr.value)

        self._pop("rdi")
        self._pop("rax")
        self._emit_instruction("mov", "[rax], rdi")
        self._push("rdi")

    def _generate_binary(self, expr: BinaryExpression) -> None:
        self._generate_expression(expr.left)
        self._generate_expression(expr.right)

        self._pop("rdi")
        self._pop("rax")

        op = expr.operator
        if op == BinaryOperator.ADD:
            self._emit_instruction("add", "rax, rdi")
        elif op == BinaryOperator.SUBTRACT:
            self._emit_instruction("sub", "rax, rdi")
        elif op == BinaryOperator.MULTIPLY:
            self._emit_instruction("imul", "rax, rdi")
        elif op == BinaryOperator.DIVIDE:
            self._emit_instruction("cqo")
            self._emit_instruction("idiv", "rdi")
        elif op in COMPARISON_SET:
            self._emit_instruction("cmp", "rax, rdi")
            self._emit_instruction(COMPARISON_SET[op], "al")
            self._emit_instruction("movzx", "rax, al")
        else:
            raise CCodeGenError(f"unknown binary operator {op}", expr.location)

        self._push("rax")

    def _generate_call(self, expr: CallExpression) -> None:
        """Evaluate arguments, load the argument registers and call with RSP aligned."""
        if len(expr.arguments) > len(ARGUMENT_REGISTERS):
            raise CCodeGenError(
                f"call to '{expr.function_name}' passes {len(expr.arguments)} arguments",
                expr.location,
            )

        for arg in expr.arguments:
            self._generate_expression(arg)
        for register in reversed(ARGUMENT_REGISTERS[:len(expr.arguments)]):
            self._pop(register)

        label_id = self._next_label_id()
        misaligned_label = f".L.call.{label_id}"
        join_label = f".L.join.{label_id}"

        self._emit_comment(f"call {expr.function_name} #{label_id}")
        self._emit_instruction("mov", "rax, rsp")
        self._emit_instruction("and", "rax, 15")
        self._emit_instruction("jnz", misaligned_label)
        self._emit_instruction("mov", "rax, 0")
        self._emit_instruction("call", expr.function_name)
        self._emit_instruction("jmp", join_label)
        self._emit_label(misaligned_label)
        self._emit_instruction("sub", "rsp, 8")
        self._emit_instruction("mov", "rax, 0")
        self._emit_instruction("call", expr.function_name)
        self._emit_instruction("add", "rsp, 8")
        self._emit_label(join_label)
        self._push("rax")


def generate_assembly(program: ProgramNode, emit_comments: bool = False) -> str:
    """Generate assembly for ``program`` with a fresh CodeGenerator."""
    return CodeGenerator(emit_comments=emit_comments).generate(program)
