"""
MiniC Abstract Syntax Tree (AST) Definitions
============================================

This module defines the AST node types produced by the MiniC parser and
consumed by the code generator. The set of node kinds is closed: the
generator handles every class defined here and nothing else.

Node Hierarchy
--------------
ASTNode (base)
├── ProgramNode - root node holding the function list
├── FunctionNode - function definition
├── Statements
│   ├── BlockStatement - compound statement { ... }
│   ├── IfStatement - if/else statement
│   ├── WhileStatement - while loop
│   ├── ForStatement - for loop
│   ├── ReturnStatement - return statement
│   ├── ExpressionStatement - expression as statement
│   └── NoOp - stands in for an absent optional clause
└── Expressions
    ├── BinaryExpression - arithmetic and comparison operators
    ├── AssignmentExpression - assignment (=)
    ├── CallExpression - function call
    ├── VariableReference - local variable, resolved to a frame slot
    └── NumberLiteral - integer constant

Design Notes
------------
- All nodes are dataclasses carrying their source location
- Variable references are resolved by the parser: they carry the slot
  offset, the name is kept for diagnostics and AST dumps only
- Greater-than comparisons do not exist here; the parser swaps operands
  and emits LESS / LESS_EQ instead
- Absent optional clauses are NoOp nodes, never None
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from stackcc.errors import SourceLocation


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass
class ASTNode:
    """
    Base class for all AST nodes.

    Attributes:
        location: Source location where this node appears
    """
    location: SourceLocation

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}@{self.location.line}:{self.location.column}"


@dataclass
class Expression(ASTNode):
    """
    Base class for expression nodes.

    Generated code for an expression leaves exactly one value on the
    runtime stack.
    """
    pass


@dataclass
class Statement(ASTNode):
    """
    Base class for statement nodes.

    Generated code for a statement leaves the runtime stack as it found it.
    """
    pass


# =============================================================================
# Local Variable Slots
# =============================================================================

@dataclass(frozen=True)
class LocalVariable:
    """
    A binding from an identifier to a slot in the function's frame.

    Attributes:
        name: Identifier text
        offset: Byte offset of the slot (0, 8, 16, ... in declaration order)
    """
    name: str
    offset: int


# =============================================================================
# Program and Function Nodes
# =============================================================================

@dataclass
class FunctionNode(ASTNode):
    """
    Function definition.

    Attributes:
        name: Function name
        parameters: Parameter slots, in declaration order
        stack_size: Bytes of local storage (8 per distinct variable)
        body: Statements of the function body, in order
    """
    name: str = ""
    parameters: list[LocalVariable] = field(default_factory=list)
    stack_size: int = 0
    body: list[Statement] = field(default_factory=list)


@dataclass
class ProgramNode(ASTNode):
    """
    Root node of the AST.

    Attributes:
        functions: Function definitions in declaration order
    """
    functions: list[FunctionNode] = field(default_factory=list)


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class NoOp(Statement):
    """Placeholder for an absent optional clause; generates no code."""
    pass


@dataclass
class BlockStatement(Statement):
    """
    Block/compound statement enclosed in braces.

    Attributes:
        statements: Statements in the block
    """
    statements: list[Statement] = field(default_factory=list)


@dataclass
class ExpressionStatement(Statement):
    """
    Expression used as a statement (followed by semicolon).

    Attributes:
        expression: The expression whose value is discarded
    """
    expression: Expression = None


@dataclass
class IfStatement(Statement):
    """
    If statement.

    Attributes:
        condition: The condition expression
        then_branch: Statement executed if condition is non-zero
        else_branch: Statement executed otherwise (NoOp when absent)
    """
    condition: Expression = None
    then_branch: Statement = None
    else_branch: Statement = None


@dataclass
class WhileStatement(Statement):
    """
    While loop statement.

    Attributes:
        condition: Loop condition
        body: Loop body statement
    """
    condition: Expression = None
    body: Statement = None


@dataclass
class ForStatement(Statement):
    """
    For loop statement.

    Each clause is an expression or NoOp when left empty. A NoOp
    condition loops forever.

    Attributes:
        initializer: Evaluated once before the loop
        condition: Tested before every iteration
        update: Evaluated after every iteration
        body: Loop body statement
    """
    initializer: ASTNode = None
    condition: ASTNode = None
    update: ASTNode = None
    body: Statement = None


@dataclass
class ReturnStatement(Statement):
    """
    Return statement.

    Attributes:
        value: Return value expression
    """
    value: Expression = None


# =============================================================================
# Expression Nodes
# =============================================================================

class BinaryOperator(Enum):
    """Binary operator types."""
    # Arithmetic
    ADD = auto()        # +
    SUBTRACT = auto()   # -
    MULTIPLY = auto()   # *
    DIVIDE = auto()     # /

    # Comparison (> and >= are rewritten to LESS / LESS_EQ)
    EQUAL = auto()      # ==
    NOT_EQUAL = auto()  # !=
    LESS = auto()       # <
    LESS_EQ = auto()    # <=


@dataclass
class BinaryExpression(Expression):
    """
    Binary operation expression (a op b).

    Attributes:
        operator: The binary operator
        left: Left operand expression
        right: Right operand expression
    """
    operator: BinaryOperator = None
    left: Expression = None
    right: Expression = None


@dataclass
class AssignmentExpression(Expression):
    """
    Assignment expression (target = value).

    The expression's own value is the assigned value.

    Attributes:
        target: The assignment target (must be a VariableReference)
        value: The value to assign
    """
    target: Expression = None
    value: Expression = None


@dataclass
class CallExpression(Expression):
    """
    Function call expression.

    Attributes:
        function_name: Name of the function to call
        arguments: Argument expressions, left to right
    """
    function_name: str = ""
    arguments: list[Expression] = field(default_factory=list)


@dataclass
class VariableReference(Expression):
    """
    Local variable reference, already resolved to its frame slot.

    Attributes:
        name: The variable name
        offset: Byte offset of the variable's slot
    """
    name: str = ""
    offset: int = 0


@dataclass
class NumberLiteral(Expression):
    """
    Integer literal expression.

    Attributes:
        value: The (non-negative) integer value
    """
    value: int = 0


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Dispatches to ``visit_<ClassName>`` methods; unhandled node types fall
    back to generic_visit, which walks all child nodes.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.calls = 0

            def visit_CallExpression(self, node):
                self.calls += 1
                self.generic_visit(node)
    """

    def visit(self, node: ASTNode) -> Any:
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all children of the node."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, list):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)


# =============================================================================
# AST Pretty Printer
# =============================================================================

OPERATOR_SYMBOLS = {
    BinaryOperator.ADD: "+",
    BinaryOperator.SUBTRACT: "-",
    BinaryOperator.MULTIPLY: "*",
    BinaryOperator.DIVIDE: "/",
    BinaryOperator.EQUAL: "==",
    BinaryOperator.NOT_EQUAL: "!=",
    BinaryOperator.LESS: "<",
    BinaryOperator.LESS_EQ: "<=",
}


class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Produces a human-readable representation of the AST structure.

    Usage:
        printer = ASTPrinter()
        print(printer.print(ast))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return as string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def _indent(self) -> None:
        self.indent_level += 1

    def _dedent(self) -> None:
        self.indent_level = max(0, self.indent_level - 1)

    def visit_ProgramNode(self, node: ProgramNode):
        self._emit("Program")
        self._indent()
        for func in node.functions:
            self.visit(func)
        self._dedent()

    def visit_FunctionNode(self, node: FunctionNode):
        params = ", ".join(p.name for p in node.parameters)
        self._emit(f"Function: {node.name}({params}) frame={node.stack_size}")
        self._indent()
        for stmt in node.body:
            self.visit(stmt)
        self._dedent()

    def visit_BlockStatement(self, node: BlockStatement):
        self._emit("Block")
        self._indent()
        for stmt in node.statements:
            self.visit(stmt)
        self._dedent()

    def visit_IfStatement(self, node: IfStatement):
        self._emit(f"If ({self._expr_str(node.condition)})")
        self._indent()
        self._emit("Then:")
        self._indent()
        self.visit(node.then_branch)
        self._dedent()
        if not isinstance(node.else_branch, NoOp):
            self._emit("Else:")
            self._indent()
            self.visit(node.else_branch)
            self._dedent()
        self._dedent()

    def visit_WhileStatement(self, node: WhileStatement):
        self._emit(f"While ({self._expr_str(node.condition)})")
        self._indent()
        self.visit(node.body)
        self._dedent()

    def visit_ForStatement(self, node: ForStatement):
        init = self._expr_str(node.initializer)
        cond = self._expr_str(node.condition)
        update = self._expr_str(node.update)
        self._emit(f"For ({init}; {cond}; {update})")
        self._indent()
        self.visit(node.body)
        self._dedent()

    def visit_ReturnStatement(self, node: ReturnStatement):
        self._emit(f"Return {self._expr_str(node.value)}")

    def visit_ExpressionStatement(self, node: ExpressionStatement):
        self._emit(f"Expr: {self._expr_str(node.expression)}")

    def visit_NoOp(self, node: NoOp):
        self._emit("NoOp")

    def _expr_str(self, expr: ASTNode) -> str:
        """Convert expression to string representation."""
        if expr is None or isinstance(expr, NoOp):
            return ""
        if isinstance(expr, NumberLiteral):
            return str(expr.value)
        if isinstance(expr, VariableReference):
            return f"{expr.name}@{expr.offset}"
        if isinstance(expr, BinaryExpression):
            op_str = OPERATOR_SYMBOLS.get(expr.operator, "?")
            return f"({self._expr_str(expr.left)} {op_str} {self._expr_str(expr.right)})"
        if isinstance(expr, AssignmentExpression):
            return f"({self._expr_str(expr.target)} = {self._expr_str(expr.value)})"
        if isinstance(expr, CallExpression):
            args = ", ".join(self._expr_str(a) for a in expr.arguments)
            return f"{expr.function_name}({args})"
        return f"<{type(expr).__name__}>"
