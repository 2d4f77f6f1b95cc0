"""
MiniC Recursive Descent Parser
==============================

This module implements a recursive descent parser for MiniC. It consumes
the token list from the lexer and builds the function list of the AST,
resolving every identifier to a slot in its function's frame on the way.

Grammar (EBNF)
--------------
program    ::= function*
function   ::= IDENT '(' params? ')' '{' stmt* '}'
params     ::= IDENT (',' IDENT)*
stmt       ::= expr ';'
             | '{' stmt* '}'
             | 'if' '(' expr ')' stmt ('else' stmt)?
             | 'while' '(' expr ')' stmt
             | 'for' '(' expr? ';' expr? ';' expr? ')' stmt
             | 'return' expr ';'
expr       ::= assign
assign     ::= equality ('=' assign)?
equality   ::= relational (('==' | '!=') relational)*
relational ::= add (('<' | '<=' | '>' | '>=') add)*
add        ::= mul (('+' | '-') mul)*
mul        ::= unary (('*' | '/') unary)*
unary      ::= ('+' | '-')? primary
primary    ::= NUMBER | IDENT ('(' args? ')')? | '(' expr ')'
args       ::= expr (',' expr)*

Desugaring
----------
- ``a > b``  becomes ``b < a``;  ``a >= b`` becomes ``b <= a``
- ``-x``     becomes ``0 - x``;  ``+x`` is just ``x``
- empty ``for`` clauses and a missing ``else`` become NoOp nodes

Variable Resolution
-------------------
Every function has its own slot list. The first appearance of a name
(as a parameter or outside call position) allocates the next slot, 8 bytes
past the most recent one; later appearances reuse it. A name directly
followed by '(' is always a call. The frame size of a function is
8 bytes times its number of distinct variables.

Errors are not recovered from: the first mismatch raises.

Example Usage
-------------
>>> from stackcc.minic.parser import parse_source
>>> program = parse_source('a() { x = 3; y = 5; return x + y * 2; }')
>>> program.functions[0].stack_size
16
"""

import logging
from collections import deque
from typing import Callable, Optional

from stackcc.errors import SourceLocation
from stackcc.minic.lexer import CLexer, CToken, CTokenType
from stackcc.minic.ast import (
    ProgramNode,
    FunctionNode,
    LocalVariable,
    Statement,
    BlockStatement,
    ExpressionStatement,
    IfStatement,
    WhileStatement,
    ForStatement,
    ReturnStatement,
    NoOp,
    Expression,
    BinaryExpression,
    BinaryOperator,
    AssignmentExpression,
    CallExpression,
    VariableReference,
    NumberLiteral,
)
from stackcc.minic.errors import (
    UnexpectedTokenError,
    MissingTokenError,
    TooManyArgumentsError,
)

logger = logging.getLogger(__name__)

# Number of integer argument registers in the calling convention
MAX_ARGUMENTS = 6

SLOT_SIZE = 8


class LocalScope:
    """
    The slot list of one function.

    Behaves as a stack of declarations: the front is the most recently
    declared variable. Offsets are never reused or freed.
    """

    def __init__(self):
        self._slots: deque[LocalVariable] = deque()

    def __len__(self) -> int:
        return len(self._slots)

    def find(self, name: str) -> Optional[LocalVariable]:
        """Return the slot bound to ``name``, or None."""
        for slot in self._slots:
            if slot.name == name:
                return slot
        return None

    def resolve(self, name: str) -> LocalVariable:
        """Return the slot for ``name``, allocating one on first use."""
        slot = self.find(name)
        if slot is not None:
            return slot

        offset = self._slots[0].offset + SLOT_SIZE if self._slots else 0
        slot = LocalVariable(name=name, offset=offset)
        self._slots.appendleft(slot)
        return slot

    @property
    def stack_size(self) -> int:
        return SLOT_SIZE * len(self._slots)


class CParser:
    """
    Recursive descent parser for MiniC.

    Tokens are consumed destructively from the front of the sequence;
    once consumed a token is never looked at again.

    Attributes:
        tokens: Remaining tokens to parse
        filename: Source filename for error reporting
    """

    def __init__(
        self,
        tokens: list[CToken],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer (EOF last)
            filename: Source filename for error messages
            source_lines: Original source lines for error context
        """
        self.tokens: deque[CToken] = deque(tokens)
        self.filename = filename
        self.source_lines = source_lines or []

        # Slot list of the function currently being parsed
        self._scope = LocalScope()

    def parse(self) -> ProgramNode:
        """
        Parse the token stream into an AST.

        Returns:
            ProgramNode holding every function in declaration order

        Raises:
            CSyntaxError: On the first syntax error
        """
        functions = []
        while not self._at_end():
            functions.append(self._parse_function())

        logger.debug("%s: parsed %d functions", self.filename, len(functions))
        return ProgramNode(
            location=SourceLocation(self.filename, 1, 1),
            functions=functions,
        )

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().type == CTokenType.EOF

    def _peek(self) -> CToken:
        """Look at the front token; the EOF token is never consumed."""
        return self.tokens[0]

    def _advance(self) -> CToken:
        """Consume and return the front token."""
        if self._at_end():
            return self.tokens[0]
        return self.tokens.popleft()

    def _check(self, text: str) -> bool:
        """Check if the front token is the reserved operator ``text``."""
        return self._peek().is_reserved(text)

    def _match(self, text: str) -> bool:
        """Consume the front token if it is the reserved operator ``text``."""
        if self._check(text):
            self._advance()
            return True
        return False

    def _match_type(self, token_type: CTokenType) -> Optional[CToken]:
        """Consume and return the front token if it has ``token_type``."""
        if self._peek().type == token_type:
            return self._advance()
        return None

    def _expect(self, text: str) -> CToken:
        """
        Expect and consume a specific reserved token.

        Raises:
            MissingTokenError: If the front token is anything else
        """
        if self._check(text):
            return self._advance()

        current = self._peek()
        raise MissingTokenError(
            f"'{text}'",
            current.location,
            self._get_source_line(current.line),
        )

    def _expect_number(self) -> CToken:
        token = self._match_type(CTokenType.NUMBER)
        if token is not None:
            return token

        current = self._peek()
        raise UnexpectedTokenError(
            current.text or "end of input",
            expected="a number",
            location=current.location,
            source_line=self._get_source_line(current.line),
        )

    def _get_source_line(self, line: int) -> Optional[str]:
        if 0 < line <= len(self.source_lines):
            return self.source_lines[line - 1]
        return None

    # =========================================================================
    # Function Parsing
    # =========================================================================

    def _parse_function(self) -> FunctionNode:
        """Parse ``IDENT '(' params? ')' '{' stmt* '}'``."""
        name_token = self._match_type(CTokenType.IDENTIFIER)
        if name_token is None:
            current = self._peek()
            raise UnexpectedTokenError(
                current.text,
                expected="a function name",
                location=current.location,
                source_line=self._get_source_line(current.line),
            )

        self._scope = LocalScope()

        self._expect("(")
        parameters = self._parse_parameter_list(name_token)
        self._expect(")")

        self._expect("{")
        body = []
        while not self._match("}"):
            body.append(self._parse_statement())

        func = FunctionNode(
            location=name_token.location,
            name=name_token.text,
            parameters=parameters,
            stack_size=self._scope.stack_size,
            body=body,
        )
        logger.debug(
            "function %s: %d parameters, %d locals, frame %d bytes",
            func.name, len(parameters), len(self._scope), func.stack_size,
        )
        return func

    def _parse_parameter_list(self, name_token: CToken) -> list[LocalVariable]:
        parameters = []
        if self._check(")"):
            return parameters

        while True:
            token = self._match_type(CTokenType.IDENTIFIER)
            if token is None:
                current = self._peek()
                raise UnexpectedTokenError(
                    current.text or "end of input",
                    expected="a parameter name",
                    location=current.location,
                    source_line=self._get_source_line(current.line),
                )
            parameters.append(self._scope.resolve(token.text))
            if not self._match(","):
                break

        if len(parameters) > MAX_ARGUMENTS:
            raise TooManyArgumentsError(
                name_token.text,
                len(parameters),
                MAX_ARGUMENTS,
                name_token.location,
                self._get_source_line(name_token.line),
            )
        return parameters

    # =========================================================================
    # Statement Parsing
    # =========================================================================

    def _parse_statement(self) -> Statement:
        token = self._peek()

        if token.type == CTokenType.RETURN:
            return self._parse_return_statement()
        if token.type == CTokenType.IF:
            return self._parse_if_statement()
        if token.type == CTokenType.WHILE:
            return self._parse_while_statement()
        if token.type == CTokenType.FOR:
            return self._parse_for_statement()
        if token.is_reserved("{"):
            return self._parse_block()

        return self._parse_expression_statement()

    def _parse_block(self) -> BlockStatement:
        location = self._expect("{").location
        statements = []
        while not self._match("}"):
            statements.append(self._parse_statement())
        return BlockStatement(location=location, statements=statements)

    def _parse_return_statement(self) -> ReturnStatement:
        location = self._advance().location
        value = self._parse_expression()
        self._expect(";")
        return ReturnStatement(location=location, value=value)

    def _parse_if_statement(self) -> IfStatement:
        location = self._advance().location
        self._expect("(")
        condition = self._parse_expression()
        self._expect(")")

        then_branch = self._parse_statement()

        if self._match_type(CTokenType.ELSE):
            else_branch = self._parse_statement()
        else:
            else_branch = NoOp(location=self._peek().location)

        return IfStatement(
            location=location,
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch,
        )

    def _parse_while_statement(self) -> WhileStatement:
        location = self._advance().location
        self._expect("(")
        condition = self._parse_expression()
        self._expect(")")

        body = self._parse_statement()

        return WhileStatement(location=location, condition=condition, body=body)

    def _parse_for_statement(self) -> ForStatement:
        location = self._advance().location
        self._expect("(")
        initializer = self._parse_for_clause(";")
        condition = self._parse_for_clause(";")
        update = self._parse_for_clause(")")

        body = self._parse_statement()

        return ForStatement(
            location=location,
            initializer=initializer,
            condition=condition,
            update=update,
            body=body,
        )

    def _parse_for_clause(self, terminator: str):
        """Parse an optional ``for`` clause up to and including ``terminator``."""
        location = self._peek().location
        if self._match(terminator):
            return NoOp(location=location)

        clause = self._parse_expression()
        self._expect(terminator)
        return clause

    def _parse_expression_statement(self) -> ExpressionStatement:
        location = self._peek().location
        expression = self._parse_expression()
        self._expect(";")
        return ExpressionStatement(location=location, expression=expression)

    # =========================================================================
    # Expression Parsing (Operator Precedence)
    # =========================================================================

    def _parse_expression(self) -> Expression:
        return self._parse_assignment()

    def _parse_assignment(self) -> Expression:
        """Parse assignment expression (right-associative)."""
        expr = self._parse_equality()

        if self._match("="):
            value = self._parse_assignment()
            return AssignmentExpression(location=expr.location, target=expr, value=value)

        return expr

    def _parse_equality(self) -> Expression:
        return self._parse_binary(
            self._parse_relational,
            {
                "==": BinaryOperator.EQUAL,
                "!=": BinaryOperator.NOT_EQUAL,
            },
        )

    def _parse_relational(self) -> Expression:
        """Parse ``< <= > >=``, swapping operands for the greater-than forms."""
        expr = self._parse_additive()

        while True:
            if self._match("<"):
                expr = self._make_binary(BinaryOperator.LESS, expr, self._parse_additive())
            elif self._match("<="):
                expr = self._make_binary(BinaryOperator.LESS_EQ, expr, self._parse_additive())
            elif self._match(">"):
                expr = self._make_binary(BinaryOperator.LESS, self._parse_additive(), expr)
            elif self._match(">="):
                expr = self._make_binary(BinaryOperator.LESS_EQ, self._parse_additive(), expr)
            else:
                return expr

    def _parse_additive(self) -> Expression:
        return self._parse_binary(
            self._parse_multiplicative,
            {
                "+": BinaryOperator.ADD,
                "-": BinaryOperator.SUBTRACT,
            },
        )

    def _parse_multiplicative(self) -> Expression:
        return self._parse_binary(
            self._parse_unary,
            {
                "*": BinaryOperator.MULTIPLY,
                "/": BinaryOperator.DIVIDE,
            },
        )

    def _parse_binary(
        self,
        operand_parser: Callable[[], Expression],
        operators: dict[str, BinaryOperator],
    ) -> Expression:
        """
        Generic left-associative binary expression parser.

        Args:
            operand_parser: Function to parse operands
            operators: Map of operator text to binary operators
        """
        expr = operand_parser()

        while self._peek().type == CTokenType.RESERVED and self._peek().text in operators:
            op_token = self._advance()
            right = operand_parser()
            expr = self._make_binary(operators[op_token.text], expr, right)

        return expr

    def _make_binary(
        self, operator: BinaryOperator, left: Expression, right: Expression
    ) -> BinaryExpression:
        return BinaryExpression(
            location=left.location,
            operator=operator,
            left=left,
            right=right,
        )

    def _parse_unary(self) -> Expression:
        """Parse ``('+' | '-')? primary``."""
        token = self._peek()

        if self._match("+"):
            return self._parse_primary()
        if self._match("-"):
            zero = NumberLiteral(location=token.location, value=0)
            return BinaryExpression(
                location=token.location,
                operator=BinaryOperator.SUBTRACT,
                left=zero,
                right=self._parse_primary(),
            )

        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        """Parse primary expression (numbers, variables, calls, parentheses)."""
        if self._match("("):
            expr = self._parse_expression()
            self._expect(")")
            return expr

        ident = self._match_type(CTokenType.IDENTIFIER)
        if ident is not None:
            if self._match("("):
                return self._parse_call(ident)
            slot = self._scope.resolve(ident.text)
            return VariableReference(location=ident.location, name=slot.name, offset=slot.offset)

        token = self._expect_number()
        return NumberLiteral(location=token.location, value=token.value)

    def _parse_call(self, callee: CToken) -> CallExpression:
        """Parse call arguments; the callee name and '(' are already consumed."""
        arguments = []
        if not self._check(")"):
            while True:
                arguments.append(self._parse_expression())
                if not self._match(","):
                    break
        self._expect(")")

        if len(arguments) > MAX_ARGUMENTS:
            raise TooManyArgumentsError(
                callee.text,
                len(arguments),
                MAX_ARGUMENTS,
                callee.location,
                self._get_source_line(callee.line),
            )

        return CallExpression(
            location=callee.location,
            function_name=callee.text,
            arguments=arguments,
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str, filename: str = "<input>") -> ProgramNode:
    """
    Parse MiniC source code into an AST.

    This is a convenience function that combines lexing and parsing.

    Raises:
        CSyntaxError: If scanning or parsing fails
    """
    tokens = list(CLexer(source, filename).tokenize())
    parser = CParser(tokens, filename, source.splitlines())
    return parser.parse()
