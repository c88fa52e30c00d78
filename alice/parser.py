"""Recursive-descent parser for the Alice language.

The parser consumes the scanner's complete token list and produces the
program as a list of statements. Expressions are parsed with one method
per precedence level, lowest first:

    assignment -> or -> and -> equality -> comparison -> term -> factor
    -> unary -> call -> primary

Every binary level loops, so its operators associate to the left;
assignment recurses into itself and is right-associative. Parsing stops
at the first error, which is raised as a ParseError on the line of the
token where the parser got stuck.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple, Union

from .ast import (
    Expr, Stmt, Grouping, Variable, Assign, Unary, Binary, Logical, Call,
    ArrayLiteral, RangeLiteral, Literal, Println, Return, Let, Block,
    Function, If, ForEach, Expression,
)
from .errors import parse_error
from .scanner import tokenize
from .tokens import Token, TokenType

LITERAL_TOKENS = (
    TokenType.TRUE, TokenType.FALSE, TokenType.NIL,
    TokenType.INTEGER, TokenType.FLOAT, TokenType.STRING,
)

TOPLEVEL_RETURN = 'cannot return from top-level code'
INVALID_TARGET = 'invalid assignment target'
NESTED_TOO_DEEPLY = 'expression nested too deeply'


class Parser:
    def __init__(self, tokens: Sequence[Token]):
        self.tokens = tokens
        self.pos = 0
        self.function_depth = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def is_at_end(self) -> bool:
        return self.peek().type == TokenType.EOF

    def advance(self) -> Token:
        if not self.is_at_end():
            self.pos += 1
        return self.previous()

    def check(self, expected: TokenType) -> bool:
        return self.peek().type == expected

    def match(self, *expected: TokenType) -> bool:
        for token_type in expected:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def consume(self, expected: TokenType, message: str) -> Token:
        if self.check(expected):
            return self.advance()
        token = self.peek()
        raise parse_error(f"{message}, got {token.describe()}", token.line)

    def parse_program(self) -> List[Stmt]:
        statements: List[Stmt] = []
        while not self.is_at_end():
            statements.append(self.parse_declaration())
        return statements

    # Statements

    def parse_declaration(self) -> Stmt:
        if self.match(TokenType.LET):
            return self.parse_let()
        if self.match(TokenType.FN):
            return self.parse_function()
        return self.parse_statement()

    def parse_let(self) -> Let:
        name = self.consume(TokenType.IDENTIFIER, 'expect variable name')
        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "expect ';' after variable declaration")
        return Let(name, initializer)

    def parse_function(self) -> Function:
        name = self.consume(TokenType.IDENTIFIER, 'expect function name')
        self.consume(TokenType.LEFT_PAREN, "expect '(' after function name")
        params: List[Token] = []
        if not self.check(TokenType.RIGHT_PAREN):
            params.append(self.consume(TokenType.IDENTIFIER, 'expect parameter name'))
            while self.match(TokenType.COMMA):
                params.append(self.consume(TokenType.IDENTIFIER, 'expect parameter name'))
        self.consume(TokenType.RIGHT_PAREN, "expect ')' after parameters")
        self.consume(TokenType.LEFT_BRACE, "expect '{' before function body")
        self.function_depth += 1
        try:
            body = self.parse_block_body()
        finally:
            self.function_depth -= 1
        return Function(name, tuple(params), body)

    def parse_statement(self) -> Stmt:
        if self.match(TokenType.IF):
            return self.parse_if()
        if self.match(TokenType.FOR):
            return self.parse_for()
        if self.match(TokenType.PRINTLN):
            return self.parse_println()
        if self.match(TokenType.RETURN):
            return self.parse_return()
        if self.match(TokenType.LEFT_BRACE):
            return Block(self.parse_block_body())
        return self.parse_expression_statement()

    def parse_if(self) -> If:
        condition = self.parse_expression()
        then_branch = self.parse_statement()
        else_branch = None
        if self.match(TokenType.ELSE):
            else_branch = self.parse_statement()
        return If(condition, then_branch, else_branch)

    def parse_for(self) -> ForEach:
        name = self.consume(TokenType.IDENTIFIER, "expect loop variable after 'for'")
        self.consume(TokenType.IN, "expect 'in' after loop variable")
        iterable = self.parse_expression()
        self.consume(TokenType.LEFT_BRACE, "expect '{' after for-each source")
        return ForEach(name, iterable, Block(self.parse_block_body()))

    def parse_println(self) -> Println:
        if self.match(TokenType.SEMICOLON):
            return Println(None)
        value = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "expect ';' after value")
        return Println(value)

    def parse_return(self) -> Return:
        keyword = self.previous()
        if self.function_depth == 0:
            raise parse_error(TOPLEVEL_RETURN, keyword.line)
        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "expect ';' after return value")
        return Return(keyword, value)

    def parse_block_body(self) -> Tuple[Stmt, ...]:
        # the opening brace has already been consumed
        statements: List[Stmt] = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.is_at_end():
            statements.append(self.parse_declaration())
        self.consume(TokenType.RIGHT_BRACE, "expect '}' after block")
        return tuple(statements)

    def parse_expression_statement(self) -> Expression:
        expr = self.parse_expression()
        self.consume(TokenType.SEMICOLON, "expect ';' after expression")
        return Expression(expr)

    # Expressions

    def parse_expression(self) -> Expr:
        return self.parse_assignment()

    def parse_assignment(self) -> Expr:
        expr = self.parse_or()
        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.parse_assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            raise parse_error(INVALID_TARGET, equals.line)
        return expr

    def parse_or(self) -> Expr:
        expr = self.parse_and()
        while self.match(TokenType.OR):
            operator = self.previous()
            expr = Logical(expr, operator, self.parse_and())
        return expr

    def parse_and(self) -> Expr:
        expr = self.parse_equality()
        while self.match(TokenType.AND):
            operator = self.previous()
            expr = Logical(expr, operator, self.parse_equality())
        return expr

    def parse_equality(self) -> Expr:
        expr = self.parse_comparison()
        while self.match(TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL):
            operator = self.previous()
            expr = Binary(expr, operator, self.parse_comparison())
        return expr

    def parse_comparison(self) -> Expr:
        expr = self.parse_term()
        while self.match(TokenType.GREATER, TokenType.GREATER_EQUAL,
                         TokenType.LESS, TokenType.LESS_EQUAL):
            operator = self.previous()
            expr = Binary(expr, operator, self.parse_term())
        return expr

    def parse_term(self) -> Expr:
        expr = self.parse_factor()
        while self.match(TokenType.MINUS, TokenType.PLUS):
            operator = self.previous()
            expr = Binary(expr, operator, self.parse_factor())
        return expr

    def parse_factor(self) -> Expr:
        expr = self.parse_unary()
        while self.match(TokenType.SLASH, TokenType.STAR):
            operator = self.previous()
            expr = Binary(expr, operator, self.parse_unary())
        return expr

    def parse_unary(self) -> Expr:
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            return Unary(operator, self.parse_unary())
        return self.parse_call()

    def parse_call(self) -> Expr:
        expr = self.parse_primary()
        while self.match(TokenType.LEFT_PAREN):
            arguments: List[Expr] = []
            if not self.check(TokenType.RIGHT_PAREN):
                arguments.append(self.parse_expression())
                while self.match(TokenType.COMMA):
                    arguments.append(self.parse_expression())
            paren = self.consume(TokenType.RIGHT_PAREN, "expect ')' after arguments")
            expr = Call(expr, paren, tuple(arguments))
        return expr

    def parse_primary(self) -> Expr:
        if self.match(*LITERAL_TOKENS):
            return Literal(self.previous().literal)
        if self.match(TokenType.IDENTIFIER):
            return Variable(self.previous())
        if self.match(TokenType.LEFT_PAREN):
            expr = self.parse_expression()
            self.consume(TokenType.RIGHT_PAREN, "expect ')' after expression")
            return Grouping(expr)
        if self.match(TokenType.LEFT_SQUARE):
            return self.parse_square()
        token = self.peek()
        raise parse_error(f"expect expression, got {token.describe()}", token.line)

    def parse_square(self) -> Expr:
        # '[' has been consumed: either an array literal or a '[start..end]' range
        if self.match(TokenType.RIGHT_SQUARE):
            return ArrayLiteral(())
        first = self.parse_expression()
        if self.match(TokenType.DOT):
            dots = self.previous()
            self.consume(TokenType.DOT, "expect '..' in range")
            end = self.parse_expression()
            self.consume(TokenType.RIGHT_SQUARE, "expect ']' after range")
            return RangeLiteral(first, dots, end)
        elements = [first]
        while self.match(TokenType.COMMA):
            if self.check(TokenType.RIGHT_SQUARE):
                break  # trailing comma
            elements.append(self.parse_expression())
        self.consume(TokenType.RIGHT_SQUARE, "expect ']' after array elements")
        return ArrayLiteral(tuple(elements))


def check_return_placement(statements: Sequence[Stmt]) -> None:
    """Reject `return` statements that are not inside a function body.

    The recursive-descent parser checks this while parsing; trees built
    any other way are checked afterwards with this walk.
    """
    for stmt in statements:
        if isinstance(stmt, Return):
            raise parse_error(TOPLEVEL_RETURN, stmt.keyword.line)
        if isinstance(stmt, Block):
            check_return_placement(stmt.statements)
        elif isinstance(stmt, ForEach):
            check_return_placement(stmt.body.statements)
        elif isinstance(stmt, If):
            check_return_placement([stmt.then_branch])
            if stmt.else_branch is not None:
                check_return_placement([stmt.else_branch])


def parse_tokens(tokens: Sequence[Token]) -> List[Stmt]:
    """Parse a complete token list (ending with EOF) into statements."""
    parser = Parser(tokens)
    try:
        return parser.parse_program()
    except RecursionError:
        raise parse_error(NESTED_TOO_DEEPLY, parser.peek().line) from None


def parse_program(source: Union[bytes, str]) -> List[Stmt]:
    """Scan and parse Alice source code into a list of statements.

    Lexical errors are raised as `ScanError`, syntax errors as an
    `AliceError` of kind ParseError.
    """
    return parse_tokens(tokenize(source))
