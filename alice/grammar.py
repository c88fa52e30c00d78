"""Grammar-driven parser for the Alice language.

This is a second front end next to the hand-written parser in
`alice.parser`. The grammar below is fed to a Lark LALR(1) parser whose
lexer is not Lark's own: `TokenStreamLexer` replays the tokens produced
by `alice.scanner`, so both front ends see exactly the same input and
the grammar only has to describe structure. The parse tree is then
turned into the same AST classes by `ASTTransformer`.

The precedence ladder is encoded as one rule per level, and each binary
rule is left-recursive, which gives left associativity. The two places
where LALR(1) has to choose between shifting and reducing (the dangling
`else` and an unparenthesized `if` condition followed by `(` or `-`)
are resolved by Lark as shifts, which is also what the recursive-descent
parser does.

The public entry point is `parse_tokens`; `parse_program` scans first.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Union

from lark import Lark, Transformer
from lark import Token as LarkToken
from lark.exceptions import UnexpectedInput, VisitError
from lark.lexer import Lexer

from .ast import (
    Stmt, Grouping, Variable, Assign, Unary, Binary, Logical, Call,
    ArrayLiteral, RangeLiteral, Literal, Println, Return, Let, Block,
    Function, If, ForEach, Expression,
)
from .errors import AliceError, parse_error
from .parser import INVALID_TARGET, NESTED_TOO_DEEPLY, check_return_placement
from .scanner import tokenize
from .tokens import Token, TokenType

# Punctuation and keywords whose only job is structure are filtered out of
# the parse tree (leading underscore); the rest reach the transformer.
FILTERED = {
    TokenType.LEFT_PAREN, TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
    TokenType.LEFT_SQUARE, TokenType.RIGHT_SQUARE, TokenType.COMMA,
    TokenType.SEMICOLON, TokenType.LET, TokenType.FN, TokenType.PRINTLN,
    TokenType.IF, TokenType.ELSE, TokenType.FOR, TokenType.IN,
    TokenType.ARROW, TokenType.EOF,
}

TERMINALS: Dict[TokenType, str] = {
    t: ('_' + t.name if t in FILTERED else t.name) for t in TokenType
}
TOKEN_TYPES: Dict[str, TokenType] = {name: t for t, name in TERMINALS.items()}


ALICE_GRAMMAR = r"""
    program: declaration* _EOF

    ?declaration: let_stmt
                | fn_stmt
                | statement

    let_stmt: _LET IDENTIFIER (EQUAL expression)? _SEMICOLON
    fn_stmt: _FN IDENTIFIER _LEFT_PAREN parameters? RIGHT_PAREN block
    parameters: IDENTIFIER (_COMMA IDENTIFIER)*

    ?statement: println_stmt
              | return_stmt
              | if_stmt
              | for_stmt
              | block
              | expr_stmt

    println_stmt: _PRINTLN expression? _SEMICOLON
    return_stmt: RETURN expression? _SEMICOLON
    if_stmt: _IF expression statement (_ELSE statement)?
    for_stmt: _FOR IDENTIFIER _IN expression block
    block: _LEFT_BRACE declaration* _RIGHT_BRACE
    expr_stmt: expression _SEMICOLON

    // Expressions, lowest precedence first
    ?expression: assignment

    ?assignment: logic_or
               | logic_or EQUAL assignment -> assign_expr

    ?logic_or: logic_and
             | logic_or OR logic_and -> logical_op

    ?logic_and: equality
              | logic_and AND equality -> logical_op

    ?equality: comparison
             | equality BANG_EQUAL comparison -> binary_op
             | equality EQUAL_EQUAL comparison -> binary_op

    ?comparison: term
               | comparison GREATER term -> binary_op
               | comparison GREATER_EQUAL term -> binary_op
               | comparison LESS term -> binary_op
               | comparison LESS_EQUAL term -> binary_op

    ?term: factor
         | term MINUS factor -> binary_op
         | term PLUS factor -> binary_op

    ?factor: unary
           | factor SLASH unary -> binary_op
           | factor STAR unary -> binary_op

    ?unary: call
          | BANG unary -> unary_op
          | MINUS unary -> unary_op

    ?call: primary
         | call _LEFT_PAREN arguments? RIGHT_PAREN -> call_expr
    arguments: expression (_COMMA expression)*

    ?primary: TRUE -> literal
            | FALSE -> literal
            | NIL -> literal
            | INTEGER -> literal
            | FLOAT -> literal
            | STRING -> literal
            | IDENTIFIER -> variable
            | _LEFT_PAREN expression RIGHT_PAREN -> grouping
            | _LEFT_SQUARE _RIGHT_SQUARE -> array
            | _LEFT_SQUARE expression (_COMMA expression)* _COMMA? _RIGHT_SQUARE -> array
            | _LEFT_SQUARE expression DOT DOT expression _RIGHT_SQUARE -> range

    %declare """ + ' '.join(sorted(TERMINALS.values())) + "\n"


class TokenStreamLexer(Lexer):
    """Feeds already-scanned Alice tokens to Lark.

    Each Lark token keeps the scanned `Token` as its value, so the
    transformer builds nodes from the very same token objects the
    recursive-descent parser would use.
    """
    def __init__(self, lexer_conf):
        pass

    def lex(self, data: Sequence[Token]):
        for token in data:
            yield LarkToken(TERMINALS[token.type], token, line=token.line)


ALICE_PARSER = Lark(
    ALICE_GRAMMAR,
    parser='lalr',
    lexer=TokenStreamLexer,
    start='program',
)


def tok(item: LarkToken) -> Token:
    return item.value


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def program(self, items):
        return list(items)

    # Statements
    def let_stmt(self, items):
        initializer = items[2] if len(items) > 1 else None
        return Let(tok(items[0]), initializer)

    def fn_stmt(self, items):
        name = tok(items[0])
        params = items[1] if isinstance(items[1], tuple) else ()
        body = items[-1]
        return Function(name, params, body.statements)

    def parameters(self, items):
        return tuple(tok(item) for item in items)

    def println_stmt(self, items):
        return Println(items[0] if items else None)

    def return_stmt(self, items):
        value = items[1] if len(items) > 1 else None
        return Return(tok(items[0]), value)

    def if_stmt(self, items):
        else_branch = items[2] if len(items) > 2 else None
        return If(items[0], items[1], else_branch)

    def for_stmt(self, items):
        name, iterable, body = items
        return ForEach(tok(name), iterable, body)

    def block(self, items):
        return Block(tuple(items))

    def expr_stmt(self, items):
        return Expression(items[0])

    # Expressions
    def assign_expr(self, items):
        target, equals, value = items
        if not isinstance(target, Variable):
            raise parse_error(INVALID_TARGET, tok(equals).line)
        return Assign(target.name, value)

    def logical_op(self, items):
        left, operator, right = items
        return Logical(left, tok(operator), right)

    def binary_op(self, items):
        left, operator, right = items
        return Binary(left, tok(operator), right)

    def unary_op(self, items):
        operator, operand = items
        return Unary(tok(operator), operand)

    def call_expr(self, items):
        callee = items[0]
        arguments = items[1] if len(items) > 2 else ()
        return Call(callee, tok(items[-1]), arguments)

    def arguments(self, items):
        return tuple(items)

    def literal(self, items):
        return Literal(tok(items[0]).literal)

    def variable(self, items):
        return Variable(tok(items[0]))

    def grouping(self, items):
        return Grouping(items[0])

    def array(self, items):
        return ArrayLiteral(tuple(items))

    def range(self, items):
        start, dots, _, end = items
        return RangeLiteral(start, tok(dots), end)


def describe_terminal(name: str) -> str:
    token_type = TOKEN_TYPES.get(name)
    if token_type is None:
        return name
    if token_type in (TokenType.IDENTIFIER, TokenType.STRING, TokenType.INTEGER,
                      TokenType.FLOAT, TokenType.EOF):
        return token_type.value
    return f"'{token_type.value}'"


def unexpected_token_error(e: UnexpectedInput, tokens: Sequence[Token]) -> AliceError:
    token = getattr(e, 'token', None)
    scanned = getattr(token, 'value', None)
    if isinstance(scanned, Token):
        found, line = scanned.describe(), scanned.line
    else:
        found, line = 'end of input', tokens[-1].line if tokens else 1
    expected = sorted(describe_terminal(name) for name in getattr(e, 'expected', ()) or ())
    message = f"unexpected {found}"
    if expected:
        message += f", expected one of: {', '.join(expected)}"
    return parse_error(message, line)


def parse_tokens(tokens: Sequence[Token]) -> List[Stmt]:
    """Parse a complete token list (ending with EOF) into statements."""
    # no token position survives the tree walk
    line = tokens[0].line if tokens else 1
    try:
        tree = ALICE_PARSER.parse(tokens)
    except UnexpectedInput as e:
        raise unexpected_token_error(e, tokens) from None
    except RecursionError:
        raise parse_error(NESTED_TOO_DEEPLY, line) from None
    try:
        statements = ASTTransformer().transform(tree)
        check_return_placement(statements)
    except VisitError as e:
        if isinstance(e.orig_exc, AliceError):
            raise e.orig_exc from None
        if isinstance(e.orig_exc, RecursionError):
            raise parse_error(NESTED_TOO_DEEPLY, line) from None
        raise
    except RecursionError:
        raise parse_error(NESTED_TOO_DEEPLY, line) from None
    return statements


def parse_program(source: Union[bytes, str]) -> List[Stmt]:
    """Scan Alice source code and parse it with the grammar front end."""
    return parse_tokens(tokenize(source))
