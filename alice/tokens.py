"""Token vocabulary shared by the scanner, both parsers and the interpreter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class TokenType(Enum):
    # Single-character tokens.
    LEFT_PAREN = '('
    RIGHT_PAREN = ')'
    LEFT_BRACE = '{'
    RIGHT_BRACE = '}'
    LEFT_SQUARE = '['
    RIGHT_SQUARE = ']'
    COMMA = ','
    DOT = '.'
    MINUS = '-'
    PLUS = '+'
    SEMICOLON = ';'
    SLASH = '/'
    STAR = '*'

    # One or two character tokens.
    BANG = '!'
    BANG_EQUAL = '!='
    EQUAL = '='
    EQUAL_EQUAL = '=='
    GREATER = '>'
    GREATER_EQUAL = '>='
    LESS = '<'
    LESS_EQUAL = '<='
    ARROW = '=>'

    # Literals.
    IDENTIFIER = 'identifier'
    STRING = 'string'
    INTEGER = 'integer'
    FLOAT = 'float'

    # Keywords.
    AND = 'and'
    OR = 'or'
    IF = 'if'
    ELSE = 'else'
    TRUE = 'true'
    FALSE = 'false'
    FN = 'fn'
    LET = 'let'
    NIL = 'nil'
    PRINTLN = 'println'
    RETURN = 'return'
    FOR = 'for'
    IN = 'in'

    EOF = 'end of input'


KEYWORDS: Dict[str, TokenType] = {
    t.value: t for t in (
        TokenType.AND, TokenType.OR, TokenType.IF, TokenType.ELSE,
        TokenType.TRUE, TokenType.FALSE, TokenType.FN, TokenType.LET,
        TokenType.NIL, TokenType.PRINTLN, TokenType.RETURN, TokenType.FOR,
        TokenType.IN,
    )
}


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: Optional[str]
    literal: Any
    line: int

    def __str__(self) -> str:
        if self.type in (TokenType.IDENTIFIER, TokenType.INTEGER, TokenType.FLOAT):
            return str(self.lexeme)
        if self.type == TokenType.STRING:
            return f'"{self.literal}"'
        return self.type.value

    def describe(self) -> str:
        """Human-readable name used in parse error messages."""
        if self.type == TokenType.EOF:
            return 'end of input'
        return f"'{self}'"
