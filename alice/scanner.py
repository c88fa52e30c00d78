"""Lexical analysis for Alice.

The scanner walks the raw source bytes once, left to right, and turns
them into a list of `Token`s ending with an EOF marker. Errors do not
stop the scan: every unknown byte, unterminated string or out-of-range
number is recorded and scanning carries on, so one run reports all of
them together in a `ScanError`. A scan with any error yields no tokens.
"""

from __future__ import annotations

from typing import List, Optional, Union

from .errors import ErrorVal, ScanError, syntax_error
from .tokens import KEYWORDS, Token, TokenType
from .types import NIL, in_int64

SINGLE_BYTE_TOKENS = {
    ord('('): TokenType.LEFT_PAREN,
    ord(')'): TokenType.RIGHT_PAREN,
    ord('['): TokenType.LEFT_SQUARE,
    ord(']'): TokenType.RIGHT_SQUARE,
    ord('{'): TokenType.LEFT_BRACE,
    ord('}'): TokenType.RIGHT_BRACE,
    ord(','): TokenType.COMMA,
    ord('.'): TokenType.DOT,
    ord('-'): TokenType.MINUS,
    ord('+'): TokenType.PLUS,
    ord(';'): TokenType.SEMICOLON,
    ord('*'): TokenType.STAR,
}

KEYWORD_LITERALS = {
    TokenType.TRUE: True,
    TokenType.FALSE: False,
    TokenType.NIL: NIL,
}


def is_digit(c: int) -> bool:
    return ord('0') <= c <= ord('9')


def is_alpha(c: int) -> bool:
    return ord('a') <= c <= ord('z') or ord('A') <= c <= ord('Z') or c == ord('_')


class Scanner:
    def __init__(self, source: Union[bytes, str]):
        if isinstance(source, str):
            source = source.encode('utf-8')
        self.source = source
        self.start = 0
        self.current = 0
        self.line = 1
        self.tokens: List[Token] = []
        self.errors: List[ErrorVal] = []

    def scan_tokens(self) -> List[Token]:
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()
        if self.errors:
            raise ScanError(self.errors)
        eof_line = self.line
        if self.source.endswith(b'\n') and eof_line > 1:
            eof_line -= 1
        self.tokens.append(Token(TokenType.EOF, None, None, eof_line))
        return self.tokens

    def scan_token(self) -> None:
        c = self.advance()
        if c in SINGLE_BYTE_TOKENS:
            self.add_token(SINGLE_BYTE_TOKENS[c])
        elif c == ord('!'):
            self.add_token(TokenType.BANG_EQUAL if self.match('=') else TokenType.BANG)
        elif c == ord('='):
            if self.match('='):
                self.add_token(TokenType.EQUAL_EQUAL)
            elif self.match('>'):
                self.add_token(TokenType.ARROW)
            else:
                self.add_token(TokenType.EQUAL)
        elif c == ord('<'):
            self.add_token(TokenType.LESS_EQUAL if self.match('=') else TokenType.LESS)
        elif c == ord('>'):
            self.add_token(TokenType.GREATER_EQUAL if self.match('=') else TokenType.GREATER)
        elif c == ord('/'):
            if self.match('/'):
                # a comment runs to the end of the line
                while self.peek() != ord('\n') and not self.is_at_end():
                    self.advance()
            else:
                self.add_token(TokenType.SLASH)
        elif c in (ord(' '), ord('\r'), ord('\t')):
            pass
        elif c == ord('\n'):
            self.line += 1
        elif c == ord('"'):
            self.string()
        elif is_digit(c):
            self.number()
        elif is_alpha(c):
            self.identifier()
        else:
            self.error(f"unknown token {self.describe_byte(c)}")

    def string(self) -> None:
        while self.peek() != ord('"') and not self.is_at_end():
            if self.peek() == ord('\n'):
                self.line += 1
            self.advance()
        if self.is_at_end():
            self.error('unterminated string')
            return
        raw = self.source[self.start + 1:self.current]
        self.advance()  # closing quote
        try:
            text = raw.decode('utf-8')
        except UnicodeDecodeError:
            self.error('string literal is not valid UTF-8')
            return
        self.add_token(TokenType.STRING, text)

    def number(self) -> None:
        while is_digit(self.peek()):
            self.advance()
        if self.peek() == ord('.') and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()
            text = self.lexeme()
            self.add_token(TokenType.FLOAT, float(text), text)
            return
        text = self.lexeme()
        value = int(text)
        if not in_int64(value):
            self.error(f"integer literal {text} does not fit in 64 bits")
            return
        self.add_token(TokenType.INTEGER, value, text)

    def identifier(self) -> None:
        while is_alpha(self.peek()) or is_digit(self.peek()):
            self.advance()
        text = self.lexeme()
        token_type = KEYWORDS.get(text)
        if token_type is None:
            self.add_token(TokenType.IDENTIFIER, text, text)
        else:
            self.add_token(token_type, KEYWORD_LITERALS.get(token_type))

    # Helpers

    def add_token(self, token_type: TokenType, literal=None, lexeme: Optional[str] = None) -> None:
        self.tokens.append(Token(token_type, lexeme, literal, self.line))

    def error(self, message: str) -> None:
        self.errors.append(syntax_error(message, self.line))

    def lexeme(self) -> str:
        # identifiers and numbers are pure ASCII by construction
        return self.source[self.start:self.current].decode('ascii')

    @staticmethod
    def describe_byte(c: int) -> str:
        if 0x20 <= c < 0x7f:
            return f"'{chr(c)}'"
        return f"byte 0x{c:02x}"

    def is_at_end(self) -> bool:
        return self.current >= len(self.source)

    def advance(self) -> int:
        self.current += 1
        return self.source[self.current - 1]

    def match(self, expected: str) -> bool:
        if self.is_at_end() or self.source[self.current] != ord(expected):
            return False
        self.current += 1
        return True

    def peek(self) -> int:
        if self.is_at_end():
            return 0
        return self.source[self.current]

    def peek_next(self) -> int:
        if self.current + 1 >= len(self.source):
            return 0
        return self.source[self.current + 1]


def tokenize(source: Union[bytes, str]) -> List[Token]:
    """Convert source code into a list of tokens ending with EOF.

    Raises `ScanError` listing every lexical error if any were found.
    """
    return Scanner(source).scan_tokens()
