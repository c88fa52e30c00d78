"""Abstract Syntax Tree (AST) definitions for the Alice language.

The AST classes defined in this module represent the syntactic structure
of parsed Alice programs. Both parsers build them and the interpreter
evaluates them. Nodes are frozen: once a program is parsed its tree is
never modified, and child sequences are tuples.

Nodes that can fail at run time keep the token they came from so that
errors can report the right source line.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, List, Optional, Tuple

from .tokens import Token


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass(frozen=True)
class Expr(Node):
    pass


@dataclass(frozen=True)
class Stmt(Node):
    pass


# Expressions

@dataclass(frozen=True)
class Grouping(Expr):
    expression: Expr


@dataclass(frozen=True)
class Variable(Expr):
    name: Token


@dataclass(frozen=True)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(frozen=True)
class Unary(Expr):
    operator: Token
    operand: Expr


@dataclass(frozen=True)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True)
class Logical(Expr):
    left: Expr
    operator: Token  # AND or OR
    right: Expr


@dataclass(frozen=True)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, for error lines
    arguments: Tuple[Expr, ...]


@dataclass(frozen=True)
class ArrayLiteral(Expr):
    elements: Tuple[Expr, ...]


@dataclass(frozen=True)
class RangeLiteral(Expr):
    start: Expr
    dots: Token  # first '.' of '..', for error lines
    end: Expr


@dataclass(frozen=True)
class Literal(Expr):
    value: Any  # int, float, str, bool or NIL


# Statements

@dataclass(frozen=True)
class Println(Stmt):
    expression: Optional[Expr]  # None prints a blank line


@dataclass(frozen=True)
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@dataclass(frozen=True)
class Let(Stmt):
    name: Token
    initializer: Optional[Expr]


@dataclass(frozen=True)
class Block(Stmt):
    statements: Tuple[Stmt, ...]


@dataclass(frozen=True)
class Function(Stmt):
    name: Token
    params: Tuple[Token, ...]
    body: Tuple[Stmt, ...]


@dataclass(frozen=True)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(frozen=True)
class ForEach(Stmt):
    name: Token
    iterable: Expr
    body: Block


@dataclass(frozen=True)
class Expression(Stmt):
    expression: Expr


def first_line(node: Node) -> Optional[int]:
    """Return the line of the first token inside `node`, or None if it holds none.

    Uses an explicit stack, so it also works on trees nested too deeply
    to recurse over.
    """
    stack: List[Any] = [node]
    while stack:
        item = stack.pop()
        if isinstance(item, Token):
            return item.line
        if isinstance(item, Node):
            children = [getattr(item, f.name) for f in fields(item)]
        elif isinstance(item, tuple):
            children = list(item)
        else:
            continue
        stack.extend(reversed(children))
    return None
