"""JSON serialization/deserialization for Alice ASTs.

This module converts between the AST dataclasses and plain Python
dict/list structures suitable for JSON encoding, so that a program can
be parsed once (`--emit-ast`) and executed later (`--ast`). Every node
becomes a dict tagged with its class name; tokens keep their line so
runtime errors still point at the right source line.
"""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import Any, Dict, List

from . import ast
from .parser import check_return_placement
from .tokens import Token, TokenType
from .types import NIL, NilVal

NODE_TYPES: Dict[str, type] = {
    cls.__name__: cls
    for cls in vars(ast).values()
    if isinstance(cls, type) and issubclass(cls, ast.Node) and cls not in (ast.Node, ast.Expr, ast.Stmt)
}


def token_to_obj(token: Token) -> Dict[str, Any]:
    return {
        "__type__": "Token",
        "type": token.type.name,
        "lexeme": token.lexeme,
        "literal": ast_to_obj(token.literal),
        "line": token.line,
    }


def token_from_obj(o: Dict[str, Any]) -> Token:
    return Token(TokenType[o["type"]], o.get("lexeme"), ast_from_obj(o.get("literal")), o["line"])


def ast_to_obj(node: Any) -> Any:
    # Primitives
    if node is None or isinstance(node, (bool, int, float, str)):
        return node
    if isinstance(node, NilVal):
        return {"__type__": "Nil"}
    if isinstance(node, Token):
        return token_to_obj(node)
    if isinstance(node, (list, tuple)):
        return [ast_to_obj(n) for n in node]
    if isinstance(node, ast.Node) and is_dataclass(node):
        obj: Dict[str, Any] = {"type": type(node).__name__}
        for f in fields(node):
            obj[f.name] = ast_to_obj(getattr(node, f.name))
        return obj
    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, list):
        return tuple(ast_from_obj(o) for o in obj)
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    tag = obj.get("__type__")
    if tag == "Nil":
        return NIL
    if tag == "Token":
        return token_from_obj(obj)
    t = obj.get("type")
    cls = NODE_TYPES.get(t)
    if cls is None:
        raise ValueError(f"Unknown AST node type: {t}")
    return cls(**{f.name: ast_from_obj(obj[f.name]) for f in fields(cls)})


def program_to_obj(statements: List[ast.Stmt]) -> Dict[str, Any]:
    return {"type": "Program", "body": [ast_to_obj(s) for s in statements]}


def program_from_obj(obj: Dict[str, Any]) -> List[ast.Stmt]:
    """Rebuild a statement list, applying the same placement rules as the parsers."""
    if not isinstance(obj, dict) or obj.get("type") != "Program":
        raise ValueError("AST JSON must hold a Program object")
    statements = [ast_from_obj(s) for s in obj["body"]]
    check_return_placement(statements)
    return statements
