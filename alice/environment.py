from typing import Any, Dict, List, Optional

from .errors import runtime_error
from .tokens import Token


class Environment:
    """One lexical scope: a mapping of names to values plus the enclosing scope.

    The enclosing scope is only consulted, never owned: a scope is created
    when a block, loop body or call is entered and dropped when it exits,
    except when a function value captured it, in which case it lives as
    long as that function value does.
    """
    def __init__(self, parent: Optional['Environment'] = None):
        self.parent = parent
        self.values: Dict[str, Any] = {}

    def child(self) -> 'Environment':
        return Environment(parent=self)

    def define(self, name: str, value: Any) -> None:
        # Always binds in this scope, shadowing any outer binding
        self.values[name] = value

    def get(self, name: Token) -> Any:
        env = self.resolve(name)
        return env.values[name.lexeme]

    def assign(self, name: Token, value: Any) -> Any:
        env = self.resolve(name)
        env.values[name.lexeme] = value
        return value

    def resolve(self, name: Token) -> 'Environment':
        """Return the innermost scope binding `name`, walking outward."""
        env: Optional[Environment] = self
        while env is not None:
            if name.lexeme in env.values:
                return env
            env = env.parent
        raise runtime_error(f"undefined variable '{name.lexeme}'", name.line)

    def names(self) -> List[str]:
        return sorted(self.values)

    def depth(self) -> int:
        count = 0
        env = self.parent
        while env is not None:
            count += 1
            env = env.parent
        return count
