"""Tree-walking interpreter for the Alice language.

The interpreter executes the statement list produced by either parser.
It keeps one global scope for its whole lifetime (so a REPL can feed it
one line at a time) and a reference to the current scope, which is
swapped on entry to every block, loop body and function call and
restored on every way out, including errors and `return`.

Values follow the model in `alice.types`: no implicit conversion between
int and float, `+` also concatenates two strings, integers stay within
64 bits, and equality across different types is simply false.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence, TextIO, Union

from .ast import (
    Expr, Stmt, Grouping, Variable, Assign, Unary, Binary, Logical, Call,
    ArrayLiteral, RangeLiteral, Literal, Println, Return, Let, Block,
    Function, If, ForEach, Expression, first_line,
)
from .environment import Environment
from .errors import AliceError, ReturnSignal, runtime_error
from .parser import parse_program
from .tokens import Token, TokenType
from .types import (
    NIL, ArrayVal, RangeVal, debug_repr, equal_values, in_int64, is_int,
    is_truthy, to_string, type_name,
)

NESTING_TOO_DEEP = 'maximum nesting depth exceeded'


class FunctionValue:
    """Represents a user-defined Alice function and the scope it closes over."""
    type_name = 'function'

    def __init__(self, declaration: Function, closure: Environment):
        self.declaration = declaration
        self.closure = closure

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    @property
    def arity(self) -> int:
        return len(self.declaration.params)

    def __repr__(self) -> str:
        return f"<fn {self.name}>"


class Interpreter:
    """Core interpreter that executes Alice ASTs."""
    def __init__(self, out: Optional[TextIO] = None, debug_level: int = 0,
                 debug_file: str = 'debug.txt'):
        self.globals = Environment()
        self.environment = self.globals
        self.out = out
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None

    def debug(self, msg: str, level: int = 1):
        if self.debug_level >= level and self.debug_fp:
            self.debug_fp.write(msg + '\n')
            self.debug_fp.flush()

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def run(self, statements: Sequence[Stmt]) -> None:
        self.debug(f"run: {len(statements)} statement(s)")
        try:
            for stmt in statements:
                try:
                    self.execute(stmt)
                except RecursionError:
                    raise runtime_error(NESTING_TOO_DEEP, first_line(stmt) or 1) from None
        except AliceError as ex:
            self.debug(f"error: {ex}")
            raise
        self.debug('run: done')

    @contextmanager
    def scope(self, env: Environment) -> Iterator[Environment]:
        """Make `env` the current scope until the block exits, however it exits."""
        previous = self.environment
        self.environment = env
        self.debug(f"push scope (depth {env.depth()})", 3)
        try:
            yield env
        finally:
            self.environment = previous
            self.debug(f"pop scope (depth {env.depth()}): {', '.join(env.names())}", 3)

    def execute_block(self, statements: Sequence[Stmt], env: Environment) -> None:
        with self.scope(env):
            for stmt in statements:
                self.execute(stmt)

    def execute(self, node: Stmt) -> None:
        if isinstance(node, Expression):
            self.evaluate(node.expression)
            return
        if isinstance(node, Println):
            if node.expression is None:
                print(file=self.out)
            else:
                print(to_string(self.evaluate(node.expression)), file=self.out)
            return
        if isinstance(node, Let):
            value = self.evaluate(node.initializer) if node.initializer is not None else NIL
            self.environment.define(node.name.lexeme, value)
            self.debug(f"define {node.name.lexeme} = {debug_repr(value)}", 2)
            return
        if isinstance(node, Block):
            self.execute_block(node.statements, self.environment.child())
            return
        if isinstance(node, If):
            cond = self.evaluate(node.condition)
            truthy = is_truthy(cond)
            self.debug(f"if condition {debug_repr(cond)} -> {truthy}", 3)
            if truthy:
                self.execute(node.then_branch)
            elif node.else_branch is not None:
                self.execute(node.else_branch)
            return
        if isinstance(node, ForEach):
            self.execute_for_each(node)
            return
        if isinstance(node, Function):
            self.environment.define(node.name.lexeme, FunctionValue(node, self.environment))
            self.debug(f"define function {node.name.lexeme}", 2)
            return
        if isinstance(node, Return):
            value = self.evaluate(node.value) if node.value is not None else NIL
            raise ReturnSignal(value)
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def execute_for_each(self, node: ForEach) -> None:
        # The source is evaluated exactly once, before the first iteration
        source = self.evaluate(node.iterable)
        if isinstance(source, ArrayVal):
            items: Any = list(source.items)
        elif isinstance(source, RangeVal):
            items = source
        else:
            raise runtime_error(
                f"for-each source must be an array or a range, got {type_name(source)}",
                node.name.line)
        name = node.name.lexeme
        for item in items:
            # rebinds the same slot in the enclosing scope on every pass
            self.environment.define(name, item)
            self.debug(f"for {name} = {debug_repr(item)}", 3)
            self.execute_block(node.body.statements, self.environment.child())

    def evaluate(self, node: Expr) -> Any:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Grouping):
            return self.evaluate(node.expression)
        if isinstance(node, Variable):
            return self.environment.get(node.name)
        if isinstance(node, Assign):
            value = self.evaluate(node.value)
            return self.environment.assign(node.name, value)
        if isinstance(node, Unary):
            operand = self.evaluate(node.operand)
            if node.operator.type == TokenType.BANG:
                return not is_truthy(operand)
            if is_int(operand):
                return self.check_int(-operand, node.operator)
            if isinstance(operand, float):
                return -operand
            raise runtime_error(f"operand of unary '-' must be a number, got {debug_repr(operand)}",
                                node.operator.line)
        if isinstance(node, Logical):
            left = self.evaluate(node.left)
            if node.operator.type == TokenType.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self.evaluate(node.right)
        if isinstance(node, Binary):
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            return self.apply_binary_op(node.operator, left, right)
        if isinstance(node, Call):
            callee = self.evaluate(node.callee)
            args = [self.evaluate(arg) for arg in node.arguments]
            return self.call_function(callee, args, node.paren)
        if isinstance(node, ArrayLiteral):
            return ArrayVal([self.evaluate(el) for el in node.elements])
        if isinstance(node, RangeLiteral):
            start = self.evaluate(node.start)
            end = self.evaluate(node.end)
            if not (is_int(start) and is_int(end)):
                raise runtime_error(
                    f"range bounds must be integers, got {debug_repr(start)} and {debug_repr(end)}",
                    node.dots.line)
            return RangeVal(start, end)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def call_function(self, func: Any, args: List[Any], paren: Token) -> Any:
        if not isinstance(func, FunctionValue):
            raise runtime_error(f"can only call functions, got {type_name(func)}", paren.line)
        if len(args) != func.arity:
            raise runtime_error(f"{func.name} expects {func.arity} argument(s) but got {len(args)}",
                                paren.line)
        self.debug(f"call {func.name}({', '.join(debug_repr(a) for a in args)})", 2)
        # Arguments live in a fresh scope chained to the defining scope
        call_env = func.closure.child()
        for param, arg in zip(func.declaration.params, args):
            call_env.define(param.lexeme, arg)
        try:
            self.execute_block(func.declaration.body, call_env)
        except ReturnSignal as r:
            return r.value
        except RecursionError:
            raise runtime_error('maximum call depth exceeded', paren.line) from None
        return NIL

    def check_int(self, value: int, operator: Token) -> int:
        if not in_int64(value):
            raise runtime_error('integer overflow', operator.line)
        return value

    def apply_binary_op(self, operator: Token, a: Any, b: Any) -> Any:
        op = operator.type
        if op == TokenType.EQUAL_EQUAL:
            return equal_values(a, b)
        if op == TokenType.BANG_EQUAL:
            return not equal_values(a, b)
        if op == TokenType.PLUS and isinstance(a, str) and isinstance(b, str):
            return a + b
        if is_int(a) and is_int(b):
            return self.apply_int_op(operator, a, b)
        if isinstance(a, float) and isinstance(b, float):
            return self.apply_float_op(operator, a, b)
        if op == TokenType.PLUS:
            raise runtime_error(
                f"operands of '+' must be two numbers of the same type or two strings, "
                f"got {debug_repr(a)} and {debug_repr(b)}", operator.line)
        raise runtime_error(
            f"operands of '{op.value}' must be two numbers of the same type, "
            f"got {debug_repr(a)} and {debug_repr(b)}", operator.line)

    def apply_int_op(self, operator: Token, a: int, b: int) -> Union[int, bool]:
        op = operator.type
        if op == TokenType.PLUS:
            return self.check_int(a + b, operator)
        if op == TokenType.MINUS:
            return self.check_int(a - b, operator)
        if op == TokenType.STAR:
            return self.check_int(a * b, operator)
        if op == TokenType.SLASH:
            if b == 0:
                raise runtime_error('division by zero', operator.line)
            # truncates toward zero
            quotient = abs(a) // abs(b)
            if (a < 0) != (b < 0):
                quotient = -quotient
            return self.check_int(quotient, operator)
        return self.compare(op, a, b)

    def apply_float_op(self, operator: Token, a: float, b: float) -> Union[float, bool]:
        op = operator.type
        if op == TokenType.PLUS:
            return a + b
        if op == TokenType.MINUS:
            return a - b
        if op == TokenType.STAR:
            return a * b
        if op == TokenType.SLASH:
            if b == 0.0:
                raise runtime_error('division by zero', operator.line)
            return a / b
        return self.compare(op, a, b)

    @staticmethod
    def compare(op: TokenType, a: Any, b: Any) -> bool:
        if op == TokenType.GREATER:
            return a > b
        if op == TokenType.GREATER_EQUAL:
            return a >= b
        if op == TokenType.LESS:
            return a < b
        if op == TokenType.LESS_EQUAL:
            return a <= b
        raise NotImplementedError(f"unknown binary operator {op}")


def run_program(source: Union[bytes, str], debug_level: int = 0) -> Interpreter:
    """Convenience function to scan, parse and run an Alice program from source."""
    statements = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level)
    try:
        interpreter.run(statements)
    finally:
        interpreter.close()
    return interpreter


def run_file(file_path: str, debug_level: int = 0) -> Interpreter:
    """Run an Alice source file, returning the interpreter instance."""
    with open(file_path, 'rb') as f:
        source = f.read()
    return run_program(source, debug_level=debug_level)
