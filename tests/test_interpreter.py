import io

import pytest

from alice.errors import AliceError, RUNTIME_ERROR
from alice.interpreter import Interpreter, FunctionValue, run_file, run_program
from alice.parser import parse_program
from alice.types import NIL, ArrayVal, RangeVal


def run(source):
    out = io.StringIO()
    interp = Interpreter(out=out)
    interp.run(parse_program(source))
    return out.getvalue().splitlines(), interp


def value_of(source):
    _, interp = run(f"let result = {source};")
    return interp.globals.values['result']


def runtime_failure(source):
    with pytest.raises(AliceError) as exc:
        run(source)
    assert exc.value.kind == RUNTIME_ERROR
    return exc.value


def test_literals_keep_their_variant():
    assert value_of('42') == 42
    assert value_of('2.5') == 2.5
    assert value_of('"text"') == 'text'
    assert value_of('true') is True
    assert value_of('nil') is NIL


def test_let_and_println():
    out, _ = run('let x = 1 + 2; println(x);')
    assert out == ['3']


def test_if_else():
    out, _ = run('if true { println("a"); } else { println("b"); }')
    assert out == ['a']


@pytest.mark.parametrize('source, expected', [
    ('!nil', True),
    ('!false', True),
    ('!0', False),
    ('!""', False),
    ('![]', False),
])
def test_truthiness(source, expected):
    assert value_of(source) is expected


@pytest.mark.parametrize('source, expected', [
    ('1 == 1.0', False),
    ('1 == 1', True),
    ('1.5 == 1.5', True),
    ('"a" == "a"', True),
    ('nil == nil', True),
    ('nil == false', False),
    ('true == 1', False),
    ('"1" != 1', True),
    ('[1] == [1]', False),
])
def test_equality(source, expected):
    assert value_of(source) is expected


def test_comparison():
    assert value_of('1 < 2') is True
    assert value_of('2.5 >= 2.5') is True
    assert value_of('3 <= 2') is False


def test_integer_division_truncates_toward_zero():
    assert value_of('7 / 2') == 3
    assert value_of('-7 / 2') == -3
    assert value_of('7 / -2') == -3
    assert value_of('-8 / 2') == -4


def test_division_by_zero():
    err = runtime_failure('let a = 1;\nprintln a / 0;')
    assert str(err) == 'line[2] RuntimeError: division by zero'
    runtime_failure('println 1.0 / 0.0;')


def test_integer_overflow():
    err = runtime_failure('println 9223372036854775807 + 1;')
    assert err.err.message == 'integer overflow'
    runtime_failure('println -9223372036854775807 - 2;')
    runtime_failure('println 4611686018427387904 * 2;')


def test_mixed_numeric_operands():
    err = runtime_failure('println 1 + 1.0;')
    assert err.err.message == (
        "operands of '+' must be two numbers of the same type or two strings, got 1 and 1.0")
    err = runtime_failure('println "a" * 2;')
    assert err.err.message == "operands of '*' must be two numbers of the same type, got \"a\" and 2"
    runtime_failure('println "a" < "b";')


def test_unary_minus_requires_number():
    err = runtime_failure('\n\nprintln -"x";')
    assert err.line == 3
    assert value_of('-2.5') == -2.5


def test_undefined_variable_line():
    err = runtime_failure('let a = 1;\n\nb = 2;')
    assert str(err) == "line[3] RuntimeError: undefined variable 'b'"


def test_block_scope_is_dropped():
    runtime_failure('{ let inner = 1; }\nprintln inner;')


def test_shadowing_in_nested_block():
    out, interp = run('let a = 1; { let a = 2; println a; } println a;')
    assert out == ['2', '1']
    assert interp.environment is interp.globals


def test_short_circuit_skips_right_operand():
    out, _ = run('fn boom() { println "boom"; return true; }\n'
                 'println false and boom();\nprintln true or boom();')
    assert out == ['false', 'true']


def test_logical_returns_operand_values():
    assert value_of('nil or 3') == 3
    assert value_of('0 and "x"') == 'x'
    assert value_of('false or nil') is NIL


def test_for_each_visits_in_order():
    out, _ = run('for x in [1, 2, 3] { println x; }\nfor i in [0..3] { println i; }')
    assert out == ['1', '2', '3', '0', '1', '2']


def test_for_each_source_is_evaluated_once():
    out, _ = run('let calls = 0;\n'
                 'fn source() { calls = calls + 1; return [0..3]; }\n'
                 'for i in source() { println i; }\n'
                 'println calls;')
    assert out == ['0', '1', '2', '1']


def test_for_each_variable_lives_in_enclosing_scope():
    _, interp = run('for i in [0..3] { let sq = i * i; }')
    assert interp.globals.values['i'] == 2
    assert 'sq' not in interp.globals.values


def test_for_each_rejects_other_sources():
    err = runtime_failure('for c in "abc" { println c; }')
    assert err.err.message == 'for-each source must be an array or a range, got string'


def test_range_bounds_must_be_integers():
    runtime_failure('let r = [0..1.5];')
    assert value_of('[2..5]') == RangeVal(2, 5)


def test_array_values():
    assert value_of('[1, "a", [nil]]') == ArrayVal([1, 'a', ArrayVal([NIL])])


def test_functions_and_arity():
    out, interp = run('fn add(a, b) { return a + b; }\nprintln add(2, 3);')
    assert out == ['5']
    assert isinstance(interp.globals.values['add'], FunctionValue)
    err = runtime_failure('fn add(a, b) { return a + b; }\nprintln add(2);')
    assert str(err) == 'line[2] RuntimeError: add expects 2 argument(s) but got 1'


def test_calling_a_non_function():
    err = runtime_failure('let x = 1;\nx();')
    assert str(err) == 'line[2] RuntimeError: can only call functions, got int'


def test_fall_through_returns_nil():
    assert value_of('nil') is NIL
    _, interp = run('fn f() { let a = 1; } let r = f();')
    assert interp.globals.values['r'] is NIL


def test_closures_see_later_declarations_in_defining_scope():
    out, _ = run('{ fn show() { println later; } let later = "late"; show(); }')
    assert out == ['late']


def test_closure_keeps_captured_scope_alive():
    out, _ = run('fn adder(n) { fn add(x) { return x + n; } return add; }\n'
                 'let add2 = adder(2);\nprintln add2(40);')
    assert out == ['42']


def test_return_restores_scope_after_error():
    interp = Interpreter(out=io.StringIO())
    with pytest.raises(AliceError):
        interp.run(parse_program('fn f() { { let a = 1; println a + "x"; } } f();'))
    assert interp.environment is interp.globals


def test_unbounded_recursion():
    err = runtime_failure('fn loop(n) {\n  return loop(n + 1);\n}\nloop(0);')
    assert err.err.message == 'maximum call depth exceeded'
    assert err.line == 2


def test_float_printing():
    out, _ = run('println 3.0; println 0.5; println 1.0 / 3.0; println [1.0, 2.5];')
    assert out == ['3', '0.5', '0.3333333333333333', '[1.0, 2.5]']


def test_globals_persist_between_runs():
    interp = Interpreter(out=io.StringIO())
    interp.run(parse_program('let a = 40;'))
    interp.run(parse_program('a = a + 2; println a;'))
    assert interp.out.getvalue() == '42\n'


def test_run_program_prints_to_stdout(capsys):
    run_program('println "hi";')
    assert capsys.readouterr().out == 'hi\n'


def test_debug_trace(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    interp = Interpreter(out=io.StringIO(), debug_level=3, debug_file=str(debug_file))
    interp.run(parse_program('fn f(x) { return x; } let a = f(1); if a { }'))
    interp.close()
    trace = debug_file.read_text(encoding='utf-8')
    assert 'define function f' in trace
    assert 'call f(1)' in trace
    assert 'define a = 1' in trace
    assert 'if condition 1 -> True' in trace
    assert 'pop scope (depth 1): x' in trace
    assert 'run: done' in trace


def test_no_trace_without_debug_level(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    interp = Interpreter(out=io.StringIO())
    interp.run(parse_program('let a = 1;'))
    interp.close()
    assert not (tmp_path / 'debug.txt').exists()


def test_deeply_nested_value_is_a_runtime_error(shallow_stack):
    interp = Interpreter(out=io.StringIO())
    with pytest.raises(AliceError) as exc:
        interp.run(parse_program('let a = [];\nfor i in [0..3000] { a = [a]; }\nprintln a;'))
    assert str(exc.value) == 'line[3] RuntimeError: maximum nesting depth exceeded'
    assert interp.environment is interp.globals


def test_negative_zero_keeps_its_sign():
    out, _ = run('println -0.0; println 0.0; println [-0.0];')
    assert out == ['-0', '0', '[-0.0]']


def test_run_file(capsys):
    run_file('examples/program_1.alice')
    assert capsys.readouterr().out.strip() == 'Hello World!!'
