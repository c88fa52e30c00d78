import io
import json

import pytest

from alice.ast_json import program_from_obj, program_to_obj
from alice.errors import AliceError
from alice.interpreter import Interpreter
from alice.parser import parse_program


def test_emitted_program_runs_the_same(capsys):
    with open('examples/program_7.alice', 'rb') as f:
        source = f.read()
    statements = parse_program(source)
    data = json.loads(json.dumps(program_to_obj(statements)))
    loaded = program_from_obj(data)
    assert loaded == statements
    Interpreter().run(loaded)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['3', '1', '<fn increment>']


def test_literal_payloads_survive():
    statements = parse_program('println [nil, true, 1, 1.0, "s"];')
    data = program_to_obj(statements)
    assert data['type'] == 'Program'
    out = io.StringIO()
    Interpreter(out=out).run(program_from_obj(json.loads(json.dumps(data))))
    assert out.getvalue() == '[nil, true, 1, 1.0, "s"]\n'


def test_lines_are_kept_for_runtime_errors():
    statements = parse_program('let a = 1;\n\nprintln a + "b";')
    loaded = program_from_obj(json.loads(json.dumps(program_to_obj(statements))))
    with pytest.raises(AliceError) as exc:
        Interpreter(out=io.StringIO()).run(loaded)
    assert exc.value.line == 3


def test_rejects_non_program():
    with pytest.raises(ValueError):
        program_from_obj({'type': 'Block', 'statements': []})


def test_rejects_unknown_node():
    with pytest.raises(ValueError):
        program_from_obj({'type': 'Program', 'body': [{'type': 'Goto'}]})


def test_rejects_top_level_return():
    obj = {
        'type': 'Program',
        'body': [{
            'type': 'Return',
            'keyword': {'__type__': 'Token', 'type': 'RETURN', 'lexeme': None, 'literal': None, 'line': 4},
            'value': None,
        }],
    }
    with pytest.raises(AliceError) as exc:
        program_from_obj(obj)
    assert str(exc.value) == 'line[4] ParseError: cannot return from top-level code'
