from alice.interpreter import parse_program, Interpreter


def test_program_9_short_circuit(capsys):
    with open('examples/program_9.alice', 'rb') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['false', 'true', 'fallback', '2', 'evaluated', 'right']
