from alice.interpreter import parse_program, Interpreter


def test_program_10_strings_and_floats(capsys):
    with open('examples/program_10.alice', 'rb') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'roses\nare red\n\ndone\n0.30000000000000004\n0.25'
