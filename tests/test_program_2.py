from alice.interpreter import parse_program, Interpreter


def test_program_2_arithmetic(capsys):
    with open('examples/program_2.alice', 'rb') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip().splitlines()
    # integer division truncates toward zero; integral floats print without a fraction
    assert out == ['3', '14', '20', '3', '3', '-3', '3.75', '6', 'foobar']
