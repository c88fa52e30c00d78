from alice.interpreter import parse_program, Interpreter


def test_program_7_closures(capsys):
    with open('examples/program_7.alice', 'rb') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip().splitlines()
    # each call to make_counter captures its own count
    assert out == ['3', '1', '<fn increment>']
