from alice.interpreter import parse_program, Interpreter


def test_program_3_blocks_and_shadowing(capsys):
    with open('examples/program_3.alice', 'rb') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ['inner', '1', 'changed', 'global']
    # the block-local binding is gone once the block closes
    assert interp.globals.names() == ['a']
