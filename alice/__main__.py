"""CLI entry point for the Alice interpreter.

Usage:
    python -m alice [-v|-vv|-vvv] [--parser descent|grammar] <program_file>
    python -m alice [-v...] [--parser ...]
    python -m alice --tokens <program_file>
    python -m alice [--parser ...] --emit-ast <program_file>
    python -m alice [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --parser      Front end used to parse source: the hand-written
                recursive-descent parser (default) or the Lark grammar
  --tokens      Print the token stream of the given .alice file
  --emit-ast    Parse the given .alice file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Without a program file an interactive shell is started. Debug
information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Callable, Dict, List

from . import grammar, parser as descent
from .ast_json import program_from_obj, program_to_obj
from .errors import AliceError, ScanError
from .interpreter import Interpreter
from .scanner import tokenize
from .shell import Shell

PARSERS: Dict[str, Callable[[bytes], List]] = {
    'descent': descent.parse_program,
    'grammar': grammar.parse_program,
}

# Each Alice call nests several Python frames
RECURSION_LIMIT = 10000


def read_source(program_file: Path) -> bytes:
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'rb') as f:
        return f.read()


def report(e: AliceError) -> None:
    if isinstance(e, ScanError):
        for err in e.errors:
            print(err, file=sys.stderr)
    else:
        print(e, file=sys.stderr)


def parse_or_exit(parse: Callable[[bytes], List], source: bytes) -> List:
    try:
        return parse(source)
    except AliceError as e:
        report(e)
        sys.exit(1)


def execute(statements: List, debug_level: int) -> None:
    interpreter = Interpreter(debug_level=debug_level)
    try:
        interpreter.run(statements)
    except AliceError as e:
        report(e)
        sys.exit(1)
    finally:
        interpreter.close()


def print_tokens(source: bytes) -> None:
    try:
        tokens = tokenize(source)
    except ScanError as e:
        report(e)
        sys.exit(1)
    for token in tokens:
        print(f"{token.line:>4}  {token.type.name:<14} {token}")


def main(argv: List[str] = None) -> None:
    arg_parser = argparse.ArgumentParser(prog='alice', description="Alice language interpreter")
    arg_parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    arg_parser.add_argument('--parser', choices=sorted(PARSERS), default='descent',
                            help='front end used to parse source code (default: descent)')
    group = arg_parser.add_mutually_exclusive_group()
    group.add_argument('--tokens', metavar='ALICE_FILE', help='print the token stream of the given .alice file')
    group.add_argument('--emit-ast', metavar='ALICE_FILE', help='emit AST JSON for the given .alice file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    arg_parser.add_argument('program', nargs='?', help='Alice program file (.alice) to execute')
    args = arg_parser.parse_args(argv)

    parse = PARSERS[args.parser]
    sys.setrecursionlimit(max(sys.getrecursionlimit(), RECURSION_LIMIT))

    # Token dump mode
    if args.tokens:
        print_tokens(read_source(Path(args.tokens)))
        return

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        statements = parse_or_exit(parse, read_source(program_file))
        out_path = program_file.with_name(program_file.name + '.ast.json')
        try:
            text = json.dumps(program_to_obj(statements), ensure_ascii=False, indent=2)
        except RecursionError:
            print(f"Error: {program_file} is nested too deeply to emit", file=sys.stderr)
            sys.exit(1)
        with open(out_path, 'w', encoding='utf-8') as out:
            out.write(text)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            try:
                statements = program_from_obj(json.load(f))
            except AliceError as e:
                report(e)
                sys.exit(1)
            except (ValueError, TypeError, KeyError, RecursionError) as e:
                print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
                sys.exit(1)
        execute(statements, args.v)
        return

    # Interactive mode
    if not args.program:
        interpreter = Interpreter(debug_level=args.v)
        try:
            Shell(interpreter, parse).cmdloop()
        finally:
            interpreter.close()
        return

    # Default: execute source file
    statements = parse_or_exit(parse, read_source(Path(args.program)))
    execute(statements, args.v)


if __name__ == '__main__':
    main()
