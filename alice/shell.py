"""Handles interactive mode for the Alice interpreter. Uses cmd as backend."""

import cmd
import sys
from typing import Callable, List

from .errors import AliceError, ScanError
from .interpreter import Interpreter
from .parser import parse_program


class Shell(cmd.Cmd):
    """Alice interpreter shell.

    Every line is scanned, parsed and run against one interpreter, so
    variables and functions defined on earlier lines stay visible. An
    error only abandons the line that caused it.
    """
    intro = "Alice interpreter\nType 'exit' or press Ctrl-D to quit."
    prompt = "> "

    def __init__(self, interpreter: Interpreter, parse: Callable[[str], List] = parse_program,
                 *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.interpreter = interpreter
        self.parse = parse

    def onecmd(self, line):
        """Runs `line` as Alice code unless it is exactly a shell command."""
        line = line.strip()
        if line == 'exit':
            return self.do_exit('')
        if line == 'EOF':
            return self.do_EOF('')
        if not line:
            return self.emptyline()
        return self.default(line)

    def default(self, line):
        """Executes an arbitrary line of Alice code."""
        try:
            statements = self.parse(line)
            self.interpreter.run(statements)
        except ScanError as e:
            for err in e.errors:
                print(err, file=sys.stderr)
        except AliceError as e:
            print(e, file=sys.stderr)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
