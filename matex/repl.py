"""Interactive read-eval-print loop.

One `Runtime` lives for the whole session, so variables and functions
defined on one line are available on the next.
"""

import logging
import os
import sys
from typing import Callable, Optional, TextIO

# Readline support for history
try:
    import readline
    READLINE_AVAILABLE = True
except ImportError:
    READLINE_AVAILABLE = False

from .errors import MatexError
from .format import DebugFormatter, NormalFormatter
from .interpreter import Runtime
from .parser import parse_program, tokenize
from .simplify import rearrange

_logger = logging.getLogger(__name__)

PROMPT = 'matex > '
HISTORY_FILE = '~/.matex_history'

HELP = """Commands:
  :lexer <src>, :l <src>    show the tokens of <src>
  :parser <src>, :p <src>   show the AST of <src>
  :env                      show bound variables and functions
  :help, :h                 show this help
  :quit, :q                 leave the REPL"""


def setup_readline():
    if not READLINE_AVAILABLE:
        return
    history_file = os.path.expanduser(HISTORY_FILE)
    try:
        readline.read_history_file(history_file)
    except OSError:
        _logger.debug('no history file at %s', history_file)
    readline.set_history_length(1000)

    import atexit
    atexit.register(readline.write_history_file, history_file)


class Repl:
    def __init__(self, runtime: Optional[Runtime] = None, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.runtime = runtime if runtime is not None else Runtime()
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr

    def handle(self, line: str) -> bool:
        """Process one line of input. Returns False once the session should end."""
        line = line.strip()
        if not line:
            return True
        if line.startswith(':'):
            return self.command(line)
        try:
            value = self.runtime.run(parse_program(line))
        except MatexError as e:
            print(e, file=self.err)
            return True
        value = rearrange(value)
        print(f'u> {DebugFormatter.format(value)}', file=self.out)
        print(f'o> {NormalFormatter.format(value)}', file=self.out)
        return True

    def command(self, line: str) -> bool:
        name, _, arg = line.partition(' ')
        try:
            if name in (':quit', ':q'):
                return False
            if name in (':help', ':h'):
                print(HELP, file=self.out)
            elif name in (':lexer', ':l'):
                for token in tokenize(arg):
                    print(f'{token.type} {str(token)!r}', file=self.out)
            elif name in (':parser', ':p'):
                for statement in parse_program(arg).body:
                    print(statement, file=self.out)
            elif name == ':env':
                self.show_environment()
            else:
                print(f'unknown command {name}, try :help', file=self.err)
        except MatexError as e:
            print(e, file=self.err)
        return True

    def show_environment(self):
        scope = self.runtime.environment.current_scope
        for name, value in scope.variables.items():
            print(f'{name} = {NormalFormatter.format(rearrange(value))}', file=self.out)
        for function in scope.functions.values():
            print(repr(function), file=self.out)

    def run(self, read: Callable[[str], str] = input):
        if read is input:
            setup_readline()
        while True:
            try:
                line = read(PROMPT)
            except EOFError:
                print(file=self.out)
                break
            except KeyboardInterrupt:
                print(file=self.out)
                continue
            if not self.handle(line):
                break


def run_repl(runtime: Optional[Runtime] = None):
    Repl(runtime).run()
