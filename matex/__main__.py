"""CLI entry point for the matex evaluator.

Usage:
    python -m matex [-v|-vv] [--max-depth N]              start the REPL
    python -m matex [-v|-vv] [--max-depth N] <program_file>
    python -m matex [-v...] --emit-ast <program_file>
    python -m matex [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --max-depth   Deepest expression nesting evaluated before giving up
  --emit-ast    Parse the given .matex file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. The value of the last statement of a
program is printed to stdout.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .ast import Program
from .ast_json import ast_to_obj, ast_from_obj
from .errors import MatexError
from .format import NormalFormatter
from .interpreter import DEFAULT_MAX_DEPTH, Runtime, reserve_stack
from .parser import parse_program
from .repl import run_repl
from .simplify import rearrange
from .values import Unit

DEBUG_HANDLER_NAME = 'matex-debug'


def configure_logging(verbosity: int, debug_file: str = 'debug.txt') -> Optional[logging.Handler]:
    """Send matex log records to `debug_file` when verbosity is above zero.

    `-v` logs statements, `-vv` and above also logs every operator and
    simplification step.
    """
    logger = logging.getLogger('matex')
    for handler in list(logger.handlers):
        if handler.get_name() == DEBUG_HANDLER_NAME:
            logger.removeHandler(handler)
            handler.close()
    if verbosity <= 0:
        logger.setLevel(logging.WARNING)
        return None
    handler = logging.FileHandler(debug_file, mode='w', encoding='utf-8')
    handler.set_name(DEBUG_HANDLER_NAME)
    handler.setFormatter(logging.Formatter('%(name)s %(levelname)s: %(message)s'))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbosity >= 2 else logging.INFO)
    return handler


def _read_file(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def _execute(program: Program, max_depth: int):
    runtime = Runtime(max_depth=max_depth)
    try:
        value = runtime.run(program)
    except MatexError as e:
        print(f"Runtime error: {e}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(value, Unit):
        print(NormalFormatter.format(rearrange(value)))


def _parse(source: str) -> Program:
    try:
        return parse_program(source)
    except MatexError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        sys.exit(1)


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(prog='matex', description="matex symbolic evaluator")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--max-depth', type=int, default=DEFAULT_MAX_DEPTH,
                        help='maximum expression nesting depth (default: %(default)s)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='MATEX_FILE', help='emit AST JSON for the given .matex file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='matex program file (.matex) to execute; omit for the REPL')
    args = parser.parse_args(argv)

    configure_logging(args.v)
    reserve_stack(args.max_depth)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        ast_program = _parse(_read_file(program_file))
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        data = json.loads(_read_file(ast_path))
        try:
            ast_program = ast_from_obj(data)
        except (TypeError, KeyError, ValueError) as e:
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(1)
        _execute(ast_program, args.max_depth)
        return

    if not args.program:
        run_repl(Runtime(max_depth=args.max_depth))
        return
    _execute(_parse(_read_file(Path(args.program))), args.max_depth)


if __name__ == '__main__':
    main()
