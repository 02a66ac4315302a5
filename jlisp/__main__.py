"""
jlisp command line entry point.

Loads each file given on the command line, then evaluates and prints each
-e expression. There is no interactive prompt.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from jlisp import __version__
from jlisp.config import get_log_level
from jlisp.interpreter import Interpreter
from jlisp.types.value import Error


def create_arg_parser() -> argparse.ArgumentParser:
    """Create command line argument parser"""
    parser = argparse.ArgumentParser(
        prog='jlisp',
        description='Run jlisp programs',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  jlisp prelude.jl program.jl       Load files in order
  jlisp -e "(+ 1 2)"                Evaluate an expression and print it
  jlisp --extended -e "(range 3)"   Enable the extended builtin library
        """
    )
    parser.add_argument('files', nargs='*', help='source files to load, in order')
    parser.add_argument('-e', '--eval', dest='exprs', action='append', default=[],
                        metavar='EXPR', help='evaluate EXPR and print the result')
    parser.add_argument('--extended', action='store_true', default=None,
                        help='bind the extended builtin library')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = create_arg_parser().parse_args(argv)
    logging.basicConfig(level=get_log_level(), format='%(levelname)s %(name)s: %(message)s')

    interp = Interpreter(extended=args.extended)
    status = 0
    try:
        for path in args.files:
            result = interp.load(path)
            if isinstance(result, Error):
                print(result)
                status = 1
        for expr in args.exprs:
            result = interp.eval(expr, source_name='<eval>')
            print(result)
            if isinstance(result, Error):
                status = 1
    except RecursionError:
        print('error: maximum recursion depth exceeded', file=sys.stderr)
        return 2
    return status


if __name__ == '__main__':
    sys.exit(main())
