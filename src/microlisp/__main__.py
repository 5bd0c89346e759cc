"""Command-line entry point: evaluate a microlisp program file."""

import argparse
import logging
from logging.handlers import RotatingFileHandler
import sys
from typing import List

from microlisp.microlisp import MicroLisp
from microlisp.microlisp_error import MicroLispError


def setup_logging(log_file: str | None, verbose: bool) -> None:
    """Configure logging to a rotating file if one is given, otherwise to stderr."""
    handler: logging.Handler
    if log_file:
        # Keep up to 5 log files, max 1MB each
        handler = RotatingFileHandler(
            log_file,
            maxBytes=1024*1024,
            backupCount=4,
            encoding='utf-8'
        )

    else:
        handler = logging.StreamHandler(sys.stderr)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[handler],
        force=True
    )


def read_source(path: str) -> str:
    """Read program source from a file, or from stdin for '-'."""
    if path == '-':
        return sys.stdin.read()

    with open(path, encoding='utf-8') as f:
        return f.read()


def main(argv: List[str] | None = None) -> int:
    """Main entry point for the microlisp CLI."""
    parser = argparse.ArgumentParser(
        prog='microlisp',
        description='Evaluate a microlisp program',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Evaluate a file, printing the result of each top-level form
  microlisp program.lisp

  # Evaluate from stdin
  echo "(+ 1 2)" | microlisp -

  # Make lambdas see the scope they were defined in
  microlisp program.lisp --lexical
"""
    )
    parser.add_argument(
        'file',
        nargs='?',
        default='-',
        help='Program file (default: "-" for stdin)'
    )
    parser.add_argument(
        '--lexical',
        action='store_true',
        help='Function calls extend the defining scope rather than the caller\'s scope'
    )
    parser.add_argument(
        '--max-depth',
        type=int,
        default=200,
        help='Maximum evaluation depth (default: 200)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--log-file',
        help='Write log output to this file instead of stderr'
    )

    args = parser.parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    logger = logging.getLogger("MicroLispCLI")

    try:
        source = read_source(args.file)

    except OSError as e:
        print(f"microlisp: cannot read '{args.file}': {e.strerror}", file=sys.stderr)
        return 2

    interpreter = MicroLisp(max_depth=args.max_depth, lexical_scoping=args.lexical)

    try:
        forms = interpreter.parse_program(source)
        scope = interpreter.create_session_scope()
        for form in forms:
            result = interpreter.evaluator.evaluate(form, scope)
            print(interpreter.format_result(result), flush=True)

    except MicroLispError as e:
        logger.warning("Evaluation of '%s' failed: %s", args.file, e.message)
        print(str(e), file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
