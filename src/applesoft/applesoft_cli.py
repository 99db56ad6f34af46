"""
Applesoft CLI Entrypoint.

This module provides the command-line interface for running Applesoft BASIC programs.

Features:
    - Load a program from a file or from an inline string.
    - Run it, list it, or both.
    - Drop into the interactive REPL, optionally with a program already loaded.
    - Verbose mode logs interpreter activity through rich.

Example usage:
    applesoft hello.bas
    applesoft -s '10 PRINT "HI"'
    applesoft game.bas --no-run --list
    applesoft game.bas --repl --verbose

Functions:
    configure_logging(verbose: bool = False) -> logging.Logger:
        Attach a stderr RichHandler to the package logger.

    run_basic(source: str, is_string: bool = False, run: bool = True,
              list_program: bool = False, interpreter: Interpreter | None = None) -> Interpreter:
        Feed every source line through the interpreter, then optionally LIST and RUN.

    main(argv: list[str] | None = None) -> None:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from applesoft.applesoft_interpreter import Interpreter
from applesoft.applesoft_repl import make_interpreter, read_program, start_repl

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Send package log records to stderr through rich; DEBUG when verbose, WARNING otherwise."""
    package_logger = logging.getLogger("applesoft")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # Remove old handlers to avoid duplicates
    package_logger.handlers.clear()
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=verbose,
        log_time_format="[%X]",
    )
    package_logger.addHandler(handler)
    return package_logger


def run_basic(
    source: str,
    is_string: bool = False,
    run: bool = True,
    list_program: bool = False,
    interpreter: Interpreter | None = None,
) -> Interpreter:
    """
    Load a BASIC program into an interpreter and optionally list and run it.

    Args:
        source (str): Program text (with `is_string`) or a path to a source file.
        is_string (bool): Treat `source` as program text instead of a path.
        run (bool): Execute `RUN` after loading. Defaults to True.
        list_program (bool): Execute `LIST` after loading. Defaults to False.
        interpreter (Interpreter | None): Interpreter to load into; a new one wired to
            stdout is created when omitted.

    Returns:
        Interpreter: The interpreter holding the loaded program.

    Raises:
        OSError: If the source file cannot be read.
    """
    lines = source.splitlines() if is_string else read_program(source)
    if interpreter is None:
        interpreter = make_interpreter()

    logger.debug("Loading %d lines", len(lines))
    for line in lines:
        if line.strip():
            interpreter.interpret_line(line)

    if list_program:
        interpreter.interpret_line("LIST")
    if run:
        try:
            interpreter.interpret_line("RUN")
        except KeyboardInterrupt:
            print("BREAK")
    return interpreter


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the Applesoft CLI.

    - Launches the REPL when no arguments are passed or `--repl` is specified.
    - Otherwise loads the program and runs it.

    Supported flags:
        - `-s`, `--string`: Interpret source as program text instead of a file path.
        - `--no-run`: Load the program without running it.
        - `-l`, `--list`: LIST the program after loading.
        - `--repl`: Enter the REPL after loading.
        - `-v`, `--verbose`: Log interpreter activity at DEBUG level.
    """
    parser = argparse.ArgumentParser(prog="applesoft")
    parser.add_argument("source", nargs="?", help="Program file or text (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as program text"
    )
    parser.add_argument(
        "--no-run", dest="run", action="store_false", help="Load without running"
    )
    parser.add_argument(
        "-l",
        "--list",
        dest="list_program",
        action="store_true",
        help="LIST the program after loading",
    )
    parser.add_argument(
        "--repl", action="store_true", help="Enter the REPL after loading"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose logging"
    )

    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.verbose)

    interpreter = make_interpreter()
    if args.source is not None:
        try:
            run_basic(
                source=args.source,
                is_string=args.string,
                run=args.run and not args.repl,
                list_program=args.list_program,
                interpreter=interpreter,
            )
        except OSError as e:
            parser.error(f"cannot read {args.source}: {e.strerror or e}")

    if args.repl or args.source is None:
        start_repl(interpreter)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
