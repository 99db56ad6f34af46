"""
Interactive `]` prompt for the Applesoft BASIC interpreter.

Each entered line goes through the normal pipeline (tokenize -> parse -> execute). Output
and error messages are printed to stdout. `LOAD` asks for a file name and feeds the file's
lines back into the interpreter.

Functions:
    read_program(path): Read a BASIC source file into a list of lines.
    prompt_for_program(): LOAD callback that asks the user for a file.
    make_interpreter(): Build an interpreter wired to stdout and the LOAD prompt.
    start_repl(interpreter): Run the read-eval-print loop until exit/quit/EOF.
"""

import logging

from applesoft.applesoft_interpreter import Interpreter

logger = logging.getLogger(__name__)

PROMPT = "]"


def read_program(path: str) -> list[str]:
    """Return the lines of a BASIC source file, without line endings."""
    with open(path, encoding="utf-8") as f:
        return f.read().splitlines()


def prompt_for_program() -> list[str]:
    path = input("FILE? ").strip().strip('"')
    if not path:
        return []
    try:
        lines = read_program(path)
    except OSError as e:
        print(f"*** Cannot load {path}: {e.strerror or e}")
        return []
    logger.debug("Read %d lines from %s", len(lines), path)
    return lines


def make_interpreter() -> Interpreter:
    return Interpreter(on_output=print, on_load_requested=prompt_for_program)


def start_repl(interpreter: Interpreter | None = None) -> None:
    print("Applesoft BASIC REPL. Type 'exit' or 'quit' to leave.")
    if interpreter is None:
        interpreter = make_interpreter()

    while True:
        try:
            line = input(PROMPT)
        except (KeyboardInterrupt, EOFError):
            print("\nExiting Applesoft REPL.")
            break
        if line.strip() in ("exit", "quit"):
            print("Exiting Applesoft REPL.")
            return
        if not line.strip():
            continue
        try:
            interpreter.interpret_line(line)
        except KeyboardInterrupt:
            # Ctrl-C stops a runaway RUN without leaving the session
            print("BREAK")


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
