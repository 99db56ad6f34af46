"""
Executes parsed Applesoft BASIC commands.

This module owns the runtime state of a session:

Classes:
    ProgramLine: One stored program line (original text and parsed command).
    ProgramStore: Sparse line-number -> ProgramLine table, iterated in ascending order.
    Interpreter: Runs commands against a variable environment and drives the RUN loop.
    BasicError: Raised for runtime failures (type mismatch, missing line, ...).

Functions:
    format_value(value): Render a runtime value the way PRINT shows it.

Runtime model:
    - Values are `float` or `str`; a variable may change kind between assignments.
    - Reading a variable that was never assigned yields 0 and binds it.
    - During RUN a program counter walks the line numbers that existed when RUN started.
      Each line may clear the advance flag (GOTO) to make the loop jump instead of
      stepping to the next stored line.
    - In a `multiple` line a failing statement stops the line when the statement that
      follows it parsed and is not an ONERR; otherwise execution carries on.

All output, including error messages, goes through the `on_output` callback.
"""

import logging
import math
import operator
from bisect import bisect_right
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from applesoft.applesoft_ast import ASTNode, CommandResult
from applesoft.applesoft_constants import operator_spelling
from applesoft.applesoft_parser import parse_line

logger = logging.getLogger(__name__)

Value = float | str

# GOSUB runs its target inline, so every level holds Python stack frames
MAX_GOSUB_DEPTH = 64


class BasicError(RuntimeError):
    """A runtime failure of a BASIC statement."""


def format_value(value: Value) -> str:
    """Render a value for PRINT: strings verbatim, whole numbers without a fraction."""
    if isinstance(value, str):
        return value
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def describe(value: Value) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    return format_value(value)


def _truth(flag: bool) -> float:
    return 1.0 if flag else 0.0


def _divide(left: float, right: float) -> float:
    if right == 0:
        raise BasicError("*** Division by zero")
    return left / right


def _modulo(left: float, right: float) -> float:
    if right == 0:
        raise BasicError("*** Division by zero")
    if math.isinf(left):
        raise BasicError(f"*** Overflow: cannot take modulus of {format_value(left)}")
    return math.fmod(left, right)


# operator name -> (verb for error messages, implementation); numbers only
NUMERIC_OPERATIONS: dict[str, tuple[str, Callable[[float, float], float]]] = {
    "SUB": ("subtract", operator.sub),
    "MULT": ("multiply", operator.mul),
    "DIV": ("divide", _divide),
    "MOD": ("take modulus of", _modulo),
    "LT": ("compare", lambda a, b: _truth(a < b)),
    "LE": ("compare", lambda a, b: _truth(a <= b)),
    "GT": ("compare", lambda a, b: _truth(a > b)),
    "GE": ("compare", lambda a, b: _truth(a >= b)),
    "AND": ("combine", lambda a, b: _truth(a > 0 and b > 0)),
    "OR": ("combine", lambda a, b: _truth(a > 0 or b > 0)),
}


class ProgramLine:
    """A stored program line.

    Attributes:
        original (str): The source text as entered, echoed by LIST.
        command (ASTNode): The parsed command run by RUN and GOSUB.
    """

    def __init__(self, original: str, command: ASTNode):
        self.original = original
        self.command = command

    def __repr__(self) -> str:
        return f"ProgramLine({self.original!r})"


class ProgramStore:
    """Line-number indexed program memory.

    Storing to an existing line number replaces it. Iteration always yields lines in
    ascending line-number order, independent of the order they were stored in.
    """

    def __init__(self) -> None:
        self._lines: dict[int, ProgramLine] = {}

    def store(self, number: int, original: str, command: ASTNode) -> None:
        self._lines[number] = ProgramLine(original, command)

    def get(self, number: int) -> ProgramLine | None:
        return self._lines.get(number)

    def line_numbers(self, start: int = 0) -> list[int]:
        """Sorted line numbers greater than or equal to `start`."""
        return sorted(n for n in self._lines if n >= start)

    def __contains__(self, number: Any) -> bool:
        return number in self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[tuple[int, ProgramLine]]:
        for number in self.line_numbers():
            yield number, self._lines[number]


class Interpreter:
    """Executes BASIC commands for one session.

    Args:
        on_output: Called once per line of output (PRINT, LIST, error messages).
        on_load_requested: Called by LOAD; returns the source lines to feed back in.

    Attributes:
        variables (dict[str, Value]): The variable environment.
        program (ProgramStore): The stored program.
        pc (int): Program counter, meaningful while a RUN loop is active.
        advance (bool): Whether the RUN loop steps to the next line after the current one.
        running (bool): True while a RUN loop is active.
        gosub_depth (int): Number of GOSUB targets currently executing.
    """

    def __init__(
        self,
        on_output: Callable[[str], None] | None = None,
        on_load_requested: Callable[[], Iterable[str]] | None = None,
    ) -> None:
        self.on_output = on_output
        self.on_load_requested = on_load_requested
        self.variables: dict[str, Value] = {}
        self.program = ProgramStore()
        self.pc = -1
        self.advance = True
        self.running = False
        self.gosub_depth = 0

    def emit(self, text: str) -> None:
        if self.on_output is not None:
            self.on_output(text)

    def interpret_line(self, line: str) -> str | None:
        """Tokenize, parse and execute one line of source text."""
        return self.interpret_command(parse_line(line))

    def interpret_command(self, result: CommandResult) -> str | None:
        """Execute a parsed line.

        Parse errors are reported and nothing runs. Runtime errors are reported unless the
        command is a `multiple`, whose statements report their own failures.

        Returns:
            str | None: The error message, or None on success.
        """
        if result.command is None:
            error = str(result.error)
            self.emit(error)
            return error

        try:
            self.execute(result.command, result.original)
        except BasicError as e:
            if result.command.kind != "multiple":
                self.emit(str(e))
            return str(e)
        return None

    def execute(self, command: ASTNode, original: str) -> None:
        """Dispatch a command node to its `exec_*` method."""
        method = getattr(self, f"exec_{command.kind}", None)
        if method is None:
            raise NotImplementedError(f"No executor for command kind: {command.kind}")
        method(command, original)

    def exec_print(self, command: ASTNode, original: str) -> None:
        self.emit(format_value(self.evaluate(command.children[0])))

    def exec_assign(self, command: ASTNode, original: str) -> None:
        self.variables[command.value] = self.evaluate(command.children[0])

    def exec_store(self, command: ASTNode, original: str) -> None:
        logger.debug("Storing line %d", command.value)
        self.program.store(command.value, original, command.children[0])

    def exec_run(self, command: ASTNode, original: str) -> None:
        self.run_program(command.value)

    def exec_list(self, command: ASTNode, original: str) -> None:
        for _, line in self.program:
            self.emit(line.original)

    def exec_goto(self, command: ASTNode, original: str) -> None:
        logger.debug("GOTO %d", command.value)
        self.pc = command.value
        self.advance = False

    def exec_gosub(self, command: ASTNode, original: str) -> None:
        # Runs the target line in place; there is no return stack yet
        line = self.program.get(command.value)
        if line is None:
            raise BasicError(f"*** No such line in memory: {command.value}")
        if self.gosub_depth >= MAX_GOSUB_DEPTH:
            raise BasicError(f"*** Too many nested GOSUB (limit {MAX_GOSUB_DEPTH})")
        logger.debug("GOSUB %d", command.value)
        self.gosub_depth += 1
        try:
            self.execute(line.command, line.original)
        finally:
            self.gosub_depth -= 1

    def exec_if(self, command: ASTNode, original: str) -> None:
        condition = self.evaluate(command.children[0])
        if isinstance(condition, str):
            raise BasicError("*** Cannot evaluate condition of non-numeric type")
        then: CommandResult = command.value
        if condition > 0 and then.command is not None:
            self.execute(then.command, then.original)

    def exec_onerr(self, command: ASTNode, original: str) -> None:
        self.execute(command.children[0], original)

    def exec_multiple(self, command: ASTNode, original: str) -> None:
        results: list[CommandResult] = command.value
        for index, result in enumerate(results):
            error = self.interpret_command(result)
            if error is None:
                continue
            following = results[index + 1] if index + 1 < len(results) else None
            # only a successfully parsed statement other than ONERR stops the line
            if (
                following is not None
                and following.command is not None
                and following.command.kind != "onerr"
            ):
                raise BasicError(error)
            logger.debug("Suppressed error, line continues: %s", error)

    def exec_return(self, command: ASTNode, original: str) -> None:
        raise BasicError("*** Command 'RETURN' not implemented")

    def exec_pop(self, command: ASTNode, original: str) -> None:
        raise BasicError("*** Command 'POP' not implemented")

    def exec_rem(self, command: ASTNode, original: str) -> None:
        pass

    def exec_load(self, command: ASTNode, original: str) -> None:
        if self.on_load_requested is None:
            logger.info("LOAD ignored: no program source available")
            return
        lines = [text.rstrip("\r\n") for text in self.on_load_requested()]
        logger.debug("Loading %d lines", len(lines))
        for text in lines:
            if text.strip():
                self.interpret_line(text)

    def run_program(self, start: int = 0) -> None:
        """Run the stored program from the first line numbered `start` or above."""
        if self.running:
            raise BasicError("*** Cannot RUN while a program is running")
        numbers = self.program.line_numbers(start)
        if not numbers:
            raise BasicError(f"*** No such line in memory: {start}")

        logger.debug("RUN from line %d (%d lines)", numbers[0], len(numbers))
        self.running = True
        self.pc = numbers[0]
        try:
            while True:
                line = self.program.get(self.pc)
                if line is None:
                    raise BasicError(f"*** No such line in memory: {self.pc}")
                current = self.pc
                self.advance = True
                try:
                    self.execute(line.command, line.original)
                except BasicError as e:
                    raise BasicError(f"*** Error on line {current} *** {e}") from e
                if self.advance:
                    following = bisect_right(numbers, current)
                    if following >= len(numbers):
                        break
                    self.pc = numbers[following]
        finally:
            self.running = False
        logger.debug("Program ended at line %d", self.pc)

    def evaluate(self, node: ASTNode) -> Value:
        """Evaluate an expression tree to a float or str.

        Raises:
            BasicError: On a type mismatch, a division by zero, or a tree nested too
                deeply for the Python stack (for example thousands of unary minus signs).
        """
        try:
            return self.evaluate_node(node)
        except RecursionError:
            raise BasicError("*** Expression too deeply nested") from None

    def evaluate_node(self, node: ASTNode) -> Value:
        if node.kind == "number":
            return float(node.value)
        if node.kind == "string":
            return str(node.value)
        if node.kind == "identifier":
            return self.variables.setdefault(node.value, 0.0)
        if node.kind == "unary":
            return self.apply_unary(node.value, self.evaluate_node(node.children[0]))
        if node.kind == "binary":
            left = self.evaluate_node(node.children[0])
            right = self.evaluate_node(node.children[1])
            return self.apply_binary(node.value, left, right)
        raise NotImplementedError(f"No evaluator for expression kind: {node.kind}")

    def apply_unary(self, op: str, value: Value) -> Value:
        if isinstance(value, str):
            verb = "negate" if op == "NEG" else "NOT"
            raise BasicError(f"*** Can not {verb} string '{value}'")
        if op == "NEG":
            return -value
        return _truth(not value > 0)

    def apply_binary(self, op: str, left: Value, right: Value) -> Value:
        if op == "PLUS":
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise BasicError(
                f"*** Type mismatch: cannot add {describe(left)} to {describe(right)}"
            )
        if op in ("EQ", "NE"):
            if type(left) is not type(right):
                raise BasicError(
                    f"*** Type mismatch: cannot compare {describe(left)} "
                    f"{operator_spelling[op]} {describe(right)}"
                )
            return _truth((left == right) == (op == "EQ"))

        verb, operation = NUMERIC_OPERATIONS[op]
        if isinstance(left, str) or isinstance(right, str):
            raise BasicError(
                f"*** Type mismatch: cannot {verb} {describe(left)} "
                f"{operator_spelling[op]} {describe(right)}"
            )
        return operation(left, right)


__all__ = [
    "BasicError",
    "Interpreter",
    "ProgramLine",
    "ProgramStore",
    "Value",
    "format_value",
]
