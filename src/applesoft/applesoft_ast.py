"""
Defines the syntax tree structures shared by the parsers and the interpreter.

Classes:
    ASTNode:
        One node of an expression tree or a parsed command. The `kind` string selects the
        variant; `value` and `children` carry its payload.

    CommandResult:
        The outcome of parsing one source line: the original text paired with either a
        command node or an error message. Parse errors travel as data, never as exceptions.

Expression kinds:
    number      value=float
    string      value=str
    identifier  value=variable name
    unary       value=operator name (NEG, NOT), children=[operand]
    binary      value=operator name (PLUS, LT, ...), children=[left, right]

Command kinds:
    print       children=[expression]
    assign      value=variable name, children=[expression]
    store       value=line number, children=[command]
    run         value=first line to run (0 = from the start)
    goto        value=target line
    gosub       value=target line
    if          value=CommandResult for the THEN part, children=[condition]
    onerr       children=[command]
    multiple    value=list[CommandResult] in execution order
    return, pop, rem, list, load   no payload

Example:
    node = ASTNode("binary", "PLUS", [ASTNode("number", 2.0), ASTNode("number", 3.0)])
"""

from typing import Any

EXPRESSION_KINDS = frozenset({"number", "string", "identifier", "unary", "binary"})


class ASTNode:
    """
    A node in an expression tree or a parsed BASIC command.

    Args:
        kind (str): The node variant (see module docstring).
        value (Any, optional): Literal value, name, operator, line number or nested result.
        children (list[ASTNode], optional): Child nodes.

    Nodes are treated as immutable once the parser has built them.
    """

    def __init__(
        self,
        kind: str,
        value: Any = None,
        children: list["ASTNode"] | None = None,
    ):
        self.kind = kind
        self.value = value
        self.children: list["ASTNode"] = children or []

    def __repr__(self) -> str:
        parts = [f"{self.kind}"]
        if self.value is not None:
            parts.append(f"value={self.value!r}")
        if self.children:
            parts.append(f"children={self.children!r}")
        return f"ASTNode({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ASTNode):
            return False
        return (
            self.kind == other.kind
            and self.value == other.value
            and self.children == other.children
        )

    def is_expression(self) -> bool:
        return self.kind in EXPRESSION_KINDS


class CommandResult:
    """
    Pairs the original source text of a line with its parse outcome.

    Exactly one of `command` and `error` is set.

    Attributes:
        original (str): The full source line as entered.
        command (ASTNode | None): The parsed command, when parsing succeeded.
        error (str | None): A descriptive message, when parsing failed.
    """

    def __init__(
        self,
        original: str,
        command: ASTNode | None = None,
        error: str | None = None,
    ):
        if (command is None) == (error is None):
            raise ValueError("CommandResult needs exactly one of command or error")
        self.original = original
        self.command = command
        self.error = error

    @property
    def ok(self) -> bool:
        return self.command is not None

    def __repr__(self) -> str:
        if self.command is not None:
            return f"CommandResult({self.original!r}, command={self.command!r})"
        return f"CommandResult({self.original!r}, error={self.error!r})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, CommandResult)
            and self.original == other.original
            and self.command == other.command
            and self.error == other.error
        )


__all__ = ["ASTNode", "CommandResult", "EXPRESSION_KINDS"]
