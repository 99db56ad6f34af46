"""
Applesoft BASIC Statement Parser

Parses the token list of one source line into a `CommandResult`: the original text paired
with either a command node (`ASTNode`) or an error message.

Supported Statements
--------------------
- Line storage:   `10 PRINT "HI"` stores the rest of the line under line 10
- Sequencing:     `A = 1 : PRINT A` runs several statements from one line
- Output:         `PRINT expr`, `? expr`
- Assignment:     `LET A = expr`, `A = expr`
- Program:        `RUN [line]`, `LIST`, `LOAD`
- Control flow:   `GOTO line`, `GOSUB line`, `RETURN`, `POP`, `IF expr THEN statement`
- Recovery:       `ONERR statement`
- Comments:       `REM anything`

Parser Behavior
---------------
- A leading line number is recognized first, so every statement of a numbered line is
  stored together.
- The first `:` splits the line; each side is parsed on its own and the results are
  collected, in order, in one `multiple` command.
- Inside the parser malformed input raises `SyntaxError`; `Parser.parse()` turns it into
  `CommandResult.error`, so callers never see an exception.

Entry Points
------------
- `parse_line(line)`: tokenize and parse one line of source text.
- `Parser(original).parse(tokens)`: parse an already tokenized line.
"""

from __future__ import annotations

from collections.abc import Callable

from applesoft.applesoft_ast import ASTNode, CommandResult
from applesoft.applesoft_constants import EOL, IDENT, ILLEGAL, KEYWORD, NUMBER
from applesoft.applesoft_expr import parse_expression
from applesoft.applesoft_lexer import Token, tokenize_line

THEN_KEYWORDS = ("THEN", "TH")


class Parser:
    """
    Applesoft statement parser.

    Attributes
    ----------
    original : str
        The full source text of the line; every CommandResult produced carries it.
    statements : dict[str, Callable[[list[Token]], ASTNode]]
        Keyword -> parse method for keyword-led statements.
    """

    def __init__(self, original: str) -> None:
        self.original = original
        self.statements: dict[str, Callable[[list[Token]], ASTNode]] = {
            "PRINT": self.parse_print,
            "?": self.parse_print,
            "REM": self.parse_rem,
            "LET": self.parse_let,
            "RUN": self.parse_run,
            "LIST": self.parse_list,
            "GOTO": self.parse_goto,
            "GOSUB": self.parse_gosub,
            "RETURN": self.parse_return,
            "POP": self.parse_pop,
            "IF": self.parse_if,
            "ONERR": self.parse_onerr,
            "LOAD": self.parse_load,
        }

    def parse(self, tokens: list[Token]) -> CommandResult:
        """Parse a token list into a CommandResult. Never raises."""
        try:
            command = self.parse_command([t for t in tokens if t.type != EOL])
        except SyntaxError as e:
            return CommandResult(self.original, error=str(e))
        return CommandResult(self.original, command=command)

    def parse_command(self, tokens: list[Token]) -> ASTNode:
        """Parse one (possibly compound) statement, raising SyntaxError on failure."""
        if not tokens:
            raise SyntaxError(f"*** No valid tokens ***\n\t original: {self.original}")

        head = tokens[0]
        if head.is_keyword("REM"):
            return self.parse_rem(tokens)
        if head.type == NUMBER:
            return self.parse_store(tokens)

        colon = next(
            (i for i, tok in enumerate(tokens) if tok.is_operator(":")), None
        )
        if colon is not None:
            return self.parse_multiple(tokens[:colon], tokens[colon + 1 :])

        # the lexer stops at an illegal token, so it can only be the last one
        if tokens[-1].type == ILLEGAL:
            raise SyntaxError(f"*** Illegal token: {tokens[-1].value} ***")

        if head.type == KEYWORD:
            handler = self.statements.get(str(head.value))
            if handler is None:
                raise SyntaxError(f"*** Unsupported command: {head.value}")
            return handler(tokens)
        if head.type == IDENT:
            return self.parse_assignment(tokens)
        raise SyntaxError(f"*** Not a keyword: {head}")

    def parse_store(self, tokens: list[Token]) -> ASTNode:
        line = self.line_number(tokens[0])
        inner = self.parse(tokens[1:])
        if inner.command is None:
            raise SyntaxError(inner.error)
        return ASTNode("store", line, [inner.command])

    def parse_multiple(self, head: list[Token], tail: list[Token]) -> ASTNode:
        """Parse both sides of a `:` and flatten the tail into one ordered list."""
        results = [self.parse(head)]
        rest = self.parse(tail)
        if rest.command is not None and rest.command.kind == "multiple":
            results.extend(rest.command.value)
        else:
            results.append(rest)
        return ASTNode("multiple", results)

    def line_number(self, tok: Token) -> int:
        if tok.type != NUMBER:
            raise SyntaxError(f"*** Expected a line number, got {tok} ***")
        value = float(tok.value)
        if not value.is_integer() or value <= 0:
            raise SyntaxError(f"*** Invalid line number: {tok.value} ***")
        return int(value)

    def parse_print(self, tokens: list[Token]) -> ASTNode:
        try:
            expr = parse_expression(tokens[1:])
        except SyntaxError as e:
            raise SyntaxError(f"*** Print error: ***\n\t{e}") from e
        return ASTNode("print", children=[expr])

    def parse_rem(self, tokens: list[Token]) -> ASTNode:
        return ASTNode("rem")

    def parse_let(self, tokens: list[Token]) -> ASTNode:
        return self.parse_assignment(tokens[1:])

    def parse_assignment(self, tokens: list[Token]) -> ASTNode:
        """Parse `identifier = expression`."""
        if len(tokens) < 3:
            raise SyntaxError(f"*** Not enough tokens in assignment: {tokens} ***")
        head = tokens[0]
        if head.type != IDENT:
            raise SyntaxError(f"*** {head} is not a valid identifier ***")
        if not tokens[1].is_operator("="):
            raise SyntaxError(f"*** No equal sign in assignment to {head.value} ***")
        return ASTNode("assign", head.value, [parse_expression(tokens[2:])])

    def parse_run(self, tokens: list[Token]) -> ASTNode:
        if len(tokens) == 1:
            return ASTNode("run", 0)
        if len(tokens) > 2:
            raise SyntaxError("*** RUN takes at most one line number ***")
        return ASTNode("run", self.line_number(tokens[1]))

    def parse_list(self, tokens: list[Token]) -> ASTNode:
        return ASTNode("list")

    def parse_jump(self, tokens: list[Token], kind: str) -> ASTNode:
        if len(tokens) != 2:
            raise SyntaxError(f"*** {tokens[0].value} needs exactly one line number ***")
        return ASTNode(kind, self.line_number(tokens[1]))

    def parse_goto(self, tokens: list[Token]) -> ASTNode:
        return self.parse_jump(tokens, "goto")

    def parse_gosub(self, tokens: list[Token]) -> ASTNode:
        return self.parse_jump(tokens, "gosub")

    def parse_return(self, tokens: list[Token]) -> ASTNode:
        return ASTNode("return")

    def parse_pop(self, tokens: list[Token]) -> ASTNode:
        return ASTNode("pop")

    def parse_if(self, tokens: list[Token]) -> ASTNode:
        """Parse `IF condition THEN statement`."""
        then_index = next(
            (i for i, tok in enumerate(tokens) if tok.is_keyword(*THEN_KEYWORDS)),
            None,
        )
        if then_index is None:
            raise SyntaxError(f"*** IF without THEN ***\n\t original: {self.original}")
        try:
            condition = parse_expression(tokens[1:then_index])
        except SyntaxError as e:
            raise SyntaxError(
                f"*** No valid expression ***\n\t{e}\n\t original: {self.original}"
            ) from e
        then = self.parse(tokens[then_index + 1 :])
        if then.command is None:
            raise SyntaxError(
                f"*** No valid statement after THEN ***\n\t{then.error}\n\t original: {self.original}"
            )
        return ASTNode("if", then, [condition])

    def parse_onerr(self, tokens: list[Token]) -> ASTNode:
        inner = self.parse(tokens[1:])
        if inner.command is None:
            raise SyntaxError(inner.error)
        return ASTNode("onerr", children=[inner.command])

    def parse_load(self, tokens: list[Token]) -> ASTNode:
        return ASTNode("load")


def parse_line(line: str) -> CommandResult:
    """Tokenize and parse one line of BASIC source."""
    try:
        return Parser(line).parse(tokenize_line(line))
    except RecursionError:
        # each `:`, THEN and ONERR nests one more parse call
        return CommandResult(line, error="*** Line too deeply nested ***")


__all__ = ["Parser", "parse_line"]
