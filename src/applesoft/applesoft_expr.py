"""
Infix expression parser for Applesoft-style BASIC.

Turns a token slice (no leading keyword) into an `ASTNode` expression tree in two passes:

1. Shunting-yard: infix tokens are reordered into reverse Polish notation using an operator
   stack. An operator is unary when it is the first token or directly follows another
   operator other than `)`. Unary operators are pushed without comparing precedence;
   binary operators first pop every stacked operator that binds at least as tightly
   (left associative).
2. RPN reduction: the postfix queue is folded into a tree on an expression stack. A unary
   operator wraps the latest expression; a binary operator pops its right operand first,
   then its left one.

Precedence (higher binds tighter):
    unary minus 7, * / 6, + - 5, MOD 4, = < <= > >= <> 3, AND OR 2, NOT 1

Raises:
    SyntaxError: empty input, an operator that is not valid in its position, unbalanced
    parentheses, an operand missing for an operator, or leftover operands.
"""

from applesoft.applesoft_ast import ASTNode
from applesoft.applesoft_constants import (
    EOL,
    IDENT,
    NUMBER,
    OPERATOR,
    STRING,
    binary_operators,
    precedence,
    unary_operators,
)
from applesoft.applesoft_lexer import Token

OPERAND_TYPES = (NUMBER, STRING, IDENT)


def _binding(tok: Token) -> int:
    if tok.unary:
        return precedence[unary_operators[str(tok.value)]]
    return precedence[binary_operators[str(tok.value)]]


class ExpressionParser:
    """
    Parses one infix expression from a list of tokens.

    Attributes
    ----------
    tokens : list[Token]
        The expression tokens, with any trailing EOL removed.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens: list[Token] = [t for t in tokens if t.type != EOL]

    def parse(self) -> ASTNode:
        """Parse the token slice into a single expression tree."""
        if not self.tokens:
            raise SyntaxError("*** No valid expression ***")
        return self.reduce(self.to_postfix())

    def is_unary_position(self, index: int) -> bool:
        if index == 0:
            return True
        before = self.tokens[index - 1]
        return before.type == OPERATOR and before.value != ")"

    def to_postfix(self) -> list[Token]:
        """Shunting-yard pass: reorder the infix tokens into reverse Polish notation."""
        output: list[Token] = []
        stack: list[Token] = []

        for index, tok in enumerate(self.tokens):
            if tok.type in OPERAND_TYPES:
                output.append(tok)
            elif tok.is_operator("("):
                stack.append(tok)
            elif tok.is_operator(")"):
                while stack and not stack[-1].is_operator("("):
                    output.append(stack.pop())
                if not stack:
                    raise SyntaxError("*** No matching '(' ***")
                stack.pop()
            elif tok.type == OPERATOR:
                if self.is_unary_position(index):
                    if tok.value not in unary_operators:
                        raise SyntaxError(
                            f"*** '{tok.value}' is not a valid unary operator ***"
                        )
                    stack.append(Token(OPERATOR, tok.value, tok.col, unary=True))
                    continue

                if tok.value not in binary_operators:
                    raise SyntaxError(
                        f"*** '{tok.value}' is not a valid binary operator ***"
                    )
                strength = precedence[binary_operators[str(tok.value)]]
                while (
                    stack
                    and not stack[-1].is_operator("(")
                    and _binding(stack[-1]) >= strength
                ):
                    output.append(stack.pop())
                stack.append(tok)
            else:
                raise SyntaxError(f"*** Unsupported token in expression: {tok} ***")

        while stack:
            tok = stack.pop()
            if tok.is_operator("("):
                raise SyntaxError("*** No matching ')' ***")
            output.append(tok)
        return output

    def reduce(self, postfix: list[Token]) -> ASTNode:
        """RPN reduction: fold a postfix token queue into an expression tree."""
        stack: list[ASTNode] = []

        for tok in postfix:
            if tok.type == NUMBER:
                stack.append(ASTNode("number", tok.value))
            elif tok.type == STRING:
                stack.append(ASTNode("string", tok.value))
            elif tok.type == IDENT:
                stack.append(ASTNode("identifier", tok.value))
            elif tok.unary:
                if not stack:
                    raise SyntaxError(f"*** No operand for '{tok.value}' ***")
                operand = stack.pop()
                stack.append(
                    ASTNode("unary", unary_operators[str(tok.value)], [operand])
                )
            else:
                if len(stack) < 2:
                    raise SyntaxError(f"*** Missing operand for '{tok.value}' ***")
                right = stack.pop()
                left = stack.pop()
                stack.append(
                    ASTNode("binary", binary_operators[str(tok.value)], [left, right])
                )

        if not stack:
            raise SyntaxError("*** No expression ***")
        if len(stack) > 1:
            raise SyntaxError("*** Malformed expression ***")
        return stack[0]


def parse_expression(tokens: list[Token]) -> ASTNode:
    """Parse a token slice into an expression tree, raising SyntaxError on failure."""
    return ExpressionParser(tokens).parse()


__all__ = ["ExpressionParser", "parse_expression"]
