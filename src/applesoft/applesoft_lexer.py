"""
Lexical analyzer for Applesoft-style BASIC lines.

This module converts one raw source line into a flat list of tokens:

Classes:
    CharacterStream: Cursor over a single line with column tracking.
    Token: A single token with type, value, source column and unary flag.
    Lexer: Reads tokens one at a time from a CharacterStream.

Functions:
    tokenize_line(line): Tokenize a whole line, stopping at the first EOL or ILLEGAL token.

Features:
    - Skips whitespace before every token
    - Strings run to the next `"` (no escapes); an unterminated string runs to end of line
    - Identifiers may contain letters, digits and `_`, and may end in `$`
    - Identifiers spelled like a keyword or an operator word are re-tagged
    - Numbers are digits and dots; more than one dot makes the literal ILLEGAL
    - Operators grow greedily while the longer spelling is still a binary operator

The lexer never raises on malformed input. Bad literals and unknown characters become
ILLEGAL tokens and end the token list.

Example:
    >>> tokenize_line('10 PRINT "HI"')
    [Token(NUMBER, 10.0), Token(KEYWORD, PRINT), Token(STRING, HI), Token(EOL, )]
"""

from typing import Any

from applesoft.applesoft_constants import (
    EOL,
    IDENT,
    ILLEGAL,
    KEYWORD,
    NUMBER,
    OPERATOR,
    STRING,
    binary_operators,
    keywords,
    operator_symbols,
    operator_tokens,
)


def _is_digit(ch: str) -> bool:
    # ASCII only: float() must accept whatever read_number collects
    return ch.isascii() and ch.isdigit()


class CharacterStream:
    """
    Reads characters from a single source line while tracking the current column.

    Attributes:
        source (str): The line being read.
        position (int): Current index in the source.
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0):
        self.source = source
        self.position = position
        self.column = position + 1

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            IndexError: If reading past the end of the line.
        """
        if self.position >= len(self.source):
            raise IndexError(
                f"CharacterStreamError: Attempted to read past end of line at column=<{self.column}>"
            )
        char = self.source[self.position]
        self.position += 1
        self.column += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character `offset` places ahead, or "" when out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_line(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token of a BASIC line.

    Attributes:
        type (str): One of IDENT, STRING, NUMBER, KEYWORD, OPERATOR, ILLEGAL, EOL.
        value (str | float): Raw text, or the parsed float for NUMBER tokens.
        col (int): 1-based column where the token starts.
        unary (bool): Set on OPERATOR tokens the expression parser has classified as unary.
    """

    def __init__(
        self, type_: str, value: str | float = "", col: int = 0, unary: bool = False
    ):
        self.type = type_
        self.value = value
        self.col = col
        self.unary = unary

    def __repr__(self) -> str:
        if self.unary:
            return f"Token({self.type}, {self.value}, unary)"
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.unary == other.unary
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.unary))

    def is_operator(self, *spellings: str) -> bool:
        """True if this is an OPERATOR token, optionally restricted to the given spellings."""
        if self.type != OPERATOR:
            return False
        return not spellings or self.value in spellings

    def is_keyword(self, *words: str) -> bool:
        """True if this is a KEYWORD token, optionally restricted to the given words."""
        if self.type != KEYWORD:
            return False
        return not words or self.value in words


class Lexer:
    """Lexical analyzer for a single BASIC line.

    Attributes:
        stream (CharacterStream): The line being tokenized.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        while not self.stream.end_of_line() and self.peek().isspace():
            self.advance()

    def read_string(self) -> Token:
        """Reads a string literal; the opening quote is the current character."""
        col = self.stream.column
        self.advance()
        text = ""
        while not self.stream.end_of_line() and self.peek() != '"':
            text += self.advance()
        if not self.stream.end_of_line():
            self.advance()  # closing quote
        return Token(STRING, text, col)

    def read_identifier(self) -> Token:
        """Reads an identifier and re-tags it when it spells a keyword or operator word."""
        col = self.stream.column
        ident = self.advance()
        while not self.stream.end_of_line():
            ch = self.peek()
            if ch.isalnum() or ch == "_":
                ident += self.advance()
            elif ch == "$":
                ident += self.advance()
                break
            else:
                break
        if ident in keywords:
            return Token(KEYWORD, ident, col)
        if ident in operator_tokens:
            return Token(OPERATOR, ident, col)
        return Token(IDENT, ident, col)

    def read_number(self) -> Token:
        col = self.stream.column
        num = ""
        while not self.stream.end_of_line() and (
            _is_digit(self.peek()) or self.peek() == "."
        ):
            num += self.advance()
        if num.count(".") > 1:
            return Token(ILLEGAL, num, col)
        return Token(NUMBER, float(num), col)

    def read_operator(self) -> Token:
        """Reads an operator, extending it only while the longer text is a binary operator."""
        col = self.stream.column
        op = self.advance()
        while (
            self.peek() in operator_symbols and (op + self.peek()) in binary_operators
        ):
            op += self.advance()
        return Token(OPERATOR, op, col)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the line.

        Returns:
            Token: The next token; EOL once the line is exhausted.
        """
        self.skip_whitespace()

        if self.stream.end_of_line():
            return Token(EOL, "", self.stream.column)

        ch = self.peek()

        if ch == '"':
            return self.read_string()
        if ch.isalpha():
            return self.read_identifier()
        if _is_digit(ch):
            return self.read_number()
        if ch in operator_symbols:
            return self.read_operator()
        if ch in keywords:
            col = self.stream.column
            return Token(KEYWORD, self.advance(), col)

        col = self.stream.column
        return Token(ILLEGAL, self.advance(), col)


def tokenize_line(line: str) -> list[Token]:
    """Tokenize one source line.

    The result always ends with exactly one EOL or ILLEGAL token.
    """
    lexer = Lexer(CharacterStream(line))
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type in (EOL, ILLEGAL):
            return tokens


__all__ = ["CharacterStream", "Lexer", "Token", "tokenize_line"]
