"""
Shared lexical tables for the Applesoft-style BASIC interpreter.

Exports:
    - Token type names (IDENT, STRING, NUMBER, KEYWORD, OPERATOR, ILLEGAL, EOL)
    - keywords: words (and the `?` shorthand) that start or shape a statement
    - operator_tokens: every operator spelling the lexer recognizes
    - binary_operators / unary_operators: spelling -> canonical operator name
    - precedence: canonical operator name -> binding strength (higher binds tighter)
"""

IDENT = "IDENT"
STRING = "STRING"
NUMBER = "NUMBER"
KEYWORD = "KEYWORD"
OPERATOR = "OPERATOR"
ILLEGAL = "ILLEGAL"
EOL = "EOL"

keywords: frozenset[str] = frozenset(
    {
        "PRINT",
        "?",
        "REM",
        "IF",
        "THEN",
        "TH",
        "LET",
        "LIST",
        "RUN",
        "GOTO",
        "GOSUB",
        "RETURN",
        "POP",
        "ONERR",
        "LOAD",
    }
)

operator_tokens: frozenset[str] = frozenset(
    {
        "+",
        "-",
        "*",
        "/",
        "&",
        "AND",
        "OR",
        "|",
        "<",
        ">",
        "MOD",
        "NOT",
        "(",
        ")",
        "=",
        ":",
        ";",
    }
)

# Single characters that may start an operator token
operator_symbols: frozenset[str] = frozenset(op for op in operator_tokens if len(op) == 1)

binary_operators: dict[str, str] = {
    "+": "PLUS",
    "-": "SUB",
    "*": "MULT",
    "/": "DIV",
    "MOD": "MOD",
    "=": "EQ",
    "<": "LT",
    "<=": "LE",
    "=<": "LE",
    ">": "GT",
    ">=": "GE",
    "=>": "GE",
    "<>": "NE",
    "><": "NE",
    "&": "AND",
    "AND": "AND",
    "|": "OR",
    "OR": "OR",
}

unary_operators: dict[str, str] = {
    "-": "NEG",
    "NOT": "NOT",
}

precedence: dict[str, int] = {
    "NEG": 7,
    "MULT": 6,
    "DIV": 6,
    "PLUS": 5,
    "SUB": 5,
    "MOD": 4,
    "EQ": 3,
    "LT": 3,
    "LE": 3,
    "GT": 3,
    "GE": 3,
    "NE": 3,
    "AND": 2,
    "OR": 2,
    "NOT": 1,
}

# Spellings used when rendering an operator back into an error message
operator_spelling: dict[str, str] = {
    "PLUS": "+",
    "SUB": "-",
    "MULT": "*",
    "DIV": "/",
    "MOD": "MOD",
    "EQ": "=",
    "LT": "<",
    "LE": "<=",
    "GT": ">",
    "GE": ">=",
    "NE": "<>",
    "AND": "AND",
    "OR": "OR",
    "NEG": "-",
    "NOT": "NOT",
}

__all__ = [
    "EOL",
    "IDENT",
    "ILLEGAL",
    "KEYWORD",
    "NUMBER",
    "OPERATOR",
    "STRING",
    "binary_operators",
    "keywords",
    "operator_spelling",
    "operator_symbols",
    "operator_tokens",
    "precedence",
    "unary_operators",
]
