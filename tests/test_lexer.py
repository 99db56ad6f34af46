import pytest
from hypothesis import given
from hypothesis import strategies as st

from applesoft.applesoft_lexer import CharacterStream, Lexer, Token, tokenize_line


def types(source: str) -> list[str]:
    return [tok.type for tok in tokenize_line(source)]


def test_numbered_print_line() -> None:
    assert tokenize_line('10 PRINT "HI"') == [
        Token("NUMBER", 10.0),
        Token("KEYWORD", "PRINT"),
        Token("STRING", "HI"),
        Token("EOL", ""),
    ]


def test_number_values_are_floats() -> None:
    tok = tokenize_line("3.25")[0]
    assert tok.type == "NUMBER"
    assert tok.value == 3.25
    assert isinstance(tok.value, float)


def test_number_with_two_dots_is_illegal_and_ends_line() -> None:
    tokens = tokenize_line("PRINT 1.2.3 + 4")
    assert tokens[-1] == Token("ILLEGAL", "1.2.3")
    assert len(tokens) == 2


def test_identifier_with_dollar_suffix() -> None:
    assert tokenize_line("A$ = B_2")[:3] == [
        Token("IDENT", "A$"),
        Token("OPERATOR", "="),
        Token("IDENT", "B_2"),
    ]


def test_dollar_ends_identifier() -> None:
    assert tokenize_line("A$B")[:2] == [Token("IDENT", "A$"), Token("IDENT", "B")]


def test_keyword_is_case_sensitive() -> None:
    assert tokenize_line("print")[0] == Token("IDENT", "print")


@pytest.mark.parametrize("word", ["AND", "OR", "MOD", "NOT"])  # type: ignore[misc]
def test_operator_words(word: str) -> None:
    assert tokenize_line(word)[0] == Token("OPERATOR", word)


def test_question_mark_is_print_keyword() -> None:
    assert tokenize_line("? 1")[0] == Token("KEYWORD", "?")


@pytest.mark.parametrize(  # type: ignore[misc]
    "source,expected",
    [
        ("<=", ["<="]),
        ("=<", ["=<"]),
        ("<>", ["<>"]),
        (">=", [">="]),
        ("(-", ["(", "-"]),
        ("--", ["-", "-"]),
        ("<<", ["<", "<"]),
        (":;", [":", ";"]),
    ],
)
def test_operators_extend_only_into_binary_operators(
    source: str, expected: list[str]
) -> None:
    tokens = tokenize_line(source)[:-1]
    assert [tok.value for tok in tokens] == expected
    assert all(tok.type == "OPERATOR" for tok in tokens)


def test_unterminated_string_runs_to_end_of_line() -> None:
    assert tokenize_line('PRINT "ABC')[1:] == [Token("STRING", "ABC"), Token("EOL", "")]


def test_string_keeps_inner_spaces_and_symbols() -> None:
    assert tokenize_line('"A + B : C"')[0] == Token("STRING", "A + B : C")


def test_unknown_character_is_illegal() -> None:
    assert tokenize_line("A = 1 ~ 2")[-1] == Token("ILLEGAL", "~")
    assert types("A = 1 ~ 2") == ["IDENT", "OPERATOR", "NUMBER", "ILLEGAL"]


def test_lone_dot_is_illegal() -> None:
    assert tokenize_line(".5")[0] == Token("ILLEGAL", ".")


def test_empty_line_is_only_eol() -> None:
    assert tokenize_line("") == [Token("EOL", "")]
    assert tokenize_line("    ") == [Token("EOL", "")]


def test_columns_are_tracked() -> None:
    tokens = tokenize_line("10  X=1")
    assert [tok.col for tok in tokens] == [1, 5, 6, 7, 8]


def test_token_repr_and_eq() -> None:
    t1 = Token("OPERATOR", "-", 3)
    t2 = Token("OPERATOR", "-", 9)
    t3 = Token("OPERATOR", "-", 3, unary=True)

    assert repr(t1) == "Token(OPERATOR, -)"
    assert repr(t3) == "Token(OPERATOR, -, unary)"
    assert t1 == t2
    assert t1 != t3
    assert len({t1, t2, t3}) == 2


def test_character_stream_methods() -> None:
    stream = CharacterStream("ab")
    assert stream.peek() == "a"
    assert stream.next() == "a"
    assert stream.peek(1) == ""
    assert not stream.end_of_line()
    stream.next()
    assert stream.end_of_line()
    with pytest.raises(IndexError, match="CharacterStreamError"):
        stream.next()


def test_lexer_returns_eol_repeatedly_at_end() -> None:
    lexer = Lexer(CharacterStream("X"))
    assert lexer.next_token() == Token("IDENT", "X")
    assert lexer.next_token().type == "EOL"
    assert lexer.next_token().type == "EOL"


@given(st.text(max_size=100))  # type: ignore[misc]
def test_tokenize_always_terminates_with_single_terminator(text: str) -> None:
    tokens = tokenize_line(text)
    assert tokens[-1].type in ("EOL", "ILLEGAL")
    assert all(tok.type not in ("EOL", "ILLEGAL") for tok in tokens[:-1])
