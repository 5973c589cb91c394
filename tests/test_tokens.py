import pytest

from cmpler.tokens import Span, Token, TokenKind, lex


def kinds(source):
    return [t.kind for t in lex(source)]


def test_keywords():
    assert kinds("int if else return while") == [
        TokenKind.INT,
        TokenKind.IF,
        TokenKind.ELSE,
        TokenKind.RETURN,
        TokenKind.WHILE,
    ]


def test_identifiers_and_literals():
    assert kinds("x y1 _z 123 0") == [
        TokenKind.IDENTIFIER,
        TokenKind.IDENTIFIER,
        TokenKind.IDENTIFIER,
        TokenKind.INTEGER_LITERAL,
        TokenKind.INTEGER_LITERAL,
    ]


def test_operators_and_punctuation():
    assert kinds("+ - * / = == != < <= > >= ; , ( ) { }") == [
        TokenKind.PLUS,
        TokenKind.MINUS,
        TokenKind.STAR,
        TokenKind.SLASH,
        TokenKind.ASSIGN,
        TokenKind.EQUAL,
        TokenKind.NOT_EQUAL,
        TokenKind.LESS,
        TokenKind.LESS_EQUAL,
        TokenKind.GREATER,
        TokenKind.GREATER_EQUAL,
        TokenKind.SEMICOLON,
        TokenKind.COMMA,
        TokenKind.LPAREN,
        TokenKind.RPAREN,
        TokenKind.LBRACE,
        TokenKind.RBRACE,
    ]


def test_mixed_spacing():
    assert kinds("int   x= 42 ;") == [
        TokenKind.INT,
        TokenKind.IDENTIFIER,
        TokenKind.ASSIGN,
        TokenKind.INTEGER_LITERAL,
        TokenKind.SEMICOLON,
    ]


def test_lexical_error_token():
    tokens = lex("int $foo = 10;")
    errors = [t for t in tokens if t.kind is TokenKind.ERROR]
    assert len(errors) == 1
    assert errors[0].text == "$"


def test_full_smallc_lexing():
    source = """
        int main() {
            int x = 10;
            if (x > 5) {
                return x + 1;
            } else {
                return x - 1;
            }
        }
    """
    assert kinds(source) == [
        TokenKind.INT,
        TokenKind.IDENTIFIER,
        TokenKind.LPAREN,
        TokenKind.RPAREN,
        TokenKind.LBRACE,
        TokenKind.INT,
        TokenKind.IDENTIFIER,
        TokenKind.ASSIGN,
        TokenKind.INTEGER_LITERAL,
        TokenKind.SEMICOLON,
        TokenKind.IF,
        TokenKind.LPAREN,
        TokenKind.IDENTIFIER,
        TokenKind.GREATER,
        TokenKind.INTEGER_LITERAL,
        TokenKind.RPAREN,
        TokenKind.LBRACE,
        TokenKind.RETURN,
        TokenKind.IDENTIFIER,
        TokenKind.PLUS,
        TokenKind.INTEGER_LITERAL,
        TokenKind.SEMICOLON,
        TokenKind.RBRACE,
        TokenKind.ELSE,
        TokenKind.LBRACE,
        TokenKind.RETURN,
        TokenKind.IDENTIFIER,
        TokenKind.MINUS,
        TokenKind.INTEGER_LITERAL,
        TokenKind.SEMICOLON,
        TokenKind.RBRACE,
        TokenKind.RBRACE,
    ]


def test_spans_cover_token_text():
    source = "int   x= 42 ;"
    for token in lex(source):
        assert source[token.span.start:token.span.end] == token.text


def test_keyword_prefix_is_identifier():
    tokens = lex("iffy returned int_")
    assert [t.kind for t in tokens] == [TokenKind.IDENTIFIER] * 3
    assert [t.text for t in tokens] == ["iffy", "returned", "int_"]


def test_digits_then_letters_split():
    tokens = lex("123abc")
    assert [(t.kind, t.text) for t in tokens] == [
        (TokenKind.INTEGER_LITERAL, "123"),
        (TokenKind.IDENTIFIER, "abc"),
    ]


def test_logical_operators():
    assert kinds("&& || !") == [
        TokenKind.LOGICAL_AND,
        TokenKind.LOGICAL_OR,
        TokenKind.LOGICAL_NOT,
    ]


def test_lone_ampersand_is_error():
    assert kinds("&") == [TokenKind.ERROR]


def test_empty_and_whitespace_only():
    assert lex("") == []
    assert lex(" \t\n\r\f") == []


def test_token_value():
    token = lex("void")[0]
    assert token == Token(TokenKind.VOID, Span(0, 4), "void")


@pytest.mark.parametrize(
    "source,name",
    [
        ("int", "Int"),
        ("x", "Identifier"),
        ("42", "IntegerLiteral"),
        ("!=", "NotEqual"),
        ("{", "LBrace"),
        ("}", "RBrace"),
        (";", "Semicolon"),
    ],
)
def test_lexed_kind_str_is_its_name(source, name):
    kind = lex(source)[0].kind
    assert str(kind) == name
    assert kind.value == name