from scriptrunner.core.highlighting import (
    COMMENT, KEYWORD, NUMBER, STRING, Span, tokenize, tokenize_line,
)
from scriptrunner.languages import KEYWORDS

SWIFT_KEYWORDS = KEYWORDS["swift"]


def kinds(text, spans):
    return [(text[s.start:s.end], s.kind) for s in spans]


def test_keywords_strings_numbers() -> None:
    text = 'let name = "swift" + 42'
    spans = tokenize(text, SWIFT_KEYWORDS)

    assert kinds(text, spans) == [
        ("let", KEYWORD),
        ('"swift"', STRING),
        ("42", NUMBER),
    ]


def test_identifiers_are_not_highlighted() -> None:
    assert tokenize("letter returned", SWIFT_KEYWORDS) == []


def test_keyword_inside_string_or_comment_is_not_keyword() -> None:
    text = 'print("let x") // return value'
    spans = tokenize(text, SWIFT_KEYWORDS)

    assert kinds(text, spans) == [
        ('"let x"', STRING),
        ("// return value", COMMENT),
    ]


def test_escaped_quote_stays_in_string() -> None:
    text = r'"a \"quoted\" word"'
    assert kinds(text, tokenize(text, SWIFT_KEYWORDS)) == [(text, STRING)]


def test_block_comment_spanning_lines() -> None:
    text = "/* one\ntwo */ func"
    spans = tokenize(text, SWIFT_KEYWORDS)

    assert spans == [Span(0, 13, COMMENT), Span(14, 4, KEYWORD)]


def test_spans_are_ordered_and_disjoint() -> None:
    text = 'func f() { return "x" } /* c */ var y = 3.5'
    spans = tokenize(text, SWIFT_KEYWORDS)

    for a, b in zip(spans, spans[1:]):
        assert a.end <= b.start


def test_tokenize_line_carries_block_comment_state() -> None:
    spans, open_comment = tokenize_line("let a = 1 /* start", SWIFT_KEYWORDS)
    assert open_comment
    assert spans[-1] == Span(10, 8, COMMENT)

    spans, open_comment = tokenize_line("still comment", SWIFT_KEYWORDS, True)
    assert open_comment
    assert spans == [Span(0, 13, COMMENT)]

    spans, open_comment = tokenize_line("end */ return", SWIFT_KEYWORDS, True)
    assert not open_comment
    assert spans == [Span(0, 6, COMMENT), Span(7, 6, KEYWORD)]


def test_empty_keyword_table() -> None:
    assert tokenize("func main", frozenset()) == []
