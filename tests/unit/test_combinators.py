"""Tests for the ambiguity-preserving parser combinators."""

from typecraft.core.combinators import (
    bracket,
    char,
    complete,
    digit,
    integer,
    lazy,
    many,
    many1,
    result,
    sep_by1,
    seq,
    spaces,
    string,
    word,
)


class TestPrimitives:
    def test_result_consumes_nothing(self):
        assert result(42).run("abc") == [(42, "abc")]

    def test_char_matches_single_character(self):
        assert char("a").run("abc") == [("a", "bc")]
        assert char("a").run("xbc") == []
        assert char("a").run("") == []

    def test_string_matches_prefix(self):
        assert string("use").run("use x") == [("use", " x")]
        assert string("use").run("us") == []

    def test_seq_collects_values(self):
        assert seq(char("a"), char("b")).run("abc") == [(("a", "b"), "c")]


class TestChoice:
    def test_choice_keeps_left_alternatives_first(self):
        parser = char("a") | string("ab")
        assert parser.run("abc") == [("a", "bc"), ("ab", "c")]

    def test_choice_keeps_right_alternatives_when_left_fails(self):
        parser = char("x") | string("ab")
        assert parser.run("abc") == [("ab", "c")]

    def test_bind_threads_every_alternative(self):
        parser = (char("a") | result("")).bind(lambda first: char("a").map(lambda _: first))
        assert parser.run("aa") == [("a", ""), ("", "a")]


class TestRepetition:
    def test_many_yields_longest_first_and_empty_last(self):
        assert many(char("t")).map("".join).run("tth") == [
            ("tt", "h"),
            ("t", "th"),
            ("", "tth"),
        ]

    def test_many_never_fails(self):
        assert many(char("x")).run("abc") == [([], "abc")]
        assert many(char("x")).run("") == [([], "")]

    def test_many1_fails_when_parser_never_succeeds(self):
        assert many1(char("x")).run("abc") == []

    def test_many1_excludes_empty_match(self):
        assert many1(char("a")).map("".join).run("aab") == [("aa", "b"), ("a", "ab")]

    def test_many_handles_deep_input_without_recursion(self):
        text = "a" * 2000
        alternatives = many(char("a")).run(text)
        assert len(alternatives) == 2001
        assert len(alternatives[0][0]) == 2000
        assert alternatives[-1] == ([], text)

    def test_word_explores_shorter_prefixes(self):
        values = [value for value, _ in word().run("ab1")]
        assert values == ["ab", "a", ""]

    def test_sep_by1(self):
        value, rest = sep_by1(digit(), char(",")).run("1,2,3")[0]
        assert value == ["1", "2", "3"]
        assert rest == ""


class TestLexical:
    def test_spaces_is_a_single_longest_match(self):
        assert spaces().run(" \n\tx") == [(" \n\t", "x")]
        assert spaces().run("x") == [("", "x")]

    def test_integer_prefers_longest_numeral(self):
        assert integer().run("-12")[0] == (-12, "")
        assert integer().run("7x")[0] == (7, "x")

    def test_lazy_supports_recursive_grammars(self):
        def nested():
            return bracket(char("("), lazy(nested), char(")")).or_(result("leaf"))

        outcome = complete(nested(), "(())")
        assert outcome.ok
        assert outcome.value == "leaf"


class TestComplete:
    def test_picks_first_full_parse(self):
        outcome = complete(many(char("a")), "aaa")
        assert outcome.ok
        assert outcome.value == ["a", "a", "a"]
        assert outcome.consumed == 3

    def test_reports_longest_partial_parse(self):
        outcome = complete(many(char("a")), "aab")
        assert not outcome.ok
        assert outcome.remainder == "b"
        assert outcome.consumed == 2
        assert outcome.value == ["a", "a"]

    def test_reports_no_progress(self):
        outcome = complete(char("x"), "abc")
        assert not outcome.ok
        assert outcome.value is None
        assert outcome.consumed == 0
