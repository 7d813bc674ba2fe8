"""Tests for the comment/string scanner and its lexical helpers."""

from pasdb.extraction.scanner import (
    find_closing,
    line_at,
    parse_literal_run,
    read_call_arguments,
    read_expression,
    scan_source,
    split_top_level,
    strip_comments,
)


# =============================================================================
# COMMENT REMOVAL
# =============================================================================
class TestCommentRemoval:
    """Comments disappear, strings and newlines survive."""

    def test_line_comment_removed_newline_kept(self):
        text = strip_comments("a := 1; // note\nb := 2;")
        assert text == "a := 1; \nb := 2;"

    def test_brace_comment_removed(self):
        assert strip_comments("x{ gone }y") == "xy"

    def test_paren_star_comment_removed(self):
        assert strip_comments("x(* gone *)y") == "xy"

    def test_block_comments_do_not_nest(self):
        # The first closing brace ends the comment
        assert strip_comments("{ a { b } c }") == " c }"

    def test_multiline_comment_keeps_line_count(self):
        source = "begin\n{ one\n  two\n  three }\nend;"
        text = strip_comments(source)
        assert text.count("\n") == source.count("\n")
        assert "two" not in text

    def test_comment_markers_inside_strings_survive(self):
        source = "s := 'http://host/{x}(*y*)';"
        assert strip_comments(source) == source

    def test_doubled_quote_does_not_end_string(self):
        source = "s := 'it''s // not a comment';"
        assert strip_comments(source) == source

    def test_unterminated_comment_runs_to_end(self):
        assert strip_comments("a;\n{ open\nb;") == "a;\n\n"


class TestOriginalSpan:
    """Scanned offsets map back to the unmodified source."""

    def test_span_includes_removed_comment(self):
        source = "begin\n  // load\n  x := 1;\nend;"
        scanned = scan_source(source)
        start = scanned.text.index("begin")
        end = scanned.text.index("end;") + len("end;")
        assert scanned.original_span(start, end) == source

    def test_empty_span(self):
        scanned = scan_source("abc")
        assert scanned.original_span(-1, 2) == ""
        assert scanned.original_span(2, 2) == ""


# =============================================================================
# LEXICAL HELPERS
# =============================================================================
class TestLexicalHelpers:
    """Balanced reading of calls and expressions."""

    def test_line_at(self):
        assert line_at("a\nb\nc", 0) == 1
        assert line_at("a\nb\nc", 4) == 3
        assert line_at("a\nb\nc", 2, base_line=10) == 11

    def test_find_closing_skips_strings(self):
        text = "f('a)', (1))"
        assert find_closing(text, 1) == len(text) - 1

    def test_find_closing_unbalanced(self):
        assert find_closing("f(a; b)", 1) == -1

    def test_split_top_level(self):
        parts = split_top_level("'a,b', f(1, 2), [3, 4]", ",")
        assert [p.strip() for p in parts] == ["'a,b'", "f(1, 2)", "[3, 4]"]

    def test_read_call_arguments(self):
        text = "ExecSQL(Conn, 'DELETE FROM T');"
        args, end = read_call_arguments(text, text.index("("))
        assert args == ["Conn", "'DELETE FROM T'"]
        assert text[end] == ";"

    def test_read_call_arguments_empty(self):
        assert read_call_arguments("Open()", 4) == ([], 6)

    def test_read_expression_stops_at_semicolon(self):
        text = " 'SELECT 1' + X; Y := 2;"
        expression, end = read_expression(text, 0)
        assert expression == "'SELECT 1' + X"
        assert text[end] == ";"

    def test_read_expression_stops_at_end_keyword(self):
        expression, _ = read_expression(" 'SELECT 1'\nend;", 0)
        assert expression == "'SELECT 1'"

    def test_read_expression_ignores_semicolon_in_string(self):
        expression, _ = read_expression(" 'A; B';", 0)
        assert expression == "'A; B'"


class TestLiteralRuns:
    """Quoted literals and character codes decode into text."""

    def test_plain_literal(self):
        assert parse_literal_run("'SELECT 1'") == "SELECT 1"

    def test_doubled_quotes_unescaped(self):
        assert parse_literal_run("'NAME = ''X'''") == "NAME = 'X'"

    def test_character_codes(self):
        assert parse_literal_run("'A'#13#10'B'") == "A\r\nB"
        assert parse_literal_run("#$41") == "A"

    def test_non_literal_returns_none(self):
        assert parse_literal_run("'A' + B") is None
        assert parse_literal_run("Name") is None
        assert parse_literal_run("") is None
