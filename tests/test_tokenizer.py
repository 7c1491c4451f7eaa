import io

import pytest

from csvgraph.io._tokenizer import CSVSyntaxError, check_delimiter, iter_records

from .helpers import text


def _rows(s, delimiter=";"):
    return [r.fields for r in iter_records(text(s), delimiter)]


class TestRecords:
    def test_plain_rows(self):
        assert _rows("a;b\nc;d;e\n") == [["a", "b"], ["c", "d", "e"]]

    def test_final_newline_optional(self):
        assert _rows("a;b\nc") == [["a", "b"], ["c"]]

    def test_empty_input(self):
        assert _rows("") == []

    def test_blank_line_is_single_empty_field(self):
        assert _rows("a\n\nb\n") == [["a"], [""], ["b"]]

    def test_empty_fields(self):
        assert _rows(";a;;\n") == [["", "a", "", ""]]

    def test_trailing_delimiter_at_eof(self):
        assert _rows("a;") == [["a", ""]]

    def test_crlf(self):
        assert _rows("a;b\r\nc\r\n") == [["a", "b"], ["c"]]

    def test_custom_delimiter(self):
        assert _rows("a,b;c\n", delimiter=",") == [["a", "b;c"]]

    def test_tab_delimiter(self):
        assert _rows("a\tb\n", delimiter="\t") == [["a", "b"]]

    def test_rows_are_fresh_lists(self):
        records = list(iter_records(text("a;b\nc\n")))
        assert records[0].fields is not records[1].fields

    def test_record_lines(self):
        records = list(iter_records(text('a\n"x\ny";z\nb\n')))
        assert [r.line for r in records] == [1, 2, 4]

    def test_reads_in_chunks(self, monkeypatch):
        import csvgraph.io._tokenizer as tok

        monkeypatch.setattr(tok, "_CHUNK", 3)
        assert _rows('ab;"c""d"\nefgh\n') == [["ab", 'c"d'], ["efgh"]]


class TestQuoting:
    def test_quoted_delimiter(self):
        assert _rows('"a;b";c\n') == [["a;b", "c"]]

    def test_escaped_quote(self):
        assert _rows('"say ""hi"""\n') == [['say "hi"']]

    def test_quoted_newline(self):
        assert _rows('"a\nb";c\n') == [["a\nb", "c"]]

    def test_empty_quoted(self):
        assert _rows('"";x\n') == [["", "x"]]

    def test_quoted_at_eof(self):
        assert _rows('a;"b"') == [["a", "b"]]


class TestSyntaxErrors:
    def test_quote_in_unquoted_field(self):
        with pytest.raises(CSVSyntaxError) as ei:
            _rows('ab"c\n')
        assert (ei.value.line, ei.value.column) == (1, 2)

    def test_text_after_closing_quote(self):
        with pytest.raises(CSVSyntaxError) as ei:
            _rows('ok\n"a"b\n')
        assert (ei.value.line, ei.value.column) == (2, 3)
        assert str(ei.value).startswith("line 2:3 ")

    def test_unterminated_quote_reports_opening_position(self):
        with pytest.raises(CSVSyntaxError) as ei:
            _rows('a;"bc\nde\n')
        assert (ei.value.line, ei.value.column) == (1, 2)

    def test_lone_carriage_return(self):
        with pytest.raises(CSVSyntaxError):
            _rows("a\rb\n")

    def test_is_value_error(self):
        assert issubclass(CSVSyntaxError, ValueError)


class TestDelimiter:
    @pytest.mark.parametrize("bad", ["", ";;", '"', "\n", "\r"])
    def test_rejected(self, bad):
        with pytest.raises(ValueError):
            check_delimiter(bad)

    def test_rejected_lazily_by_iter_records(self):
        with pytest.raises(ValueError):
            list(iter_records(io.StringIO("a"), delimiter=""))
