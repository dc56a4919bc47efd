"""
Gemtext translator tests

Tests the line-oriented state machine: lists, links, preformatted blocks,
quotes, headings and raw text pass-through.
"""

import pytest

from pagepress.lib.gemtext import translate_gemtext, html_escape, lines_split
from pagepress.models.errors import CompileError, ErrorKind


def translate(text: str) -> str:
    return translate_gemtext("test.gmi", text)


class TestLineTypes:
    """Test each line prefix in isolation"""

    def test_empty_document(self):
        assert translate("") == "<p></p>"

    def test_heading(self):
        assert translate("### Title") == "<p><h3>Title</h3></p>"
        assert translate("#x") == "<p><h1>x</h1></p>"

    def test_heading_levels_uncapped(self):
        assert translate("#######  deep") == "<p><h7>deep</h7></p>"

    def test_link_with_label(self):
        assert translate("=> https://x.org Home") == '<p><a href="https://x.org">Home</a><br></p>'

    def test_link_without_label(self):
        assert translate("=>/about") == '<p><a href="/about">/about</a><br></p>'

    def test_link_label_is_second_token(self):
        assert translate("=> /a two words") == '<p><a href="/a">two</a><br></p>'

    def test_quote(self):
        assert translate("> hi <b>") == "<p><blockquote><p>hi &lt;b&gt;</p></blockquote></p>"

    def test_raw_text_unescaped(self):
        """Ordinary lines pass through so authors can embed HTML"""
        assert translate("<b>bold</b> & more") == "<p><b>bold</b> & more\n</p>"


class TestStates:
    """Test list and preformatted state transitions"""

    def test_list_closed_by_text(self):
        assert translate("* one\n* two\ntext") == "<p><ul><li>one</li><li>two</li></ul>text\n</p>"

    def test_list_closed_at_end(self):
        assert translate("* a") == "<p><ul><li>a</li></ul></p>"

    def test_list_items_escaped(self):
        assert translate("* <x>") == "<p><ul><li>&lt;x&gt;</li></ul></p>"

    def test_list_closed_by_link(self):
        expected = '<p><ul><li>a</li></ul><a href="/b">/b</a><br></p>'
        assert translate("* a\n=> /b") == expected

    def test_list_prefix_has_priority(self):
        assert translate("* => x") == "<p><ul><li>=&gt; x</li></ul></p>"

    def test_preformatted_block(self):
        source = '```py\n<b> & "x"\n```'
        expected = '<p><pre alt="py">&lt;b&gt; &amp; &quot;x&quot;\n</pre></p>'
        assert translate(source) == expected

    def test_preformatted_ignores_prefixes(self):
        source = "```\n# not a heading\n* not a list\n```"
        expected = '<p><pre alt=""># not a heading\n* not a list\n</pre></p>'
        assert translate(source) == expected

    def test_alt_text_escaped(self):
        assert translate('```a"b\n```') == '<p><pre alt="a&quot;b"></pre></p>'

    def test_preformatted_after_list(self):
        expected = '<p><ul><li>a</li></ul><pre alt="">x\n</pre></p>'
        assert translate("* a\n```\nx\n```") == expected

    def test_unterminated_preformatted(self):
        """An unterminated block is left open without an error"""
        assert translate("```\nx") == '<p><pre alt="">x\n</p>'

    def test_crlf_line_endings(self):
        assert translate("* a\r\n* b\r\n") == "<p><ul><li>a</li><li>b</li></ul></p>"


class TestErrors:
    """Test link errors"""

    @pytest.mark.parametrize("source,line", [
        ("=>", 0),
        ("hi\n=>   ", 1),
        ("* a\n\n=>\n", 2),
    ])
    def test_link_without_url(self, source, line):
        """Link errors are reported with the 0-based line index"""
        with pytest.raises(CompileError) as excinfo:
            translate(source)
        assert excinfo.value.kind is ErrorKind.SYNTAX
        assert excinfo.value.line == line
        assert excinfo.value.path == "test.gmi"
        assert "Expected URL" in excinfo.value.message


class TestHelpers:
    """Test escaping and line splitting"""

    def test_escape_set(self):
        assert html_escape("<>\"&'") == "&lt;&gt;&quot;&amp;'"

    def test_lines_split(self):
        assert lines_split("a\nb\n") == ["a", "b"]
        assert lines_split("a\r\n\nb") == ["a", "", "b"]
        assert lines_split("") == []
