"""
CSS minifier tests

Covers comment removal, quoted literals, the newline rules driven by the
paren depth and declaration colon, and delimiter trimming.
"""

import pytest

from pagepress.lib.css import minify_css


class TestWhitespace:
    """Test whitespace removal around delimiters"""

    def test_rule_block(self):
        """Newlines and indentation inside a rule block disappear"""
        assert minify_css("a {\n  color: red;\n}") == "a{color:red;}"

    def test_selector_list(self):
        """Whitespace around commas is removed"""
        assert minify_css("h1 ,\n h2 {x:y}") == "h1,h2{x:y}"

    def test_pseudo_class_selector(self):
        """Colon in a selector trims only the whitespace after it"""
        assert minify_css("a:hover {color: blue}") == "a:hover{color:blue}"

    def test_consecutive_rules(self):
        """Newline between rules is dropped entirely"""
        assert minify_css("a{x:y;}\n\nb{x:y;}\n") == "a{x:y;}b{x:y;}"

    def test_spaces_inside_values_kept(self):
        """Plain spaces that don't follow a newline are kept"""
        assert minify_css("a{margin:0 auto;}") == "a{margin:0 auto;}"


class TestNewlineCollapse:
    """Test newline runs inside parens and declarations"""

    def test_newline_after_colon_becomes_space(self):
        """A newline inside a declaration separates values with one space"""
        assert minify_css("a{margin:\n  0\n  auto;}") == "a{margin:0 auto;}"

    def test_newline_inside_parens(self):
        """Parens trim their inner edges, newlines inside become spaces"""
        source = "a{background:url(\n  x.png\n)}"
        assert minify_css(source) == "a{background:url(x.png)}"

    def test_multiline_function_arguments(self):
        """Arguments on separate lines stay separated"""
        source = ".x{grid-template-columns:repeat(2,\n    1fr)}"
        assert minify_css(source) == ".x{grid-template-columns:repeat(2,1fr)}"

        source = ".x{transform:translate(1px\n    2px)}"
        assert minify_css(source) == ".x{transform:translate(1px 2px)}"


class TestCommentsAndStrings:
    """Test comment stripping and literal preservation"""

    def test_comment_removed(self):
        assert minify_css("a{/* note */color:red}") == "a{color:red}"

    def test_unterminated_comment_truncates(self):
        """An unterminated comment silently drops the rest"""
        assert minify_css("a{color:red}/* open") == "a{color:red}"

    def test_quoted_string_verbatim(self):
        """Whitespace and delimiters inside strings are untouched"""
        source = 'a{content:"  ( , ) "}'
        assert minify_css(source) == source

    def test_escaped_quote_in_string(self):
        """Backslash escapes inside strings pass through in order"""
        source = "a{content:'it\\'s'}"
        assert minify_css(source) == source

    def test_comment_marker_inside_string(self):
        source = 'a{content:"/* not a comment */"}'
        assert minify_css(source) == source


class TestRobustness:
    """The minifier never raises"""

    @pytest.mark.parametrize("source", [
        "a)b(",
        "))))",
        "'unterminated",
        "a{",
        "",
        "/*",
    ])
    def test_malformed_input(self, source):
        """Malformed CSS degrades gracefully"""
        minify_css(source)

    def test_idempotent(self):
        """Minifying minified CSS changes nothing"""
        source = (
            "body {\n  margin: 0;\n  font: 12px/1.5 'Open Sans', sans-serif;\n}\n"
            "a:hover , a:focus {\n  color: rgb( 1, 2, 3 );\n}\n"
            "/* footer */\nfooter { padding: calc(1em\n  + 2px); }\n"
        )
        once = minify_css(source)
        assert minify_css(once) == once
