"""
Gemtext to HTML translator

Gemtext is line oriented: the first characters of a line decide what it
is. The translator is a three-state machine (text, list, preformatted)
that emits HTML as it goes. The whole document is wrapped in a single
paragraph.

Ordinary text lines are passed through unescaped so authors can mix raw
HTML into their Gemtext; everything the translator generates itself is
escaped.
"""

from enum import Enum
from pathlib import Path
from typing import List, Union

from ..models.errors import CompileError, ErrorKind
from .log import LOG


class GemtextState(Enum):
    TEXT = "text"
    LIST = "list"
    PREFORMATTED = "preformatted"


LIST_PREFIX = "* "
LINK_PREFIX = "=>"
PREFORMAT_TOGGLE = "```"
QUOTE_PREFIX = "> "
HEADING_CHAR = "#"

_ESCAPES = {'<': "&lt;", '>': "&gt;", '"': "&quot;", '&': "&amp;"}


def html_escape(text: str) -> str:
    """Escape <, >, " and & (nothing else)"""
    return ''.join(_ESCAPES.get(char, char) for char in text)


def lines_split(text: str) -> List[str]:
    """Split on newlines, dropping a trailing empty line and '\\r' line ends"""
    lines = text.split('\n')
    if lines and lines[-1] == '':
        lines.pop()
    return [line[:-1] if line.endswith('\r') else line for line in lines]


class GemtextTranslator:
    """Translates one Gemtext document to HTML"""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = path
        self.state = GemtextState.TEXT
        self.output: List[str] = []

    def translate(self, text: str) -> str:
        """
        Translate Gemtext to HTML

        Args:
            text: Gemtext source

        Returns:
            HTML wrapped in one <p>...</p>

        Raises:
            CompileError: SYNTAX error for a link line without a URL; the
                          line number is the 0-based index of the line
        """
        self.state = GemtextState.TEXT
        self.output = ["<p>"]

        for line_num, line in enumerate(lines_split(text)):
            self.line_translate(line, line_num)

        if self.state is GemtextState.LIST:
            self.output.append("</ul>")
        elif self.state is GemtextState.PREFORMATTED:
            LOG(f"Unterminated preformatted block in {self.path}", level=2)

        self.output.append("</p>")
        return ''.join(self.output)

    def line_translate(self, line: str, line_num: int) -> None:
        out = self.output

        if self.state is GemtextState.PREFORMATTED:
            if line.startswith(PREFORMAT_TOGGLE):
                self.state = GemtextState.TEXT
                out.append("</pre>")
            else:
                out.append(html_escape(line))
                out.append("\n")
            return

        if line.startswith(LIST_PREFIX):
            if self.state is not GemtextState.LIST:
                self.state = GemtextState.LIST
                out.append("<ul>")
            out.append(f"<li>{html_escape(line[len(LIST_PREFIX):])}</li>")
            return

        if self.state is GemtextState.LIST:
            self.state = GemtextState.TEXT
            out.append("</ul>")

        if line.startswith(LINK_PREFIX):
            tokens = line[len(LINK_PREFIX):].split()
            if not tokens:
                raise CompileError(ErrorKind.SYNTAX, "Expected URL in link", self.path, line_num)
            url = html_escape(tokens[0])
            label = html_escape(tokens[1]) if len(tokens) > 1 else url
            out.append(f'<a href="{url}">{label}</a><br>')
        elif line.startswith(PREFORMAT_TOGGLE):
            alt = html_escape(line[len(PREFORMAT_TOGGLE):])
            out.append(f'<pre alt="{alt}">')
            self.state = GemtextState.PREFORMATTED
        elif line.startswith(QUOTE_PREFIX):
            out.append(f"<blockquote><p>{html_escape(line[len(QUOTE_PREFIX):])}</p></blockquote>")
        elif line.startswith(HEADING_CHAR):
            level = len(line) - len(line.lstrip(HEADING_CHAR))
            title = html_escape(line[level:].lstrip())
            out.append(f"<h{level}>{title}</h{level}>")
        else:
            out.append(line)
            out.append("\n")


def translate_gemtext(path: Union[str, Path], text: str) -> str:
    """
    Translate a Gemtext document to HTML

    Example:
        >>> translate_gemtext("a.gmi", "### Title")
        '<p><h3>Title</h3></p>'
    """
    return GemtextTranslator(path).translate(text)
