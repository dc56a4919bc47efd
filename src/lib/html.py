"""
HTML minifier

Walks a document one tag at a time and rewrites it with insignificant
whitespace removed. It is not a full HTML5 parser: it knows
just enough about tags to decide where whitespace matters.

Strategy:
1. Outside any element, text passes through untouched until the next '<'.
2. '<' followed by whitespace is a literal '<', not a tag.
3. <!--comments--> are dropped; <![CDATA[...]]> is kept verbatim.
4. Opening tags are re-emitted with their properties normalised: no
   whitespace around '=', one space between properties, quoted values kept
   byte for byte (quote char and backslash escapes included).
5. <script> and <style> bodies are copied up to their closer; style bodies
   go through the CSS minifier.
6. Any other opened element becomes a frame on an explicit stack. Inside a
   frame the whitespace rule depends on the element: textual elements keep
   one space per whitespace run, content elements keep none, and anything
   inside <pre> is left alone.
7. '</name>' closes the innermost frame. A closer that does not match is
   kept as text and still unwinds one level (or is an error in strict mode).

The explicit stack keeps memory bounded by nesting depth without touching
the interpreter's recursion limit.
"""

from pathlib import Path
from typing import List, Optional, Union

from ..models.errors import CompileError, ErrorKind, line_numberOf
from ..models.html import (
    TagKind, TagClosing, TagProperty, ParsedTag, TagFrame, tagKind_classify,
    PREFORMATTED_TAGS, COMMENT_OPEN, COMMENT_CLOSE, CDATA_OPEN, CDATA_CLOSE,
)
from .css import minify_css
from .log import LOG, verbosity_current


class HtmlMinifier:
    """
    Minifier for one HTML document

    Output is a deterministic function of the input and the constructor
    arguments; no state is shared between instances.
    """

    def __init__(
        self,
        path: Union[str, Path],
        source: str,
        original: Optional[str] = None,
        offset: int = 0,
        strict: bool = False,
    ) -> None:
        """
        Initialize minifier

        Args:
            path: Diagnostic path reported in errors
            source: HTML text to minify
            original: Document that `source` is part of, for line numbers
                      (defaults to source itself)
            offset: Offset of `source` inside `original`
            strict: Raise on mismatched closing tags instead of tolerating them
        """
        self.path = path
        self.source = source
        self.original = source if original is None else original
        self.offset = offset
        self.strict = strict

        self.output: List[str] = []
        self.stack: List[TagFrame] = []

    def minify(self) -> str:
        """
        Minify the whole document

        Returns:
            Minified HTML

        Raises:
            CompileError: SYNTAX error for an unclosed comment, CDATA section,
                          quoted property value, closing tag or script/style block
        """
        src = self.source
        length = len(src)
        pos = 0

        self.output = []
        self.stack = []

        while pos < length:
            if not self.stack:
                lt = src.find('<', pos)
                if lt == -1:
                    self.output.append(src[pos:])
                    break
                self.output.append(src[pos:lt])
                pos = self.lessThan_handle(lt)
                continue

            frame = self.stack[-1]
            char = src[pos]

            if char == '<':
                pos = self.lessThan_handle(pos)
            elif frame.preformatted:
                lt = src.find('<', pos)
                end = length if lt == -1 else lt
                frame.parts.append(src[pos:end])
                pos = end
            elif char == '\n':
                pos += 1
            elif char.isspace():
                pos = self.whitespace_skip(pos)
                # One space per gap, even when a dropped comment split the run
                if frame.kind is TagKind.TEXTUAL and not frame.parts[-1][-1:].isspace():
                    frame.parts.append(' ')
            else:
                end = pos + 1
                while end < length and src[end] != '<' and not src[end].isspace():
                    end += 1
                frame.parts.append(src[pos:end])
                pos = end

        # End of input closes whatever is still open
        while self.stack:
            self.frame_pop()

        return ''.join(self.output)

    def parts_current(self) -> List[str]:
        """Output buffer of the innermost frame, or the document output"""
        return self.stack[-1].parts if self.stack else self.output

    def preformatted_is(self) -> bool:
        return bool(self.stack) and self.stack[-1].preformatted

    def line_at(self, pos: int) -> int:
        return line_numberOf(self.original, self.offset + pos)

    def error(self, message: str, pos: int) -> CompileError:
        return CompileError(ErrorKind.SYNTAX, message, self.path, self.line_at(pos))

    def whitespace_skip(self, pos: int) -> int:
        src = self.source
        while pos < len(src) and src[pos].isspace():
            pos += 1
        return pos

    def newlineRun_skip(self, pos: int) -> int:
        """Skip a whitespace run if it starts with a newline"""
        if self.source.startswith('\n', pos):
            return self.whitespace_skip(pos)
        return pos

    def lessThan_handle(self, pos: int) -> int:
        """
        Handle a '<' at pos in the current context

        Returns:
            Offset just past what was consumed
        """
        src = self.source
        parts = self.parts_current()
        following = src[pos + 1] if pos + 1 < len(src) else None

        if following is None or following.isspace():
            parts.append('<')
            return pos + 1

        if following == '/':
            return self.closer_handle(pos)

        preformatted = self.preformatted_is()
        tag = self.tag_parse(pos, preformatted)

        if tag.closing is TagClosing.OPENED and tag.kind in (TagKind.TEXTUAL, TagKind.CONTENT):
            self.stack.append(TagFrame(
                name=tag.name,
                kind=tag.kind,
                preformatted=preformatted or tag.name in PREFORMATTED_TAGS,
                parts=[tag.text],
                position=pos,
            ))
        elif tag.text:
            parts.append(tag.text)

        return tag.end

    def closer_handle(self, pos: int) -> int:
        """
        Handle '</name>' at pos

        Closes the innermost frame whether or not the name matches; a
        mismatch keeps the closer as text. At document level the closer is
        simply emitted.

        Returns:
            Offset just past the closer (and any newline run after it)
        """
        src = self.source
        preformatted = self.preformatted_is()

        if self.stack and not preformatted:
            back = pos - 1
            while back >= 0 and src[back].isspace():
                if src[back] == '\n':
                    self.parts_rstrip(self.stack[-1].parts)
                    break
                back -= 1

        gt = src.find('>', pos + 2)
        if gt == -1:
            raise self.error("Unclosed HTML closing tag", pos + 1)

        name = ''.join(src[pos + 2:gt].split())
        closer = f"</{name}>"
        end = gt + 1
        if not preformatted:
            end = self.newlineRun_skip(end)

        if not self.stack:
            self.output.append(closer)
            return end

        frame = self.stack[-1]
        if name != frame.name:
            if self.strict:
                raise self.error(
                    f"Mismatched closing tag {closer}, expected </{frame.name}> "
                    f"(opened at line {self.line_at(frame.position)})",
                    pos,
                )
            if verbosity_current() >= 3:
                LOG(f"Mismatched closing tag {closer} for <{frame.name}> at {self.path}:{self.line_at(pos)}", level=3)

        frame.parts.append(closer)
        self.frame_pop()
        return end

    def frame_pop(self) -> None:
        """Close the innermost frame, splicing its output into its parent"""
        frame = self.stack.pop()
        self.parts_current().append(''.join(frame.parts))

    @staticmethod
    def parts_rstrip(parts: List[str]) -> None:
        """Trim trailing whitespace off an output buffer"""
        while parts:
            stripped = parts[-1].rstrip()
            if stripped:
                parts[-1] = stripped
                return
            parts.pop()

    def tag_parse(self, pos: int, preformatted: bool) -> ParsedTag:
        """
        Parse the tag starting with the '<' at pos

        Args:
            pos: Offset of '<' (the next character is not whitespace or '/')
            preformatted: True when the tag sits inside <pre>; whitespace
                          after it is then left alone

        Returns:
            ParsedTag with the minified tag text and the offset after it
        """
        src = self.source
        length = len(src)

        if src.startswith(COMMENT_OPEN, pos):
            close = src.find(COMMENT_CLOSE, pos + 2)
            if close == -1:
                raise self.error("Unclosed HTML comment", pos)
            return ParsedTag("", TagKind.COMMENT, TagClosing.SELF_CLOSED, "", close + len(COMMENT_CLOSE))

        if src.startswith(CDATA_OPEN, pos):
            close = src.find(CDATA_CLOSE, pos + len(CDATA_OPEN))
            if close == -1:
                raise self.error("Unclosed CDATA tag", pos)
            end = close + len(CDATA_CLOSE)
            return ParsedTag("", TagKind.CDATA, TagClosing.SELF_CLOSED, src[pos:end], end)

        i = pos + 1
        while i < length and not src[i].isspace() and src[i] != '>' and not src.startswith('/>', i):
            i += 1
        name = src[pos + 1:i]
        kind = tagKind_classify(name)
        text = ['<', name]
        properties: List[TagProperty] = []

        if verbosity_current() >= 3:
            LOG(f"Parsing tag <{name}> at {self.path}:{self.line_at(pos)}", level=3)

        def finished(closing: TagClosing, end: int) -> ParsedTag:
            return ParsedTag(name, kind, closing, ''.join(text), end, properties)

        def selfClosed(at: int) -> ParsedTag:
            text.append('/>')
            end = at + 2
            if not preformatted:
                end = self.newlineRun_skip(end)
            return finished(TagClosing.SELF_CLOSED, end)

        if i < length and src[i].isspace():
            i = self.whitespace_skip(i)
            text.append(' ')

        # Each pass handles one property, one separator or the tag's end
        while True:
            if i >= length:
                return finished(TagClosing.UNTERMINATED, length)

            char = src[i]
            if src.startswith('/>', i):
                return selfClosed(i)
            if char == '>':
                text.append('>')
                i += 1
                break
            if char == '\n':
                i += 1
                continue
            if char.isspace():
                i = self.whitespace_skip(i)
                text.append(' ')
                continue

            # Property name
            start = i
            while (i < length and src[i] != '=' and src[i] != '>'
                   and not src[i].isspace() and not src.startswith('/>', i)):
                i += 1
            prop = TagProperty(name=src[start:i])
            properties.append(prop)
            text.append(prop.name)

            if i < length and src[i].isspace():
                after = self.whitespace_skip(i)
                if after < length and src[after] == '=':
                    i = after
                else:
                    text.append(' ')
                    i = after
                    continue

            if i >= length or src[i] != '=':
                continue

            # Property value
            text.append('=')
            i = self.whitespace_skip(i + 1)
            if i >= length:
                continue

            quote = src[i]
            if quote in ('"', "'"):
                start = i
                i += 1
                while True:
                    if i >= length:
                        raise self.error("Unclosed quotation in HTML property", start)
                    if src[i] == '\\':
                        i += 2
                        continue
                    i += 1
                    if src[i - 1] == quote:
                        break
                prop.value = src[start + 1:i - 1]
                prop.quote = quote
                text.append(src[start:i])
            else:
                start = i
                while (i < length and src[i] != '>'
                       and not src[i].isspace() and not src.startswith('/>', i)):
                    i += 1
                prop.value = src[start:i]
                text.append(prop.value)
                if i < length and src[i].isspace():
                    i = self.whitespace_skip(i)
                    text.append(' ')

        # The opening tag's '>' has been consumed
        if not preformatted:
            i = self.newlineRun_skip(i)

        if kind is TagKind.RAW_TEXT:
            closer = f"</{name}>"
            close = src.find(closer, i)
            if close == -1:
                raise self.error(f"Unclosed {name} tag", i)
            body = src[i:close]
            if name == 'style':
                body = minify_css(body)
            text.append(body)
            text.append(closer)
            return finished(TagClosing.OPENED, close + len(closer))

        return finished(TagClosing.OPENED, i)


def minify_html(
    path: Union[str, Path],
    source: str,
    original: Optional[str] = None,
    offset: int = 0,
    strict: bool = False,
) -> str:
    """
    Minify an HTML document

    Args:
        path: Diagnostic path reported in errors
        source: HTML text
        original: Enclosing document used for line numbers (defaults to source)
        offset: Offset of source inside original
        strict: Treat mismatched closing tags as errors

    Returns:
        Minified HTML

    Raises:
        CompileError: on unterminated constructs (see HtmlMinifier.minify)

    Example:
        >>> minify_html("x.html", "<body>    <p>hi</p></body>")
        '<body><p>hi</p></body>'
    """
    return HtmlMinifier(path, source, original=original, offset=offset, strict=strict).minify()
