"""
HTML minifier models

Tag classification sets and the transient structures the minifier builds
while walking a document: parsed opening tags, their properties and the
explicit frame stack entries that replace native recursion.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional


class TagKind(Enum):
    """
    Whitespace classification of an HTML tag

    TEXTUAL:  inline content, whitespace runs collapse to one space
    CONTENT:  structural container, whitespace collapses to nothing
    RAW_TEXT: script/style, body copied without tag scanning
    CDATA:    <![CDATA[...]]>, passed through verbatim
    COMMENT:  <!--...-->, dropped
    """
    TEXTUAL = "textual"
    CONTENT = "content"
    RAW_TEXT = "raw-text"
    CDATA = "cdata"
    COMMENT = "comment"


class TagClosing(Enum):
    """How an opening tag ended"""
    SELF_CLOSED = "self-closed"      # <br/>
    OPENED = "opened"                # <p> ... expects a closer
    UNTERMINATED = "unterminated"    # input ended inside the tag


TEXTUAL_TAGS: FrozenSet[str] = frozenset({
    "a", "abbr", "acronym", "aside", "b", "bdi", "bdo", "big", "blockquote",
    "button", "caption", "cite", "code", "dd", "del", "details", "dfn", "dt",
    "em", "figcaption", "h1", "h2", "h3", "h4", "h5", "h6", "i", "ins", "kbd",
    "label", "legend", "li", "mark", "marquee", "meter", "nobr", "option",
    "output", "p", "pre", "progress", "q", "rb", "rp", "rt", "s", "sample",
    "small", "span", "strong", "sub", "summary", "sup", "td", "textarea",
    "th", "time", "title", "u", "var",
})

RAW_TEXT_TAGS: FrozenSet[str] = frozenset({"script", "style"})

PREFORMATTED_TAGS: FrozenSet[str] = frozenset({"pre"})

COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
CDATA_OPEN = "<![CDATA["
CDATA_CLOSE = "]]>"


def tagKind_classify(name: str) -> TagKind:
    """
    Classify an element name for whitespace handling

    Args:
        name: Tag name as written in the source (case-sensitive)

    Returns:
        RAW_TEXT for script/style, TEXTUAL for the inline set, CONTENT otherwise

    Example:
        >>> tagKind_classify("span")
        <TagKind.TEXTUAL: 'textual'>
        >>> tagKind_classify("div")
        <TagKind.CONTENT: 'content'>
    """
    if name in RAW_TEXT_TAGS:
        return TagKind.RAW_TEXT
    if name in TEXTUAL_TAGS:
        return TagKind.TEXTUAL
    return TagKind.CONTENT


@dataclass
class TagProperty:
    """
    One property of an opening tag

    Attributes:
        name: Property name
        value: Value text without quotes, None for bare properties
        quote: Quote character used in the source ('"', "'" or "" if unquoted)
    """
    name: str
    value: Optional[str] = None
    quote: str = ""


@dataclass
class ParsedTag:
    """
    Result of parsing one tag starting at a '<'

    Attributes:
        name: Tag name ("" for comments and CDATA)
        kind: Classification of the tag
        closing: How the opening tag ended
        text: Minified text produced for the tag itself
        end: Offset just past everything the tag consumed
        properties: Properties in source order
    """
    name: str
    kind: TagKind
    closing: TagClosing
    text: str
    end: int
    properties: List[TagProperty] = field(default_factory=list)


@dataclass
class TagFrame:
    """
    An open element on the minifier's explicit parse stack

    Attributes:
        name: Element name the closer is matched against
        kind: TEXTUAL or CONTENT
        preformatted: True inside <pre> (inherited by nested frames)
        parts: Accumulated output, starting with the opening tag text
        position: Offset of the opening tag; its line is only worked out
                  for diagnostics
    """
    name: str
    kind: TagKind
    preformatted: bool
    parts: List[str] = field(default_factory=list)
    position: int = 0
