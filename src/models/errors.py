"""
Structured compile errors

Every failure raised while compiling a document is a CompileError carrying
its kind, the diagnostic path and the 1-based line of the offending
construct, so callers can branch on the kind instead of the message text.
"""

import re
from bisect import bisect_left
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union


class ErrorKind(Enum):
    """
    Categories of compile failures

    SYNTAX:   unterminated constructs, missing delimiters, unknown names
    IO:       unreadable include, wrapped with the invoking location
    ARGUMENT: bad macro argument (e.g. MINIFY type)
    """
    SYNTAX = "syntax"
    IO = "io"
    ARGUMENT = "argument"


class CompileError(Exception):
    """
    Raised when a document cannot be compiled

    Attributes:
        kind: ErrorKind of the failure
        message: Human-readable description without location
        path: Diagnostic path of the document being compiled
        line: Line of the offending construct (1-based for macros and HTML)
        cause: Underlying exception, if any (e.g. OSError from an include)
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        path: Union[str, Path],
        line: int,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.path = str(path)
        self.line = line
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"{self.kind.value} error: {self.message} at {self.path}:{self.line}"
        if self.cause is not None:
            text += f": {self.cause}"
        return text


def line_numberOf(text: str, offset: int) -> int:
    """1-based line number of the character at offset in text"""
    return text.count("\n", 0, offset) + 1


class LineIndex:
    """
    Newline offsets of one text, for repeated offset-to-line lookups

    Building the index is one pass over the text; each lookup is a binary
    search, so numbering every construct of a document stays linear.
    """

    def __init__(self, text: str) -> None:
        self.newlines: List[int] = [match.start() for match in re.finditer('\n', text)]

    def line_of(self, offset: int) -> int:
        """1-based line number of the character at offset"""
        return bisect_left(self.newlines, offset) + 1
