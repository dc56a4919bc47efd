"""
Macro engine for #!NAME(ARGS) invocations

Runs before any format-specific processing. The engine scans text for the
'#!' marker, collects each invocation's arguments up to the matching ')'
and replaces the invocation with the macro's expansion.

Key features:
- Arguments are expanded before the macro runs (innermost first)
- Parentheses inside arguments nest; only the depth-0 ')' ends the call
- Open invocations live on an explicit frame stack, not the call stack
- '\\#!' produces a literal '#!' (the only escape)
- Errors carry the document path and the 1-based line of the marker

Example:
    >>> expand("a #!BASE64(hi) b", "page.html")
    'a aGk= b'
"""

import re
import base64
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from ..models.errors import CompileError, ErrorKind, LineIndex
from ..models.macros import (
    MacroInvocation, MacroFrame, MacroSpec, MACRO_MARKER, MACRO_ESCAPE, MINIFY_TYPES,
)
from .css import minify_css
from .html import minify_html
from .log import LOG

_NAME = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')
_ARGS_TOKEN = re.compile(r'#!|[()]')


class MacroRegistry:
    """
    Registry of macro specifications

    Maps macro names to MacroSpec objects. The built-in macros are
    registered on construction; more can be added with register().
    """

    def __init__(self) -> None:
        self.specs: Dict[str, MacroSpec] = {}
        self.builtinMacros_register()

    def register(self, spec: MacroSpec) -> None:
        """Register a macro specification (replaces one with the same name)"""
        self.specs[spec.name] = spec

    def get(self, name: str) -> Optional[MacroSpec]:
        return self.specs.get(name)

    def builtinMacros_register(self) -> None:
        """Register INCLUDE, INCLUDE_BASE64, BASE64 and MINIFY"""

        def include_handler(engine: "MacroEngine", invocation: MacroInvocation, args: str) -> str:
            """Splice another file, itself macro-expanded"""
            path = engine.path_resolve(args)
            try:
                recursive = path.resolve() in engine.includes
                if not recursive:
                    source = path.read_text(encoding='utf-8')
            except (OSError, ValueError) as e:
                raise engine.error(
                    ErrorKind.IO, f"Error in INCLUDE macro reading {path}", invocation, cause=e
                ) from e

            if recursive:
                raise engine.error(
                    ErrorKind.SYNTAX, f"Recursive INCLUDE of {path}", invocation
                )

            LOG(f"Including {path} ({len(source)} characters)", level=2)
            included = MacroEngine(
                path,
                registry=engine.registry,
                strict=engine.strict,
                includes=engine.includes,
            )
            return included.expand(source)

        def includeBase64_handler(engine: "MacroEngine", invocation: MacroInvocation, args: str) -> str:
            """Splice another file's raw bytes as base64"""
            path = engine.path_resolve(args)
            try:
                data = path.read_bytes()
            except (OSError, ValueError) as e:
                raise engine.error(
                    ErrorKind.IO, f"Error in INCLUDE_BASE64 macro reading {path}", invocation, cause=e
                ) from e
            return base64.b64encode(data).decode('ascii')

        def base64_handler(engine: "MacroEngine", invocation: MacroInvocation, args: str) -> str:
            return base64.b64encode(args.encode('utf-8')).decode('ascii')

        def minify_handler(engine: "MacroEngine", invocation: MacroInvocation, args: str) -> str:
            """MINIFY(type,code): everything after the first comma is code"""
            kind, comma, code = args.partition(',')
            if not comma:
                raise engine.error(
                    ErrorKind.ARGUMENT, "MINIFY expects a type and code separated by ','", invocation
                )
            if kind.strip() not in MINIFY_TYPES:
                raise engine.error(
                    ErrorKind.ARGUMENT,
                    f"Unknown MINIFY type '{kind.strip()}', expected html or css",
                    invocation,
                )

            if kind.strip() == 'css':
                return minify_css(code)

            original = engine.document
            if args != invocation.args:
                # Nested macros changed the argument; lines inside the code
                # are counted through their expansion
                original = original[:invocation.args_start] + args
            return minify_html(
                engine.path,
                code,
                original=original,
                offset=invocation.args_start + len(kind) + 1,
                strict=engine.strict,
            )

        self.register(MacroSpec(
            name="INCLUDE",
            description="Insert another file (relative to this one), expanding its macros",
            handler=include_handler,
            examples=["#!INCLUDE(partials/header.html)"],
        ))
        self.register(MacroSpec(
            name="INCLUDE_BASE64",
            description="Insert another file's bytes base64-encoded",
            handler=includeBase64_handler,
            examples=["<img src=\"data:image/png;base64,#!INCLUDE_BASE64(logo.png)\">"],
        ))
        self.register(MacroSpec(
            name="BASE64",
            description="Base64-encode the (expanded) argument",
            handler=base64_handler,
            examples=["#!BASE64(hello)"],
        ))
        self.register(MacroSpec(
            name="MINIFY",
            description="Minify inline html or css code",
            handler=minify_handler,
            examples=["#!MINIFY(css,a { color: red; })"],
        ))


class MacroEngine:
    """
    Expands the macros of one document

    An engine is bound to the document's path: INCLUDE and INCLUDE_BASE64
    resolve relative to it and it is the path reported in errors.
    """

    def __init__(
        self,
        path: Union[str, Path],
        registry: Optional[MacroRegistry] = None,
        strict: bool = False,
        includes: frozenset = frozenset(),
    ) -> None:
        """
        Initialize engine

        Args:
            path: Path of the document being expanded
            registry: Macro registry (a fresh built-in registry if omitted)
            strict: Passed to the HTML minifier for MINIFY(html,...)
            includes: Resolved paths of the documents currently including
                      this one (guards against include cycles)
        """
        self.path = Path(path)
        self.registry = registry if registry is not None else MacroRegistry()
        self.strict = strict
        self.includes = includes | {self.path.resolve()}
        self.document = ""
        self.lines: Optional[LineIndex] = None

    def expand(self, text: str) -> str:
        """
        Expand all macros in text

        Args:
            text: Document text

        Returns:
            Expanded text; the same object when text holds no marker

        Raises:
            CompileError: on malformed or unknown invocations, unreadable
                          includes and errors from MINIFY(html,...)
        """
        if MACRO_MARKER not in text:
            return text

        self.document = text
        self.lines = None
        output: List[str] = []
        frames: List[MacroFrame] = []
        pos = 0
        length = len(text)

        while pos < length:
            parts = frames[-1].parts if frames else output

            if frames:
                match = _ARGS_TOKEN.search(text, pos)
                if match is None:
                    frame = frames[-1]
                    raise CompileError(
                        ErrorKind.SYNTAX,
                        f"Expected ) to end {frame.name} macro invocation",
                        self.path,
                        frame.line,
                    )
                token_at, token = match.start(), match.group()
            else:
                token_at = text.find(MACRO_MARKER, pos)
                if token_at == -1:
                    output.append(text[pos:])
                    break
                token = MACRO_MARKER

            if token == '(':
                parts.append(text[pos:token_at + 1])
                frames[-1].depth += 1
                pos = token_at + 1
            elif token == ')':
                frame = frames[-1]
                if frame.depth > 0:
                    parts.append(text[pos:token_at + 1])
                    frame.depth -= 1
                    pos = token_at + 1
                    continue
                parts.append(text[pos:token_at])
                frames.pop()
                expansion = self.frame_dispatch(frame, token_at)
                (frames[-1].parts if frames else output).append(expansion)
                pos = token_at + 1
            elif token_at > 0 and text[token_at - 1] == MACRO_ESCAPE:
                parts.append(text[pos:token_at - 1])
                parts.append(MACRO_MARKER)
                pos = token_at + len(MACRO_MARKER)
            else:
                parts.append(text[pos:token_at])
                frame, pos = self.invocation_open(text, token_at)
                frames.append(frame)

        if frames:
            frame = frames[-1]
            raise CompileError(
                ErrorKind.SYNTAX,
                f"Expected ) to end {frame.name} macro invocation",
                self.path,
                frame.line,
            )

        return ''.join(output)

    def invocation_open(self, text: str, marker: int) -> Tuple[MacroFrame, int]:
        """
        Parse '#!NAME(' at marker

        Returns:
            The new frame and the offset of the first argument character
        """
        line = self.line_at(marker)
        name_at = marker + len(MACRO_MARKER)
        match = _NAME.match(text, name_at)
        name = match.group() if match else ""
        paren = name_at + len(name)

        if paren >= len(text) or text[paren] != '(':
            if paren < len(text) and text[paren] == ')':
                message = f"Unmatched ) in {name or 'macro'} invocation"
            elif not name:
                message = "Expected macro name after #!"
            else:
                message = f"Expected ( after macro name {name}"
            raise CompileError(ErrorKind.SYNTAX, message, self.path, line)

        if self.registry.get(name) is None:
            raise CompileError(ErrorKind.SYNTAX, f"Unknown macro '{name}'", self.path, line)

        LOG(f"Found {name} invocation at {self.path}:{line}", level=3)
        return MacroFrame(name=name, position=marker, args_start=paren + 1, line=line), paren + 1

    def frame_dispatch(self, frame: MacroFrame, close: int) -> str:
        """Run the macro of a completed frame on its expanded arguments"""
        invocation = MacroInvocation(
            name=frame.name,
            args=self.document[frame.args_start:close],
            position=frame.position,
            end=close + 1,
            args_start=frame.args_start,
            line=frame.line,
        )
        spec = self.registry.get(frame.name)
        LOG(f"Expanding {frame.name} at {self.path}:{frame.line}", level=2)
        return spec.handler(self, invocation, ''.join(frame.parts))

    def line_at(self, offset: int) -> int:
        """Line of an offset in the document being expanded"""
        if self.lines is None:
            self.lines = LineIndex(self.document)
        return self.lines.line_of(offset)

    def path_resolve(self, argument: str) -> Path:
        """Resolve a macro path argument against this document's directory"""
        return self.path.parent / argument.strip()

    def error(
        self,
        kind: ErrorKind,
        message: str,
        invocation: MacroInvocation,
        cause: Optional[BaseException] = None,
    ) -> CompileError:
        return CompileError(kind, message, self.path, invocation.line, cause=cause)


def expand(text: str, path: Union[str, Path], strict: bool = False) -> str:
    """
    Expand the macros of a document

    Args:
        text: Document text
        path: Document path (includes resolve relative to it)
        strict: Strict HTML closing tags for MINIFY(html,...)

    Returns:
        Expanded text (the same object if there was nothing to expand)
    """
    return MacroEngine(path, strict=strict).expand(text)
