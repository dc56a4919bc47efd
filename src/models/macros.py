"""
Macro specification and invocation models

Defines the structure of #!NAME(ARGS) macros for the registry and the
transient record the engine builds for each invocation it finds.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Set


@dataclass
class MacroInvocation:
    """
    A #!NAME(ARGS) construct located in a document

    Offsets are relative to the document the engine was asked to expand.

    Attributes:
        name: Macro name (e.g., "INCLUDE", "MINIFY")
        args: Raw, unexpanded argument text between the outer parentheses
        position: Offset of the '#!' marker
        end: Offset just past the closing ')'
        args_start: Offset of the first argument character
        line: 1-based line of the marker

    Example:
        For "x #!BASE64(hi) y":
        MacroInvocation(name="BASE64", args="hi", position=2, end=14, args_start=11, line=1)
    """
    name: str
    args: str
    position: int
    end: int
    args_start: int
    line: int = 1


@dataclass
class MacroFrame:
    """
    An invocation whose closing ')' has not been reached yet

    The engine keeps these on an explicit stack; arguments accumulate in
    `parts` already expanded, so nested macros resolve innermost first.
    """
    name: str
    position: int
    args_start: int
    line: int
    depth: int = 0
    parts: List[str] = field(default_factory=list)


@dataclass
class MacroSpec:
    """
    Specification for a macro

    Attributes:
        name: Macro name as written after '#!'
        description: Human-readable description
        handler: Expansion function (engine, invocation, expanded_args) -> str
        examples: Example usage strings
    """
    name: str
    description: str
    handler: Callable
    examples: List[str] = field(default_factory=list)


MACRO_MARKER: str = "#!"
MACRO_ESCAPE: str = "\\"

# MINIFY(type,code) accepted types
MINIFY_TYPES: Set[str] = {"html", "css"}
