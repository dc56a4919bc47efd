"""
Models package for pagepress

Contains data structures and type definitions for the build pipeline.
"""

from .state import ProgramState, pipeline
from .errors import CompileError, ErrorKind, LineIndex, line_numberOf
from .macros import MacroInvocation, MacroFrame, MacroSpec
from .html import TagKind, TagClosing, TagProperty, ParsedTag, TagFrame, TEXTUAL_TAGS, tagKind_classify
from .targets import FileType, BuildMode, TargetConfig, ProjectConfig, Target, BuildJob, JobResult

__all__ = [
    "ProgramState",
    "pipeline",
    "CompileError",
    "ErrorKind",
    "line_numberOf",
    "LineIndex",
    "MacroInvocation",
    "MacroFrame",
    "MacroSpec",
    "TagKind",
    "TagClosing",
    "TagProperty",
    "ParsedTag",
    "TagFrame",
    "TEXTUAL_TAGS",
    "tagKind_classify",
    "FileType",
    "BuildMode",
    "TargetConfig",
    "ProjectConfig",
    "Target",
    "BuildJob",
    "JobResult",
]
