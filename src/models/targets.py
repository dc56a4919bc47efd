"""
Build target models

File types, build modes and the pydantic models of the project file
(pagepress.yaml), plus the per-file job and result records the builder
passes between threads.
"""

from enum import Enum
from pathlib import Path
from dataclasses import dataclass
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class FileType(Enum):
    """Source formats the compiler knows how to handle"""
    HTML = "html"
    CSS = "css"
    GEMTEXT = "gemtext"
    MARKDOWN = "markdown"
    UNKNOWN = "unknown"

    @classmethod
    def from_path(cls, path: Path) -> "FileType":
        """Derive the file type from a path's extension"""
        return FILETYPE_NAMES.get(path.suffix.lstrip("."), cls.UNKNOWN)


# Names accepted both as extensions and as `filetype:` values
FILETYPE_NAMES = {
    "html": FileType.HTML,
    "css": FileType.CSS,
    "gmi": FileType.GEMTEXT,
    "gemtext": FileType.GEMTEXT,
    "md": FileType.MARKDOWN,
    "markdown": FileType.MARKDOWN,
}

# Extensions compiled by default when a target has no explicit mode
COMPILED_EXTENSIONS = {"gmi", "html", "svg", "md", "css"}


class BuildMode(Enum):
    """What to do with each file of a target"""
    COMPILE = "compile"
    COPY = "copy"
    LINK = "link"

    @classmethod
    def default_for(cls, path: Path) -> "BuildMode":
        if path.suffix.lstrip(".") in COMPILED_EXTENSIONS:
            return cls.COMPILE
        return cls.COPY


class TargetConfig(BaseModel):
    """
    One `targets:` entry of pagepress.yaml

    Attributes:
        path: Source file or directory, relative to the project root
        mode: Build mode (defaults from the extension)
        output: Output name inside the output directory (defaults to the
                source's file name)
        filetype: Forced file type for compile mode
    """
    path: str = Field(min_length=1)
    mode: Optional[BuildMode] = None
    output: Optional[str] = None
    filetype: Optional[FileType] = None

    @field_validator("filetype", mode="before")
    @classmethod
    def filetype_parse(cls, value: Any) -> Any:
        if value is None or isinstance(value, FileType):
            return value
        try:
            return FILETYPE_NAMES[str(value)]
        except KeyError:
            raise ValueError(
                f"unexpected filetype '{value}', must be one of html, css, gmi, gemtext, md, markdown"
            )


class ProjectConfig(BaseModel):
    """
    Parsed pagepress.yaml

    Attributes:
        output: Subdirectory of the output root that receives build output
        targets: Build targets, at least one
    """
    output: str = "."
    targets: List[TargetConfig] = Field(min_length=1)


@dataclass
class Target:
    """A resolved build target (absolute paths, mode and type decided)"""
    path: Path
    output: Path
    mode: BuildMode
    file_type: Optional[FileType] = None


@dataclass
class BuildJob:
    """
    One file to build

    Attributes:
        source: Source file
        output: Destination file
        mode: Build mode inherited from the target
        file_type: How to compile the file (compile mode only)
        target: Path of the target this file belongs to (for reporting)
    """
    source: Path
    output: Path
    mode: BuildMode
    file_type: FileType
    target: Path


@dataclass
class JobResult:
    """Outcome of one BuildJob"""
    job: BuildJob
    ok: bool
    error: Optional[str] = None
