"""
Project file loader

A project is a directory holding a pagepress.yaml that lists the build
targets. The file is searched for from the input directory upwards, so a
build can be started from any subdirectory of the project.

pagepress.yaml:
  - output: Subdirectory of the output root (optional)
  - targets: List of {path, mode, output, filetype}
"""

import yaml
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from ..models.targets import BuildMode, ProjectConfig, Target


class ProjectError(Exception):
    """Raised when the project file is missing or invalid"""
    pass


def projectFile_find(start: Path, filename: str) -> Path:
    """
    Find the project file in start or its closest ancestor

    Raises:
        ProjectError: If no directory up to the filesystem root has one
    """
    start = start.resolve()
    for directory in (start, *start.parents):
        candidate = directory / filename
        if candidate.is_file():
            return candidate
    raise ProjectError(f"Failed to find {filename} in {start} or any parent directory")


def project_load(project_file: Path) -> ProjectConfig:
    """Load and validate a project file"""
    try:
        with open(project_file, 'r', encoding='utf-8') as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ProjectError(f"Failed to parse {project_file}: {e}")
    except OSError as e:
        raise ProjectError(f"Failed to read {project_file}: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ProjectError(f"{project_file} must contain a mapping")

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ProjectError(f"Invalid project file {project_file}:\n{e}")


def targets_resolve(config: ProjectConfig, root: Path, output_root: Path) -> List[Target]:
    """
    Turn target entries into absolute Targets

    Args:
        config: Parsed project file
        root: Project root (directory of the project file)
        output_root: Directory receiving the build output

    Returns:
        One Target per entry, in file order
    """
    targets = []
    for entry in config.targets:
        path = root / entry.path
        mode: Optional[BuildMode] = entry.mode or BuildMode.default_for(path)
        output = output_root / (entry.output or path.name)
        targets.append(Target(path=path, output=output, mode=mode, file_type=entry.filetype))
    return targets
