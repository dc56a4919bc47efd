"""
Build state and pipeline composition

ProgramState is the single record handed from stage to stage by the
command line entry point; pipeline() threads it through the stages.
"""

import dataclasses
from pathlib import Path
from argparse import Namespace
from functools import reduce
from typing import Any, Optional, Type, TypeVar, List, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Everything the build knows, accumulated stage by stage.

    Stages never mutate the state they receive: each one copies it, fills
    in its own fields and returns the copy.

        env_check       -> projectFile, projectRoot, envOK
        config_load     -> projectConfig, outputRoot, targets
        targets_build   -> buildResults
        results_report  -> (reads only)

    Attributes:
        inputdir: Where the search for the project file starts
        outputdir: Root of all build output
        verbosity: LOG() threshold (1-3)
        configFile: Project file name overriding settings.config_filename
        strict: Mismatched HTML closing tags fail the file
        envOK: Project file found and output directory ready
        projectFile: Absolute path of pagepress.yaml
        projectRoot: Directory target paths are relative to
        projectConfig: Validated ProjectConfig
        targets: Target list resolved against projectRoot/outputRoot
        outputRoot: outputdir / projectConfig.output
        buildResults: JobResult per built file, in build order
    """

    # From the command line
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    configFile: Optional[str] = field(default=None)
    strict: bool = field(default=False)

    # Filled in by the stages
    envOK: bool = field(default=False)
    projectFile: Path = field(default=Path("/"))
    projectRoot: Path = field(default=Path("/"))
    projectConfig: Optional[Any] = field(default=None)
    targets: Optional[List[Any]] = field(default=None)
    outputRoot: Path = field(default=Path("/"))
    buildResults: Optional[List[Any]] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Initial state from parsed arguments.

        Namespace entries that are not ProgramState fields (e.g. argparse
        bookkeeping added by the plugin wrapper) are ignored.
        """
        known = {f.name for f in dataclasses.fields(cls)}
        values = {key: value for key, value in vars(options).items() if key in known}
        values.update(inputdir=inputdir, outputdir=outputdir)
        return cls(**values)

    def copy(self: PS) -> PS:
        """Shallow copy for the next stage"""
        return dataclasses.replace(self)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Run stages left to right, feeding each the state returned by the last.

    Example:
        pipeline(state, env_check, config_load, targets_build, results_report)
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
