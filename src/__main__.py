#!/usr/bin/env python3
"""
pagepress - Static document build pipeline

Builds the targets listed in a project's pagepress.yaml: HTML and CSS are
minified, Gemtext and Markdown are translated to HTML, and every compiled
file first has its #!MACRO(...) invocations expanded. Targets can also be
copied or hard-linked as-is.

The command line is a ChRIS plugin: chris_plugin parses the arguments and
hands main() the input and output directories.

Usage:
    pagepress inputdir/ outputdir/

    inputdir is searched (upwards) for pagepress.yaml; build output is
    written below outputdir.

Examples:
    # Build the project in the current directory
    pagepress . public/

    # Verbose output, strict HTML closing tags
    pagepress . public/ --strict -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import (
    Builder, ProjectError, projectFile_find, project_load, targets_resolve,
    __version__, LOG, state_connectToLogger,
)
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    description="pagepress - build minified / translated static documents",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--configFile",
    default=None,
    type=str,
    help=f"Project file name searched from inputdir upwards (default: {appsettings.config_filename})",
)

parser.add_argument(
    "--strict",
    action="store_true",
    default=appsettings.strict_mode,
    help="Treat mismatched HTML closing tags as errors",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Locate the project file and prepare the output directory.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - projectFile: Resolved path to the project file
            - projectRoot: Directory containing it
            - envOK: True if environment is valid

    Exits:
        1 if no project file is found
    """
    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    filename = state.configFile or appsettings.config_filename
    try:
        state.projectFile = projectFile_find(state.inputdir, filename)
    except ProjectError as e:
        print(f"Error: {e}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.projectRoot = state.projectFile.parent
    LOG(f"Project file: {state.projectFile}", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    state.envOK = True
    return state


def config_load(inputstate: ProgramState) -> ProgramState:
    """
    Read the project file and resolve its targets.

    Args:
        inputstate: Program state with projectFile set

    Returns:
        ProgramState with added fields:
            - projectConfig: Parsed ProjectConfig
            - outputRoot: Directory receiving the build output
            - targets: Resolved Targets

    Exits:
        1 if the project file cannot be read or is invalid
    """
    state = inputstate.copy()

    LOG("Reading project file...", level=1)
    try:
        state.projectConfig = project_load(state.projectFile)
    except ProjectError as e:
        print(f"Project error: {e}", file=sys.stderr)
        sys.exit(1)

    state.outputRoot = state.outputdir / state.projectConfig.output
    state.outputRoot.mkdir(parents=True, exist_ok=True)
    state.targets = targets_resolve(state.projectConfig, state.projectRoot, state.outputRoot)
    LOG(f"Loaded {len(state.targets)} targets, output to {state.outputRoot}", level=2)
    return state


def targets_build(inputstate: ProgramState) -> ProgramState:
    """
    Build every target.

    Files are built concurrently; each file's failure is recorded in its
    own JobResult and does not stop the rest of the build.

    Args:
        inputstate: Program state with targets resolved

    Returns:
        ProgramState with added field:
            - buildResults: One JobResult per file
    """
    state = inputstate.copy()

    LOG("Building targets...", level=1)
    builder = Builder(
        targets=state.targets or [],
        max_workers=appsettings.max_workers,
        strict=state.strict,
    )
    state.buildResults = builder.build()
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Report build results.

    Args:
        inputstate: Program state with buildResults populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if any file failed to build
    """
    state: ProgramState = inputstate.copy()
    results = state.buildResults or []
    failures = [result for result in results if not result.ok]

    for failure in failures:
        print(failure.error, file=sys.stderr)

    LOG(f"\n✓ Built {len(results) - len(failures)} of {len(results)} files", level=1)
    LOG(f"  Output: {state.outputRoot}", level=1)

    if failures:
        sys.exit(1)
    return state


@chris_plugin(
    parser=parser,
    title="pagepress - static document build pipeline",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - build a pagepress project.

    Orchestrates the full pipeline:
        1. env_check: Locate the project file
        2. config_load: Parse it and resolve targets
        3. targets_build: Build every file concurrently
        4. results_report: Report failures and exit status

    Args:
        options: CLI arguments from argparse
            - configFile: Optional[str] - Project file name
            - strict: bool - Strict HTML closing tags
            - verbosity: int - Logging verbosity level (1-3)
        inputdir: Directory to search for the project file
        outputdir: Directory where build output is written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, config_load, targets_build, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
