"""
Build logging on top of Loguru.

LOG() looks up the verbosity of the ProgramState bound to the current
context, so the compiler, minifiers and builder can log without having
the state handed to them.

Build jobs run on worker threads. The Builder submits each job through
contextvars.copy_context().run, so a worker sees the same bound state as
the thread that started the build.

Levels:
    1  progress lines, failures          (loguru INFO)
    2  per-file and per-macro activity   (loguru DEBUG)
    3  tag and invocation trace          (loguru TRACE)

Usage:
    from .log import LOG

    LOG(f"Expanding INCLUDE at {path}:{line}", level=2)
"""

import sys
from contextvars import ContextVar
from typing import Any, Optional

from loguru import logger

from ..config import appsettings

# ProgramState of the build running in this context
_build_state: ContextVar[Optional[Any]] = ContextVar('build_state', default=None)

_LEVEL_NAMES = {1: "INFO", 2: "DEBUG", 3: "TRACE"}

logger_format = (
    "<green>{time:HH:mm:ss.SSS}</green> │ "
    "<level>{level: <5}</level> │ "
    "<magenta>{thread.name: <10}</magenta> │ "
    "<cyan>{module}.{function}</cyan>:<cyan>{line}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()
logger.add(sys.stderr, format=logger_format, level="TRACE")


def state_connectToLogger(state: Any) -> None:
    """
    Bind a ProgramState to the current context.

    Args:
        state: Object with a `verbosity` attribute (normally the ProgramState
               built from the command line)
    """
    _build_state.set(state)


def verbosity_current() -> int:
    """Verbosity of the bound state (0 when none); PAGEPRESS_DEBUG_MODE raises it to 3"""
    state = _build_state.get()
    verbosity = getattr(state, 'verbosity', 0) if state is not None else 0
    if appsettings.debug_mode:
        verbosity = max(verbosity, 3)
    return verbosity


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Emit message when the bound verbosity reaches level.

    Args:
        message: Text to log
        level: Verbosity needed to see the message (1-3)
        **kwargs: Passed through to loguru for message formatting
    """
    if verbosity_current() < level:
        return
    name = _LEVEL_NAMES.get(level, "TRACE")
    logger.opt(depth=1).log(name, message, **kwargs)
