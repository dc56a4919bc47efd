"""
pagepress - Static document build pipeline

Turns authored HTML, CSS, Gemtext and Markdown into minified / translated
output, with #!MACRO(...) preprocessing.
"""

__version__ = "1.0.0"

from .lib import (
    expand, minify_html, minify_css, translate_gemtext, translate_markdown,
    compile_text, Builder, LOG, state_connectToLogger,
)
from .models import CompileError, ErrorKind, FileType, BuildMode

__all__ = [
    "expand",
    "minify_html",
    "minify_css",
    "translate_gemtext",
    "translate_markdown",
    "compile_text",
    "Builder",
    "CompileError",
    "ErrorKind",
    "FileType",
    "BuildMode",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
