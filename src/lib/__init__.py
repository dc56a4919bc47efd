"""
pagepress - Static document build pipeline

Macro preprocessing, HTML/CSS minification and Gemtext/Markdown translation.
"""

__version__ = "1.0.0"

from .macros import MacroEngine, MacroRegistry, expand
from .html import HtmlMinifier, minify_html
from .css import minify_css
from .gemtext import GemtextTranslator, translate_gemtext
from .markdown import translate_markdown
from .compiler import Builder, compile_text, jobs_collect
from .project import ProjectError, projectFile_find, project_load, targets_resolve
from .log import LOG, state_connectToLogger

__all__ = [
    "MacroEngine",
    "MacroRegistry",
    "expand",
    "HtmlMinifier",
    "minify_html",
    "minify_css",
    "GemtextTranslator",
    "translate_gemtext",
    "translate_markdown",
    "Builder",
    "compile_text",
    "jobs_collect",
    "ProjectError",
    "projectFile_find",
    "project_load",
    "targets_resolve",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
