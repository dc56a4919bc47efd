"""
Markdown to HTML boundary

Markdown is not translated here: it is handed to mistune with a fixed
feature set (GFM tables, strikethrough, footnotes, task lists and
autolinks, raw HTML passed through). Frontmatter and math are not enabled.
"""

import mistune

MARKDOWN_PLUGINS = ['table', 'strikethrough', 'footnotes', 'task_lists', 'url']


def markdown_create() -> mistune.Markdown:
    """A fresh converter; builds running on worker threads never share one"""
    return mistune.create_markdown(escape=False, plugins=MARKDOWN_PLUGINS)


def translate_markdown(text: str) -> str:
    """Convert Markdown to HTML"""
    return markdown_create()(text)
