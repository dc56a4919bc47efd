"""
CSS minifier

Single left-to-right pass over a stylesheet. Only two pieces of state are
kept: the parenthesis depth (inside url(), calc(), ...) and whether the
scanner is probably inside a declaration (after a ':' and before the next
';'). Together they decide what a line break turns into.

Malformed input never raises; it just minifies less well.
"""

_TRIM_BEFORE = "(){},"
_TRIM_AFTER = "({},:"


def minify_css(source: str) -> str:
    """
    Minify CSS text

    Rules:
        - /* comments */ are removed (an unterminated comment drops the rest)
        - quoted strings are copied verbatim, escapes included
        - a newline and the whitespace after it become a single space inside
          parentheses or after a declaration colon, and disappear otherwise
        - whitespace before ( ) { } , and after ( { } , : is removed

    Args:
        source: Stylesheet text

    Returns:
        Minified stylesheet

    Example:
        >>> minify_css("a {\\n  color: red;\\n}")
        'a{color:red;}'
    """
    out: list = []
    pos = 0
    length = len(source)
    function_depth = 0
    maybe_in_rule = False

    def whitespace_skip(at: int) -> int:
        while at < length and source[at].isspace():
            at += 1
        return at

    def trailing_trim() -> None:
        while out and out[-1].isspace():
            out.pop()

    while pos < length:
        char = source[pos]
        pos += 1

        if char == '/' and pos < length and source[pos] == '*':
            end = source.find('*/', pos + 1)
            pos = length if end == -1 else end + 2
            continue

        if char in ('"', "'"):
            out.append(char)
            while pos < length:
                sub = source[pos]
                pos += 1
                out.append(sub)
                if sub == '\\' and pos < length:
                    out.append(source[pos])
                    pos += 1
                elif sub == char:
                    break
            continue

        if char == '\n':
            pos = whitespace_skip(pos)
            if function_depth > 0 or maybe_in_rule:
                out.append(' ')
            continue

        if char in _TRIM_BEFORE:
            trailing_trim()
        if char in _TRIM_AFTER:
            pos = whitespace_skip(pos)

        if char == '(':
            function_depth += 1
        elif char == ')':
            function_depth = max(0, function_depth - 1)
        elif char == ':':
            maybe_in_rule = True
        elif char == ';':
            maybe_in_rule = False

        out.append(char)

    return ''.join(out)
