"""naming.py - Flag-key naming conventions.

cfg keys are lower snake case.  Category keys, field names and property
names come from user documents, so they may be CamelCase, kebab-case or
contain dots; all of them collapse to ``lower_snake_case``.  Letters outside
ASCII are kept (``café`` stays ``café``); scripts without case never split.
"""

import re

# Runs of anything that is not a Unicode letter or digit
_SEPARATOR_RE = re.compile(r"[\W_]+")


def _split_case(chunk: str) -> list[str]:
    # Word boundaries inside an alphanumeric run:
    #   "fooBar" -> foo|Bar, "HTTPServer" -> HTTP|Server, "v2Beta" -> v2|Beta
    words: list[str] = []
    start = 0
    for i in range(1, len(chunk)):
        prev, cur = chunk[i - 1], chunk[i]
        nxt = chunk[i + 1] if i + 1 < len(chunk) else ""
        if cur.isupper() and (prev.islower() or prev.isdigit()):
            words.append(chunk[start:i])
            start = i
        elif cur.isupper() and prev.isupper() and nxt.islower():
            words.append(chunk[start:i])
            start = i
    words.append(chunk[start:])
    return words


def snake_case(name: str) -> str:
    """Convert *name* to ``lower_snake_case``.

    >>> snake_case("Target")
    'target'
    >>> snake_case("feature_HTTPServer-port")
    'feature_http_server_port'
    >>> snake_case("feature_Café")
    'feature_café'
    """
    words: list[str] = []
    for chunk in _SEPARATOR_RE.split(name):
        if chunk:
            words.extend(_split_case(chunk))
    return "_".join(w.lower() for w in words)
