"""Compile express-style path patterns into regular expressions.

Supported syntax for string patterns:

- ``:name`` matches one path segment (stops at ``/``), ``/:name?`` makes
  the segment optional, ``:name(\\d+)`` supplies a custom capture and
  ``:name*`` lets the parameter soak up the following segments too.
- ``*`` matches anything, including slashes, and becomes an unnamed group.
- Raw capture groups ``(...)`` become unnamed groups; ``/(`` is turned into
  a non-capturing group.

Compiled regular expressions are passed through untouched.
"""

import re
from dataclasses import dataclass
from typing import Sequence

from aiorewrite.errors import PatternCompilationError

PatternSource = str | re.Pattern | Sequence[str | re.Pattern]

MATCHING_GROUP = re.compile(r"\((?!\?)")
PARAM = re.compile(r"(\\/)?(\\\.)?:(\w+)(\(.*?\))?(\*)?(\?)?")
STAR = re.compile(r"\*")


@dataclass
class Key:
    """A capture group found while compiling a pattern.

    Named parameters keep their name, unnamed groups are numbered from 0.
    ``offset`` is where the group starts in the generated expression and is
    only meaningful while compiling.
    """

    name: str | int
    optional: bool = False
    offset: int = 0


def path_to_regex(
    path: PatternSource,
    keys: list[Key] | None = None,
    *,
    sensitive: bool = False,
    strict: bool = False,
    end: bool = True,
) -> re.Pattern:
    """Compile ``path`` into a regular expression, collecting its keys.

    Args:
        path: A path pattern, a compiled regular expression or a list of either.
        keys: List that receives one ``Key`` per capture group, in group order.
        sensitive: Match case sensitively.
        strict: Don't allow an optional trailing slash.
        end: Anchor the expression at the end of the input.

    Returns:
        The compiled expression.

    Raises:
        PatternCompilationError: If the resulting expression is invalid.
    """
    if keys is None:
        keys = []
    flags = 0 if sensitive else re.IGNORECASE

    if isinstance(path, re.Pattern):
        _regex_keys(path, keys)
        return path

    if isinstance(path, (list, tuple)):
        sources = [
            path_to_regex(item, keys, sensitive=sensitive, strict=strict, end=end).pattern
            for item in path
        ]
        return _compile(path, "|".join(sources), flags)

    source = _translate(path, keys, strict=strict, end=end)
    return _compile(path, source, flags)


def _compile(path, source: str, flags: int) -> re.Pattern:
    try:
        return re.compile(source, flags)
    except re.error as exc:
        raise PatternCompilationError(path, str(exc)) from exc


def _regex_keys(expr: re.Pattern, keys: list[Key]):
    names = {index: name for name, index in expr.groupindex.items()}
    unnamed = 0
    for index in range(1, expr.groups + 1):
        if index in names:
            keys.append(Key(names[index]))
        else:
            keys.append(Key(unnamed))
            unnamed += 1


def _translate(path: str, keys: list[Key], *, strict: bool, end: bool) -> str:
    first = len(keys)
    if strict:
        tail = ""
    else:
        tail = "?" if path.endswith("/") else "/?"

    source = f"^{path}{tail}"
    source = source.replace("/(", "/(?:")
    source = re.sub(r"([/.])", r"\\\1", source)

    shift = 0

    def expand_param(match: re.Match) -> str:
        nonlocal shift
        slash, fmt, name, capture, star, optional = match.groups()
        slash = slash or ""
        fmt = fmt or ""
        optional = optional or ""
        capture = capture or rf"([^\/{fmt}]+?)"

        keys.append(Key(name, bool(optional), match.start() + shift))

        result = (
            ("" if optional else slash)
            + "(?:"
            + fmt
            + (slash if optional else "")
            + capture
            + (rf"((?:[\/{fmt}].+?)?)" if star else "")
            + ")"
            + optional
        )
        shift += len(result) - len(match.group(0))
        return result

    source = PARAM.sub(expand_param, source)

    # Each "*" grows into "(.*)", moving every key that follows it
    stars = [match.start() for match in STAR.finditer(source)]
    for key in keys[first:]:
        key.offset += 3 * sum(1 for star in stars if star < key.offset)
    source = STAR.sub("(.*)", source)

    # Unnamed groups are slotted in between the named keys by position
    position = first
    unnamed = 0
    for group in MATCHING_GROUP.finditer(source):
        if _is_escaped(source, group.start()):
            continue
        if position == len(keys) or keys[position].offset > group.start():
            keys.insert(position, Key(unnamed, offset=group.start()))
            unnamed += 1
        position += 1

    if end:
        source += "$"
    elif not source.endswith("/"):
        source += r"(?=\/|$)"
    return source


def _is_escaped(source: str, index: int) -> bool:
    backslashes = 0
    while index > 0 and source[index - 1] == "\\":
        backslashes += 1
        index -= 1
    return backslashes % 2 == 1
