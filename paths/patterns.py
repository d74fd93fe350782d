"""Compile gitignore-style rule lines into segment matchers.

Each non-blank, non-comment line of an ignore file becomes a CompiledPattern:
- a leading '!' negates the rule (a match re-includes the path)
- a leading '/' anchors the rule to the directory holding the ignore file
- a trailing '/' restricts the rule to directories
- any other '/' also anchors the rule
- '*', '?' and '[...]' match inside a single path segment
- a segment that is exactly '**' spans zero or more whole segments
- a backslash escapes the next character

Malformed globs never raise; they compile to a segment that matches nothing.
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

_GLOB_CHARS = frozenset("*?[")
_NEVER = re.compile(r"(?!)")


class SegmentKind(str, Enum):
    """How a single pattern segment is matched against a path segment."""
    LITERAL = "literal"
    WILDCARD = "wildcard"      # exactly '*': any one segment
    GLOB = "glob"              # '*', '?' or '[...]' mixed with literal text
    RECURSIVE = "recursive"    # '**': zero or more segments


@dataclass(frozen=True)
class Segment:
    """One '/'-separated piece of a compiled pattern."""
    kind: SegmentKind
    text: str
    regex: re.Pattern | None = None

    def matches(self, name: str) -> bool:
        """Match one path segment (never called for RECURSIVE segments)."""
        match self.kind:
            case SegmentKind.LITERAL:
                return name == self.text
            case SegmentKind.WILDCARD | SegmentKind.RECURSIVE:
                return bool(name)
            case SegmentKind.GLOB:
                return self.regex.fullmatch(name) is not None


@dataclass(frozen=True)
class CompiledPattern:
    """A parsed ignore rule."""
    raw: str
    negated: bool
    directory_only: bool
    anchored: bool
    segments: tuple[Segment, ...]
    declaring_directory: Path | None = None

    def __str__(self) -> str:
        return self.raw


def compile_pattern(line: str, declaring_directory: Path | None = None) -> CompiledPattern | None:
    """Compile one raw ignore-file line.

    Args:
        line: Line as read from the ignore file, untrimmed
        declaring_directory: Directory holding the ignore file

    Returns:
        The compiled pattern, or None for blank and comment lines
    """
    text = _strip_trailing_whitespace(line.rstrip("\r\n"))
    if not text.strip() or text.lstrip().startswith("#"):
        return None

    raw = text
    negated = False
    if text.startswith("!"):
        negated = True
        text = text[1:]
    elif text.startswith(("\\!", "\\#")):
        text = text[1:]

    anchored = False
    if text.startswith("/"):
        anchored = True
        text = text[1:]

    directory_only = False
    if text.endswith("/"):
        directory_only = True
        text = text[:-1]

    if "/" in text:
        anchored = True

    segments = tuple(_compile_segment(part) for part in text.split("/") if part)
    if not segments:
        logger.debug(f"Pattern '{raw}' has no segments and will never match")

    return CompiledPattern(
        raw=raw,
        negated=negated,
        directory_only=directory_only,
        anchored=anchored,
        segments=segments,
        declaring_directory=declaring_directory,
    )


def _strip_trailing_whitespace(text: str) -> str:
    """Trim trailing spaces and tabs, keeping one backslash-escaped space."""
    stripped = text.rstrip(" \t")
    if len(stripped) == len(text) or not stripped.endswith("\\"):
        return stripped

    backslashes = len(stripped) - len(stripped.rstrip("\\"))
    if backslashes % 2 == 1:
        return stripped + text[len(stripped)]
    return stripped


def _compile_segment(part: str) -> Segment:
    if part == "**":
        return Segment(SegmentKind.RECURSIVE, part)
    if part == "*":
        return Segment(SegmentKind.WILDCARD, part)
    if not _has_glob(part):
        return Segment(SegmentKind.LITERAL, _unescape(part))

    try:
        regex = re.compile(_translate(part))
    except re.error as e:
        logger.debug(f"Invalid glob segment '{part}': {e}")
        regex = _NEVER
    return Segment(SegmentKind.GLOB, part, regex)


def _has_glob(part: str) -> bool:
    escaped = False
    for char in part:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char in _GLOB_CHARS:
            return True
    return False


def _unescape(part: str) -> str:
    return re.sub(r"\\(.)", r"\1", part)


def _translate(part: str) -> str:
    """Translate one glob segment into a regular expression."""
    pieces = []
    i, n = 0, len(part)
    while i < n:
        char = part[i]
        i += 1
        if char == "\\":
            if i < n:
                pieces.append(re.escape(part[i]))
                i += 1
            else:
                pieces.append(re.escape(char))
        elif char == "*":
            pieces.append("[^/]*")
        elif char == "?":
            pieces.append("[^/]")
        elif char == "[":
            end = _bracket_end(part, i)
            if end < 0:
                pieces.append(re.escape(char))
            else:
                pieces.append(_translate_bracket(part[i:end]))
                i = end + 1
        else:
            pieces.append(re.escape(char))
    return "".join(pieces)


def _bracket_end(part: str, start: int) -> int:
    """Index of the ']' closing a bracket expression opened before start, or -1."""
    i, n = start, len(part)
    if i < n and part[i] in "!^":
        i += 1
    if i < n and part[i] == "]":
        i += 1
    while i < n and part[i] != "]":
        if part[i] == "\\":
            i += 1
        i += 1
    return i if i < n else -1


def _translate_bracket(body: str) -> str:
    negate = body[:1] in ("!", "^")
    if negate:
        body = body[1:]

    chars = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\" and i + 1 < len(body):
            i += 1
            chars.append(re.escape(body[i]))
        elif char == "-":
            chars.append(char)
        else:
            chars.append(re.escape(char))
        i += 1
    return ("[^" if negate else "[") + "".join(chars) + "]"
