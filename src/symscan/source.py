"""Loading and cleaning raw source text before any pattern matching runs."""

import re
from collections.abc import Iterable
from pathlib import Path

from symscan.diag import SourceReadError

_COMMENT_OR_STRING_RE = re.compile(
    r"(?P<string>\"(?:\\.|[^\"\\\n])*\")"
    r"|//[^\n]*"
    r"|/\*.*?\*/",
    re.DOTALL,
)
_CONTINUATION_RE = re.compile(r"\\[^\S\n]*\n")
_STRING_LITERAL_RE = re.compile(r"\".*\"")


def read_text_file(path: str | Path, *, encoding: str = "utf-8") -> str:
    try:
        raw = Path(path).read_text(encoding=encoding)
    except (OSError, UnicodeError) as error:
        raise SourceReadError.from_error(path, error) from error
    lines = raw.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return "".join(line + "\n" for line in lines)


def text_file_line_count(path: str | Path, *, encoding: str = "utf-8") -> int:
    return len(read_text_file(path, encoding=encoding).split("\n")) + 1


def _replace_comment(match: re.Match[str]) -> str:
    if match.group("string") is not None:
        return match.group("string")
    return "\n" * match.group(0).count("\n")


def strip_c_comments(text: str) -> str:
    # Block comments keep their newlines so later line numbers stay stable.
    text = _COMMENT_OR_STRING_RE.sub(_replace_comment, text)
    return _CONTINUATION_RE.sub("", text)


def remove_string_literals(text: str) -> str:
    return _STRING_LITERAL_RE.sub("", text)


def remove_line_comments(text: str, symbols: str | Iterable[str]) -> str:
    if isinstance(symbols, str):
        symbols = (symbols,)
    for symbol in symbols:
        text = re.sub(re.escape(symbol) + r"+.*", "", text)
    return text


def locate(text: str, fragment: str) -> tuple[int, int]:
    """Return the 1-indexed line and column of the first line containing ``fragment``.

    The column is 0 when no line contains it, in which case the line is the last one.
    """
    line_number = 0
    column = 0
    for line in re.split(r"[\r\n]", text):
        line_number += 1
        column = line.find(fragment) + 1
        if column:
            break
    return line_number, column
