"""Locating script labels in raw assembly-style scripts and block-scoped ``.pory`` scripts."""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath

from symscan.source import remove_line_comments, remove_string_literals

_RAW_LABEL_RE = re.compile(r"\b(?P<label>[\w_][\w\d_]*):{1,2}")
_GLOBAL_RAW_LABEL_RE = re.compile(r"\b(?P<label>[\w_][\w\d_]*)::")
_PORY_LABEL_RE = re.compile(r"\b(script)(\((global|local)\))?\s*\b(?P<label>[\w_][\w\d_]*)")
_GLOBAL_PORY_LABEL_RE = re.compile(r"\b(script)(\((global)\))?\s*\b(?P<label>[\w_][\w\d_]*)")
_PORY_RAW_SECTION_RE = re.compile(r"\b(raw)\s*`(?P<raw_script>[^`]*)")

_RAW_COMMENT_SYMBOLS = ("@",)
_PORY_COMMENT_SYMBOLS = ("//", "#")


class ScriptDialect(Enum):
    RAW = "raw"
    PORY = "pory"


@dataclass(frozen=True)
class ScriptLabelHit:
    label: str
    line: int

    def __bool__(self) -> bool:
        return self.line > 0


def dialect_for_path(path: str | PurePath) -> ScriptDialect | None:
    suffix = PurePath(path).suffix
    if suffix in {".inc", ".s"}:
        return ScriptDialect.RAW
    if suffix == ".pory":
        return ScriptDialect.PORY
    return None


def _line_of(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


def _clean(text: str, comment_symbols: tuple[str, ...]) -> str:
    return remove_line_comments(remove_string_literals(text), comment_symbols)


def get_raw_script_line_number(text: str, label: str) -> int:
    text = _clean(text, _RAW_COMMENT_SYMBOLS)
    for match in _RAW_LABEL_RE.finditer(text):
        if match.group("label") == label:
            return _line_of(text, match.start("label"))
    return 0


def get_pory_script_line_number(text: str, label: str) -> int:
    text = _clean(text, _PORY_COMMENT_SYMBOLS)
    for match in _PORY_LABEL_RE.finditer(text):
        if match.group("label") == label:
            return _line_of(text, match.start("label"))
    # Labels may also live in raw blocks embedded in the script.
    for match in _PORY_RAW_SECTION_RE.finditer(text):
        relative_line = get_raw_script_line_number(match.group("raw_script"), label)
        if relative_line:
            return text.count("\n", 0, match.start("raw_script")) + relative_line
    return 0


def get_script_line_number(text: str, label: str, dialect: ScriptDialect) -> int:
    """Return the 1-indexed line defining ``label``, or 0 when it is not defined."""
    if not label:
        return 0
    if dialect is ScriptDialect.RAW:
        return get_raw_script_line_number(text, label)
    return get_pory_script_line_number(text, label)


def find_script_label(text: str, label: str, dialect: ScriptDialect) -> ScriptLabelHit:
    return ScriptLabelHit(label, get_script_line_number(text, label, dialect))


def get_global_raw_script_labels(text: str) -> list[str]:
    text = _clean(text, _RAW_COMMENT_SYMBOLS)
    return [match.group("label") for match in _GLOBAL_RAW_LABEL_RE.finditer(text)]


def get_global_pory_script_labels(text: str) -> list[str]:
    text = _clean(text, _PORY_COMMENT_SYMBOLS)
    labels = [match.group("label") for match in _GLOBAL_PORY_LABEL_RE.finditer(text)]
    for match in _PORY_RAW_SECTION_RE.finditer(text):
        labels.extend(get_global_raw_script_labels(match.group("raw_script")))
    return labels


def get_global_script_labels(text: str, dialect: ScriptDialect) -> list[str]:
    if dialect is ScriptDialect.RAW:
        return get_global_raw_script_labels(text)
    return get_global_pory_script_labels(text)
