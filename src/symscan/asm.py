"""Line-oriented parsing of assembly data files into labels and macro calls."""

import re

from symscan.source import remove_line_comments

LABEL_MACRO = ".label"
_SKIPPED_MACROS = frozenset({".align", ".ifdef", ".ifndef"})
_SPACES_RE = re.compile(r"\s+")
_PARAM_SEPARATOR_RE = re.compile(r"\s*,\s*")


def parse_asm(text: str) -> list[list[str]]:
    """Split ``text`` into ``[macro, *params]`` rows.

    A line containing ``:`` is a label and becomes ``[".label", name]``.
    """
    parsed: list[list[str]] = []
    for line in remove_line_comments(text, "@").split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue
        if ":" in line:
            parsed.append([LABEL_MACRO, line[: line.index(":")]])
            continue
        parts = _SPACES_RE.split(trimmed, maxsplit=1)
        if len(parts) == 1:
            parsed.append([parts[0]])
            continue
        parsed.append([parts[0], *_PARAM_SEPARATOR_RE.split(parts[1].strip())])
    return parsed


def get_label_macros(parsed: list[list[str]], label: str) -> list[list[str]]:
    in_label = False
    macros: list[list[str]] = []
    for params in parsed:
        if params[0] == LABEL_MACRO:
            if params[1] == label:
                in_label = True
            elif in_label and macros:
                # Consecutive labels share the rows that follow them.
                break
        elif in_label:
            macros.append(params)
    return macros


def get_label_values(parsed: list[list[str]], label: str) -> list[str]:
    values: list[str] = []
    for params in get_label_macros(parsed, label):
        if params[0] in _SKIPPED_MACROS:
            continue
        values.extend(params[1:])
    return values
