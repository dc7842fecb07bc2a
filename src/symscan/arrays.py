"""Regex extractors for flat C arrays, INCBIN call sites and named-index tables.

Each function takes raw file text and returns only the shape of data it knows
about. Malformed elements are dropped silently: these run far too often to log.
"""

import re

_INVALID_ELEMENT_RE = re.compile(r"[^A-Za-z0-9_&()\s]")
_ARRAY_MULTI_RE = re.compile(r"(?P<label>\b[A-Za-z0-9_]+\b)\s*(\[[^\]]*\])?\s*=\s*\{(?P<body>[^}]*)\}")
_INCBIN_MULTI_RE = re.compile(
    r"(?P<label>[A-Za-z0-9_]+)\s*\[?\s*\]?\s*=\s*INCBIN_[US][0-9][0-9]?\(\s*\"(?P<path>[^\\\"]*)\"\s*\)"
)
_INCBIN_RE = re.compile(r"INCBIN_[US][0-9][0-9]?\(\s*\"([^\"]*)\"\s*\)")
_LABEL_GROUP_RE = re.compile(r"(?P<label>[A-Za-z0-9_]+)\[(?P<body>[^;]*?)\};", re.DOTALL)
_NAMED_INDEX_ROW_RE = re.compile(r"\[(?P<index>[A-Za-z0-9_]*)\][\s=]+(?P<value>&?[A-Za-z0-9_]*)")
_WHITESPACE_RE = re.compile(r"\s*")


def _array_re(label: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(label)}\b\s*(\[?[^\]]*\])?\s*=\s*\{{([^}}]*)\}}")


def _split_elements(body: str) -> list[str]:
    elements: list[str] = []
    for item in body.split(","):
        item = item.strip()
        if item and _INVALID_ELEMENT_RE.search(item) is None:
            elements.append(item)
    return elements


def read_c_array(text: str, label: str) -> list[str]:
    if not label:
        return []
    match = _array_re(label).search(text)
    if match is None:
        return []
    return _split_elements(match.group(2))


def read_c_array_multi(text: str) -> dict[str, list[str]]:
    return {
        match.group("label"): _split_elements(match.group("body"))
        for match in _ARRAY_MULTI_RE.finditer(text)
    }


def read_named_index_c_array(text: str, label: str) -> dict[str, str]:
    """Map ``[INDEX] = VALUE`` rows of the array ``label`` from index to value."""
    match = _array_re(label).search(text)
    if match is None:
        return {}
    array_text = _WHITESPACE_RE.sub("", match.group(2))
    return {
        row.group("index"): row.group("value")
        for row in _NAMED_INDEX_ROW_RE.finditer(array_text)
    }


def read_c_incbin(text: str, label: str) -> str:
    if not label:
        return ""
    pattern = re.compile(
        rf"\b{re.escape(label)}\b"
        r"\s*\[?\s*\]?\s*=\s*"
        r"INCBIN_[US][0-9][0-9]?"
        r"\(\s*\"([^\"]*)\"\s*\)"
    )
    match = pattern.search(text)
    return "" if match is None else match.group(1)


def read_c_incbin_multi(text: str) -> dict[str, str]:
    return {match.group("label"): match.group("path") for match in _INCBIN_MULTI_RE.finditer(text)}


def read_c_incbin_array(text: str, label: str) -> list[str]:
    if not label:
        return []
    for match in _LABEL_GROUP_RE.finditer(text):
        if match.group("label") == label:
            return _INCBIN_RE.findall(match.group("body"))
    return []
