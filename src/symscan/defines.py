"""Extraction and evaluation of ``#define`` and ``enum`` integer constants.

``scan_defines`` records every name it finds together with its unevaluated
expression text. ``DefineResolver`` then evaluates requested names, resolving any
define they reference first and remembering each result for the rest of the
session.
"""

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from functools import partial
from types import MappingProxyType

from symscan.diag import Diagnostic
from symscan.expr import evaluate_postfix, to_postfix, tokenize_expression, wrap_int32
from symscan.source import locate, remove_string_literals, strip_c_comments

logger = logging.getLogger(__name__)

GLOBAL_DEFINE_VALUES: Mapping[str, int] = MappingProxyType(
    {
        "FALSE": 0,
        "TRUE": 1,
        "SCHAR_MIN": -128,
        "SCHAR_MAX": 127,
        "CHAR_MIN": -128,
        "CHAR_MAX": 127,
        "UCHAR_MAX": 255,
        "SHRT_MIN": -32768,
        "SHRT_MAX": 32767,
        "USHRT_MAX": 65535,
        "INT_MIN": -(1 << 31),
        "INT_MAX": (1 << 31) - 1,
        "UINT_MAX": wrap_int32((1 << 32) - 1),
    }
)

_DEFINE_OR_ENUM_RE = re.compile(
    r"#[^\S\n]*define[^\S\n]+(?P<name>\w+)(?:[^\S\n]+(?P<value>[^\n]*))?(?=\n|$)"
    r"|\benum\b[^{;]*\{(?P<body>[^}]*)\}"
)
_ENUM_ELEMENT_RE = re.compile(r"\b(?P<name>\w+)\b\s*=?\s*(?P<expression>[^,]*)")
_DIRECTIVE_LINE_RE = re.compile(r"^[^\S\n]*#.*$", re.MULTILINE)


@dataclass
class ParsedDefineTable:
    expressions: dict[str, str] = field(default_factory=dict)
    matched: list[str] = field(default_factory=list)

    def add(self, name: str, expression: str, matches: bool) -> None:
        if name in self.expressions:
            return
        self.expressions[name] = expression
        if matches:
            self.matched.append(name)


def _name_filter(filters: Iterable[str], use_regex: bool) -> Callable[[str], bool]:
    if use_regex:
        patterns = [re.compile(pattern) for pattern in filters]
        return lambda name: any(pattern.search(name) for pattern in patterns)
    return frozenset(filters).__contains__


def _enum_elements(body: str) -> list[tuple[str, str]]:
    # Elements without an initializer count up from the most recent explicit one.
    body = _DIRECTIVE_LINE_RE.sub("", body)
    elements: list[tuple[str, str]] = []
    base_expression = "0"
    offset = 0
    for match in _ENUM_ELEMENT_RE.finditer(body):
        expression = match.group("expression").strip()
        if expression:
            base_expression = expression
            offset = 1
        else:
            expression = f"(({base_expression})+{offset})"
            offset += 1
        elements.append((match.group("name"), expression))
    return elements


def prepare_define_text(text: str) -> str:
    return remove_string_literals(strip_c_comments(text))


def scan_defines(
    text: str,
    filters: Iterable[str] = (),
    *,
    use_regex: bool = False,
) -> ParsedDefineTable:
    """Collect every define and enum element in ``text``.

    All names land in ``expressions`` so any of them can be resolved as a
    dependency; ``matched`` lists, in source order, the names accepted by
    ``filters`` (exact names, or regular expressions when ``use_regex`` is set).
    """
    matches_filter = _name_filter(filters, use_regex)
    table = ParsedDefineTable()
    for match in _DEFINE_OR_ENUM_RE.finditer(prepare_define_text(text)):
        body = match.group("body")
        if body is None:
            name = match.group("name")
            table.add(name, (match.group("value") or "").strip(), matches_filter(name))
            continue
        for name, expression in _enum_elements(body):
            table.add(name, expression, matches_filter(name))
    return table


class DefineResolver:
    """One resolution session over a table of pending define expressions.

    ``known`` memoizes every evaluated name. ``errors`` maps the name being
    evaluated to the diagnostics recorded for it, including copies of the
    diagnostics of every define it depends on.
    """

    def __init__(
        self,
        expressions: dict[str, str],
        *,
        known: Mapping[str, int] | None = None,
        text: str = "",
        filename: str = "<input>",
    ) -> None:
        self.pending = expressions
        self.known: dict[str, int] = dict(GLOBAL_DEFINE_VALUES)
        if known is not None:
            self.known.update(known)
        self.errors: dict[str, list[Diagnostic]] = {}
        self._text = text
        self._filename = filename
        self._resolving: set[str] = set()

    def resolve(self, name: str, expression: str | None = None) -> int:
        pending_expression = self.pending.pop(name, None)
        if name in self.known:
            return self.known[name]
        if expression is None:
            expression = pending_expression
        if expression is None:
            self._record(name, f"no definition found for '{name}'", name)
            return 0
        self._resolving.add(name)
        try:
            value = self._evaluate(name, expression)
        finally:
            self._resolving.discard(name)
        self.known[name] = value
        return value

    def resolve_all(self, names: list[str]) -> dict[str, int]:
        """Resolve ``names`` in order, draining the list, and log errors per name."""
        values: dict[str, int] = {}
        while names:
            name = names.pop(0)
            expression = self.pending.pop(name, None)
            if expression is not None and not expression.strip():
                continue
            if expression is None and name not in self.known:
                logger.warning("No definition found for '%s'", name)
                continue
            values[name] = self.resolve(name, expression)
            self.log_errors(name)
        return values

    def evaluate(self, expression: str, context: str = "<expression>") -> int:
        return self._evaluate(context, expression)

    def log_errors(self, name: str) -> None:
        errors = self.errors.get(name)
        if not errors:
            return
        details = "".join(f"\n{error}" for error in errors)
        logger.error("Failed to parse '%s':%s", name, details)

    def _evaluate(self, context: str, expression: str) -> int:
        report = partial(self._record, context)
        tokens = tokenize_expression(
            expression,
            resolve=partial(self._lookup, context),
            report=report,
        )
        return evaluate_postfix(to_postfix(tokens, report=report), report=report)

    def _lookup(self, context: str, name: str) -> int | None:
        if name in self._resolving:
            self._record(context, f"circular dependency on '{name}'", name)
            return 0
        if name in self.pending:
            self.resolve(name)
        if name not in self.known:
            return None
        if name != context and name in self.errors:
            self.errors.setdefault(context, []).extend(self.errors[name])
        return self.known[name]

    def _record(self, context: str, message: str, fragment: str) -> None:
        line: int | None = None
        column: int | None = None
        if fragment and self._text:
            line, column = locate(self._text, fragment)
            if column == 0:
                line = column = None
        diagnostic = Diagnostic("define", self._filename, message, line, column)
        self.errors.setdefault(context, []).append(diagnostic)


def evaluate_defines(
    table: ParsedDefineTable,
    *,
    text: str = "",
    filename: str = "<input>",
    known: Mapping[str, int] | None = None,
) -> dict[str, int]:
    resolver = DefineResolver(table.expressions, known=known, text=text, filename=filename)
    return resolver.resolve_all(table.matched)


def evaluate_expression(expression: str, values: Mapping[str, int] | None = None) -> int:
    resolver = DefineResolver({}, known=values)
    value = resolver.evaluate(expression)
    resolver.log_errors("<expression>")
    return value
