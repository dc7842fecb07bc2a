import logging
import re
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TextIO

from symscan import arrays, asm, scripts, structs
from symscan.defines import (
    DefineResolver,
    ParsedDefineTable,
    prepare_define_text,
    scan_defines,
)
from symscan.diag import Diagnostic, SourceReadError
from symscan.convert import game_string_to_int
from symscan.options import SourceOptions, normalize_options, split_define
from symscan.source import read_text_file

logger = logging.getLogger(__name__)


def read_source(path: str, *, stdin: TextIO | None = None) -> tuple[str, str]:
    if path == "-":
        stream = sys.stdin if stdin is None else stdin
        return "<stdin>", stream.read()
    resolved = Path(path)
    return str(resolved), read_text_file(resolved)


def option_values(options: SourceOptions) -> dict[str, int]:
    values: dict[str, int] = {}
    for define in options.defines:
        name, text = split_define(define)
        value = game_string_to_int(text)
        if value is None:
            raise ValueError(f"Invalid define value: {define}")
        values[name] = value
    return values


class SourceTree:
    """Path-based entry points over a project root.

    Methods never raise for unreadable files: they log a warning and return an
    empty result, plus a diagnostic where the return type has room for one.
    """

    def __init__(self, options: SourceOptions | None = None) -> None:
        self._options = normalize_options(options)
        self._root = Path(self._options.root)
        self._known = option_values(self._options)

    def path(self, filename: str) -> Path:
        return self._root / filename

    def read_text(self, filename: str) -> str:
        return read_text_file(self.path(filename), encoding=self._options.encoding)

    def _try_read(self, filename: str) -> tuple[str | None, Diagnostic | None]:
        try:
            return self.read_text(filename), None
        except SourceReadError as error:
            logger.warning("%s", error.diagnostic)
            return None, error.diagnostic

    def _scan(
        self, filename: str, filters: Iterable[str], use_regex: bool
    ) -> tuple[str, ParsedDefineTable, Diagnostic | None]:
        text, error = self._try_read(filename)
        if text is None:
            return "", ParsedDefineTable(), error
        try:
            return text, scan_defines(text, filters, use_regex=use_regex), None
        except re.error as regex_error:
            diagnostic = Diagnostic("define", filename, f"Invalid filter pattern: {regex_error}")
            logger.warning("%s", diagnostic)
            return text, ParsedDefineTable(), diagnostic

    def _evaluate_defines(
        self, filename: str, filters: Iterable[str], use_regex: bool
    ) -> tuple[dict[str, int], Diagnostic | None]:
        text, table, error = self._scan(filename, filters, use_regex)
        if error is not None:
            return {}, error
        resolver = DefineResolver(
            table.expressions,
            known=self._known,
            text=prepare_define_text(text),
            filename=filename,
        )
        return resolver.resolve_all(table.matched), None

    def read_c_defines_by_name(
        self, filename: str, names: Iterable[str]
    ) -> tuple[dict[str, int], Diagnostic | None]:
        names = list(names)
        values, error = self._evaluate_defines(filename, names, False)
        if error is None:
            for name in names:
                if name not in values:
                    logger.warning("Failed to find define '%s' in '%s'", name, filename)
        return values, error

    def read_c_defines_by_regex(
        self, filename: str, patterns: Iterable[str]
    ) -> tuple[dict[str, int], Diagnostic | None]:
        return self._evaluate_defines(filename, patterns, True)

    def read_c_define_names(
        self, filename: str, patterns: Iterable[str]
    ) -> tuple[list[str], Diagnostic | None]:
        # Names only: nothing is evaluated, so no expression errors are reported.
        _, table, error = self._scan(filename, patterns, True)
        return table.matched, error

    def read_c_array(self, filename: str, label: str) -> list[str]:
        text, _ = self._try_read(filename)
        return [] if text is None else arrays.read_c_array(text, label)

    def read_c_array_multi(self, filename: str) -> dict[str, list[str]]:
        text, _ = self._try_read(filename)
        return {} if text is None else arrays.read_c_array_multi(text)

    def read_named_index_c_array(
        self, filename: str, label: str
    ) -> tuple[dict[str, str], Diagnostic | None]:
        text, error = self._try_read(filename)
        if text is None:
            return {}, error
        return arrays.read_named_index_c_array(text, label), None

    def read_c_incbin(self, filename: str, label: str) -> str:
        text, _ = self._try_read(filename)
        return "" if text is None else arrays.read_c_incbin(text, label)

    def read_c_incbin_multi(self, filename: str) -> dict[str, str]:
        text, _ = self._try_read(filename)
        return {} if text is None else arrays.read_c_incbin_multi(text)

    def read_c_incbin_array(self, filename: str, label: str) -> list[str]:
        text, _ = self._try_read(filename)
        return [] if text is None else arrays.read_c_incbin_array(text, label)

    def read_c_structs(
        self,
        filename: str,
        label: str = "",
        member_map: Mapping[int, str] | None = None,
    ) -> dict[str, dict[str, str]]:
        text, _ = self._try_read(filename)
        if text is None:
            return {}
        return structs.read_c_structs(text, label, member_map, filename=filename)

    def parse_asm(self, filename: str) -> list[list[str]]:
        text, _ = self._try_read(filename)
        return [] if text is None else asm.parse_asm(text)

    def get_label_macros(self, filename: str, label: str) -> list[list[str]]:
        return asm.get_label_macros(self.parse_asm(filename), label)

    def get_label_values(self, filename: str, label: str) -> list[str]:
        return asm.get_label_values(self.parse_asm(filename), label)

    def get_script_line_number(self, filename: str, label: str) -> int:
        dialect = scripts.dialect_for_path(filename)
        if dialect is None or not label:
            return 0
        text, _ = self._try_read(filename)
        return 0 if text is None else scripts.get_script_line_number(text, label, dialect)

    def get_global_script_labels(self, filename: str) -> list[str]:
        dialect = scripts.dialect_for_path(filename)
        if dialect is None:
            return []
        text, _ = self._try_read(filename)
        return [] if text is None else scripts.get_global_script_labels(text, dialect)
