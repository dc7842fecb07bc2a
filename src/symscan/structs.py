"""Struct literal extraction backed by a small parser for C initializer lists."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from symscan.lexer import LexerError, Token, TokenKind, lex_initializers

logger = logging.getLogger(__name__)

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_NO_SPACE_AFTER = {"(", "[", ".", "~", "!", "->"}
_NO_SPACE_BEFORE = {")", "]", ",", ".", "->"}
_UNARY_CANDIDATES = {"-", "+", "&", "*"}


@dataclass(frozen=True)
class InitValue:
    """One initializer: a positional value, a designated one (``member`` set) or a list."""

    text: str
    member: str | None = None
    items: tuple["InitValue", ...] | None = None
    designator: str | None = None


@dataclass(frozen=True)
class ParserError(ValueError):
    message: str
    token: Token

    def __str__(self) -> str:
        return f"{self.message} at {self.token.line}:{self.token.column}"


def _is_operand_end(token: Token | None) -> bool:
    if token is None:
        return False
    if token.kind != TokenKind.PUNCTUATOR:
        return True
    return token.lexeme in {")", "]"}


def render_tokens(tokens: list[Token]) -> str:
    out: list[str] = []
    previous: Token | None = None
    before_previous: Token | None = None
    for token in tokens:
        lexeme = str(token.lexeme)
        if previous is not None and _needs_space(before_previous, previous, token):
            out.append(" ")
        out.append(lexeme)
        before_previous, previous = previous, token
    return "".join(out)


def _needs_space(before_previous: Token | None, previous: Token, token: Token) -> bool:
    if previous.lexeme in _NO_SPACE_AFTER or token.lexeme in _NO_SPACE_BEFORE:
        return False
    if token.lexeme in {"(", "["} and previous.kind == TokenKind.IDENT:
        return False
    # A leading sign or address-of binds to its operand.
    if previous.lexeme in _UNARY_CANDIDATES and not _is_operand_end(before_previous):
        return False
    return True


class InitializerParser:
    """Collects top-level initializer lists.

    An object whose list fails to parse is recorded in ``errors`` and skipped, so
    the objects around it are still returned.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._index = 0
        self.errors: list[ParserError] = []

    def parse_top_level_objects(self) -> dict[str, list[InitValue]]:
        objects: dict[str, list[InitValue]] = {}
        label = ""
        while not self._match(TokenKind.EOF):
            if self._check_punct("=") and self._peek_punct(1, "{"):
                self._advance()
                start = self._index
                try:
                    objects.setdefault(label, self._parse_list())
                except ParserError as error:
                    self.errors.append(error)
                    self._index = start
                    try:
                        self._skip_balanced()
                    except ParserError:
                        break
                label = ""
                continue
            token = self._current()
            if token.kind == TokenKind.PUNCTUATOR and token.lexeme in _OPENERS:
                self._skip_balanced()
                continue
            if token.kind == TokenKind.IDENT:
                label = str(token.lexeme)
            elif token.lexeme == ";":
                label = ""
            self._advance()
        return objects

    def _parse_list(self) -> list[InitValue]:
        self._expect_punct("{")
        values: list[InitValue] = []
        while not self._check_punct("}"):
            values.append(self._parse_item())
            if self._check_punct(","):
                self._advance()
            elif not self._check_punct("}"):
                raise ParserError("Expected ',' or '}'", self._current())
        self._advance()
        return values

    def _parse_item(self) -> InitValue:
        designator = self._parse_designators()
        value = self._parse_value()
        if designator is None:
            return value
        return InitValue(value.text, _member_path(designator), value.items, designator)

    def _parse_designators(self) -> str | None:
        parts: list[str] = []
        while True:
            if self._check_punct(".") and self._peek_kind(1, TokenKind.IDENT):
                self._advance()
                parts.append("." + str(self._advance().lexeme))
            elif self._check_punct("["):
                parts.append("[" + render_tokens(self._collect_balanced()[1:-1]) + "]")
            else:
                break
        if not parts:
            return None
        self._expect_punct("=")
        return "".join(parts)

    def _parse_value(self) -> InitValue:
        if self._check_punct("{"):
            items = tuple(self._parse_list())
            return InitValue("{" + ", ".join(_render_value(item) for item in items) + "}", items=items)
        tokens: list[Token] = []
        while not (self._check_punct(",") or self._check_punct("}")):
            if self._match(TokenKind.EOF):
                raise ParserError("Unterminated initializer list", self._current())
            if self._current().lexeme in _OPENERS:
                tokens.extend(self._collect_balanced())
            else:
                tokens.append(self._advance())
        if not tokens:
            raise ParserError("Expected initializer value", self._current())
        return InitValue(render_tokens(tokens))

    def _collect_balanced(self) -> list[Token]:
        start = self._index
        self._skip_balanced()
        return self._tokens[start : self._index]

    def _skip_balanced(self) -> None:
        closers: list[str] = []
        while True:
            token = self._current()
            if token.kind == TokenKind.EOF:
                raise ParserError("Unbalanced brackets", token)
            lexeme = str(token.lexeme)
            self._advance()
            if token.kind != TokenKind.PUNCTUATOR:
                continue
            if lexeme in _OPENERS:
                closers.append(_OPENERS[lexeme])
            elif closers and lexeme == closers[-1]:
                closers.pop()
                if not closers:
                    return

    def _current(self) -> Token:
        return self._tokens[self._index]

    def _advance(self) -> Token:
        token = self._current()
        if token.kind != TokenKind.EOF:
            self._index += 1
        return token

    def _peek_kind(self, offset: int, kind: TokenKind) -> bool:
        index = min(self._index + offset, len(self._tokens) - 1)
        return self._tokens[index].kind == kind

    def _peek_punct(self, offset: int, value: str) -> bool:
        index = min(self._index + offset, len(self._tokens) - 1)
        token = self._tokens[index]
        return token.kind == TokenKind.PUNCTUATOR and token.lexeme == value

    def _expect_punct(self, value: str) -> None:
        token = self._current()
        if token.kind != TokenKind.PUNCTUATOR or token.lexeme != value:
            raise ParserError(f"Expected '{value}'", token)
        self._advance()

    def _check_punct(self, value: str) -> bool:
        token = self._current()
        return token.kind == TokenKind.PUNCTUATOR and token.lexeme == value

    def _match(self, kind: TokenKind) -> bool:
        return self._current().kind == kind


def _member_path(designator: str) -> str:
    # ".pos.x" -> "pos.x", "[ITEM_A]" -> "ITEM_A", ".arr[1]" -> "arr[1]"
    if designator.startswith("."):
        return designator[1:]
    close = designator.index("]")
    return designator[1:close] + designator[close + 1 :]


def _render_value(value: InitValue) -> str:
    if value.designator is None:
        return value.text
    return f"{value.designator} = {value.text}"


def parse_top_level_objects(tokens: list[Token]) -> dict[str, list[InitValue]]:
    return InitializerParser(tokens).parse_top_level_objects()


def read_c_structs(
    text: str,
    label: str = "",
    member_map: Mapping[int, str] | None = None,
    *,
    filename: str = "<input>",
) -> dict[str, dict[str, str]]:
    """Map each labeled initializer in ``text`` to its member values.

    ``member_map`` names positional values by index, for structs written without
    designated initializers. An empty ``label`` returns every object in file order.
    """
    member_map = {} if member_map is None else member_map
    try:
        tokens = lex_initializers(text)
    except LexerError as error:
        logger.error("Failed to parse C structs in '%s': %s", filename, error)
        return {}
    parser = InitializerParser(tokens)
    objects = parser.parse_top_level_objects()
    for error in parser.errors:
        logger.error("Failed to parse C structs in '%s': %s", filename, error)
    structs: dict[str, dict[str, str]] = {}
    for struct_label, values in objects.items():
        if not struct_label or (label and label != struct_label):
            continue
        members: dict[str, str] = {}
        for index, value in enumerate(values):
            if value.member is not None:
                members[value.member] = value.text
                continue
            name = member_map.get(index)
            if name is not None and name not in members:
                members[name] = value.text
        structs[struct_label] = members
    return structs
