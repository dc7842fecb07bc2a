from dataclasses import dataclass
from enum import Enum, auto
from typing import NoReturn

PUNCTUATORS: tuple[str, ...] = (
    "...",
    ">>=",
    "<<=",
    "->",
    "++",
    "--",
    "&&",
    "||",
    "<=",
    ">=",
    "==",
    "!=",
    "<<",
    ">>",
    "[",
    "]",
    "(",
    ")",
    "{",
    "}",
    ".",
    "&",
    "*",
    "+",
    "-",
    "~",
    "!",
    "/",
    "%",
    "<",
    ">",
    "^",
    "|",
    "?",
    ":",
    ";",
    "=",
    ",",
)

# Longest first so multi-character punctuators win.
PUNCTUATORS_SORTED: tuple[str, ...] = tuple(sorted(PUNCTUATORS, key=len, reverse=True))


class TokenKind(Enum):
    IDENT = auto()
    NUMBER = auto()
    CHAR_CONST = auto()
    STRING_LITERAL = auto()
    PUNCTUATOR = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    lexeme: str | None
    line: int
    column: int


class LexerError(ValueError):
    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{message} at {line}:{column}")
        self.line = line
        self.column = column


def translate_source(source: str) -> str:
    source = source.replace("\r\n", "\n").replace("\r", "\n")
    return _splice_lines(source)


def _splice_lines(source: str) -> str:
    out: list[str] = []
    i = 0
    length = len(source)
    while i < length:
        if source[i] == "\\" and i + 1 < length and source[i + 1] == "\n":
            i += 2
            continue
        out.append(source[i])
        i += 1
    return "".join(out)


def lex_initializers(source: str) -> list[Token]:
    return Lexer(source).tokenize()


class Lexer:
    """Tokenizer for the subset of C found in data tables.

    Comments and preprocessor directive lines are skipped. Numbers are kept as
    written, suffixes included, since callers only need their text.
    """

    def __init__(self, source: str) -> None:
        self._source = translate_source(source)
        self._length = len(self._source)
        self._index = 0
        self._line = 1
        self._column = 1

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        while True:
            self._skip_whitespace_and_comments()
            if self._eof():
                tokens.append(Token(TokenKind.EOF, None, self._line, self._column))
                return tokens
            start_line = self._line
            start_column = self._column
            start = self._index
            ch = self._peek()
            if ch == '"':
                self._read_quoted('"', "string literal")
                kind = TokenKind.STRING_LITERAL
            elif ch == "'":
                self._read_quoted("'", "character constant")
                kind = TokenKind.CHAR_CONST
            elif ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
                self._read_number()
                kind = TokenKind.NUMBER
            elif ch == "_" or ch.isalpha():
                self._read_identifier()
                kind = TokenKind.IDENT
            else:
                self._read_punctuator(start_line, start_column)
                kind = TokenKind.PUNCTUATOR
            tokens.append(Token(kind, self._source[start : self._index], start_line, start_column))

    def _peek(self, offset: int = 0) -> str:
        index = self._index + offset
        if index >= self._length:
            return ""
        return self._source[index]

    def _advance(self) -> str:
        if self._index >= self._length:
            return ""
        ch = self._source[self._index]
        self._index += 1
        if ch == "\n":
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        return ch

    def _eof(self) -> bool:
        return self._index >= self._length

    def _at_line_start(self) -> bool:
        line_start = self._source.rfind("\n", 0, self._index) + 1
        return self._source[line_start : self._index].strip() == ""

    def _skip_whitespace_and_comments(self) -> None:
        while not self._eof():
            ch = self._peek()
            if ch in " \t\v\f\n":
                self._advance()
                continue
            if ch == "#" and self._at_line_start():
                self._skip_to_line_end()
                continue
            if ch == "/" and self._peek(1) == "/":
                self._skip_to_line_end()
                continue
            if ch == "/" and self._peek(1) == "*":
                self._advance()
                self._advance()
                while not self._eof():
                    if self._peek() == "*" and self._peek(1) == "/":
                        self._advance()
                        self._advance()
                        break
                    self._advance()
                else:
                    self._error("Unterminated block comment")
                continue
            break

    def _skip_to_line_end(self) -> None:
        while not self._eof() and self._peek() != "\n":
            self._advance()

    def _read_identifier(self) -> None:
        while not self._eof() and (self._peek() == "_" or self._peek().isalnum()):
            self._advance()

    def _read_number(self) -> None:
        self._advance()
        while not self._eof():
            ch = self._peek()
            if ch in {"e", "E", "p", "P"} and self._peek(1) in {"+", "-"}:
                self._advance()
                self._advance()
                continue
            if ch.isalnum() or ch in {".", "_"}:
                self._advance()
                continue
            break

    def _read_quoted(self, quote: str, what: str) -> None:
        self._advance()
        while not self._eof():
            ch = self._advance()
            if ch == quote:
                return
            if ch == "\n":
                break
            if ch == "\\":
                self._advance()
        self._error(f"Unterminated {what}")

    def _read_punctuator(self, line: int, column: int) -> None:
        for punct in PUNCTUATORS_SORTED:
            if self._source.startswith(punct, self._index):
                self._index += len(punct)
                self._column += len(punct)
                return
        self._error("Unexpected character", line=line, column=column)

    def _error(
        self, message: str, *, line: int | None = None, column: int | None = None
    ) -> NoReturn:
        raise LexerError(message, line or self._line, column or self._column)
