"""Integer expression pipeline: tokenize, convert to postfix, evaluate.

Expressions are the right-hand sides of ``#define`` lines and enum initializers.
Arithmetic follows 32-bit signed C semantics: results wrap, division and modulo
truncate toward zero, and shift counts are taken modulo 32.
"""

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType

logger = logging.getLogger(__name__)

Resolver = Callable[[str], int | None]
Reporter = Callable[[str, str], None]

PRECEDENCE: Mapping[str, int] = MappingProxyType(
    {
        "*": 3,
        "/": 3,
        "%": 3,
        "+": 4,
        "-": 4,
        "<<": 5,
        ">>": 5,
        "&": 8,
        "^": 9,
        "|": 10,
    }
)

_TOKEN_RE = re.compile(
    r"(?P<hex>0[xX][0-9A-Fa-f]+[uUlL]*\b)"
    r"|(?P<decimal>[0-9]+[uUlL]*\b)"
    r"|(?P<identifier>[A-Za-z_0-9]+)"
    r"|(?P<operator>[+\-*/<>|^%&]+)"
    r"|(?P<leftparen>\()"
    r"|(?P<rightparen>\))"
)
_INTEGER_RE = re.compile(r"^(?P<sign>[+-]?)(?P<digits>0[xX][0-9A-Fa-f]+|[0-9]+)[uUlL]*$")
_MISMATCHED_PARENS = "Mismatched parentheses detected in expression!"

_INT32_MASK = (1 << 32) - 1
_INT32_SIGN = 1 << 31


class TokenClass(Enum):
    NUMBER = auto()
    OPERATOR = auto()
    ERROR = auto()


@dataclass(frozen=True)
class Token:
    value: str
    token_class: TokenClass
    precedence: int | None = None


def wrap_int32(value: int) -> int:
    value &= _INT32_MASK
    return value - (1 << 32) if value & _INT32_SIGN else value


def parse_c_integer(text: str) -> int | None:
    match = _INTEGER_RE.match(text.strip())
    if match is None:
        return None
    digits = match.group("digits")
    if digits.startswith(("0x", "0X")):
        value = int(digits, 16)
    elif digits.startswith("0") and len(digits) > 1:
        if any(ch not in "01234567" for ch in digits):
            return None
        value = int(digits, 8)
    else:
        value = int(digits, 10)
    if match.group("sign") == "-":
        value = -value
    return wrap_int32(value)


def _ignore(message: str, fragment: str) -> None:
    pass


def tokenize_expression(
    expression: str,
    *,
    resolve: Resolver | None = None,
    report: Reporter | None = None,
) -> list[Token]:
    """Split ``expression`` into tokens, substituting identifiers through ``resolve``.

    Identifiers that ``resolve`` cannot supply a value for become ``ERROR`` tokens.
    Unsupported operators are reported but still emitted so later stages can degrade
    gracefully. If no token pattern matches, tokenizing stops with what it has.
    """
    report = _ignore if report is None else report
    tokens: list[Token] = []
    remaining = expression.strip()
    while remaining:
        match = _TOKEN_RE.match(remaining)
        if match is None:
            logger.warning("Failed to tokenize expression: '%s'", remaining)
            break
        kind = match.lastgroup
        lexeme = match.group(0)
        if kind == "identifier":
            value = None if resolve is None else resolve(lexeme)
            if value is None:
                report(f"unknown token '{lexeme}' found in expression '{remaining}'", remaining)
                tokens.append(Token(lexeme, TokenClass.ERROR))
            else:
                tokens.append(Token(str(value), TokenClass.NUMBER))
        elif kind == "operator":
            precedence = PRECEDENCE.get(lexeme)
            if precedence is None:
                report(f"unsupported postfix operator: '{lexeme}'", remaining)
            tokens.append(Token(lexeme, TokenClass.OPERATOR, precedence))
        elif kind in {"hex", "decimal"}:
            tokens.append(Token(lexeme, TokenClass.NUMBER))
        else:
            tokens.append(Token(lexeme, TokenClass.OPERATOR))
        remaining = remaining[match.end() :].lstrip()
    return tokens


def _binds_before(top: Token, incoming: Token) -> bool:
    if top.value == "(":
        return False
    return (top.precedence or 0) <= (incoming.precedence or 0)


def to_postfix(tokens: list[Token], *, report: Reporter | None = None) -> list[Token]:
    # Shunting-yard; lower precedence numbers bind tighter, equal ones group left.
    report = _ignore if report is None else report
    output: list[Token] = []
    stack: list[Token] = []
    for token in tokens:
        if token.token_class is not TokenClass.OPERATOR:
            output.append(token)
        elif token.value == "(":
            stack.append(token)
        elif token.value == ")":
            while stack and stack[-1].value != "(":
                output.append(stack.pop())
            if stack:
                stack.pop()
            else:
                report(_MISMATCHED_PARENS, "")
        else:
            while stack and _binds_before(stack[-1], token):
                output.append(stack.pop())
            stack.append(token)
    while stack:
        token = stack.pop()
        if token.value in {"(", ")"}:
            report(_MISMATCHED_PARENS, "")
        else:
            output.append(token)
    return output


def _c_divide(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _c_modulo(left: int, right: int) -> int:
    return left - right * _c_divide(left, right)


_OPERATORS: Mapping[str, Callable[[int, int], int]] = MappingProxyType(
    {
        "*": lambda left, right: left * right,
        "/": _c_divide,
        "%": _c_modulo,
        "+": lambda left, right: left + right,
        "-": lambda left, right: left - right,
        "<<": lambda left, right: left << (right & 31),
        ">>": lambda left, right: left >> (right & 31),
        "&": lambda left, right: left & right,
        "^": lambda left, right: left ^ right,
        "|": lambda left, right: left | right,
    }
)


def _apply_operator(operator: str, left: int, right: int, report: Reporter) -> int:
    function = _OPERATORS.get(operator)
    if function is None:
        return 0
    if operator in {"/", "%"} and right == 0:
        report("division by zero", "")
        return 0
    return wrap_int32(function(left, right))


def evaluate_postfix(tokens: list[Token], *, report: Reporter | None = None) -> int:
    report = _ignore if report is None else report
    stack: list[int] = []
    for token in tokens:
        if token.token_class is TokenClass.ERROR:
            # Already reported while tokenizing.
            continue
        if token.token_class is TokenClass.OPERATOR:
            if len(stack) < 2:
                continue
            right = stack.pop()
            left = stack.pop()
            stack.append(_apply_operator(token.value, left, right, report))
            continue
        value = parse_c_integer(token.value)
        stack.append(0 if value is None else value)
    return stack[-1] if stack else 0
