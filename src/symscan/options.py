import re
from dataclasses import dataclass
from typing import Literal

DiagFormat = Literal["human", "json"]

_DEFINE_RE = re.compile(r"^(?P<name>[A-Za-z_]\w*)(?:=(?P<value>.*))?$")


@dataclass(frozen=True)
class SourceOptions:
    root: str = "."
    encoding: str = "utf-8"
    defines: tuple[str, ...] = ()
    diag_format: DiagFormat = "human"

    def __post_init__(self) -> None:
        if self.diag_format not in {"human", "json"}:
            raise ValueError(f"Unsupported diagnostic format: {self.diag_format}")
        for define in self.defines:
            if _DEFINE_RE.match(define) is None:
                raise ValueError(f"Invalid define: {define}")


def normalize_options(options: SourceOptions | None) -> SourceOptions:
    return SourceOptions() if options is None else options


def split_define(define: str) -> tuple[str, str]:
    """Split a ``NAME=VALUE`` option into its parts; a bare name means ``1``."""
    match = _DEFINE_RE.match(define)
    if match is None:
        raise ValueError(f"Invalid define: {define}")
    value = match.group("value")
    return match.group("name"), "1" if value is None else value
