from dataclasses import dataclass
from pathlib import Path
from typing import Literal

# read: loading a file. define: scanning or evaluating defines.
Stage = Literal["read", "define"]


@dataclass(frozen=True)
class Diagnostic:
    stage: Stage
    filename: str
    message: str
    line: int | None = None
    column: int | None = None
    code: str | None = None

    def __str__(self) -> str:
        if self.line is None or self.column is None:
            return f"{self.filename}: {self.stage}: {self.message}"
        return f"{self.filename}:{self.line}:{self.column}: {self.stage}: {self.message}"

    def as_dict(self) -> dict[str, object]:
        return {
            "stage": self.stage,
            "filename": self.filename,
            "line": self.line,
            "column": self.column,
            "code": self.code,
            "message": self.message,
        }


class SymscanError(ValueError):
    """Raised only at internal seams; the path-based entry points turn it into a diagnostic."""

    def __init__(self, diagnostic: Diagnostic) -> None:
        super().__init__(str(diagnostic))
        self.diagnostic = diagnostic


class SourceReadError(SymscanError):
    @classmethod
    def from_error(cls, path: str | Path, error: OSError | UnicodeError) -> "SourceReadError":
        code = type(error).__name__
        if isinstance(error, OSError) and error.strerror:
            message = error.strerror
        else:
            message = str(error)
        return cls(Diagnostic("read", str(path), message, code=code))
