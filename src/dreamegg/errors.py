"""Structured error types for parser/runtime/contract separation."""

from __future__ import annotations

from dataclasses import dataclass

from .parser import ParseError, format_parse_error


class DreamEggError(Exception):
    """Base class for structured dreamegg errors."""


@dataclass(frozen=True)
class DreamEggParseError(DreamEggError):
    """Wraps parser failures with explicit parse-stage typing."""

    message: str
    start: int
    end: int
    expected: tuple[str, ...] = ()
    found: str | None = None
    line: int | None = None
    column: int | None = None

    @classmethod
    def from_parse_error(cls, err: ParseError) -> "DreamEggParseError":
        return cls(
            message=err.message,
            start=err.start,
            end=err.end,
            expected=err.expected,
            found=err.found,
            line=err.line,
            column=err.column,
        )

    def __str__(self) -> str:
        return format_parse_error(self.message, self.start, self.end, self.expected, self.found, self.line, self.column)


class EvalError(DreamEggError):
    """Recoverable failure during evaluation; propagates to the host's caller."""


class UndefinedSymbolError(EvalError):
    """A symbol that no domain primitive or literal rule resolves."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Undefined symbol {symbol!r}")
        self.symbol = symbol


class NotCallableError(EvalError):
    """Application of a value that is not a function."""


class EvalDepthError(EvalError):
    """Nested application went deeper than the configured limit."""


class ContractViolation(DreamEggError):
    """Fatal: a primitive's precondition was broken by its caller.

    These signal ill-typed programs reaching code that assumes well-typedness.
    Nothing in the runtime catches them.
    """


class TypeMismatch(ContractViolation):
    def __init__(self, expected: str, found: str) -> None:
        super().__init__(f"Type mismatch: expected {expected}, found {found}")
        self.expected = expected
        self.found = found


class ArityMismatch(ContractViolation):
    def __init__(self, name: str, expected: int, found: int) -> None:
        super().__init__(f"{name!r} takes {expected} argument(s), got {found}")
        self.name = name
        self.expected = expected
        self.found = found
