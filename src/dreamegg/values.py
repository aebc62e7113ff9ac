"""Runtime value model shared by the host evaluator and every domain."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Dom(Generic[T]):
    """A leaf value supplied by a domain."""

    value: T


@dataclass(frozen=True)
class Fun:
    """Opaque function value owned by the host evaluator.

    Domains receive these as arguments and hand them back through
    ``EvalHandle.apply``; they never build or inspect the payload.
    """

    payload: object


Val = Union[Dom, Fun]


class DomainValue:
    """Base for the closed variant set a domain defines as its leaf type.

    Subclasses are expected to be frozen dataclasses; ``shape`` names the
    variant in error messages.
    """

    shape: str = "domain value"


class ValueKind(str, Enum):
    DOMAIN = "domain"
    FUNCTION = "function"


@dataclass(frozen=True)
class ValueInfo:
    kind: ValueKind
    shape: str
    depth: int


def kind_of(value: object) -> ValueKind:
    if isinstance(value, Fun):
        return ValueKind.FUNCTION
    if isinstance(value, Dom):
        return ValueKind.DOMAIN
    raise TypeError(f"not a runtime value: {type(value).__name__}")


def shape_name(value: object) -> str:
    """Short human name for the shape of ``value``, used in type errors."""
    if isinstance(value, Fun):
        return "Function"
    if isinstance(value, Dom):
        inner = value.value
        if isinstance(inner, DomainValue):
            return inner.shape
        return type(inner).__name__
    return f"host {type(value).__name__}"


def _children(value: object) -> tuple[object, ...]:
    if isinstance(value, Dom):
        items = getattr(value.value, "items", None)
        if isinstance(items, tuple):
            return items
    return ()


def depth_of(value: object) -> int:
    if isinstance(value, Dom) and isinstance(getattr(value.value, "items", None), tuple):
        children = value.value.items
        if not children:
            return 1
        return 1 + max(depth_of(item) for item in children)
    return 0


def value_info(value: object) -> ValueInfo:
    return ValueInfo(kind=kind_of(value), shape=shape_name(value), depth=depth_of(value))


def validate_value(value: object, *, where: str = "value") -> None:
    if isinstance(value, Fun):
        return
    if isinstance(value, Dom):
        for idx, item in enumerate(_children(value)):
            validate_value(item, where=f"{where}[{idx}]")
        return
    raise TypeError(f"{where} has unsupported runtime type {type(value).__name__}")
