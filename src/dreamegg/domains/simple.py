"""Example domain: 32-bit integers and (nestable) lists of values.

Read as a type system this is ``T := (T -> T) | Int | List(T)``; function
values are the host's ``Fun`` and never appear among the variants here.
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, ClassVar, Final, Union

import jax
from jax import lax
import jax.numpy as jnp

from ..coerce import Coercion
from ..domain import Domain, EvalHandle, Semantics, define_semantics
from ..values import Dom, DomainValue, Val

logger = logging.getLogger(__name__)

INT32_MIN: Final[int] = -(2**31)
INT32_MAX: Final[int] = 2**31 - 1

_USE_JITTED_INT_OPS: Final[bool] = os.environ.get("DREAMEGG_DISABLE_JITTED_INT_OPS", "0") != "1"
_DECIMAL_RE: Final = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Int(DomainValue):
    value: int
    shape: ClassVar[str] = "Int"

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Int expects a Python int, got {type(self.value).__name__}")
        if not INT32_MIN <= self.value <= INT32_MAX:
            raise ValueError(f"Int {self.value} does not fit in a signed 32-bit integer")


@dataclass(frozen=True)
class List(DomainValue):
    """Ordered values; elements are full ``Val``s so lists nest and hold functions."""

    items: tuple[Val, ...]
    shape: ClassVar[str] = "List"

    def __post_init__(self) -> None:
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))


SimpleVal = Union[Int, List]

COERCE: Final = Coercion(scalars={int: Int}, sequence=List)
load_args = COERCE.load_args
ok = COERCE.ok


_INT32_BINARY_OPS: Final[dict[str, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]]] = {
    "+": lax.add,
    "*": lax.mul,
}
_JITTED_INT32_BINARY_OPS: dict[str, Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]] = {}


def _int32_kernel(op: str) -> Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]:
    if not _USE_JITTED_INT_OPS:
        return _INT32_BINARY_OPS[op]
    fn = _JITTED_INT32_BINARY_OPS.get(op)
    if fn is None:
        fn = jax.jit(_INT32_BINARY_OPS[op])
        _JITTED_INT32_BINARY_OPS[op] = fn
    return fn


def _int32_binary(op: str, x: int, y: int) -> int:
    # XLA integer arithmetic wraps on overflow (two's complement).
    out = _int32_kernel(op)(jnp.asarray(x, dtype=jnp.int32), jnp.asarray(y, dtype=jnp.int32))
    return int(out)


# *** DSL FUNCTIONS ***


def add(args: list[Val], _handle: EvalHandle | None = None) -> Val:
    x, y = load_args(args, int, int, name="+")
    return ok(_int32_binary("+", x, y))


def mul(args: list[Val], _handle: EvalHandle | None = None) -> Val:
    x, y = load_args(args, int, int, name="*")
    return ok(_int32_binary("*", x, y))


def map_(args: list[Val], handle: EvalHandle) -> Val:
    fn_val, xs = load_args(args, Val, list[Val], name="map")
    # An EvalError from any application escapes before a list is built.
    return ok([handle.apply(fn_val, x) for x in xs])


def sum_(args: list[Val], _handle: EvalHandle | None = None) -> Val:
    (xs,) = load_args(args, list[int], name="sum")
    total = jnp.sum(jnp.asarray(xs, dtype=jnp.int32), dtype=jnp.int32)
    return ok(int(total))


@lru_cache(maxsize=None)
def simple_semantics() -> Semantics:
    return define_semantics(
        {
            "+": (add, 2),
            "*": (mul, 2),
            "map": (map_, 2),
            "sum": (sum_, 1),
        },
        domain=SimpleDomain.name,
    )


def _parse_int_literal(text: str) -> Val | None:
    if _DECIMAL_RE.fullmatch(text) is None:
        return None
    value = int(text)
    if value > INT32_MAX:
        return None
    return Dom(Int(value))


def _is_int32(item: object) -> bool:
    return type(item) is int and INT32_MIN <= item <= INT32_MAX


def _parse_int_list_literal(text: str) -> Val | None:
    try:
        parsed = json.loads(text)
    except ValueError:
        return None
    if not isinstance(parsed, list) or not all(_is_int32(item) for item in parsed):
        return None
    return Dom(List(tuple(Dom(Int(item)) for item in parsed)))


class SimpleDomain(Domain):
    name = "simple"

    @classmethod
    def semantics(cls) -> Semantics:
        return simple_semantics()

    @classmethod
    def val_of_prim(cls, symbol: str) -> Val | None:
        """Table lookup, then integer literals (``42``) and int-list literals (``[1,2,3]``)."""
        val = super().val_of_prim(symbol)
        if val is not None or not symbol:
            return val
        first = symbol[0]
        if first in "0123456789":
            val = _parse_int_literal(symbol)
        elif first == "[":
            val = _parse_int_list_literal(symbol)
        else:
            return None
        if val is None:
            logger.debug("malformed %s literal %r", cls.name, symbol)
        return val
