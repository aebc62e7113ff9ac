"""The contract between the host evaluator and a pluggable domain."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar, Protocol, Union

from .errors import ArityMismatch
from .values import Fun, Val

logger = logging.getLogger(__name__)


class EvalHandle(Protocol):
    """What a primitive may ask of the evaluator that invoked it."""

    data: object

    def apply(self, f: Val, x: Val) -> Val:
        """Apply function value ``f`` to ``x``; raises ``EvalError`` on failure."""
        ...


PrimitiveImpl = Callable[[list[Val], EvalHandle], Val]


@dataclass(frozen=True)
class DSLFn:
    """A named primitive function with a fixed arity."""

    name: str
    arity: int
    impl: PrimitiveImpl = field(compare=False)

    def __call__(self, args: Sequence[Val], handle: EvalHandle) -> Val:
        if len(args) != self.arity:
            raise ArityMismatch(self.name, self.arity, len(args))
        return self.impl(list(args), handle)


@dataclass(frozen=True)
class PrimitiveCall:
    """Function payload for a primitive with some arguments already supplied."""

    fn: DSLFn
    args: tuple[Val, ...] = ()

    @property
    def remaining(self) -> int:
        return self.fn.arity - len(self.args)


@dataclass(frozen=True)
class Const:
    """Marks a ``define_semantics`` entry as a constant value."""

    value: Val


Entry = Union[tuple[PrimitiveImpl, int], Const]


@dataclass(frozen=True)
class Semantics:
    """Read-only primitive tables for one domain."""

    prims: Mapping[str, Val]
    funcs: Mapping[str, DSLFn]

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.prims


def define_semantics(entries: Mapping[str, Entry] | Iterable[tuple[str, Entry]], *, domain: str = "domain") -> Semantics:
    """Build the primitive tables from ``symbol -> (impl, arity)`` or ``Const`` entries.

    Every function is also published in ``prims`` as a function value with no
    arguments applied, so a bare symbol like ``+`` evaluates to a value.
    """
    items = entries.items() if isinstance(entries, Mapping) else entries
    prims: dict[str, Val] = {}
    funcs: dict[str, DSLFn] = {}
    for symbol, entry in items:
        if symbol in prims:
            raise ValueError(f"duplicate primitive {symbol!r} in {domain} semantics")
        if isinstance(entry, Const):
            prims[symbol] = entry.value
            continue
        impl, arity = entry
        if arity < 1:
            raise ValueError(f"primitive {symbol!r} must take at least one argument, got arity {arity}")
        fn = DSLFn(name=symbol, arity=arity, impl=impl)
        funcs[symbol] = fn
        prims[symbol] = Fun(PrimitiveCall(fn))
    logger.debug("built %s semantics: %d functions, %d values", domain, len(funcs), len(prims))
    return Semantics(prims=MappingProxyType(prims), funcs=MappingProxyType(funcs))


class Domain:
    """Base for a domain: a leaf value type plus its primitives.

    Subclasses implement ``semantics`` (typically an ``lru_cache``'d builder so
    the tables are created once, on first use) and may extend
    ``val_of_prim`` with literal parsing.
    """

    name: ClassVar[str] = "domain"

    @classmethod
    def semantics(cls) -> Semantics:
        raise NotImplementedError

    @classmethod
    def val_of_prim(cls, symbol: str) -> Val | None:
        return cls.semantics().prims.get(symbol)

    @classmethod
    def fn_of_prim(cls, symbol: str) -> DSLFn | None:
        return cls.semantics().funcs.get(symbol)

    @classmethod
    def new_data(cls) -> object:
        """Initial value of ``EvalHandle.data`` for one evaluation."""
        return None
