"""Conversions between runtime values and native Python types.

A domain declares which host scalar types map onto which of its variants and
which variant plays the role of a sequence. ``Coercion`` derives both
directions from that, including element-wise ``list[T]`` handling:

    COERCE = Coercion(scalars={int: Int}, sequence=List)
    x, xs = COERCE.load_args(args, int, list[Val])

Unwrapping assumes a well-typed program. A value of the wrong shape raises
``TypeMismatch``, which is a contract violation and is never caught by the
runtime.
"""

from __future__ import annotations

import typing
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Final

import jax.numpy as jnp

from .errors import ArityMismatch, TypeMismatch
from .values import Dom, DomainValue, Fun, Val, shape_name

_VAL_TARGETS: Final = (Val, object)


def target_name(target: object) -> str:
    if target in _VAL_TARGETS:
        return "Val"
    if typing.get_origin(target) is list:
        (inner,) = typing.get_args(target) or (Val,)
        return f"list[{target_name(inner)}]"
    if target is list:
        return "list[Val]"
    return getattr(target, "__name__", repr(target))


def _as_host_integer(obj: object) -> object:
    # 0-d JAX/NumPy integer results are accepted where a Python int is.
    dtype = getattr(obj, "dtype", None)
    if dtype is not None and getattr(obj, "ndim", None) == 0 and jnp.issubdtype(dtype, jnp.integer):
        return int(obj)
    return obj


@dataclass(frozen=True)
class Coercion:
    scalars: Mapping[type, type[DomainValue]]
    sequence: type[DomainValue]

    def from_val(self, val: Val, target: object):
        """Unwrap ``val`` into the host type ``target``."""
        if target in _VAL_TARGETS:
            if not isinstance(val, (Dom, Fun)):
                raise TypeMismatch("Val", shape_name(val))
            return val

        if target is list or typing.get_origin(target) is list:
            args = typing.get_args(target)
            inner = args[0] if args else Val
            items = self._sequence_items(val, target)
            return [self.from_val(item, inner) for item in items]

        variant = self.scalars.get(target)
        if variant is None:
            raise TypeError(f"no coercion registered for host type {target_name(target)}")
        if isinstance(val, Dom) and isinstance(val.value, variant):
            return val.value.value
        raise TypeMismatch(target_name(target), shape_name(val))

    def _sequence_items(self, val: Val, target: object) -> tuple[Val, ...]:
        if isinstance(val, Dom) and isinstance(val.value, self.sequence):
            return val.value.items
        raise TypeMismatch(target_name(target), shape_name(val))

    def into_val(self, obj: object) -> Val:
        """Wrap a host object into its canonical runtime value."""
        if isinstance(obj, (Dom, Fun)):
            return obj
        if isinstance(obj, (list, tuple)):
            return Dom(self.sequence(tuple(self.into_val(item) for item in obj)))
        obj = _as_host_integer(obj)
        # bool is an int subclass but not an integer value here.
        if isinstance(obj, bool):
            raise TypeMismatch("host value with a domain coercion", "bool")
        variant = self.scalars.get(type(obj))
        if variant is None:
            for host, candidate in self.scalars.items():
                if isinstance(obj, host):
                    variant = candidate
                    break
        if variant is None:
            raise TypeMismatch("host value with a domain coercion", type(obj).__name__)
        try:
            return Dom(variant(obj))
        except ValueError as err:
            # rejected by the variant itself, e.g. an int outside i32
            raise TypeMismatch(variant.shape, f"out-of-range {type(obj).__name__} {obj!r}") from err

    def ok(self, obj: object) -> Val:
        return self.into_val(obj)

    def load_args(self, args: Sequence[Val], *targets: object, name: str = "primitive") -> tuple:
        """Unwrap positional arguments, one target type per position."""
        if len(args) != len(targets):
            raise ArityMismatch(name, len(targets), len(args))
        return tuple(self.from_val(arg, target) for arg, target in zip(args, targets))
