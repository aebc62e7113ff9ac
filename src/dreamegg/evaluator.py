"""Reference tree-walking evaluator for the host language.

``Evaluator`` is the concrete ``EvalHandle``: primitives receive it and call
``apply`` on it to run function values they were given, so evaluation
recurses between host and domain.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Final

from .ast import App, Expr, Lam, Prim, Var
from .domain import Domain, PrimitiveCall
from .errors import DreamEggParseError, EvalDepthError, EvalError, NotCallableError, UndefinedSymbolError
from .parser import ParseError, parse
from .values import Fun, Val, shape_name, validate_value

logger = logging.getLogger(__name__)

_MAX_APPLY_DEPTH: Final[int] = max(1, int(os.environ.get("DREAMEGG_MAX_APPLY_DEPTH", "200")))
_PROGRAM_CACHE_MAX: Final[int] = max(1, int(os.environ.get("DREAMEGG_PROGRAM_CACHE_MAX", "256")))

_MISSING: Final = object()


@lru_cache(maxsize=_PROGRAM_CACHE_MAX)
def _parse_cached(source: str) -> Expr:
    return parse(source)


@dataclass(frozen=True)
class Closure:
    body: Expr
    env: tuple[Val, ...]


class Evaluator:
    """Evaluates expressions against one domain.

    One instance per evaluation; ``data`` is the domain's per-evaluation slot
    and ``max_depth`` bounds nested applications.
    """

    def __init__(self, domain: type[Domain], *, data: object = _MISSING, max_depth: int = _MAX_APPLY_DEPTH) -> None:
        self.domain = domain
        self.data = domain.new_data() if data is _MISSING else data
        self.max_depth = max_depth
        self.depth = 0

    def eval(self, expr: Expr, env: tuple[Val, ...] = ()) -> Val:
        try:
            return self._eval(expr, env)
        except RecursionError as err:
            logger.debug("Python recursion limit hit while evaluating in %s domain", self.domain.name)
            raise EvalDepthError("Expression nested too deeply to evaluate") from err

    def _eval(self, expr: Expr, env: tuple[Val, ...]) -> Val:
        if isinstance(expr, Prim):
            val = self.domain.val_of_prim(expr.symbol)
            if val is None:
                raise UndefinedSymbolError(expr.symbol)
            return val

        if isinstance(expr, Var):
            if expr.index >= len(env):
                raise EvalError(f"Unbound variable ${expr.index} (depth {len(env)})")
            return env[expr.index]

        if isinstance(expr, Lam):
            return Fun(Closure(body=expr.body, env=env))

        if isinstance(expr, App):
            func = self._eval(expr.func, env)
            arg = self._eval(expr.arg, env)
            return self.apply(func, arg)

        raise TypeError(f"Unsupported expression node: {type(expr)!r}")

    def apply(self, f: Val, x: Val) -> Val:
        if not isinstance(f, Fun):
            raise NotCallableError(f"{shape_name(f)} value cannot be called")

        payload = f.payload
        if isinstance(payload, PrimitiveCall):
            args = payload.args + (x,)
            if len(args) < payload.fn.arity:
                return Fun(PrimitiveCall(fn=payload.fn, args=args))
            fn = self.domain.fn_of_prim(payload.fn.name)
            if fn is None:
                raise NotCallableError(f"Primitive {payload.fn.name!r} is not defined in the {self.domain.name} domain")
            return self._nested(fn, list(args), self)

        if isinstance(payload, Closure):
            return self._nested(self._eval, payload.body, (x,) + payload.env)

        raise NotCallableError(f"Unknown function payload {type(payload).__name__}")

    def _nested(self, fn: Callable[..., Val], *args) -> Val:
        if self.depth >= self.max_depth:
            logger.debug("apply depth limit %d reached in %s domain", self.max_depth, self.domain.name)
            raise EvalDepthError(f"Application nested deeper than {self.max_depth}")
        self.depth += 1
        try:
            return fn(*args)
        except RecursionError as err:
            logger.debug("Python recursion limit hit at apply depth %d", self.depth)
            raise EvalDepthError("Python recursion limit reached during evaluation") from err
        finally:
            self.depth -= 1


def evaluate(source: str, domain: type[Domain] | None = None, args: Sequence[Val] = (), **options) -> Val:
    """Parse and evaluate ``source``; ``args[0]`` is bound to ``$0``."""
    if domain is None:
        from .domains.simple import SimpleDomain

        domain = SimpleDomain
    for idx, value in enumerate(args):
        validate_value(value, where=f"args[{idx}]")
    expr = _parse_cached(source)
    return Evaluator(domain, **options).eval(expr, tuple(args))


def evaluate_with_errors(source: str, domain: type[Domain] | None = None, args: Sequence[Val] = (), **options) -> Val:
    """Like ``evaluate`` but with parse failures raised as ``DreamEggParseError``."""
    try:
        return evaluate(source, domain, args, **options)
    except ParseError as err:
        raise DreamEggParseError.from_parse_error(err) from err
