"""AST nodes for the host s-expression language."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Prim:
    """A symbol resolved through the domain at evaluation time."""

    symbol: str


@dataclass(frozen=True)
class Var:
    """De Bruijn index: ``$0`` is the innermost binder."""

    index: int


@dataclass(frozen=True)
class Lam:
    body: "Expr"


@dataclass(frozen=True)
class App:
    func: "Expr"
    arg: "Expr"


Expr = Union[Prim, Var, Lam, App]
