"""dreamegg public API."""

from .coerce import Coercion
from .domain import Const, Domain, DSLFn, EvalHandle, PrimitiveCall, Semantics, define_semantics
from .errors import (
    ArityMismatch,
    ContractViolation,
    DreamEggError,
    DreamEggParseError,
    EvalDepthError,
    EvalError,
    NotCallableError,
    TypeMismatch,
    UndefinedSymbolError,
)
from .evaluator import Closure, Evaluator, evaluate, evaluate_with_errors
from .parser import ParseError, parse
from .values import Dom, DomainValue, Fun, Val, ValueInfo, ValueKind, value_info

__all__ = [
    "parse",
    "ParseError",
    "evaluate",
    "evaluate_with_errors",
    "Evaluator",
    "Closure",
    "Domain",
    "DSLFn",
    "EvalHandle",
    "PrimitiveCall",
    "Semantics",
    "Const",
    "define_semantics",
    "Coercion",
    "Dom",
    "Fun",
    "Val",
    "DomainValue",
    "ValueInfo",
    "ValueKind",
    "value_info",
    "DreamEggError",
    "DreamEggParseError",
    "EvalError",
    "EvalDepthError",
    "NotCallableError",
    "UndefinedSymbolError",
    "ContractViolation",
    "TypeMismatch",
    "ArityMismatch",
]
