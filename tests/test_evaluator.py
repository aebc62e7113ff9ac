from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


def _as_host(val):
    from dreamegg.domains.simple import COERCE, Int

    if isinstance(val.value, Int):
        return COERCE.from_val(val, int)
    return [_as_host(item) for item in val.value.items]


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for evaluator tests")
class EvaluatorTests(unittest.TestCase):
    def test_arithmetic(self) -> None:
        from dreamegg import evaluate

        self.assertEqual(_as_host(evaluate("(+ 1 2)")), 3)
        self.assertEqual(_as_host(evaluate("(* (+ 1 2) 4)")), 12)
        self.assertEqual(_as_host(evaluate("(+ 2147483647 1)")), -(2**31))

    def test_literals_evaluate_to_domain_values(self) -> None:
        from dreamegg import evaluate

        self.assertEqual(_as_host(evaluate("42")), 42)
        self.assertEqual(_as_host(evaluate("[1,2,3]")), [1, 2, 3])
        self.assertEqual(_as_host(evaluate("(sum [])")), 0)

    def test_map_with_lambda_calls_back_into_evaluator(self) -> None:
        from dreamegg import evaluate

        self.assertEqual(_as_host(evaluate("(map (lam (* $0 2)) [1,2,3])")), [2, 4, 6])
        self.assertEqual(_as_host(evaluate("(sum (map (lam (* $0 $0)) [1,2,3]))")), 14)

    def test_primitives_are_first_class_and_curried(self) -> None:
        from dreamegg import evaluate

        self.assertEqual(_as_host(evaluate("(map (+ 10) [1,2])")), [11, 12])
        self.assertEqual(_as_host(evaluate("((lam ($0 3 4)) *)")), 12)

    def test_partial_application_is_a_function_value(self) -> None:
        from dreamegg import Fun, PrimitiveCall, evaluate

        partial = evaluate("(+ 1)")
        self.assertIsInstance(partial, Fun)
        self.assertIsInstance(partial.payload, PrimitiveCall)
        self.assertEqual(partial.payload.remaining, 1)

    def test_nested_lists_through_map(self) -> None:
        from dreamegg import evaluate

        source = "(map (lam (map (lam (+ $0 $1)) [1,2])) [10,20])"
        self.assertEqual(_as_host(evaluate(source)), [[11, 12], [21, 22]])

    def test_program_arguments_bind_de_bruijn_variables(self) -> None:
        from dreamegg import evaluate
        from dreamegg.domains.simple import COERCE

        args = [COERCE.into_val(5), COERCE.into_val([1, 2])]
        self.assertEqual(_as_host(evaluate("(+ $0 (sum $1))", args=args)), 8)

    def test_undefined_symbol(self) -> None:
        from dreamegg import EvalError, UndefinedSymbolError, evaluate

        with self.assertRaises(UndefinedSymbolError) as ctx:
            evaluate("(+ foo 1)")
        self.assertEqual(ctx.exception.symbol, "foo")
        self.assertIsInstance(ctx.exception, EvalError)

        # malformed literals are undefined symbols to the host
        with self.assertRaises(UndefinedSymbolError):
            evaluate("[1,2")

    def test_unbound_variable_and_non_callable(self) -> None:
        from dreamegg import EvalError, NotCallableError, evaluate

        from dreamegg import Fun

        self.assertIsInstance(evaluate("(lam $1)"), Fun)
        with self.assertRaisesRegex(EvalError, "Unbound variable"):
            evaluate("((lam $1) 0)")
        with self.assertRaises(NotCallableError):
            evaluate("(1 2)")

    def test_failure_inside_map_propagates_unchanged(self) -> None:
        from dreamegg import NotCallableError, evaluate

        with self.assertRaises(NotCallableError):
            evaluate("(map (lam ($0 1)) [1,2,3])")

    def test_ill_typed_program_raises_contract_violation(self) -> None:
        from dreamegg import ContractViolation, EvalError, TypeMismatch, evaluate

        with self.assertRaises(TypeMismatch) as ctx:
            evaluate("(sum 3)")
        self.assertIsInstance(ctx.exception, ContractViolation)
        self.assertNotIsInstance(ctx.exception, EvalError)

        with self.assertRaises(TypeMismatch):
            evaluate("(+ [1] 2)")

    def test_depth_limit(self) -> None:
        from dreamegg import EvalDepthError, Evaluator, evaluate, parse
        from dreamegg.domains.simple import SimpleDomain

        # omega combinator never terminates
        with self.assertRaises(EvalDepthError):
            evaluate("((lam ($0 $0)) (lam ($0 $0)))")

        expr = parse("((lam (+ $0 1)) 1)")
        self.assertEqual(_as_host(Evaluator(SimpleDomain, max_depth=5).eval(expr)), 2)
        shallow = Evaluator(SimpleDomain, max_depth=1)
        with self.assertRaises(EvalDepthError):
            shallow.eval(expr)
        self.assertEqual(shallow.depth, 0)

    def test_deeply_nested_source_is_a_structured_parse_error(self) -> None:
        from dreamegg import DreamEggError, DreamEggParseError, evaluate_with_errors

        depth = 5000
        source = "(+ 1 " * depth + "1" + ")" * depth
        with self.assertRaises(DreamEggParseError) as ctx:
            evaluate_with_errors(source)
        self.assertIsInstance(ctx.exception, DreamEggError)
        self.assertIn("nested too deeply", ctx.exception.message)

    def test_deep_argument_tree_is_an_eval_depth_error(self) -> None:
        from dreamegg import EvalDepthError, Evaluator
        from dreamegg.ast import App, Prim
        from dreamegg.domains.simple import SimpleDomain

        # nesting lives in argument positions, so no apply happens before the bottom
        expr = Prim("1")
        for _ in range(5000):
            expr = App(func=App(func=Prim("+"), arg=Prim("1")), arg=expr)
        evaluator = Evaluator(SimpleDomain)
        with self.assertRaises(EvalDepthError):
            evaluator.eval(expr)
        self.assertEqual(evaluator.depth, 0)

    def test_saturated_primitives_resolve_through_fn_of_prim(self) -> None:
        from dreamegg import evaluate
        from dreamegg.domains.simple import SimpleDomain

        looked_up: list[str] = []

        class RecordingDomain(SimpleDomain):
            @classmethod
            def fn_of_prim(cls, symbol):
                looked_up.append(symbol)
                return super().fn_of_prim(symbol)

        self.assertEqual(_as_host(evaluate("(sum (map (+ 1) [1,2]))", RecordingDomain)), 5)
        # partial applications are not resolved, only saturated calls
        self.assertEqual(sorted(looked_up), ["+", "+", "map", "sum"])

    def test_primitive_from_another_domain_is_not_callable(self) -> None:
        from dreamegg import DSLFn, Evaluator, Fun, NotCallableError, PrimitiveCall
        from dreamegg.domains.simple import SimpleDomain

        foreign = Fun(PrimitiveCall(DSLFn(name="neg", arity=1, impl=lambda args, handle: args[0])))
        with self.assertRaisesRegex(NotCallableError, "neg"):
            Evaluator(SimpleDomain).apply(foreign, SimpleDomain.val_of_prim("1"))

    def test_parse_errors(self) -> None:
        from dreamegg import DreamEggParseError, ParseError, evaluate, evaluate_with_errors

        with self.assertRaises(ParseError):
            evaluate("(+ 1")
        with self.assertRaises(DreamEggParseError) as ctx:
            evaluate_with_errors("(+ 1")
        self.assertEqual(ctx.exception.found, "EOF")

    def test_args_are_validated(self) -> None:
        from dreamegg import evaluate

        with self.assertRaises(TypeError):
            evaluate("$0", args=[5])


if __name__ == "__main__":
    unittest.main()
