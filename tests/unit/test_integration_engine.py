import math
import unittest

from stepcalc.engine.differentiation import differentiate
from stepcalc.engine.integration import NOT_INTEGRATED_MARKER, double_integrate, integrate
from stepcalc.engine.steps import Selector
from stepcalc.expression.parser import parse_expression
from stepcalc.expression.tree import BinaryOp, Node, Number, UnaryFunc, UnaryFunction, Variable, mul


def _node_ids(node: Node) -> set:
    ids = {id(node)}
    if isinstance(node, BinaryOp):
        ids |= _node_ids(node.left) | _node_ids(node.right)
    elif isinstance(node, UnaryFunc):
        ids |= _node_ids(node.arg)
    return ids


class IntegrationEngineTestCase(unittest.TestCase):
    def test_constant_and_variable(self) -> None:
        self.assertEqual(integrate(Number(5), Selector.X).tree, mul(5, Variable("x")))
        self.assertEqual(integrate(Variable("x"), Selector.X).text, "x^2 / 2 + C")

    def test_foreign_variable_is_constant(self) -> None:
        result = integrate(Variable("y"), Selector.X)
        self.assertEqual(str(result.tree), "y * x")
        self.assertTrue(result.complete)

    def test_reciprocal_power_gives_log(self) -> None:
        result = integrate(parse_expression("x^-1"), Selector.X)
        self.assertEqual(result.tree, UnaryFunc(UnaryFunction.LN, Variable("x")))
        self.assertIn("ln|x|", result.steps[0].description)

    def test_power_rule(self) -> None:
        result = integrate(parse_expression("x^2"), Selector.X)
        self.assertEqual(str(result.tree), "x^3 / 3")
        self.assertAlmostEqual(result.tree.evaluate(x=3.0), 9.0)

    def test_constant_multiple_on_either_side(self) -> None:
        for text in ("3*x", "x*3"):
            with self.subTest(expression=text):
                result = integrate(parse_expression(text), Selector.X)
                self.assertTrue(result.steps[0].description.startswith("Constant Multiple Rule"))
                self.assertAlmostEqual(result.tree.evaluate(x=2.0), 6.0)

    def test_product_of_dependent_factors_falls_back(self) -> None:
        tree = parse_expression("x * sin(x)")
        result = integrate(tree, Selector.X)
        self.assertEqual(result.tree, tree)
        self.assertIsNot(result.tree, tree)
        self.assertFalse(result.complete)
        self.assertIn(NOT_INTEGRATED_MARKER, result.steps[-1].description)

    def test_unsupported_functions_fall_back(self) -> None:
        for text in ("tan(x)", "sin(2*x)", "1 / x", "x^x", "(x + 1)^2"):
            with self.subTest(expression=text):
                result = integrate(parse_expression(text), Selector.X)
                self.assertFalse(result.complete)
                self.assertEqual(result.tree, parse_expression(text))

    def test_subtrees_free_of_the_variable_are_constants(self) -> None:
        for text in ("sin(y)", "2^y"):
            with self.subTest(expression=text):
                result = integrate(parse_expression(text), Selector.X)
                self.assertTrue(result.complete)
                self.assertEqual(result.tree, mul(parse_expression(text), Variable("x")))

    def test_result_shares_no_nodes_with_input(self) -> None:
        for text in ("3*x", "x*3", "y*x", "sin(y)", "2^y", "y", "x*sin(x)", "x^2 + 4"):
            with self.subTest(expression=text):
                tree = parse_expression(text)
                result = integrate(tree, Selector.X)
                self.assertFalse(_node_ids(tree) & _node_ids(result.tree))

    def test_integrates_with_respect_to_y(self) -> None:
        result = integrate(parse_expression("x * y"), Selector.Y)
        self.assertAlmostEqual(result.tree.evaluate(x=2.0, y=3.0), 9.0)

    def test_derivative_of_antiderivative_recovers_integrand(self) -> None:
        for text in ("3*x^2 + 2*x - 5", "cos(x) + exp(x) - sin(x)", "x^-1 + 4*x^3", "y*x + 7"):
            tree = parse_expression(text)
            antiderivative = integrate(tree, Selector.X)
            self.assertTrue(antiderivative.complete)
            recovered = differentiate(antiderivative.tree, Selector.X).tree
            for point in (0.5, 1.3, 2.7):
                with self.subTest(expression=text, point=point):
                    self.assertAlmostEqual(
                        recovered.evaluate(x=point, y=1.5), tree.evaluate(x=point, y=1.5), places=9
                    )

    def test_narrative_mentions_constant_of_integration(self) -> None:
        narrative = integrate(parse_expression("x + 1"), Selector.X).narrative()
        self.assertEqual(narrative[0].description, "Initial expression")
        self.assertIn("+ C", narrative[-1].expression)

    def test_double_integral_of_product(self) -> None:
        result = double_integrate(parse_expression("x * y"), (0.0, 1.0), (0.0, 1.0))
        self.assertAlmostEqual(result.value, 0.25, places=9)
        self.assertEqual(result.grid_size, 100)
        self.assertEqual(result.steps[0].description, "Double integration setup")
        self.assertIn("100x100", result.steps[-1].description)

    def test_double_integral_of_quadratic(self) -> None:
        result = double_integrate(parse_expression("x^2 + y^2"), (0.0, 1.0), (0.0, 2.0), grid_size=200)
        self.assertAlmostEqual(result.value, 10.0 / 3.0, places=3)

    def test_double_integral_pole_propagates(self) -> None:
        result = double_integrate(parse_expression("1 / (x - 0.5)"), (0.0, 1.0), (0.0, 1.0), grid_size=1)
        self.assertTrue(math.isinf(result.value))

    def test_double_integral_rejects_empty_grid(self) -> None:
        with self.assertRaises(ValueError):
            double_integrate(parse_expression("x"), (0.0, 1.0), (0.0, 1.0), grid_size=0)


if __name__ == "__main__":
    unittest.main()
