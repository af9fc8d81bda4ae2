import json
import unittest

from stepcalc.tools.calculator import (
    curl_at,
    differentiate_expression,
    divergence_at,
    double_integral,
    evaluate_expression,
    gradient_at,
    implicit_derivative,
    integrate_expression,
    parametric_curve,
    taylor_expansion,
    vector_field_analysis,
)


class CalculatorTestCase(unittest.TestCase):
    def test_evaluate_expression(self) -> None:
        result = evaluate_expression("3*(2+1)")
        self.assertTrue(result["ok"])
        self.assertAlmostEqual(float(result["result"]), 9.0, places=6)

    def test_evaluate_expression_with_bindings(self) -> None:
        result = evaluate_expression("x^2 + y", variables={"x": 3, "y": 1})
        self.assertAlmostEqual(result["result"], 10.0)

    def test_differentiate_expression(self) -> None:
        result = differentiate_expression("x^2")
        self.assertTrue(result["ok"])
        self.assertEqual(result["method"], "differentiate_expression")
        self.assertEqual(result["metadata"]["simplified"], "2 * x")
        steps = result["metadata"]["steps"]
        self.assertEqual(steps[0]["description"], "Initial expression")
        self.assertEqual(steps[-1]["description"], "Final partial derivative")
        json.dumps(result)

    def test_implicit_derivative_with_point(self) -> None:
        result = implicit_derivative("x^2 + y^2 = 1", x=0.6, y=0.8)
        self.assertEqual(result["result"], "dy/dx = -x / y")
        self.assertAlmostEqual(result["metadata"]["value"], -0.75)
        self.assertEqual(result["metadata"]["point"], [0.6, 0.8])

    def test_implicit_derivative_without_point(self) -> None:
        result = implicit_derivative("x*y = 1")
        self.assertTrue(result["ok"])
        self.assertNotIn("value", result["metadata"])

    def test_integrate_expression_reports_partial_result(self) -> None:
        result = integrate_expression("x * sin(x)")
        self.assertTrue(result["ok"])
        self.assertFalse(result["metadata"]["complete"])
        self.assertEqual(result["result"], "x * sin(x) + C")

    def test_double_integral(self) -> None:
        result = double_integral("x*y", 0.0, 1.0, 0.0, 1.0)
        self.assertAlmostEqual(result["result"], 0.25, places=9)
        self.assertEqual(result["metadata"]["grid_size"], 100)

    def test_taylor_expansion(self) -> None:
        result = taylor_expansion("exp(x)", center=0.0, order=2)
        self.assertEqual(result["result"], "P2(x) = 1.0000 + x + 0.5000x^2")
        self.assertEqual(len(result["metadata"]["coefficients"]), 3)
        self.assertTrue(result["metadata"]["complete"])

    def test_taylor_expansion_flags_non_analytic_point(self) -> None:
        result = taylor_expansion("sqrt(x)", center=0.0, order=5)
        self.assertTrue(result["ok"])
        self.assertFalse(result["metadata"]["complete"])
        self.assertNotIn("inf", result["result"])

    def test_gradient_at(self) -> None:
        result = gradient_at("x^2 * y", 1.0, 2.0)
        self.assertEqual(len(result["result"]), 2)
        self.assertAlmostEqual(result["result"][0], 4.0)
        self.assertAlmostEqual(result["result"][1], 1.0)

    def test_divergence_and_curl_at(self) -> None:
        divergence = divergence_at("x^2 * y", "x * y", 1.0, 2.0)
        self.assertAlmostEqual(divergence["result"], 5.0)
        self.assertEqual(divergence["metadata"]["expression"], "<x^2 * y, x * y>")
        self.assertEqual(divergence["metadata"]["point"], [1.0, 2.0])

        rotation = curl_at("-y", "x", 0.0, 0.0)
        self.assertAlmostEqual(rotation["result"], 2.0)
        self.assertEqual(rotation["metadata"]["curl"], "2")
        json.dumps(rotation)

    def test_vector_field_analysis(self) -> None:
        result = vector_field_analysis("x - y", "x + y", 1.0, 1.0)
        self.assertAlmostEqual(result["result"]["divergence"], 2.0)
        self.assertAlmostEqual(result["result"]["curl"], 2.0)
        self.assertEqual(result["metadata"]["steps"][-1]["description"], "=== Summary ===")

    def test_parametric_curve(self) -> None:
        result = parametric_curve("cos(t)", "sin(t)", 0.0, 1.0, 0.0, samples=50)
        self.assertTrue(result["ok"])
        self.assertAlmostEqual(result["result"]["curvature"], 1.0)
        self.assertAlmostEqual(result["result"]["arc_length"], 1.0)
        self.assertEqual(result["metadata"]["derivatives"], ["-sin(t)", "cos(t)"])
        self.assertEqual(result["metadata"]["samples"], 50)
        self.assertEqual(result["metadata"]["expression"], "r(t) = (cos(t), sin(t))")
        json.dumps(result)

    def test_parametric_curve_singular_point(self) -> None:
        result = parametric_curve("t^2", "t^3", -1.0, 1.0, 0.0)
        self.assertIsNone(result["metadata"]["unit_tangent"])
        self.assertIsNone(result["metadata"]["radius"])

    def test_bad_input_is_reported_not_raised(self) -> None:
        cases = [
            differentiate_expression("x +"),
            differentiate_expression("x", variable="z"),
            integrate_expression("import os"),
            implicit_derivative("x = y = 1"),
            double_integral("x", 0.0, 1.0, 0.0, 1.0, grid_size=0),
            taylor_expansion("exp(x)", order=-1),
            gradient_at("x^2 * z", 1.0, 2.0),
            divergence_at("x", "z", 0.0, 0.0),
            curl_at("x +", "y", 0.0, 0.0),
            vector_field_analysis("x", "y * w", 0.0, 0.0),
            parametric_curve("x", "t", 0.0, 1.0, 0.0),
            parametric_curve("t", "t", 0.0, 1.0, 0.0, samples=0),
            evaluate_expression("x + 1"),
            differentiate_expression("x + x", max_length=3),
        ]
        for result in cases:
            with self.subTest(method=result["method"]):
                self.assertFalse(result["ok"])
                self.assertTrue(result["error"])


if __name__ == "__main__":
    unittest.main()
