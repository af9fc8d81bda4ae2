import unittest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    TestClient = None

from stepcalc.api.server import create_app
from stepcalc.utils.config_loader import EngineConfig, IntegrationSettings, TaylorSettings


class ApiServerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        if TestClient is None:
            self.skipTest("fastapi is not installed")
        config = EngineConfig(
            integration=IntegrationSettings(grid_size=50, max_grid_size=200),
            taylor=TaylorSettings(default_order=3, max_order=6),
        )
        self.client = TestClient(create_app(config))

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_differentiate(self) -> None:
        response = self.client.post("/differentiate", json={"expression": "x*y", "variable": "y"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["ok"])
        self.assertEqual(body["metadata"]["simplified"], "x")

    def test_rejects_unknown_variable(self) -> None:
        response = self.client.post("/differentiate", json={"expression": "x", "variable": "z"})
        self.assertEqual(response.status_code, 422)

    def test_implicit(self) -> None:
        response = self.client.post("/implicit", json={"equation": "x^2 + y^2 = 1", "x": 0.6, "y": 0.8})
        self.assertEqual(response.status_code, 200)
        self.assertAlmostEqual(response.json()["metadata"]["value"], -0.75)

    def test_integrate(self) -> None:
        response = self.client.post("/integrate", json={"expression": "cos(x)"})
        self.assertEqual(response.json()["result"], "sin(x) + C")

    def test_double_integral_uses_configured_grid(self) -> None:
        response = self.client.post(
            "/double-integral",
            json={"expression": "x*y", "x_min": 0, "x_max": 1, "y_min": 0, "y_max": 1},
        )
        body = response.json()
        self.assertEqual(body["metadata"]["grid_size"], 50)
        self.assertAlmostEqual(body["result"], 0.25, places=9)

    def test_double_integral_grid_limit(self) -> None:
        response = self.client.post(
            "/double-integral",
            json={"expression": "x", "x_min": 0, "x_max": 1, "y_min": 0, "y_max": 1, "grid_size": 201},
        )
        self.assertEqual(response.status_code, 422)

    def test_taylor_default_and_limit(self) -> None:
        response = self.client.post("/taylor", json={"expression": "exp(x)"})
        self.assertEqual(response.json()["metadata"]["order"], 3)
        response = self.client.post("/taylor", json={"expression": "exp(x)", "order": 7})
        self.assertEqual(response.status_code, 422)

    def test_gradient(self) -> None:
        response = self.client.post("/gradient", json={"expression": "x^2 * y", "x": 1, "y": 2})
        self.assertAlmostEqual(response.json()["metadata"]["magnitude"], 17 ** 0.5)

    def test_divergence_and_curl(self) -> None:
        field = {"p": "x^2 * y", "q": "x * y", "x": 1, "y": 2}
        response = self.client.post("/divergence", json=field)
        self.assertEqual(response.status_code, 200)
        self.assertAlmostEqual(response.json()["result"], 5.0)

        response = self.client.post("/curl", json={"p": "-y", "q": "x", "x": 0, "y": 0})
        self.assertAlmostEqual(response.json()["result"], 2.0)

        response = self.client.post("/vector-field", json=field)
        self.assertEqual(response.json()["method"], "vector_field_analysis")

    def test_parametric_curve_uses_configured_samples(self) -> None:
        payload = {"x_t": "cos(t)", "y_t": "sin(t)", "t_start": 0, "t_end": 1, "t": 0}
        response = self.client.post("/parametric-curve", json=payload)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["metadata"]["samples"], 50)
        self.assertAlmostEqual(body["result"]["curvature"], 1.0)

    def test_parametric_curve_sample_limit(self) -> None:
        payload = {"x_t": "t", "y_t": "t", "samples": 500}
        self.assertEqual(self.client.post("/parametric-curve", json=payload).status_code, 422)
        payload = {"x_t": "x", "y_t": "t"}
        self.assertEqual(self.client.post("/parametric-curve", json=payload).status_code, 422)

    def test_computation_errors_map_to_422(self) -> None:
        response = self.client.post("/differentiate", json={"expression": "x +"})
        self.assertEqual(response.status_code, 422)
        self.assertIn("detail", response.json())


if __name__ == "__main__":
    unittest.main()
