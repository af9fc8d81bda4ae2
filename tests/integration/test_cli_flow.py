import io
import json
import logging
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from stepcalc.main import build_parser, main


class CliFlowTestCase(unittest.TestCase):
    def tearDown(self) -> None:
        root = logging.getLogger()
        root.handlers = []
        root.setLevel(logging.WARNING)

    def _run(self, *argv: str):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            code = main(list(argv) + ["--log-level", "WARNING"])
        return code, json.loads(buffer.getvalue())

    def test_differentiate_flow(self) -> None:
        code, result = self._run("--operation", "differentiate", "--expression", "x^3")
        self.assertEqual(code, 0)
        self.assertEqual(result["metadata"]["simplified"], "3 * x^2")

    def test_implicit_flow_with_point(self) -> None:
        code, result = self._run("--operation", "implicit", "--expression", "x^2 + y^2 = 25", "--x", "3", "--y", "4")
        self.assertEqual(code, 0)
        self.assertAlmostEqual(result["metadata"]["value"], -0.75)

    def test_double_integral_flow(self) -> None:
        code, result = self._run(
            "--operation", "double", "--expression", "x + y", "--x-range", "0", "2", "--y-range", "0", "1", "--grid-size", "20"
        )
        self.assertEqual(code, 0)
        self.assertAlmostEqual(result["result"], 3.0, places=9)

    def test_taylor_flow(self) -> None:
        code, result = self._run("--operation", "taylor", "--expression", "exp(x)", "--order", "1")
        self.assertEqual(result["result"], "P1(x) = 1.0000 + x")

    def test_gradient_flow(self) -> None:
        code, result = self._run("--operation", "gradient", "--expression", "x*y", "--x", "2", "--y", "5")
        self.assertEqual(result["result"], [5.0, 2.0])

    def test_divergence_and_curl_flow(self) -> None:
        code, result = self._run("--operation", "divergence", "--field", "x^2 * y", "x * y", "--x", "1", "--y", "2")
        self.assertEqual(code, 0)
        self.assertAlmostEqual(result["result"], 5.0)
        code, result = self._run("--operation", "curl", "--field", "0 - y", "x", "--x", "0", "--y", "0")
        self.assertAlmostEqual(result["result"], 2.0)

    def test_curve_flow(self) -> None:
        code, result = self._run(
            "--operation", "curve", "--curve", "cos(t)", "sin(t)", "--t-range", "0", "1", "--t", "0", "--samples", "40"
        )
        self.assertEqual(code, 0)
        self.assertAlmostEqual(result["result"]["curvature"], 1.0)
        self.assertEqual(result["metadata"]["samples"], 40)

    def test_failed_computation_exits_non_zero(self) -> None:
        code, result = self._run("--operation", "integrate", "--expression", "x +")
        self.assertEqual(code, 1)
        self.assertFalse(result["ok"])

    def test_export_flow(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tex = Path(tmpdir) / "out.tex"
            notebook = Path(tmpdir) / "out.ipynb"
            code, _ = self._run(
                "--operation",
                "integrate",
                "--expression",
                "x^2 + 1",
                "--export-latex",
                str(tex),
                "--export-notebook",
                str(notebook),
            )
            self.assertEqual(code, 0)
            self.assertIn("Power Rule", tex.read_text(encoding="utf-8"))
            self.assertEqual(json.loads(notebook.read_text(encoding="utf-8"))["nbformat"], 4)

    def test_missing_arguments_are_usage_errors(self) -> None:
        cases = (
            ["--operation", "differentiate"],
            ["--operation", "gradient", "--expression", "x"],
            ["--operation", "divergence", "--x", "0", "--y", "0"],
            ["--operation", "curl", "--field", "x", "y"],
            ["--operation", "curve"],
        )
        for argv in cases:
            with self.subTest(argv=argv):
                with redirect_stderr(io.StringIO()):
                    with self.assertRaises(SystemExit) as ctx:
                        main(argv)
                self.assertEqual(ctx.exception.code, 2)

    def test_parser_defaults(self) -> None:
        args = build_parser().parse_args([])
        self.assertEqual(args.mode, "cli")
        self.assertEqual(args.operation, "differentiate")
        self.assertEqual(args.x_range, [0.0, 1.0])
        self.assertEqual(args.t_range, [0.0, 1.0])
        self.assertEqual(args.samples, 100)


if __name__ == "__main__":
    unittest.main()
