import json
import tempfile
import unittest

from stepcalc.tools.calculator import differentiate_expression
from stepcalc.utils.exporters import export_latex, export_notebook


class ExportersTestCase(unittest.TestCase):
    def test_export_latex_and_notebook(self) -> None:
        report = differentiate_expression("x^2 * sin(x)")

        with tempfile.TemporaryDirectory() as tmpdir:
            tex_path = export_latex(report, output_path=f"{tmpdir}/result.tex")
            nb_path = export_notebook(report, output_path=f"{tmpdir}/result.ipynb")

            with open(tex_path, "r", encoding="utf-8") as tex:
                content = tex.read()
            self.assertIn("stepcalc Result", content)
            self.assertIn(r"\item Product Rule", content)
            self.assertIn(r"differentiate\_expression", content)

            with open(nb_path, "r", encoding="utf-8") as nb:
                notebook = json.load(nb)
            self.assertEqual(notebook["nbformat"], 4)
            self.assertEqual(len(notebook["cells"]), 3)
            self.assertIn("Initial expression", "".join(notebook["cells"][2]["source"]))

    def test_export_failed_report(self) -> None:
        report = differentiate_expression("x +")
        with tempfile.TemporaryDirectory() as tmpdir:
            tex_path = export_latex(report, output_path=f"{tmpdir}/nested/result.tex")
            with open(tex_path, "r", encoding="utf-8") as tex:
                content = tex.read()
        self.assertIn(r"\textbf{Error:}", content)
        self.assertNotIn("enumerate", content)


if __name__ == "__main__":
    unittest.main()
