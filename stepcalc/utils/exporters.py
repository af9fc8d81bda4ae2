"""Export helpers that write a computation's step trace to LaTeX and Jupyter formats."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

_LATEX_ESCAPES = {"\\": r"\textbackslash{}", "&": r"\&", "%": r"\%", "$": r"\$", "#": r"\#", "_": r"\_", "{": r"\{", "}": r"\}"}


def _escape_latex(text: str) -> str:
    return "".join(_LATEX_ESCAPES.get(char, char) for char in str(text))


def _report_steps(report: Dict[str, Any]) -> List[Dict[str, str]]:
    steps = report.get("metadata", {}).get("steps", [])
    return [step for step in steps if isinstance(step, dict)]


def export_latex(report: Dict[str, Any], output_path: str) -> str:
    """Writes a tool result and its steps as a LaTeX fragment; returns the written path."""
    metadata = report.get("metadata", {})
    lines = [
        r"\section*{stepcalc Result}",
        r"\textbf{Operation:} " + _escape_latex(report.get("method", "-")) + r"\\",
        r"\textbf{Input:} \texttt{" + _escape_latex(metadata.get("expression", "-")) + r"}\\",
    ]
    if report.get("ok"):
        lines.append(r"\textbf{Result:} \texttt{" + _escape_latex(report.get("result", "")) + r"}")
    else:
        lines.append(r"\textbf{Error:} " + _escape_latex(report.get("error", "")))

    steps = _report_steps(report)
    if steps:
        lines.append(r"\begin{enumerate}")
        for step in steps:
            description = _escape_latex(step.get("description", ""))
            expression = _escape_latex(step.get("expression", ""))
            lines.append(r"  \item " + description + (r" \texttt{" + expression + "}" if expression else ""))
        lines.append(r"\end{enumerate}")

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text("\n".join(lines), encoding="utf-8")
    return str(output)


def export_notebook(report: Dict[str, Any], output_path: str) -> str:
    """Writes a tool result and its steps as an nbformat 4 notebook; returns the written path."""
    metadata = report.get("metadata", {})
    step_lines = [
        "{}. {} `{}`\n".format(index, step.get("description", ""), step.get("expression", ""))
        for index, step in enumerate(_report_steps(report), start=1)
    ]
    outcome = report.get("result") if report.get("ok") else "Error: {}".format(report.get("error", ""))

    notebook: Dict[str, Any] = {
        "cells": [
            {
                "cell_type": "markdown",
                "metadata": {},
                "source": [
                    "# stepcalc Result\n",
                    "- Operation: {}\n".format(report.get("method", "-")),
                    "- Input: `{}`\n".format(metadata.get("expression", "-")),
                ],
            },
            {
                "cell_type": "markdown",
                "metadata": {},
                "source": ["## Result\n", "```\n{}\n```\n".format(outcome)],
            },
            {
                "cell_type": "markdown",
                "metadata": {},
                "source": ["## Steps\n"] + step_lines,
            },
        ],
        "metadata": {"kernelspec": {"display_name": "Python 3", "language": "python", "name": "python3"}},
        "nbformat": 4,
        "nbformat_minor": 5,
    }

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(notebook, ensure_ascii=False, indent=2), encoding="utf-8")
    return str(output)
