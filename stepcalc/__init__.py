"""stepcalc: step-annotated symbolic calculus."""

__version__ = "0.1.0"
