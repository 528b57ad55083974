"""Pseudo-Boolean constraints, constraint arithmetic, front-end reports and a unit-propagation testing harness."""

__version__ = "0.1.0"
__all__ = ["clause", "fastclause", "front_end", "uptesting"]