"""Parsing, compiling and evaluating mathematical expressions for plotting."""

__version__ = "0.1.0"
__all__ = ["errors", "functions", "parser", "program", "sanitizer", "vector"]