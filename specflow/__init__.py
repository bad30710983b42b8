"""specflow - specification workspace engine."""

__version__ = "0.1.0"
