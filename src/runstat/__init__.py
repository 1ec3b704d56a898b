"""runstat: run commands repeatedly and report timing statistics."""

__version__ = "0.1.0"
