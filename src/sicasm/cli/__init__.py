"""
sicasm Command-Line Interface
=============================

- **sicasm**: two-pass assembler

The tool is a Click-based application with help text and unified error
reporting (see cli.errors).
"""

__all__ = ["sicasm"]
