"""Symbol tables, types, literal classification and declaration checking for a C-like front end."""

__version__ = "0.1.0"

__all__ = ["types", "definitions", "table", "constants", "specifiers", "declarations"]