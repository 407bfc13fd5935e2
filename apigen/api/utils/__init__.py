"""Utility functions for the generator."""

from .naming import to_snake_case, is_module_name

__all__ = [
    "to_snake_case",
    "is_module_name",
]
