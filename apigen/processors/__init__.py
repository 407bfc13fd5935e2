"""
Processors module for apigen.

This module contains TextX object processors that run while a validation
directive is being parsed.
"""

from apigen.processors.object_processors import (
    get_obj_processors,
    key_value_obj_processor,
)

__all__ = [
    "get_obj_processors",
    "key_value_obj_processor",
]
