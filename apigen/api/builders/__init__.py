"""Builders that turn the source model into the artifact tree."""

from .validation_builder import build_field_checks, build_record_checks
from .dispatch_builder import (
    build_artifact,
    build_dispatch,
    build_wrappers,
    dispatch_function_name,
    wrapper_function_name,
)

__all__ = [
    "build_field_checks",
    "build_record_checks",
    "build_artifact",
    "build_dispatch",
    "build_wrappers",
    "dispatch_function_name",
    "wrapper_function_name",
]
