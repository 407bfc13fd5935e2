"""Source model extraction utilities."""

from .source_extractor import extract_source_model
from .route_extractor import parse_route_directive

__all__ = [
    "extract_source_model",
    "parse_route_directive",
]
