"""apigen: dispatch and validation code generator for annotated Python modules."""

from apigen.api.generator import generate_file, generate_source
from apigen.errors import (
    ApigenError,
    DuplicateRouteError,
    MalformedDirectiveError,
    MalformedInputError,
    MalformedRouteError,
    UnsupportedFieldTypeError,
)

__all__ = [
    "generate_file",
    "generate_source",
    "ApigenError",
    "DuplicateRouteError",
    "MalformedDirectiveError",
    "MalformedInputError",
    "MalformedRouteError",
    "UnsupportedFieldTypeError",
]
