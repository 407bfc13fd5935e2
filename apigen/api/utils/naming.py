"""Identifier utilities."""

import re

_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")


def to_snake_case(name: str) -> str:
    """MyApi -> my_api, HTTPApi -> http_api, create -> create."""
    name = _FIRST_CAP.sub(r"\1_\2", name)
    return _ALL_CAP.sub(r"\1_\2", name).lower()


def is_module_name(name: str) -> bool:
    """True if `name` can be used in a `from <name> import ...` statement."""
    return all(part.isidentifier() for part in name.split("."))
