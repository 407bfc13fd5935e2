"""
Artifact tree rendered by the handlers template.

Builders produce these frozen declarations; the template only walks them.
Each validation step carries a `kind` so the template can pick the matching
statement without any textual placeholder bookkeeping.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union


# ------------------------------------------------------------------------------
# Validation steps (one field)

@dataclass(frozen=True)
class ReadString:
    kind: ClassVar[str] = "read_string"
    var: str
    key: str


@dataclass(frozen=True)
class ReadInteger:
    kind: ClassVar[str] = "read_integer"
    var: str
    key: str
    message: str


@dataclass(frozen=True)
class SubstituteDefault:
    kind: ClassVar[str] = "substitute_default"
    var: str
    value: str


@dataclass(frozen=True)
class RequireNotEmpty:
    kind: ClassVar[str] = "require_not_empty"
    var: str
    message: str


@dataclass(frozen=True)
class CompareBound:
    kind: ClassVar[str] = "compare_bound"
    var: str
    operator: str  # "<" rejects below min, ">" rejects above max
    bound: int
    length: bool
    message: str


@dataclass(frozen=True)
class MatchEnum:
    kind: ClassVar[str] = "match_enum"
    var: str
    alternatives: Tuple[Union[str, int], ...]
    message: str


ValidationStep = Union[ReadString, ReadInteger, SubstituteDefault, RequireNotEmpty, CompareBound, MatchEnum]


@dataclass(frozen=True)
class FieldBlock:
    name: str
    steps: Tuple[ValidationStep, ...]


# ------------------------------------------------------------------------------
# Top-level declarations

@dataclass(frozen=True)
class HeaderDecl:
    source_file: str
    module_name: str
    imports: Tuple[str, ...]
    auth_header: str
    auth_token: str


@dataclass(frozen=True)
class RouteCase:
    url: str
    requires_auth: bool
    http_method: Optional[str]
    wrapper_name: str


@dataclass(frozen=True)
class DispatchDecl:
    model_name: str
    function_name: str
    cases: Tuple[RouteCase, ...]


@dataclass(frozen=True)
class WrapperDecl:
    function_name: str
    model_name: str
    method_name: str
    record_name: str
    fields: Tuple[FieldBlock, ...]
    is_async: bool = False


@dataclass(frozen=True)
class GeneratedArtifact:
    header: HeaderDecl
    dispatches: Tuple[DispatchDecl, ...]
    wrappers: Tuple[WrapperDecl, ...]
