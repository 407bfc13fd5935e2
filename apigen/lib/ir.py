"""
Intermediate representation of an annotated source module.

The extractor builds these objects once per invocation; the builders only
read them. Ordering is carried by lists and insertion-ordered dicts, never
by sets, so that two runs over the same input see the same sequence.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

STRING = "string"
INTEGER = "integer"
FIELD_TYPES = (STRING, INTEGER)


@dataclass(frozen=True)
class FieldRules:
    """Parsed apivalidator directive of one field."""
    display_name: str
    required: bool = False
    min: Optional[int] = None
    max: Optional[int] = None
    default: Optional[str] = None
    enum: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class FieldSpec:
    name: str
    declared_type: str
    raw_directive: str
    rules: FieldRules
    lineno: Optional[int] = None

    @property
    def is_integer(self) -> bool:
        return self.declared_type == INTEGER


@dataclass
class ParamRecord:
    name: str
    fields: List[FieldSpec] = field(default_factory=list)
    lineno: Optional[int] = None


@dataclass(frozen=True)
class RouteDescriptor:
    url: str
    requires_auth: bool = False
    http_method: Optional[str] = None


@dataclass(frozen=True)
class ActionMethod:
    model_name: str
    method_name: str
    param_record_name: str
    route: RouteDescriptor
    is_async: bool = False
    lineno: Optional[int] = None


@dataclass
class Model:
    name: str
    actions: List[ActionMethod] = field(default_factory=list)


@dataclass
class SourceModel:
    """Everything the extractor found in one input module."""
    module_name: str
    records: Dict[str, ParamRecord] = field(default_factory=dict)
    models: Dict[str, Model] = field(default_factory=dict)
    has_api_error: bool = False

    @property
    def actions(self) -> List[ActionMethod]:
        return [action for model in self.models.values() for action in model.actions]
