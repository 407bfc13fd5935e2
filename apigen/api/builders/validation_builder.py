"""
Validation step synthesis.

Every field compiles to the same fixed sequence, regardless of the order its
rules were written in:

    extract (int parse) -> default -> required -> min -> max -> enum

The generated handler returns on the first failing step, so fields after a
failing one are never looked at.
"""

from apigen.api.gen_logging import get_logger
from apigen.lib.artifact import (
    CompareBound,
    FieldBlock,
    MatchEnum,
    ReadInteger,
    ReadString,
    RequireNotEmpty,
    SubstituteDefault,
)
from apigen.lib.ir import FieldSpec

logger = get_logger(__name__)


def build_field_checks(field: FieldSpec) -> FieldBlock:
    """Compile one field's rules into its ordered validation steps."""
    rules = field.rules
    var = field.name
    steps = []

    if field.is_integer:
        steps.append(ReadInteger(var=var, key=rules.display_name, message=f"{field.name} must be int"))
        if rules.default is not None:
            logger.warning(f"  [WARN] default on integer field '{field.name}' is ignored")
    else:
        steps.append(ReadString(var=var, key=rules.display_name))
        if rules.default is not None:
            steps.append(SubstituteDefault(var=var, value=rules.default))
        if rules.required:
            steps.append(RequireNotEmpty(var=var, message=f"{field.name} must be not empty"))

    length = not field.is_integer
    subject = f"{field.name} len" if length else field.name
    if rules.min is not None:
        steps.append(CompareBound(
            var=var, operator="<", bound=rules.min, length=length,
            message=f"{subject} must be >= {rules.min}",
        ))
    if rules.max is not None:
        steps.append(CompareBound(
            var=var, operator=">", bound=rules.max, length=length,
            message=f"{subject} must be <= {rules.max}",
        ))

    if rules.enum:
        alternatives = tuple(int(a) for a in rules.enum) if field.is_integer else rules.enum
        steps.append(MatchEnum(
            var=var,
            alternatives=alternatives,
            message=f"{field.name} must be one of [{', '.join(rules.enum)}]",
        ))

    return FieldBlock(name=field.name, steps=tuple(steps))


def build_record_checks(record) -> tuple:
    """Field blocks of a record, in field declaration order."""
    return tuple(build_field_checks(field) for field in record.fields)
