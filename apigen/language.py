"""
Metamodel and parser for the apivalidator directive language.

A validation directive is the string found after the `apivalidator:` marker
in a record field's Annotated metadata. The grammar lives in
grammar/apivalidator.tx; this module loads it once and turns a parsed
directive into a FieldRules value for one field.
"""

from os.path import join, dirname, abspath

from textx import metamodel_from_file
from textx.exceptions import TextXSyntaxError

from apigen.api.gen_logging import get_logger
from apigen.errors import MalformedDirectiveError, UnsupportedFieldTypeError
from apigen.lib.ir import FIELD_TYPES, FieldRules, INTEGER
from apigen.processors import get_obj_processors

logger = get_logger(__name__)


# ------------------------------------------------------------------------------
# Constants
THIS_DIR = dirname(abspath(__file__))
GRAMMAR_DIR = join(THIS_DIR, "grammar")

REQUIRED_FLAG = "required"
KNOWN_KEYS = ("min", "max", "default", "enum", "paramname")


# ------------------------------------------------------------------------------
# Metamodel creation

def get_metamodel(debug: bool = False):
    """
    Load the textX metamodel from grammar/apivalidator.tx.
    Registers the object processors that normalize individual rules.
    """
    mm = metamodel_from_file(
        join(GRAMMAR_DIR, "apivalidator.tx"),
        auto_init_attributes=True,
        debug=debug,
    )
    mm.register_obj_processors(get_obj_processors())
    return mm


# Create the global metamodel instance
ValidatorMetaModel = get_metamodel(debug=False)


# ------------------------------------------------------------------------------
# Public parsers

def build_directive(raw: str):
    """Parse a directive string into its textX model (a list of rules)."""
    return ValidatorMetaModel.model_from_str(raw)


def parse_directive(raw: str, declared_type: str, field_name: str, lineno: int = None) -> FieldRules:
    """
    Interpret a field's validation directive.

    Args:
        raw: Directive text without the apivalidator: marker.
        declared_type: "string" or "integer"; anything else is rejected.
        field_name: Field identifier, used for the default display name and
                    in error messages.
        lineno: Source line of the field, for diagnostics.

    Returns:
        FieldRules

    Raises:
        UnsupportedFieldTypeError: declared_type is neither string nor integer.
        MalformedDirectiveError: the text does not match the grammar or a
                                 value cannot be interpreted.
    """
    if declared_type not in FIELD_TYPES:
        raise UnsupportedFieldTypeError(
            f"field '{field_name}' has unsupported type '{declared_type}' (expected str or int)",
            lineno=lineno,
        )

    values = {
        "display_name": field_name.lower(),
        "required": False,
        "min": None,
        "max": None,
        "default": None,
        "enum": None,
    }

    if not raw.strip():
        return FieldRules(**values)

    try:
        directive = build_directive(raw)
    except TextXSyntaxError as e:
        raise MalformedDirectiveError(
            f"invalid validation directive {raw!r} on field '{field_name}': {e.message}",
            lineno=lineno,
        ) from e

    for rule in directive.rules:
        if type(rule).__name__ == "Flag":
            if rule.name == REQUIRED_FLAG:
                values["required"] = True
            else:
                logger.debug(f"  [IGNORE] unknown flag '{rule.name}' on field '{field_name}'")
            continue

        key, value = rule.key, rule.value
        if key in ("min", "max"):
            values[key] = _parse_bound(key, value, field_name, lineno)
        elif key == "default":
            values["default"] = value
        elif key == "enum":
            values["enum"] = _parse_enum(value, declared_type, field_name, lineno)
        elif key == "paramname":
            if not value:
                raise MalformedDirectiveError(f"empty paramname on field '{field_name}'", lineno=lineno)
            values["display_name"] = value
        else:
            logger.debug(f"  [IGNORE] unknown key '{key}' on field '{field_name}'")

    return FieldRules(**values)


# ------------------------------------------------------------------------------
# Value helpers

def _parse_bound(key, value, field_name, lineno):
    try:
        return int(value)
    except ValueError:
        raise MalformedDirectiveError(
            f"{key} on field '{field_name}' must be an integer, got {value!r}",
            lineno=lineno,
        ) from None


def _parse_enum(value, declared_type, field_name, lineno):
    alternatives = []
    for alternative in value.split("|"):
        alternative = alternative.strip()
        if alternative and alternative not in alternatives:
            alternatives.append(alternative)

    if not alternatives:
        raise MalformedDirectiveError(f"enum on field '{field_name}' has no alternatives", lineno=lineno)

    if declared_type == INTEGER:
        for alternative in alternatives:
            try:
                int(alternative)
            except ValueError:
                raise MalformedDirectiveError(
                    f"enum alternative {alternative!r} on integer field '{field_name}' is not an integer",
                    lineno=lineno,
                ) from None

    return tuple(alternatives)
