"""
TextX object processors for the apivalidator grammar.

Object processors run during model construction and normalize individual
rules before parse_directive() interprets them.
"""


def key_value_obj_processor(rule):
    """
    Normalize a `key=value` rule.

    The Value match rule accepts anything up to the next comma, including
    trailing blanks and nothing at all (`default=`), so the value is stripped
    and an absent match becomes the empty string.
    """
    rule.value = (rule.value or "").strip()


def get_obj_processors():
    """Return object processor configuration for the metamodel."""
    return {
        "KeyValue": key_value_obj_processor,
    }
