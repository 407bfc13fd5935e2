"""
Source model extraction.

Turns an annotated Python module into a SourceModel: parameter records
(classes whose first annotated attribute carries an apivalidator directive)
and action methods (methods preceded by an `# apigen:api {...}` comment).
Declaration order is preserved throughout.
"""

import ast
import io
import tokenize

from apigen.api.extractors.route_extractor import parse_route_directive
from apigen.api.gen_logging import get_logger
from apigen.config import Settings
from apigen.errors import MalformedInputError
from apigen.language import parse_directive
from apigen.lib.ir import (
    ActionMethod,
    FieldSpec,
    INTEGER,
    Model,
    ParamRecord,
    STRING,
    SourceModel,
)

logger = get_logger(__name__)

API_ERROR_NAME = "ApiError"

# Names a generated wrapper binds or looks up; a field becomes a local of
# the same name, so it may not reuse any of them.
RESERVED_NAMES = frozenset({
    "structure",
    "request",
    "form",
    "action_result",
    "action_error",
    "response_write",
    "parse_form",
    "parse_int",
    "run_in_threadpool",
    "HTTPStatus",
    API_ERROR_NAME,
    "ValueError",
    "len",
    "str",
})

_PY_TYPES = {
    "str": STRING,
    "int": INTEGER,
}


def extract_source_model(source_text: str, module_name: str, settings: Settings = None) -> SourceModel:
    """
    Build the SourceModel of one input module.

    Args:
        source_text: Python source of the annotated module.
        module_name: Import name the generated code will use for it.
        settings: Directive markers; defaults to Settings().

    Raises:
        MalformedInputError: the module does not parse, or a routed method
                             cannot be bound to a parameter record.
    """
    settings = settings or Settings()

    try:
        tree = ast.parse(source_text)
    except SyntaxError as e:
        raise MalformedInputError(f"cannot parse source: {e.msg}", lineno=e.lineno) from e

    comments = _collect_comments(source_text)
    source_model = SourceModel(module_name=module_name)

    for node in tree.body:
        if isinstance(node, ast.ClassDef):
            record = _extract_record(node, settings)
            if record is not None:
                if record.name in source_model.records:
                    raise MalformedInputError(f"record '{record.name}' is declared twice", lineno=node.lineno)
                source_model.records[record.name] = record
                logger.info(f"[RECORD] {record.name} ({len(record.fields)} fields)")

            for item in node.body:
                if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
                    action = _extract_action(node.name, item, comments, settings)
                    if action is None:
                        continue
                    model = source_model.models.setdefault(node.name, Model(name=node.name))
                    model.actions.append(action)
                    logger.info(f"[ROUTE] {node.name}.{item.name} -> {action.route.url}")

            if node.name == API_ERROR_NAME:
                source_model.has_api_error = True

        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            if _route_comment(node, comments, settings.ROUTE_PREFIX) is not None:
                raise MalformedInputError(
                    f"routing directive on module-level function '{node.name}'; actions must be methods",
                    lineno=node.lineno,
                )

        elif _binds_api_error(node):
            source_model.has_api_error = True

    for action in source_model.actions:
        if action.param_record_name not in source_model.records:
            raise MalformedInputError(
                f"{action.model_name}.{action.method_name} takes '{action.param_record_name}', "
                f"which is not an annotated parameter record",
                lineno=action.lineno,
            )

    if source_model.models and not source_model.has_api_error:
        logger.warning(f"[WARN] module '{module_name}' does not define or import {API_ERROR_NAME}")

    return source_model


# ------------------------------------------------------------------------------
# Records

def _extract_record(node: ast.ClassDef, settings: Settings):
    attributes = [
        stmt for stmt in node.body
        if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name)
    ]
    if not attributes:
        logger.info(f"[SKIP] class {node.name} declares no fields")
        return None

    _, first_directive = _split_annotation(attributes[0].annotation, settings.VALIDATOR_PREFIX)
    if first_directive is None:
        logger.info(f"[SKIP] class {node.name} is not a parameter record (no {settings.VALIDATOR_PREFIX} on first field)")
        return None

    record = ParamRecord(name=node.name, lineno=node.lineno)
    seen = set()
    for stmt in attributes:
        name = stmt.target.id
        if name in seen:
            raise MalformedInputError(f"field '{name}' is declared twice in {node.name}", lineno=stmt.lineno)
        if name in RESERVED_NAMES or name == node.name:
            raise MalformedInputError(
                f"field '{name}' of {node.name} shadows a name used by the generated handler",
                lineno=stmt.lineno,
            )
        seen.add(name)

        base, directive = _split_annotation(stmt.annotation, settings.VALIDATOR_PREFIX)
        declared_type = _declared_type(base)
        directive = directive or ""
        rules = parse_directive(directive, declared_type, name, lineno=stmt.lineno)
        record.fields.append(FieldSpec(
            name=name,
            declared_type=declared_type,
            raw_directive=directive,
            rules=rules,
            lineno=stmt.lineno,
        ))

    return record


def _split_annotation(annotation, prefix):
    """
    Split `Annotated[T, "apivalidator:..."]` into (T, directive).
    Plain annotations come back as (annotation, None).
    """
    if not isinstance(annotation, ast.Subscript) or not _is_annotated(annotation.value):
        return annotation, None

    elements = annotation.slice.elts if isinstance(annotation.slice, ast.Tuple) else [annotation.slice]
    base, metadata = elements[0], elements[1:]
    for item in metadata:
        if isinstance(item, ast.Constant) and isinstance(item.value, str) and item.value.startswith(prefix):
            return base, item.value[len(prefix):]
    return base, None


def _is_annotated(node):
    if isinstance(node, ast.Name):
        return node.id == "Annotated"
    if isinstance(node, ast.Attribute):
        return node.attr == "Annotated"
    return False


def _declared_type(base):
    if isinstance(base, ast.Name) and base.id in _PY_TYPES:
        return _PY_TYPES[base.id]
    # Unsupported types keep their source text so the error names them.
    return ast.unparse(base)


# ------------------------------------------------------------------------------
# Actions

def _extract_action(model_name, node, comments, settings: Settings):
    found = _route_comment(node, comments, settings.ROUTE_PREFIX)
    if found is None:
        logger.info(f"[SKIP] {model_name}.{node.name} doesn't have a routing directive")
        return None

    text, directive_line = found
    route = parse_route_directive(text, lineno=directive_line)

    params = node.args.posonlyargs + node.args.args
    if len(params) < 3:
        raise MalformedInputError(
            f"{model_name}.{node.name} must take (self, ctx, params); found {len(params)} positional parameters",
            lineno=node.lineno,
        )

    annotation = params[2].annotation
    if isinstance(annotation, ast.Name):
        record_name = annotation.id
    elif isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        record_name = annotation.value
    else:
        raise MalformedInputError(
            f"parameter '{params[2].arg}' of {model_name}.{node.name} must be annotated with a record class",
            lineno=node.lineno,
        )

    return ActionMethod(
        model_name=model_name,
        method_name=node.name,
        param_record_name=record_name,
        route=route,
        is_async=isinstance(node, ast.AsyncFunctionDef),
        lineno=node.lineno,
    )


def _route_comment(node, comments, prefix):
    """
    Find the routing directive in the comment block directly above a
    function (above its decorators, if any). Returns (json_text, line) or None.
    """
    first_line = min([node.lineno] + [d.lineno for d in node.decorator_list])
    line = first_line - 1
    while line in comments:
        text = comments[line]
        if text.startswith(prefix):
            return text[len(prefix):].strip(), line
        line -= 1
    return None


def _collect_comments(source_text):
    """Map line number -> comment text for lines holding nothing but a comment."""
    comments = {}
    try:
        for tok in tokenize.generate_tokens(io.StringIO(source_text).readline):
            if tok.type == tokenize.COMMENT and tok.line.lstrip().startswith("#"):
                comments[tok.start[0]] = tok.string.lstrip("#").strip()
    except tokenize.TokenError as e:
        raise MalformedInputError(f"cannot tokenize source: {e.args[0]}") from e
    return comments


def _binds_api_error(node):
    if isinstance(node, ast.ImportFrom):
        return any((alias.asname or alias.name) == API_ERROR_NAME for alias in node.names)
    if isinstance(node, ast.Import):
        return any((alias.asname or alias.name.split(".")[0]) == API_ERROR_NAME for alias in node.names)
    if isinstance(node, ast.Assign):
        return any(isinstance(t, ast.Name) and t.id == API_ERROR_NAME for t in node.targets)
    return False
