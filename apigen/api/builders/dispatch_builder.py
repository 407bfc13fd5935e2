"""Dispatch table and action wrapper synthesis."""

from apigen.api.builders.validation_builder import build_record_checks
from apigen.api.extractors.source_extractor import API_ERROR_NAME
from apigen.api.gen_logging import get_logger
from apigen.api.utils import to_snake_case
from apigen.config import Settings
from apigen.errors import DuplicateRouteError, MalformedInputError
from apigen.lib.artifact import (
    DispatchDecl,
    GeneratedArtifact,
    HeaderDecl,
    RouteCase,
    WrapperDecl,
)
from apigen.lib.ir import Model, SourceModel

logger = get_logger(__name__)

# Lower-case names bound by the generated header
HEADER_FUNCTIONS = (
    "re",
    "parse_qsl",
    "run_in_threadpool",
    "jsonable_encoder",
    "response_write",
    "parse_form",
    "parse_int",
    "create_app",
)


def dispatch_function_name(model_name: str) -> str:
    return f"{to_snake_case(model_name)}_serve_http"


def wrapper_function_name(model_name: str, method_name: str) -> str:
    return f"{to_snake_case(model_name)}_{to_snake_case(method_name)}"


def build_dispatch(model: Model) -> DispatchDecl:
    """
    Build the path switch of one model.

    Raises DuplicateRouteError when two actions of the model register the
    same url; the first declaration is reported alongside the second.
    """
    registered = {}
    cases = []
    for action in model.actions:
        url = action.route.url
        if url in registered:
            first = registered[url]
            raise DuplicateRouteError(
                f"{model.name}.{action.method_name} registers '{url}', "
                f"already registered by {model.name}.{first.method_name} (line {first.lineno})",
                lineno=action.lineno,
            )
        registered[url] = action
        cases.append(RouteCase(
            url=url,
            requires_auth=action.route.requires_auth,
            http_method=action.route.http_method,
            wrapper_name=wrapper_function_name(model.name, action.method_name),
        ))

    return DispatchDecl(
        model_name=model.name,
        function_name=dispatch_function_name(model.name),
        cases=tuple(cases),
    )


def build_wrappers(source_model: SourceModel) -> tuple:
    """One wrapper per action, in declaration order."""
    wrappers = []
    taken = set(HEADER_FUNCTIONS)
    taken.update(dispatch_function_name(name) for name in source_model.models)
    for action in source_model.actions:
        name = wrapper_function_name(action.model_name, action.method_name)
        if name in taken:
            raise MalformedInputError(
                f"{action.model_name}.{action.method_name} maps to handler name '{name}', which is already taken",
                lineno=action.lineno,
            )
        taken.add(name)

        record = source_model.records[action.param_record_name]
        wrappers.append(WrapperDecl(
            function_name=name,
            model_name=action.model_name,
            method_name=action.method_name,
            record_name=record.name,
            fields=build_record_checks(record),
            is_async=action.is_async,
        ))
    return tuple(wrappers)


def build_artifact(source_model: SourceModel, source_file: str, settings: Settings = None) -> GeneratedArtifact:
    """Assemble header, dispatch functions and wrappers for one module."""
    settings = settings or Settings()

    dispatches = tuple(build_dispatch(model) for model in source_model.models.values())
    wrappers = build_wrappers(source_model)

    imports = []
    if wrappers:
        imports.append(API_ERROR_NAME)
    for wrapper in wrappers:
        if wrapper.record_name not in imports:
            imports.append(wrapper.record_name)

    header = HeaderDecl(
        source_file=source_file,
        module_name=source_model.module_name,
        imports=tuple(imports),
        auth_header=settings.AUTH_HEADER,
        auth_token=settings.AUTH_TOKEN,
    )

    logger.debug(f"[ARTIFACT] {len(dispatches)} dispatch functions, {len(wrappers)} wrappers")
    return GeneratedArtifact(header=header, dispatches=dispatches, wrappers=wrappers)
