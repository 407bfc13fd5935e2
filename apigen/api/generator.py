"""
Main entry point for apigen code generation.

Pipeline (leaves first):
    - extractors/: source module -> SourceModel (records, models, actions)
    - language.py: apivalidator directives -> FieldRules
    - builders/: SourceModel -> GeneratedArtifact (validation steps,
      dispatch tables, action wrappers)
    - this module: GeneratedArtifact -> text, through a single Jinja2 pass

The rendered module is deterministic: the same input always produces the
same bytes.
"""

import json
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from .builders import build_artifact
from .extractors import extract_source_model
from .gen_logging import get_logger
from .utils import is_module_name
from ..config import Settings
from ..errors import MalformedInputError
from ..lib.artifact import GeneratedArtifact

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "backend"
HANDLERS_TEMPLATE = "handlers.py.jinja"


# ------------------------------------------------------------------------------
# Template filters

def python_literal(value) -> str:
    """Render a str/int/bool as a Python literal (double-quoted strings)."""
    if isinstance(value, bool):
        return "True" if value else "False"
    return json.dumps(value)


def python_tuple(values) -> str:
    items = [python_literal(v) for v in values]
    if len(items) == 1:
        return f"({items[0]},)"
    return "(" + ", ".join(items) + ")"


def get_environment(templates_dir: Path = TEMPLATES_DIR) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(disabled_extensions=("jinja",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["literal"] = python_literal
    env.filters["pytuple"] = python_tuple
    return env


# ------------------------------------------------------------------------------
# Emitter

def render_artifact(artifact: GeneratedArtifact, templates_dir: Path = TEMPLATES_DIR) -> str:
    """Render the artifact tree: header, dispatch functions, then wrappers."""
    template = get_environment(templates_dir).get_template(HANDLERS_TEMPLATE)
    return template.render(
        header=artifact.header,
        dispatches=artifact.dispatches,
        wrappers=artifact.wrappers,
    )


def emit(artifact: GeneratedArtifact, sink, templates_dir: Path = TEMPLATES_DIR) -> None:
    """Write the rendered artifact to a text stream."""
    sink.write(render_artifact(artifact, templates_dir))


# ------------------------------------------------------------------------------
# Pipeline

def build_source_artifact(source_text: str, module_name: str, source_file: str = None,
                          settings: Settings = None) -> GeneratedArtifact:
    """Extract, parse and synthesize; stops at the first fatal error."""
    settings = settings or Settings()
    if not is_module_name(module_name):
        raise MalformedInputError(f"'{module_name}' is not an importable module name")

    source_model = extract_source_model(source_text, module_name, settings=settings)
    return build_artifact(source_model, source_file or f"{module_name}.py", settings=settings)


def generate_source(source_text: str, module_name: str, source_file: str = None,
                    settings: Settings = None) -> str:
    """Generate the handlers module for `source_text` and return it as text."""
    artifact = build_source_artifact(source_text, module_name, source_file, settings)
    return render_artifact(artifact)


def generate_file(input_path, output_path, settings: Settings = None) -> Path:
    """
    Read an annotated module and write its generated handlers.

    The generated code imports the input under its file stem, so the output
    is meant to live next to the input (or anywhere the stem is importable).
    Nothing is written when generation fails.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)

    logger.info(f"[PARSE] {input_path}")
    source_text = input_path.read_text(encoding="utf-8")
    artifact = build_source_artifact(source_text, input_path.stem, input_path.name, settings)
    rendered = render_artifact(artifact)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8", newline="\n") as out:
        out.write(rendered)

    logger.info(f"[GENERATED] {output_path}")
    return output_path
