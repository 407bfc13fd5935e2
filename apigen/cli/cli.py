from pathlib import Path

import click

from datetime import date
from rich.console import Console
from rich.markup import escape

from apigen.api.gen_logging import configure_gen_logging
from apigen.api.generator import generate_file
from apigen.config import Settings
from apigen.errors import ApigenError

console = Console()


def _stamp() -> str:
    return f"[{date.today().strftime('%Y-%m-%d')}]"


@click.command(help="Generate request handlers from an annotated Python module.")
@click.pass_context
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
def cli(context, input_path, output_path):
    settings = Settings()
    configure_gen_logging(settings.LOG_LEVEL)

    try:
        generate_file(input_path, output_path, settings=settings)
    except (ApigenError, OSError, UnicodeDecodeError) as e:
        console.print(f"{_stamp()} Generate failed with error(s): {escape(str(e))}", style="red")
        context.exit(1)
    else:
        console.print(f"{_stamp()} Handlers emitted to: {escape(str(output_path))}", style="green")
        context.exit(0)


def main():
    cli(prog_name="apigen")
