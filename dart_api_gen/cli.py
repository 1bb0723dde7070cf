"""Command-line entry point for the OpenAPI to Dart generator."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .config import GeneratorOptions
from .errors import GeneratorError
from .pipeline import ApiGenerator

USAGE_EXAMPLES = """\
Usage: gen-api-from-swagger --input_path=<dir> [--apis=method_path,method_path] [--replace=true|false] [--output_path=<dir>] [--wrapped_by=data|results|result]
Examples:
  gen-api-from-swagger --input_path=api_doc
  gen-api-from-swagger --input_path=api_doc --apis=get_v1/search,post_v2/city
  gen-api-from-swagger --input_path=api_doc --replace=true
  gen-api-from-swagger --input_path=api_doc --output_path=api_doc"""

AUTH_CLIENT_REMINDER = (
    "WARNING: We only use _authAppServerApiClient for all APIs. For APIs that should "
    "use _noneAuthAppServerApiClient, you must manually modify them."
)


@click.command()
@click.option("--input_path", type=click.Path(path_type=Path), default=None, help="Folder containing the OpenAPI JSON file.")
@click.option("--apis", default=None, help="Comma-separated method_path filter, e.g. get_v1/search,post_v2/city.")
@click.option("--replace", type=click.BOOL, default=False, show_default=True, help="Replace generated methods instead of appending.")
@click.option("--output_path", type=click.Path(path_type=Path), default=None, help="Custom root for all generated files.")
@click.option("--wrapped_by", default="data", type=click.Choice(["data", "results", "result"], case_sensitive=False), help="Response envelope key.")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
def main(
    input_path: Path | None,
    apis: str | None,
    replace: bool,
    output_path: Path | None,
    wrapped_by: str,
    verbose: bool,
) -> None:
    """Generate Dart API methods, models and enums from an OpenAPI document."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        force=True,
    )

    if input_path is None:
        click.echo("Error: Please provide folder path containing OpenAPI JSON file", err=True)
        click.echo(USAGE_EXAMPLES, err=True)
        raise SystemExit(1)

    options = GeneratorOptions(
        input_path=input_path,
        apis=apis,
        replace=replace,
        output_path=output_path,
        wrapped_by=wrapped_by,
        project_root=Path.cwd(),
    )

    try:
        summary = ApiGenerator(options).run()
    except GeneratorError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1)
    except Exception as exc:
        click.echo(f"Error: {exc!r}", err=True)
        raise SystemExit(1)

    click.echo(
        f"Generated {len(summary.methods)} API methods, {len(summary.models)} model classes"
        f" and {len(summary.enums)} enums"
    )
    click.echo("Successfully generated API methods from OpenAPI!")
    click.echo(AUTH_CLIENT_REMINDER)
