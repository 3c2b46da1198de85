"""CLI entry point for api-mock-engine."""

import json
from pathlib import Path

import click
from pydantic import ValidationError

from api_mock_engine.config import load_generate_config, load_server_config
from api_mock_engine.errors import GenerationError, SchemaLoadError
from api_mock_engine.generator.fixtures import generate_fixtures
from api_mock_engine.logging_setup import configure_logging
from api_mock_engine.mock.server import run_server
from api_mock_engine.parser.base import Schema
from api_mock_engine.parser.swagger import load_schema

__version__ = "0.1.0"


def _load(schema_path: Path) -> Schema:
    try:
        return load_schema(schema_path)
    except SchemaLoadError as e:
        raise click.ClickException(f"failed to parse schema: {e}") from e


@click.group()
@click.version_option(__version__, prog_name="api-mock-engine")
def main():
    """API Mock Engine: serve and generate mock data from OpenAPI schemas."""
    pass


@main.command()
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", "output_format", default="summary", type=click.Choice(["summary", "verbose"]), help="Output format.")
def parse(schema_path: Path, output_format: str):
    """Parse an API schema and print a summary."""
    schema = _load(schema_path)

    click.echo(f"Successfully parsed {schema.kind} schema\n")
    click.echo(f"Title:   {schema.title}")
    click.echo(f"Version: {schema.version}")
    click.echo(f"Paths:   {len(schema.paths)}")

    if output_format == "verbose":
        click.echo("\nEndpoints:")
        for path in sorted(schema.paths):
            for op in schema.operations_for(path):
                click.echo(f"  {op.method} {path}")
                if op.summary:
                    click.echo(f"    Summary: {op.summary}")
                if op.parameters:
                    click.echo(f"    Parameters: {len(op.parameters)}")


@main.command()
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-p", "--port", type=int, default=None, help="Port to listen on (default 8080).")
@click.option("--host", default=None, help="Interface to bind (default 127.0.0.1).")
@click.option("--seed", type=int, default=None, help="Base seed for per-request generators.")
@click.option("--grace-period", type=float, default=None, help="Seconds to drain in-flight requests on shutdown.")
@click.option("--log-level", default=None, help="Logging level.")
def mock(schema_path: Path, port: int | None, host: str | None, seed: int | None, grace_period: float | None, log_level: str | None):
    """Start a mock API server from a schema. Press Ctrl+C to stop."""
    try:
        config = load_server_config(port=port, host=host, seed=seed, grace_period=grace_period, log_level=log_level)
    except ValidationError as e:
        raise click.ClickException(f"invalid configuration: {e}") from e

    configure_logging(config.log_level)
    click.echo(f"Parsing schema: {schema_path}")
    schema = _load(schema_path)
    run_server(schema, config)


@main.command()
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-p", "--path", "api_path", required=True, help="API path template, e.g. /pets.")
@click.option("-m", "--method", required=True, help="HTTP method, e.g. GET.")
@click.option("-s", "--seed", type=int, default=None, help="Random seed for reproducible output (default: current time).")
@click.option("-c", "--count", type=int, default=None, help="Number of payloads to generate.")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Also write fixtures as a JSON array to this file.")
def generate(schema_path: Path, api_path: str, method: str, seed: int | None, count: int | None, output: Path | None):
    """Generate request/response payloads for one operation."""
    try:
        config = load_generate_config(seed=seed, count=count)
    except ValidationError as e:
        raise click.ClickException(f"invalid configuration: {e}") from e

    schema = _load(schema_path)
    if not schema.operations_for(api_path):
        raise click.ClickException(f"path {api_path} not found in schema")
    operation = schema.lookup(api_path, method)
    if operation is None:
        raise click.ClickException(f"method {method.upper()} not found for path {api_path}")

    click.echo(f"Generating {config.count} payload(s) for {operation.method} {api_path} (seed: {config.seed})\n")
    try:
        fixtures = generate_fixtures(operation, config.seed, config.count)
    except GenerationError as e:
        raise click.ClickException(f"failed to generate payload: {e}") from e

    for fixture in fixtures:
        label = "Request Body" if fixture.kind == "request" else "Response Body"
        click.echo(f"=== {label} #{fixture.index + 1} ===")
        click.echo(json.dumps(fixture.payload, indent=2))
        click.echo()

    if not fixtures:
        click.echo("No JSON request or response schema declared for this operation.")

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(json.dumps([f.model_dump() for f in fixtures], indent=2), encoding="utf-8")
        click.echo(f"Fixtures saved to {output}")
