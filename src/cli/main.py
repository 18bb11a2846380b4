import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List

import click
from rich.console import Console
from rich.table import Table
from rich import box

from src.adapter.adapter import GitAdapter
from src.config import configure_logging
from src.errors import GitSeekError
from src.git_objects.repository import open_repository
from src.presets import presets
from src.query.executor import ShapeExecutor

logger = logging.getLogger(__name__)

FORMATS = ["table", "json", "raw"]


def _format_cell(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, list):
        return "[" + ", ".join(_format_cell(v) for v in value) + "]"
    return str(value).rstrip("\n")


def render_rows(rows: Iterable[Dict[str, Any]], columns: List[str], fmt: str) -> None:
    if fmt == "json":
        click.echo(json.dumps(list(rows), indent=2, ensure_ascii=False))
    elif fmt == "table":
        rows = list(rows)
        if not rows:
            return
        table = Table(box=box.SQUARE, show_lines=True)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*(_format_cell(row.get(column)) for column in columns))
        Console().print(table)
    else:
        # Stream rows as they are produced
        for row in rows:
            click.echo(repr(row))


@click.group()
@click.option(
    "--repo",
    "repo_path",
    type=click.Path(path_type=Path),
    envvar="GIT_DIR",
    default=".",
    show_default=True,
    help="Repository (work tree or git dir) to query.",
)
@click.option("--log-level", envvar="LOG_LEVEL", default="WARNING", show_default=True)
@click.pass_context
def cli(ctx, repo_path, log_level):
    """git-seek - query the commit graph of a git repository."""
    configure_logging(log_level.upper())
    ctx.obj = {"repo_path": repo_path}


@cli.group()
def preset():
    """Run pre-built queries."""


@preset.command("list")
def list_presets():
    """List all available presets."""
    table = Table(box=box.SQUARE)
    table.add_column("Name")
    table.add_column("Description")
    table.add_column("Parameters")

    for p in presets.all_presets():
        if not p.params:
            params_str = "(none)"
        else:
            params_str = ", ".join(
                f"--{param.name}: {param.description} (default: {param.default})"
                if param.default is not None
                else f"--{param.name}: {param.description} (required)"
                for param in p.params
            )
        table.add_row(p.name, p.description, params_str)

    Console().print(table)


@preset.command("run")
@click.argument("name")
@click.option("--param", "params", multiple=True, help="Preset parameter: --param name=value")
@click.option("--format", "fmt", type=click.Choice(FORMATS), default="raw", show_default=True)
@click.pass_context
def run_preset(ctx, name, params, fmt):
    """Run the preset NAME."""
    try:
        shape = presets.run(name, presets.parse_param_args(list(params)))
        repo = open_repository(ctx.obj["repo_path"])
        rows = ShapeExecutor(GitAdapter(repo)).execute(shape)
        render_rows(rows, shape.columns(), fmt)
    except GitSeekError as e:
        logger.debug("Preset %s failed", name, exc_info=True)
        raise click.ClickException(str(e)) from e


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, type=int, show_default=True)
@click.pass_context
def serve(ctx, host, port):
    """Serve the HTTP API for the repository."""
    import uvicorn

    # The API module reads its repository from the environment at import time
    os.environ["GIT_DIR"] = str(ctx.obj["repo_path"])
    uvicorn.run("src.api.main:app", host=host, port=port)


if __name__ == "__main__":
    cli()
