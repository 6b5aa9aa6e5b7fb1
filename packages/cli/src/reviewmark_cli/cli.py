"""CLI entry point for reviewmark.

Commands:
  init     write .reviewmark.yml and the empty comment documents
  add      attach a comment to a span of a file
  edit     change a comment's title, text or priority
  delete   remove a comment after confirmation
  list     all comments, grouped by file
  show     the decorations a file would get in the editor
  locate   which comment a click at LINE:CHAR opens
  rubrics  the review criteria available for general comments
  draft    save general comments against rubrics
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler

from reviewmark_cli.commands.comments import add_cmd, delete_cmd, edit_cmd
from reviewmark_cli.commands.drafts import draft_cmd, rubrics_cmd
from reviewmark_cli.commands.init import init_cmd
from reviewmark_cli.commands.view import list_cmd, locate_cmd, show_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .reviewmark.yml settings.

    Store selection:
      store: json   → JsonFileStore (inline_comments_file, default)
      store: memory → MemoryStore   (nothing is written; dry runs)

    This factory lives in cli.py so neither reviewmark_core nor
    reviewmark_store know about the CLI config format.
    """
    from reviewmark_core.config import resolve_path
    from reviewmark_store.json_file import JsonFileStore
    from reviewmark_store.memory import MemoryStore

    store_type = config.get("store", "json")

    if store_type == "memory":
        return MemoryStore()

    if store_type != "json":
        console.print(f"[yellow]Unknown store '{store_type}'. Falling back to the JSON file store.[/yellow]")
    return JsonFileStore(resolve_path(config, "inline_comments_file"))


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("reviewmark"),
    prog_name="reviewmark",
)
@click.option(
    "--config",
    "config_path",
    default=".reviewmark.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVIEWMARK_CONFIG",
)
@click.option(
    "--root",
    default=None,
    type=click.Path(file_okay=False),
    help="Workspace root. Defaults to REVIEWMARK_ROOT or the current directory.",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, root: str | None, verbose: bool):
    """Review code locally: anchor comments to spans and find them again."""
    from reviewmark_core.config import load_config

    _setup_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path, cli_overrides={"root": root})
    except (ValueError, OSError, yaml.YAMLError) as e:
        raise click.ClickException(str(e))

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path
    ctx.call_on_close(store.close)


main.add_command(init_cmd)
main.add_command(add_cmd)
main.add_command(edit_cmd)
main.add_command(delete_cmd)
main.add_command(list_cmd)
main.add_command(show_cmd)
main.add_command(locate_cmd)
main.add_command(rubrics_cmd)
main.add_command(draft_cmd)
