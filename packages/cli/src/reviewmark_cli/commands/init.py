"""init command: set up a workspace for local review.

Writes .reviewmark.yml and creates the comment documents with empty
collections so the editor and the CLI agree on where comments live.
Existing documents are left untouched.
"""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

from reviewmark_core.config import resolve_path
from reviewmark_store.drafts import RUBRICS_KEY, GeneralCommentStore
from reviewmark_store.errors import StoreError
from reviewmark_store.json_file import JsonFileStore, write_json_document

console = Console()


@click.command("init")
@click.option("--store", "store_type", type=click.Choice(["json", "memory"]), default=None, help="Store backend.")
@click.option("--yes", "-y", is_flag=True, help="Accept the defaults without prompting.")
@click.pass_context
def init_cmd(ctx, store_type: str | None, yes: bool):
    """Create .reviewmark.yml and the empty comment files."""
    config = dict(ctx.obj["config"])
    config_path = Path(ctx.obj["config_path"])

    console.print("\n[bold cyan]reviewmark init[/bold cyan]: workspace setup\n")

    if store_type is None and not yes:
        console.print("Comment store:")
        console.print("  [bold]json[/bold]    inline-comments.json in the workspace (default)")
        console.print("  [bold]memory[/bold]  nothing is written; for trying things out")
        store_type = click.prompt("Store backend", type=click.Choice(["json", "memory"]), default="json")
    config["store"] = store_type or "json"

    settings = {"store": config["store"]}
    if config["store"] == "json":
        settings["inline_comments_file"] = config["inline_comments_file"]
        settings["general_comments_file"] = config["general_comments_file"]
        settings["rubrics_file"] = config["rubrics_file"]

    _write_config(config_path, settings)
    console.print(f"[green]Wrote {config_path}[/green]")

    if config["store"] == "json":
        try:
            _create_documents(config)
        except StoreError as e:
            raise click.ClickException(str(e))

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print("Add a comment with: [bold]reviewmark add FILE LINE:CHAR LINE:CHAR --title ...[/bold]")


def _write_config(path: Path, settings: dict) -> None:
    """Write or update the config file, preserving any existing keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    existing.update(settings)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False), encoding="utf-8")


def _create_documents(config: dict) -> None:
    inline_path = resolve_path(config, "inline_comments_file")
    store = JsonFileStore(inline_path)
    store.load()
    store.close()
    console.print(f"[dim]Inline comments: {inline_path}[/dim]")

    general_path = resolve_path(config, "general_comments_file")
    GeneralCommentStore(general_path).load()
    console.print(f"[dim]General comments: {general_path}[/dim]")

    rubrics_path = resolve_path(config, "rubrics_file")
    if not rubrics_path.exists():
        write_json_document(rubrics_path, {RUBRICS_KEY: []})
    console.print(f"[dim]Rubrics: {rubrics_path}[/dim]")
