"""rubrics / draft commands: general comments scored against review rubrics."""

from __future__ import annotations

import click
from rich.table import Table

from reviewmark_cli.workspace import build_controller, console, emit
from reviewmark_core.commands import SaveDraft
from reviewmark_core.config import resolve_path
from reviewmark_store.drafts import RubricCatalog
from reviewmark_store.errors import StoreError
from reviewmark_store.models import GeneralComment


@click.command("rubrics")
@click.pass_context
def rubrics_cmd(ctx):
    """List the review rubrics general comments can be written against."""
    try:
        rubrics = RubricCatalog(resolve_path(ctx.obj["config"], "rubrics_file")).load()
    except StoreError as e:
        raise click.ClickException(str(e))

    if not rubrics:
        console.print("[yellow]No rubrics defined.[/yellow]")
        return

    table = Table(title="Rubrics")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold")
    table.add_column("Description")
    table.add_column("Scored", justify="center")
    for rubric in rubrics:
        table.add_row(str(rubric.id), rubric.title, rubric.description, "yes" if rubric.has_score else "no")
    console.print(table)


def _parse_entry(value: str) -> GeneralComment:
    parts = value.split(":", 2)
    if len(parts) != 3:
        raise click.BadParameter(f"expected RUBRIC_ID:SCORE:TEXT, got {value!r}", param_hint="--entry")
    rubric_text, score_text, text = parts
    try:
        rubric_id = int(rubric_text)
        score = int(score_text) if score_text.strip() else None
    except ValueError:
        raise click.BadParameter(f"rubric id and score must be integers in {value!r}", param_hint="--entry")
    return GeneralComment(rubric_id=rubric_id, comment=text, score=score)


@click.command("draft")
@click.option(
    "--entry",
    "-e",
    "entries",
    multiple=True,
    help="RUBRIC_ID:SCORE:TEXT. Leave SCORE empty for unscored rubrics. Repeatable.",
)
@click.pass_context
def draft_cmd(ctx, entries: tuple[str, ...]):
    """Save a draft of general comments, replacing the previous draft."""
    command = SaveDraft(entries=tuple(_parse_entry(e) for e in entries))
    emit(build_controller(ctx).handle(command))
