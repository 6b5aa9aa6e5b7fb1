"""list / show / locate commands: read-only views of the stored comments."""

from __future__ import annotations

import click
from rich.table import Table
from rich.tree import Tree

from reviewmark_cli.workspace import build_controller, console, emit, parse_position, priority_label, workspace_file
from reviewmark_core.ranges import Selection
from reviewmark_core.session import Notify, OpenCommentEditor, ShowDecorations
from reviewmark_store.errors import StoreError


@click.command("list")
@click.option("--file", "file_filter", default=None, help="Only show comments on this file.")
@click.pass_context
def list_cmd(ctx, file_filter: str | None):
    """List all comments, grouped by file."""
    controller = build_controller(ctx)
    try:
        files = controller.tree()
    except StoreError as e:
        raise click.ClickException(str(e))

    if file_filter is not None:
        wanted = workspace_file(ctx, file_filter)
        files = [f for f in files if f.file_name == wanted]

    if not files:
        console.print("[yellow]No comments found.[/yellow]")
        return

    tree = Tree("[bold]Comments[/bold]")
    for file_node in files:
        branch = tree.add(f"[bold cyan]{file_node.file_name}[/bold cyan] ({len(file_node.children)})")
        for node in file_node.children:
            label = node.label or "[dim](untitled)[/dim]"
            branch.add(
                f"[dim]#{node.id}[/dim] {label}  "
                f"[dim]{node.line}:{node.character}[/dim]  {priority_label(node.priority)}"
            )
    console.print(tree)


@click.command("show")
@click.argument("file", type=click.Path(dir_okay=False))
@click.pass_context
def show_cmd(ctx, file: str):
    """Show the decorations FILE gets when opened in the editor.

    Ranges are printed 1-based. Comments whose anchor no longer fits the
    file are listed separately.
    """
    file_name = workspace_file(ctx, file)
    effects = build_controller(ctx).open_file(file_name)
    emit([e for e in effects if isinstance(e, Notify) and e.level == "error"])

    shown = next((e for e in effects if isinstance(e, ShowDecorations)), None)
    if shown is None or (not shown.result.decorations and not shown.result.skipped):
        console.print(f"[yellow]No comments on {file_name}.[/yellow]")
        return

    table = Table(title=file_name, show_lines=False)
    table.add_column("ID", style="dim")
    table.add_column("Highlight")
    table.add_column("Marker line", justify="right")
    table.add_column("Icon")
    for decoration in shown.result.decorations:
        start, end = decoration.highlight.start, decoration.highlight.end
        table.add_row(
            str(decoration.comment_id),
            f"{start.line + 1}:{start.character + 1} - {end.line + 1}:{end.character + 1}",
            str(decoration.marker.start.line + 1),
            decoration.icon,
        )
    console.print(table)

    for comment_id, reason in shown.result.skipped:
        console.print(f"[yellow]Not shown: comment {comment_id} ({reason})[/yellow]")


@click.command("locate")
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("position")
@click.pass_context
def locate_cmd(ctx, file: str, position: str):
    """Show the comment a click at POSITION (LINE:CHAR, 1-based) in FILE opens."""
    file_name = workspace_file(ctx, file)
    line, character = parse_position(position, "POSITION")

    controller = build_controller(ctx)
    opened = controller.open_file(file_name)
    emit([e for e in opened if isinstance(e, Notify) and e.level == "error"])

    effects = controller.select(Selection.at(line - 1, character - 1))
    if not any(isinstance(e, OpenCommentEditor) for e in effects):
        console.print(f"[yellow]No comment at {file_name} {line}:{character}.[/yellow]")
    emit(effects)
