"""add / edit / delete commands: inline comment CRUD through the controller."""

from __future__ import annotations

import click

from reviewmark_cli.workspace import build_controller, console, emit, parse_position, print_comment, workspace_file
from reviewmark_core.commands import DeleteComment, SaveComment, UpdateComment
from reviewmark_core.ranges import DocPosition, Selection
from reviewmark_store.errors import StoreError
from reviewmark_store.models import InlineComment, Priority

_PRIORITY_CHOICES = {"low": Priority.LOW, "medium": Priority.MEDIUM, "high": Priority.HIGH}


@click.command("add")
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("start")
@click.argument("end")
@click.option("--title", "-t", default="", help="Short label shown in the comment list.")
@click.option("--comment", "-m", "text", default="", help="Comment text.")
@click.option("--priority", "-p", type=click.Choice(list(_PRIORITY_CHOICES)), default=None, help="Priority.")
@click.pass_context
def add_cmd(ctx, file: str, start: str, end: str, title: str, text: str, priority: str | None):
    """Attach a comment to FILE between START and END.

    Positions are LINE:CHAR, 1-based, as shown in the editor's gutter and
    status bar. Either --title or --comment must be non-blank.
    """
    file_name = workspace_file(ctx, file)
    start_line, start_char = parse_position(start, "START")
    end_line, end_char = parse_position(end, "END")
    selection = Selection(
        anchor=DocPosition(start_line - 1, start_char - 1),
        active=DocPosition(end_line - 1, end_char - 1),
    )

    controller = build_controller(ctx)
    command = SaveComment(
        file_name=file_name,
        selection=selection,
        title=title,
        text=text,
        priority=_PRIORITY_CHOICES.get(priority) if priority else None,
    )
    emit(controller.handle(command))


@click.command("edit")
@click.argument("comment_id", type=int)
@click.option("--title", "-t", default=None, help="New title. Unchanged when omitted.")
@click.option("--comment", "-m", "text", default=None, help="New comment text. Unchanged when omitted.")
@click.option(
    "--priority",
    "-p",
    type=click.Choice([*_PRIORITY_CHOICES, "none"]),
    default=None,
    help="New priority, or 'none' to clear it. Unchanged when omitted.",
)
@click.pass_context
def edit_cmd(ctx, comment_id: int, title: str | None, text: str | None, priority: str | None):
    """Change the title, text or priority of comment COMMENT_ID.

    The anchor never moves: to re-anchor a comment, delete it and add it again.
    """
    store = ctx.obj["store"]
    try:
        existing = store.find_by_id(comment_id)
    except StoreError as e:
        raise click.ClickException(str(e))
    if existing is None:
        console.print(f"[yellow]No comment with id {comment_id}[/yellow]")
        return

    if priority is None:
        new_priority = existing.priority
    else:
        new_priority = _PRIORITY_CHOICES.get(priority)

    command = UpdateComment(
        id=comment_id,
        title=existing.title if title is None else title,
        text=existing.comment if text is None else text,
        priority=new_priority,
    )
    emit(build_controller(ctx).handle(command))


@click.command("delete")
@click.argument("comment_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_context
def delete_cmd(ctx, comment_id: int, yes: bool):
    """Delete comment COMMENT_ID. Asks first; the default answer is No."""

    def _confirm(comment: InlineComment) -> bool:
        if yes or not ctx.obj["config"].get("confirm_delete", True):
            return True
        print_comment(comment)
        try:
            return click.confirm(
                "Are you sure you want to delete this comment? This cannot be undone.",
                default=False,
            )
        except click.Abort:
            return False

    emit(build_controller(ctx, confirm=_confirm).handle(DeleteComment(id=comment_id)))
