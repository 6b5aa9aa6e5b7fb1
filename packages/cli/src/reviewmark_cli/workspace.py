"""Shared wiring for commands: build the controller and print its effects."""

from __future__ import annotations

from typing import Callable

import click
from rich.console import Console
from rich.panel import Panel

from reviewmark_core.config import resolve_path
from reviewmark_core.controller import ReviewController
from reviewmark_core.document import FileDocumentProvider, relative_file_name
from reviewmark_core.session import Effect, Notify, OpenCommentEditor
from reviewmark_store.drafts import GeneralCommentStore, RubricCatalog
from reviewmark_store.models import InlineComment, Priority

console = Console()

_NOTIFY_STYLE = {"info": "green", "warning": "yellow", "error": "red"}
PRIORITY_LABELS = {Priority.LOW: "low", Priority.MEDIUM: "medium", Priority.HIGH: "high"}
PRIORITY_STYLES = {Priority.LOW: "blue", Priority.MEDIUM: "yellow", Priority.HIGH: "red"}


def build_controller(ctx: click.Context, confirm: Callable[[InlineComment], bool] | None = None) -> ReviewController:
    config = ctx.obj["config"]
    kwargs = {"confirm": confirm} if confirm is not None else {}
    return ReviewController(
        store=ctx.obj["store"],
        documents=FileDocumentProvider(config["root"]),
        root=config["root"],
        drafts=GeneralCommentStore(resolve_path(config, "general_comments_file")),
        rubrics=RubricCatalog(resolve_path(config, "rubrics_file")),
        **kwargs,
    )


def workspace_file(ctx: click.Context, path: str) -> str:
    """Turn a FILE argument into the relative name used in the store."""
    try:
        return relative_file_name(ctx.obj["config"]["root"], path)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="FILE")


def parse_position(value: str, label: str = "position") -> tuple[int, int]:
    """Parse a 1-based ``LINE:CHAR`` (or bare ``LINE``, meaning character 1)."""
    line_text, _, char_text = value.partition(":")
    try:
        line = int(line_text)
        character = int(char_text) if char_text else 1
    except ValueError:
        raise click.BadParameter(f"expected LINE:CHAR, got {value!r}", param_hint=label)
    if line < 1 or character < 1:
        raise click.BadParameter("line and character start at 1", param_hint=label)
    return line, character


def priority_label(priority: Priority | None) -> str:
    if priority is None:
        return "-"
    style = PRIORITY_STYLES[priority]
    return f"[{style}]{PRIORITY_LABELS[priority]}[/{style}]"


def print_comment(comment: InlineComment) -> None:
    body = comment.comment or "[dim](no text)[/dim]"
    subtitle = f"{comment.file_name}  {comment.start.line}:{comment.start.character}-{comment.end.line}:{comment.end.character}"
    console.print(
        Panel(
            body,
            title=f"#{comment.id} {comment.title}".rstrip(),
            subtitle=f"{subtitle}  priority: {priority_label(comment.priority)}",
        )
    )


def emit(effects: list[Effect]) -> None:
    """Print notifications and opened comments; raise once if any effect is an error."""
    errors = []
    for effect in effects:
        if isinstance(effect, Notify):
            if effect.level == "error":
                errors.append(effect.message)
                continue
            style = _NOTIFY_STYLE.get(effect.level, "white")
            console.print(f"[{style}]{effect.message}[/{style}]")
        elif isinstance(effect, OpenCommentEditor):
            print_comment(effect.comment)
    if errors:
        raise click.ClickException("\n".join(errors))
