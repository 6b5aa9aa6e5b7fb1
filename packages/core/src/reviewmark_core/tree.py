"""Comment tree: stored comments grouped by file, for the side panel and `list`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from reviewmark_store.models import InlineComment, Priority


@dataclass(frozen=True)
class CommentNode:
    id: int | None
    label: str
    description: str
    line: int
    character: int
    priority: Priority | None = None


@dataclass
class FileNode:
    file_name: str
    children: list[CommentNode] = field(default_factory=list)


def _label(comment: InlineComment) -> str:
    if comment.title.strip():
        return comment.title
    first_line = comment.comment.strip().splitlines()
    return first_line[0] if first_line else ""


def build_comment_tree(comments: Iterable[InlineComment]) -> list[FileNode]:
    """One node per file in first-seen order; children keep store order."""
    nodes: dict[str, FileNode] = {}
    for comment in comments:
        node = nodes.get(comment.file_name)
        if node is None:
            node = nodes[comment.file_name] = FileNode(comment.file_name)
        node.children.append(
            CommentNode(
                id=comment.id,
                label=_label(comment),
                description=comment.comment,
                line=comment.start.line,
                character=comment.start.character,
                priority=comment.priority,
            )
        )
    return list(nodes.values())
