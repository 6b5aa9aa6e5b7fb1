"""Tests for ReviewController: commands, refresh ordering and error mapping."""

from __future__ import annotations

import json

import pytest

from reviewmark_core.commands import DeleteComment, SaveComment, SaveDraft, UpdateComment
from reviewmark_core.controller import ReviewController
from reviewmark_core.document import FileDocumentProvider
from reviewmark_core.ranges import DocPosition, Selection
from reviewmark_core.session import ClearDecorations, Notify, OpenCommentEditor, ShowDecorations
from reviewmark_store.drafts import GeneralCommentStore, RubricCatalog
from reviewmark_store.errors import StoreIOError
from reviewmark_store.json_file import JsonFileStore
from reviewmark_store.memory import MemoryStore
from reviewmark_store.models import GeneralComment, InlineComment, Position, Priority


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / "a.ts").write_text("const x = 1;\nconst y = x + 1;\nexport { y };\n")
    (tmp_path / "b.ts").write_text("only line\n")
    return tmp_path


def _controller(workspace, store=None, **kwargs):
    return ReviewController(
        store=store or MemoryStore(),
        documents=FileDocumentProvider(workspace),
        root=str(workspace),
        **kwargs,
    )


def _save(file_name="a.ts", anchor=(1, 0), active=(1, 9), title="Naming", text="rename x", priority=None):
    return SaveComment(
        file_name=file_name,
        selection=Selection(DocPosition(*anchor), DocPosition(*active)),
        title=title,
        text=text,
        priority=priority,
    )


def _messages(effects, level="info"):
    return [e.message for e in effects if isinstance(e, Notify) and e.level == level]


# ---------------------------------------------------------------------------
# Save / update / delete
# ---------------------------------------------------------------------------


class TestSaveComment:
    def test_stores_one_based_anchor(self, workspace):
        store = MemoryStore()
        controller = _controller(workspace, store)
        effects = controller.handle(_save())

        [stored] = store.load()
        assert stored.file_name == "a.ts"
        assert (stored.start, stored.end) == (Position(2, 1), Position(2, 10))
        assert _messages(effects) == [f"Comment {stored.id} successfully added."]

    def test_refresh_precedes_message_when_file_is_open(self, workspace):
        controller = _controller(workspace)
        controller.open_file("a.ts")
        effects = controller.handle(_save())

        assert isinstance(effects[0], ClearDecorations)
        assert isinstance(effects[1], ShowDecorations)
        assert len(effects[1].result.decorations) == 1
        assert isinstance(effects[-1], Notify)

    def test_no_refresh_without_active_file(self, workspace):
        effects = _controller(workspace).handle(_save())
        assert [type(e) for e in effects] == [Notify]

    def test_blank_comment_is_informational(self, workspace):
        store = MemoryStore()
        effects = _controller(workspace, store).handle(_save(title="", text="   "))
        assert _messages(effects) == ["Please enter either a title or a comment."]
        assert store.load() == []


class TestUpdateComment:
    def test_update(self, workspace):
        store = MemoryStore()
        controller = _controller(workspace, store)
        controller.handle(_save())
        [stored] = store.load()

        effects = controller.handle(UpdateComment(id=stored.id, title="Naming", text="rename x", priority=Priority.LOW))

        assert _messages(effects) == ["Comment successfully updated."]
        assert store.find_by_id(stored.id).priority is Priority.LOW

    def test_no_op_update_does_not_refresh(self, workspace):
        store = MemoryStore()
        controller = _controller(workspace, store)
        controller.handle(_save())
        controller.open_file("a.ts")
        [stored] = store.load()

        effects = controller.handle(UpdateComment(id=stored.id, title="Naming", text="rename x"))

        assert effects == [Notify("info", "Either no changes detected, or missing title or comment.")]

    def test_unknown_id_is_informational(self, workspace):
        effects = _controller(workspace).handle(UpdateComment(id=5, title="a", text="b"))
        assert _messages(effects) == ["No comment with id 5"]


class TestDeleteComment:
    def test_confirmed_delete(self, workspace):
        store = MemoryStore()
        controller = _controller(workspace, store, confirm=lambda c: True)
        controller.handle(_save())
        [stored] = store.load()

        effects = controller.handle(DeleteComment(id=stored.id))

        assert _messages(effects) == ["Comment successfully deleted."]
        assert store.load() == []

    def test_default_confirm_declines(self, workspace):
        store = MemoryStore()
        controller = _controller(workspace, store)
        controller.handle(_save())
        [stored] = store.load()

        assert controller.handle(DeleteComment(id=stored.id)) == []
        assert store.load() == [stored]

    def test_delete_unknown_id(self, workspace):
        effects = _controller(workspace, confirm=lambda c: True).handle(DeleteComment(id=1))
        assert _messages(effects) == ["No comment with id 1"]


# ---------------------------------------------------------------------------
# Store failures
# ---------------------------------------------------------------------------


class TestStoreFailures:
    def test_corrupt_store_aborts_with_one_error(self, workspace):
        path = workspace / "inline-comments.json"
        path.write_text("{broken")
        effects = _controller(workspace, JsonFileStore(path)).handle(_save())

        assert len(_messages(effects, "error")) == 1
        assert path.read_text() == "{broken"

    def test_io_error_reported(self, workspace, mocker):
        store = MemoryStore()
        mocker.patch.object(store, "_write_document", side_effect=StoreIOError("disk full"))
        effects = _controller(workspace, store).handle(_save())
        assert _messages(effects, "error") == ["disk full"]

    def test_missing_document_closes_active_file(self, workspace):
        controller = _controller(workspace)
        controller.open_file("a.ts")
        effects = controller.open_file("gone.ts")

        assert isinstance(effects[0], ClearDecorations)
        assert len(_messages(effects, "error")) == 1
        assert controller.session.active_file is None

    def test_wrongly_typed_record_does_not_break_file_switch(self, workspace):
        path = workspace / "inline-comments.json"
        path.write_text(json.dumps({"inlineComments": [{"id": 1, "fileName": 5, "start": [1, 1], "end": [1, 2]}]}))
        controller = _controller(workspace, JsonFileStore(path))

        effects = controller.open_file("a.ts")

        assert isinstance(effects[1], ShowDecorations)
        assert effects[1].result.decorations == ()
        assert controller.select(Selection.at(0, 0)) == []
        assert _messages(controller.navigate_to(1)) == ["No comment with id 1"]


# ---------------------------------------------------------------------------
# Navigation and clicks
# ---------------------------------------------------------------------------


class TestNavigation:
    def test_click_opens_comment(self, workspace):
        controller = _controller(workspace)
        controller.handle(_save())
        controller.open_file("a.ts")

        effects = controller.select(Selection.at(1, 3))

        assert len(effects) == 1
        assert isinstance(effects[0], OpenCommentEditor)
        assert effects[0].comment.title == "Naming"

    def test_navigate_to_opens_file_and_comment(self, workspace):
        store = MemoryStore()
        controller = _controller(workspace, store)
        controller.handle(_save(file_name="b.ts", anchor=(0, 0), active=(0, 4)))
        [stored] = store.load()

        effects = controller.navigate_to(stored.id)

        assert controller.session.active_file == "b.ts"
        assert [e.comment.id for e in effects if isinstance(e, OpenCommentEditor)] == [stored.id]

    def test_navigate_to_stale_comment_still_opens_it(self, workspace):
        stale = InlineComment(file_name="b.ts", start=Position(30, 1), end=Position(31, 1), title="old", id=3)
        store = MemoryStore(document={"inlineComments": [stale.to_dict()]})
        controller = _controller(workspace, store)

        effects = controller.navigate_to(3)

        assert effects[-1] == OpenCommentEditor(stale)
        assert _messages(effects, "warning")

    def test_navigate_to_unknown_id(self, workspace):
        assert _messages(_controller(workspace).navigate_to(77)) == ["No comment with id 77"]

    def test_tree(self, workspace):
        controller = _controller(workspace)
        controller.handle(_save())
        controller.handle(_save(file_name="b.ts", anchor=(0, 0), active=(0, 1), title="Other"))
        assert [node.file_name for node in controller.tree()] == ["a.ts", "b.ts"]

    def test_close_stops_listening(self, workspace):
        store = MemoryStore()
        controller = _controller(workspace, store)
        controller.close()
        assert store._listeners == []


# ---------------------------------------------------------------------------
# Drafts
# ---------------------------------------------------------------------------


class TestSaveDraft:
    def test_saves_against_rubrics(self, workspace):
        rubrics_path = workspace / "rubrics.json"
        rubrics_path.write_text(json.dumps({"rubrics": [{"id": 1, "title": "Tests", "has_score": "true"}]}))
        drafts = GeneralCommentStore(workspace / "general-comments.json")
        controller = _controller(workspace, drafts=drafts, rubrics=RubricCatalog(rubrics_path))

        effects = controller.handle(SaveDraft(entries=(GeneralComment(rubric_id=1, comment="good", score=4),)))

        assert _messages(effects) == ["Draft successfully saved."]
        assert [c.score for c in drafts.load()] == [4]

    def test_empty_draft(self, workspace):
        drafts = GeneralCommentStore(workspace / "general-comments.json")
        effects = _controller(workspace, drafts=drafts).handle(SaveDraft(entries=()))
        assert _messages(effects) == ["Cannot save empty draft."]

    def test_drafts_not_configured(self, workspace):
        effects = _controller(workspace).handle(SaveDraft(entries=(GeneralComment(rubric_id=1, comment="x"),)))
        assert _messages(effects) == ["General comments are not configured."]
