"""Tests for decoding UI messages into typed commands."""

import pytest

from reviewmark_core.commands import (
    CommandDecodeError,
    DeleteComment,
    SaveComment,
    SaveDraft,
    UpdateComment,
    decode_command,
)
from reviewmark_core.ranges import DocPosition, Selection
from reviewmark_store.models import GeneralComment, Priority


class TestAddComment:
    def test_uses_active_editor_when_payload_has_no_anchor(self):
        selection = Selection.at(3, 1)
        command = decode_command(
            {"command": "addComment", "data": {"title": "Naming", "text": "rename x", "priority": 3}},
            file_name="a.ts",
            selection=selection,
        )
        assert command == SaveComment(
            file_name="a.ts", selection=selection, title="Naming", text="rename x", priority=Priority.HIGH
        )

    def test_payload_anchor_wins(self):
        command = decode_command(
            {
                "command": "addComment",
                "data": {
                    "title": "t",
                    "fileName": "b.ts",
                    "selection": {"start": {"line": 1, "character": 0}, "end": {"line": 1, "character": 9}},
                },
            },
            file_name="a.ts",
            selection=Selection.at(0, 0),
        )
        assert command.file_name == "b.ts"
        assert command.selection == Selection(DocPosition(1, 0), DocPosition(1, 9))
        assert command.text == ""
        assert command.priority is None

    def test_missing_selection(self):
        with pytest.raises(CommandDecodeError, match="selection"):
            decode_command({"command": "addComment", "data": {"title": "t"}}, file_name="a.ts")

    def test_negative_position_rejected(self):
        with pytest.raises(CommandDecodeError):
            decode_command(
                {
                    "command": "addComment",
                    "data": {"selection": {"anchor": {"line": -1, "character": 0}, "active": {"line": 0, "character": 0}}},
                },
                file_name="a.ts",
            )

    def test_title_must_be_text(self):
        with pytest.raises(CommandDecodeError, match="title"):
            decode_command(
                {"command": "addComment", "data": {"title": 5}}, file_name="a.ts", selection=Selection.at(0, 0)
            )


class TestOtherCommands:
    def test_update(self):
        command = decode_command({"command": "updateComment", "data": {"id": "17", "title": "t", "text": "x"}})
        assert command == UpdateComment(id=17, title="t", text="x", priority=None)

    def test_delete_with_top_level_id(self):
        assert decode_command({"command": "deleteComment", "id": 4}) == DeleteComment(id=4)

    def test_delete_with_id_in_data(self):
        assert decode_command({"command": "deleteComment", "data": {"id": 4}}) == DeleteComment(id=4)

    def test_delete_without_id(self):
        with pytest.raises(CommandDecodeError, match="required"):
            decode_command({"command": "deleteComment"})

    def test_draft(self):
        command = decode_command(
            {"command": "draftStored", "data": [{"rubricId": 1, "comment": "ok", "score": "4"}, {"rubricId": 2}]}
        )
        assert command == SaveDraft(
            entries=(GeneralComment(rubric_id=1, comment="ok", score=4.0), GeneralComment(rubric_id=2))
        )

    @pytest.mark.parametrize("score", ["abc", [4], True])
    def test_draft_with_non_numeric_score(self, score):
        with pytest.raises(CommandDecodeError, match="score"):
            decode_command({"command": "draftStored", "data": [{"rubricId": 1, "score": score}]})

    @pytest.mark.parametrize("message", [{"command": "explode"}, {}, "addComment"])
    def test_unknown_messages(self, message):
        with pytest.raises(CommandDecodeError):
            decode_command(message)
