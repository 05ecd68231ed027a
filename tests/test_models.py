"""Tests for turn, attachment and tool result conversion to provider parts."""
import base64

from switchboard.models.common import Attachment, CallResult, EMPTY_TURN_PLACEHOLDER, ToolResult, Turn


def test_image_only_turn_has_non_empty_parts():
    image = Attachment.from_upload("photo.jpg", "image/jpeg", b"\xff\xd8\xff\xe0")
    turn = Turn(role="user", content="", attachments=[image])

    parts = turn.to_parts()

    assert len(parts) == 1
    assert parts[0].inline_data.mime_type == "image/jpeg"
    assert base64.b64decode(parts[0].inline_data.data) == b"\xff\xd8\xff\xe0"


def test_empty_turn_gets_placeholder_part():
    parts = Turn(role="model", content="").to_parts()
    assert [part.text for part in parts] == [EMPTY_TURN_PLACEHOLDER]


def test_text_attachment_becomes_labelled_block():
    notes = Attachment.from_upload("notes.md", "text/markdown", "# Title\nbody".encode("utf-8"))
    turn = Turn(role="user", content="Summarise", attachments=[notes])

    parts = turn.to_parts()

    assert parts[0].text == "\nFile: notes.md\n```\n# Title\nbody\n```"
    assert parts[1].text == "Summarise"
    assert turn.to_content().role == "user"


def test_from_upload_keeps_declared_size():
    attachment = Attachment.from_upload("data.json", "application/json", b'{"a": 1}', size_bytes=8)
    assert attachment.encoding == "text"
    assert attachment.payload == '{"a": 1}'
    assert attachment.size_bytes == 8


def test_undecodable_text_falls_back_to_base64():
    attachment = Attachment.from_upload("weird.txt", "text/plain", b"\xff\xfe\x00bad")
    assert attachment.is_binary
    assert attachment.size_bytes == 6


def test_call_result_parts_carry_the_call_id():
    ok = CallResult(call_id="1", tool_name="calculator", result=ToolResult.success("4")).to_part()
    failed = CallResult(call_id="2", tool_name="calculator", result=ToolResult.failure("bad input")).to_part()

    assert ok.function_response.id == "1"
    assert ok.function_response.response == {"result": "4"}
    assert failed.function_response.id == "2"
    assert failed.function_response.response == {"error": "bad input"}


def test_failure_never_has_empty_message():
    assert ToolResult.failure("").error
