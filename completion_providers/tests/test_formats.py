from __future__ import annotations

import json

import pytest

from completion_providers.base.chunks import ReasoningChunk, TextChunk, UsageChunk
from completion_providers.base.models import ImageBlock, Message, TextBlock, ToolResultBlock, ToolUseBlock
from completion_providers.formats.anthropic_format import (
    anthropic_event_to_chunks,
    convert_to_anthropic_messages,
    system_blocks,
)
from completion_providers.formats.bedrock_converse_format import (
    bedrock_event_to_chunks,
    convert_to_bedrock_converse_messages,
)
from completion_providers.formats.cache_markers import apply_openai_cache_markers
from completion_providers.formats.gemini_format import (
    IMAGE_FOLLOWS_NOTE,
    convert_message_to_gemini,
    gemini_response_to_chunks,
    gemini_usage_chunk,
    unescape_gemini_content,
)
from completion_providers.formats.mistral_format import convert_to_mistral_messages, mistral_frame_to_chunks
from completion_providers.formats.openai_format import (
    TOOL_IMAGE_PLACEHOLDER,
    convert_to_openai_messages,
    openai_frame_to_chunks,
)
from completion_providers.formats.r1_format import convert_to_r1_format
from completion_providers.formats.simple_format import convert_to_simple_messages

PNG = ImageBlock(media_type="image/png", data="iVBORw0")


def test_openai_string_content_passes_through():
    out = convert_to_openai_messages([Message("user", "hi"), Message("assistant", "hello")])
    assert out == [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}]  # nosec B101


def test_openai_tool_results_precede_user_parts():
    msg = Message(
        "user",
        [
            TextBlock("see result"),
            ToolResultBlock(tool_use_id="call_1", content=[TextBlock("done"), PNG]),
        ],
    )
    out = convert_to_openai_messages([msg])
    assert out[0] == {"role": "tool", "tool_call_id": "call_1", "content": f"done\n{TOOL_IMAGE_PLACEHOLDER}"}
    assert out[1]["role"] == "user"
    assert out[1]["content"][0] == {"type": "text", "text": "see result"}
    # the tool result image follows the user's own parts
    assert out[1]["content"][-1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBORw0"}}


def test_openai_assistant_tool_calls():
    msg = Message(
        "assistant",
        [TextBlock("a"), TextBlock("b"), ToolUseBlock(id="t1", name="read_file", input={"path": "x"})],
    )
    (out,) = convert_to_openai_messages([msg])
    assert out["content"] == "a\nb"
    assert out["tool_calls"] == [
        {"id": "t1", "type": "function", "function": {"name": "read_file", "arguments": json.dumps({"path": "x"})}}
    ]


def test_openai_assistant_tool_only_has_null_content():
    (out,) = convert_to_openai_messages([Message("assistant", [ToolUseBlock(id="t", name="n")])])
    assert out["content"] is None


def test_openai_frame_decoding():
    frame = {
        "choices": [{"delta": {"content": "Hel", "reasoning_content": "thinking"}}],
        "usage": {"prompt_tokens": 7, "completion_tokens": 3, "cache_read_input_tokens": 2},
    }
    chunks = list(openai_frame_to_chunks(frame, include_cache_usage=True))
    assert chunks == [
        TextChunk("Hel"),
        ReasoningChunk("thinking"),
        UsageChunk(input_tokens=7, output_tokens=3, cache_write_tokens=0, cache_read_tokens=2),
    ]


def test_openai_frame_without_choices_yields_nothing():
    assert list(openai_frame_to_chunks({"choices": []})) == []


def test_simple_format_flattens_blocks():
    msg = Message("user", [TextBlock("look"), PNG, ToolUseBlock(id="1", name="grep")])
    assert convert_to_simple_messages([msg]) == [
        {"role": "user", "content": "look\n[Image: image/png]\n[Tool Use: grep]"}
    ]


def test_r1_merges_consecutive_roles():
    out = convert_to_r1_format([Message("user", "a"), Message("user", "b"), Message("assistant", "c")])
    assert out == [{"role": "user", "content": "a\nb"}, {"role": "assistant", "content": "c"}]


def test_r1_merge_with_parts_concatenates():
    out = convert_to_r1_format([Message("user", "a"), Message("user", [PNG])])
    assert out[0]["content"][0] == {"type": "text", "text": "a"}
    assert out[0]["content"][1]["type"] == "image_url"


def test_anthropic_cache_marks_last_two_user_turns():
    messages = [
        Message("user", "one"),
        Message("assistant", "two"),
        Message("user", "three"),
        Message("assistant", "four"),
        Message("user", [TextBlock("five"), TextBlock("six")]),
    ]
    out = convert_to_anthropic_messages(messages, cache_last_user_turns=True)
    assert out[0]["content"] == "one"
    assert out[2]["content"] == [{"type": "text", "text": "three", "cache_control": {"type": "ephemeral"}}]
    assert "cache_control" not in out[4]["content"][0]
    assert out[4]["content"][1]["cache_control"] == {"type": "ephemeral"}


def test_anthropic_system_blocks_cache_flag():
    assert system_blocks("sys", "ctx", cache=True) == [
        {"type": "text", "text": "sys", "cache_control": {"type": "ephemeral"}},
        {"type": "text", "text": "ctx", "cache_control": {"type": "ephemeral"}},
    ]


def test_anthropic_events():
    start = {
        "type": "message_start",
        "message": {"usage": {"input_tokens": 12, "output_tokens": 1, "cache_creation_input_tokens": 0}},
    }
    assert list(anthropic_event_to_chunks(start)) == [UsageChunk(input_tokens=12, output_tokens=1)]
    second_block = {"type": "content_block_start", "index": 1, "content_block": {"type": "text", "text": "x"}}
    assert list(anthropic_event_to_chunks(second_block)) == [TextChunk("\n"), TextChunk("x")]
    delta = {"type": "content_block_delta", "delta": {"type": "text_delta", "text": "y"}}
    assert list(anthropic_event_to_chunks(delta)) == [TextChunk("y")]
    assert list(anthropic_event_to_chunks({"type": "message_delta", "usage": {"output_tokens": 9}})) == [
        UsageChunk(output_tokens=9)
    ]
    assert list(anthropic_event_to_chunks({"type": "ping"})) == []


def test_anthropic_empty_block_openers_emit_nothing():
    first = {"type": "content_block_start", "index": 0, "content_block": {"type": "text", "text": ""}}
    later = {"type": "content_block_start", "index": 2, "content_block": {"type": "text", "text": ""}}
    assert list(anthropic_event_to_chunks(first)) == []
    assert list(anthropic_event_to_chunks(later)) == [TextChunk("\n")]


def test_bedrock_converts_each_message():
    out = convert_to_bedrock_converse_messages(
        [Message("user", "a"), Message("assistant", [TextBlock("b"), ToolUseBlock(id="1", name="ls")])]
    )
    assert out == [
        {"role": "user", "content": [{"text": "a"}]},
        {"role": "assistant", "content": [{"text": "b"}, {"text": "[Tool Use: ls]"}]},
    ]


def test_bedrock_events():
    assert list(bedrock_event_to_chunks({"metadata": {"usage": {"inputTokens": 4, "outputTokens": 2}}})) == [
        UsageChunk(input_tokens=4, output_tokens=2)
    ]
    assert list(bedrock_event_to_chunks({"contentBlockDelta": {"delta": {"text": "hi"}}})) == [TextChunk("hi")]
    assert list(bedrock_event_to_chunks({"messageStop": {"stopReason": "end_turn"}})) == []


def test_gemini_roles_and_tool_results():
    msg = Message("assistant", [TextBlock("ok"), ToolUseBlock(id="read-1", name="read", input={"p": 1})])
    out = convert_message_to_gemini(msg)
    assert out["role"] == "model"
    assert out["parts"][1] == {"function_call": {"name": "read", "args": {"p": 1}}}

    result = convert_message_to_gemini(
        Message("user", [ToolResultBlock(tool_use_id="read-1", content=[TextBlock("body"), PNG])])
    )
    response, image = result["parts"]
    assert response["function_response"]["name"] == "read"
    assert response["function_response"]["response"]["content"] == "body" + IMAGE_FOLLOWS_NOTE
    assert image == {"inline_data": {"data": "iVBORw0", "mime_type": "image/png"}}


def test_gemini_response_decoding():
    chunk = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}
    assert list(gemini_response_to_chunks(chunk)) == [TextChunk("ab")]
    usage = gemini_usage_chunk({"usage_metadata": {"prompt_token_count": 3, "candidates_token_count": 8}})
    assert usage == UsageChunk(input_tokens=3, output_tokens=8)


def test_gemini_unescape():
    assert unescape_gemini_content('a\\nb\\"c\\t') == 'a\nb"c\t'


def test_mistral_messages_and_frames():
    out = convert_to_mistral_messages([Message("user", [TextBlock("t"), PNG]), Message("assistant", [TextBlock("r")])])
    assert out[0]["content"][1] == {"type": "image_url", "image_url": "data:image/png;base64,iVBORw0"}
    assert out[1] == {"role": "assistant", "content": "r"}

    frame = json.dumps(
        {
            "choices": [{"delta": {"content": [{"type": "text", "text": "x"}, {"type": "image"}]}}],
            "usage": {"prompt_tokens": 2, "completion_tokens": 1},
        }
    )
    assert list(mistral_frame_to_chunks(frame)) == [TextChunk("x"), UsageChunk(input_tokens=2, output_tokens=1)]
    assert list(mistral_frame_to_chunks("[DONE]")) == []
    with pytest.raises(json.JSONDecodeError):
        list(mistral_frame_to_chunks("{not json"))


def test_cache_markers_do_not_mutate_input():
    messages = [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "u1"},
        {"role": "assistant", "content": "a"},
        {"role": "user", "content": [{"type": "image_url", "image_url": {"url": "x"}}]},
    ]
    marked = apply_openai_cache_markers(messages)
    assert messages[1]["content"] == "u1"
    assert marked[0]["content"][0]["cache_control"] == {"type": "ephemeral"}
    assert marked[1]["content"] == [{"type": "text", "text": "u1", "cache_control": {"type": "ephemeral"}}]
    # image-only turns get a placeholder text part to carry the marker
    assert marked[3]["content"][-1] == {"type": "text", "text": "...", "cache_control": {"type": "ephemeral"}}


ROUND_TRIP_TEXT = 'line one\n  indented "quoted" {json: true}\nünïcødé ✓'

WIRE_CONVERTERS = {
    "openai": convert_to_openai_messages,
    "r1": convert_to_r1_format,
    "simple": convert_to_simple_messages,
    "anthropic": convert_to_anthropic_messages,
    "bedrock": convert_to_bedrock_converse_messages,
    "gemini": lambda messages: [convert_message_to_gemini(m) for m in messages],
    "mistral": convert_to_mistral_messages,
}


def _read_back(wire: dict) -> Message:
    """Rebuild a canonical text message from any converter's wire message."""
    role = "assistant" if wire["role"] in ("assistant", "model") else wire["role"]
    content = wire["parts"] if "parts" in wire else wire["content"]
    if isinstance(content, str):
        return Message(role, content)
    return Message(role, "\n".join(part["text"] for part in content))


@pytest.mark.parametrize("fmt", sorted(WIRE_CONVERTERS))
@pytest.mark.parametrize("role", ["user", "assistant"])
@pytest.mark.parametrize("as_blocks", [False, True], ids=["string", "blocks"])
def test_text_round_trips_through_every_format(fmt, role, as_blocks):
    content = [TextBlock(ROUND_TRIP_TEXT)] if as_blocks else ROUND_TRIP_TEXT
    (wire,) = WIRE_CONVERTERS[fmt]([Message(role, content)])
    assert _read_back(wire) == Message(role, ROUND_TRIP_TEXT)
