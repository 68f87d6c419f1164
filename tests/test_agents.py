from __future__ import annotations

import asyncio

import pytest

from sceneforge.agents import CutSplitterAgent, InspectorAgent, SplitInput
from sceneforge.agents.base import extract_json
from sceneforge.errors import PermanentError
from sceneforge.models import LayoutType


class FakeClient:
    """Stands in for AnthropicClient, replying with canned text."""

    def __init__(self, reply: str) -> None:
        self.reply = reply
        self.requests = []

    async def create_message(self, **kwargs) -> str:
        self.requests.append(kwargs)
        return self.reply


def test_extract_json_from_code_block():
    response = 'Here you go:\n```json\n{"a": 1}\n```\nThanks'
    assert extract_json(response) == '{"a": 1}'


def test_extract_json_prefers_first_structure():
    assert extract_json('noise [1, {"b": 2}] tail') == '[1, {"b": 2}]'
    assert extract_json('pre {"c": [1]} post') == '{"c": [1]}'


def test_inspector_parses_layout():
    client = FakeClient('{"detected_layout": "GRID_2X2", "panel_count": 4, "description": "four panels"}')
    agent = InspectorAgent(client=client, model="claude-test")

    inspection = asyncio.run(agent.run("assets/img.png"))

    assert inspection.detected_layout == LayoutType.GRID_2X2
    assert inspection.panel_count == 4
    request = client.requests[0]
    assert str(request["image_path"]) == "assets/img.png"
    assert "GRID_2X2" in request["system"]


def test_inspector_rejects_unknown_layout():
    client = FakeClient('{"detected_layout": "COLLAGE", "panel_count": 9, "description": "?"}')
    agent = InspectorAgent(client=client, model="claude-test")

    with pytest.raises(PermanentError):
        asyncio.run(agent.run("img.png"))


def test_splitter_renumbers_and_truncates():
    reply = """```json
{"cuts": [
  {"cut_no": 7, "narration": "one", "visual_detail": "a"},
  {"cut_no": 8, "narration": "two", "visual_detail": "b"},
  {"cut_no": 9, "narration": "three", "visual_detail": "c"},
  {"cut_no": 10, "narration": "four", "visual_detail": "d"},
  {"cut_no": 11, "narration": "five", "visual_detail": "e"}
]}
```"""
    agent = CutSplitterAgent(client=FakeClient(reply), model="claude-test")

    cuts = asyncio.run(agent.run(SplitInput(narration="one two three four five", visual_prompt="alley")))

    assert [c.cut_no for c in cuts] == [1, 2, 3, 4]
    assert [c.narration for c in cuts] == ["one", "two", "three", "four"]


def test_splitter_accepts_bare_array():
    agent = CutSplitterAgent(
        client=FakeClient('[{"narration": "all of it", "visual_detail": "wide"}]'),
        model="claude-test",
    )

    cuts = asyncio.run(agent.run(SplitInput(narration="all of it", visual_prompt="street")))

    assert len(cuts) == 1
    assert cuts[0].visual_detail == "wide"


def test_splitter_rejects_non_json():
    agent = CutSplitterAgent(client=FakeClient("I cannot help with that."), model="claude-test")

    with pytest.raises(PermanentError):
        asyncio.run(agent.run(SplitInput(narration="x", visual_prompt="y")))


def test_splitter_rejects_missing_cuts_array():
    agent = CutSplitterAgent(client=FakeClient('{"cuts": "none"}'), model="claude-test")

    with pytest.raises(PermanentError):
        asyncio.run(agent.run(SplitInput(narration="x", visual_prompt="y")))


def test_inspector_prompt_explains_every_layout_code():
    agent = InspectorAgent(client=FakeClient("{}"), model="claude-test")
    lines = agent.system_prompt.splitlines()

    for layout in LayoutType:
        assert any(line.startswith(f"- {layout.value}: ") for line in lines)
    assert "- SPLIT_V: Two panels side by side" in agent.system_prompt
    assert "- SPLIT_H: Two panels stacked" in agent.system_prompt
