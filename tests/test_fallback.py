from __future__ import annotations

import asyncio

from sceneforge.errors import PermanentError
from sceneforge.fallback import FallbackDecomposer, build_grid_prompt
from sceneforge.models import Cut, DecomposedScene, LayoutType, SceneType
from sceneforge.retry import RetryExecutor


def test_grid_prompt_labels_each_quadrant():
    cuts = [Cut(cut_no=i, narration=f"n{i}", visual_detail=f"detail {i}") for i in range(1, 5)]
    prompt = build_grid_prompt("A harbor at dawn", cuts)

    assert prompt.startswith("A harbor at dawn")
    assert "[Top-Left] detail 1" in prompt
    assert "[Top-Right] detail 2" in prompt
    assert "[Bottom-Left] detail 3" in prompt
    assert "[Bottom-Right] detail 4" in prompt


def test_grid_prompt_fills_missing_cuts_with_placeholders():
    prompt = build_grid_prompt("A harbor", [Cut(cut_no=1, narration="n1", visual_detail="boats")])

    assert "[Top-Left] boats" in prompt
    assert "[Top-Right] Development" in prompt
    assert "[Bottom-Left] Climax" in prompt
    assert "[Bottom-Right] Conclusion" in prompt


def test_grid_prompt_uses_placeholder_for_blank_detail():
    prompt = build_grid_prompt("x", [Cut(cut_no=1, narration="n1", visual_detail="")])
    assert "[Top-Left] Opening shot" in prompt


def _decomposer(services, sleep):
    return FallbackDecomposer(services, RetryExecutor(retries=1, base_delay=1.0, sleep=sleep))


def test_decompose_produces_grid_scene(services, sleep, scene_factory):
    scene = scene_factory(4, SceneType.VIDEO, is_image_generated=True, is_image_inspected=True)

    result = asyncio.run(_decomposer(services, sleep).decompose(scene))

    assert isinstance(result, DecomposedScene)
    assert services.ops() == ["split", "image"]
    _, prompt, layout = services.calls[-1]
    assert layout == LayoutType.GRID_2X2
    assert "[Bottom-Right] detail 4" in prompt
    assert result.narration_full == scene.scripts.narration
    assert [c.cut_no for c in result.cuts] == [1, 2, 3, 4]
    assert result.assets.visual_url == "img-1.png"


def test_no_cuts_aborts_without_image_request(services, sleep, scene_factory):
    services.cuts = []
    scene = scene_factory(4, SceneType.VIDEO, is_image_generated=True)

    assert asyncio.run(_decomposer(services, sleep).decompose(scene)) is None
    assert services.ops() == ["split"]


def test_failed_grid_image_leaves_scene_unchanged(services, sleep, scene_factory):
    services.failures["image"] = PermanentError("safety filter")
    scene = scene_factory(4, SceneType.VIDEO, is_image_generated=True)
    before = scene.model_dump()

    assert asyncio.run(_decomposer(services, sleep).decompose(scene)) is None
    assert scene.model_dump() == before


def test_extra_cuts_are_truncated_to_four(services, sleep, scene_factory):
    services.cuts = [Cut(cut_no=(i % 4) + 1, narration=f"n{i}") for i in range(6)]
    scene = scene_factory(4, SceneType.VIDEO, is_image_generated=True)

    result = asyncio.run(_decomposer(services, sleep).decompose(scene))

    assert len(result.cuts) == 4
