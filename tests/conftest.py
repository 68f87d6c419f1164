"""Shared fixtures: fake generation services, scene factories, instant sleep."""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import pytest

from sceneforge.models import (
    Cut,
    InspectionData,
    LayoutType,
    PlainScene,
    ProgressStatus,
    SceneAssets,
    ScenePrompts,
    SceneScripts,
    SceneType,
    ScriptDocument,
    ScriptMeta,
    VoiceTone,
)
from sceneforge.storage import MemoryStore, PersistenceGateway


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeServices:
    """In-memory GenerationServices that records every call.

    ``failures`` maps an operation name to an exception raised on every call
    (or to a list consumed one per call, ``None`` entries meaning success).
    """

    def __init__(self, video_available: bool = True) -> None:
        self.video_available = video_available
        self.calls: List[tuple] = []
        self.failures: Dict[str, Any] = {}
        self.video_result: Optional[str] = "video"
        self.cuts: List[Cut] = [
            Cut(cut_no=i, narration=f"part {i}", visual_detail=f"detail {i}")
            for i in range(1, 5)
        ]
        self.inspection = InspectionData(
            detected_layout=LayoutType.SINGLE, panel_count=1, description="one panel"
        )
        self._counter = 0

    def _maybe_fail(self, op: str) -> None:
        failure = self.failures.get(op)
        if isinstance(failure, list):
            failure = failure.pop(0) if failure else None
        if failure is not None:
            raise failure

    def _handle(self, prefix: str, suffix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}.{suffix}"

    def ops(self, name: Optional[str] = None) -> List[str]:
        ops = [call[0] for call in self.calls]
        return [op for op in ops if op == name] if name else ops

    async def generate_image(self, prompt: str, layout: LayoutType) -> Optional[str]:
        self.calls.append(("image", prompt, layout))
        self._maybe_fail("image")
        return self._handle("img", "png")

    async def generate_speech(self, text: str, tone: VoiceTone) -> Optional[str]:
        self.calls.append(("audio", text, tone))
        self._maybe_fail("audio")
        return self._handle("voice", "mp3")

    async def inspect_image(self, image: str) -> Optional[InspectionData]:
        self.calls.append(("inspect", image))
        self._maybe_fail("inspect")
        return self.inspection

    async def generate_video(self, image: str, motion_strength: float, duration: float) -> Optional[str]:
        self.calls.append(("video", image, motion_strength, duration))
        self._maybe_fail("video")
        if self.video_result is None:
            return None
        return self._handle(self.video_result, "mp4")

    async def is_video_available(self) -> bool:
        self.calls.append(("probe",))
        return self.video_available

    async def split_narration(self, narration: str, visual_prompt: str) -> List[Cut]:
        self.calls.append(("split", narration, visual_prompt))
        self._maybe_fail("split")
        return list(self.cuts)


def build_scene(
    scene_index: int,
    scene_type: SceneType = SceneType.IMAGE,
    layout: LayoutType = LayoutType.SINGLE,
    tts_text: Optional[str] = None,
    **status: bool,
) -> PlainScene:
    return PlainScene(
        scene_index=scene_index,
        type=scene_type,
        duration_prediction=6.0,
        planned_layout=layout,
        scripts=SceneScripts(
            narration=f"Narration for scene {scene_index}.",
            tts_text=tts_text,
            subtitles=[f"Subtitle {scene_index}"],
            voice_tone=VoiceTone.SERIOUS,
        ),
        prompts=ScenePrompts(visual_prompt=f"Visual {scene_index}", motion_strength=4),
        assets=SceneAssets(base_id=f"scene_{scene_index:02d}"),
        progress_status=ProgressStatus(is_script_done=True, is_prompt_done=True, **status),
    )


def build_document(*scenes: PlainScene) -> ScriptDocument:
    return ScriptDocument(
        meta=ScriptMeta(title="Night Market Mysteries", tags=["mystery"], genre="story"),
        scenes=list(scenes),
    )


@pytest.fixture
def services() -> FakeServices:
    return FakeServices()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def gateway(store: MemoryStore) -> PersistenceGateway:
    return PersistenceGateway(store, key="current_project")


@pytest.fixture
def scene_factory() -> Callable[..., PlainScene]:
    return build_scene


@pytest.fixture
def document_factory() -> Callable[..., ScriptDocument]:
    return build_document
