"""Per-scene step eligibility.

Each step runs only while its own flag is false, which makes re-running the
pipeline over a partially finished document safe.
"""

from typing import List

from .models import DecomposedScene, Scene, SceneType


def needs_image(scene: Scene) -> bool:
    return not scene.progress_status.is_image_generated


def needs_inspection(scene: Scene) -> bool:
    status = scene.progress_status
    return status.is_image_generated and not status.is_image_inspected


def needs_video(scene: Scene) -> bool:
    """Video-or-fallback step; only plain video scenes with an image qualify."""
    status = scene.progress_status
    return (
        scene.type == SceneType.VIDEO
        and status.is_image_generated
        and not status.is_video_generated
    )


def needs_audio(scene: Scene) -> bool:
    return not scene.progress_status.is_audio_generated


def pending_steps(scene: Scene) -> List[str]:
    """Names of the steps still eligible for ``scene``, in execution order."""
    status = scene.progress_status
    steps: List[str] = []
    if not status.is_image_generated:
        steps.append("image")
    if not status.is_image_inspected:
        steps.append("inspection")
    if scene.type == SceneType.VIDEO and not status.is_video_generated:
        steps.append("video")
    if not status.is_audio_generated:
        steps.append("audio")
    return steps


def is_complete(scene: Scene) -> bool:
    return not pending_steps(scene)


def narration_for_audio(scene: Scene) -> str:
    """Text to synthesize: TTS text, then the pre-split narration, then narration."""
    if scene.scripts.tts_text:
        return scene.scripts.tts_text
    if isinstance(scene, DecomposedScene) and scene.narration_full:
        return scene.narration_full
    return scene.scripts.narration
