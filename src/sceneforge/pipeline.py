"""Asset generation orchestrator.

Walks the scenes of a script in order and fills in whatever is missing:
image, inspection, video (or the 2x2 grid fallback) and narration audio.
Every scene that changed is persisted before moving on, so a run can be
stopped at any point and resumed later without repeating finished work.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from .errors import QuotaExceededError
from .fallback import FallbackDecomposer
from .models import (
    InspectionData,
    LayoutType,
    RunReport,
    RunState,
    ScriptDocument,
)
from .progress import (
    is_complete,
    narration_for_audio,
    needs_audio,
    needs_image,
    needs_inspection,
    needs_video,
)
from .retry import RetryExecutor, SleepFn
from .services.base import GenerationServices
from .storage import PersistenceGateway

logger = logging.getLogger(__name__)

DEFAULT_SCENE_DELAY = 2.0

SnapshotCallback = Callable[[ScriptDocument], Union[None, Awaitable[None]]]


def default_inspection() -> InspectionData:
    """Inspection result substituted when the inspection call fails."""
    return InspectionData(
        detected_layout=LayoutType.SINGLE,
        panel_count=1,
        description="Auto-inspection failed",
    )


class CancellationToken:
    """Cooperative stop request shared between a caller and a running pipeline.

    The pipeline checks the token before each scene and each step; a remote
    call already in flight is allowed to finish.
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class _SceneChanges:
    """Tracks whether the current scene needs a checkpoint."""

    def __init__(self) -> None:
        self.dirty = False


class PipelineOrchestrator:
    """Drives one script document through asset generation."""

    def __init__(
        self,
        services: GenerationServices,
        gateway: PersistenceGateway,
        executor: Optional[RetryExecutor] = None,
        scene_delay: float = DEFAULT_SCENE_DELAY,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            services: Remote generation collaborators.
            gateway: Where checkpoints are written.
            executor: Retry policy for remote calls. Defaults to 3 retries
                starting at 4 seconds.
            scene_delay: Seconds to pause between scenes.
            sleep: Awaitable sleep, replaceable for tests.
        """
        self._services = services
        self._gateway = gateway
        self._executor = executor or RetryExecutor(sleep=sleep)
        self._fallback = FallbackDecomposer(services, self._executor)
        self._scene_delay = scene_delay
        self._sleep = sleep
        self._document: Optional[ScriptDocument] = None
        self.last_report: Optional[RunReport] = None

    @property
    def document(self) -> Optional[ScriptDocument]:
        """Copy of the document as of the end of the latest run."""
        return self._document.snapshot() if self._document is not None else None

    async def run(
        self,
        document: ScriptDocument,
        on_snapshot: Optional[SnapshotCallback] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> RunReport:
        """Generate missing assets for every scene of ``document``.

        The input document is not modified; progress is reported through
        ``on_snapshot`` with independent copies after each checkpoint.

        Args:
            document: Script to process.
            on_snapshot: Called with the updated document after every save.
            cancel: Token checked before each scene and step.

        Returns:
            A report of what this run did and which scenes are still pending.

        Raises:
            QuotaExceededError: A service reported quota exhaustion. Work
                completed before the failure has already been saved.
        """
        cancel = cancel or CancellationToken()
        report = RunReport()
        self.last_report = report
        self._document = document.snapshot()

        video_available = await self._probe_video()
        total = len(self._document.scenes)
        logger.info(f"Starting asset generation for {total} scenes")

        try:
            for position in range(total):
                if cancel.cancelled:
                    break

                scene_index = self._document.scenes[position].scene_index
                report.scenes_visited.append(scene_index)
                logger.info(f"Building scene {scene_index} ({position + 1}/{total})")

                changes = _SceneChanges()
                try:
                    await self._process_scene(position, video_available, cancel, report, changes)
                finally:
                    if changes.dirty:
                        await self._checkpoint(on_snapshot)

                if not cancel.cancelled and position < total - 1:
                    await self._sleep(self._scene_delay)

        except QuotaExceededError as e:
            report.state = RunState.QUOTA_EXHAUSTED
            report.errors.append(str(e))
            report.pending_scenes = self._pending()
            logger.error(f"Run aborted, quota exhausted: {e}")
            raise

        report.state = RunState.CANCELLED if cancel.cancelled else RunState.COMPLETED
        report.pending_scenes = self._pending()
        logger.info(
            f"Asset generation {report.state.value}; "
            f"{len(report.pending_scenes)} scene(s) pending"
        )
        return report

    async def _probe_video(self) -> bool:
        try:
            available = bool(await self._services.is_video_available())
        except Exception as e:
            logger.warning(f"Video capability probe failed: {e}")
            available = False
        if not available:
            logger.info("Video generation unavailable; video scenes will use the grid fallback")
        return available

    async def _process_scene(
        self,
        position: int,
        video_available: bool,
        cancel: CancellationToken,
        report: RunReport,
        changes: _SceneChanges,
    ) -> None:
        document = self._document
        scene = document.scenes[position]
        label = f"scene {scene.scene_index}"

        # Image
        if needs_image(scene):
            image = await self._executor.run(
                lambda: self._services.generate_image(
                    scene.prompts.visual_prompt, scene.planned_layout
                ),
                label=f"{label} image",
            )
            if image:
                scene.assets.visual_url = image
                scene.progress_status.is_image_generated = True
                report.images_generated += 1
                changes.dirty = True

        if cancel.cancelled:
            return

        # Inspection; failure degrades to a default result
        if needs_inspection(scene):
            inspection = await self._executor.run(
                lambda: self._services.inspect_image(scene.assets.visual_url),
                label=f"{label} inspection",
            )
            if inspection is None:
                logger.warning(f"Scene {scene.scene_index}: inspection failed, using default")
                inspection = default_inspection()
                report.inspections_degraded += 1
            scene.inspection_data = inspection
            scene.progress_status.is_image_inspected = True
            report.images_inspected += 1
            changes.dirty = True

        if cancel.cancelled:
            return

        # Video, or the grid fallback
        if needs_video(scene):
            video = None
            if video_available:
                video = await self._executor.run(
                    lambda: self._services.generate_video(
                        scene.assets.visual_url,
                        scene.prompts.motion_strength,
                        scene.duration_prediction,
                    ),
                    label=f"{label} video",
                )
            if video:
                scene.assets.visual_url = video
                scene.assets.visual_filename = f"{scene.assets.base_id}.mp4"
                scene.progress_status.is_video_generated = True
                report.videos_generated += 1
                changes.dirty = True
            else:
                decomposed = await self._fallback.decompose(scene)
                if decomposed is not None:
                    document.scenes[position] = decomposed
                    scene = decomposed
                    report.fallbacks_applied += 1
                    changes.dirty = True

        if cancel.cancelled:
            return

        # Audio
        if needs_audio(scene):
            text = narration_for_audio(scene)
            audio = await self._executor.run(
                lambda: self._services.generate_speech(text, scene.scripts.voice_tone),
                label=f"{label} audio",
            )
            if audio:
                scene.assets.audio_url = audio
                scene.progress_status.is_audio_generated = True
                report.audio_generated += 1
                changes.dirty = True

    async def _checkpoint(self, on_snapshot: Optional[SnapshotCallback]) -> None:
        self._document = await self._gateway.save(self._document)
        if on_snapshot is not None:
            result: Any = on_snapshot(self._document.snapshot())
            if inspect.isawaitable(result):
                await result

    def _pending(self) -> list[int]:
        return [s.scene_index for s in self._document.scenes if not is_complete(s)]


async def execute_asset_generation(
    document: ScriptDocument,
    services: GenerationServices,
    gateway: PersistenceGateway,
    on_snapshot: Optional[SnapshotCallback] = None,
    cancel: Optional[CancellationToken] = None,
    **kwargs: Any,
) -> RunReport:
    """Convenience wrapper: build an orchestrator and run it once."""
    orchestrator = PipelineOrchestrator(services, gateway, **kwargs)
    return await orchestrator.run(document, on_snapshot=on_snapshot, cancel=cancel)
