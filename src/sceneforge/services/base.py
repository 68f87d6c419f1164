"""Contract between the pipeline and the remote generation services."""

from typing import List, Optional, Protocol

from ..models import Cut, InspectionData, LayoutType, VoiceTone


class GenerationServices(Protocol):
    """Remote operations the pipeline drives.

    Every method may raise a ``GenerationError`` subclass. Handles are opaque
    strings (local paths or URIs) that are stored on the scene as-is.
    """

    async def generate_image(self, prompt: str, layout: LayoutType) -> Optional[str]:
        ...

    async def generate_speech(self, text: str, tone: VoiceTone) -> Optional[str]:
        ...

    async def inspect_image(self, image: str) -> Optional[InspectionData]:
        ...

    async def generate_video(
        self, image: str, motion_strength: float, duration: float
    ) -> Optional[str]:
        """Return None when the service finished without producing a video."""
        ...

    async def is_video_available(self) -> bool:
        ...

    async def split_narration(self, narration: str, visual_prompt: str) -> List[Cut]:
        """Split narration into up to four cuts, each with a visual detail."""
        ...
