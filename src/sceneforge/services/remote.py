"""Production wiring of the generation services."""

import logging
from typing import List, Optional

from ..agents import CutSplitterAgent, InspectorAgent, SplitInput
from ..config import Config, config as default_config
from ..models import Cut, InspectionData, LayoutType, VoiceTone
from ..quota import QuotaTracker
from .anthropic import AnthropicClient
from .imagen import ImagenClient
from .speech import SpeechClient
from .veo import VeoClient

logger = logging.getLogger(__name__)


class RemoteServices:
    """Implements ``GenerationServices`` with Google Cloud and Claude."""

    def __init__(
        self,
        imagen: ImagenClient,
        speech: SpeechClient,
        veo: VeoClient,
        inspector: InspectorAgent,
        splitter: CutSplitterAgent,
    ) -> None:
        self._imagen = imagen
        self._speech = speech
        self._veo = veo
        self._inspector = inspector
        self._splitter = splitter

    async def generate_image(self, prompt: str, layout: LayoutType) -> Optional[str]:
        return await self._imagen.generate_image(prompt, layout)

    async def generate_speech(self, text: str, tone: VoiceTone) -> Optional[str]:
        return await self._speech.generate_speech(text, tone)

    async def inspect_image(self, image: str) -> Optional[InspectionData]:
        return await self._inspector.run(image)

    async def generate_video(
        self, image: str, motion_strength: float, duration: float
    ) -> Optional[str]:
        return await self._veo.generate_video(image, motion_strength, duration)

    async def is_video_available(self) -> bool:
        return await self._veo.is_available()

    async def split_narration(self, narration: str, visual_prompt: str) -> List[Cut]:
        return await self._splitter.run(SplitInput(narration=narration, visual_prompt=visual_prompt))


def build_services(cfg: Optional[Config] = None, quota: Optional[QuotaTracker] = None) -> RemoteServices:
    """Construct the production services from configuration.

    Raises:
        ValueError: If required credentials or settings are missing.
    """
    cfg = cfg or default_config
    cfg.validate_required()
    cfg.validate_google_required()

    claude = AnthropicClient(api_key=cfg.anthropic_api_key, model=cfg.default_model, quota=quota)
    logger.debug(f"Building services (Claude {claude.model}, Imagen {cfg.imagen_model})")
    return RemoteServices(
        imagen=ImagenClient(
            project_id=cfg.google_cloud_project,
            location=cfg.google_location,
            model=cfg.imagen_model,
            output_dir=cfg.assets_dir,
            quota=quota,
        ),
        speech=SpeechClient(
            language_code=cfg.tts_language,
            output_dir=cfg.assets_dir,
            quota=quota,
        ),
        veo=VeoClient(
            project_id=cfg.google_cloud_project,
            location=cfg.google_location,
            model=cfg.veo_model,
            output_bucket=cfg.veo_output_bucket or "",
            output_dir=cfg.assets_dir,
            quota=quota,
        ),
        inspector=InspectorAgent(client=claude, model=cfg.default_model),
        splitter=CutSplitterAgent(client=claude, model=cfg.default_model),
    )
