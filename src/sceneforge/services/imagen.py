"""Google Imagen API client wrapper via Vertex AI."""

import asyncio
import base64
import logging
import uuid
from pathlib import Path
from typing import Optional

from ..config import config
from ..models import LayoutType
from ..quota import QuotaTracker
from .vertex import GoogleRestClient, save_media

logger = logging.getLogger(__name__)

# Panel arrangement instructions appended to the visual prompt
LAYOUT_INSTRUCTIONS = {
    LayoutType.SINGLE: "Single full-frame composition.",
    LayoutType.SPLIT_V: "Two panels side by side (left | right), split by one vertical border.",
    LayoutType.SPLIT_H: "Two panels stacked (top over bottom), split by one horizontal border.",
    LayoutType.TRI_TOP_SPLIT: "Top half split into two panels, one wide panel below.",
    LayoutType.TRI_BOT_SPLIT: "One wide panel on top, bottom half split into two panels.",
    LayoutType.GRID_2X2: "Four equal panels in a 2x2 grid, separated by thin borders.",
}


class ImagenClient:
    """Client wrapper for Google Imagen image generation via Vertex AI."""

    # Every panel layout is drawn on the same 1280x720 frame
    DEFAULT_ASPECT_RATIO = "16:9"

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        model: Optional[str] = None,
        output_dir: Optional[Path] = None,
        quota: Optional[QuotaTracker] = None,
        aspect_ratio: str = DEFAULT_ASPECT_RATIO,
    ) -> None:
        """Initialize the Imagen client.

        Args:
            project_id: Google Cloud project ID.
            location: GCP region for Vertex AI.
            model: Imagen model name.
            output_dir: Directory for generated PNG files.
            quota: Optional tracker counting each request.
            aspect_ratio: Aspect ratio for every image.
        """
        self._project_id = project_id or config.google_cloud_project
        self._location = location or config.google_location
        self._model = model or config.imagen_model
        self._output_dir = output_dir or config.assets_dir
        self._aspect_ratio = aspect_ratio
        self._rest = GoogleRestClient("Imagen", quota=quota)

        if not self._project_id:
            raise ValueError("GOOGLE_CLOUD_PROJECT not set")

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def model(self) -> str:
        return self._model

    @property
    def endpoint(self) -> str:
        return (
            f"https://{self._location}-aiplatform.googleapis.com/v1/"
            f"projects/{self._project_id}/locations/{self._location}/"
            f"publishers/google/models/{self._model}:predict"
        )

    def build_prompt(self, prompt: str, layout: LayoutType) -> str:
        return f"{prompt}\n\nLayout: {LAYOUT_INSTRUCTIONS[layout]}"

    async def generate_image(self, prompt: str, layout: LayoutType) -> Optional[str]:
        """Generate an image and save it as PNG.

        Args:
            prompt: Text description of the image to generate.
            layout: Panel composition the image should follow.

        Returns:
            Path of the saved image, or None if the response held no image.

        Raises:
            GenerationError: If the API request fails.
        """
        request_body = {
            "instances": [
                {"prompt": self.build_prompt(prompt, layout)}
            ],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": self._aspect_ratio,
            },
        }

        logger.info(f"Generating image with Imagen ({layout.value}): {prompt[:50]}...")
        data = await self._rest.post(self.endpoint, request_body, model=self._model)

        predictions = data.get("predictions", [])
        if not predictions:
            logger.warning("No predictions in Imagen response")
            return None

        image_data = predictions[0].get("bytesBase64Encoded")
        if not image_data:
            logger.warning("No image data in Imagen response")
            return None

        output_path = self._output_dir / f"img_{uuid.uuid4().hex[:12]}.png"
        await asyncio.to_thread(save_media, output_path, base64.b64decode(image_data))
        logger.info(f"Saved image to {output_path}")
        return str(output_path)
