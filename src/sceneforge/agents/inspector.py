"""Vision agent that checks a generated image's panel layout."""

from pathlib import Path

from pydantic import ValidationError

from ..errors import PermanentError
from ..models import InspectionData
from ..services.imagen import LAYOUT_INSTRUCTIONS
from .base import BaseAgent

LAYOUT_GUIDE = "\n".join(
    f"- {layout.value}: {description}" for layout, description in LAYOUT_INSTRUCTIONS.items()
)

SYSTEM_PROMPT = f"""You inspect illustrations produced for short-form videos.
Count the distinct panels in the image and classify the arrangement as one of:
{LAYOUT_GUIDE}

Output valid JSON only, with no additional text or markdown formatting:
{{"detected_layout": "<layout>", "panel_count": <int>, "description": "<one sentence>"}}"""


class InspectorAgent(BaseAgent[str, InspectionData]):
    """Reports the layout an image actually has."""

    @property
    def name(self) -> str:
        return "InspectorAgent"

    @property
    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    async def run(self, input_data: str) -> InspectionData:
        """Inspect the image at path ``input_data``.

        Raises:
            PermanentError: If the reply is not a valid inspection result.
        """
        response = await self._create_message(
            prompt="Inspect this image.",
            max_tokens=512,
            temperature=0.0,
            image_path=Path(input_data),
        )
        data = self._parse_json(response)
        try:
            inspection = InspectionData.model_validate(data)
        except ValidationError as e:
            raise PermanentError(f"Unexpected inspection result: {e}") from e

        self._logger.info(
            f"Detected {inspection.detected_layout.value} with {inspection.panel_count} panel(s)"
        )
        return inspection
