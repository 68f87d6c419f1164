"""Agent that splits a scene's narration into four grid cuts."""

from dataclasses import dataclass

from pydantic import ValidationError

from ..errors import PermanentError
from ..models import Cut
from .base import BaseAgent

MAX_CUTS = 4

SYSTEM_PROMPT = """You are a storyboard editor for short-form videos.
Split the given narration into exactly four consecutive segments without
rewording it, and give each segment a short visual description of what its
panel should show. Together the four panels form a 2x2 comic-style grid.

Output valid JSON only, with no additional text or markdown formatting:
{"cuts": [{"cut_no": 1, "narration": "...", "visual_detail": "..."}, ...]}"""


@dataclass
class SplitInput:
    """Input data for the splitter agent."""

    narration: str
    visual_prompt: str


class CutSplitterAgent(BaseAgent[SplitInput, list[Cut]]):
    """Decomposes narration into up to four ordered cuts."""

    @property
    def name(self) -> str:
        return "CutSplitterAgent"

    @property
    def system_prompt(self) -> str:
        return SYSTEM_PROMPT

    async def run(self, input_data: SplitInput) -> list[Cut]:
        """Split the narration.

        Returns:
            Up to four cuts, numbered 1..n in order. An empty list if the
            model produced none.

        Raises:
            PermanentError: If the reply cannot be parsed.
        """
        prompt = "\n".join([
            f"NARRATION: {input_data.narration}",
            f"SCENE VISUAL: {input_data.visual_prompt}",
        ])
        response = await self._create_message(prompt=prompt, max_tokens=1024, temperature=0.4)
        data = self._parse_json(response)

        raw_cuts = data.get("cuts", []) if isinstance(data, dict) else data
        if not isinstance(raw_cuts, list):
            raise PermanentError("Response does not contain a cuts array")

        cuts: list[Cut] = []
        for i, item in enumerate(raw_cuts[:MAX_CUTS]):
            if not isinstance(item, dict):
                continue
            try:
                cuts.append(Cut(
                    cut_no=i + 1,
                    narration=str(item.get("narration", "")).strip(),
                    visual_detail=str(item.get("visual_detail", "")).strip(),
                ))
            except ValidationError as e:
                self._logger.warning(f"Skipping malformed cut {i + 1}: {e}")

        self._logger.info(f"Split narration into {len(cuts)} cuts")
        return cuts
