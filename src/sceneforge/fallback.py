"""Video-to-grid fallback.

When a video scene cannot get a motion clip, its narration is split into
four cuts and the scene is redrawn as a single 2x2 panel image.
"""

import logging
from typing import List, Optional, Sequence

from .models import Cut, DecomposedScene, LayoutType, PlainScene
from .retry import RetryExecutor
from .services.base import GenerationServices

logger = logging.getLogger(__name__)

GRID_CUTS = 4
QUADRANTS = ("Top-Left", "Top-Right", "Bottom-Left", "Bottom-Right")
PLACEHOLDER_DETAILS = ("Opening shot", "Development", "Climax", "Conclusion")


def build_grid_prompt(visual_prompt: str, cuts: Sequence[Cut]) -> str:
    """Compose one prompt describing all four quadrants of the grid.

    Missing cuts are filled with generic placeholder descriptions.
    """
    lines = [
        f"{visual_prompt}",
        "",
        "Compose a single image as a 2x2 grid of four equal panels, "
        "read left to right, top to bottom:",
    ]
    for i, quadrant in enumerate(QUADRANTS):
        detail = cuts[i].visual_detail if i < len(cuts) and cuts[i].visual_detail else PLACEHOLDER_DETAILS[i]
        lines.append(f"[{quadrant}] {detail}")
    return "\n".join(lines)


class FallbackDecomposer:
    """Turns a video scene into a decomposed 2x2 image scene."""

    def __init__(self, services: GenerationServices, executor: RetryExecutor) -> None:
        self._services = services
        self._executor = executor

    async def decompose(self, scene: PlainScene) -> Optional[DecomposedScene]:
        """Try the fallback for ``scene``.

        Returns:
            The decomposed scene, or None if splitting or image generation
            produced nothing. The input scene is never modified.

        Raises:
            QuotaExceededError: Propagated from the retry executor.
        """
        logger.info(f"Scene {scene.scene_index}: falling back to 2x2 grid")

        cuts: Optional[List[Cut]] = await self._executor.run(
            lambda: self._services.split_narration(
                scene.scripts.narration, scene.prompts.visual_prompt
            ),
            label=f"scene {scene.scene_index} narration split",
        )
        if not cuts:
            logger.warning(f"Scene {scene.scene_index}: narration split returned no cuts")
            return None

        cuts = list(cuts)[:GRID_CUTS]
        prompt = build_grid_prompt(scene.prompts.visual_prompt, cuts)
        logger.debug(f"Scene {scene.scene_index}: grid prompt length {len(prompt)}")

        image = await self._executor.run(
            lambda: self._services.generate_image(prompt, LayoutType.GRID_2X2),
            label=f"scene {scene.scene_index} grid image",
        )
        if not image:
            logger.warning(f"Scene {scene.scene_index}: grid image generation failed")
            return None

        logger.info(f"Scene {scene.scene_index}: decomposed into {len(cuts)} cuts")
        return scene.decompose(cuts, image)
