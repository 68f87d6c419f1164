"""Scene data model.

A scene has two shapes. ``PlainScene`` is what upstream script writers
produce. ``DecomposedScene`` is a former video scene that was re-expressed
as a 2x2 still composition with four narration cuts; it is only ever created
through ``PlainScene.decompose``.
"""

from enum import Enum
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, Discriminator, Field, Tag, model_validator


class SceneType(str, Enum):
    """What kind of visual the scene ends up with."""
    VIDEO = "video"
    IMAGE = "image"


class LayoutType(str, Enum):
    """Panel composition of a scene's visual."""
    SINGLE = "SINGLE"
    SPLIT_V = "SPLIT_V"
    SPLIT_H = "SPLIT_H"
    TRI_TOP_SPLIT = "TRI_TOP_SPLIT"
    TRI_BOT_SPLIT = "TRI_BOT_SPLIT"
    GRID_2X2 = "GRID_2X2"


class VoiceTone(str, Enum):
    """Narration delivery style."""
    EXCITED = "excited"
    SERIOUS = "serious"
    CALM = "calm"
    WHISPER = "whisper"


class SceneAssets(BaseModel):
    """Generated artifact handles for a scene."""

    base_id: str = Field(..., description="Stem shared by all asset filenames")
    audio_filename: str = Field(default="", description="Narration audio filename")
    visual_filename: str = Field(default="", description="Image or video filename")
    subtitle_filename: str = Field(default="", description="Subtitle filename")
    visual_url: Optional[str] = Field(None, description="Generated image or video handle")
    audio_url: Optional[str] = Field(None, description="Generated narration handle")
    audio_duration: Optional[float] = Field(None, description="Narration length in seconds")

    @model_validator(mode="after")
    def _default_filenames(self) -> "SceneAssets":
        if not self.audio_filename:
            self.audio_filename = f"{self.base_id}.mp3"
        if not self.visual_filename:
            self.visual_filename = f"{self.base_id}.png"
        if not self.subtitle_filename:
            self.subtitle_filename = f"{self.base_id}.srt"
        return self


class SceneScripts(BaseModel):
    """Narration and subtitle text."""

    narration: str = Field(..., description="Narration text")
    tts_text: Optional[str] = Field(None, description="Pronunciation-optimized narration for TTS")
    subtitles: List[str] = Field(default_factory=list, description="Subtitle lines")
    voice_tone: VoiceTone = Field(default=VoiceTone.CALM, description="Narration tone")


class ScenePrompts(BaseModel):
    """Visual generation hints."""

    visual_prompt: str = Field(..., description="Image generation prompt")
    motion_strength: float = Field(default=5.0, description="Motion intensity hint for video")


class ProgressStatus(BaseModel):
    """Independent completion flags; together they form the scene's state."""

    is_script_done: bool = False
    is_prompt_done: bool = False
    is_image_generated: bool = False
    is_image_inspected: bool = False
    is_audio_generated: bool = False
    is_video_generated: bool = False

    @model_validator(mode="after")
    def _inspection_needs_image(self) -> "ProgressStatus":
        if self.is_image_inspected and not self.is_image_generated:
            raise ValueError("is_image_inspected requires is_image_generated")
        return self


class InspectionData(BaseModel):
    """Result of checking a generated image's actual panel layout."""

    detected_layout: LayoutType = LayoutType.SINGLE
    panel_count: int = Field(default=1, ge=0)
    description: str = ""


class Cut(BaseModel):
    """One quadrant of a decomposed scene."""

    cut_no: int = Field(..., ge=1, le=4)
    narration: str
    visual_detail: str = ""


class SceneBase(BaseModel):
    """Fields shared by both scene shapes."""

    scene_index: int = Field(..., description="Unique, ordered scene identity")
    step_phase: str = Field(default="", description="Upstream authoring phase label")
    duration_prediction: float = Field(default=5.0, description="Estimated seconds on screen", ge=0)
    scripts: SceneScripts
    prompts: ScenePrompts
    assets: SceneAssets
    progress_status: ProgressStatus = Field(default_factory=ProgressStatus)
    inspection_data: Optional[InspectionData] = None

    class Config:
        """Pydantic config."""
        frozen = False


class PlainScene(SceneBase):
    """A scene as authored: either a video scene or a single image scene."""

    type: SceneType = SceneType.IMAGE
    planned_layout: LayoutType = LayoutType.SINGLE

    def decompose(self, cuts: List[Cut], visual_url: str) -> "DecomposedScene":
        """Re-express this scene as a 2x2 still composition.

        The original narration moves to ``narration_full`` and the cuts
        become the authoritative narration. The video flag is cleared since
        no motion artifact exists.
        """
        data = self.model_dump(exclude={"type", "planned_layout"})
        data["assets"]["visual_url"] = visual_url
        data["assets"]["visual_filename"] = f"{self.assets.base_id}.png"
        data["progress_status"]["is_video_generated"] = False
        return DecomposedScene(
            **data,
            cuts=[cut.model_copy() for cut in cuts],
            narration_full=self.scripts.narration,
        )


class DecomposedScene(SceneBase):
    """A former video scene rendered as four cuts in one grid image."""

    type: SceneType = SceneType.IMAGE
    planned_layout: LayoutType = LayoutType.GRID_2X2
    cuts: List[Cut] = Field(..., min_length=1, max_length=4)
    narration_full: str

    @model_validator(mode="after")
    def _check_shape(self) -> "DecomposedScene":
        if self.type != SceneType.IMAGE:
            raise ValueError("decomposed scenes are image scenes")
        if self.planned_layout != LayoutType.GRID_2X2:
            raise ValueError("decomposed scenes use the GRID_2X2 layout")
        if self.progress_status.is_video_generated:
            raise ValueError("decomposed scenes never carry a generated video")
        return self


def _scene_shape(value: Any) -> str:
    if isinstance(value, dict):
        return "decomposed" if value.get("cuts") else "plain"
    return "decomposed" if getattr(value, "cuts", None) else "plain"


Scene = Annotated[
    Union[
        Annotated[PlainScene, Tag("plain")],
        Annotated[DecomposedScene, Tag("decomposed")],
    ],
    Discriminator(_scene_shape),
]
