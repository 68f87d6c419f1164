"""Pipeline run outcome model."""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class RunState(str, Enum):
    """How a pipeline run ended."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    QUOTA_EXHAUSTED = "quota_exhausted"


class RunReport(BaseModel):
    """Summary of the work a pipeline run performed."""

    state: RunState = Field(default=RunState.COMPLETED, description="Final run state")
    images_generated: int = 0
    images_inspected: int = 0
    inspections_degraded: int = 0
    videos_generated: int = 0
    fallbacks_applied: int = 0
    audio_generated: int = 0
    scenes_visited: List[int] = Field(default_factory=list, description="Scene indices reached")
    pending_scenes: List[int] = Field(default_factory=list, description="Scenes with steps left")
    errors: List[str] = Field(default_factory=list, description="Error messages")

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def is_complete(self) -> bool:
        """True when every scene finished all of its steps."""
        return self.state == RunState.COMPLETED and not self.pending_scenes
