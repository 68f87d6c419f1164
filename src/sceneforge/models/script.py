"""Script document data model."""

import json
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .scene import Scene


class ScriptMeta(BaseModel):
    """Publishing metadata for the whole script."""

    title: str = Field(..., description="Video title")
    description: str = Field(default="", description="Video description")
    tags: List[str] = Field(default_factory=list, description="Search tags")
    genre: str = Field(default="", description="Content genre")
    thumbnail_prompt: str = Field(default="", description="Thumbnail image prompt")
    thumbnail_url: Optional[str] = Field(None, description="Generated thumbnail handle")
    bgm_mood: str = Field(default="", description="Background music mood")
    last_modified: Optional[datetime] = Field(None, description="Set on every save")


class GlobalStyle(BaseModel):
    """Style applied across all scenes."""

    art_style: str = Field(default="", description="Art style name")
    main_character_desc: Optional[str] = Field(None, description="Recurring character description")


class ScriptDocument(BaseModel):
    """Root aggregate: metadata, style and ordered scenes."""

    meta: ScriptMeta
    global_style: GlobalStyle = Field(default_factory=GlobalStyle)
    scenes: List[Scene] = Field(default_factory=list, description="Scenes in generation order")

    class Config:
        """Pydantic config."""
        frozen = False

    @field_validator("scenes")
    @classmethod
    def _ordered_unique(cls, scenes: List[Scene]) -> List[Scene]:
        seen: set[int] = set()
        for scene in scenes:
            if scene.scene_index in seen:
                raise ValueError(f"Duplicate scene_index: {scene.scene_index}")
            seen.add(scene.scene_index)
        return sorted(scenes, key=lambda s: s.scene_index)

    def scene(self, scene_index: int) -> Scene:
        """Look up a scene by its index."""
        for scene in self.scenes:
            if scene.scene_index == scene_index:
                return scene
        raise KeyError(f"No scene with scene_index {scene_index}")

    def replace_scene(self, scene: Scene) -> None:
        """Swap in a new version of the scene with the same index."""
        for i, existing in enumerate(self.scenes):
            if existing.scene_index == scene.scene_index:
                self.scenes[i] = scene
                return
        raise KeyError(f"No scene with scene_index {scene.scene_index}")

    def snapshot(self) -> "ScriptDocument":
        """Return an independent deep copy."""
        return self.model_copy(deep=True)

    @classmethod
    def from_yaml(cls, path: Path) -> "ScriptDocument":
        """Load a script from a YAML file."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)

    def to_yaml(self, path: Path) -> None:
        """Save the script to a YAML file."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                self.model_dump(mode="json", exclude_none=True),
                f,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
            )

    @classmethod
    def from_json(cls, path: Path) -> "ScriptDocument":
        """Load a script from a JSON file."""
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))

    def to_json(self, path: Path) -> None:
        """Save the script to a JSON file."""
        Path(path).write_text(
            json.dumps(self.model_dump(mode="json", exclude_none=True), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
