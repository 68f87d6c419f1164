"""Data models for the scene asset pipeline."""

from .scene import (
    Cut,
    DecomposedScene,
    InspectionData,
    LayoutType,
    PlainScene,
    ProgressStatus,
    Scene,
    SceneAssets,
    ScenePrompts,
    SceneScripts,
    SceneType,
    VoiceTone,
)
from .script import GlobalStyle, ScriptDocument, ScriptMeta
from .run import RunReport, RunState

__all__ = [
    "Cut",
    "DecomposedScene",
    "GlobalStyle",
    "InspectionData",
    "LayoutType",
    "PlainScene",
    "ProgressStatus",
    "RunReport",
    "RunState",
    "Scene",
    "SceneAssets",
    "ScenePrompts",
    "SceneScripts",
    "SceneType",
    "ScriptDocument",
    "ScriptMeta",
    "VoiceTone",
]
