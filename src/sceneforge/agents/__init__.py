"""Claude-backed agents for inspection and narration splitting."""

from .base import BaseAgent
from .inspector import InspectorAgent
from .splitter import CutSplitterAgent, SplitInput

__all__ = ["BaseAgent", "CutSplitterAgent", "InspectorAgent", "SplitInput"]
