"""Resumable asset generation for scene-based video scripts."""

__version__ = "0.1.0"
