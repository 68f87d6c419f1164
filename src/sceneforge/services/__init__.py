"""External service integrations.

``remote`` is not re-exported here: it imports the agents package, which
imports this one.
"""

from .base import GenerationServices
from .anthropic import AnthropicClient
from .imagen import ImagenClient
from .speech import SpeechClient
from .veo import VeoClient, GenerationStatus

__all__ = [
    "AnthropicClient",
    "GenerationServices",
    "GenerationStatus",
    "ImagenClient",
    "SpeechClient",
    "VeoClient",
]
