"""Protocol definitions for external collaborators."""

from research_friend.protocols.content_source import ContentSource
from research_friend.protocols.model_client import ModelClient

__all__ = ["ContentSource", "ModelClient"]
