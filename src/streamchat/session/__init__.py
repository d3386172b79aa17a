"""Streaming session module.

Connects an LLM provider's fragment stream to the transcript.
"""

from .controller import ChatSession

__all__ = ["ChatSession"]
