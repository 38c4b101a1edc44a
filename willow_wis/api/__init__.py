"""Workers AI client package: async HTTP interface to the inference provider.

RULES:
- All provider HTTP calls go through WorkersAIClient (no direct httpx usage elsewhere)
- Authentication is via Bearer token from config
"""

from willow_wis.api.client import WorkersAIClient, WorkersAIError
from willow_wis.api.models import TranscriptionResult

__all__ = ["TranscriptionResult", "WorkersAIClient", "WorkersAIError"]
