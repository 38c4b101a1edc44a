"""Willow Inference Server replacement backed by Cloudflare Workers AI.

WHY: Willow voice-assistant devices expect a WIS endpoint for speech
recognition and speech synthesis. Running those models ourselves is
unnecessary when a managed inference provider can do it; this package
is the thin router between the two.

HOW: Three layers: audio (wrap raw PCM in a WAV container), api (async
Workers AI client), server (FastAPI app speaking the Willow HTTP surface).

RULES:
- The WAV header layout is the only bit-exact contract in the project
- All provider traffic goes through willow_wis.api.WorkersAIClient
"""

__version__ = "0.1.0"
