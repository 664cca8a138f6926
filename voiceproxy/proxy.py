from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from config.settings import Settings
from core.errors import ConfigurationError, UpstreamError
from voiceproxy.presets import get_preset


logger = logging.getLogger("voicelog.realtime")

CLIENT_SECRET_TTL_SECONDS = 600
AUDIO_FORMAT = {"type": "audio/pcm", "rate": 24000}
TURN_DETECTION = {
    "type": "server_vad",
    "threshold": 0.5,
    "prefix_padding_ms": 300,
    "silence_duration_ms": 500,
    "create_response": True,
    "interrupt_response": True,
}


class RealtimeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    language: Optional[str] = Field(None, description="Locale code such as 'ko' or 'en'")
    custom_prompt: Optional[str] = Field(
        None, alias="customPrompt", description="Overrides the preset instructions"
    )


class RealtimeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_secret: str = Field(..., alias="clientSecret")


def build_session_config(req: RealtimeRequest, settings: Settings) -> Dict[str, Any]:
    preset = get_preset(req.language or settings.default_language, settings.default_language)
    instructions = req.custom_prompt or preset.instructions
    return {
        "expires_after": {"anchor": "created_at", "seconds": CLIENT_SECRET_TTL_SECONDS},
        "session": {
            "type": "realtime",
            "model": settings.realtime_model,
            "instructions": instructions,
            "output_modalities": ["audio"],
            "audio": {
                "input": {
                    "format": dict(AUDIO_FORMAT),
                    "transcription": {"model": settings.transcription_model},
                    "turn_detection": dict(TURN_DETECTION),
                },
                "output": {
                    "format": dict(AUDIO_FORMAT),
                    "voice": preset.voice,
                },
            },
        },
    }


def _upstream_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = {}
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return f"API error: {response.status_code}"


def create_client_secret(
    req: RealtimeRequest,
    settings: Settings,
    http_client: httpx.Client,
) -> RealtimeResponse:
    """Mint a short-lived client secret for a browser realtime session."""
    if not settings.openai_api_key:
        logger.error("OPENAI_API_KEY is not configured")
        raise ConfigurationError(
            "OPENAI_API_KEY is not set. Add OPENAI_API_KEY=your-api-key-here to the "
            "environment or the .env file in the project root."
        )

    payload = build_session_config(req, settings)
    logger.info(
        "Requesting realtime client secret: model=%s voice=%s custom_prompt=%s",
        payload["session"]["model"],
        payload["session"]["audio"]["output"]["voice"],
        bool(req.custom_prompt),
    )

    try:
        response = http_client.post(
            settings.realtime_url,
            json=payload,
            headers={"Authorization": f"Bearer {settings.openai_api_key}"},
        )
    except httpx.HTTPError as exc:
        logger.error("Realtime API call failed: %s", exc)
        raise UpstreamError(f"Realtime API call failed: {exc}") from exc

    if not response.is_success:
        message = _upstream_error_message(response)
        logger.error("Realtime API error: status=%s message=%s", response.status_code, message)
        raise UpstreamError(message)

    try:
        data = response.json()
    except ValueError as exc:
        logger.error("Realtime API returned invalid JSON")
        raise UpstreamError("Realtime API returned an invalid response") from exc

    value = data.get("value") if isinstance(data, dict) else None
    if not isinstance(value, str) or not value:
        logger.error("Realtime API response has no client secret")
        raise UpstreamError("Realtime API response did not include a client secret")

    logger.info("Realtime client secret issued: expires_at=%s", data.get("expires_at"))
    return RealtimeResponse(client_secret=value)
