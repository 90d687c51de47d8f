"""
Vision describer

Sends a PNG screenshot to a vision-capable model and returns its text
description. OpenAI is preferred when both providers are configured.
Provider failures come back as an unsuccessful ``VisionResult`` rather than
an exception.
"""
import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .config import (
    ANTHROPIC_API_URL,
    ANTHROPIC_API_VERSION,
    ANTHROPIC_VISION_MODEL,
    OPENAI_API_URL,
    OPENAI_VISION_MODEL,
    VISION_MAX_TOKENS,
    VISION_TIMEOUT,
    anthropic_api_key,
    openai_api_key,
)
from .errors import CollaboratorError

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = """Describe this screenshot of a web page. Include:
- Main content and purpose of the page
- Key UI elements (buttons, forms, navigation)
- Any error messages or alerts visible
- Current state (loading, loaded, error)
Keep the description concise but comprehensive."""

NOT_CONFIGURED = "Vision not configured. Set OPENAI_API_KEY or ANTHROPIC_API_KEY environment variable."


@dataclass
class VisionResult:
    success: bool
    description: Optional[str] = None
    provider: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success}
        for key in ("description", "provider", "error"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


def get_provider() -> Optional[str]:
    if openai_api_key():
        return "openai"
    if anthropic_api_key():
        return "anthropic"
    return None


def is_configured() -> bool:
    return get_provider() is not None


def build_prompt(user_prompt: Optional[str] = None) -> str:
    if not user_prompt:
        return DEFAULT_PROMPT
    return f"Looking at this screenshot of a web page: {user_prompt}"


async def _describe_openai(client: httpx.AsyncClient, image_b64: str, prompt: str) -> str:
    response = await client.post(
        OPENAI_API_URL,
        headers={"Authorization": f"Bearer {openai_api_key()}"},
        json={
            "model": OPENAI_VISION_MODEL,
            "max_tokens": VISION_MAX_TOKENS,
            "messages": [{
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:image/png;base64,{image_b64}", "detail": "high"},
                    },
                ],
            }],
        },
    )
    response.raise_for_status()
    choices = response.json().get("choices") or []
    content = choices[0].get("message", {}).get("content") if choices else None
    if not content:
        raise CollaboratorError("vision", "No response from OpenAI")
    return content


async def _describe_anthropic(client: httpx.AsyncClient, image_b64: str, prompt: str) -> str:
    response = await client.post(
        ANTHROPIC_API_URL,
        headers={
            "x-api-key": anthropic_api_key(),
            "anthropic-version": ANTHROPIC_API_VERSION,
        },
        json={
            "model": ANTHROPIC_VISION_MODEL,
            "max_tokens": VISION_MAX_TOKENS,
            "messages": [{
                "role": "user",
                "content": [
                    {
                        "type": "image",
                        "source": {"type": "base64", "media_type": "image/png", "data": image_b64},
                    },
                    {"type": "text", "text": prompt},
                ],
            }],
        },
    )
    response.raise_for_status()
    for block in response.json().get("content") or []:
        if block.get("type") == "text":
            return block["text"]
    raise CollaboratorError("vision", "No response from Anthropic")


async def describe_image(
    image: bytes,
    prompt: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> VisionResult:
    """Describe a PNG image with the configured provider."""
    provider = get_provider()
    if provider is None:
        return VisionResult(success=False, error=NOT_CONFIGURED)

    image_b64 = base64.b64encode(image).decode("utf-8")
    full_prompt = build_prompt(prompt)
    describe = _describe_openai if provider == "openai" else _describe_anthropic

    logger.info(f"Sending screenshot to {provider} vision model")
    try:
        if client is not None:
            description = await describe(client, image_b64, full_prompt)
        else:
            async with httpx.AsyncClient(timeout=VISION_TIMEOUT) as owned:
                description = await describe(owned, image_b64, full_prompt)
    except (httpx.HTTPError, CollaboratorError, KeyError, ValueError) as e:
        logger.warning(f"Vision request to {provider} failed: {e}")
        return VisionResult(success=False, provider=provider, error=f"Vision API error: {e}")

    return VisionResult(success=True, description=description, provider=provider)
