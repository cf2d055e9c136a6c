"""Client helpers for interacting with a vision-capable LLM."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Optional

from httpx import RequestError, TimeoutException
from openai import APIError, OpenAI
from openai.types.responses import Response

from snapcook_backend.config import (
    DEFAULT_LLM_MODEL,
    DEFAULT_LLM_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """Raised when the uploaded payload cannot be sent to the model."""


class UpstreamUnavailableError(RuntimeError):
    """Raised when the vision model cannot be reached or rejects the call."""


@dataclass
class VisionLLMSettings:
    """Configuration required to talk to the vision model."""

    api_key: str
    model: str = DEFAULT_LLM_MODEL
    system_prompt: Optional[str] = None
    timeout_seconds: float = DEFAULT_LLM_TIMEOUT_SECONDS


def validate_image(image_bytes: bytes | None, mime_type: str | None) -> str:
    """Return the normalized MIME type or raise ``InvalidInputError``."""

    mime = (mime_type or "").strip().lower()
    if not mime.startswith("image/"):
        raise InvalidInputError("이미지 파일만 업로드 가능합니다.")
    if not image_bytes:
        raise InvalidInputError("uploaded image is empty")
    return mime


class VisionLLMClient:
    """Thin wrapper around the OpenAI Responses API for vision requests."""

    def __init__(self, settings: VisionLLMSettings) -> None:
        self._settings = settings
        self._client = OpenAI(
            api_key=settings.api_key,
            timeout=settings.timeout_seconds,
        )

    @property
    def system_prompt(self) -> str | None:
        return self._settings.system_prompt

    def generate(
        self,
        *,
        prompt: str,
        image_bytes: bytes,
        mime_type: str | None,
        system_prompt: str | None = None,
    ) -> str:
        """Send the prompt and image to the model and return its raw text."""

        mime = validate_image(image_bytes, mime_type)
        image_base64 = base64.b64encode(image_bytes).decode("ascii")
        data_uri = f"data:{mime};base64,{image_base64}"

        content = []
        merged_system_prompt = system_prompt or self._settings.system_prompt
        if merged_system_prompt:
            content.append(
                {
                    "role": "system",
                    "content": [
                        {
                            "type": "input_text",
                            "text": merged_system_prompt,
                        }
                    ],
                }
            )

        content.append(
            {
                "role": "user",
                "content": [
                    {"type": "input_text", "text": prompt},
                    {"type": "input_image", "image_url": data_uri},
                ],
            }
        )

        try:
            response: Response = self._client.responses.create(
                model=self._settings.model,
                input=content,
            )
        except TimeoutException as e:
            logger.error("OpenAI / HTTP timeout: %r", e)
            raise UpstreamUnavailableError("vision model timed out") from e
        except RequestError as e:
            logger.error("OpenAI / HTTP network error: %r", e)
            raise UpstreamUnavailableError("vision model unreachable") from e
        except APIError as e:
            logger.exception("OpenAI response error")
            raise UpstreamUnavailableError("vision model request failed") from e

        output_text = response.output_text or ""
        logger.info(
            "vision model responded",
            extra={"model": self._settings.model, "chars": len(output_text)},
        )
        logger.debug("vision model raw output: %s", output_text)
        return output_text


def init_vision_llm_client(settings: VisionLLMSettings) -> VisionLLMClient:
    """Create a ``VisionLLMClient`` instance from the provided settings."""

    return VisionLLMClient(settings)
