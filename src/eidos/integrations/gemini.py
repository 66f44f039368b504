"""Gemini image generation client."""

from __future__ import annotations

import base64
import binascii
import json
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from loguru import logger

from eidos.errors import ApiKeyNotConfiguredError, GenerationError, UnsupportedProviderError
from eidos.integrations import ImageGenerator
from eidos.types import ImageData

DEFAULT_GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
USER_AGENT = "eidos/1.0"


class GeminiImageGenerator:
    """Generate one image per prompt through the Gemini `generateContent` API."""

    def __init__(
        self,
        api_key: str,
        model_name: str,
        *,
        api_base: str | None = None,
        timeout_seconds: int = 120,
    ) -> None:
        if not api_key:
            raise ApiKeyNotConfiguredError("an AI API key is required for image generation")
        self.api_key = api_key
        self.model_name = model_name
        self.api_base = (api_base or DEFAULT_GEMINI_API_BASE).rstrip("/")
        self.timeout_seconds = timeout_seconds

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/models/{self.model_name}:generateContent"

    def generate(self, prompt: str, reference_images: tuple[ImageData, ...] = ()) -> ImageData | None:
        parts: list[dict[str, object]] = [{"text": prompt}]
        for image in reference_images:
            parts.append(
                {
                    "inline_data": {
                        "mime_type": image.mime_type,
                        "data": base64.b64encode(image.data).decode("ascii"),
                    }
                }
            )
        payload = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }
        request = Request(  # noqa: S310 - endpoint is built from configuration.
            self.endpoint,
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self.api_key,
                "User-Agent": USER_AGENT,
            },
            method="POST",
        )

        logger.info("requesting image from {} ({} reference image(s))", self.model_name, len(reference_images))
        try:
            with urlopen(request, timeout=self.timeout_seconds) as response:  # noqa: S310
                response_body = response.read().decode("utf-8", errors="replace")
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace").strip()
            raise GenerationError(f"gemini http {exc.code}: {detail}" if detail else f"gemini http {exc.code}") from exc
        except (URLError, OSError) as exc:
            raise GenerationError(f"gemini request failed: {exc!s}") from exc

        try:
            data = json.loads(response_body)
        except json.JSONDecodeError as exc:
            raise GenerationError(f"gemini returned invalid json: {exc!s}") from exc

        image = _first_inline_image(data)
        if image is None:
            logger.warning("gemini response contained no image part")
        return image


def _first_inline_image(data: object) -> ImageData | None:
    if not isinstance(data, dict):
        return None
    for candidate in data.get("candidates") or []:
        if not isinstance(candidate, dict):
            continue
        content = candidate.get("content")
        if not isinstance(content, dict):
            continue
        for part in content.get("parts") or []:
            if not isinstance(part, dict):
                continue
            inline = part.get("inlineData") or part.get("inline_data")
            if not isinstance(inline, dict) or not inline.get("data"):
                continue
            mime_type = str(inline.get("mimeType") or inline.get("mime_type") or "image/png")
            try:
                raw = base64.b64decode(str(inline["data"]), validate=True)
            except (binascii.Error, ValueError) as exc:
                raise GenerationError(f"gemini returned undecodable image data: {exc!s}") from exc
            return ImageData(mime_type=mime_type, data=raw)
    return None


def create_image_generator(
    provider: str,
    api_key: str | None,
    model_name: str,
    *,
    api_base: str | None = None,
    timeout_seconds: int = 120,
) -> ImageGenerator:
    """Create the image generator for a provider name."""

    match provider.strip().lower():
        case "gemini":
            return GeminiImageGenerator(api_key or "", model_name, api_base=api_base, timeout_seconds=timeout_seconds)
        case _:
            raise UnsupportedProviderError(f"unsupported AI provider: {provider}")
