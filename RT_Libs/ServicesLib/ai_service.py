"""
Generative AI editing client.

Sends an image (and optionally a mask) together with an instruction to a
Gemini-style ``generateContent`` endpoint and expects an edited image back.
Every failure is returned as a value: ``request`` never raises for network,
HTTP or payload problems, it returns an ``AIResult`` carrying one of the
``AIServiceError`` subclasses. There are no retries.

Configuration comes from ``AIServiceSettings`` (environment variables with
the ``RETOUCH_AI_`` prefix) and is passed to the service explicitly.

Example:
    >>> service = GenerativeEditService(AIServiceSettings(api_key="..."))
    >>> result = asyncio.run(service.auto_enhance(raster))
    >>> if result.ok:
    ...     raster = result.image
"""

from __future__ import annotations

import asyncio
import base64
import binascii
from dataclasses import dataclass
import logging
from typing import Any, Coroutine, Dict, List, Optional

import httpx
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from RT_Libs.constants import (
    AI_DEFAULT_BASE_URL,
    AI_DEFAULT_MODEL,
    AI_DEFAULT_TIMEOUT,
    AI_ENV_PREFIX,
    AI_IMAGE_MIME_TYPES,
    AI_JPEG_QUALITY,
    PROMPT_AUTO_ENHANCE,
    PROMPT_COLORIZE,
    PROMPT_REMOVE_BACKGROUND,
    PROMPT_REMOVE_OBJECT,
)
from RT_Libs.ImageEditingLib.export_ops import ExportFormat, ExportOptions, encode_image
from RT_Libs.ImageEditingLib.image_models import ImageDecodeError, RasterImage

logger = logging.getLogger(__name__)


class AIServiceSettings(BaseSettings):
    """AI service settings loaded from RETOUCH_AI_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix=AI_ENV_PREFIX,
        case_sensitive=False,
    )

    # Authentication (None = requests fail with ModelError)
    api_key: str | None = None

    # Endpoint
    model: str = AI_DEFAULT_MODEL
    base_url: str = AI_DEFAULT_BASE_URL
    timeout: float = Field(default=AI_DEFAULT_TIMEOUT, gt=0)

    # Upload encoding
    jpeg_quality: float = Field(default=AI_JPEG_QUALITY, gt=0, le=1)


# ============================================================================
# Results
# ============================================================================

class AIServiceError(Exception):
    """Base class for AI service failures."""


class NoDataError(AIServiceError):
    """The input image or mask could not be encoded."""

    def __init__(self, message: str = "Failed to encode image data"):
        super().__init__(message)


class NoContentError(AIServiceError):
    """The reply did not contain a decodable image."""

    def __init__(self, message: str = "Model returned no image content"):
        super().__init__(message)


class ModelError(AIServiceError):
    """Transport, HTTP or model-side failure."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class AIResult:
    """Either an edited image or the error that prevented it."""

    image: Optional[RasterImage] = None
    error: Optional[AIServiceError] = None

    def __post_init__(self) -> None:
        if (self.image is None) == (self.error is None):
            raise ValueError("AIResult needs exactly one of image or error")

    @classmethod
    def success(cls, image: RasterImage) -> AIResult:
        return cls(image=image)

    @classmethod
    def failure(cls, error: AIServiceError) -> AIResult:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.image is not None

    def unwrap(self) -> RasterImage:
        """Return the image or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.image


# ============================================================================
# Service
# ============================================================================

class GenerativeEditService:
    """Client for image-in, image-out generative edits."""

    def __init__(
        self,
        settings: Optional[AIServiceSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings = settings or AIServiceSettings()
        self._client = client

    @property
    def endpoint(self) -> str:
        base = self.settings.base_url.rstrip("/")
        return f"{base}/models/{self.settings.model}:generateContent"

    def _inline_part(self, image: RasterImage) -> Dict[str, Any]:
        options = ExportOptions(format=ExportFormat.JPEG, quality=self.settings.jpeg_quality)
        data = encode_image(image, options)
        return {
            "inline_data": {
                "mime_type": ExportFormat.JPEG.mime_type,
                "data": base64.b64encode(data).decode("ascii"),
            }
        }

    def build_payload(
        self,
        image: RasterImage,
        mask: Optional[RasterImage],
        instruction: str,
    ) -> Dict[str, Any]:
        """
        Build the request body: instruction text, then image, then mask.

        Raises:
            NoDataError: If the image or mask cannot be encoded
        """
        try:
            parts: List[Dict[str, Any]] = [{"text": instruction}, self._inline_part(image)]
            if mask is not None:
                parts.append(self._inline_part(mask))
        except (OSError, ValueError, TypeError) as e:
            raise NoDataError(f"Failed to encode image data: {e}") from e
        return {"contents": [{"role": "user", "parts": parts}]}

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        headers = {"x-goog-api-key": self.settings.api_key or ""}
        if self._client is not None:
            return await self._client.post(
                self.endpoint, json=payload, headers=headers, timeout=self.settings.timeout
            )
        async with httpx.AsyncClient(timeout=self.settings.timeout) as client:
            return await client.post(self.endpoint, json=payload, headers=headers)

    async def request(
        self,
        image: RasterImage,
        mask: Optional[RasterImage],
        instruction: str,
    ) -> AIResult:
        """
        Ask the model to edit ``image`` following ``instruction``.

        Args:
            image: Image to edit
            mask: Optional mask (white = area to edit)
            instruction: Natural-language instruction

        Returns:
            AIResult with the edited image, or NoDataError, NoContentError
            or ModelError
        """
        if not self.settings.api_key:
            return AIResult.failure(ModelError("No API key configured"))

        try:
            payload = self.build_payload(image, mask, instruction)
        except NoDataError as e:
            logger.info(f"AI request not sent: {e}")
            return AIResult.failure(e)

        try:
            response = await self._post(payload)
        except httpx.HTTPError as e:
            logger.info(f"AI request failed: {e}")
            return AIResult.failure(ModelError(str(e) or type(e).__name__))

        if not response.is_success:
            message = _error_message(response)
            logger.info(f"AI model returned HTTP {response.status_code}: {message}")
            return AIResult.failure(ModelError(message))

        try:
            body = response.json()
        except ValueError:
            return AIResult.failure(NoContentError("Reply was not valid JSON"))

        try:
            edited = RasterImage.decode(extract_image_bytes(body), scale=image.scale)
        except NoContentError as e:
            logger.info(f"AI reply had no image: {e}")
            return AIResult.failure(e)
        except ImageDecodeError as e:
            logger.info(f"AI reply image could not be decoded: {e}")
            return AIResult.failure(NoContentError(str(e)))

        logger.info(f"AI edit succeeded ({edited.width}x{edited.height})")
        return AIResult.success(edited)

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    async def remove_object(
        self,
        image: RasterImage,
        mask: RasterImage,
        instruction: str = PROMPT_REMOVE_OBJECT,
    ) -> AIResult:
        return await self.request(image, mask, instruction)

    async def auto_enhance(self, image: RasterImage) -> AIResult:
        return await self.request(image, None, PROMPT_AUTO_ENHANCE)

    async def remove_background(self, image: RasterImage) -> AIResult:
        return await self.request(image, None, PROMPT_REMOVE_BACKGROUND)

    async def colorize(self, image: RasterImage) -> AIResult:
        return await self.request(image, None, PROMPT_COLORIZE)


def extract_image_bytes(body: Dict[str, Any]) -> bytes:
    """
    Pull the first inline image out of a generateContent reply.

    Raises:
        NoContentError: If no candidate carries a JPEG or PNG part
    """
    try:
        parts = body["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        raise NoContentError() from None

    for part in parts:
        if not isinstance(part, dict):
            continue
        inline = part.get("inlineData") or part.get("inline_data")
        if not inline:
            continue
        mime_type = inline.get("mimeType") or inline.get("mime_type")
        if mime_type not in AI_IMAGE_MIME_TYPES:
            raise NoContentError(f"Unsupported reply MIME type: {mime_type}")
        try:
            return base64.b64decode(inline.get("data", ""), validate=True)
        except (binascii.Error, ValueError) as e:
            raise NoContentError(f"Reply image data is not valid base64: {e}") from e

    raise NoContentError()


def _error_message(response: httpx.Response) -> str:
    try:
        error = response.json().get("error", {})
        message = error.get("message") if isinstance(error, dict) else None
    except (ValueError, AttributeError):
        message = None
    return message or f"HTTP {response.status_code}"


def start(request: Coroutine[Any, Any, AIResult]) -> asyncio.Task:
    """
    Schedule a request on the running event loop.

    The returned task can be cancelled; a cancelled task never delivers a
    result. Must be called from inside a running loop.
    """
    return asyncio.get_running_loop().create_task(request)
