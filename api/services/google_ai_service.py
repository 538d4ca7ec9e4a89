"""
Google AI Studio service for virtual room staging (product composited into a room photo)
"""
import asyncio
import base64
import io
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from google import genai
from google.genai import types
from PIL import Image, UnidentifiedImageError

from core.config import settings
from core.exceptions import CompositionError, ImageLoadError, NoImageInResponse
from services.coordinate_mapper import Marker
from services.image_encoder import ImageEncoder, image_encoder

logger = logging.getLogger(__name__)


@dataclass
class TextPart:
    """Text returned alongside (or instead of) the image"""

    value: str


@dataclass
class InlineImagePart:
    """Inline image payload returned by the model"""

    mime_type: str
    data: bytes


ResponsePart = Union[TextPart, InlineImagePart]


def build_staging_prompt(product_name: str, marker: Marker) -> str:
    """Instruction block sent after the room and product images."""
    return f"""Task: Professional AI Furniture Inpainting & Virtual Staging.
1. Input: Image 1 is the base room. Image 2 is the exact product: "{product_name}".
2. Target Placement: Center the furniture item exactly at the position: [X:{marker.x:.1f}%, Y:{marker.y:.1f}%] of the room image.
3. Erase & Clean: If any existing furniture or object is at or near the marked location, cleanly erase it and reconstruct the floor and background so the removal looks natural.
4. Faithful Reproduction (CRITICAL): Do NOT hallucinate or redesign the product. It must be a 100% faithful reproduction of Image 2, keeping its exact shape, textures, colors and distinctive features.
5. Integration: Adjust scale, rotation and perspective to match the room geometry. Add lighting, reflections and soft contact shadows so the item is physically present in the space.
6. Quality: Generate exactly one photorealistic composite image. Output ONLY the image data, no text."""


def parse_response_parts(response: Any) -> List[ResponsePart]:
    """Flatten a generate_content response into tagged parts, in order."""
    parts = None
    # The SDK may expose parts directly or nested under candidates
    if getattr(response, "candidates", None):
        candidate = response.candidates[0]
        content = getattr(candidate, "content", None)
        parts = getattr(content, "parts", None)
    elif getattr(response, "parts", None):
        parts = response.parts

    parsed: List[ResponsePart] = []
    for part in parts or []:
        inline_data = getattr(part, "inline_data", None)
        if inline_data is not None and inline_data.data:
            parsed.append(
                InlineImagePart(mime_type=inline_data.mime_type or "image/png", data=_as_image_bytes(inline_data.data))
            )
        elif getattr(part, "text", None):
            parsed.append(TextPart(value=part.text))
    return parsed


def first_inline_image(parts: List[ResponsePart]) -> Optional[InlineImagePart]:
    for part in parts:
        if isinstance(part, InlineImagePart):
            return part
    return None


def _as_image_bytes(data: Union[bytes, str]) -> bytes:
    """Inline data arrives as raw bytes from the SDK, or base64 text from JSON."""
    if isinstance(data, str):
        return base64.b64decode(data)
    return bytes(data)


def to_png_data_uri(image: InlineImagePart) -> str:
    """Wrap the generated image in a PNG data URI, re-encoding if needed."""
    png_bytes = image.data
    if image.mime_type != "image/png":
        try:
            pil_image = Image.open(io.BytesIO(image.data))
            buffer = io.BytesIO()
            pil_image.save(buffer, format="PNG")
            png_bytes = buffer.getvalue()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise CompositionError(f"Generated image could not be decoded ({image.mime_type})", cause=e) from e
    return f"data:image/png;base64,{base64.b64encode(png_bytes).decode()}"


class GoogleAIStudioService:
    """Service for Google AI Studio integration"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        genai_client: Optional[Any] = None,
        encoder: Optional[ImageEncoder] = None,
    ):
        """Initialize Google AI Studio service"""
        self.api_key = api_key if api_key is not None else settings.google_ai_api_key
        self.model = settings.google_ai_image_model
        self.timeout_seconds = settings.composition_timeout
        self.encoder = encoder or image_encoder
        self.usage_stats = {
            "total_requests": 0,
            "successful_requests": 0,
            "failed_requests": 0,
            "total_processing_time": 0.0,
            "last_reset": datetime.now(),
        }

        if genai_client is not None:
            self.genai_client = genai_client
            self.genai_configured = True
        elif self.api_key:
            self.genai_client = genai.Client(api_key=self.api_key)
            self.genai_configured = True

            if len(self.api_key) > 12:
                masked_key = f"{self.api_key[:8]}...{self.api_key[-4:]}"
                logger.info(f"Google AI API Key loaded: {masked_key}")
        else:
            self.genai_client = None
            self.genai_configured = False
            logger.warning("Google AI API key not configured - room previews will not be available")

        logger.info(f"Google AI Studio service initialized for staging with {self.model}")

    async def compose(self, room_image: str, product_image: str, product_name: str, marker: Marker) -> str:
        """
        Composite a product into a room photo at the marked position.

        Args:
            room_image: Template URL or uploaded data URI
            product_image: Primary product image URL
            product_name: Literal product name embedded in the prompt
            marker: Placement coordinate in percentages

        Returns:
            PNG data URI of the generated composite

        Raises:
            ImageLoadError: either input image could not be prepared
            NoImageInResponse: the model returned no inline image
            CompositionError: any other transport, auth or service failure
        """
        if not self.genai_configured:
            raise CompositionError("Google AI API key not configured")

        room_base64, product_base64 = await asyncio.gather(
            self.encoder.encode(room_image), self.encoder.encode(product_image)
        )

        prompt = build_staging_prompt(product_name, marker)
        try:
            parts = [
                types.Part(inline_data=types.Blob(mime_type="image/jpeg", data=base64.b64decode(room_base64))),
                types.Part(inline_data=types.Blob(mime_type="image/jpeg", data=base64.b64decode(product_base64))),
                types.Part.from_text(text=prompt),
            ]
        except ValueError as e:
            # binascii.Error from a malformed uploaded data URI
            raise ImageLoadError(room_image, f"invalid base64 payload: {e}") from e

        contents = [types.Content(role="user", parts=parts)]
        config = types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"])

        logger.info(f"Staging '{product_name}' at X={marker.x:.1f}%, Y={marker.y:.1f}% with {self.model}")

        def _run_generate():
            return self.genai_client.models.generate_content(model=self.model, contents=contents, config=config)

        start_time = time.time()
        self.usage_stats["total_requests"] += 1
        try:
            loop = asyncio.get_running_loop()
            response = await asyncio.wait_for(loop.run_in_executor(None, _run_generate), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            self.usage_stats["failed_requests"] += 1
            logger.error(f"Staging request timed out after {self.timeout_seconds} seconds")
            raise CompositionError(f"Generation timed out after {self.timeout_seconds}s", cause=e) from e
        except Exception as e:
            self.usage_stats["failed_requests"] += 1
            logger.error(f"Staging request failed: {e}")
            raise CompositionError(f"Generation request failed: {e}", cause=e) from e

        try:
            response_parts = parse_response_parts(response)
            for part in response_parts:
                if isinstance(part, TextPart):
                    logger.info(f"Gemini text response: {part.value[:200]}")

            image_part = first_inline_image(response_parts)
            if image_part is None:
                raise NoImageInResponse(text_parts=len(response_parts))

            result = to_png_data_uri(image_part)
        except CompositionError:
            self.usage_stats["failed_requests"] += 1
            raise
        except Exception as e:
            self.usage_stats["failed_requests"] += 1
            logger.error(f"Malformed staging response: {e}")
            raise CompositionError(f"Malformed generation response: {e}", cause=e) from e

        processing_time = time.time() - start_time
        self.usage_stats["successful_requests"] += 1
        self.usage_stats["total_processing_time"] += processing_time
        logger.info(f"Staging successful - Time: {processing_time:.2f}s, {len(image_part.data)} bytes")
        return result

    async def get_usage_statistics(self) -> Dict[str, Any]:
        """Get API usage statistics"""
        return {
            **self.usage_stats,
            "success_rate": (self.usage_stats["successful_requests"] / max(self.usage_stats["total_requests"], 1) * 100),
            "average_processing_time": (
                self.usage_stats["total_processing_time"] / max(self.usage_stats["successful_requests"], 1)
            ),
        }

    async def health_check(self) -> Dict[str, Any]:
        """Report configuration state without spending a generation call"""
        return {
            "status": "healthy" if self.genai_configured else "unconfigured",
            "model": self.model,
            "api_key_configured": bool(self.api_key),
            "usage_stats": await self.get_usage_statistics(),
        }

    async def close(self):
        """Close HTTP session"""
        await self.encoder.close()


# Global service instance
google_ai_service = GoogleAIStudioService()
