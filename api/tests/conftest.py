"""
Pytest configuration and fixtures for Cedora API tests.
"""
import base64
import io
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from schemas.products import ProductSchema


def make_image_bytes(fmt: str = "JPEG", size=(120, 80), color="beige", mode: str = "RGB") -> bytes:
    """Encode a flat-colour test image."""
    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def to_data_uri(image_bytes: bytes, mime_type: str = "image/jpeg") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode()}"


def genai_response(*parts):
    """Shape of a google-genai generate_content response."""
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


def text_part(text: str):
    return SimpleNamespace(text=text, inline_data=None)


def image_part(data: bytes, mime_type: str = "image/png"):
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(mime_type=mime_type, data=data))


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG")


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG", color="navy")


@pytest.fixture
def room_data_uri(jpeg_bytes):
    """An uploaded room photo as the session stores it."""
    return to_data_uri(jpeg_bytes)


@pytest.fixture
def result_data_uri(png_bytes):
    return to_data_uri(png_bytes, "image/png")


@pytest.fixture
def oslo_sofa():
    """Living room product used across preview tests."""
    return ProductSchema(
        product_id=1,
        name="Oslo Sofa",
        handle="oslo-sofa",
        product_url="https://cedora.com.au/products/oslo-sofa",
        price=1899.0,
        room="Living Room",
        product_type="Sofa",
        collection_names=["Living", "New Arrivals"],
        image_urls=[
            "https://cedora.com.au/cdn/shop/files/oslo-sofa-1.jpg",
            "https://cedora.com.au/cdn/shop/files/oslo-sofa-2.jpg",
        ],
    )


@pytest.fixture
def mock_composer(result_data_uri):
    """Composition client that answers immediately with a PNG data URI."""
    composer = MagicMock()
    composer.compose = AsyncMock(return_value=result_data_uri)
    return composer


@pytest.fixture
def mock_genai_client(png_bytes):
    """google-genai client returning a text part followed by an image part."""
    client = MagicMock()
    client.models.generate_content.return_value = genai_response(
        text_part("Here is your staged room."), image_part(png_bytes)
    )
    return client


@pytest.fixture
def image_bytes():
    """Factory for encoded test images: image_bytes("PNG", size=(10, 10))"""
    return make_image_bytes
