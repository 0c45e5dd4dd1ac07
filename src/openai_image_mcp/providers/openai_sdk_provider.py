import base64
import binascii
import logging
from typing import Optional

import httpx
import openai
from openai import AsyncOpenAI
from openai.types import ImagesResponse

from openai_image_mcp.config import Settings
from openai_image_mcp.errors import ApiError, DecodeError, TransportError
from openai_image_mcp.models import LegacyImageOptions
from openai_image_mcp.providers.base_provider import BaseImageProvider

logger = logging.getLogger(__name__)


class OpenAISDKProvider(BaseImageProvider):
    """DALL-E generation through the official SDK, one client per call."""

    def __init__(
        self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None
    ):
        self.settings = settings
        self.http_client = http_client
        self.client_params = {
            "api_key": settings.api_key,
            "base_url": settings.api_base,
            "timeout": settings.timeout,
            "max_retries": 0,
        }
        if http_client is not None:
            self.client_params["http_client"] = http_client

    async def generate_image(
        self, prompt: str, model: str, options: LegacyImageOptions
    ) -> bytes:
        kwargs = {
            "model": model,
            "prompt": prompt,
            "n": 1,
            "size": options.size,
            "response_format": "b64_json",
        }
        if model == "dall-e-3":
            kwargs["quality"] = options.quality
            kwargs["style"] = options.style

        client = AsyncOpenAI(**self.client_params)
        try:
            api_response = await client.images.generate(**kwargs)
        except openai.APIStatusError as e:
            logger.error(f"Images API returned {e.status_code} for model {model}")
            raise ApiError(e.status_code, e.response.text) from e
        except openai.APIConnectionError as e:
            logger.error(f"Could not reach Images API for model {model}: {e}")
            raise TransportError(str(e)) from e
        finally:
            # An injected http client belongs to the caller.
            if self.http_client is None:
                await client.close()
        return _first_image_bytes(api_response)


def _first_image_bytes(api_response: ImagesResponse) -> bytes:
    if not api_response.data or not api_response.data[0].b64_json:
        raise DecodeError("No image data found in API response.")
    try:
        return base64.b64decode(api_response.data[0].b64_json, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Image data is not valid base64: {e}") from e
