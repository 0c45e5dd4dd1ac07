import logging
from typing import Optional

import httpx

from openai_image_mcp.config import Settings
from openai_image_mcp.errors import TransportError
from openai_image_mcp.models import (
    ApiResponse,
    FormFile,
    JsonBody,
    MultipartForm,
    OutboundRequest,
)

logger = logging.getLogger(__name__)

GENERATIONS_ENDPOINT = "/images/generations"
EDITS_ENDPOINT = "/images/edits"


class ImageApiClient:
    """Shared, authorized HTTP client for the current-generation Images API.

    Headers are fixed at construction, so one instance can serve concurrent
    tool calls.
    """

    def __init__(self, http_client: httpx.AsyncClient):
        self.http_client = http_client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ImageApiClient":
        http_client = httpx.AsyncClient(
            base_url=settings.api_base,
            headers={"Authorization": f"Bearer {settings.api_key}"},
            timeout=httpx.Timeout(settings.timeout),
            transport=transport,
        )
        return cls(http_client)

    async def send(self, request: OutboundRequest, endpoint: str) -> ApiResponse:
        try:
            if isinstance(request, JsonBody):
                response = await self.http_client.post(endpoint, json=request.fields)
            elif isinstance(request, MultipartForm):
                response = await self.http_client.post(
                    endpoint, files=_multipart_parts(request)
                )
            else:
                raise TypeError(f"Unsupported request type: {type(request).__name__}")
        except httpx.TransportError as e:
            logger.error(f"Transport error calling {endpoint}: {e!r}")
            raise TransportError(f"Request to {endpoint} failed: {e!r}") from e
        logger.info(f"POST {endpoint} -> {response.status_code}")
        return ApiResponse(status_code=response.status_code, body=response.content)

    async def close(self):
        await self.http_client.aclose()


def _multipart_parts(form: MultipartForm) -> list:
    # Text fields go in as (None, value) so httpx keeps the declared part order.
    parts = []
    for part in form.parts:
        if isinstance(part, FormFile):
            parts.append((part.name, (part.filename, part.stream, part.content_type)))
        else:
            parts.append((part.name, (None, part.value)))
    return parts
