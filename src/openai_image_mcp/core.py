import asyncio
from pathlib import Path
import logging
from typing import Awaitable, Callable

from openai_image_mcp.decoding import decode_direct, decode_envelope
from openai_image_mcp.errors import ImageToolError, InvalidArgumentError
from openai_image_mcp.models import (
    LEGACY_MODELS,
    EditRequest,
    GenerationRequest,
    ImageToolResponse,
)
from openai_image_mcp.payloads import build_generation_body, open_edit_form
from openai_image_mcp.providers.base_provider import BaseImageProvider
from openai_image_mcp.providers.http_provider import (
    EDITS_ENDPOINT,
    GENERATIONS_ENDPOINT,
    ImageApiClient,
)
from openai_image_mcp.utils import write_image_bytes
from openai_image_mcp.validation import (
    check_output_path,
    validate_edit_options,
    validate_generation_options,
    validate_legacy_options,
)

logger = logging.getLogger(__name__)


async def _run_tool(
    operation: str, pipeline: Callable[[], Awaitable[Path]]
) -> ImageToolResponse:
    try:
        saved_path = await pipeline()
    except ImageToolError as e:
        logger.error(f"{operation} failed ({e.kind}): {e}")
        return ImageToolResponse(error=e)
    except Exception as e:
        logger.exception(f"An unexpected error occurred in {operation}: {e}")
        return ImageToolResponse(error=ImageToolError(f"{type(e).__name__}: {e}"))
    return ImageToolResponse(saved_path=str(saved_path))


async def create_image_core(
    request: GenerationRequest, provider: BaseImageProvider
) -> ImageToolResponse:
    """Generate with a DALL-E model through the SDK and save the result."""

    async def pipeline() -> Path:
        if request.model not in LEGACY_MODELS:
            raise InvalidArgumentError("model", request.model)
        output_path = check_output_path(request.output_path)
        options = validate_legacy_options(request.model, request.options)
        image_bytes = await provider.generate_image(
            request.prompt, request.model, options
        )
        return await asyncio.to_thread(
            write_image_bytes, output_path, decode_direct(image_bytes)
        )

    return await _run_tool("create_image", pipeline)


async def generate_image_core(
    request: GenerationRequest, client: ImageApiClient
) -> ImageToolResponse:
    """Generate with gpt-image-1 through a JSON request and save the result."""

    async def pipeline() -> Path:
        output_path = check_output_path(request.output_path)
        options = validate_generation_options(request.options)
        body = build_generation_body(request.prompt, options)
        response = await client.send(body, GENERATIONS_ENDPOINT)
        return await asyncio.to_thread(
            write_image_bytes, output_path, decode_envelope(response)
        )

    return await _run_tool("generate_image", pipeline)


async def edit_image_core(
    request: EditRequest, client: ImageApiClient
) -> ImageToolResponse:
    """Edit an input image with gpt-image-1 through a multipart request."""

    async def pipeline() -> Path:
        output_path = check_output_path(request.output_path)
        options = validate_edit_options(request.options)
        async with open_edit_form(
            request.prompt, request.input_path, request.mask_path, options
        ) as form:
            response = await client.send(form, EDITS_ENDPOINT)
        return await asyncio.to_thread(
            write_image_bytes, output_path, decode_envelope(response)
        )

    return await _run_tool("edit_image", pipeline)


def format_tool_result(response: ImageToolResponse, action: str = "generated") -> str:
    if response.error is not None:
        return f"An error occurred: {response.error}"
    return f"Image is {action} to {response.saved_path}"
