"""MCP tool server exposing OpenAI image generation and editing."""

import logging
from contextlib import asynccontextmanager
from typing import Optional, Union

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from openai_image_mcp.config import Settings
from openai_image_mcp.core import (
    create_image_core,
    edit_image_core,
    format_tool_result,
    generate_image_core,
)
from openai_image_mcp.models import CURRENT_MODEL, EditRequest, GenerationRequest
from openai_image_mcp.providers.base_provider import BaseImageProvider
from openai_image_mcp.providers.http_provider import ImageApiClient
from openai_image_mcp.providers.openai_sdk_provider import OpenAISDKProvider

logger = logging.getLogger(__name__)

SERVER_NAME = "openai-image-mcp"

INSTRUCTIONS = """
# OpenAI Image Tools

- **create_image**: Generate an image with dall-e-2 or dall-e-3.
- **generate_image**: Generate an image with gpt-image-1.
- **edit_image**: Edit an existing image with gpt-image-1, optionally within a mask.

Every tool writes the image to `output_path`, which must be an absolute path,
and returns a short status message.
"""


def client_lifespan(api_client: ImageApiClient, owns_client: bool):
    @asynccontextmanager
    async def lifespan(server: FastMCP):
        try:
            yield {}
        finally:
            if owns_client:
                await api_client.close()

    return lifespan


def create_server(
    settings: Settings,
    api_client: Optional[ImageApiClient] = None,
    provider: Optional[BaseImageProvider] = None,
) -> FastMCP:
    """Build the MCP server around one HTTP client shared by all tool calls."""
    # An injected api_client belongs to the caller.
    owns_client = api_client is None
    api_client = api_client or ImageApiClient.from_settings(settings)
    provider = provider or OpenAISDKProvider(settings)

    mcp = FastMCP(
        SERVER_NAME,
        instructions=INSTRUCTIONS,
        lifespan=client_lifespan(api_client, owns_client),
    )

    @mcp.tool(name="create_image", description="Creates an image given a prompt.")
    async def create_image(
        prompt: str = Field(
            description="A text description of the desired image(s). The maximum length is 1000 characters for dall-e-2 and 4000 characters for dall-e-3."
        ),
        output_path: str = Field(
            description="The path of the generated image. Must be absolute path."
        ),
        model: str = Field(
            default="dall-e-3",
            description="The model to use for image generation. Must be dall-e-2 or dall-e-3. Defaults to dall-e-3.",
        ),
        quality: str = Field(
            default="standard",
            description="The quality of the image that will be generated. hd creates images with finer details and greater consistency across the image. This param is only supported for dall-e-3. Must be hd or standard. Defaults to standard.",
        ),
        size: str = Field(
            default="1024x1024",
            description="The size of the generated images. Must be one of 256x256, 512x512, or 1024x1024 for dall-e-2. Must be one of 1024x1024, 1792x1024, or 1024x1792 for dall-e-3 models. Defaults to 1024x1024.",
        ),
        style: str = Field(
            default="vivid",
            description="The style of the generated images. Must be one of vivid or natural. Vivid causes the model to lean towards generating hyper-real and dramatic images. Natural causes the model to produce more natural, less hyper-real looking images. This param is only supported for dall-e-3. Defaults to vivid.",
        ),
    ) -> str:
        logger.debug(
            f"create_image called with model={model}, prompt='{prompt[:30]}...'"
        )
        request = GenerationRequest(
            prompt=prompt,
            output_path=output_path,
            model=model,
            options={"quality": quality, "size": size, "style": style},
        )
        return format_tool_result(await create_image_core(request, provider))

    @mcp.tool(
        name="generate_image",
        description=f"Creates an image given a prompt using {CURRENT_MODEL}.",
    )
    async def generate_image(
        prompt: str = Field(
            description="A text description of the desired image. The maximum length is 32000 characters."
        ),
        output_path: str = Field(
            description="The path of the generated image. Must be absolute path."
        ),
        background: str = Field(
            default="auto",
            description="Background of the generated image. Must be one of transparent, opaque or auto. transparent requires output_format png or webp. Defaults to auto.",
        ),
        moderation: str = Field(
            default="auto",
            description="Content-moderation level. Must be low or auto. Defaults to auto.",
        ),
        output_compression: Union[int, str] = Field(
            default=100,
            description="Compression level (0-100) of the generated image. Only used with the jpeg and webp output formats. Defaults to 100.",
        ),
        output_format: str = Field(
            default="png",
            description="Format of the generated image. Must be one of png, jpeg or webp. Defaults to png.",
        ),
        quality: str = Field(
            default="auto",
            description="The quality of the generated image. Must be one of auto, high, medium or low. Defaults to auto.",
        ),
        size: str = Field(
            default="auto",
            description="The size of the generated image. Must be one of 1024x1024, 1536x1024, 1024x1536 or auto. Defaults to auto.",
        ),
    ) -> str:
        logger.debug(f"generate_image called with prompt='{prompt[:30]}...'")
        request = GenerationRequest(
            prompt=prompt,
            output_path=output_path,
            model=CURRENT_MODEL,
            options={
                "background": background,
                "moderation": moderation,
                "output_compression": output_compression,
                "output_format": output_format,
                "quality": quality,
                "size": size,
            },
        )
        return format_tool_result(await generate_image_core(request, api_client))

    @mcp.tool(
        name="edit_image",
        description=f"Edits an image given a prompt using {CURRENT_MODEL}.",
    )
    async def edit_image(
        prompt: str = Field(
            description="A text description of the desired edit. The maximum length is 32000 characters."
        ),
        input_path: str = Field(
            description="The path of the image to edit. Must be an existing png, webp or jpg file."
        ),
        output_path: str = Field(
            description="The path of the edited image. Must be absolute path."
        ),
        mask_path: str = Field(
            default="",
            description="Optional path of a png mask whose fully transparent areas indicate where the image should be edited. Leave empty to edit the whole image.",
        ),
        quality: str = Field(
            default="auto",
            description="The quality of the edited image. Must be one of auto, high, medium or low. Defaults to auto.",
        ),
        size: str = Field(
            default="auto",
            description="The size of the edited image. Must be one of 1024x1024, 1536x1024, 1024x1536 or auto. Defaults to auto.",
        ),
    ) -> str:
        logger.debug(
            f"edit_image called with input={input_path}, mask={mask_path!r}"
        )
        request = EditRequest(
            prompt=prompt,
            output_path=output_path,
            model=CURRENT_MODEL,
            input_path=input_path,
            mask_path=mask_path,
            options={"quality": quality, "size": size},
        )
        return format_tool_result(
            await edit_image_core(request, api_client), action="edited"
        )

    return mcp
