from openai_image_mcp.providers.base_provider import BaseImageProvider
from openai_image_mcp.providers.http_provider import ImageApiClient
from openai_image_mcp.providers.openai_sdk_provider import OpenAISDKProvider

__all__ = ["BaseImageProvider", "ImageApiClient", "OpenAISDKProvider"]
