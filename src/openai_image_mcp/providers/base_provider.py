from abc import ABC, abstractmethod
from openai_image_mcp.models import LegacyImageOptions


class BaseImageProvider(ABC):
    @abstractmethod
    async def generate_image(
        self, prompt: str, model: str, options: LegacyImageOptions
    ) -> bytes:
        """
        Generates a single image for the prompt with already validated options.
        Returns the raw image bytes.
        """
        pass
