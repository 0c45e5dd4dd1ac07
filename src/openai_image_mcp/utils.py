import logging
from pathlib import Path

from openai_image_mcp.errors import ImageWriteError

logger = logging.getLogger(__name__)


def write_image_bytes(output_path: str, image_bytes: bytes) -> Path:
    """Create or truncate ``output_path`` and write the image into it."""
    path = Path(output_path)
    try:
        with open(path, "wb") as f:
            f.write(image_bytes)
    except OSError as e:
        logger.error(f"Failed to write image to {path}: {e}")
        raise ImageWriteError(str(path), e.strerror or str(e)) from e
    logger.info(f"Image saved to {path} ({len(image_bytes)} bytes)")
    return path
