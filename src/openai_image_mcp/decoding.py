import base64
import binascii
import json
import logging

from openai_image_mcp.errors import ApiError, DecodeError
from openai_image_mcp.models import ApiResponse

logger = logging.getLogger(__name__)


def decode_direct(image_bytes: bytes) -> bytes:
    """SDK responses already carry the image bytes."""
    return image_bytes


def decode_envelope(response: ApiResponse) -> bytes:
    """Extract ``data[0].b64_json`` from a JSON response body.

    A non-2xx response is not parsed: the body text becomes the ``ApiError``
    message unchanged.
    """
    if not response.is_success:
        logger.error(f"Images API returned status {response.status_code}")
        raise ApiError(response.status_code, response.text)
    try:
        envelope = json.loads(response.body)
    except ValueError as e:
        raise DecodeError(f"Response body is not valid JSON: {e}") from e
    try:
        encoded = envelope["data"][0]["b64_json"]
    except (KeyError, IndexError, TypeError):
        raise DecodeError("Response JSON has no data[0].b64_json field.") from None
    if not isinstance(encoded, str) or not encoded:
        raise DecodeError("Response field data[0].b64_json is empty.")
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"data[0].b64_json is not valid base64: {e}") from e
