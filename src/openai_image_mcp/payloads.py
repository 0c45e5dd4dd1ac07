import asyncio
import logging
import mimetypes
import os
from contextlib import ExitStack, asynccontextmanager
from typing import AsyncIterator

from openai_image_mcp.errors import ImageReadError, InvalidArgumentError
from openai_image_mcp.models import (
    CURRENT_MODEL,
    EditOptions,
    FormField,
    FormFile,
    GenerationOptions,
    JsonBody,
    MultipartForm,
)

logger = logging.getLogger(__name__)

COMPRESSIBLE_FORMATS = ("jpeg", "webp")


def build_generation_body(prompt: str, options: GenerationOptions) -> JsonBody:
    fields = {
        "prompt": prompt,
        "background": options.background,
        "model": CURRENT_MODEL,
        "moderation": options.moderation,
        "output_format": options.output_format,
        "quality": options.quality,
        "size": options.size,
    }
    if options.output_format in COMPRESSIBLE_FORMATS:
        fields["output_compression"] = options.output_compression
    return JsonBody(fields=fields)


async def _open_file_part(stack: ExitStack, name: str, path: str) -> FormFile:
    try:
        stream = stack.enter_context(await asyncio.to_thread(open, path, "rb"))
    except OSError as e:
        raise ImageReadError(path, e.strerror or str(e)) from e
    filename = os.path.basename(path)
    content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
    return FormFile(
        name=name, filename=filename, stream=stream, content_type=content_type
    )


@asynccontextmanager
async def open_edit_form(
    prompt: str, input_path: str, mask_path: str, options: EditOptions
) -> AsyncIterator[MultipartForm]:
    """Yield the multipart form for an edit request.

    The image part comes first, then the mask part if ``mask_path`` is
    non-empty, then the text fields. Files opened here are closed when the
    block exits, whether it returns normally or raises.
    """
    if not input_path:
        raise InvalidArgumentError("input_path", input_path, "must not be empty")
    with ExitStack() as stack:
        form = MultipartForm()
        form.parts.append(await _open_file_part(stack, "image", input_path))
        if mask_path:
            form.parts.append(await _open_file_part(stack, "mask", mask_path))
        form.parts.extend(
            [
                FormField(name="prompt", value=prompt),
                FormField(name="model", value=CURRENT_MODEL),
                FormField(name="quality", value=options.quality),
                FormField(name="size", value=options.size),
            ]
        )
        logger.debug(f"Edit form parts: {form.part_names()}")
        yield form
