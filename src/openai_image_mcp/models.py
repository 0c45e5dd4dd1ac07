from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Union

from openai_image_mcp.errors import ImageToolError

LEGACY_MODELS = ("dall-e-2", "dall-e-3")
CURRENT_MODEL = "gpt-image-1"


class GenerationRequest(BaseModel):
    prompt: str
    output_path: str
    model: str
    options: Dict[str, Any] = Field(default_factory=dict)


class EditRequest(GenerationRequest):
    input_path: str
    mask_path: str = ""


# Option records carry values that validation.OPTION_TABLES has already checked.
class LegacyImageOptions(BaseModel):
    quality: str = "standard"
    size: str = "1024x1024"
    style: str = "vivid"


class GenerationOptions(BaseModel):
    quality: str = "auto"
    size: str = "auto"
    background: str = "auto"
    moderation: str = "auto"
    output_compression: int = 100
    output_format: str = "png"


class EditOptions(BaseModel):
    quality: str = "auto"
    size: str = "auto"


class JsonBody(BaseModel):
    fields: Dict[str, Any]


class FormField(BaseModel):
    name: str
    value: str


class FormFile(BaseModel):
    name: str
    filename: str
    stream: Any
    content_type: Optional[str] = None


class MultipartForm(BaseModel):
    parts: List[Union[FormFile, FormField]] = Field(default_factory=list)

    def part_names(self) -> List[str]:
        return [part.name for part in self.parts]


OutboundRequest = Union[JsonBody, MultipartForm]


class ApiResponse(BaseModel):
    status_code: int
    body: bytes = b""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class ImageToolResponse(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    saved_path: Optional[str] = None
    error: Optional[ImageToolError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
