"""Pydantic schemas for the image generation route."""

from pydantic import AliasChoices, BaseModel, Field


class ImageGenerationBody(BaseModel):
    model: str | None = None
    prompt: str = Field(min_length=1)
    negative_prompt: str = ""
    ratio: str = "1:1"
    resolution: str = "2k"
    sample_strength: float = Field(default=0.5, ge=0.0, le=1.0)
    image: str | None = Field(
        default=None,
        validation_alias=AliasChoices("image", "file_path", "filePath"),
        description="Reference image as local path, URL or data URI.",
    )


class ImageData(BaseModel):
    url: str | None


class ImageGenerationResponse(BaseModel):
    created: int
    data: list[ImageData]
