"""Pydantic schemas for the face encoding gateway."""

from pydantic import BaseModel, ConfigDict, Field


class FaceEncodingRequest(BaseModel):
    """Request body: the image to encode.

    ``imageUrl`` is optional at the schema level so that a missing value
    is answered with 400 instead of a schema validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    image_url: str | None = Field(default=None, alias="imageUrl")


class FaceEncodingResponse(BaseModel):
    """Encoding returned by the face recognition service."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"encoding": [-0.0913, 0.1187, 0.0342]}},
    )

    encoding: list[float]
