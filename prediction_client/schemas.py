"""Pydantic models for the prediction service response."""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class BoundingBox(BaseModel):
    """Bounding box corners as reported by the service (xyxy format).

    Coordinate ordering is not validated; the values are server-defined.
    """

    model_config = ConfigDict(frozen=True)

    x1: float = Field(..., description="Top-left X coordinate")
    y1: float = Field(..., description="Top-left Y coordinate")
    x2: float = Field(..., description="Bottom-right X coordinate")
    y2: float = Field(..., description="Bottom-right Y coordinate")


class Detection(BaseModel):
    """Single classification candidate."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str = Field(..., min_length=1, description="Class label from the server vocabulary")
    confidence: float = Field(..., description="Server confidence score")
    is_success: bool = Field(
        False, alias="isSuccess", description="Server-side correctness judgement"
    )
    bounding_box: Optional[BoundingBox] = Field(None, description="Detected region")
    description: str = Field("", description="Human-readable explanation")


class PredictionResponse(BaseModel):
    """Decoded response of the predict endpoint."""

    model_config = ConfigDict(frozen=True)

    filename: str = ""
    detections: Tuple[Detection, ...]

    @property
    def primary(self) -> Optional[Detection]:
        """First detection in server ranking order, if any."""
        if not self.detections:
            return None
        return self.detections[0]


def encode_prediction(response: PredictionResponse) -> str:
    """Serialize a response back to the wire schema."""
    return response.model_dump_json(by_alias=True, exclude_none=True)
