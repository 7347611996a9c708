"""Upload & prediction client for the inspection camera."""

__version__ = "0.1.0"

from .outcome import Failure, FailureReason, Success, UploadError, UploadOutcome
from .schemas import BoundingBox, Detection, PredictionResponse
from .uploader import PredictionUploader, UploadState

__all__ = [
    "__version__",
    "BoundingBox",
    "Detection",
    "Failure",
    "FailureReason",
    "PredictionResponse",
    "PredictionUploader",
    "Success",
    "UploadError",
    "UploadOutcome",
    "UploadState",
]
