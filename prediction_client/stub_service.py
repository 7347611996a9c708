"""FastAPI stand-in for the prediction service.

Answers in the same schema as the real service, MongoDB wrapper keys
included, so the client can be exercised without a model server:

    uvicorn prediction_client.stub_service:app --port 8000
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from fastapi import FastAPI, File, HTTPException, UploadFile

from . import __version__
from .schemas import BoundingBox, Detection

logger = logging.getLogger(__name__)

DEFAULT_DETECTIONS = (
    Detection(
        label="Fuel Lid Close",
        confidence=0.93,
        is_success=False,
        bounding_box=BoundingBox(x1=112.0, y1=240.5, x2=388.0, y2=512.0),
        description="The fuel lid is fully closed.",
    ),
    Detection(
        label="Fuel Lid Open",
        confidence=0.05,
        is_success=False,
        description="The fuel lid is open.",
    ),
)


def create_app(detections: Optional[Sequence[Detection]] = None) -> FastAPI:
    """
    Create a stub prediction service.

    Args:
        detections: Detections returned for every upload, in ranking order.
            Defaults to DEFAULT_DETECTIONS.

    Returns:
        FastAPI application. ``app.state.uploads`` records
        ``(filename, content_type, size)`` for each accepted upload.
    """
    canned = list(DEFAULT_DETECTIONS if detections is None else detections)

    app = FastAPI(
        title="Prediction Service (stub)",
        description="Canned responses in the prediction service schema",
        version=__version__,
    )
    app.state.uploads = []

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    @app.post("/predict")
    async def predict(file: UploadFile = File(..., description="Image file to classify")):
        """Return the canned detections for an uploaded file."""
        contents = await file.read()
        if len(contents) == 0:
            raise HTTPException(status_code=400, detail="Empty file")

        logger.debug(
            f"Received {file.filename}: {len(contents)} bytes, "
            f"content type {file.content_type}"
        )
        app.state.uploads.append((file.filename, file.content_type, len(contents)))

        return {
            "_id": {"$oid": uuid.uuid4().hex[:24]},
            "created_at": {"$date": datetime.now(timezone.utc).isoformat()},
            "filename": file.filename,
            "detections": [
                det.model_dump(by_alias=True, exclude_none=True) for det in canned
            ],
        }

    return app


app = create_app()
