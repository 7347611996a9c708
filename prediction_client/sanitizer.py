"""Sanitizing and decoding of prediction payloads.

The upstream service stores its results in MongoDB and some payloads carry
extended-JSON wrapper keys such as ``{"$oid": "..."}`` or ``{"$date": ...}``.
These keys are renamed to ``oid`` and ``date`` while the document is being
parsed, so only object keys are touched and string values that happen to
contain ``$oid`` survive unchanged.
"""

import json
import logging
from typing import Any, Dict, List, Tuple

from pydantic import ValidationError

from .schemas import PredictionResponse

logger = logging.getLogger(__name__)

WRAPPER_KEYS = {
    "$oid": "oid",
    "$date": "date",
}


class ResponseDecodeError(ValueError):
    """Raised when a payload is not valid JSON or has the wrong shape."""


def _rename_wrapper_keys(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    return {WRAPPER_KEYS.get(key, key): value for key, value in pairs}


def _load(raw: str) -> Any:
    try:
        return json.loads(raw, object_pairs_hook=_rename_wrapper_keys)
    except json.JSONDecodeError as e:
        raise ResponseDecodeError(f"Invalid JSON payload: {e}") from e
    except RecursionError as e:
        raise ResponseDecodeError("Invalid JSON payload: nested too deeply") from e


def sanitize(raw: str) -> str:
    """Rewrite extended-JSON wrapper keys in a JSON document.

    Args:
        raw: JSON text as received from the service.

    Returns:
        Equivalent JSON text with ``$oid``/``$date`` keys renamed.

    Raises:
        ResponseDecodeError: If ``raw`` is not valid JSON.
    """
    return json.dumps(_load(raw))


def decode_prediction(raw: str) -> PredictionResponse:
    """
    Decode a raw payload into a PredictionResponse.

    Args:
        raw: JSON text from a usable payload.

    Returns:
        Decoded, immutable response.

    Raises:
        ResponseDecodeError: If the payload is not valid JSON or does not
            match the response schema.
    """
    data = _load(raw)
    if not isinstance(data, dict):
        raise ResponseDecodeError(
            f"Expected a JSON object, got {type(data).__name__}"
        )

    try:
        response = PredictionResponse.model_validate(data)
    except ValidationError as e:
        raise ResponseDecodeError(f"Unexpected response shape: {e}") from e

    logger.debug(
        f"Decoded response for {response.filename!r}: "
        f"{len(response.detections)} detections"
    )
    return response
