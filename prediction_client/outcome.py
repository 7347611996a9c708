"""Terminal outcomes of an upload attempt."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .schemas import PredictionResponse


class FailureReason(str, Enum):
    """Why an upload attempt failed."""

    FILE_NOT_FOUND = "file_not_found"
    TRANSPORT_FAILURE = "transport_failure"
    PROTOCOL_FAILURE = "protocol_failure"
    EMPTY_PAYLOAD = "empty_payload"
    MALFORMED_RESPONSE = "malformed_response"
    NO_DETECTIONS = "no_detections"
    # Only produced when the caller opts into cancellation or a lock timeout
    CANCELLED = "cancelled"
    LOCK_TIMEOUT = "lock_timeout"


GENERIC_FAILURE_MESSAGE = "Something went wrong!!!"
NO_DETECTIONS_MESSAGE = "Unable to Identify Object, Please Try Again!!!"


@dataclass(frozen=True)
class Success:
    """Upload produced at least one detection."""

    response: PredictionResponse

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Upload ended without a usable prediction."""

    reason: FailureReason
    message: str
    status_code: Optional[int] = None
    body: Optional[str] = None  # raw body kept for diagnostics

    @property
    def ok(self) -> bool:
        return False

    @property
    def user_message(self) -> str:
        """Text shown to the operator for this failure."""
        if self.reason is FailureReason.NO_DETECTIONS:
            return NO_DETECTIONS_MESSAGE
        if self.reason in (FailureReason.FILE_NOT_FOUND, FailureReason.LOCK_TIMEOUT):
            return self.message
        return GENERIC_FAILURE_MESSAGE

    def __str__(self) -> str:
        return f"{self.reason.value}: {self.message}"


UploadOutcome = Union[Success, Failure]


class UploadError(Exception):
    """Raised inside an attempt to end it with a failure."""

    def __init__(
        self,
        reason: FailureReason,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.failure = Failure(
            reason=reason, message=message, status_code=status_code, body=body
        )

    @property
    def reason(self) -> FailureReason:
        return self.failure.reason
