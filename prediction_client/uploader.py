"""Upload orchestrator for the prediction service."""

import logging
import mimetypes
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

import httpx

from .classifier import (
    EmptyPayload,
    ExchangeResult,
    ProtocolFailure,
    TransportFailure,
    classify_error,
    classify_response,
)
from .config import Settings
from .config import settings as default_settings
from .locks import PathLike, is_file_locked, read_file
from .notifications import LoggingNotifier, Notifier
from .outcome import Failure, FailureReason, Success, UploadError, UploadOutcome
from .sanitizer import ResponseDecodeError, decode_prediction
from .schemas import PredictionResponse

logger = logging.getLogger(__name__)


class UploadState(str, Enum):
    """States of a single upload attempt."""

    IDLE = "idle"
    CHECKING_FILE = "checking_file"
    AWAITING_UNLOCK = "awaiting_unlock"
    READING = "reading"
    UPLOADING = "uploading"
    CLASSIFYING = "classifying"
    DECODING = "decoding"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class UploadAttempt:
    """One pass through the upload state machine.

    Attempts share nothing but the uploader's collaborators (settings,
    HTTP client, notifier), so several may run at once.
    """

    def __init__(
        self,
        uploader: "PredictionUploader",
        file_path: PathLike,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.file_path = Path(file_path)
        self.state = UploadState.IDLE
        self.history: List[UploadState] = [UploadState.IDLE]
        self.lock_polls = 0
        self._uploader = uploader
        self._cancel_event = cancel_event

    def run(self) -> UploadOutcome:
        """Drive the attempt to a terminal outcome."""
        try:
            response = self._run()
        except UploadError as e:
            self._enter(UploadState.FAILED)
            failure = e.failure
            logger.error(f"Upload of {self.file_path} failed: {failure}")
            self._uploader.notifier.notify(False, failure.user_message)
            return failure

        self._enter(UploadState.SUCCEEDED)
        logger.info(
            f"Upload of {self.file_path.name} succeeded: "
            f"label={response.detections[0].label!r}"
        )
        return Success(response)

    def _run(self) -> PredictionResponse:
        self._check_file()
        self._await_unlock()
        data = self._read()
        result = self._send(data)
        body = self._classify(result)
        return self._decode(body)

    def _enter(self, state: UploadState) -> None:
        self.state = state
        self.history.append(state)
        logger.debug(f"{self.file_path.name}: -> {state.value}")

    def _check_cancelled(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise UploadError(
                FailureReason.CANCELLED, f"Upload of {self.file_path} cancelled"
            )

    def _file_missing(self) -> UploadError:
        return UploadError(FailureReason.FILE_NOT_FOUND, f"File not exist: {self.file_path}")

    def _check_file(self) -> None:
        self._enter(UploadState.CHECKING_FILE)
        if not self.file_path.is_file():
            raise self._file_missing()

    def _is_locked(self) -> bool:
        try:
            return self._uploader.lock_probe(self.file_path)
        except FileNotFoundError:
            raise self._file_missing() from None

    def _await_unlock(self) -> None:
        self._enter(UploadState.AWAITING_UNLOCK)
        interval = self._uploader.settings.poll_interval
        timeout = self._uploader.settings.lock_timeout

        while self._is_locked():
            self._check_cancelled()
            waited = self.lock_polls * interval
            if timeout is not None and waited >= timeout:
                raise UploadError(
                    FailureReason.LOCK_TIMEOUT,
                    f"File {self.file_path} is still locked after {waited:.1f}s",
                )
            message = f"File {self.file_path} is locked, waiting..."
            logger.debug(message)
            self._uploader.notifier.notify(False, message)
            self.lock_polls += 1
            self._uploader.sleep(interval)

        self._check_cancelled()

    def _read(self) -> bytes:
        self._enter(UploadState.READING)
        try:
            return read_file(self.file_path)
        except OSError as e:
            raise UploadError(
                FailureReason.FILE_NOT_FOUND, f"Unable to read {self.file_path}: {e}"
            ) from e

    def _send(self, data: bytes) -> ExchangeResult:
        self._check_cancelled()
        self._enter(UploadState.UPLOADING)
        settings = self._uploader.settings
        url = settings.predict_url
        files = {
            settings.upload_field_name: (
                self.file_path.name,
                data,
                self._uploader.content_type_for(self.file_path),
            )
        }
        logger.debug(f"url: {url} filePath: {self.file_path} ({len(data)} bytes)")

        try:
            response = self._uploader.client.post(
                url, files=files, headers={"Accept": "application/json"}
            )
        except httpx.RequestError as e:
            self._enter(UploadState.CLASSIFYING)
            return classify_error(e)

        self._enter(UploadState.CLASSIFYING)
        return classify_response(response)

    def _classify(self, result: ExchangeResult) -> str:
        url = self._uploader.settings.predict_url

        if isinstance(result, TransportFailure):
            logger.error(f"url {url} error {result.message}")
            raise UploadError(FailureReason.TRANSPORT_FAILURE, result.message)

        if isinstance(result, ProtocolFailure):
            logger.error(
                f"url {url} error {result.message} "
                f"error code {result.status_code} Data {result.body}"
            )
            raise UploadError(
                FailureReason.PROTOCOL_FAILURE,
                result.message,
                status_code=result.status_code,
                body=result.body,
            )

        if isinstance(result, EmptyPayload):
            logger.error(f"url {url} returned an empty body")
            raise UploadError(
                FailureReason.EMPTY_PAYLOAD,
                "Response body is empty",
                status_code=result.status_code,
            )

        logger.debug(f"url {url} Data {result.body}")
        return result.body

    def _decode(self, body: str) -> PredictionResponse:
        self._enter(UploadState.DECODING)
        try:
            response = decode_prediction(body)
        except ResponseDecodeError as e:
            raise UploadError(FailureReason.MALFORMED_RESPONSE, str(e), body=body) from e

        if not response.detections:
            raise UploadError(
                FailureReason.NO_DETECTIONS,
                f"No detections for {response.filename or self.file_path.name}",
            )
        return response


class PredictionUploader:
    """Uploads images to the prediction service and reports the outcome.

    Example:
        ```python
        with PredictionUploader(notifier=RecordingNotifier()) as uploader:
            outcome = uploader.predict("capture.jpg")
            if outcome.ok:
                print(outcome.response.primary.label)
        ```
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        notifier: Optional[Notifier] = None,
        client: Optional[httpx.Client] = None,
        lock_probe: Callable[[Path], bool] = is_file_locked,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the uploader.

        Args:
            settings: Endpoint and polling configuration.
            notifier: Sink for operator-facing messages.
            client: HTTP client; one is created (and owned) when omitted.
            lock_probe: Returns True while the file is held by a writer.
            sleep: Called with the poll interval between lock probes.
        """
        self.settings = settings or default_settings
        self.notifier = notifier or LoggingNotifier()
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=self.settings.request_timeout)
        self.lock_probe = lock_probe
        self.sleep = sleep
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    def content_type_for(self, path: Path) -> str:
        """Content type declared on the uploaded part."""
        configured = self.settings.upload_content_type
        if configured != "auto":
            return configured
        guessed, _ = mimetypes.guess_type(path.name)
        return guessed or "application/octet-stream"

    def new_attempt(
        self, file_path: PathLike, cancel_event: Optional[threading.Event] = None
    ) -> UploadAttempt:
        return UploadAttempt(self, file_path, cancel_event)

    def predict(
        self, file_path: PathLike, cancel_event: Optional[threading.Event] = None
    ) -> UploadOutcome:
        """Upload a file and block until the outcome is known."""
        return self.new_attempt(file_path, cancel_event).run()

    def start_upload(
        self,
        file_path: PathLike,
        on_success: Callable[[PredictionResponse], None],
        on_failure: Callable[[Failure], None],
        cancel_event: Optional[threading.Event] = None,
    ) -> "Future[UploadOutcome]":
        """
        Upload a file in the background.

        Exactly one of the callbacks is invoked, once, from a worker thread.
        An exception raised by a callback surfaces through the returned
        future and never triggers the other callback.

        Args:
            file_path: Image to upload.
            on_success: Receives the decoded response.
            on_failure: Receives the failure.
            cancel_event: Set to abandon the attempt before the upload is sent.

        Returns:
            Future resolving to the outcome after the callback has run.
        """
        return self._get_executor().submit(
            self._run_and_deliver, file_path, on_success, on_failure, cancel_event
        )

    def _run_and_deliver(
        self,
        file_path: PathLike,
        on_success: Callable[[PredictionResponse], None],
        on_failure: Callable[[Failure], None],
        cancel_event: Optional[threading.Event],
    ) -> UploadOutcome:
        outcome = self.predict(file_path, cancel_event)
        try:
            if isinstance(outcome, Success):
                on_success(outcome.response)
            else:
                on_failure(outcome)
        except Exception:
            logger.exception(f"Upload callback for {file_path} raised")
            raise
        return outcome

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            with self._executor_lock:
                if self._executor is None:
                    self._executor = ThreadPoolExecutor(
                        max_workers=self.settings.max_workers,
                        thread_name_prefix="upload",
                    )
        return self._executor

    def close(self) -> None:
        """Wait for background uploads and release the HTTP client."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "PredictionUploader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
