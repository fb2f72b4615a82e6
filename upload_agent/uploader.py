"""
Module for sending upload requests over HTTP.
"""
import logging
from pathlib import Path
from typing import Optional, Union

import requests
from tenacity import (
    Retrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
    before_log,
    after_log
)
from tenacity.wait import wait_base

from .ledger import UploadLedger
from .models import UploadResult

logger = logging.getLogger(__name__)

SUCCESS_STATUS = 200

TRANSPORT_ERRORS = (
    requests.ConnectionError,
    requests.Timeout,
)


def is_transport_error(exception: Exception) -> bool:
    """Check if an exception happened below the HTTP status layer.

    Args:
        exception: The exception to check

    Returns:
        True for connection, DNS and timeout failures
    """
    return isinstance(exception, TRANSPORT_ERRORS)


class HttpUploader:
    """Sends upload requests and records successful uploads in the ledger."""

    def __init__(self, ledger: UploadLedger, timeout: Optional[float] = 30.0,
                 max_attempts: int = 1,
                 wait: Optional[wait_base] = None,
                 session: Optional[requests.Session] = None):
        """Initialize the HTTP uploader.

        Args:
            ledger: Ledger that receives a record after each successful upload
            timeout: Request timeout in seconds
            max_attempts: Attempts per request on transport errors
            wait: Backoff between attempts
            session: HTTP session to send requests with
        """
        self.ledger = ledger
        self.timeout = timeout
        self.session = session or requests.Session()
        self._retrying = Retrying(
            retry=retry_if_exception(is_transport_error),
            stop=stop_after_attempt(max_attempts),
            wait=wait if wait is not None else wait_exponential(multiplier=1, min=1, max=10),
            before=before_log(logger, logging.DEBUG),
            after=after_log(logger, logging.DEBUG),
            reraise=True
        )

    def _send(self, request: requests.PreparedRequest) -> requests.Response:
        return self.session.send(request, timeout=self.timeout)

    def send(self, path: Union[str, Path],
             request: requests.PreparedRequest) -> UploadResult:
        """Send a built upload request for a file.

        Only HTTP 200 counts as success, and only a success is recorded.

        Args:
            path: Path of the file being uploaded
            request: Request built for the file

        Returns:
            UploadResult object
        """
        path = Path(path)
        size_bytes = len(request.body) if request.body else 0

        try:
            response = self._retrying(self._send, request)
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error uploading file {path}: {e}")
            return UploadResult(
                file_path=path,
                success=False,
                error=str(e),
                size_bytes=size_bytes
            )

        with response:
            status = f"{response.status_code} {response.reason or ''}".strip()
            logger.debug(f"Response body for {path}: {response.text}")

        if response.status_code != SUCCESS_STATUS:
            logger.error(f"Failed to upload file: {path}, Status: {status}")
            return UploadResult(
                file_path=path,
                success=False,
                status_code=response.status_code,
                status=status,
                error=f"Unexpected status {status}",
                size_bytes=size_bytes
            )

        logger.info(f"File uploaded successfully: {path}")
        self.ledger.record(path)
        return UploadResult(
            file_path=path,
            success=True,
            status_code=response.status_code,
            status=status,
            size_bytes=size_bytes
        )
