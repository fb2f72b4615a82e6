"""
Module for coordinating the scan, ledger check and upload of each file.
"""
import logging
import threading
from typing import Optional, Tuple

from .ledger import UploadLedger
from .models import (
    AgentConfig,
    Disposition,
    RequestBuildError,
    ScanError,
    ScanSummary,
    UploadResult,
    UploadTask,
)
from .monitor import IntervalPoller
from .request_builder import build_request
from .scanner import CandidateSource, FileScanner
from .uploader import HttpUploader

logger = logging.getLogger(__name__)


class UploadCoordinator:
    """Feeds every discovered file through the ledger gate and the uploader."""

    def __init__(self, config: AgentConfig,
                 ledger: Optional[UploadLedger] = None,
                 uploader: Optional[HttpUploader] = None,
                 source: Optional[CandidateSource] = None):
        """Initialize the upload coordinator.

        Args:
            config: Agent configuration
            ledger: Ledger to gate and record uploads. Built from config if None.
            uploader: Uploader to send requests. Built from config if None.
            source: Candidate source for each tick. Defaults to a FileScanner
                over config.upload_dir.
        """
        self.config = config
        self.ledger = ledger or UploadLedger(config.ledger_file, match=config.ledger_match)
        self.uploader = uploader or HttpUploader(
            self.ledger,
            timeout=config.timeout,
            max_attempts=config.max_attempts
        )
        self.source = source or FileScanner(config.upload_dir)
        self.poller = IntervalPoller(interval=config.scan_interval)

    def process_file(self, task: UploadTask) -> Disposition:
        """Disposition a single discovered file.

        Args:
            task: File discovered by the scan

        Returns:
            What happened to the file in this tick
        """
        disposition, _ = self._process(task)
        return disposition

    def _process(self, task: UploadTask) -> Tuple[Disposition, Optional[UploadResult]]:
        if self.ledger.is_uploaded(task.path):
            logger.debug(f"File already uploaded: {task.path}")
            return Disposition.SKIPPED, None

        try:
            request = build_request(task.path, self.config.request)
        except RequestBuildError as e:
            logger.error(str(e))
            return Disposition.FAILED, UploadResult(
                file_path=task.path,
                success=False,
                error=str(e)
            )

        result = self.uploader.send(task.path, request)
        if result.success:
            return Disposition.UPLOADED, result
        return Disposition.FAILED, result

    def run_tick(self) -> ScanSummary:
        """Walk the whole tree once, uploading every file not yet recorded.

        Returns:
            Summary of the tick
        """
        summary = ScanSummary()
        try:
            for task in self.source.candidates():
                disposition, result = self._process(task)
                summary.add(disposition, result)
        except ScanError as e:
            logger.error(f"Error walking through the directory: {e}")
            summary.aborted = True

        if summary.uploaded or summary.failed:
            logger.info(
                f"Scan complete: {summary.uploaded} uploaded, "
                f"{summary.failed} failed, {summary.skipped} skipped"
            )
        return summary

    def run_forever(self, stop_event: Optional[threading.Event] = None,
                    max_ticks: Optional[int] = None) -> None:
        """Run ticks on the configured interval until stopped.

        Args:
            stop_event: Event to signal termination
            max_ticks: Optional number of ticks after which to return
        """
        logger.info(
            f"Watching {self.config.upload_dir} every {self.config.scan_interval}s, "
            f"uploading to {self.config.request.server_url}"
        )
        self.poller.run(self.run_tick, stop_event=stop_event, max_ticks=max_ticks)
