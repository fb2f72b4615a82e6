from .coordinator import UploadCoordinator
from .ledger import UploadLedger
from .models import (
    AgentConfig,
    Disposition,
    RequestBuildError,
    RequestConfig,
    ScanError,
    ScanSummary,
    UploadAgentError,
    UploadRecord,
    UploadResult,
    UploadTask,
)
from .request_builder import build_request
from .scanner import FileScanner
from .uploader import HttpUploader

__version__ = "0.1.0"

__all__ = [
    "UploadCoordinator",
    "UploadLedger",
    "AgentConfig",
    "Disposition",
    "RequestBuildError",
    "RequestConfig",
    "ScanError",
    "ScanSummary",
    "UploadAgentError",
    "UploadRecord",
    "UploadResult",
    "UploadTask",
    "build_request",
    "FileScanner",
    "HttpUploader",
]
