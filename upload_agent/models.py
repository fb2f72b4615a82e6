"""
Module containing data models for the upload agent.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

LEDGER_SEPARATOR = " - "
LEDGER_MATCH_MODES = ("exact", "substring")


class UploadAgentError(Exception):
    """Base class for upload agent errors."""


class RequestBuildError(UploadAgentError):
    """Raised when an upload request cannot be built for a file."""


class ScanError(UploadAgentError):
    """Raised when a directory walk hits a filesystem error."""


class Disposition(str, Enum):
    """Terminal state of a file within one tick."""
    SKIPPED = "skipped"
    UPLOADED = "uploaded"
    FAILED = "failed"


@dataclass(frozen=True)
class RequestConfig:
    """Upload parameters shared by every request in a process run."""
    server_url: str
    method: str = "POST"
    headers: Tuple[Tuple[str, str], ...] = ()
    body_data: str = ""

    def __post_init__(self):
        """Validate and normalise the request configuration."""
        if not self.server_url:
            raise ValueError("server_url cannot be empty")
        if not self.method or not self.method.strip():
            raise ValueError("method cannot be empty")
        object.__setattr__(self, "method", self.method.strip().upper())
        object.__setattr__(self, "headers", tuple(self.headers))


@dataclass(frozen=True)
class AgentConfig:
    """Complete agent configuration, built once at startup."""
    upload_dir: Path
    request: RequestConfig
    ledger_file: Path = Path("uploaded_files.log")
    ledger_match: str = "exact"
    log_file: Optional[Path] = None
    scan_interval: float = 1.0
    timeout: Optional[float] = 30.0
    max_attempts: int = 1

    def __post_init__(self):
        if self.ledger_match not in LEDGER_MATCH_MODES:
            raise ValueError(
                f"ledger_match must be one of {', '.join(LEDGER_MATCH_MODES)}, "
                f"got {self.ledger_match!r}"
            )
        if self.scan_interval < 0:
            raise ValueError("scan_interval cannot be negative")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")


@dataclass(frozen=True)
class UploadRecord:
    """One ledger entry: a path and the time it was uploaded."""
    timestamp: str
    path: str

    def to_line(self) -> str:
        return f"{self.timestamp}{LEDGER_SEPARATOR}{self.path}\n"

    @classmethod
    def from_line(cls, line: str) -> Optional["UploadRecord"]:
        """Parse a ledger line, returning None for lines that are not records."""
        timestamp, sep, path = line.rstrip("\r\n").partition(LEDGER_SEPARATOR)
        if not sep or not path:
            return None
        return cls(timestamp=timestamp.strip(), path=path)


@dataclass
class UploadTask:
    """A file discovered during a scan, pending disposition."""
    path: Path
    discovered_at: datetime = field(default_factory=datetime.now)


@dataclass
class UploadResult:
    """Represents the result of a single file upload."""
    file_path: Path
    success: bool
    status_code: Optional[int] = None
    status: Optional[str] = None
    error: Optional[str] = None
    size_bytes: Optional[int] = None


@dataclass
class ScanSummary:
    """Represents a summary of one scan-and-upload tick."""
    total_files: int = 0
    uploaded: int = 0
    skipped: int = 0
    failed: int = 0
    aborted: bool = False
    results: List[UploadResult] = field(default_factory=list)

    def add(self, disposition: Disposition,
            result: Optional[UploadResult] = None) -> None:
        self.total_files += 1
        if disposition is Disposition.UPLOADED:
            self.uploaded += 1
        elif disposition is Disposition.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1
        if result is not None:
            self.results.append(result)
