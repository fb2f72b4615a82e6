"""
Module for recording and querying which files have already been uploaded.
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Union

from .models import LEDGER_MATCH_MODES, UploadRecord

logger = logging.getLogger(__name__)


class UploadLedger:
    """Append-only, line-oriented record of uploaded file paths."""

    def __init__(self, ledger_file: Path, match: str = "exact"):
        """Initialize the upload ledger.

        Args:
            ledger_file: Path to the ledger file. Created on first record.
            match: "exact" compares the recorded path field for equality,
                "substring" treats any line containing the path as a hit.
        """
        if match not in LEDGER_MATCH_MODES:
            raise ValueError(f"Unknown ledger match mode: {match}")
        self.ledger_file = Path(ledger_file)
        self.match = match

    def _read_lines(self) -> List[str]:
        with open(self.ledger_file, 'r', encoding='utf-8', errors='replace') as f:
            return [line.rstrip('\r\n') for line in f]

    def entries(self) -> List[UploadRecord]:
        """Return every parseable record in the ledger.

        Returns:
            List of UploadRecord, in file order. Empty if the ledger is
            missing or unreadable.
        """
        try:
            lines = self._read_lines()
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error(f"Error reading ledger file {self.ledger_file}: {e}")
            return []

        records = []
        for line in lines:
            if record := UploadRecord.from_line(line):
                records.append(record)
        return records

    def is_uploaded(self, path: Union[str, Path]) -> bool:
        """Check whether a file path has already been uploaded.

        Reads the whole ledger on every call. Read failures are treated as
        "not uploaded".

        Args:
            path: Path of the file to look up

        Returns:
            True if the ledger already holds the path
        """
        path = str(path)
        try:
            lines = self._read_lines()
        except FileNotFoundError:
            logger.debug(f"Ledger file {self.ledger_file} does not exist yet")
            return False
        except OSError as e:
            logger.error(f"Error reading ledger file {self.ledger_file}: {e}")
            return False

        if self.match == "substring":
            return any(path in line for line in lines)

        for line in lines:
            record = UploadRecord.from_line(line)
            if record and record.path == path:
                return True
        return False

    def record(self, path: Union[str, Path]) -> None:
        """Append an upload record for a file path.

        Write failures are logged and the record is lost.

        Args:
            path: Path of the uploaded file
        """
        record = UploadRecord(
            timestamp=datetime.now().astimezone().isoformat(timespec='seconds'),
            path=str(path)
        )
        try:
            self.ledger_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.ledger_file, 'a', encoding='utf-8') as f:
                f.write(record.to_line())
        except OSError as e:
            logger.error(f"Error writing to ledger file {self.ledger_file}: {e}")
            return

        logger.debug(f"Recorded upload of {record.path} in {self.ledger_file}")
