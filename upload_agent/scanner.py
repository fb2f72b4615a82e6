"""
Module for walking folders and producing upload candidates.
"""
import logging
import os
from pathlib import Path
from typing import Iterator, Union

from .models import ScanError, UploadTask

logger = logging.getLogger(__name__)


class CandidateSource:
    """Produces the next batch of candidate files for one tick."""

    def candidates(self) -> Iterator[UploadTask]:
        raise NotImplementedError


class FileScanner(CandidateSource):
    """Walks a folder tree depth-first and yields every file in it."""

    def __init__(self, root: Union[str, Path]):
        """Initialize the file scanner.

        Args:
            root: Root folder to walk on every scan
        """
        self.root = Path(root)

    def candidates(self) -> Iterator[UploadTask]:
        """Walk the root folder, yielding one task per non-directory entry.

        Entries are visited in name order and subfolders are descended into
        as they are reached. Symlinks are never followed into folders. A root
        that is itself a file yields that single file.

        Raises:
            ScanError: If the walk hits a filesystem error. The rest of the
                walk is abandoned.
        """
        if self.root.exists() and not self.root.is_dir():
            logger.debug(f"Upload root {self.root} is a file, not a folder")
            yield UploadTask(path=self.root.absolute())
            return

        yield from self._walk(self.root)

    def _walk(self, folder: Path) -> Iterator[UploadTask]:
        try:
            with os.scandir(folder) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            raise ScanError(f"Error walking folder {folder}: {e}") from e

        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                raise ScanError(f"Error reading entry {entry.path}: {e}") from e

            if is_dir:
                yield from self._walk(Path(entry.path))
            else:
                yield UploadTask(path=Path(entry.path).absolute())
