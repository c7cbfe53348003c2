#!/usr/bin/env python3
"""
Recursive directory scanning for comic archives the target reader cannot open.
Results are pushed to a listener as they are produced.
"""

import logging
import os
import threading
from pathlib import Path
from typing import ClassVar

from .archive_inspector import ArchiveInspector
from .errors import RepackerError
from .models import (
    ScanResult,
    SCAN_PROGRESS,
    SCAN_RESULT,
    SCAN_CANCELLED,
    SCAN_COMPLETE,
)


class CancellationToken:
    """Flag set by the controller and polled by a running scan."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set()


class DirectoryScanner:
    """Walks a directory tree and inspects every candidate archive."""

    CANDIDATE_EXTENSIONS: ClassVar[set[str]] = {'.cbr', '.cbz', '.rar', '.zip'}

    def __init__(self, inspector=None, logger=None):
        self.logger = logger or logging.getLogger(__name__)
        self.inspector = inspector or ArchiveInspector(logger=self.logger)

    @classmethod
    def is_candidate(cls, file_path):
        """Check if a file has a comic archive extension."""
        return Path(file_path).suffix.lower() in cls.CANDIDATE_EXTENSIONS

    @staticmethod
    def is_hidden(name):
        return name.startswith('.')

    def scan(self, root_dir, token=None, emit=None):
        """
        Scan root_dir depth-first in lexical order.

        Emits ``scan-progress`` (running candidate count) and ``scan-result``
        for every candidate, then exactly one terminal event. The token is
        checked before every entry; an inspection already running is not
        interrupted.

        Args:
            root_dir: Directory to scan
            token: CancellationToken polled between entries
            emit: Callable ``emit(event_name, payload)``

        Returns:
            str: The terminal event emitted (``scan-complete`` or ``scan-cancelled``)
        """
        root_dir = Path(root_dir).absolute()
        token = token or CancellationToken()
        count = 0

        self.logger.info(f"Scanning directory: {root_dir}")

        if token.cancelled:
            return self._cancelled(emit, count)

        for entry in self._walk(root_dir):
            if token.cancelled:
                return self._cancelled(emit, count)

            file_path = Path(entry.path)
            try:
                if entry.is_dir(follow_symlinks=False):
                    continue
                if not entry.is_file():
                    if entry.is_symlink():
                        self.logger.warning(f"Error reading entry: broken symlink {file_path}")
                    continue
            except OSError as e:
                self.logger.warning(f"Error reading entry: {file_path}: {e}")
                continue

            if not self.is_candidate(file_path):
                continue

            count += 1
            self._emit(emit, SCAN_PROGRESS, count)
            self._emit(emit, SCAN_RESULT, self.inspect_file(file_path))

        self.logger.info(f"Scan complete: {count} archives found in {root_dir}")
        self._emit(emit, SCAN_COMPLETE)
        return SCAN_COMPLETE

    def _walk(self, directory):
        """
        Yield the non-hidden entries below directory depth-first, sorted by name.

        Files and subdirectories are interleaved; a subdirectory's contents
        follow the subdirectory itself. Symlinked directories are not entered.
        """
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            self.logger.warning(f"Error reading entry: {directory}: {e}")
            return

        for entry in entries:
            if self.is_hidden(entry.name):
                continue
            yield entry
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                continue
            if is_dir:
                yield from self._walk(entry.path)

    def inspect_file(self, file_path):
        """Inspect one file, turning any failure into an Error result."""
        try:
            info = self.inspector.inspect(file_path)
        except RepackerError as e:
            self.logger.error(f"Error scanning {file_path}: {e}")
            return ScanResult.from_error(file_path, e)
        except Exception as e:
            self.logger.exception(f"Error scanning {file_path}: {e}")
            return ScanResult.from_error(file_path, e)
        return ScanResult.from_info(file_path, info)

    def _cancelled(self, emit, count):
        self.logger.info(f"Scan cancelled after {count} archives")
        self._emit(emit, SCAN_CANCELLED)
        return SCAN_CANCELLED

    def _emit(self, emit, event, payload=None):
        # Delivery is best-effort; a failing listener never stops the scan
        if emit is None:
            return
        try:
            emit(event, payload)
        except Exception as e:
            self.logger.warning(f"Failed to emit {event}: {e}")
