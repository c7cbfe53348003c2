#!/usr/bin/env python3
"""
Controller surface used by front ends: start and cancel scans, convert files.

Each scan runs on its own daemon thread and reports through a listener
callable. Conversions run on a bounded thread pool, since extraction and
zipping both block.
"""

import itertools
import logging
import multiprocessing
import threading
from concurrent.futures import ThreadPoolExecutor

from .core.archive_inspector import ArchiveInspector
from .core.errors import RepackerError
from .core.path_validator import PathValidator
from .core.repacker import ArchiveRepacker
from .core.scanner import DirectoryScanner, CancellationToken
from .core.seven_zip import SevenZipTool


class ScanHandle:
    """Identity of one scan. Cancelling a handle only ever affects its own scan."""

    def __init__(self, generation, root_dir):
        self.generation = generation
        self.root_dir = root_dir
        self.token = CancellationToken()
        self.outcome = None
        self.thread = None
        self._finished = threading.Event()

    @property
    def done(self):
        return self._finished.is_set()

    def wait(self, timeout=None):
        """Block until the scan has emitted its terminal event. Returns True if it has."""
        return self._finished.wait(timeout)

    def __repr__(self):
        return f"ScanHandle(generation={self.generation}, root_dir={str(self.root_dir)!r})"


class RepackerService:
    """Owns the scanner, the repacker and the workers they run on."""

    def __init__(self, tool=None, workers=0, temp_root=None, verify_pages=False, logger=None):
        """
        Args:
            tool: SevenZipTool (or compatible) shared by inspection and extraction
            workers: Conversion pool size (0 = auto-detect)
            temp_root: Base directory for conversion temp directories
            verify_pages: Verify extracted pages with Pillow before zipping
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.tool = tool or SevenZipTool(logger=self.logger)
        self.scanner = DirectoryScanner(ArchiveInspector(self.tool, self.logger), self.logger)
        self.repacker = ArchiveRepacker(self.tool, temp_root=temp_root,
                                        verify_pages=verify_pages, logger=self.logger)

        if workers is None or workers <= 0:
            workers = max(1, multiprocessing.cpu_count() // 2)
        self.workers = workers

        self._lock = threading.Lock()
        self._generations = itertools.count(1)
        self._active_scan = None
        self._executor = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()

    @property
    def active_scan(self):
        with self._lock:
            return self._active_scan

    def scan_directory(self, path, listener=None):
        """
        Start scanning path in the background and return immediately.

        Starting a new scan makes it the active one; an older scan keeps
        running until it finishes or is cancelled through its own handle.

        Args:
            path: Directory to scan
            listener: Callable ``listener(event_name, payload)``

        Returns:
            ScanHandle: Identity of the new scan

        Raises:
            InputPathError: If path is not an existing directory
        """
        root_dir = PathValidator.validate_directory_path(path)

        with self._lock:
            handle = ScanHandle(next(self._generations), root_dir)
            previous = self._active_scan
            self._active_scan = handle

        if previous is not None and not previous.done:
            self.logger.debug(f"Scan {previous.generation} superseded by scan {handle.generation}")

        handle.thread = threading.Thread(
            target=self._run_scan,
            args=(handle, listener),
            name=f"scan-{handle.generation}",
            daemon=True,
        )
        handle.thread.start()
        return handle

    def _run_scan(self, handle, listener):
        try:
            handle.outcome = self.scanner.scan(handle.root_dir, handle.token, listener)
        finally:
            handle._finished.set()

    def cancel_scan(self, handle=None):
        """
        Request cooperative cancellation.

        Args:
            handle: Scan to cancel. The active scan if omitted.

        Returns:
            bool: True if a running scan was signalled
        """
        target = handle or self.active_scan
        if target is None:
            self.logger.debug("Cancel requested but no scan has been started")
            return False
        if target.done:
            self.logger.warning(f"Ignoring cancel for finished scan {target.generation}")
            return False

        self.logger.info(f"Cancelling scan {target.generation}")
        target.token.cancel()
        return True

    def _get_executor(self):
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self.workers,
                                                    thread_name_prefix="convert")
            return self._executor

    def submit_conversion(self, path, output_dir=None):
        """Queue a conversion on the worker pool. Returns a Future resolving to the output path."""
        return self._get_executor().submit(self.repacker.convert, path, output_dir)

    def convert_file(self, path, output_dir=None):
        """
        Convert one file on the worker pool and wait for it.

        Returns:
            str: Path of the written CBZ

        Raises:
            RepackerError: Any conversion failure, with a descriptive message
        """
        return self.submit_conversion(path, output_dir).result()

    def convert_many(self, paths, output_dir=None, sequential=False):
        """
        Convert several files on the worker pool. A failure is reported for its
        file and the rest of the batch carries on.

        Args:
            paths: Archives to convert
            output_dir: Destination directory (each source's directory if omitted)
            sequential: Start each conversion only after the previous one finished

        Yields:
            tuple: (path, output_path or None, error message or None), in input order
        """
        if sequential:
            for path in paths:
                yield self._outcome(path, self.submit_conversion(path, output_dir))
            return

        futures = [(path, self.submit_conversion(path, output_dir)) for path in paths]
        for path, future in futures:
            yield self._outcome(path, future)

    def _outcome(self, path, future):
        try:
            return path, future.result(), None
        except RepackerError as e:
            self.logger.error(f"Error converting {path}: {e}")
            return path, None, str(e)
        except Exception as e:
            self.logger.exception(f"Error converting {path}: {e}")
            return path, None, str(e)

    def shutdown(self, wait=True):
        """Stop the conversion pool. Running scans are daemon threads and are left alone."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
