#!/usr/bin/env python3
"""
Console output for scans and conversions.
"""

import json
import sys
import threading
from collections import Counter

from .core.models import (
    ScanStatus,
    SCAN_PROGRESS,
    SCAN_RESULT,
    SCAN_CANCELLED,
    SCAN_COMPLETE,
)
from .core.filesystem_utils import FileSystemUtils


# Rows kept by --only-unsupported
ATTENTION_STATUSES = (ScanStatus.UNSUPPORTED, ScanStatus.CONVERTED, ScanStatus.ERROR)


def format_result_line(result):
    """One human readable line for a ScanResult."""
    if result.info is None:
        return f"[{result.status.value:<11}] {result.path}: {result.error}"
    info = result.info
    solid = "solid" if info.is_solid else "-"
    encrypted = " encrypted" if info.is_encrypted else ""
    reason = f" ({info.unsupported_reason})" if info.unsupported_reason else ""
    return (f"[{result.status.value:<11}] {info.file_type or '?':<6} {solid:<5} "
            f"{info.image_count:>4} images{encrypted}  {result.path}{reason}")


class ScanReporter:
    """Scan listener that prints results as they arrive and remembers them."""

    def __init__(self, logger, only_unsupported=False, as_json=False, stream=None):
        self.logger = logger
        self.only_unsupported = only_unsupported
        self.as_json = as_json
        self.stream = stream or sys.stdout
        self.results = []
        self.progress = 0
        self.outcome = None
        self._lock = threading.Lock()

    def __call__(self, event, payload=None):
        if event == SCAN_PROGRESS:
            self.progress = payload
            self.logger.debug(f"Found {payload} archives so far")
        elif event == SCAN_RESULT:
            with self._lock:
                self.results.append(payload)
            self.show(payload)
        elif event in (SCAN_COMPLETE, SCAN_CANCELLED):
            self.outcome = event

    def wants(self, result):
        return not self.only_unsupported or result.status in ATTENTION_STATUSES

    def show(self, result):
        if not self.wants(result):
            return
        if self.as_json:
            self.stream.write(json.dumps(result.to_dict()) + "\n")
            self.stream.flush()
        else:
            self.logger.info(format_result_line(result))

    def unsupported(self):
        with self._lock:
            return [r for r in self.results if r.status == ScanStatus.UNSUPPORTED]

    def counts(self):
        with self._lock:
            return Counter(r.status for r in self.results)


def print_scan_summary(reporter, logger):
    """Print per-status counts for a finished scan."""
    counts = reporter.counts()
    total = reporter.progress

    logger.info("=" * 60)
    if reporter.outcome == SCAN_CANCELLED:
        logger.info(f"SCAN CANCELLED after {total} archives")
    else:
        logger.info(f"SCAN COMPLETE: {total} archives")
    logger.info("=" * 60)
    for status in ScanStatus:
        if counts.get(status):
            logger.info(f"{status.value:<12} {counts[status]}")
    logger.info("=" * 60)


def print_conversion_summary(converted, failed, logger):
    """
    Print the outcome of a batch of conversions.

    Args:
        converted: List of (source_path, output_path) tuples
        failed: List of (source_path, error_message) tuples
        logger: Logger instance
    """
    if not converted and not failed:
        return

    logger.info("=" * 60)
    logger.info("CONVERSION SUMMARY")
    logger.info("=" * 60)
    for source, output in converted:
        size_str, _ = FileSystemUtils.get_file_size_formatted(output)
        logger.info(f"Converted: {source} -> {output} ({size_str})")
    for source, error in failed:
        logger.info(f"Failed:    {source}: {error}")
    logger.info(f"{len(converted)} converted, {len(failed)} failed")
    logger.info("=" * 60)
