#!/usr/bin/env python3
"""
Archive inspection: list an archive with 7zz and decide whether the target
reader can open it.
"""

import logging
from pathlib import Path

from .errors import InspectionError
from .listing_parser import ListingParser
from .seven_zip import SevenZipTool


class ArchiveInspector:
    """Runs the listing tool against one file and parses the result."""

    STDOUT_EXCERPT_CHARS = 200

    def __init__(self, tool=None, logger=None):
        """
        Args:
            tool: Object with a ``list_archive(path)`` method returning a ToolOutput
            logger: Logger instance for diagnostics
        """
        self.tool = tool or SevenZipTool()
        self.logger = logger or logging.getLogger(__name__)

    def inspect(self, archive_path):
        """
        Inspect one archive.

        A usable listing is accepted regardless of exit code, since 7zz reports
        warning-level codes for header problems that leave the listing intact.

        Returns:
            ArchiveInfo: Parsed archive information

        Raises:
            InspectionError: If no archive-level information could be extracted
            ToolError: If the tool could not be run at all
        """
        archive_path = Path(archive_path)
        self.logger.debug(f"Scanning: {archive_path}")

        output = self.tool.list_archive(archive_path)
        stdout = ListingParser.normalize(output.stdout)
        info = ListingParser.parse(stdout)

        if info.file_type:
            self.logger.debug(
                f"Scanned {archive_path}: Type={info.file_type}, "
                f"Images={info.image_count}, Solid={info.is_solid}"
            )
            return info

        self.logger.debug(f"No archive type found for {archive_path}. Raw output:\n{stdout}")

        # Negative codes (killed by a signal) are reported the same way
        if output.returncode != 0:
            excerpt = stdout.strip()[:self.STDOUT_EXCERPT_CHARS]
            raise InspectionError(
                f"7zz failed with code {output.returncode}. "
                f"Stderr: '{output.stderr.strip()}'. Stdout trace: '{excerpt}'",
                path=str(archive_path),
                returncode=output.returncode,
            )

        raise InspectionError("Empty output from 7zz", path=str(archive_path),
                              returncode=output.returncode)
