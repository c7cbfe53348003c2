#!/usr/bin/env python3
"""
Repackaging of any archive 7zz can read into a plain deflated CBZ.
"""

import logging
import shutil
import stat
import tempfile
import uuid
import zipfile
from pathlib import Path
from typing import ClassVar

from .errors import ExtractionError, OutputError, RepackerError
from .filesystem_utils import FileSystemUtils
from .page_verifier import PageVerifier
from .path_validator import PathValidator
from .seven_zip import SevenZipTool


class ArchiveRepacker:
    """Extracts an archive to a private temp directory and zips it back up as CBZ."""

    TEMP_SUBDIR: ClassVar[str] = 'comicrepacker-conversion'
    ENTRY_PERMISSIONS: ClassVar[int] = 0o755
    OUTPUT_EXTENSION: ClassVar[str] = '.cbz'

    def __init__(self, tool=None, temp_root=None, verify_pages=False, compresslevel=None, logger=None):
        """
        Args:
            tool: Object with an ``extract_archive(path, output_dir)`` method returning a ToolOutput
            temp_root: Base directory for temporary extraction (system temp dir if omitted)
            verify_pages: Check extracted images with Pillow before zipping
            compresslevel: DEFLATE level (0-9), zlib default if omitted
            logger: Logger instance for output
        """
        self.tool = tool or SevenZipTool()
        self.temp_root = Path(temp_root) if temp_root else Path(tempfile.gettempdir())
        self.verify_pages = verify_pages
        self.compresslevel = compresslevel
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def output_path_for(cls, source_path, output_dir=None):
        """``{output_dir or source parent}/{source stem}.cbz``"""
        source_path = Path(source_path)
        parent = Path(output_dir) if output_dir else source_path.parent
        return parent / f"{source_path.stem}{cls.OUTPUT_EXTENSION}"

    def convert(self, archive_path, output_dir=None):
        """
        Convert one archive to CBZ. An existing file at the output path is overwritten.

        Args:
            archive_path: Source archive
            output_dir: Destination directory (source's directory if omitted)

        Returns:
            str: Path of the written CBZ

        Raises:
            InputPathError: Source missing or output directory invalid
            ToolError: 7zz could not be run
            ExtractionError: 7zz reported a failure
            OutputError: The CBZ could not be written
        """
        source = PathValidator.validate_file_path(archive_path)
        if output_dir:
            output_dir = PathValidator.validate_directory_path(output_dir)
        output_path = self.output_path_for(source, output_dir)

        self.logger.info(f"Converting {source} -> {output_path}")

        temp_dir = self._create_temp_dir()
        try:
            self._extract(source, temp_dir)
            self._write_cbz(temp_dir, output_path)
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)
            self.logger.debug(f"Removed temporary directory {temp_dir}")

        size_str, _ = FileSystemUtils.get_file_size_formatted(output_path)
        self.logger.info(f"Created {output_path} ({size_str})")
        return str(output_path)

    def _create_temp_dir(self):
        # A fresh uuid per call keeps concurrent conversions apart
        temp_dir = self.temp_root / self.TEMP_SUBDIR / uuid.uuid4().hex
        try:
            temp_dir.mkdir(parents=True)
        except OSError as e:
            raise RepackerError(f"Failed to create temp dir: {e}", path=str(temp_dir)) from e
        return temp_dir

    def _extract(self, source, temp_dir):
        self.logger.info(f"Extracting {source} to {temp_dir}...")
        output = self.tool.extract_archive(source, temp_dir)
        if output.returncode != 0:
            raise ExtractionError(f"Extraction failed: {output.stderr.strip()}",
                                  path=str(source), returncode=output.returncode)

    def _write_cbz(self, source_dir, output_path):
        all_files = FileSystemUtils.list_files_relative(source_dir)
        if not all_files:
            self.logger.warning(f"No files extracted for {output_path}; writing an empty CBZ")

        for _, entry_name in all_files:
            self._check_entry_name(entry_name)

        if self.verify_pages:
            PageVerifier(self.logger).verify_pages(file_path for file_path, _ in all_files)

        try:
            zipf = zipfile.ZipFile(output_path, 'w', zipfile.ZIP_DEFLATED, compresslevel=self.compresslevel)
        except OSError as e:
            raise OutputError(f"Failed to create output file: {e}", path=str(output_path)) from e

        try:
            with zipf:
                for file_path, entry_name in all_files:
                    zinfo = zipfile.ZipInfo.from_file(file_path, entry_name, strict_timestamps=False)
                    zinfo.compress_type = zipfile.ZIP_DEFLATED
                    zinfo.external_attr = (stat.S_IFREG | self.ENTRY_PERMISSIONS) << 16
                    zipf.writestr(zinfo, file_path.read_bytes(), compresslevel=self.compresslevel)
        except (OSError, ValueError, zipfile.LargeZipFile) as e:
            output_path.unlink(missing_ok=True)
            raise OutputError(f"Zip error: {e}", path=str(output_path)) from e

        self.logger.debug(f"Added {len(all_files)} files to {output_path}")

    @staticmethod
    def _check_entry_name(entry_name):
        # Non-UTF-8 names on disk arrive as surrogate escapes
        try:
            entry_name.encode('utf-8')
        except UnicodeEncodeError as e:
            readable = entry_name.encode('utf-8', 'backslashreplace').decode('utf-8')
            raise OutputError(f"Invalid UTF-8 in extracted filename: {readable}",
                              entry=readable) from e
