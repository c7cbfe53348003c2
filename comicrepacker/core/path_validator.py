#!/usr/bin/env python3
"""
Centralized path validation for scan roots, source archives and output directories.
"""

from pathlib import Path

from .errors import InputPathError


class PathValidator:
    """Utilities for path validation and resolution."""

    @staticmethod
    def validate_file_path(file_path_str, extensions=None):
        """
        Validate an existing file path with optional extension checking.

        Args:
            file_path_str: File path string
            extensions: Set of allowed extensions (with dots)

        Returns:
            Path: Absolute file path

        Raises:
            InputPathError: If file is missing, not a file, or has the wrong extension
        """
        if not file_path_str:
            raise InputPathError("File path cannot be empty")

        file_path = Path(file_path_str).absolute()

        if not file_path.exists():
            raise InputPathError(f"File not found: {file_path}", path=str(file_path))

        if not file_path.is_file():
            raise InputPathError(f"Path is not a file: {file_path}", path=str(file_path))

        if extensions and file_path.suffix.lower() not in extensions:
            raise InputPathError(
                f"File must have one of these extensions: {', '.join(sorted(extensions))}",
                path=str(file_path),
            )

        return file_path

    @staticmethod
    def validate_directory_path(dir_path_str, must_exist=True, create_if_missing=False):
        """
        Validate a directory path.

        Args:
            dir_path_str: Directory path string
            must_exist: Whether directory must exist
            create_if_missing: Whether to create directory if missing

        Returns:
            Path: Absolute directory path

        Raises:
            InputPathError: If directory is invalid
        """
        if not dir_path_str:
            raise InputPathError("Directory path cannot be empty")

        dir_path = Path(dir_path_str).absolute()

        if not dir_path.exists():
            if create_if_missing:
                try:
                    dir_path.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise InputPathError(f"Invalid output directory {dir_path}: {e}",
                                         path=str(dir_path)) from e
            elif must_exist:
                raise InputPathError(f"Directory not found: {dir_path}", path=str(dir_path))
        elif not dir_path.is_dir():
            raise InputPathError(f"Path is not a directory: {dir_path}", path=str(dir_path))

        return dir_path
