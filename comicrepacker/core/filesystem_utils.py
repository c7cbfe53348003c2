#!/usr/bin/env python3
"""
File system helpers shared by the repacker and the report output.
"""

import os
from pathlib import Path


class FileSystemUtils:
    """Centralized file system operations."""

    @staticmethod
    def get_file_size_formatted(file_path_or_size):
        """
        Return a tuple of (human_readable_size, size_in_bytes).
        If given a path, we take the file size from disk;
        if given an int, we interpret it as raw bytes.
        """
        if isinstance(file_path_or_size, (int, float)):
            size_bytes = file_path_or_size
        else:
            size_bytes = Path(file_path_or_size).stat().st_size

        units = ['B', 'KB', 'MB', 'GB', 'TB']
        size = float(size_bytes)
        idx = 0

        while size >= 1024 and idx < len(units) - 1:
            size /= 1024
            idx += 1

        return f"{size:.2f} {units[idx]}", size_bytes

    @staticmethod
    def list_files_relative(root_dir):
        """
        Collect every regular file under root_dir.

        Returns:
            list: Sorted (absolute_path, zip_entry_name) tuples. Entry names are
            relative to root_dir and always use forward slashes.
        """
        root_dir = Path(root_dir)
        all_files = []
        for dirpath, _, filenames in os.walk(root_dir):
            for filename in filenames:
                file_path = Path(dirpath) / filename
                if not file_path.is_file():
                    continue
                rel_path = file_path.relative_to(root_dir)
                all_files.append((file_path, rel_path.as_posix().replace('\\', '/')))

        all_files.sort(key=lambda x: x[1])
        return all_files
