#!/usr/bin/env python3
"""
Optional sanity check of extracted comic pages with Pillow.
"""

import logging
from pathlib import Path
from typing import ClassVar

from PIL import Image, UnidentifiedImageError


class PageVerifier:
    """Checks that extracted image files decode. Nothing is repaired."""

    IMAGE_EXTENSIONS: ClassVar[set[str]] = {'.jpg', '.jpeg', '.png', '.webp', '.gif'}

    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def is_page(cls, file_path):
        return Path(file_path).suffix.lower() in cls.IMAGE_EXTENSIONS

    def verify_page(self, file_path):
        """Return True if Pillow can identify and verify the image."""
        try:
            with Image.open(file_path) as img:
                img.verify()
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
            self.logger.warning(f"Unreadable page {file_path}: {e}")
            return False
        return True

    def verify_pages(self, files):
        """
        Verify every page in an iterable of paths; non-image files are ignored.

        Returns:
            tuple: (pages_checked, bad_pages)
        """
        checked = 0
        bad = []
        for file_path in files:
            if not self.is_page(file_path):
                continue
            checked += 1
            if not self.verify_page(file_path):
                bad.append(Path(file_path))

        if bad:
            self.logger.warning(f"{len(bad)} of {checked} pages could not be decoded")
        else:
            self.logger.debug(f"Verified {checked} pages")
        return checked, bad
