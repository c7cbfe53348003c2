#!/usr/bin/env python3
"""
Tolerant parser for `7zz l -slt` listings.

The listing is a sequence of blank-line separated blocks of ``Key = Value``
lines. The first block with a ``Type`` key describes the archive itself;
blocks with a ``Path`` key describe entries. Precedence:

1. The first block carrying ``Type`` wins; later ``Type`` keys are ignored.
2. Every block carrying ``Path`` is counted as an entry, wherever it appears.
3. Only when no type was found, the raw text is searched for
   ``TYPE_FALLBACKS`` in order.
"""

import re
from typing import ClassVar

from .models import ArchiveInfo, REASON_RAR5, REASON_SOLID


BLOCK_SEPARATOR = re.compile(r'\n[ \t]*\n')


class ListingParser:
    """Turns listing text into an ArchiveInfo."""

    IMAGE_EXTENSIONS: ClassVar[tuple[str, ...]] = ('.jpg', '.jpeg', '.png', '.webp', '.gif')

    # Substring searched for, and the type it implies; first match wins
    TYPE_FALLBACKS: ClassVar[tuple[tuple[str, str], ...]] = (
        ('Type = Rar5', 'Rar5'),
        ('Type = Rar', 'Rar'),
    )

    @staticmethod
    def normalize(text):
        return text.replace('\r\n', '\n')

    @classmethod
    def split_blocks(cls, text):
        """Split normalized listing text into non-empty blocks."""
        return [block for block in BLOCK_SEPARATOR.split(cls.normalize(text)) if block.strip()]

    @staticmethod
    def parse_block(block):
        """Map ``Key = Value`` (or ``Key=Value``) lines of one block. Lines with an empty key are dropped."""
        props = {}
        for line in block.splitlines():
            if '=' not in line:
                continue
            key, value = line.split('=', 1)
            key = key.strip()
            if key:
                props[key] = value.strip()
        return props

    @classmethod
    def is_image_path(cls, path):
        return path.lower().endswith(cls.IMAGE_EXTENSIONS)

    @classmethod
    def fallback_type(cls, text):
        """Last-resort substring search over the raw listing."""
        for needle, file_type in cls.TYPE_FALLBACKS:
            if needle in text:
                return file_type
        return ''

    @staticmethod
    def classify(file_type, is_solid):
        """Reason the target reader rejects the archive, or None."""
        if file_type.lower() == 'rar5':
            return REASON_RAR5
        if is_solid:
            return REASON_SOLID
        return None

    @classmethod
    def parse(cls, text):
        """
        Parse listing output.

        Always returns an ArchiveInfo; ``file_type`` is empty when nothing
        about the archive itself could be recovered.
        """
        text = cls.normalize(text)
        info = ArchiveInfo()
        archive_block_found = False

        for block in cls.split_blocks(text):
            props = cls.parse_block(block)

            if 'Type' in props and not archive_block_found:
                info.file_type = props['Type']
                info.is_solid = props.get('Solid') == '+'
                info.is_encrypted = props.get('Encrypted') == '+'
                archive_block_found = True

            path = props.get('Path')
            if path is not None and cls.is_image_path(path):
                info.image_count += 1

        if not info.file_type:
            info.file_type = cls.fallback_type(text)

        info.unsupported_reason = cls.classify(info.file_type, info.is_solid)
        return info
