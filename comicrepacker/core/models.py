#!/usr/bin/env python3
"""
Records exchanged between the scanner, the inspector and the front end.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional


# Event names pushed to scan listeners
SCAN_PROGRESS = "scan-progress"
SCAN_RESULT = "scan-result"
SCAN_CANCELLED = "scan-cancelled"
SCAN_COMPLETE = "scan-complete"

TERMINAL_EVENTS = (SCAN_CANCELLED, SCAN_COMPLETE)

# Reasons the target reader cannot open an archive
REASON_RAR5 = "RAR5 format"
REASON_SOLID = "Solid archive"


class ScanStatus(str, Enum):
    """Status of one candidate file. The scanner only emits the first four."""

    PENDING = "Pending"
    SUPPORTED = "Supported"
    UNSUPPORTED = "Unsupported"
    ERROR = "Error"
    CONVERTING = "Converting"
    CONVERTED = "Converted"


@dataclass
class ArchiveInfo:
    """What the listing tool told us about one archive."""

    file_type: str = ""
    is_solid: bool = False
    is_encrypted: bool = False
    image_count: int = 0
    unsupported_reason: Optional[str] = None

    @property
    def is_supported(self):
        return self.unsupported_reason is None

    def to_dict(self):
        return asdict(self)


@dataclass
class ScanResult:
    """One record per candidate file found during a scan."""

    path: str
    info: Optional[ArchiveInfo] = None
    error: Optional[str] = None
    status: ScanStatus = ScanStatus.PENDING

    @classmethod
    def from_info(cls, path, info):
        status = ScanStatus.SUPPORTED if info.is_supported else ScanStatus.UNSUPPORTED
        return cls(path=str(path), info=info, status=status)

    @classmethod
    def from_error(cls, path, error):
        return cls(path=str(path), error=str(error), status=ScanStatus.ERROR)

    def to_dict(self):
        return {
            "path": self.path,
            "info": self.info.to_dict() if self.info is not None else None,
            "error": self.error,
            "status": self.status.value,
        }
