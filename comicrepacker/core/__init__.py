"""Core scanning, inspection and repackaging components for comicrepacker."""
from .models import ArchiveInfo, ScanResult, ScanStatus
from .errors import (
    RepackerError,
    InputPathError,
    ToolError,
    InspectionError,
    ExtractionError,
    OutputError,
)
from .seven_zip import SevenZipTool, ToolOutput
from .listing_parser import ListingParser
from .archive_inspector import ArchiveInspector
from .scanner import DirectoryScanner, CancellationToken
from .repacker import ArchiveRepacker
from .page_verifier import PageVerifier
from .path_validator import PathValidator
from .filesystem_utils import FileSystemUtils

__all__ = [
    "ArchiveInfo",
    "ScanResult",
    "ScanStatus",
    "RepackerError",
    "InputPathError",
    "ToolError",
    "InspectionError",
    "ExtractionError",
    "OutputError",
    "SevenZipTool",
    "ToolOutput",
    "ListingParser",
    "ArchiveInspector",
    "DirectoryScanner",
    "CancellationToken",
    "ArchiveRepacker",
    "PageVerifier",
    "PathValidator",
    "FileSystemUtils",
]
