import os
import threading
from pathlib import Path

import pytest

from comicrepacker.core.seven_zip import ToolOutput


def make_listing(archive_name, file_type, solid=False, encrypted=False, entries=()):
    """Build `7zz l -slt` style output for one archive."""
    lines = [
        "",
        "7-Zip (z) 23.01 (x64) : Copyright (c) 1999-2023 Igor Pavlov : 2023-06-20",
        "",
        "Scanning the drive for archives:",
        "1 file, 1048576 bytes (1024 KiB)",
        "",
        f"Listing archive: {archive_name}",
        "",
        "--",
        f"Path = {archive_name}",
        f"Type = {file_type}",
        "Physical Size = 1048576",
        f"Solid = {'+' if solid else '-'}",
        f"Encrypted = {'+' if encrypted else '-'}",
        "",
        "----------",
    ]
    for entry in entries:
        lines += [
            f"Path = {entry}",
            "Folder = -",
            "Size = 123456",
            "Modified = 2023-01-01 12:00:00",
            "",
        ]
    return "\n".join(lines) + "\n"


class FakeTool:
    """Stands in for SevenZipTool; no 7-Zip binary needed."""

    def __init__(self, listings=None, default=None, extract_files=None,
                 extract_returncode=0, extract_stderr=""):
        self.listings = listings or {}
        self.default = default
        self.extract_files = extract_files or {}
        self.extract_returncode = extract_returncode
        self.extract_stderr = extract_stderr
        self.listed = []
        self.extracted = []
        self._lock = threading.Lock()

    def list_archive(self, archive_path):
        archive_path = Path(archive_path)
        with self._lock:
            self.listed.append(archive_path)
        output = self.listings.get(archive_path.name, self.default)
        if isinstance(output, Exception):
            raise output
        if output is None:
            return ToolOutput(0, make_listing(archive_path.name, "Zip", entries=["001.jpg"]), "")
        return output

    def extract_archive(self, archive_path, output_dir):
        with self._lock:
            self.extracted.append((Path(archive_path), Path(output_dir)))
        if self.extract_returncode == 0:
            for rel_path, data in self.extract_files.items():
                # Bytes names land on disk exactly as given, like a legacy-encoded RAR entry
                target = Path(output_dir) / (os.fsdecode(rel_path) if isinstance(rel_path, bytes) else rel_path)
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(data)
        return ToolOutput(self.extract_returncode, "", self.extract_stderr)


class BlockingTool(FakeTool):
    """FakeTool whose listing waits until released, to hold a scan mid-flight."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.entered = threading.Event()
        self.release = threading.Event()

    def list_archive(self, archive_path):
        self.entered.set()
        self.release.wait(10)
        return super().list_archive(archive_path)


class EventRecorder:
    """Scan listener recording (event, payload) pairs."""

    def __init__(self):
        self.events = []
        self._lock = threading.Lock()

    def __call__(self, event, payload=None):
        with self._lock:
            self.events.append((event, payload))

    def names(self):
        return [name for name, _ in self.events]

    def payloads(self, event):
        return [payload for name, payload in self.events if name == event]


@pytest.fixture
def listing():
    return make_listing


@pytest.fixture
def fake_tool_factory():
    return FakeTool


@pytest.fixture
def blocking_tool_factory():
    return BlockingTool


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def comic_tree(tmp_path):
    """Directory with candidate archives, noise files and hidden entries."""
    root = tmp_path / "comics"
    (root / "Series A").mkdir(parents=True)
    (root / "Series B" / "Extras").mkdir(parents=True)
    (root / ".hidden").mkdir()

    (root / "Series A" / "issue1.cbr").write_bytes(b"rar")
    (root / "Series A" / "issue2.CBZ").write_bytes(b"zip")
    (root / "Series A" / "notes.txt").write_text("not an archive")
    (root / "Series B" / "Extras" / "sketches.zip").write_bytes(b"zip")
    (root / "Series B" / "volume.rar").write_bytes(b"rar")
    (root / ".hidden" / "secret.cbr").write_bytes(b"rar")
    (root / ".dotfile.cbz").write_bytes(b"zip")
    return root
