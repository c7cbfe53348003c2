import argparse
import json
import threading
import time
import zipfile

import pytest

from comicrepacker import cli, settings
from comicrepacker.core.seven_zip import ToolOutput


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    settings_file = tmp_path / "config" / "settings.json"
    monkeypatch.setattr(settings, "DEFAULT_SETTINGS_FILE", settings_file)
    return settings_file


@pytest.fixture
def use_tool(monkeypatch):
    """Make the CLI build its service around the given fake tool."""
    def install(tool):
        monkeypatch.setattr(cli, "SevenZipTool", lambda **kwargs: tool)
        return tool
    return install


def test_settings_round_trip(isolated_settings):
    assert settings.load_global_settings() == ({}, None)
    assert settings.save_global_settings({"seven_zip": "/opt/7zz", "workers": 3}) == (True, None)
    assert settings.load_global_settings() == ({"seven_zip": "/opt/7zz", "workers": 3}, None)


def test_invalid_settings_file_is_reported(isolated_settings):
    isolated_settings.parent.mkdir(parents=True)
    isolated_settings.write_text("{not json", encoding="utf-8")
    loaded, error = settings.load_global_settings()
    assert loaded == {}
    assert "Invalid JSON" in error


def test_apply_global_settings_keeps_explicit_arguments():
    args = argparse.Namespace(verbose=False, silent=False, seven_zip="7z", workers=0,
                              temp_dir=None, tool_timeout=None)
    saved = {"verbose": True, "seven_zip": "/opt/7zz", "workers": 4, "temp_dir": "/scratch"}
    settings.apply_global_settings(args, saved)
    assert args.verbose is True
    assert args.seven_zip == "7z"
    assert args.workers == 4
    assert args.temp_dir == "/scratch"
    assert args.tool_timeout is None


def test_scan_json_output(comic_tree, fake_tool_factory, listing, use_tool, capsys):
    use_tool(fake_tool_factory(listings={
        "issue1.cbr": ToolOutput(0, listing("issue1.cbr", "Rar5", solid=True), ""),
    }))

    assert cli.main(["scan", "--json", "--only-unsupported", str(comic_tree)]) == 0

    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.strip()]
    assert len(lines) == 1
    assert lines[0]["status"] == "Unsupported"
    assert lines[0]["info"]["file_type"] == "Rar5"
    assert lines[0]["info"]["unsupported_reason"] == "RAR5 format"
    assert lines[0]["path"].endswith("issue1.cbr")


def test_scan_rejects_missing_directory(tmp_path, fake_tool_factory, use_tool):
    use_tool(fake_tool_factory())
    assert cli.main(["scan", str(tmp_path / "missing")]) == 1


def test_scan_and_convert_unsupported(comic_tree, tmp_path, fake_tool_factory, listing, use_tool):
    use_tool(fake_tool_factory(
        listings={"volume.rar": ToolOutput(0, listing("volume.rar", "Rar", solid=True), "")},
        extract_files={"01.jpg": b"page"},
    ))
    out_dir = tmp_path / "converted"
    out_dir.mkdir()

    code = cli.main(["scan", "--convert-unsupported", "--output-dir", str(out_dir),
                     "--temp-dir", str(tmp_path / "tmp"), str(comic_tree)])

    assert code == 0
    assert [p.name for p in out_dir.iterdir()] == ["volume.cbz"]


def test_convert_command_reports_failures(tmp_path, fake_tool_factory, use_tool):
    good = tmp_path / "good.cbr"
    good.write_bytes(b"rar")
    use_tool(fake_tool_factory(extract_files={"01.jpg": b"page"}))

    assert cli.main(["convert", "--temp-dir", str(tmp_path / "tmp"), str(good)]) == 0
    assert zipfile.is_zipfile(tmp_path / "good.cbz")

    assert cli.main(["convert", str(good), str(tmp_path / "missing.cbr")]) == 1


def test_config_saves_settings(isolated_settings):
    assert cli.main(["config", "--seven-zip", "/opt/7zz", "--workers", "0"]) == 0
    saved = json.loads(isolated_settings.read_text(encoding="utf-8"))
    assert saved == {"seven_zip": "/opt/7zz", "workers": 0}


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_convert_unsupported_runs_one_at_a_time(comic_tree, tmp_path, fake_tool_factory, listing, use_tool):
    tool = use_tool(fake_tool_factory(
        listings={
            "issue1.cbr": ToolOutput(0, listing("issue1.cbr", "Rar5"), ""),
            "volume.rar": ToolOutput(0, listing("volume.rar", "Rar", solid=True), ""),
        },
        extract_files={"01.jpg": b"page"},
    ))
    extract = tool.extract_archive
    lock = threading.Lock()
    running = []
    overlap = []

    def tracked_extract(archive_path, output_dir):
        with lock:
            running.append(archive_path)
            overlap.append(len(running))
        time.sleep(0.05)
        try:
            return extract(archive_path, output_dir)
        finally:
            with lock:
                running.remove(archive_path)

    tool.extract_archive = tracked_extract
    out_dir = tmp_path / "converted"
    out_dir.mkdir()

    code = cli.main(["scan", "--convert-unsupported", "--workers", "4", "--output-dir", str(out_dir),
                     "--temp-dir", str(tmp_path / "tmp"), str(comic_tree)])

    assert code == 0
    assert overlap == [1, 1]
    assert sorted(p.name for p in out_dir.iterdir()) == ["issue1.cbz", "volume.cbz"]
