#!/usr/bin/env python3
"""
Global settings stored as JSON in ~/.comicrepacker/settings.json.
"""

import json
import sys
from pathlib import Path

DEFAULT_CONFIG_DIR = Path.home() / ".comicrepacker"
DEFAULT_SETTINGS_FILE = DEFAULT_CONFIG_DIR / "settings.json"

# Keys that may be saved, and the argparse attribute each one fills
SETTINGS_KEYS = ("verbose", "silent", "seven_zip", "workers", "temp_dir", "tool_timeout")


def load_global_settings(settings_file=None):
    """Load global settings from JSON file. Returns (settings, error)."""
    settings_file = Path(settings_file) if settings_file else DEFAULT_SETTINGS_FILE
    if settings_file.exists():
        try:
            with open(settings_file, encoding="utf-8") as f:
                settings = json.load(f)
        except json.JSONDecodeError as e:
            error_msg = f"Invalid JSON in settings file: {e}"
            print(f"Warning: {error_msg}", file=sys.stderr)
            return {}, error_msg
        except OSError as e:
            error_msg = f"Error reading settings file: {e}"
            print(f"Warning: {error_msg}", file=sys.stderr)
            return {}, error_msg
        if not isinstance(settings, dict):
            error_msg = "Settings file must contain a JSON object"
            print(f"Warning: {error_msg}", file=sys.stderr)
            return {}, error_msg
        return settings, None
    return {}, None


def save_global_settings(settings, settings_file=None):
    """Save global settings to JSON file. Returns (success, error)."""
    settings_file = Path(settings_file) if settings_file else DEFAULT_SETTINGS_FILE
    try:
        settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(settings_file, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=2)
        return True, None
    except OSError as e:
        error_msg = f"Error saving settings file: {e}"
        print(f"Error: {error_msg}", file=sys.stderr)
        return False, error_msg


def apply_global_settings(args, settings):
    """Fill args from saved settings without overriding anything given on the command line."""
    if not getattr(args, "verbose", False) and settings.get("verbose", False):
        args.verbose = True
    if not getattr(args, "silent", False) and settings.get("silent", False):
        args.silent = True
    for key in ("seven_zip", "temp_dir", "tool_timeout"):
        if getattr(args, key, None) is None and settings.get(key) is not None:
            setattr(args, key, settings[key])
    if getattr(args, "workers", None) in (None, 0) and "workers" in settings:
        args.workers = settings["workers"]
    return args
