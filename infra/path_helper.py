# infra/path_helper.py
import os
import sys
from pathlib import Path

DATA_DIR_ENV = "BECOMAI_DATA_DIR"


def get_resource_path(relative_path: str) -> Path:
    """
    Path to read-only resources (API key file, bundled settings).
    Frozen builds resolve next to the executable.
    """
    if getattr(sys, 'frozen', False):
        base_path = Path(sys.executable).parent
    else:
        base_path = Path(__file__).resolve().parent.parent
    return base_path / relative_path


def get_data_base() -> Path:
    # writable state: log file, ui settings, debug chatlogs
    override = os.getenv(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return get_resource_path("data")


def get_data_path(relative_path: str) -> Path:
    full_path = get_data_base() / relative_path
    full_path.parent.mkdir(parents=True, exist_ok=True)
    return full_path
