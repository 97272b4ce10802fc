# src/pageaudit/utils/path_utils.py
from pathlib import Path


class PathUtils:
    """
    A central utility for reliably retrieving package paths.
    """

    @staticmethod
    def get_package_root() -> Path:
        """Returns the directory of the installed 'pageaudit' package."""
        return Path(__file__).resolve().parent.parent

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_package_root() / "settings.json"
