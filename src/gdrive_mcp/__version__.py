"""Version information for gdrive-mcp."""

from pathlib import Path


def _get_version() -> str:
    """Get version from a VERSION file, falling back to the packaged default."""
    # Installed package may ship its own VERSION next to this module
    pkg_version = Path(__file__).parent / "VERSION"
    if pkg_version.exists():
        return pkg_version.read_text().strip()

    # Source checkout: <root>/src/gdrive_mcp/__version__.py
    root_version = Path(__file__).parent.parent.parent / "VERSION"
    if root_version.exists():
        return root_version.read_text().strip()

    return "0.1.0"


__version__ = _get_version()
