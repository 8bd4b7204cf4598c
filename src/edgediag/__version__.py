"""Version information for edgediag"""

__version__ = "1.0.0"
__release_date__ = "2026-10-18"


def get_full_version() -> str:
    """Get version string with release date"""
    return f"{__version__} ({__release_date__})"
