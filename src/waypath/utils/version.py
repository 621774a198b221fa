"""
Version utility functions.
"""

from waypath import __version__


def get_version() -> str:
    """
    Get the current version of waypath.

    Returns:
        str: The version string.
    """
    return __version__


def format_version_info() -> dict[str, str]:
    """
    Get formatted version information.

    Returns:
        dict[str, str]: Dictionary containing version information.
    """
    return {
        "version": get_version(),
        "project": "waypath",
        "description": "Road network snapping and shortest-path routing",
    }
