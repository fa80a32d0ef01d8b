import importlib.metadata
from typing import Optional

_USER_AGENT_CACHE: Optional[str] = None


def get_package_version() -> str:
    """
    Return the installed fwhistory version, or "unknown" when it is not installed.
    """
    try:
        return importlib.metadata.version("fwhistory")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `fwhistory/{version}`, where `{version}` is the installed package version or `unknown` if the version cannot be determined.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        _USER_AGENT_CACHE = f"fwhistory/{get_package_version()}"

    return _USER_AGENT_CACHE
