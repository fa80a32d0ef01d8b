"""
Configuration loading for fwhistory.

The configuration is an optional YAML file (`fwhistory.yaml`) in the platform
config directory. Values in the file override DEFAULT_CONFIG; a missing file
simply yields the defaults.
"""

import os
from typing import Any, Dict, Optional

import platformdirs
import yaml

from fwhistory.constants import (
    CHANGELOG_URL_TEMPLATE,
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_REQUEST_TIMEOUT,
    FOTA_VERSION_URL_TEMPLATE,
    HISTORY_URL_TEMPLATE,
)
from fwhistory.exceptions import ConfigFileError, ConfigValidationError
from fwhistory.history.async_client import AsyncHistoryClient
from fwhistory.history.changelog import ChangelogHandler
from fwhistory.history.interfaces import HistoryBodyParser
from fwhistory.history.job import HistoryFetchJob
from fwhistory.log_utils import logger
from fwhistory.notifications import (
    ErrorReporter,
    LoggingErrorReporter,
    NtfyErrorReporter,
)

DEFAULT_CONFIG: Dict[str, Any] = {
    "HISTORY_URL_TEMPLATE": HISTORY_URL_TEMPLATE,
    "FOTA_VERSION_URL_TEMPLATE": FOTA_VERSION_URL_TEMPLATE,
    "CHANGELOG_URL_TEMPLATE": CHANGELOG_URL_TEMPLATE,
    "REQUEST_TIMEOUT": DEFAULT_REQUEST_TIMEOUT,
    "FETCH_CHANGELOGS": True,
    "NTFY_SERVER": "",
    "NTFY_TOPIC": "",
    "LOG_LEVEL": "INFO",
    "LOG_TO_FILE": False,
}

_URL_TEMPLATE_KEYS = (
    "HISTORY_URL_TEMPLATE",
    "FOTA_VERSION_URL_TEMPLATE",
    "CHANGELOG_URL_TEMPLATE",
)

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off", ""}


def get_config_dir() -> str:
    return platformdirs.user_config_dir(CONFIG_DIR_NAME)


def get_config_file() -> str:
    return os.path.join(get_config_dir(), CONFIG_FILE_NAME)


def get_log_dir() -> str:
    return platformdirs.user_log_dir(CONFIG_DIR_NAME)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the fwhistory configuration.

    Parameters:
        path (Optional[str]): Explicit configuration file; defaults to the platformdirs
            location returned by get_config_file().

    Returns:
        Dict[str, Any]: DEFAULT_CONFIG overlaid with the file's values. Keys are
            upper-cased so `request_timeout` and `REQUEST_TIMEOUT` are equivalent.

    Raises:
        ConfigFileError: If the file exists but cannot be read, is not valid YAML or
            its top level is not a mapping.
        ConfigValidationError: If a URL template lacks a required placeholder.
    """
    config_path = path or get_config_file()
    config = dict(DEFAULT_CONFIG)

    if not os.path.exists(config_path):
        logger.debug(f"No configuration file at {config_path}; using defaults")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except OSError as e:
        raise ConfigFileError(
            "Unable to read configuration file", path=config_path, details=str(e)
        ) from e
    except yaml.YAMLError as e:
        raise ConfigFileError(
            "Invalid YAML in configuration file", path=config_path, details=str(e)
        ) from e

    if loaded is None:
        return config
    if not isinstance(loaded, dict):
        raise ConfigFileError(
            "Configuration file must contain a mapping",
            path=config_path,
            details=f"got {type(loaded).__name__}",
        )

    for key, value in loaded.items():
        config[str(key).upper()] = value

    for key in _URL_TEMPLATE_KEYS:
        validate_url_template(config[key], key=key)

    logger.debug(f"Loaded configuration from {config_path}")
    return config


def validate_url_template(
    template: Any,
    key: str = "URL_TEMPLATE",
    required: tuple = ("{model}", "{region}"),
) -> str:
    """
    Check that a URL template is a string containing every required placeholder.

    Returns:
        str: The template, unchanged.

    Raises:
        ConfigValidationError: If the template is not a string or lacks a placeholder.
    """
    if not isinstance(template, str) or not template.strip():
        raise ConfigValidationError(
            f"{key} must be a non-empty string", key=key, value=repr(template)
        )
    missing = [placeholder for placeholder in required if placeholder not in template]
    if missing:
        raise ConfigValidationError(
            f"{key} is missing placeholder(s): {', '.join(missing)}",
            key=key,
            value=template,
        )
    return template


def get_request_timeout(config: Dict[str, Any]) -> float:
    """
    Return the configured request timeout in seconds.

    Invalid values fall back to DEFAULT_REQUEST_TIMEOUT; values below 1 are clamped to 1.
    """
    raw_value = config.get("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)
    try:
        parsed_value = float(raw_value)
    except (TypeError, ValueError):
        logger.warning(
            "Invalid REQUEST_TIMEOUT value %r; using default of %d",
            raw_value,
            DEFAULT_REQUEST_TIMEOUT,
        )
        return float(DEFAULT_REQUEST_TIMEOUT)

    if parsed_value < 1:
        logger.warning("REQUEST_TIMEOUT must be >= 1; clamping %s to 1", raw_value)
        return 1.0

    return parsed_value


def get_bool(config: Dict[str, Any], key: str, default: bool = False) -> bool:
    """Read a boolean setting, accepting YAML booleans and common string spellings."""
    value = config.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    logger.warning("Invalid %s value %r; using default %s", key, value, default)
    return default


def create_client(config: Dict[str, Any]) -> AsyncHistoryClient:
    return AsyncHistoryClient(
        timeout=get_request_timeout(config),
        history_url_template=config.get("HISTORY_URL_TEMPLATE", HISTORY_URL_TEMPLATE),
        fota_url_template=config.get(
            "FOTA_VERSION_URL_TEMPLATE", FOTA_VERSION_URL_TEMPLATE
        ),
    )


def create_error_reporter(config: Dict[str, Any]) -> ErrorReporter:
    """Use NTFY error reports when both NTFY_SERVER and NTFY_TOPIC are set."""
    ntfy_server = config.get("NTFY_SERVER") or ""
    ntfy_topic = config.get("NTFY_TOPIC") or ""
    if ntfy_server and ntfy_topic:
        return NtfyErrorReporter(str(ntfy_server), str(ntfy_topic))
    return LoggingErrorReporter()


def create_history_job(
    config: Dict[str, Any],
    client: AsyncHistoryClient,
    body_parser: Optional[HistoryBodyParser] = None,
) -> HistoryFetchJob:
    """
    Build a HistoryFetchJob wired according to the configuration.

    Parameters:
        config (Dict[str, Any]): Loaded configuration.
        client (AsyncHistoryClient): Client shared by history and changelog lookups.
        body_parser (Optional[HistoryBodyParser]): Parser for the primary history page.
    """
    fetch_changelogs = get_bool(config, "FETCH_CHANGELOGS", True)
    changelog_handler = None
    if fetch_changelogs:
        changelog_handler = ChangelogHandler(
            client,
            url_template=config.get("CHANGELOG_URL_TEMPLATE", CHANGELOG_URL_TEMPLATE),
        )
    return HistoryFetchJob(
        client,
        body_parser=body_parser,
        changelog_handler=changelog_handler,
        error_reporter=create_error_reporter(config),
        fetch_changelogs=fetch_changelogs,
    )
