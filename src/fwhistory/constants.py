"""
Constants and configuration values for fwhistory.

This module contains all hardcoded values, URLs, timeouts, and other constants
used throughout the application.
"""

# Upstream history sources
HISTORY_URL_TEMPLATE = "https://www.odinrom.com/samsung/{model}-{region}/"
FOTA_VERSION_URL_TEMPLATE = (
    "https://fota-cloud-dn.ospserver.net/firmware/{region}/{model}/version.xml"
)
HISTORY_SOURCE_LINK = "https://odinrom.com"

# Changelog documents
CHANGELOG_DOMAIN_URL = "https://doc.samsungmobile.com/"
CHANGELOG_URL_TEMPLATE = f"{CHANGELOG_DOMAIN_URL}{{model}}/{{region}}/doc.html"
CHANGELOG_LANGUAGE_SELECTOR = "#sel_lang_hidden"
CHANGELOG_PREFERRED_LANGUAGE = "EN"

# Source identifiers reported on successful outcomes
SOURCE_PRIMARY = "primary"
SOURCE_FOTA_XML = "fota"

# Network timeouts (in seconds)
DEFAULT_REQUEST_TIMEOUT = 30
NTFY_REQUEST_TIMEOUT = 10

HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 299

# Firmware string layout
FIRMWARE_SEPARATOR = "/"
HISTORY_SORT_KEY_LENGTH = 4

# User-visible job status text
HISTORY_ERROR_MESSAGE = (
    "Unable to retrieve firmware history. "
    "Make sure the model and region are correct."
)
HISTORY_ERROR_FORMAT = "Error parsing firmware history: {error}"

# Configuration file names
CONFIG_DIR_NAME = "fwhistory"
CONFIG_FILE_NAME = "fwhistory.yaml"

# Environment variable names
LOG_LEVEL_ENV_VAR = "FWHISTORY_LOG_LEVEL"

# Logging configuration
LOGGER_NAME = "fwhistory"
LOG_FILE_NAME = "fwhistory.log"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5
