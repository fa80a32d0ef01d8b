"""
Custom exceptions for fwhistory.

This module defines domain-specific exceptions that provide better error
categorization and more informative error messages for users and developers.

Note that the history job never lets these escape: they are turned into
status text at the job boundary.
"""


class FwHistoryError(Exception):
    """
    Base exception for all fwhistory errors.

    All custom exceptions in fwhistory inherit from this class to allow for
    easy catching of all application-specific errors.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """
        Initialize the exception.

        Args:
            message: The primary error message.
            details: Optional additional context about the error.
        """
        self.message = message
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(FwHistoryError):
    """
    Exception raised when configuration is invalid or missing.

    This includes:
    - Invalid configuration values
    - Configuration file parsing errors
    """

    pass


class ConfigFileError(ConfigurationError):
    """Exception raised when the configuration file cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.path = path


class ConfigValidationError(ConfigurationError):
    """
    Exception raised when configuration validation fails.

    Attributes:
        key: The configuration key that failed validation.
        value: The offending value.
    """

    def __init__(
        self,
        message: str,
        key: str | None = None,
        value: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.key = key
        self.value = value


# =============================================================================
# History Errors
# =============================================================================


class HistoryError(FwHistoryError):
    """Base exception for firmware history retrieval errors."""

    pass


class HistoryParseError(HistoryError):
    """
    Exception raised when a history payload cannot be parsed at all.

    Attributes:
        source: Identifier of the source whose payload failed to parse.
    """

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.source = source


# =============================================================================
# Changelog Errors
# =============================================================================


class ChangelogError(FwHistoryError):
    """
    Exception raised when changelog documents cannot be retrieved or parsed.

    Attributes:
        url: The document URL involved, when known.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url
