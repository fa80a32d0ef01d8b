import pytest

from fwhistory.exceptions import (
    ChangelogError,
    ConfigFileError,
    ConfigurationError,
    ConfigValidationError,
    FwHistoryError,
    HistoryError,
    HistoryParseError,
)

pytestmark = [pytest.mark.unit]


def test_message_without_details():
    error = FwHistoryError("Something failed")

    assert str(error) == "Something failed"
    assert error.details is None


def test_message_with_details():
    error = FwHistoryError("Something failed", details="disk full")

    assert str(error) == "Something failed - disk full"


@pytest.mark.parametrize(
    "error_class, parent",
    [
        (ConfigurationError, FwHistoryError),
        (ConfigFileError, ConfigurationError),
        (ConfigValidationError, ConfigurationError),
        (HistoryError, FwHistoryError),
        (HistoryParseError, HistoryError),
        (ChangelogError, FwHistoryError),
    ],
)
def test_hierarchy(error_class, parent):
    assert issubclass(error_class, parent)


def test_attributes():
    assert ConfigFileError("bad", path="/tmp/x.yaml").path == "/tmp/x.yaml"
    validation = ConfigValidationError("bad", key="REQUEST_TIMEOUT", value="x")
    assert (validation.key, validation.value) == ("REQUEST_TIMEOUT", "x")
    assert HistoryParseError("bad", source="fota").source == "fota"
    assert ChangelogError("bad", url="https://doc.example").url == "https://doc.example"
