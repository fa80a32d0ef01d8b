from unittest.mock import Mock

import pytest
import requests

from fwhistory.notifications import (
    LoggingErrorReporter,
    NtfyErrorReporter,
    format_error_report,
    send_ntfy_notification,
)

pytestmark = [pytest.mark.unit, pytest.mark.user_interface]


def test_send_ntfy_notification_posts_message(mocker):
    mock_post = mocker.patch("fwhistory.notifications.requests.post")

    send_ntfy_notification("https://ntfy.sh/", "fw", "Hello", title="Título")

    mock_post.assert_called_once()
    args, kwargs = mock_post.call_args
    assert args[0] == "https://ntfy.sh/fw"
    assert kwargs["data"] == b"Hello"
    assert kwargs["timeout"] == 10
    assert kwargs["headers"]["Content-Type"] == "text/plain; charset=utf-8"
    assert kwargs["headers"]["Title"] == "Título".encode("utf-8").decode("latin-1")


def test_send_ntfy_notification_without_title(mocker):
    mock_post = mocker.patch("fwhistory.notifications.requests.post")

    send_ntfy_notification("https://ntfy.sh", "fw", "Hello")

    assert "Title" not in mock_post.call_args.kwargs["headers"]


@pytest.mark.parametrize("server, topic", [(None, "fw"), ("https://ntfy.sh", None), ("", "")])
def test_send_ntfy_notification_requires_server_and_topic(mocker, server, topic):
    mock_post = mocker.patch("fwhistory.notifications.requests.post")

    send_ntfy_notification(server, topic, "Hello")

    mock_post.assert_not_called()


def test_send_ntfy_notification_logs_request_errors(mocker):
    mocker.patch(
        "fwhistory.notifications.requests.post",
        side_effect=requests.exceptions.ConnectionError("offline"),
    )
    mock_warning = mocker.patch("fwhistory.notifications.logger.warning")

    send_ntfy_notification("https://ntfy.sh", "fw", "Hello")

    mock_warning.assert_called_once()
    assert "offline" in mock_warning.call_args.args[0]


def test_send_ntfy_notification_http_error_logged(mocker):
    response = Mock()
    response.raise_for_status.side_effect = requests.exceptions.HTTPError("500")
    mocker.patch("fwhistory.notifications.requests.post", return_value=response)
    mock_warning = mocker.patch("fwhistory.notifications.logger.warning")

    send_ntfy_notification("https://ntfy.sh", "fw", "Hello")

    mock_warning.assert_called_once()


def test_format_error_report():
    assert format_error_report(ValueError("bad value")) == "ValueError: bad value"
    assert format_error_report(RuntimeError()) == "RuntimeError"


def test_logging_reporter_logs_with_traceback(mocker):
    mock_error = mocker.patch("fwhistory.notifications.logger.error")
    error = KeyError("firmware")

    LoggingErrorReporter().notify(error)

    mock_error.assert_called_once()
    assert "KeyError" in mock_error.call_args.args[0]
    assert mock_error.call_args.kwargs["exc_info"][1] is error


def test_ntfy_reporter_logs_and_sends(mocker):
    mock_error = mocker.patch("fwhistory.notifications.logger.error")
    mock_send = mocker.patch("fwhistory.notifications.send_ntfy_notification")
    reporter = NtfyErrorReporter("https://ntfy.sh", "fw")

    reporter.notify(RuntimeError("boom"))

    mock_error.assert_called_once()
    mock_send.assert_called_once_with(
        "https://ntfy.sh", "fw", "RuntimeError: boom", title="fwhistory error"
    )
