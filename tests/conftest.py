from unittest.mock import AsyncMock, Mock

import platformdirs
import pytest
import requests

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.* or Session.request."
)

_ASYNC_NETWORK_BLOCK_MSG = (
    "Async network access is blocked during tests. Mock aiohttp.ClientSession."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


async def _async_block_network(*_args, **_kwargs):
    """
    Prevent async network calls during tests by raising a RuntimeError.

    Raises:
        RuntimeError: `_ASYNC_NETWORK_BLOCK_MSG` explaining that async network access is blocked.
    """
    raise RuntimeError(_ASYNC_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """
    Register the markers used across the test suite.

    Parameters:
        config: pytest.Config
            The pytest configuration object.
    """
    config.addinivalue_line(
        "markers", "asyncio: mark test as an asyncio test (auto-detected)"
    )
    config.addinivalue_line("markers", "unit: fast, isolated unit tests")
    config.addinivalue_line("markers", "core_history: firmware history pipeline")
    config.addinivalue_line("markers", "user_interface: CLI and notifications")
    config.addinivalue_line("markers", "configuration: configuration handling")


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point platformdirs at temporary directories and clear FWHISTORY_LOG_LEVEL so tests
    never read or write the user's real configuration.
    """
    base = tmp_path_factory.mktemp("fwhistory")
    config_dir = base / "config"
    log_dir = base / "log"
    for path in (config_dir, log_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.delenv("FWHISTORY_LOG_LEVEL", raising=False)
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_log_dir", lambda *_args, **_kwargs: str(log_dir)
    )


def pytest_runtest_setup():
    """
    Prevent real network requests during tests by replacing HTTP entry points with blocking callables.
    """
    requests.get = _block_network
    requests.post = _block_network
    requests.Session.request = _block_network

    import aiohttp

    aiohttp.request = _async_block_network
    aiohttp.ClientSession.request = _async_block_network  # type: ignore[assignment]
    aiohttp.ClientSession.get = _async_block_network  # type: ignore[assignment]
    aiohttp.ClientSession.post = _async_block_network  # type: ignore[assignment]


# =============================================================================
# Async Test Fixtures
# =============================================================================


@pytest.fixture
def mock_text_response():
    """
    Provide a factory creating mocked aiohttp responses usable as `async with session.get(...)`.

    Returns:
        factory (callable): `factory(status=200, body="")` returning a response mock whose
        async `text()` returns `body`.
    """

    def _create_response(status=200, body=""):
        response = AsyncMock()
        response.status = status
        response.text = AsyncMock(return_value=body)
        response.__aenter__ = AsyncMock(return_value=response)
        response.__aexit__ = AsyncMock(return_value=None)
        return response

    return _create_response


@pytest.fixture
def mock_session_for(mocker):
    """
    Provide a factory that patches a client's session with one answering by URL.

    `factory(client, responses)` maps URLs to prepared responses (or exceptions to
    raise); unknown URLs get a 404. Returns the session mock so tests can inspect
    `session.get.call_args_list`.
    """

    def _install(client, responses):
        def _get(url, *args, **kwargs):
            result = responses.get(url)
            if isinstance(result, BaseException):
                raise result
            if result is None:
                missing = AsyncMock()
                missing.status = 404
                missing.text = AsyncMock(return_value="")
                missing.__aenter__ = AsyncMock(return_value=missing)
                missing.__aexit__ = AsyncMock(return_value=None)
                return missing
            return result

        session = AsyncMock()
        session.closed = False
        session.get = Mock(side_effect=_get)
        mocker.patch.object(client, "_ensure_session", AsyncMock(return_value=session))
        return session

    return _install
