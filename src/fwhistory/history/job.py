"""
Firmware History Fetch Job

HistoryFetchJob owns the state of one history view: the model and region being
looked up, a status line, the parsed history entries and their changelogs. It
runs at most one fetch at a time as an asyncio task and never lets errors
escape; every failure ends the job with a status message instead.

Readers get immutable HistorySnapshot objects, either through the properties
or by subscribing a listener that is called after every state change.
"""

import asyncio
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from fwhistory.constants import (
    HISTORY_ERROR_FORMAT,
    HISTORY_ERROR_MESSAGE,
    SOURCE_FOTA_XML,
    SOURCE_PRIMARY,
)
from fwhistory.log_utils import logger
from fwhistory.notifications import ErrorReporter, LoggingErrorReporter

from .async_client import AsyncHistoryClient
from .changelog import ChangelogHandler
from .firmware import normalize_firmware
from .interfaces import (
    Changelog,
    ChangelogIndex,
    FirmwareSelection,
    HistoryBodyParser,
    HistoryFound,
    HistoryInfo,
    HistoryOutcome,
    HistoryParseFailure,
    NoHistory,
)
from .parsers import parse_history_xml


@dataclass(frozen=True)
class HistorySnapshot:
    """Point-in-time copy of a history job's state."""

    is_running: bool = False
    model: Optional[str] = None
    region: Optional[str] = None
    status_text: str = ""
    history_items: Tuple[HistoryInfo, ...] = ()
    changelogs: Optional[ChangelogIndex] = None

    @property
    def can_check_history(self) -> bool:
        return (
            bool(self.model and self.model.strip())
            and bool(self.region and self.region.strip())
            and not self.is_running
        )

    def changelog_for(self, info: HistoryInfo) -> Optional[Changelog]:
        if self.changelogs is None:
            return None
        return self.changelogs.for_firmware(info.firmware_string)


HistoryListener = Callable[[HistorySnapshot], Any]


def _describe_error(error: BaseException) -> str:
    return str(error) or type(error).__name__


def _unexpected_error_status(error: BaseException) -> str:
    message = str(error)
    if message:
        return f"{HISTORY_ERROR_MESSAGE}\n\n{message}"
    return HISTORY_ERROR_MESSAGE


async def _absent() -> None:
    return None


class HistoryFetchJob:
    """
    Single-flight, cancellable firmware history fetch.

    Example:
        async with AsyncHistoryClient() as client:
            job = HistoryFetchJob(client)
            snapshot = await job.run("SM-G998B", "EUX")
            for info in snapshot.history_items:
                print(info.firmware_string)
    """

    def __init__(
        self,
        client: AsyncHistoryClient,
        body_parser: Optional[HistoryBodyParser] = None,
        changelog_handler: Optional[ChangelogHandler] = None,
        error_reporter: Optional[ErrorReporter] = None,
        fetch_changelogs: bool = True,
    ) -> None:
        """
        Create a history job.

        Parameters:
            client (AsyncHistoryClient): Client used for both history sources.
            body_parser (Optional[HistoryBodyParser]): Parser for the primary history page.
                Without one the primary source is not queried.
            changelog_handler (Optional[ChangelogHandler]): Changelog source; defaults to one
                sharing `client`.
            error_reporter (Optional[ErrorReporter]): Receives unexpected errors; defaults to
                LoggingErrorReporter.
            fetch_changelogs (bool): Whether successful fetches are enriched with changelogs.
        """
        self.client = client
        self.body_parser = body_parser
        if changelog_handler is None and fetch_changelogs:
            changelog_handler = ChangelogHandler(client)
        self.changelog_handler = changelog_handler if fetch_changelogs else None
        self.error_reporter = error_reporter or LoggingErrorReporter()

        self._state = HistorySnapshot()
        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self._listeners: List[HistoryListener] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> HistorySnapshot:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def model(self) -> Optional[str]:
        return self._state.model

    @property
    def region(self) -> Optional[str]:
        return self._state.region

    @property
    def status_text(self) -> str:
        return self._state.status_text

    @property
    def history_items(self) -> Tuple[HistoryInfo, ...]:
        return self._state.history_items

    @property
    def changelogs(self) -> Optional[ChangelogIndex]:
        return self._state.changelogs

    @property
    def can_check_history(self) -> bool:
        return self._state.can_check_history

    def set_model(self, model: Optional[str]) -> None:
        self._update(model=model)

    def set_region(self, region: Optional[str]) -> None:
        self._update(region=region)

    def subscribe(self, listener: HistoryListener) -> Callable[[], None]:
        """
        Register a listener called with a HistorySnapshot after every state change.

        Returns:
            Callable[[], None]: A function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        snapshot = self._state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning(f"History listener {listener!r} failed: {e}")

    # ------------------------------------------------------------------
    # Job control
    # ------------------------------------------------------------------

    def start(self, model: Optional[str] = None, region: Optional[str] = None) -> bool:
        """
        Start fetching history for the current (or given) model and region.

        Must be called from a running event loop. Does nothing while a fetch is
        already running or when the model or region is blank.

        Parameters:
            model (Optional[str]): Model to look up; keeps the current model when None.
            region (Optional[str]): Region to look up; keeps the current region when None.

        Returns:
            bool: True if a fetch was started, False if the request was ignored.
        """
        if self._state.is_running:
            logger.debug("History fetch already running; ignoring start request")
            return False

        changes: Dict[str, str] = {}
        if model is not None:
            changes["model"] = model
        if region is not None:
            changes["region"] = region
        if changes:
            self._update(**changes)

        if not self.can_check_history:
            logger.debug("Model and region are required to check history")
            return False

        loop = asyncio.get_running_loop()
        self._generation += 1
        generation = self._generation
        model_value = (self._state.model or "").strip()
        region_value = (self._state.region or "").strip()

        self._update(history_items=(), is_running=True, status_text="")
        logger.info(f"Checking firmware history for {model_value}/{region_value}")
        self._task = loop.create_task(self._run(generation, model_value, region_value))
        return True

    def cancel(self) -> None:
        """Cancel the running fetch, leaving history items and changelogs untouched."""
        if not self._state.is_running:
            return

        # A bumped generation keeps the cancelled run from writing any state.
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._update(is_running=False, status_text="")
        logger.info("Firmware history check cancelled")

    async def wait(self) -> None:
        """Wait for the current fetch to finish; never raises."""
        task = self._task
        if task is None:
            return
        await asyncio.wait([task])

    async def run(self, model: str, region: str) -> HistorySnapshot:
        """
        Start a fetch and wait for it to end.

        If a fetch is already running, waits for that one instead.

        Returns:
            HistorySnapshot: The state after the fetch ended.
        """
        self.start(model, region)
        await self.wait()
        return self._state

    def select(self, info: Union[HistoryInfo, str]) -> FirmwareSelection:
        """
        Build the hand-off for the download and decrypt flows.

        Parameters:
            info (Union[HistoryInfo, str]): Entry (or firmware string) the user picked.

        Returns:
            FirmwareSelection: The job's model and region with the chosen firmware.
        """
        firmware = info.firmware_string if isinstance(info, HistoryInfo) else info
        return FirmwareSelection(
            model=self._state.model or "",
            region=self._state.region or "",
            firmware=firmware,
        )

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def fetch_history(self, model: str, region: str) -> HistoryOutcome:
        """
        Fetch both history sources and parse whichever answered.

        The primary page wins when both sources return data. A source that raises
        counts as absent; only when no source returned data is its error re-raised.
        Parser failures are returned as HistoryParseFailure; network absence as
        NoHistory. Every entry is passed through normalize_firmware.
        """
        primary_fetch = (
            self.client.fetch_primary(model, region)
            if self.body_parser is not None
            else _absent()
        )
        results = await asyncio.gather(
            primary_fetch,
            self.client.fetch_secondary_xml(model, region),
            return_exceptions=True,
        )

        bodies: List[Optional[str]] = []
        failures: List[Exception] = []
        for name, result in zip((SOURCE_PRIMARY, SOURCE_FOTA_XML), results):
            if isinstance(result, Exception):
                logger.warning(
                    f"Error fetching {name} history for {model}/{region}: {result}"
                )
                logger.debug("History source failure", exc_info=result)
                failures.append(result)
                bodies.append(None)
            elif isinstance(result, BaseException):
                raise result
            else:
                bodies.append(result)
        history_string, history_xml = bodies

        if history_string is None and history_xml is None:
            if failures:
                raise failures[0]
            logger.info(f"No firmware history found for {model}/{region}")
            return NoHistory()

        try:
            if history_string is not None and self.body_parser is not None:
                source = SOURCE_PRIMARY
                items = await self.body_parser.parse_history(history_string)
            else:
                source = SOURCE_FOTA_XML
                items = parse_history_xml(history_xml or "")
        except Exception as e:
            logger.warning(f"Error parsing firmware history for {model}/{region}: {e}")
            logger.debug("History parse failure", exc_info=True)
            return HistoryParseFailure(_describe_error(e))

        normalized = (
            replace(info, firmware_string=normalize_firmware(info.firmware_string))
            for info in items
        )
        entries = tuple(info for info in normalized if info.firmware_string.strip())
        logger.info(f"Found {len(entries)} firmware versions ({source} source)")
        return HistoryFound(items=entries, source=source)

    async def _fetch_changelogs(
        self, model: str, region: str
    ) -> Optional[ChangelogIndex]:
        if self.changelog_handler is None:
            return None
        try:
            return await self.changelog_handler.get_changelogs(model, region)
        except Exception as e:
            logger.warning(f"Error retrieving changelogs for {model}/{region}: {e}")
            logger.debug("Changelog failure", exc_info=True)
            return None

    async def _run(self, generation: int, model: str, region: str) -> None:
        try:
            outcome = await self.fetch_history(model, region)

            if isinstance(outcome, NoHistory):
                self._end_job(generation, HISTORY_ERROR_MESSAGE)
            elif isinstance(outcome, HistoryParseFailure):
                self._end_job(
                    generation, HISTORY_ERROR_FORMAT.format(error=outcome.message)
                )
            else:
                changelogs = await self._fetch_changelogs(model, region)
                self._end_job(
                    generation,
                    "",
                    history_items=outcome.items,
                    changelogs=changelogs,
                )
        except Exception as e:
            self._report_error(e)
            self._end_job(generation, _unexpected_error_status(e))

    def _end_job(self, generation: int, status_text: str, **changes: Any) -> None:
        # Items, changelogs and the running flag change in a single update.
        if generation != self._generation or not self._state.is_running:
            logger.debug("Discarding result of a superseded history fetch")
            return
        self._update(is_running=False, status_text=status_text, **changes)

    def _report_error(self, error: Exception) -> None:
        try:
            self.error_reporter.notify(error)
        except Exception as report_error:
            logger.warning(f"Error reporter failed: {report_error}")
