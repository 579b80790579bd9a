# Search Session Controller: one cancellable drive search at a time.
# Created: 2026-10-19
#
# The search control doubles as the cancel control. ``activate`` dispatches
# to ``submit`` or ``cancel`` depending on the session state.
"""Search session state machine."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from drivefinder.search.classifier import render
from drivefinder.search.models import (
    RenderedItem,
    SearchOutcome,
    SearchReport,
    SearchSession,
)
from drivefinder.search.protocol import DriveClient, SearchView
from drivefinder.search.results import ResultListManager

logger = logging.getLogger(__name__)

SEARCH_LABEL = "Search"
CANCEL_LABEL = "Cancel"


class SearchSessionController:
    """Coordinates submit/cancel, the drive client and the result list.

    Cancellation is cooperative: ``cancel`` only raises a flag. Requests
    already sent to the drive are not aborted; when their results arrive the
    rendering loop checks the flag before each item and stops, discarding the
    rest.

    Usage:
        controller = SearchSessionController(GraphDriveClient(), view=my_view)
        task = controller.activate("report")   # Search -> Cancel
        controller.activate("")                # cancels the running search
        report = await task
    """

    def __init__(
        self,
        client: DriveClient,
        view: SearchView | None = None,
        results: ResultListManager | None = None,
    ) -> None:
        self.client = client
        self.view = view
        self.results = results if results is not None else ResultListManager(view)
        self.session = SearchSession()
        self._task: asyncio.Task[SearchReport] | None = None
        self._label = SEARCH_LABEL
        if view is not None:
            view.set_control_label(self._label)

    @property
    def label(self) -> str:
        """Current text of the search/cancel control."""
        return self._label

    @property
    def task(self) -> asyncio.Task[SearchReport] | None:
        return self._task

    def activate(self, query: str) -> asyncio.Task[SearchReport] | None:
        """Handle a press of the search control.

        Returns the new session task, or None when nothing was started (the
        press cancelled a running search, or the query was blank).
        """
        if self.session.is_searching:
            self.cancel()
            return None
        return self.submit(query)

    def submit(self, query: str) -> asyncio.Task[SearchReport] | None:
        """Start a search. Blank queries are ignored.

        The session is Searching and the control reads "Cancel" by the time
        this returns. Must be called from a running event loop.
        """
        if self.session.is_searching:
            raise RuntimeError("A search is already running; cancel it first.")
        if not query or not query.strip():
            return None

        # Raises RuntimeError outside a loop, before any state changes.
        loop = asyncio.get_running_loop()
        self.session.begin(query)
        self._set_label(CANCEL_LABEL)
        logger.info("Searching drive for %r", query)
        self._task = loop.create_task(self._run(query), name=f"drive-search:{query}")
        return self._task

    def cancel(self) -> bool:
        """Ask the running search to stop. Never waits; returns False when idle."""
        requested = self.session.request_cancel()
        if requested:
            logger.info("Cancel requested for %r", self.session.query)
        return requested

    async def wait(self) -> SearchReport | None:
        """Wait for the current (or last) session task."""
        if self._task is None:
            return None
        return await self._task

    async def shutdown(self) -> None:
        """Stop any running session for application teardown."""
        task = self._task
        if task is None or task.done():
            return
        self.cancel()
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        if self.session.is_searching:
            # Cancelled before the task first ran, so its finally never did.
            self.session.finish()
            self._set_label(SEARCH_LABEL)

    async def _run(self, query: str) -> SearchReport:
        try:
            return await self._search_and_render(query)
        except Exception as e:
            logger.exception("Drive search for %r failed", query)
            if self.view is not None:
                self.view.show_error(f"Search failed: {e}")
            return SearchReport(query=query, outcome=SearchOutcome.FAILED, error=str(e))
        finally:
            self.session.finish()
            self._set_label(SEARCH_LABEL)

    async def _search_and_render(self, query: str) -> SearchReport:
        drive = await self.client.resolve_primary_drive()
        if drive is None:
            logger.error("Cannot get your drive, stopping")
            return SearchReport(query=query, outcome=SearchOutcome.DRIVE_UNAVAILABLE)

        results = await self.client.search(drive, query)
        if not results:
            logger.info("No results for %r", query)
            return SearchReport(query=query, outcome=SearchOutcome.NO_RESULTS)

        # No awaits from here on: the cancel flag is polled between items.
        self.results.clear()
        rendered: list[RenderedItem] = []
        cancelled = False
        for result in results:
            if self.session.cancel_requested:
                cancelled = True
                break
            item = render(result)
            self.results.append(item)
            rendered.append(item)
            logger.debug("Rendered %s as %s", item.label, item.icon_kind.value)

        outcome = SearchOutcome.CANCELLED if cancelled else SearchOutcome.COMPLETED
        logger.info(
            "Search for %r %s: %d of %d result(s) shown",
            query,
            outcome.value,
            len(rendered),
            len(results),
        )
        return SearchReport(
            query=query,
            outcome=outcome,
            received=len(results),
            rendered=len(rendered),
            items=rendered,
        )

    def _set_label(self, label: str) -> None:
        self._label = label
        if self.view is not None:
            self.view.set_control_label(label)
