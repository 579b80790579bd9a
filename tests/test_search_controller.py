# Tests for search/controller.py: submit, cooperative cancel, rendering, failure paths.
# Created: 2026-10-19

import asyncio
import logging

import httpx
import pytest
from helpers import DRIVE, FakeDriveClient, RecordingView, make_results

from drivefinder.search.controller import CANCEL_LABEL, SEARCH_LABEL, SearchSessionController
from drivefinder.search.models import (
    DriveItemResult,
    IconKind,
    RenderedItem,
    SearchOutcome,
    SearchState,
)


def make_controller(client, view=None):
    view = view if view is not None else RecordingView()
    return SearchSessionController(client, view=view), view


# ---------------------------------------------------------------------------
# Blank queries
# ---------------------------------------------------------------------------


class TestBlankQuery:
    @pytest.mark.parametrize("query", ["", "  ", "\t\n"])
    async def test_blank_query_is_ignored(self, query):
        client = FakeDriveClient(results=make_results("a"))
        controller, view = make_controller(client)

        assert controller.activate(query) is None

        assert controller.session.state is SearchState.IDLE
        assert controller.label == SEARCH_LABEL
        assert client.calls == []
        assert view.labels == [SEARCH_LABEL]

    async def test_whitespace_query_leaves_results_alone(self):
        client = FakeDriveClient(results=make_results("a"))
        controller, view = make_controller(client)
        controller.results.append(RenderedItem("kept.txt", IconKind.FILE))

        controller.activate("  ")

        assert controller.results.labels() == ["kept.txt"]
        assert view.removed == []


# ---------------------------------------------------------------------------
# Submission and rendering
# ---------------------------------------------------------------------------


class TestSubmit:
    async def test_submit_switches_to_searching_synchronously(self):
        controller, view = make_controller(FakeDriveClient(results=make_results("a")))

        task = controller.activate("report")

        assert task is not None
        assert controller.session.state is SearchState.SEARCHING
        assert controller.session.query == "report"
        assert controller.label == CANCEL_LABEL
        assert view.labels[-1] == CANCEL_LABEL
        await task

    def test_submit_without_event_loop_leaves_session_idle(self):
        client = FakeDriveClient(results=make_results("a"))
        controller, view = make_controller(client)

        with pytest.raises(RuntimeError, match="no running event loop"):
            controller.activate("report")

        assert controller.session.state is SearchState.IDLE
        assert controller.label == SEARCH_LABEL
        assert view.labels == [SEARCH_LABEL]
        assert controller.task is None
        assert client.calls == []

    async def test_report_scenario(self):
        results = [
            DriveItemResult(id="1", name="Report.pdf", is_folder=False, is_image=False),
            DriveItemResult(id="2", name="ReportsFolder", is_folder=True),
        ]
        client = FakeDriveClient(results=results)
        controller, view = make_controller(client)

        report = await controller.activate("report")

        assert controller.results.items == (
            RenderedItem("Report.pdf", IconKind.FILE),
            RenderedItem("ReportsFolder", IconKind.FOLDER),
        )
        assert view.added == list(controller.results.items)
        assert controller.label == SEARCH_LABEL
        assert view.labels == [SEARCH_LABEL, CANCEL_LABEL, SEARCH_LABEL]
        assert report.outcome is SearchOutcome.COMPLETED
        assert (report.received, report.rendered) == (2, 2)
        assert client.calls == [("resolve",), ("search", DRIVE.id, "report")]

    async def test_all_results_rendered_in_order(self):
        names = [f"file-{i}.txt" for i in range(10)]
        controller, _ = make_controller(FakeDriveClient(results=make_results(*names)))

        report = await controller.activate("file")

        assert controller.results.labels() == names
        assert report.items == list(controller.results.items)
        assert controller.session.state is SearchState.IDLE
        assert controller.session.cancel_requested is False

    async def test_new_batch_replaces_previous_batch(self):
        client = FakeDriveClient(results=make_results("one", "two"))
        controller, view = make_controller(client)
        await controller.activate("first")
        first_batch = list(controller.results.items)

        client.results = make_results("three")
        await controller.activate("second")

        assert controller.results.labels() == ["three"]
        assert view.removed == first_batch

    async def test_controller_is_reusable(self):
        client = FakeDriveClient(results=make_results("a"))
        controller, _ = make_controller(client)

        for query in ("one", "two", "three"):
            report = await controller.activate(query)
            assert report.outcome is SearchOutcome.COMPLETED

        assert [call[2] for call in client.calls if call[0] == "search"] == ["one", "two", "three"]

    async def test_submit_while_searching_raises(self):
        gate = asyncio.Event()
        controller, _ = make_controller(FakeDriveClient(results=make_results("a"), gate=gate))
        task = controller.submit("report")

        with pytest.raises(RuntimeError, match="already running"):
            controller.submit("again")

        gate.set()
        await task

    async def test_thumbnails_are_never_requested(self):
        results = [DriveItemResult(id="1", name="photo.jpg", is_image=True)]
        controller, _ = make_controller(FakeDriveClient(results=results))

        report = await controller.activate("photo")

        # FakeDriveClient.fetch_thumbnail raises if called
        assert report.outcome is SearchOutcome.COMPLETED
        assert controller.results.items[0].icon_kind is IconKind.IMAGE


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------


class TestCancel:
    async def test_activation_while_searching_requests_cancel(self):
        gate = asyncio.Event()
        client = FakeDriveClient(results=make_results("a", "b"), gate=gate)
        controller, _ = make_controller(client)
        task = controller.activate("report")
        await asyncio.sleep(0)

        assert controller.activate("something else") is None

        assert controller.session.cancel_requested is True
        assert controller.session.state is SearchState.SEARCHING
        assert controller.label == CANCEL_LABEL
        assert len([c for c in client.calls if c[0] == "search"]) == 1

        gate.set()
        report = await task
        assert report.outcome is SearchOutcome.CANCELLED
        assert controller.session.state is SearchState.IDLE
        assert controller.session.cancel_requested is False
        assert controller.label == SEARCH_LABEL

    async def test_cancel_before_results_discards_them(self):
        gate = asyncio.Event()
        controller, _ = make_controller(FakeDriveClient(results=make_results("a", "b"), gate=gate))
        controller.results.append(RenderedItem("old.txt", IconKind.FILE))
        task = controller.activate("report")

        controller.activate("")
        gate.set()
        report = await task

        # The old batch is destroyed before the loop sees the flag.
        assert len(controller.results) == 0
        assert (report.received, report.rendered) == (2, 0)

    @pytest.mark.parametrize("k", [1, 2, 4])
    async def test_cancel_after_k_results(self, k):
        names = ["a", "b", "c", "d", "e"]
        view = RecordingView()
        controller, _ = make_controller(FakeDriveClient(results=make_results(*names)), view)

        def press_cancel_after_k(item):
            if len(view.added) == k:
                controller.activate("")

        view.on_add = press_cancel_after_k

        report = await controller.activate("letters")

        assert controller.results.labels() == names[:k]
        assert report.outcome is SearchOutcome.CANCELLED
        assert report.rendered == k
        assert controller.session.state is SearchState.IDLE
        assert controller.session.cancel_requested is False

    async def test_cancel_after_last_item_counts_as_completed(self):
        view = RecordingView()
        controller, _ = make_controller(FakeDriveClient(results=make_results("a", "b")), view)
        view.on_add = lambda item: controller.activate("") if len(view.added) == 2 else None

        report = await controller.activate("letters")

        assert report.outcome is SearchOutcome.COMPLETED
        assert controller.session.cancel_requested is False

    async def test_cancel_when_idle_is_noop(self):
        controller, _ = make_controller(FakeDriveClient(results=[]))

        assert controller.cancel() is False
        assert controller.session.cancel_requested is False

    async def test_shutdown_stops_pending_session(self):
        gate = asyncio.Event()
        controller, _ = make_controller(FakeDriveClient(results=make_results("a"), gate=gate))
        task = controller.activate("report")
        await asyncio.sleep(0)

        await controller.shutdown()

        assert task.cancelled()
        assert controller.session.state is SearchState.IDLE
        assert controller.label == SEARCH_LABEL


# ---------------------------------------------------------------------------
# Terminal outcomes other than rendering
# ---------------------------------------------------------------------------


class TestOutcomes:
    @pytest.mark.parametrize("results", [None, []])
    async def test_no_results_keeps_existing_items(self, results):
        controller, view = make_controller(FakeDriveClient(results=results))
        controller.results.append(RenderedItem("kept.txt", IconKind.FILE))

        report = await controller.activate("nothing")

        assert report.outcome is SearchOutcome.NO_RESULTS
        assert controller.results.labels() == ["kept.txt"]
        assert view.removed == []
        assert controller.session.state is SearchState.IDLE
        assert controller.label == SEARCH_LABEL

    async def test_drive_unavailable_resets_session(self, caplog):
        client = FakeDriveClient(results=make_results("a"), drive=None)
        controller, view = make_controller(client)

        with caplog.at_level(logging.ERROR, logger="drivefinder.search.controller"):
            report = await controller.activate("report")

        assert report.outcome is SearchOutcome.DRIVE_UNAVAILABLE
        assert client.calls == [("resolve",)]
        assert controller.session.state is SearchState.IDLE
        assert controller.label == SEARCH_LABEL
        assert view.labels[-1] == SEARCH_LABEL
        assert "Cannot get your drive" in caplog.text

    async def test_client_error_becomes_failed_report(self):
        error = httpx.ConnectError("connection refused")
        controller, view = make_controller(FakeDriveClient(error=error))
        controller.results.append(RenderedItem("kept.txt", IconKind.FILE))

        report = await controller.activate("report")

        assert report.outcome is SearchOutcome.FAILED
        assert report.error == "connection refused"
        assert view.errors == ["Search failed: connection refused"]
        assert controller.results.labels() == ["kept.txt"]
        assert controller.session.state is SearchState.IDLE
        assert controller.label == SEARCH_LABEL

    async def test_can_search_again_after_failure(self):
        client = FakeDriveClient(error=RuntimeError("OneDrive not authenticated"))
        controller, _ = make_controller(client)
        assert (await controller.activate("a")).outcome is SearchOutcome.FAILED

        client.error = None
        client.results = make_results("found")
        report = await controller.activate("a")

        assert report.outcome is SearchOutcome.COMPLETED
        assert controller.results.labels() == ["found"]

    async def test_wait_without_session(self):
        controller, _ = make_controller(FakeDriveClient(results=[]))
        assert await controller.wait() is None

    async def test_wait_returns_report(self):
        controller, _ = make_controller(FakeDriveClient(results=make_results("a")))
        controller.activate("a")

        report = await controller.wait()

        assert report is not None
        assert report.outcome is SearchOutcome.COMPLETED


async def test_works_without_a_view():
    controller = SearchSessionController(FakeDriveClient(results=make_results("a", "b")))

    report = await controller.activate("x")

    assert report.rendered == 2
    assert controller.results.labels() == ["a", "b"]
