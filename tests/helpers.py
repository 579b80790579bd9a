# Test doubles for the drive client and the search view.

import asyncio

from drivefinder.search.models import DriveHandle, DriveItemResult

DRIVE = DriveHandle(id="drive-1", drive_type="personal", owner="Ada")


def make_results(*names: str) -> list[DriveItemResult]:
    return [DriveItemResult(id=str(i), name=name) for i, name in enumerate(names, start=1)]


class FakeDriveClient:
    """Records calls; optionally blocks ``search`` until ``gate`` is set."""

    def __init__(self, results=None, drive=DRIVE, gate: asyncio.Event | None = None, error=None):
        self.results = results
        self.drive = drive
        self.gate = gate
        self.error = error
        self.calls: list[tuple] = []

    async def resolve_primary_drive(self):
        self.calls.append(("resolve",))
        return self.drive

    async def search(self, drive, query):
        self.calls.append(("search", drive.id, query))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.results

    async def fetch_thumbnail(self, drive, item_id):
        raise AssertionError("the search controller must not fetch thumbnails")


class RecordingView:
    def __init__(self):
        self.labels: list[str] = []
        self.added = []
        self.removed = []
        self.errors: list[str] = []
        self.on_add = None

    def set_control_label(self, label):
        self.labels.append(label)

    def add_item(self, item):
        self.added.append(item)
        if self.on_add is not None:
            self.on_add(item)

    def remove_item(self, item):
        self.removed.append(item)

    def show_error(self, message):
        self.errors.append(message)
