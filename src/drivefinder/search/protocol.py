# Search protocols: the drive client contract and the view contract.
# Created: 2026-10-19

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from drivefinder.search.models import DriveHandle, DriveItemResult, RenderedItem


class DriveClient(Protocol):
    """What the search controller needs from a remote drive.

    Every call is attempted once; implementations may raise on transport or
    auth errors and the controller turns that into a failed session.
    """

    async def resolve_primary_drive(self) -> DriveHandle | None:
        """Return the signed-in user's drive, or None if it is unavailable."""
        ...

    async def search(self, drive: DriveHandle, query: str) -> Sequence[DriveItemResult] | None:
        """Search a drive. Results keep the service's relevance order.

        None and an empty sequence both mean "no results".
        """
        ...

    async def fetch_thumbnail(self, drive: DriveHandle, item_id: str) -> bytes | None:
        """Return thumbnail bytes for an item, or None if there is none."""
        ...


class SearchView(Protocol):
    """Front end hooks: the toggle control, the results area, error display."""

    def set_control_label(self, label: str) -> None: ...

    def add_item(self, item: RenderedItem) -> None: ...

    def remove_item(self, item: RenderedItem) -> None: ...

    def show_error(self, message: str) -> None: ...
