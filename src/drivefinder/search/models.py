"""Search data models.

Created: 2026-10-19

- SearchSession: the controller's single mutable state (Idle/Searching + cancel flag)
- DriveHandle / DriveItemResult: immutable records produced by a drive client
- RenderedItem: what the result list shows for one DriveItemResult
- SearchReport: how a session ended
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SearchState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"


class IconKind(str, Enum):
    """Display category of a drive item."""

    FOLDER = "folder"
    IMAGE = "image"
    FILE = "file"


class SearchOutcome(str, Enum):
    COMPLETED = "completed"  # every result rendered
    CANCELLED = "cancelled"  # loop stopped on the cancel flag
    NO_RESULTS = "no_results"  # drive answered with nothing
    DRIVE_UNAVAILABLE = "drive_unavailable"  # primary drive could not be resolved
    FAILED = "failed"  # drive client raised


@dataclass
class SearchSession:
    """State of the one search session a controller owns.

    ``cancel_requested`` is only ever true while searching and is cleared
    whenever the session goes back to idle.
    """

    state: SearchState = SearchState.IDLE
    cancel_requested: bool = False
    query: str = ""

    @property
    def is_searching(self) -> bool:
        return self.state is SearchState.SEARCHING

    def begin(self, query: str) -> None:
        self.state = SearchState.SEARCHING
        self.cancel_requested = False
        self.query = query

    def request_cancel(self) -> bool:
        """Flag the running search for cancellation. No-op when idle."""
        if not self.is_searching:
            return False
        self.cancel_requested = True
        return True

    def finish(self) -> None:
        self.state = SearchState.IDLE
        self.cancel_requested = False


@dataclass(frozen=True)
class DriveHandle:
    """A resolved drive, as returned by ``resolve_primary_drive``."""

    id: str
    drive_type: str | None = None
    owner: str | None = None

    @classmethod
    def from_graph(cls, payload: dict[str, Any]) -> DriveHandle:
        owner = (payload.get("owner") or {}).get("user") or {}
        return cls(
            id=payload["id"],
            drive_type=payload.get("driveType"),
            owner=owner.get("displayName"),
        )


@dataclass(frozen=True)
class DriveItemResult:
    """One search hit. Immutable once received from the drive client."""

    id: str
    name: str
    is_folder: bool = False
    is_special_folder: bool = False
    is_image: bool = False
    web_url: str | None = None
    size: int | None = None

    @classmethod
    def from_graph(cls, payload: dict[str, Any]) -> DriveItemResult:
        """Build from a Graph ``driveItem``; facet presence sets the flags."""
        return cls(
            id=payload["id"],
            name=payload.get("name", ""),
            is_folder=payload.get("folder") is not None,
            is_special_folder=payload.get("specialFolder") is not None,
            is_image=payload.get("image") is not None,
            web_url=payload.get("webUrl"),
            size=payload.get("size"),
        )


@dataclass(frozen=True)
class RenderedItem:
    label: str
    icon_kind: IconKind
    web_url: str | None = None
    size: int | None = None


@dataclass
class SearchReport:
    query: str
    outcome: SearchOutcome
    received: int = 0
    rendered: int = 0
    error: str | None = None
    items: list[RenderedItem] = field(default_factory=list)
